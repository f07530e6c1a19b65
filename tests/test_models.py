from datetime import timezone
from decimal import Decimal

import pytest

from conftest import TRANSACTION_ROWS

from fuelstation.models import (
    Employee,
    EmployeeRole,
    FuelType,
    PaymentMethod,
    Transaction,
    TransactionStatus,
    parse_api_datetime,
    parse_decimal,
)


def test_transaction_row_flattens_joins():
    tx = Transaction.from_row(TRANSACTION_ROWS[0])

    assert tx.id == "tx-1"
    assert tx.fuel_amount == Decimal("40")
    assert tx.fuel_price_per_liter == Decimal("35.50")
    assert tx.payment_method is PaymentMethod.CASH
    assert tx.status is TransactionStatus.COMPLETED
    assert tx.fuel_type_name == "Gasohol 95"
    assert tx.fuel_type_kind == "gasoline"
    assert tx.employee_name == "Jane Doe"
    assert tx.created_at.tzinfo is not None


def test_missing_joins_are_tolerated():
    tx = Transaction.from_row({"id": "tx-9", "status": "pending", "fuel_types": None, "employees": None})

    assert tx.fuel_type_name is None
    assert tx.employee_name is None
    assert tx.total_amount == Decimal("0")


def test_unknown_enum_values_are_kept_raw():
    tx = Transaction.from_row({"id": "tx-9", "status": "refunded", "payment_method": "voucher"})

    assert tx.status == "refunded"
    assert tx.status_value == "refunded"
    assert tx.payment_method_label == "voucher"


def test_employee_row():
    employee = Employee.from_row(
        {"id": 7, "full_name": "Jane Doe", "pin": 1234, "role": "Admin", "is_active": True}
    )

    assert employee.id == "7"
    assert employee.pin == "1234"
    assert employee.role is EmployeeRole.ADMIN
    assert employee.rfid_code is None
    assert employee.created_at is None


def test_fuel_type_row():
    fuel = FuelType.from_row({"id": "f-1", "name": "Diesel", "type": "diesel", "price_per_liter": 29.94})

    assert fuel.price_per_liter == Decimal("29.94")
    assert fuel.is_active is True


def test_labels():
    assert PaymentMethod.QR_CODE.label == "QR Code"
    assert PaymentMethod.CREDIT_CARD.label == "Credit Card"
    assert TransactionStatus.CANCELLED.label == "Cancelled"
    assert EmployeeRole.from_value("owner") is None


def test_parse_api_datetime_variants():
    assert parse_api_datetime("2024-03-01T10:00:00Z").tzinfo == timezone.utc
    assert parse_api_datetime("2024-03-01T10:00:00").tzinfo == timezone.utc
    assert parse_api_datetime("not a date") is None
    assert parse_api_datetime(None) is None


def test_parse_decimal():
    assert parse_decimal(0.1) == Decimal("0.1")
    assert parse_decimal(" 12.5 ") == Decimal("12.5")
    assert parse_decimal("") is None
    assert parse_decimal("twelve") is None


@pytest.mark.parametrize("value", ["NaN", "sNaN", "Infinity", "-inf", Decimal("NaN"), float("inf")])
def test_parse_decimal_rejects_non_finite(value):
    assert parse_decimal(value) is None
