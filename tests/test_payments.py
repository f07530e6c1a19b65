from datetime import datetime, timezone
from decimal import Decimal
from urllib.parse import parse_qs, urlparse

import pytest

from conftest import FakeClient, TRANSACTION_ROWS

from fuelstation.api import RemoteError
from fuelstation.models import FuelType, TransactionStatus
from fuelstation.payments import PENDING_QR, QrPaymentService, generate_receipt_number, qr_matrix
from fuelstation.viewmodels import ListViewModel, ValidationError

DIESEL = FuelType("fuel-2", "Diesel B7", "diesel", Decimal("29.94"), True, None)


@pytest.fixture
def service():
    client = FakeClient()
    return QrPaymentService(client, station="Main St", receipt_factory=lambda: "QR-20240301-ABC123")


def test_initiate_creates_pending_qr_transaction(service):
    request = service.initiate(DIESEL, "20", "emp-1")

    op, draft = service.client.calls[0]
    assert op == "create"
    assert draft["payment_method"] == "qr_code"
    assert draft["status"] == "pending"
    assert draft["total_amount"] == Decimal("598.80")
    assert draft["receipt_number"] == "QR-20240301-ABC123"
    assert request.transaction.status is TransactionStatus.PENDING
    assert request.transaction.fuel_type_name == "Diesel B7"
    assert request.reference == "QR-20240301-ABC123"


def test_payload_carries_reference_and_amount(service):
    request = service.initiate(DIESEL, "20", "emp-1")

    parsed = urlparse(request.payload)
    query = parse_qs(parsed.query)
    assert request.payload.startswith("fuelstation://pay?")
    assert query["ref"] == ["QR-20240301-ABC123"]
    assert query["amount"] == ["598.80"]
    assert query["station"] == ["Main St"]
    assert query["currency"] == ["THB"]


@pytest.mark.parametrize("liters", ["0", "-3", "", "lots"])
def test_invalid_liters_never_reach_server(service, liters):
    with pytest.raises(ValidationError) as exc_info:
        service.initiate(DIESEL, liters, "emp-1")
    assert "fuel_amount" in exc_info.value.errors
    assert service.client.calls == []


@pytest.mark.parametrize("liters", ["nan", "Infinity"])
def test_non_finite_liters_are_not_a_number(service, liters):
    with pytest.raises(ValidationError) as exc_info:
        service.initiate(DIESEL, liters, "emp-1")
    assert exc_info.value.errors == {"fuel_amount": "Must be a number"}
    assert service.client.calls == []


def test_unpriced_fuel_and_missing_employee_are_rejected(service):
    unpriced = FuelType("fuel-3", "Unknown", "lpg", None, True, None)
    with pytest.raises(ValidationError) as exc_info:
        service.initiate(unpriced, "10", None)
    assert set(exc_info.value.errors) == {"fuel_type_id", "employee_id"}


def test_settling_updates_status():
    client = FakeClient(TRANSACTION_ROWS)
    service = QrPaymentService(client, station="Main St")

    completed = service.mark_completed("tx-2")
    assert completed.status is TransactionStatus.COMPLETED
    assert client.calls[-1] == ("update", "tx-2", {"status": "completed"})

    cancelled = service.cancel("tx-2")
    assert cancelled.status is TransactionStatus.CANCELLED


def test_settling_missing_payment_raises():
    service = QrPaymentService(FakeClient(), station="Main St")
    with pytest.raises(RemoteError):
        service.mark_failed("tx-404")


def test_pending_list_shows_only_unsettled_qr_payments():
    client = FakeClient(TRANSACTION_ROWS)
    view = ListViewModel(client, PENDING_QR)
    view.refresh()

    assert client.calls[0][1] == {"payment_method": "qr_code", "status": "pending"}
    assert [tx.id for tx in view.snapshot] == ["tx-2"]


def test_receipt_number_format():
    number = generate_receipt_number(datetime(2024, 3, 1, tzinfo=timezone.utc))
    prefix, day, suffix = number.split("-")
    assert (prefix, day) == ("QR", "20240301")
    assert len(suffix) == 6


def test_payload_renders_as_square_qr_matrix(service):
    request = service.initiate(DIESEL, "20", "emp-1")
    matrix = request.matrix()

    assert len(matrix) >= 21
    assert all(len(row) == len(matrix) for row in matrix)
    assert any(any(row) for row in matrix)
    assert matrix == qr_matrix(request.payload)
