from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Union


class EmployeeRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    CASHIER = "cashier"

    @property
    def label(self) -> str:
        return {
            EmployeeRole.ADMIN: "Admin",
            EmployeeRole.MANAGER: "Manager",
            EmployeeRole.CASHIER: "Cashier",
        }[self]

    @staticmethod
    def from_value(value: Any) -> Optional["EmployeeRole"]:
        if isinstance(value, EmployeeRole):
            return value
        if value:
            normalized = str(value).strip().lower()
            for role in EmployeeRole:
                if role.value == normalized:
                    return role
        return None


class PaymentMethod(str, Enum):
    QR_CODE = "qr_code"
    CREDIT_CARD = "credit_card"
    CASH = "cash"

    @property
    def label(self) -> str:
        return {
            PaymentMethod.QR_CODE: "QR Code",
            PaymentMethod.CREDIT_CARD: "Credit Card",
            PaymentMethod.CASH: "Cash",
        }[self]

    @staticmethod
    def from_value(value: Any) -> Optional["PaymentMethod"]:
        if isinstance(value, PaymentMethod):
            return value
        if value:
            normalized = str(value).strip().lower()
            for method in PaymentMethod:
                if method.value == normalized:
                    return method
        return None


class TransactionStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @staticmethod
    def from_value(value: Any) -> Optional["TransactionStatus"]:
        if isinstance(value, TransactionStatus):
            return value
        if value:
            normalized = str(value).strip().lower()
            for status in TransactionStatus:
                if status.value == normalized:
                    return status
        return None


def parse_api_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    cleaned = str(value).replace("Z", "+00:00")
    try:
        dt = datetime.fromisoformat(cleaned)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    except ValueError:
        try:
            return datetime.strptime(str(value), "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)
        except ValueError:
            return None


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Finite ``Decimal`` or ``None``; NaN and Infinity count as not a number."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            # str() keeps float noise such as 0.1 + 0.2 out of the Decimal
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    return number if number.is_finite() else None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


# Unknown enum values coming from the server are kept as raw strings.
RoleValue = Union[EmployeeRole, str]
MethodValue = Union[PaymentMethod, str]
StatusValue = Union[TransactionStatus, str]


def _enum_value(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value or "")


@dataclass
class Employee:
    id: str
    full_name: str
    pin: str
    rfid_code: Optional[str]
    role: RoleValue
    is_active: bool
    created_at: Optional[datetime]

    @property
    def key(self) -> str:
        return self.id

    @property
    def role_value(self) -> str:
        return _enum_value(self.role)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Employee":
        role = row.get("role")
        return cls(
            id=str(row.get("id", "")),
            full_name=str(row.get("full_name") or ""),
            pin=str(row.get("pin") or ""),
            rfid_code=_text(row.get("rfid_code")),
            role=EmployeeRole.from_value(role) or str(role or ""),
            is_active=bool(row.get("is_active", False)),
            created_at=parse_api_datetime(row.get("created_at")),
        )


@dataclass
class FuelType:
    id: str
    name: str
    type: str
    price_per_liter: Optional[Decimal]
    is_active: bool
    created_at: Optional[datetime]

    @property
    def key(self) -> str:
        return self.id

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "FuelType":
        return cls(
            id=str(row.get("id", "")),
            name=str(row.get("name") or ""),
            type=str(row.get("type") or ""),
            price_per_liter=parse_decimal(row.get("price_per_liter")),
            is_active=bool(row.get("is_active", True)),
            created_at=parse_api_datetime(row.get("created_at")),
        )


@dataclass
class Transaction:
    id: str
    fuel_amount: Decimal
    fuel_price_per_liter: Decimal
    total_amount: Decimal
    payment_method: MethodValue
    status: StatusValue
    receipt_number: Optional[str]
    created_at: Optional[datetime]
    fuel_type_id: Optional[str] = None
    employee_id: Optional[str] = None
    fuel_type_name: Optional[str] = None
    fuel_type_kind: Optional[str] = None
    employee_name: Optional[str] = None

    @property
    def key(self) -> str:
        return self.id

    @property
    def status_value(self) -> str:
        return _enum_value(self.status)

    @property
    def payment_method_value(self) -> str:
        return _enum_value(self.payment_method)

    @property
    def payment_method_label(self) -> str:
        if isinstance(self.payment_method, PaymentMethod):
            return self.payment_method.label
        return str(self.payment_method)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Transaction":
        fuel = row.get("fuel_types") if isinstance(row.get("fuel_types"), dict) else {}
        employee = row.get("employees") if isinstance(row.get("employees"), dict) else {}
        method = row.get("payment_method")
        status = row.get("status")
        return cls(
            id=str(row.get("id", "")),
            fuel_amount=parse_decimal(row.get("fuel_amount")) or Decimal("0"),
            fuel_price_per_liter=parse_decimal(row.get("fuel_price_per_liter")) or Decimal("0"),
            total_amount=parse_decimal(row.get("total_amount")) or Decimal("0"),
            payment_method=PaymentMethod.from_value(method) or str(method or ""),
            status=TransactionStatus.from_value(status) or str(status or ""),
            receipt_number=_text(row.get("receipt_number")),
            created_at=parse_api_datetime(row.get("created_at")),
            fuel_type_id=_text(row.get("fuel_type_id")),
            employee_id=_text(row.get("employee_id")),
            fuel_type_name=_text(fuel.get("name")),
            fuel_type_kind=_text(fuel.get("type")),
            employee_name=_text(employee.get("full_name")),
        )
