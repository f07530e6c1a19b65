"""Per-table descriptors: what to select, how to parse, search, default and validate."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

import requests

from .api import RemoteCollectionClient
from .config import Settings
from .models import (
    Employee,
    EmployeeRole,
    FuelType,
    PaymentMethod,
    Transaction,
    TransactionStatus,
    parse_decimal,
)

T = TypeVar("T")

Draft = Dict[str, Any]
Errors = Dict[str, str]

NEWEST_FIRST: Tuple[str, bool] = ("created_at", True)


@dataclass(frozen=True)
class Collection(Generic[T]):
    label: str
    singular: str
    table: str
    parse: Callable[[Dict[str, Any]], T]
    search_fields: Tuple[str, ...]
    defaults: Callable[[], Draft]
    to_draft: Callable[[T], Draft]
    required: Tuple[str, ...] = ()
    required_on_create: Tuple[str, ...] = ()
    check: Optional[Callable[[Draft, bool], Errors]] = None
    prepare: Optional[Callable[[Draft, bool], Draft]] = None
    select: str = "*"
    order: Tuple[str, bool] = NEWEST_FIRST
    limit: Optional[int] = None
    key_field: str = "id"
    fixed_filters: Dict[str, Any] = field(default_factory=dict)

    def required_fields(self, creating: bool) -> Tuple[str, ...]:
        if creating:
            return self.required + self.required_on_create
        return self.required

    def validate(self, draft: Draft, creating: bool) -> Errors:
        errors: Errors = {}
        for name in self.required_fields(creating):
            value = draft.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[name] = "This field is required"
        if self.check:
            for name, message in self.check(draft, creating).items():
                errors.setdefault(name, message)
        return errors

    def payload(self, draft: Draft, creating: bool) -> Draft:
        if self.prepare:
            return self.prepare(dict(draft), creating)
        return dict(draft)

    def client(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
    ) -> RemoteCollectionClient:
        return RemoteCollectionClient(
            settings.rest_url,
            settings.supabase_key,
            self.table,
            key_field=self.key_field,
            select=self.select,
            session=session,
            timeout=settings.request_timeout,
        )

    def with_limit(self, limit: Optional[int]) -> "Collection[T]":
        return replace(self, limit=limit)

    def with_filters(self, **filters: Any) -> "Collection[T]":
        return replace(self, fixed_filters={**self.fixed_filters, **filters})


def _positive(draft: Draft, name: str, errors: Errors) -> None:
    if draft.get(name) in (None, ""):
        return
    value = parse_decimal(draft.get(name))
    if value is None:
        errors[name] = "Must be a number"
    elif value <= 0:
        errors[name] = "Must be greater than zero"


def _strip_blank(draft: Draft, creating: bool, *names: str) -> None:
    """Blank optional text is sent as null on edit and left out on create."""
    for name in names:
        if name not in draft:
            continue
        value = draft[name]
        if isinstance(value, str):
            value = value.strip() or None
        if value is None and creating:
            draft.pop(name)
        else:
            draft[name] = value


# ── Employees ─────────────────────────────────────────────────────────


def _employee_defaults() -> Draft:
    return {
        "full_name": "",
        "pin": "",
        "rfid_code": "",
        "role": EmployeeRole.CASHIER.value,
        "is_active": True,
    }


def _employee_to_draft(employee: Employee) -> Draft:
    # The stored PIN is never copied into the form; a blank PIN on edit keeps it.
    return {
        "full_name": employee.full_name,
        "pin": "",
        "rfid_code": employee.rfid_code or "",
        "role": employee.role_value,
        "is_active": employee.is_active,
    }


def _employee_check(draft: Draft, creating: bool) -> Errors:
    errors: Errors = {}
    if EmployeeRole.from_value(draft.get("role")) is None:
        errors["role"] = "Role must be one of admin, manager, cashier"
    return errors


def _employee_prepare(draft: Draft, creating: bool) -> Draft:
    draft["full_name"] = str(draft.get("full_name") or "").strip()
    _strip_blank(draft, creating, "rfid_code")
    role = EmployeeRole.from_value(draft.get("role"))
    if role is not None:
        draft["role"] = role.value
    draft["is_active"] = bool(draft.get("is_active", True))
    if not creating and not str(draft.get("pin") or "").strip():
        draft.pop("pin", None)
    return draft


EMPLOYEES: Collection[Employee] = Collection(
    label="Employees",
    singular="employee",
    table="employees",
    parse=Employee.from_row,
    search_fields=("full_name", "role_value"),
    defaults=_employee_defaults,
    to_draft=_employee_to_draft,
    required=("full_name",),
    required_on_create=("pin",),
    check=_employee_check,
    prepare=_employee_prepare,
)


# ── Fuel types ────────────────────────────────────────────────────────


def _fuel_type_defaults() -> Draft:
    return {"name": "", "type": "", "price_per_liter": "", "is_active": True}


def _fuel_type_to_draft(fuel_type: FuelType) -> Draft:
    return {
        "name": fuel_type.name,
        "type": fuel_type.type,
        "price_per_liter": fuel_type.price_per_liter,
        "is_active": fuel_type.is_active,
    }


def _fuel_type_check(draft: Draft, creating: bool) -> Errors:
    errors: Errors = {}
    _positive(draft, "price_per_liter", errors)
    return errors


def _fuel_type_prepare(draft: Draft, creating: bool) -> Draft:
    draft["name"] = str(draft.get("name") or "").strip()
    draft["type"] = str(draft.get("type") or "").strip().lower()
    draft["price_per_liter"] = parse_decimal(draft.get("price_per_liter"))
    draft["is_active"] = bool(draft.get("is_active", True))
    return draft


FUEL_TYPES: Collection[FuelType] = Collection(
    label="Fuel Types",
    singular="fuel type",
    table="fuel_types",
    parse=FuelType.from_row,
    search_fields=("name", "type"),
    defaults=_fuel_type_defaults,
    to_draft=_fuel_type_to_draft,
    required=("name", "type", "price_per_liter"),
    check=_fuel_type_check,
    prepare=_fuel_type_prepare,
)


# ── Transactions ──────────────────────────────────────────────────────


def _transaction_defaults() -> Draft:
    return {
        "fuel_type_id": None,
        "employee_id": None,
        "fuel_amount": "",
        "fuel_price_per_liter": "",
        "payment_method": PaymentMethod.CASH.value,
        "status": TransactionStatus.COMPLETED.value,
        "receipt_number": "",
    }


def _transaction_to_draft(transaction: Transaction) -> Draft:
    return {
        "fuel_type_id": transaction.fuel_type_id,
        "employee_id": transaction.employee_id,
        "fuel_amount": transaction.fuel_amount,
        "fuel_price_per_liter": transaction.fuel_price_per_liter,
        "payment_method": transaction.payment_method_value,
        "status": transaction.status_value,
        "receipt_number": transaction.receipt_number or "",
    }


def _transaction_check(draft: Draft, creating: bool) -> Errors:
    errors: Errors = {}
    _positive(draft, "fuel_amount", errors)
    _positive(draft, "fuel_price_per_liter", errors)
    if PaymentMethod.from_value(draft.get("payment_method")) is None:
        errors["payment_method"] = "Payment method must be one of qr_code, credit_card, cash"
    if TransactionStatus.from_value(draft.get("status")) is None:
        errors["status"] = "Status must be one of completed, pending, failed, cancelled"
    return errors


def transaction_total(amount: Any, price: Any) -> Decimal:
    return (parse_decimal(amount) or Decimal("0")) * (parse_decimal(price) or Decimal("0"))


def _transaction_prepare(draft: Draft, creating: bool) -> Draft:
    draft["fuel_amount"] = parse_decimal(draft.get("fuel_amount"))
    draft["fuel_price_per_liter"] = parse_decimal(draft.get("fuel_price_per_liter"))
    draft["payment_method"] = PaymentMethod.from_value(draft.get("payment_method")).value
    draft["status"] = TransactionStatus.from_value(draft.get("status")).value
    _strip_blank(draft, creating, "receipt_number")
    if creating:
        draft["total_amount"] = transaction_total(draft["fuel_amount"], draft["fuel_price_per_liter"])
    return draft


TRANSACTIONS: Collection[Transaction] = Collection(
    label="Transactions",
    singular="transaction",
    table="gas_transactions",
    select="*,fuel_types(name,type),employees(full_name)",
    parse=Transaction.from_row,
    search_fields=("receipt_number", "employee_name", "fuel_type_name"),
    defaults=_transaction_defaults,
    to_draft=_transaction_to_draft,
    required=("fuel_type_id", "employee_id", "fuel_amount", "fuel_price_per_liter"),
    check=_transaction_check,
    prepare=_transaction_prepare,
    limit=50,
)
