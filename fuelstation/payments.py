"""QR-code payment initiation.

A QR payment is a ``gas_transactions`` row with ``payment_method=qr_code``
that starts out ``pending``. The customer scans the payload string rendered as
a QR code; settling it is a plain status update.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

import qrcode

from .api import RemoteCollectionClient, RemoteError
from .models import FuelType, PaymentMethod, Transaction, TransactionStatus, parse_decimal
from .tables import TRANSACTIONS, transaction_total
from .viewmodels import ValidationError

logger = logging.getLogger(__name__)

PAYLOAD_SCHEME = "fuelstation://pay"

# Restrict the QR page to unsettled QR transactions.
PENDING_QR = TRANSACTIONS.with_filters(
    payment_method=PaymentMethod.QR_CODE.value,
    status=TransactionStatus.PENDING.value,
)


def generate_receipt_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"QR-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


def build_payload(transaction: Transaction, station: str, currency: str = "THB") -> str:
    query = urlencode(
        {
            "station": station,
            "ref": transaction.receipt_number or transaction.id,
            "amount": f"{transaction.total_amount:.2f}",
            "currency": currency,
        }
    )
    return f"{PAYLOAD_SCHEME}?{query}"


def qr_matrix(payload: str, border: int = 2) -> List[List[bool]]:
    """Module grid for ``payload``; ``True`` marks a dark module."""
    code = qrcode.QRCode(border=border, error_correction=qrcode.constants.ERROR_CORRECT_M)
    code.add_data(payload)
    code.make(fit=True)
    return [list(row) for row in code.get_matrix()]


@dataclass
class QrPaymentRequest:
    transaction: Transaction
    payload: str

    @property
    def reference(self) -> str:
        return self.transaction.receipt_number or self.transaction.id

    def matrix(self) -> List[List[bool]]:
        return qr_matrix(self.payload)


class QrPaymentService:
    def __init__(
        self,
        client: RemoteCollectionClient,
        *,
        station: str,
        currency: str = "THB",
        receipt_factory: Callable[[], str] = generate_receipt_number,
    ) -> None:
        self.client = client
        self.station = station
        self.currency = currency
        self.receipt_factory = receipt_factory

    def initiate(self, fuel_type: FuelType, liters: Any, employee_id: Optional[str]) -> QrPaymentRequest:
        amount = parse_decimal(liters)
        errors: Dict[str, str] = {}
        if amount is None:
            errors["fuel_amount"] = "Must be a number"
        elif amount <= 0:
            errors["fuel_amount"] = "Must be greater than zero"
        if fuel_type.price_per_liter is None or fuel_type.price_per_liter <= 0:
            errors["fuel_type_id"] = "Fuel type has no price"
        if not employee_id:
            errors["employee_id"] = "This field is required"
        if errors:
            raise ValidationError(errors)

        price: Decimal = fuel_type.price_per_liter
        draft = {
            "fuel_type_id": fuel_type.id,
            "employee_id": employee_id,
            "fuel_amount": amount,
            "fuel_price_per_liter": price,
            "total_amount": transaction_total(amount, price),
            "payment_method": PaymentMethod.QR_CODE.value,
            "status": TransactionStatus.PENDING.value,
            "receipt_number": self.receipt_factory(),
        }
        row = self.client.create(draft)
        transaction = Transaction.from_row(row)
        if not transaction.fuel_type_name:
            transaction.fuel_type_name = fuel_type.name
        logger.info("QR payment %s initiated", transaction.receipt_number)
        return QrPaymentRequest(transaction, build_payload(transaction, self.station, self.currency))

    def _settle(self, key: str, status: TransactionStatus) -> Transaction:
        row = self.client.update(key, {"status": status.value})
        transaction = Transaction.from_row(row)
        if transaction.status_value != status.value:
            raise RemoteError(f"Payment {key} was not updated", 409)
        return transaction

    def mark_completed(self, key: str) -> Transaction:
        return self._settle(key, TransactionStatus.COMPLETED)

    def mark_failed(self, key: str) -> Transaction:
        return self._settle(key, TransactionStatus.FAILED)

    def cancel(self, key: str) -> Transaction:
        return self._settle(key, TransactionStatus.CANCELLED)
