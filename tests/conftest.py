"""
Shared test fixtures for the dashboard test suite.

The view-models only need something with the ``RemoteCollectionClient``
methods, so most tests run against ``FakeClient``, an in-memory table that
records every call. HTTP-level tests use ``FakeSession`` in place of
``requests.Session``.
"""

import copy
import json
from enum import Enum
from typing import Any, Dict, List, Optional

import pytest

from fuelstation.api import Between, RemoteError
from fuelstation.models import parse_api_datetime


def _row_matches(raw: Any, value: Any) -> bool:
    if isinstance(raw, Enum):
        raw = raw.value
    if isinstance(value, Between):
        return value.matches(parse_api_datetime(raw) if isinstance(raw, str) else raw)
    return raw == value


class FakeClient:
    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None) -> None:
        self.rows = [dict(row) for row in rows or []]
        self.calls: List[tuple] = []
        self.fail_next: Optional[Exception] = None
        self._seq = 0

    def _maybe_fail(self) -> None:
        if self.fail_next is not None:
            exc, self.fail_next = self.fail_next, None
            raise exc

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def _find(self, key: Any) -> Dict[str, Any]:
        for row in self.rows:
            if row.get("id") == key:
                return row
        raise RemoteError(f"Record {key} not found", 404)

    def list(self, filters=None, order=None, limit=None):
        self.calls.append(("list", dict(filters or {}), order, limit))
        self._maybe_fail()
        rows = [
            row for row in self.rows
            if all(_row_matches(row.get(name), value) for name, value in (filters or {}).items())
        ]
        if order:
            column, descending = order
            rows.sort(key=lambda row: str(row.get(column) or ""), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    def create(self, draft):
        self.calls.append(("create", dict(draft)))
        self._maybe_fail()
        self._seq += 1
        row = {
            "id": f"srv-{self._seq}",
            "created_at": f"2030-01-{self._seq:02d}T10:00:00+00:00",
            **draft,
        }
        self.rows.append(row)
        return dict(row)

    def update(self, key, patch):
        self.calls.append(("update", key, dict(patch)))
        self._maybe_fail()
        row = self._find(key)
        row.update(patch)
        return dict(row)

    def delete(self, key):
        self.calls.append(("delete", key))
        self._maybe_fail()
        self.rows.remove(self._find(key))


class RecordingNotifier:
    def __init__(self) -> None:
        self.successes: List[str] = []
        self.errors: List[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


class DeferredRunner:
    """Queues work until ``run_all`` so in-flight state can be inspected."""

    def __init__(self) -> None:
        self.pending: List[tuple] = []

    def submit(self, fn, *, on_success=None, on_error=None, on_finish=None):
        self.pending.append((fn, on_success, on_error, on_finish))

    def run_all(self) -> None:
        while self.pending:
            fn, on_success, on_error, on_finish = self.pending.pop(0)
            try:
                result = fn()
            except Exception as exc:  # noqa: BLE001
                if on_error:
                    on_error(exc)
            else:
                if on_success:
                    on_success(result)
            finally:
                if on_finish:
                    on_finish()


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._payload = payload
        if text is not None:
            self.content = text.encode("utf-8")
        elif payload is None:
            self.content = b""
        else:
            self.content = json.dumps(payload).encode("utf-8")

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def request(self, method, url, params=None, headers=None, json=None, timeout=None):
        self.requests.append(
            {
                "method": method,
                "url": url,
                "params": list(params or []),
                "headers": dict(headers or {}),
                "json": json,
                "timeout": timeout,
            }
        )
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> Dict[str, Any]:
        return self.requests[-1]


EMPLOYEE_ROWS = [
    {
        "id": "emp-1",
        "full_name": "Jane Doe",
        "pin": "1111",
        "rfid_code": "RF-01",
        "role": "cashier",
        "is_active": True,
        "created_at": "2024-03-02T08:00:00Z",
    },
    {
        "id": "emp-2",
        "full_name": "John Smith",
        "pin": "2222",
        "rfid_code": None,
        "role": "manager",
        "is_active": True,
        "created_at": "2024-03-01T08:00:00Z",
    },
]


def _tx(key, status, *, receipt, employee, fuel, created, method="cash", amount="40", price="35.50"):
    return {
        "id": key,
        "fuel_amount": amount,
        "fuel_price_per_liter": price,
        "total_amount": str(float(amount) * float(price)),
        "payment_method": method,
        "status": status,
        "receipt_number": receipt,
        "created_at": created,
        "fuel_type_id": "fuel-1",
        "employee_id": "emp-1",
        "fuel_types": {"name": fuel, "type": "gasoline"},
        "employees": {"full_name": employee},
    }


TRANSACTION_ROWS = [
    _tx("tx-1", "completed", receipt="R-1001", employee="Jane Doe", fuel="Gasohol 95", created="2024-03-03T09:00:00Z"),
    _tx("tx-2", "pending", receipt="R-1002", employee="John Smith", fuel="Diesel", created="2024-03-02T09:00:00Z",
        method="qr_code"),
    _tx("tx-3", "completed", receipt="R-1003", employee="John Smith", fuel="Diesel", created="2024-03-01T09:00:00Z",
        method="credit_card", amount="10", price="30"),
    _tx("tx-4", "failed", receipt=None, employee="Jane Doe", fuel="Gasohol 95", created="2024-02-28T09:00:00Z"),
]


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def employee_client() -> FakeClient:
    return FakeClient(EMPLOYEE_ROWS)


@pytest.fixture
def transaction_client() -> FakeClient:
    return FakeClient(TRANSACTION_ROWS)
