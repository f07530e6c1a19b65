"""HTTP boundary to the hosted PostgREST row API, one client per table."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class RemoteError(Exception):
    """A remote call failed: connectivity, not-found or a rejected write."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @property
    def is_connectivity(self) -> bool:
        return self.status_code is None


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        # PostgREST accepts numerics as JSON numbers or strings; strings keep precision
        return str(value)
    return value


@dataclass(frozen=True)
class Between:
    """Inclusive range filter, sent as ``gte.`` and ``lte.`` predicates.

    Either bound may be ``None`` for an open-ended range.
    """

    low: Any = None
    high: Any = None

    def matches(self, value: Any) -> bool:
        if value is None:
            return False
        if self.low is not None and value < self.low:
            return False
        if self.high is not None and value > self.high:
            return False
        return True

    def predicates(self) -> List[str]:
        bounds = [("gte", self.low), ("lte", self.high)]
        return [f"{op}.{_filter_literal(bound)}" for op, bound in bounds if bound is not None]


def _filter_literal(value: Any) -> str:
    value = _encode(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class RemoteCollectionClient:
    """List/create/update/delete for one remote table.

    ``order`` is a ``(column, descending)`` tuple. Filters are equality
    predicates, or ``Between`` ranges, sent together in a single request.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str,
        *,
        key_field: str = "id",
        select: str = "*",
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        access_token: Optional[str] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.key_field = key_field
        self.select = select
        self.session = session or requests.Session()
        self.timeout = timeout
        self.access_token = access_token

    def _url(self) -> str:
        return f"{self.base_url}/{self.table}"

    def _headers(self, *, returning: bool = False) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.api_key:
            headers["apikey"] = self.api_key
        bearer = self.access_token or self.api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        if returning:
            headers["Prefer"] = "return=representation"
        return headers

    @staticmethod
    def _extract_message(payload: Any, status: int) -> str:
        if isinstance(payload, dict):
            for field in ("message", "detail", "error_description", "error", "hint"):
                detail = payload.get(field)
                if isinstance(detail, str) and detail:
                    return detail
        return f"Server error ({status})"

    @staticmethod
    def _extract_code(payload: Any) -> Optional[str]:
        if isinstance(payload, dict) and payload.get("code") is not None:
            return str(payload["code"])
        return None

    def _request(
        self,
        method: str,
        *,
        params: Optional[Sequence[Tuple[str, str]]] = None,
        json_data: Optional[Any] = None,
        returning: bool = False,
    ) -> Any:
        try:
            response = self.session.request(
                method,
                self._url(),
                params=list(params or []),
                headers=self._headers(returning=returning),
                json=json_data,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, self.table, exc)
            raise RemoteError(f"Could not reach the server: {exc}") from exc

        if 200 <= response.status_code < 300:
            if response.content:
                try:
                    return response.json()
                except ValueError:
                    return None
            return None
        try:
            payload = response.json()
        except ValueError:
            payload = None
        message = self._extract_message(payload, response.status_code)
        logger.warning("%s %s rejected (%s): %s", method, self.table, response.status_code, message)
        raise RemoteError(message, response.status_code, self._extract_code(payload))

    def _key_param(self, key: Any) -> Tuple[str, str]:
        return (self.key_field, f"eq.{_filter_literal(key)}")

    @staticmethod
    def _first_row(data: Any) -> Optional[Dict[str, Any]]:
        if isinstance(data, list):
            return data[0] if data and isinstance(data[0], dict) else None
        if isinstance(data, dict):
            return data
        return None

    def list(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Tuple[str, bool]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params: List[Tuple[str, str]] = [("select", self.select)]
        for name, value in (filters or {}).items():
            if isinstance(value, Between):
                params.extend((name, predicate) for predicate in value.predicates())
            else:
                params.append((name, f"eq.{_filter_literal(value)}"))
        if order:
            column, descending = order
            params.append(("order", f"{column}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(int(limit))))
        logger.debug("GET %s %s", self.table, params)
        data = self._request("GET", params=params)
        if not isinstance(data, list):
            raise RemoteError("Unexpected server response", 500)
        return [row for row in data if isinstance(row, dict)]

    def create(self, draft: Mapping[str, Any]) -> Dict[str, Any]:
        payload = {name: _encode(value) for name, value in draft.items()}
        data = self._request(
            "POST",
            params=[("select", self.select)],
            json_data=payload,
            returning=True,
        )
        row = self._first_row(data)
        if row is None:
            raise RemoteError("Server did not return the created record", 500)
        logger.info("Created %s %s", self.table, row.get(self.key_field))
        return row

    def update(self, key: Any, patch: Mapping[str, Any]) -> Dict[str, Any]:
        payload = {name: _encode(value) for name, value in patch.items()}
        if not payload:
            raise RemoteError("Nothing to update", 400)
        data = self._request(
            "PATCH",
            params=[self._key_param(key), ("select", self.select)],
            json_data=payload,
            returning=True,
        )
        row = self._first_row(data)
        if row is None:
            raise RemoteError(f"Record {key} not found", 404)
        logger.info("Updated %s %s", self.table, key)
        return row

    def delete(self, key: Any) -> None:
        data = self._request(
            "DELETE",
            params=[self._key_param(key)],
            returning=True,
        )
        if not self._first_row(data):
            raise RemoteError(f"Record {key} not found", 404)
        logger.info("Deleted %s %s", self.table, key)

    def ping(self) -> bool:
        try:
            response = self.session.request(
                "HEAD",
                self.base_url + "/",
                headers=self._headers(),
                timeout=5,
            )
        except requests.RequestException:
            return False
        return response.status_code < 500
