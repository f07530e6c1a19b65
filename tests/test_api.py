"""Tests for the PostgREST collection client."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
import requests

from conftest import FakeResponse, FakeSession

from fuelstation.api import Between, RemoteCollectionClient, RemoteError
from fuelstation.models import PaymentMethod

BASE = "https://example.supabase.co/rest/v1"


def make_client(*responses, **kwargs):
    session = FakeSession(*responses)
    client = RemoteCollectionClient(BASE, "anon-key", kwargs.pop("table", "employees"), session=session, **kwargs)
    return client, session


def test_list_sends_filters_order_and_limit_together():
    client, session = make_client(
        FakeResponse(200, [{"id": "tx-1"}]),
        table="gas_transactions",
        select="*,fuel_types(name,type),employees(full_name)",
    )
    rows = client.list({"status": "completed", "is_active": True}, ("created_at", True), 50)

    assert rows == [{"id": "tx-1"}]
    assert len(session.requests) == 1
    request = session.last
    assert request["method"] == "GET"
    assert request["url"] == f"{BASE}/gas_transactions"
    assert request["params"] == [
        ("select", "*,fuel_types(name,type),employees(full_name)"),
        ("status", "eq.completed"),
        ("is_active", "eq.true"),
        ("order", "created_at.desc"),
        ("limit", "50"),
    ]
    assert request["headers"]["apikey"] == "anon-key"
    assert request["headers"]["Authorization"] == "Bearer anon-key"
    assert request["timeout"] == 15.0


def test_list_rejects_non_list_payload():
    client, _ = make_client(FakeResponse(200, {"unexpected": True}))
    with pytest.raises(RemoteError) as exc_info:
        client.list()
    assert exc_info.value.status_code == 500


def test_create_returns_materialized_row():
    row = {"id": "emp-9", "full_name": "Jane Doe", "created_at": "2024-03-01T00:00:00Z"}
    client, session = make_client(FakeResponse(201, [row]))

    created = client.create({"full_name": "Jane Doe", "pin": "1234"})

    assert created == row
    assert session.last["method"] == "POST"
    assert session.last["headers"]["Prefer"] == "return=representation"
    assert session.last["json"] == {"full_name": "Jane Doe", "pin": "1234"}


def test_create_encodes_decimals_and_enums():
    client, session = make_client(FakeResponse(201, [{"id": "tx-1"}]), table="gas_transactions")
    client.create({"total_amount": Decimal("1420.00"), "payment_method": PaymentMethod.QR_CODE})

    assert session.last["json"] == {"total_amount": "1420.00", "payment_method": "qr_code"}


def test_constraint_violation_surfaces_server_message():
    client, _ = make_client(
        FakeResponse(409, {"code": "23505", "message": "duplicate key value violates unique constraint"})
    )
    with pytest.raises(RemoteError) as exc_info:
        client.create({"full_name": "Jane Doe"})

    assert exc_info.value.status_code == 409
    assert exc_info.value.code == "23505"
    assert exc_info.value.message == "duplicate key value violates unique constraint"


def test_error_without_body_gets_generic_message():
    client, _ = make_client(FakeResponse(502, text="Bad gateway"))
    with pytest.raises(RemoteError) as exc_info:
        client.list()
    assert exc_info.value.message == "Server error (502)"


def test_connection_failure_is_a_remote_error():
    client, _ = make_client(requests.ConnectionError("Name or service not known"))
    with pytest.raises(RemoteError) as exc_info:
        client.list()

    assert exc_info.value.status_code is None
    assert exc_info.value.is_connectivity is True


def test_update_filters_by_key():
    client, session = make_client(FakeResponse(200, [{"id": "emp-1", "role": "manager"}]))
    updated = client.update("emp-1", {"role": "manager"})

    assert updated["role"] == "manager"
    assert session.last["method"] == "PATCH"
    assert ("id", "eq.emp-1") in session.last["params"]


def test_update_of_missing_key_is_not_found():
    client, _ = make_client(FakeResponse(200, []))
    with pytest.raises(RemoteError) as exc_info:
        client.update("emp-404", {"role": "manager"})
    assert exc_info.value.status_code == 404


def test_update_is_repeatable():
    row = {"id": "emp-1", "role": "manager"}
    client, _ = make_client(FakeResponse(200, [row]), FakeResponse(200, [row]))

    assert client.update("emp-1", {"role": "manager"}) == client.update("emp-1", {"role": "manager"})


def test_empty_patch_is_refused_locally():
    client, session = make_client()
    with pytest.raises(RemoteError):
        client.update("emp-1", {})
    assert session.requests == []


def test_delete_returns_nothing():
    client, session = make_client(FakeResponse(200, [{"id": "emp-1"}]))

    assert client.delete("emp-1") is None
    assert session.last["method"] == "DELETE"
    assert session.last["params"] == [("id", "eq.emp-1")]


def test_delete_of_missing_key_is_not_found():
    client, _ = make_client(FakeResponse(200, []))
    with pytest.raises(RemoteError) as exc_info:
        client.delete("emp-404")
    assert exc_info.value.status_code == 404


def test_ping_reports_reachability():
    client, session = make_client(FakeResponse(200, None), requests.Timeout("slow"))

    assert client.ping() is True
    assert session.last["method"] == "HEAD"
    assert client.ping() is False


def test_range_filter_becomes_gte_and_lte_predicates():
    client, session = make_client(FakeResponse(200, []), table="gas_transactions")
    start = datetime(2023, 1, 1, tzinfo=timezone.utc)
    end = datetime(2023, 1, 31, 23, 59, 59, tzinfo=timezone.utc)

    client.list({"created_at": Between(start, end), "status": "completed"}, ("created_at", True), 1000)

    assert session.last["params"] == [
        ("select", "*"),
        ("created_at", "gte.2023-01-01T00:00:00+00:00"),
        ("created_at", "lte.2023-01-31T23:59:59+00:00"),
        ("status", "eq.completed"),
        ("order", "created_at.desc"),
        ("limit", "1000"),
    ]


def test_open_ended_range_sends_one_predicate():
    client, session = make_client(FakeResponse(200, []))
    client.list({"created_at": Between(low=datetime(2024, 3, 1, tzinfo=timezone.utc))})

    assert session.last["params"][1:] == [("created_at", "gte.2024-03-01T00:00:00+00:00")]
