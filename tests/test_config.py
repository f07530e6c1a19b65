import logging

from fuelstation.config import AppState, Settings
from fuelstation.log import configure_logging
from fuelstation.tables import EMPLOYEES


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("FUELSTATION_SUPABASE_URL", "https://abc.supabase.co/")
    monkeypatch.setenv("FUELSTATION_SUPABASE_KEY", "anon")
    monkeypatch.setenv("FUELSTATION_TRANSACTION_LIMIT", "25")
    settings = Settings(_env_file=None)

    assert settings.supabase_url == "https://abc.supabase.co"
    assert settings.rest_url == "https://abc.supabase.co/rest/v1"
    assert settings.transaction_limit == 25
    assert settings.request_timeout == 15.0


def test_collection_builds_client_from_settings():
    settings = Settings(_env_file=None, supabase_url="https://abc.supabase.co", supabase_key="anon", request_timeout=5)
    client = EMPLOYEES.client(settings)

    assert client.base_url == "https://abc.supabase.co/rest/v1"
    assert client.table == "employees"
    assert client.timeout == 5


def test_app_state_round_trip(tmp_path):
    path = tmp_path / "state.json"
    AppState(last_page="reports", window_width=1000).save(path)

    state = AppState.load(path)
    assert state.last_page == "reports"
    assert state.window_width == 1000


def test_app_state_ignores_unknown_keys(tmp_path):
    path = tmp_path / "state.json"
    path.write_text('{"last_page": "employees", "token": "old"}', encoding="utf-8")

    assert AppState.load(path).last_page == "employees"


def test_corrupt_state_is_discarded(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    assert AppState.load(path) == AppState()
    assert not path.exists()


def test_configure_logging_installs_one_handler():
    logger = configure_logging("debug")
    configure_logging("debug")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
