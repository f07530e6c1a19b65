"""
Dashboard settings and persisted UI state.

Settings come from environment variables prefixed with ``FUELSTATION_`` or a
``.env`` file in the working directory. UI state is a small JSON document kept
in the user's home directory.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

STATE_PATH = Path.home() / ".fuelstation_dashboard.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FUELSTATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Backend ──────────────────────────────────────────────────────
    supabase_url: str = "http://localhost:54321"
    supabase_key: str = ""
    request_timeout: float = 15.0

    # ── Lists ────────────────────────────────────────────────────────
    transaction_limit: int = 50
    report_limit: int = 1000

    # ── Display ──────────────────────────────────────────────────────
    station_name: str = "FuelStation"
    currency_symbol: str = "฿"
    currency_code: str = "THB"

    # ── Logging ──────────────────────────────────────────────────────
    log_level: str = "INFO"

    @field_validator("supabase_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def rest_url(self) -> str:
        return f"{self.supabase_url}/rest/v1"


@lru_cache
def get_settings() -> Settings:
    return Settings()


@dataclass
class AppState:
    last_page: str = "transactions"
    window_width: int = 1280
    window_height: int = 820

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppState":
        path = path or STATE_PATH
        if path.exists():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                allowed = {field.name for field in fields(cls)}
                filtered = {
                    key: value
                    for key, value in data.items()
                    if key in allowed
                }
                return cls(**filtered)
            except (ValueError, TypeError, AttributeError):
                logger.warning("Discarding unreadable state file %s", path)
                path.unlink(missing_ok=True)
        return cls()

    def save(self, path: Optional[Path] = None) -> None:
        path = path or STATE_PATH
        path.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")
