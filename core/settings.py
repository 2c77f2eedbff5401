"""
Core Module - Settings.

============================================================
RESPONSIBILITY
============================================================
Collects every environment-driven setting of the dashboard
into one immutable object.

Values come from the process environment, with a local
.env file loaded first. Scoring constants are NOT settings;
they live in battle_scoring.config.

============================================================
"""

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv


DEFAULT_TA_SUMMARY_MODEL = "claude-sonnet-4-20250514"
DEFAULT_ALTSEASON_TARGET_DATE = "2025-12-15"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def parse_target_date(value: str) -> datetime:
    """Parse YYYY-MM-DD (or full ISO) into an aware UTC datetime."""
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class DashboardSettings:
    """Runtime settings for the dashboard API and its feeds."""

    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "production"
    log_level: str = "INFO"

    anthropic_api_key: Optional[str] = None
    ta_summary_model: str = DEFAULT_TA_SUMMARY_MODEL
    cryptopanic_api_key: Optional[str] = None

    altseason_target_date: datetime = parse_target_date(DEFAULT_ALTSEASON_TARGET_DATE)
    http_timeout_seconds: int = 10

    enable_poller: bool = True
    simulation_seed: Optional[int] = None

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "DashboardSettings":
        """Build settings from the environment (and .env)."""
        if load_env_file:
            load_dotenv()

        seed = _env_optional("SIMULATION_SEED")

        return cls(
            host=os.getenv("DASHBOARD_HOST", "0.0.0.0"),
            port=int(os.getenv("DASHBOARD_PORT", os.getenv("PORT", "8000"))),
            environment=os.getenv("ENVIRONMENT", "production"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            anthropic_api_key=_env_optional("ANTHROPIC_API_KEY"),
            ta_summary_model=os.getenv("TA_SUMMARY_MODEL", DEFAULT_TA_SUMMARY_MODEL),
            cryptopanic_api_key=_env_optional("CRYPTOPANIC_API_KEY"),
            altseason_target_date=parse_target_date(
                os.getenv("ALTSEASON_TARGET_DATE", DEFAULT_ALTSEASON_TARGET_DATE)
            ),
            http_timeout_seconds=int(os.getenv("HTTP_TIMEOUT_SECONDS", "10")),
            enable_poller=_env_bool("ENABLE_POLLER", True),
            simulation_seed=int(seed) if seed is not None else None,
        )
