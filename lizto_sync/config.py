"""
Settings from the environment (and a .env file in the working directory).
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

REQUIRED_ENV_VARS = ["MONGO_URI", "DB_NAME", "APPOINTMENTS_COL", "LIZTO_EMAIL", "LIZTO_PASSWORD"]

DEFAULT_SEDE = "Marquetalia"
DEFAULT_USUARIO = "Leslie gutierrez"
DEFAULT_INTERVAL_MINUTES = 60
DEFAULT_SETTLE_SECONDS = 0.25


class ConfigError(ValueError):
    """Required settings are missing."""


@dataclass(frozen=True)
class Settings:
    mongo_uri: str
    db_name: str
    appointments_col: str
    lizto_email: str
    lizto_password: str
    default_sede: str = DEFAULT_SEDE
    default_usuario: str = DEFAULT_USUARIO
    interval_minutes: float = DEFAULT_INTERVAL_MINUTES
    settle_seconds: float = DEFAULT_SETTLE_SECONDS
    headless: bool = True
    log_level: str = "INFO"


def _env_bool(raw: str | None, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from ``environ`` (default: .env + os.environ).

    Raises ConfigError naming every missing required variable.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    missing = [k for k in REQUIRED_ENV_VARS if not (environ.get(k) or "").strip()]
    if missing:
        raise ConfigError(
            "Missing required environment variables in .env: " + ", ".join(missing)
        )

    return Settings(
        mongo_uri=environ["MONGO_URI"],
        db_name=environ["DB_NAME"],
        appointments_col=environ["APPOINTMENTS_COL"],
        lizto_email=environ["LIZTO_EMAIL"],
        lizto_password=environ["LIZTO_PASSWORD"],
        default_sede=environ.get("DEFAULT_SEDE") or DEFAULT_SEDE,
        default_usuario=environ.get("DEFAULT_USUARIO") or DEFAULT_USUARIO,
        interval_minutes=_env_float(environ.get("SYNC_INTERVAL_MINUTES"), DEFAULT_INTERVAL_MINUTES),
        settle_seconds=_env_float(environ.get("OVERLAY_SETTLE_SECONDS"), DEFAULT_SETTLE_SECONDS),
        headless=_env_bool(environ.get("HEADLESS"), True),
        log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
    )
