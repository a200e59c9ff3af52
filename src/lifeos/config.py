# src/lifeos/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time (VAPID keys may be generated at startup).
- The unprefixed VAPID variable names used by older deployments are still honoured.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "LIFEOS"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Runtime switches ----
    console_enabled: bool
    scheduler_enabled: bool

    # ---- Reminder scheduler ----
    reminder_interval_seconds: float
    timezone: Optional[str]

    # ---- Push delivery ----
    push_max_concurrency: int
    push_ttl_seconds: int
    push_timeout_seconds: float
    vapid_public_key: Optional[str]
    vapid_private_key: Optional[str]
    vapid_subject: str

    # ---- Notification presentation ----
    notification_title: str
    notification_icon: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _first_env(_k("APP_NAME"), default="lifeos") or "lifeos"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        scheduler_enabled = _env_bool(_k("SCHEDULER_ENABLED"), True)

        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 60.0)
        timezone = (_first_env(_k("TIMEZONE"), default="") or "").strip() or None

        push_max_concurrency = _env_int(_k("PUSH_MAX_CONCURRENCY"), 16)
        push_ttl_seconds = _env_int(_k("PUSH_TTL_SECONDS"), 3600)
        push_timeout_seconds = _env_float(_k("PUSH_TIMEOUT_SECONDS"), 10.0)

        # Older deployments exported PUBLIC_VAPID_KEY / PRIVATE_VAPID_KEY without a prefix.
        vapid_public_key = _first_env(_k("VAPID_PUBLIC_KEY"), "PUBLIC_VAPID_KEY", default=None)
        vapid_private_key = _first_env(_k("VAPID_PRIVATE_KEY"), "PRIVATE_VAPID_KEY", default=None)
        vapid_subject = _env(_k("VAPID_SUBJECT"), "mailto:user@example.com")

        notification_title = (_first_env(_k("NOTIFICATION_TITLE"), default=None) or "LifeOS Reminder").strip()
        notification_icon = (_first_env(_k("NOTIFICATION_ICON"), default=None) or "/icon.png").strip()

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/lifeos"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "lifeos.sqlite3")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            scheduler_enabled=scheduler_enabled,
            reminder_interval_seconds=reminder_interval_seconds,
            timezone=timezone,
            push_max_concurrency=push_max_concurrency,
            push_ttl_seconds=push_ttl_seconds,
            push_timeout_seconds=push_timeout_seconds,
            vapid_public_key=vapid_public_key,
            vapid_private_key=vapid_private_key,
            vapid_subject=vapid_subject,
            notification_title=notification_title,
            notification_icon=notification_icon,
            data_dir=data_dir,
            db_path=db_path,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env for secrets; use config_local.py only for safe overrides.
try:
    import config_local as _config_local  # type: ignore

    if hasattr(_config_local, "CONSOLE_ENABLED"):
        object.__setattr__(SETTINGS, "console_enabled", bool(_config_local.CONSOLE_ENABLED))  # type: ignore[misc]
    if hasattr(_config_local, "SCHEDULER_ENABLED"):
        object.__setattr__(SETTINGS, "scheduler_enabled", bool(_config_local.SCHEDULER_ENABLED))  # type: ignore[misc]
    if hasattr(_config_local, "REMINDER_INTERVAL_SECONDS"):
        object.__setattr__(  # type: ignore[misc]
            SETTINGS, "reminder_interval_seconds", float(_config_local.REMINDER_INTERVAL_SECONDS)
        )
except ImportError:
    pass


def get_settings() -> Settings:
    return SETTINGS
