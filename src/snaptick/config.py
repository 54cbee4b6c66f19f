# src/snaptick/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every field has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path

from dotenv import load_dotenv

from . import __version__

ENV_PREFIX = "SNAPTICK"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


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


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _installed_version() -> str:
    try:
        return metadata.version("snaptick")
    except metadata.PackageNotFoundError:
        return __version__


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    build_version: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    prefs_db_path: Path

    # ---- Nav drawer targets ----
    package_name: str
    store_base_url: str
    feedback_email: str

    # ---- Reminders ----
    notify_retry_attempts: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "snaptick")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        build_version = _env(_k("BUILD_VERSION"), "") or _installed_version()

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/snaptick"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        prefs_db_path = _env_path(_k("PREFS_DB_PATH"), data_dir / "prefs.sqlite3")

        package_name = _env(_k("PACKAGE_NAME"), "com.vishal2376.snaptick")
        store_base_url = _env(
            _k("STORE_BASE_URL"), "https://play.google.com/store/apps/details?id="
        )
        feedback_email = _env(_k("FEEDBACK_EMAIL"), "feedback@snaptick.app")

        # Total attempts for the reminder half of create/update; at least one.
        notify_retry_attempts = max(1, _env_int(_k("NOTIFY_RETRY_ATTEMPTS"), 2))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            build_version=build_version,
            console_enabled=console_enabled,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            prefs_db_path=prefs_db_path,
            package_name=package_name,
            store_base_url=store_base_url,
            feedback_email=feedback_email,
            notify_retry_attempts=notify_retry_attempts,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
