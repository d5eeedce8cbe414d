# src/weekly_status/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (console, state server, CLI tools).
- Nothing required at import time; every value has a local default.
- Paths default to gitignored locations under the working directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "WEEKLY"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


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

    # ---- Local durable slot ----
    data_dir: Path
    slot_key: str
    legacy_slot_key: str

    # ---- Remote document store (client side) ----
    remote_enabled: bool
    remote_base_url: str
    state_endpoint: str
    remote_timeout_seconds: float
    save_debounce_ms: int

    # ---- State server ----
    server_host: str
    server_port: int
    server_data_file: Path
    max_body_bytes: int

    @property
    def save_debounce_seconds(self) -> float:
        return max(0, self.save_debounce_ms) / 1000.0

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "weekly-status") or "weekly-status"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/weekly-status"))
        slot_key = _env(_k("SLOT_KEY"), "weekly-status-tracker:v2")
        legacy_slot_key = _env(_k("LEGACY_SLOT_KEY"), "weekly-status-tracker:v1")

        server_host = _env(_k("SERVER_HOST"), "127.0.0.1")
        # PORT is what the desktop shell exports when it starts the server.
        server_port = _env_int(_k("SERVER_PORT"), _env_int("PORT", 4173))

        remote_enabled = _env_bool(_k("REMOTE_ENABLED"), True)
        remote_base_url = (
            _first_env(_k("REMOTE_BASE_URL"), default=f"http://{server_host}:{server_port}") or ""
        ).rstrip("/")
        state_endpoint = _env(_k("STATE_ENDPOINT"), "/api/state")
        remote_timeout_seconds = _env_float(_k("REMOTE_TIMEOUT_SECONDS"), 5.0)
        save_debounce_ms = _env_int(_k("SAVE_DEBOUNCE_MS"), 300)

        server_data_file = _env_path(_k("SERVER_DATA_FILE"), Path("data/weekly-status.json"))
        max_body_bytes = _env_int(_k("MAX_BODY_BYTES"), 1_000_000)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            slot_key=slot_key,
            legacy_slot_key=legacy_slot_key,
            remote_enabled=remote_enabled,
            remote_base_url=remote_base_url,
            state_endpoint=state_endpoint,
            remote_timeout_seconds=remote_timeout_seconds,
            save_debounce_ms=save_debounce_ms,
            server_host=server_host,
            server_port=server_port,
            server_data_file=server_data_file,
            max_body_bytes=max_body_bytes,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env; use config_local.py only for a couple of machine-specific switches.
try:
    import config_local as _config_local  # type: ignore

    if hasattr(_config_local, "REMOTE_ENABLED"):
        object.__setattr__(SETTINGS, "remote_enabled", bool(_config_local.REMOTE_ENABLED))  # type: ignore[misc]
    if hasattr(_config_local, "DATA_DIR"):
        object.__setattr__(SETTINGS, "data_dir", Path(_config_local.DATA_DIR))  # type: ignore[misc]
except ImportError:
    pass


def get_settings() -> Settings:
    return SETTINGS
