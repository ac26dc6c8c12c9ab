"""
Application Configuration.

Pydantic Settings model for the SitePass kiosk application.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")

    # --- Backend objects ---
    CONTRACTORS_TABLE: str = "contractors"
    PROFILES_TABLE: str = "profiles"
    SIGNOUT_RPC: str = "request_signout"
    REALTIME_CHANNEL: str = "screen-contractors-db-changes"

    # --- Board ---
    ROW_LIMIT: int = 500
    SIGNED_OUT_WINDOW_DAYS: int = 7
    REALTIME_DEBOUNCE_MS: int = 400
    BOARD_POLL_INTERVAL_MS: int = 60_000  # Fallback refresh when realtime is down

    # --- Screen display auto-scroll ---
    AUTO_SCROLL_INTERVAL_MS: int = 60
    AUTO_SCROLL_STEP: float = 0.004
    AUTO_SCROLL_PAUSE_TICKS: int = 40

    # --- Auth ---
    PASSWORD_MIN_LENGTH: int = 8
    LOGIN_MAX_ATTEMPTS: int = 3
    LOGIN_LOCKOUT_SECONDS: int = 30
    SESSION_CHECK_INTERVAL_MS: int = 60_000

    # --- Local storage ---
    LOCAL_DB_PATH: str = "sitepass_local.db"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "sitepass.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty.

        Pydantic silently falls back to defaults when ``.env`` is missing,
        so operators get a log line on first run instead.
        """
        _log = logging.getLogger("sitepass.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found. All configuration loaded from "
                "environment variables or defaults."
            )

        if not self.SUPABASE_URL or not self.SUPABASE_ANON_KEY.get_secret_value():
            _log.warning(
                "Supabase credentials are empty. The kiosk cannot record "
                "sign-ins until SUPABASE_URL and SUPABASE_ANON_KEY are set."
            )

        return self


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    Uses a check-lock-check pattern so the fast path takes no lock.
    Prefer constructor injection of ``AppConfig`` in new code.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next ``get_config()`` re-reads env."""
    global _config_instance
    with _config_lock:
        _config_instance = None
