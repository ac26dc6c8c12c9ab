"""
Application Settings Service.

Read/write access to the ``app_settings`` key-value table in the local
SQLite database: per-device display preferences for the kiosk.

This is a documented exception to the Repository pattern because
``app_settings`` stores device state, not site data.
"""

from __future__ import annotations

from typing import Optional

from sitepass.database import DatabaseManager
from sitepass.logger import StructuredLogger

_KEY_DARK_MODE: str = "screen_display_dark_mode"
_KEY_AUTO_SCROLL: str = "screen_display_auto_scroll"
_KEY_LAST_EXPORT_DIR: str = "dashboard_last_export_dir"

_TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "on"})


class AppSettingsService:
    """Manages persistent device preferences in local SQLite.

    Parameters
    ----------
    db:
        Initialised ``DatabaseManager`` with active SQLite connection.
    logger:
        Structured logger instance.
    """

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    # ------------------------------------------------------------------
    # Generic key-value access
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        """Read a setting value by key.  Returns ``None`` if not found."""
        try:
            row = self._db.sqlite.execute(
                "SELECT value FROM app_settings WHERE key = ?",
                (key,),
            ).fetchone()
            return row["value"] if row is not None else None
        except Exception as exc:
            self._logger.warning("Failed to read app_settings[%s]: %s", key, exc)
            return None

    def set(self, key: str, value: str) -> bool:
        """Upsert a setting value.  Returns ``True`` on success."""
        try:
            with self._db.write_lock:
                self._db.sqlite.execute(
                    """
                    INSERT INTO app_settings (key, value)
                    VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value      = excluded.value,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (key, value),
                )
                self._db.sqlite.commit()
            self._logger.info("app_settings[%s] updated.", key)
            return True
        except Exception as exc:
            self._logger.error("Failed to write app_settings[%s]: %s", key, exc)
            return False

    def get_bool(self, key: str, default: bool) -> bool:
        raw = self.get(key)
        if raw is None:
            return default
        return raw.strip().lower() in _TRUE_VALUES

    def set_bool(self, key: str, value: bool) -> bool:
        return self.set(key, "true" if value else "false")

    # ------------------------------------------------------------------
    # Typed convenience
    # ------------------------------------------------------------------

    def get_dark_mode(self, default: bool = False) -> bool:
        """Stored screen-display theme; *default* is the system appearance."""
        return self.get_bool(_KEY_DARK_MODE, default)

    def set_dark_mode(self, enabled: bool) -> bool:
        return self.set_bool(_KEY_DARK_MODE, enabled)

    def get_auto_scroll(self, default: bool = True) -> bool:
        return self.get_bool(_KEY_AUTO_SCROLL, default)

    def set_auto_scroll(self, enabled: bool) -> bool:
        return self.set_bool(_KEY_AUTO_SCROLL, enabled)

    def get_last_export_dir(self) -> Optional[str]:
        return self.get(_KEY_LAST_EXPORT_DIR)

    def set_last_export_dir(self, path: str) -> bool:
        return self.set(_KEY_LAST_EXPORT_DIR, path)
