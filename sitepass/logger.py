"""
Kiosk logging.

Every part of the kiosk (sign-in forms, the team leader board, the realtime
listener, audit events) writes one JSON object per line.  Lines go to stdout
for whoever launched the kiosk and to a rotating file so an unattended site
PC keeps a bounded history.  Logger names live under the ``sitepass.``
namespace, e.g. ``sitepass.dashboard``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO, Union

ROOT_LOGGER_NAME = "sitepass"


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp`` (UTC, ISO-8601), ``level``, ``logger_name``,
    ``message``, plus ``extra`` for caller context (values stringified)
    and ``exception`` when a traceback is attached.
    """

    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Union[str, dict[str, str]]] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        context = {
            key: str(value)
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if context:
            entry["extra"] = context

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False)


def qualified_name(name: str) -> str:
    """Place *name* under the ``sitepass`` namespace unless it already is."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


class StructuredLogger:
    """Logger handed to repositories, services and views.

    Level, log file and rotation default to ``LOG_LEVEL``, ``LOG_FILE``,
    ``LOG_MAX_BYTES`` and ``LOG_BACKUP_COUNT`` from :class:`AppConfig`.
    Handlers are attached once per name; records do not propagate, so a
    line is never written twice when parent and child both have handlers.

    Usage::

        log = StructuredLogger(name="sign_in")
        log.info("Sign-in recorded", extra={"company": "Acme Rail"})
    """

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: Optional[int] = None,
        stream: Union[TextIO, None] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Deferred so importing this module does not load settings.
        from sitepass.config import get_config
        cfg = get_config()

        resolved_level = level if level is not None else logging.getLevelName(cfg.LOG_LEVEL.upper())
        if not isinstance(resolved_level, int):
            resolved_level = logging.INFO

        self._logger: logging.Logger = logging.getLogger(qualified_name(name))
        self._logger.setLevel(resolved_level)
        self._logger.propagate = False

        if not self._logger.handlers:
            self._attach_handlers(
                level=resolved_level,
                stream=stream or sys.stdout,
                log_file=log_file or cfg.LOG_FILE,
                max_bytes=max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backup_count=backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
            )

    def _attach_handlers(
        self,
        level: int,
        stream: TextIO,
        log_file: str,
        max_bytes: int,
        backup_count: int,
    ) -> None:
        formatter = JSONFormatter()

        console = logging.StreamHandler(stream)
        console.setLevel(level)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        # A read-only install folder must not stop the kiosk from starting.
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            rotating = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.warning(
                "Could not open log file '%s': %s. Logging to console only.",
                log_file,
                exc,
            )
            return
        rotating.setLevel(level)
        rotating.setFormatter(formatter)
        self._logger.addHandler(rotating)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    # -- Convenience delegates ------------------------------------------------

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = ROOT_LOGGER_NAME) -> StructuredLogger:
    """``StructuredLogger`` for one kiosk component, e.g. ``get_logger("screen")``."""
    return StructuredLogger(name=name)
