"""Structured logging helpers for the storage backends.

The backends only ever log through ``logging.getLogger(__name__)`` and pass
context via ``extra``.  Applications that want JSON lines can install
:class:`JSONFormatter` with :func:`setup_logging`.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Dict, Optional, TextIO

from ArtifactStore.settings import StorageSettings, load_settings

__all__ = ["JSONFormatter", "configure_logging", "mask_sensitive_data", "setup_logging"]

# Attributes present on every LogRecord; anything else arrived via ``extra``.
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def mask_sensitive_data(payload: Dict[str, object]) -> Dict[str, object]:
    """Remove secrets from structured payloads prior to logging.

    Examples:
        >>> mask_sensitive_data({"authorization": "Basic abc", "status": 201})
        {'authorization': '***masked***', 'status': 201}
    """
    sensitive_keys = {"authorization", "api_key", "apikey", "token", "secret", "password", "pwd"}
    masked: Dict[str, object] = {}
    for key, value in payload.items():
        if key.lower() in sensitive_keys:
            masked[key] = "***masked***"
        else:
            masked[key] = value
    return masked


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record.

    Examples:
        >>> formatter = JSONFormatter()
        >>> isinstance(formatter.format(logging.makeLogRecord({'msg': 'test'})), str)
        True
    """

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.now(timezone.utc)
        log_obj: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_obj[key] = value
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(log_obj), default=str)


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> logging.Logger:
    """Attach a JSON stream handler to the ``ArtifactStore`` logger.

    Calling it again replaces the handler instead of adding another one.
    """
    logger = logging.getLogger("ArtifactStore")
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        if getattr(handler, "_artifact_store_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter())
    handler._artifact_store_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger


def configure_logging(
    settings: Optional[StorageSettings] = None, stream: Optional[TextIO] = None
) -> logging.Logger:
    """Apply ``settings.log_level`` (``ARTIFACT_STORAGE_LOG_LEVEL``) via :func:`setup_logging`."""
    settings = settings or load_settings()
    return setup_logging(settings.log_level, stream=stream)
