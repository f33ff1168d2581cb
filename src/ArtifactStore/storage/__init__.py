"""Storage backends for cached artifacts.

``get_storage_backend`` picks the backend named by the ``ARTIFACT_STORAGE_*``
settings: the local filesystem by default, or an HTTP/WebDAV origin.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..settings import StorageSettings, load_settings
from .base import FileStorage
from .http import HttpFileStorage, HttpResponseStream
from .local import LocalFileStorage

__all__ = [
    "FileStorage",
    "HttpFileStorage",
    "HttpResponseStream",
    "LocalFileStorage",
    "get_storage_backend",
]

logger = logging.getLogger(__name__)


def get_storage_backend(
    settings: Optional[StorageSettings] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> FileStorage:
    """Instantiate the storage backend described by ``settings``.

    Args:
        settings: Settings to use; read from the environment when omitted.
        transport: Network transport override for the HTTP backend.

    Raises:
        ConfigurationError: If the settings are incomplete or invalid.
    """
    settings = settings or load_settings()
    if settings.backend == "http":
        backend: FileStorage = HttpFileStorage(settings.http_config(), transport=transport)
    else:
        backend = LocalFileStorage(settings.local_root)
    logger.debug("storage backend selected", extra={"backend": repr(backend)})
    return backend
