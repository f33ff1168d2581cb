"""Exception hierarchy shared by the storage backends.

Backends translate transport failures, unexpected HTTP statuses and unsafe
paths into the classes below so callers only ever need to catch
:class:`StorageError`.  The HTTP context of a failure (target address, status
code and server reason) is kept on the exception as structured fields rather
than buried in the message.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "ArtifactStoreError",
    "StorageError",
    "StorageNotFoundError",
    "UnsafeStoragePathError",
    "ConfigurationError",
]


class ArtifactStoreError(RuntimeError):
    """Base exception for artifact storage failures."""


class StorageError(ArtifactStoreError):
    """Raised when a storage backend cannot complete an operation."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.reason = reason


class StorageNotFoundError(StorageError):
    """Raised when a read targets a path the backend does not hold."""


class UnsafeStoragePathError(StorageError, ValueError):
    """Raised when a storage path would resolve outside the storage root."""


class ConfigurationError(ArtifactStoreError):
    """Raised when backend configuration or settings are invalid."""


# === NAVMAP v1 ===
# {
#   "module": "ArtifactStore.errors",
#   "purpose": "Define the exception hierarchy raised by storage backends",
#   "sections": [
#     {"id": "base", "name": "Base Exceptions", "anchor": "BAS", "kind": "api"},
#     {"id": "storage", "name": "Storage Errors", "anchor": "STO", "kind": "api"},
#     {"id": "configuration", "name": "Configuration Errors", "anchor": "CFG", "kind": "api"}
#   ]
# }
# === /NAVMAP ===
