"""ArtifactStore: pluggable storage for cached analysis artifacts.

Blobs are addressed by slash-separated paths and stored either on the local
filesystem or on an HTTP/WebDAV origin.

Example:
    >>> from ArtifactStore import HttpFileStorage, HttpStorageConfig
    >>> storage = HttpFileStorage(HttpStorageConfig(url="https://store.example/art"))
"""

from .errors import (
    ArtifactStoreError,
    ConfigurationError,
    StorageError,
    StorageNotFoundError,
    UnsafeStoragePathError,
)
from .logging_config import configure_logging, setup_logging
from .settings import HttpStorageConfig, StorageSettings, load_settings
from .storage import (
    FileStorage,
    HttpFileStorage,
    LocalFileStorage,
    get_storage_backend,
)

__all__ = [
    "ArtifactStoreError",
    "ConfigurationError",
    "StorageError",
    "StorageNotFoundError",
    "UnsafeStoragePathError",
    "configure_logging",
    "setup_logging",
    "HttpStorageConfig",
    "StorageSettings",
    "load_settings",
    "FileStorage",
    "HttpFileStorage",
    "LocalFileStorage",
    "get_storage_backend",
]

__version__ = "0.1.0"
