"""Configuration models for the artifact storage backends.

Two layers:

* :class:`HttpStorageConfig` is the immutable value an
  :class:`~ArtifactStore.storage.http.HttpFileStorage` is constructed from.
* :class:`StorageSettings` reads the ``ARTIFACT_STORAGE_*`` environment
  variables (or a ``.env`` file) and chooses and configures a backend.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Literal, Optional

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

__all__ = [
    "HttpStorageConfig",
    "StorageSettings",
    "load_settings",
    "default_local_root",
]

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def default_local_root() -> Path:
    """Return the per-user directory used by the local backend by default."""

    return platformdirs.user_data_path("artifact-store") / "artifacts"


class HttpStorageConfig(BaseModel):
    """Immutable description of how to reach an HTTP/WebDAV storage origin.

    Attributes:
        url: Base address every storage path is appended to.
        query: Static query suffix appended to every address, e.g.
            ``"?user=standard&pwd=123"`` for origins that authenticate via
            query parameters.
        headers: Static headers sent with every request.
        cache_max_age_seconds: ``max-age`` sent on existence checks and reads;
            ``0`` always revalidates with the origin.
        verify_tls: Verify the origin certificate.
        cache_dir: Directory for a client-side HTTP cache; disabled when unset.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str
    query: str = ""
    headers: Dict[str, str] = Field(default_factory=dict)
    cache_max_age_seconds: int = Field(default=0, ge=0)
    verify_tls: bool = True
    cache_dir: Optional[Path] = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require an http(s) address and drop trailing slashes."""
        value = v.strip()
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("query")
    @classmethod
    def normalize_query(cls, v: str) -> str:
        """Ensure a non-empty query suffix starts with ``?``."""
        value = v.strip()
        if value and not value.startswith("?"):
            value = f"?{value}"
        return value


class StorageSettings(BaseSettings):
    """Environment-derived storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ARTIFACT_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    backend: Literal["local", "http"] = "local"
    local_root: Path = Field(default_factory=default_local_root)

    http_url: Optional[str] = None
    http_query: str = ""
    http_headers: Dict[str, str] = Field(default_factory=dict)
    cache_max_age_seconds: int = Field(default=0, ge=0)
    http_cache_dir: Optional[Path] = None
    verify_tls: bool = True

    log_level: str = "INFO"

    @field_validator("local_root", mode="before")
    @classmethod
    def normalize_root(cls, v: object) -> Path:
        """Normalize root to absolute path."""
        if isinstance(v, str):
            return Path(v).expanduser().resolve()
        if isinstance(v, Path):
            return v.expanduser().resolve()
        raise ValueError("local_root must be string or Path")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    def http_config(self) -> HttpStorageConfig:
        """Return the :class:`HttpStorageConfig` described by these settings.

        Raises:
            ConfigurationError: If no URL is configured or a value is invalid.
        """
        if not self.http_url:
            raise ConfigurationError(
                "ARTIFACT_STORAGE_HTTP_URL is required for the http storage backend"
            )
        try:
            return HttpStorageConfig(
                url=self.http_url,
                query=self.http_query,
                headers=self.http_headers,
                cache_max_age_seconds=self.cache_max_age_seconds,
                verify_tls=self.verify_tls,
                cache_dir=self.http_cache_dir,
            )
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid HTTP storage configuration: {exc}") from exc


def load_settings() -> StorageSettings:
    """Read :class:`StorageSettings` from the environment.

    Raises:
        ConfigurationError: If an environment value fails validation.
    """
    try:
        settings = StorageSettings()
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid storage settings: {exc}") from exc
    logger.debug(
        "storage settings loaded",
        extra={"backend": settings.backend, "log_level": settings.log_level},
    )
    return settings
