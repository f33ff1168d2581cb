"""Tests for storage configuration and the backend factory."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ArtifactStore.errors import ConfigurationError
from ArtifactStore.settings import HttpStorageConfig, StorageSettings, load_settings
from ArtifactStore.storage import HttpFileStorage, LocalFileStorage, get_storage_backend


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Isolate from the developer's environment and any local .env file."""
    import os

    for key in list(os.environ):
        if key.startswith("ARTIFACT_STORAGE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


class TestHttpStorageConfig:

    def test_defaults(self):
        config = HttpStorageConfig(url="https://store.example/art")
        assert config.query == ""
        assert config.headers == {}
        assert config.cache_max_age_seconds == 0
        assert config.verify_tls is True
        assert config.cache_dir is None

    def test_trailing_slash_stripped(self):
        assert HttpStorageConfig(url="https://store.example/art/").url == "https://store.example/art"

    def test_query_gets_question_mark(self):
        config = HttpStorageConfig(url="https://store.example", query="user=u&pwd=p")
        assert config.query == "?user=u&pwd=p"

    def test_query_kept_when_already_prefixed(self):
        config = HttpStorageConfig(url="https://store.example", query="?user=u")
        assert config.query == "?user=u"

    @pytest.mark.parametrize("url", ["ftp://store.example", "store.example/art", ""])
    def test_rejects_non_http_urls(self, url):
        with pytest.raises(ValidationError):
            HttpStorageConfig(url=url)

    def test_rejects_negative_max_age(self):
        with pytest.raises(ValidationError):
            HttpStorageConfig(url="https://store.example", cache_max_age_seconds=-1)

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            HttpStorageConfig(url="https://store.example", password="x")

    def test_is_immutable(self):
        config = HttpStorageConfig(url="https://store.example")
        with pytest.raises(ValidationError):
            config.url = "https://other.example"


class TestStorageSettings:

    def test_defaults_to_local_backend(self):
        settings = load_settings()
        assert settings.backend == "local"
        assert settings.local_root.is_absolute()
        assert settings.log_level == "INFO"

    def test_reads_http_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("ARTIFACT_STORAGE_BACKEND", "http")
        monkeypatch.setenv("ARTIFACT_STORAGE_HTTP_URL", "https://store.example/art/")
        monkeypatch.setenv("ARTIFACT_STORAGE_HTTP_QUERY", "?token=abc")
        monkeypatch.setenv("ARTIFACT_STORAGE_HTTP_HEADERS", '{"X-Api-Key": "k"}')
        monkeypatch.setenv("ARTIFACT_STORAGE_CACHE_MAX_AGE_SECONDS", "300")

        config = load_settings().http_config()

        assert config.url == "https://store.example/art"
        assert config.query == "?token=abc"
        assert config.headers == {"X-Api-Key": "k"}
        assert config.cache_max_age_seconds == 300

    def test_http_config_requires_url(self):
        settings = StorageSettings(backend="http")
        with pytest.raises(ConfigurationError, match="HTTP_URL"):
            settings.http_config()

    def test_http_config_wraps_validation_errors(self):
        settings = StorageSettings(backend="http", http_url="ftp://store.example")
        with pytest.raises(ConfigurationError):
            settings.http_config()

    def test_invalid_environment_raises_configuration_error(self, monkeypatch):
        monkeypatch.setenv("ARTIFACT_STORAGE_BACKEND", "s3")
        with pytest.raises(ConfigurationError):
            load_settings()

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("ARTIFACT_STORAGE_LOG_LEVEL", "debug")
        assert load_settings().log_level == "DEBUG"

    def test_local_root_expanded(self, tmp_path):
        settings = StorageSettings(local_root=str(tmp_path / "x" / ".." / "store"))
        assert settings.local_root == (tmp_path / "store").resolve()


class TestGetStorageBackend:

    def test_local_backend(self, tmp_path):
        backend = get_storage_backend(StorageSettings(local_root=tmp_path))
        assert isinstance(backend, LocalFileStorage)
        assert backend.root == tmp_path.resolve()

    def test_http_backend(self):
        settings = StorageSettings(backend="http", http_url="https://store.example/art")
        backend = get_storage_backend(settings)
        assert isinstance(backend, HttpFileStorage)
        assert backend.url == "https://store.example/art"

    def test_reads_environment_when_settings_omitted(self, monkeypatch):
        monkeypatch.setenv("ARTIFACT_STORAGE_BACKEND", "http")
        monkeypatch.setenv("ARTIFACT_STORAGE_HTTP_URL", "https://store.example/art")
        assert isinstance(get_storage_backend(), HttpFileStorage)

    def test_http_backend_without_url_fails(self):
        with pytest.raises(ConfigurationError):
            get_storage_backend(StorageSettings(backend="http"))
