"""Shared fixtures for the storage test suite."""

from __future__ import annotations

from typing import Iterator

import pytest

from ArtifactStore.settings import HttpStorageConfig
from ArtifactStore.storage import HttpFileStorage, LocalFileStorage
from ArtifactStore.testing import WebDavOrigin

BASE_URL = "https://store.example/art"


@pytest.fixture
def origin() -> WebDavOrigin:
    """Fresh in-memory WebDAV origin serving ``BASE_URL``."""
    return WebDavOrigin(BASE_URL)


@pytest.fixture
def http_config() -> HttpStorageConfig:
    return HttpStorageConfig(url=BASE_URL)


@pytest.fixture
def http_storage(origin: WebDavOrigin, http_config: HttpStorageConfig) -> Iterator[HttpFileStorage]:
    """HTTP backend wired to ``origin`` through an httpx MockTransport."""
    with HttpFileStorage(http_config, transport=origin.transport()) as storage:
        yield storage


@pytest.fixture
def local_storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "artifacts")
