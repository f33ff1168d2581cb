"""Storage contract shared by all artifact backends.

A backend stores opaque byte blobs at caller-chosen, slash-separated paths.
There is no listing, deletion or metadata beyond existence; a write replaces
whatever was stored at the path before.

NAVMAP:
  - FileStorage: Protocol every backend implements
  - Core Methods:
    * exists: metadata-only check
    * read: lazily delivered byte stream
    * write: whole-blob replace
"""

from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class FileStorage(Protocol):
    """Abstract storage backend interface.

    Implementation Notes:
      - ``exists`` returns ``False`` only on an authoritative "not found";
        any other failure raises :class:`~ArtifactStore.errors.StorageError`
      - ``read`` never returns an empty stream for a missing path
      - ``write`` consumes and closes the input stream before persisting
    """

    def exists(self, path: str) -> bool:
        """Return whether ``path`` resolves to retrievable content.

        Raises:
            StorageError: If the backend cannot answer authoritatively
        """
        ...

    def read(self, path: str) -> BinaryIO:
        """Return a single-pass stream over the blob stored at ``path``.

        The caller owns the stream and must close it (or read it to the end)
        to release the resources backing it.

        Raises:
            StorageNotFoundError: If nothing is stored at ``path``
            StorageError: On any other failure
        """
        ...

    def write(self, path: str, stream: BinaryIO) -> None:
        """Store the full content of ``stream`` at ``path``.

        Raises:
            StorageError: If the content cannot be persisted
        """
        ...
