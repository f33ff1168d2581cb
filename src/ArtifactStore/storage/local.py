"""Local filesystem storage backend.

Blobs live at ``{root}/{path}``.  Writes go to a temporary sibling file that
is fsynced and atomically renamed into place, so a reader never observes a
partially written blob.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional, Union

from ..errors import StorageError, StorageNotFoundError, UnsafeStoragePathError

__all__ = ["LocalFileStorage"]

logger = logging.getLogger(__name__)


class LocalFileStorage:
    """A file storage that keeps blobs below a local directory."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).expanduser().resolve()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(root={str(self.root)!r})"

    def _abs(self, path: str) -> Path:
        """Convert a storage path to an absolute path below :attr:`root`.

        Raises:
            UnsafeStoragePathError: If path is unsafe (traversal, backslash, empty)
        """
        parts = PurePosixPath(path.lstrip("/")).parts
        dot_segment = any(segment in (".", "..") for segment in path.split("/"))
        if not parts or dot_segment or "\\" in path:
            raise UnsafeStoragePathError(f"unsafe storage path: {path!r}")
        return self.root.joinpath(*parts)

    def exists(self, path: str) -> bool:
        return self._abs(path).is_file()

    def read(self, path: str) -> BinaryIO:
        file = self._abs(path)
        logger.debug("Reading file from storage", extra={"file": str(file)})
        try:
            return file.open("rb")
        except FileNotFoundError as exc:
            raise StorageNotFoundError(f"Could not read from '{file}': not found") from exc
        except OSError as exc:
            raise StorageError(f"Could not read from '{file}': {exc}") from exc

    def write(self, path: str, stream: BinaryIO) -> None:
        """Store ``stream`` at ``path``; the stream is read fully and closed."""
        dest = self._abs(path)
        with stream:
            data = stream.read()
        logger.debug(
            "Writing file to storage", extra={"file": str(dest), "size_bytes": len(data)}
        )

        tmp: Optional[Path] = None
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            # One temp file per call; concurrent writers to a path must not share it.
            fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f"{dest.name}.tmp-")
            tmp = Path(tmp_name)
            with os.fdopen(fd, "wb") as wf:
                wf.write(data)
                wf.flush()
                os.fsync(wf.fileno())
            os.replace(tmp, dest)
        except OSError as exc:
            if tmp is not None:
                tmp.unlink(missing_ok=True)
            raise StorageError(f"Could not store file at '{dest}': {exc}") from exc
