"""Address construction helpers for path-addressed HTTP storage."""

from __future__ import annotations

from typing import List
from urllib.parse import urlsplit, urlunsplit

from ArtifactStore.errors import UnsafeStoragePathError

__all__ = [
    "encode_path_for_http",
    "build_url",
    "collection_prefixes",
    "redact_url",
]

# Clients collapse these before sending, which would merge or drop segments.
_DOT_SEGMENTS = frozenset({".", ".."})


def encode_path_for_http(path: str) -> str:
    """Escape transport-reserved sequences inside a storage path.

    Every literal ``%`` becomes ``%25``, so after the origin decodes the
    request target once the segment reads exactly as the caller wrote it.  In
    particular ``%2F`` is sent as ``%252F`` and can never be taken for a
    separator, and ``a%2Fb`` and ``a%252Fb`` stay distinct paths.  Query and
    fragment delimiters are percent-encoded so they stay part of the path.

    Raises:
        UnsafeStoragePathError: If a segment is ``.`` or ``..``.

    Examples:
        >>> encode_path_for_http("maven/org%2Fexample/result.yml")
        'maven/org%252Fexample/result.yml'
        >>> encode_path_for_http("what?#")
        'what%3F%23'
    """

    if any(segment in _DOT_SEGMENTS for segment in path.split("/")):
        raise UnsafeStoragePathError(f"unsafe storage path: {path!r}")
    escaped = path.replace("%", "%25")
    return escaped.replace("?", "%3F").replace("#", "%23")


def build_url(base_url: str, path: str, query: str = "") -> str:
    """Return ``base_url`` + ``/`` + ``path`` + ``query`` in that order.

    ``path`` must already be escaped with :func:`encode_path_for_http`.
    """

    return f"{base_url.rstrip('/')}/{path.lstrip('/')}{query}"


def collection_prefixes(path: str) -> List[str]:
    """Return the ancestor collections of ``path`` from root to leaf.

    The final segment names the file itself and is not included. Each prefix
    carries a trailing slash, as WebDAV expects for collection addresses.

    Examples:
        >>> collection_prefixes("a/b/c/file.txt")
        ['a/', 'a/b/', 'a/b/c/']
        >>> collection_prefixes("file.txt")
        []
    """

    prefixes: List[str] = []
    current = ""
    for segment in path.lstrip("/").split("/")[:-1]:
        current = f"{current}{segment}/"
        prefixes.append(current)
    return prefixes


def redact_url(url: str) -> str:
    """Strip query and fragment from ``url`` for logging.

    Static query suffixes frequently carry credentials, so they never reach
    log records.
    """

    try:
        parsed = urlsplit(url)
    except ValueError:
        return "[URL_REDACTION_FAILED]"
    return urlunsplit((parsed.scheme, parsed.netloc, parsed.path, "", ""))
