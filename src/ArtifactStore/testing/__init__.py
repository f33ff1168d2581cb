"""Testing utilities for code that talks to an HTTP/WebDAV storage origin.

:class:`WebDavOrigin` is an in-memory origin server usable as an
:class:`httpx.MockTransport` handler.  It understands ``HEAD``, ``GET``,
``PUT`` and ``MKCOL`` with WebDAV collection semantics, percent-decodes the
request target once per segment like a real server does, and records every
request so tests can assert on the exact wire traffic.

Example:
    >>> origin = WebDavOrigin("https://store.example/art")
    >>> storage = HttpFileStorage(
    ...     HttpStorageConfig(url="https://store.example/art"),
    ...     transport=origin.transport(),
    ... )  # doctest: +SKIP
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Set, Tuple
from urllib.parse import unquote, urlsplit

import httpx

__all__ = [
    "RequestRecord",
    "WebDavOrigin",
]

Key = Tuple[str, ...]


@dataclass
class RequestRecord:
    """Captured HTTP request received by the origin."""

    method: str
    path: str
    query: str
    headers: Mapping[str, str]
    body: bytes
    status: int = 0


@dataclass
class _ForcedStatus:
    status: int
    remaining: Optional[int] = None


class WebDavOrigin:
    """In-memory WebDAV origin for :class:`httpx.MockTransport`.

    Args:
        base_url: Address the storage backend is configured with; request
            targets are interpreted relative to its path.
        missing_parent_status: Status answered to a ``PUT`` below a collection
            that does not exist.  WebDAV servers commonly reply ``404``.
    """

    def __init__(self, base_url: str, *, missing_parent_status: int = 404) -> None:
        self.base_path = urlsplit(base_url).path.rstrip("/")
        self.missing_parent_status = missing_parent_status
        self.files: Dict[Key, bytes] = {}
        self.collections: Set[Key] = {()}
        self.requests: List[RequestRecord] = []
        self._forced: Dict[str, _ForcedStatus] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Test setup helpers
    # ------------------------------------------------------------------ #

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def force_status(self, method: str, status: int, *, times: Optional[int] = None) -> None:
        """Answer ``method`` requests with ``status`` (``times`` times, or always)."""
        self._forced[method.upper()] = _ForcedStatus(status=status, remaining=times)

    def add_file(self, path: str, content: bytes) -> None:
        """Store ``content`` at ``path``, creating its collections implicitly."""
        key = tuple(path.strip("/").split("/"))
        for depth in range(1, len(key)):
            self.collections.add(key[:depth])
        self.files[key] = content

    def get_file(self, path: str) -> Optional[bytes]:
        return self.files.get(tuple(path.strip("/").split("/")))

    def requests_for(self, method: str) -> List[RequestRecord]:
        return [record for record in self.requests if record.method == method.upper()]

    # ------------------------------------------------------------------ #
    # Request handling
    # ------------------------------------------------------------------ #

    def __call__(self, request: httpx.Request) -> httpx.Response:
        raw_target = request.url.raw_path.decode("ascii")
        raw_path, _, query = raw_target.partition("?")
        relative = raw_path[len(self.base_path):] if raw_path.startswith(self.base_path) else raw_path
        relative = relative.lstrip("/")

        record = RequestRecord(
            method=request.method,
            path=relative,
            query=query,
            headers=dict(request.headers),
            body=request.read(),
        )

        with self._lock:
            response = self._forced_response(request.method)
            if response is None:
                response = self._dispatch(request.method, relative, record.body)
            record.status = response.status_code
            self.requests.append(record)
        return response

    def _forced_response(self, method: str) -> Optional[httpx.Response]:
        forced = self._forced.get(method)
        if forced is None:
            return None
        if forced.remaining is not None:
            forced.remaining -= 1
            if forced.remaining <= 0:
                del self._forced[method]
        return httpx.Response(forced.status)

    def _dispatch(self, method: str, relative: str, body: bytes) -> httpx.Response:
        segments = tuple(unquote(segment) for segment in relative.split("/"))
        is_collection_target = segments[-1] == ""
        key = segments[:-1] if is_collection_target else segments

        if method == "MKCOL":
            return self._mkcol(key)
        if is_collection_target:
            return httpx.Response(405)
        if method == "PUT":
            return self._put(key, body)
        if method in ("GET", "HEAD"):
            content = self.files.get(key)
            if content is None:
                return httpx.Response(404)
            if method == "HEAD":
                return httpx.Response(200)
            return httpx.Response(200, content=content)
        return httpx.Response(405)

    def _mkcol(self, key: Key) -> httpx.Response:
        if key in self.collections or key in self.files:
            return httpx.Response(405)
        if key[:-1] not in self.collections:
            return httpx.Response(409)
        self.collections.add(key)
        return httpx.Response(201)

    def _put(self, key: Key, body: bytes) -> httpx.Response:
        if key in self.collections:
            return httpx.Response(405)
        if key[:-1] not in self.collections:
            return httpx.Response(self.missing_parent_status)
        created = key not in self.files
        self.files[key] = body
        return httpx.Response(201 if created else 204)

