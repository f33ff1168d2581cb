"""HTTP/WebDAV storage backend.

Implements the :class:`~ArtifactStore.storage.base.FileStorage` protocol on
top of plain HTTP verbs: ``HEAD`` for existence checks, ``GET`` for reads and
``PUT`` for writes.  WebDAV origins reject a ``PUT`` below a collection that
does not exist yet with ``404``; in that case every ancestor collection is
created with ``MKCOL`` (one level per call, root first) and the ``PUT`` is
retried once.

NAVMAP:
  - HttpFileStorage: Backend implementation
  - HttpResponseStream: Raw stream releasing the connection at EOF or close
  - Core Features:
    * Lazily created, pooled HTTPX client per backend instance
    * Cache-Control max-age on HEAD/GET
    * MKCOL recovery for missing collections
"""

from __future__ import annotations

import io
import logging
from functools import partial
from typing import BinaryIO, Iterator, Mapping, Optional

import httpx

from ..errors import StorageError, StorageNotFoundError
from ..network.client import LazyHttpClient, create_http_client
from ..network.urls import build_url, collection_prefixes, encode_path_for_http, redact_url
from ..settings import HttpStorageConfig

__all__ = ["HttpFileStorage", "HttpResponseStream"]

logger = logging.getLogger(__name__)

# Success statuses that by definition carry no message body.
_BODYLESS_SUCCESS_CODES = frozenset({httpx.codes.NO_CONTENT, httpx.codes.RESET_CONTENT})


class HttpResponseStream(io.RawIOBase):
    """Readable raw stream over a streamed :class:`httpx.Response`.

    The response is closed, returning its connection to the pool, as soon as
    the body is exhausted or the stream is closed, whichever happens first.
    """

    def __init__(self, response: httpx.Response) -> None:
        super().__init__()
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_bytes()
        self._pending = b""
        self._exhausted = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        if self.closed:
            raise ValueError("I/O operation on closed stream.")
        while not self._pending:
            if self._exhausted:
                return 0
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                self._exhausted = True
                self._response.close()
                return 0
            except httpx.HTTPError as exc:
                self.close()
                url = str(self._response.request.url)
                raise StorageError(
                    f"Could not read from '{url}': {exc}", url=url
                ) from exc

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if not self.closed:
            self._response.close()
        super().close()


class HttpFileStorage:
    """A file storage that keeps blobs on an HTTP (WebDAV) server.

    Every request targets ``"{url}/{path}{query}"``.  The backend owns one
    HTTPX client, created on first use and shared by all calls, so a single
    instance should be kept per storage location.

    Args:
        config: Where and how to reach the origin.
        transport: Replace the network transport, e.g. with an
            :class:`httpx.MockTransport` in tests.

    Example:
        >>> storage = HttpFileStorage(HttpStorageConfig(url="https://store.example/art"))
        >>> storage.write("proj1/result.yml", io.BytesIO(b"..."))  # doctest: +SKIP
        >>> with storage.read("proj1/result.yml") as stream:  # doctest: +SKIP
        ...     data = stream.read()
    """

    def __init__(
        self,
        config: HttpStorageConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config
        self._headers: Mapping[str, str] = dict(config.headers)
        self._client = LazyHttpClient(
            partial(
                create_http_client,
                verify_tls=config.verify_tls,
                cache_dir=config.cache_dir,
                transport=transport,
            )
        )

    @property
    def url(self) -> str:
        return self.config.url

    @property
    def query(self) -> str:
        return self.config.query

    def __enter__(self) -> "HttpFileStorage":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(url={self.config.url!r})"

    def close(self) -> None:
        """Release the pooled connections; the client is rebuilt on next use."""
        self._client.close()

    # ------------------------------------------------------------------ #
    # FileStorage protocol
    # ------------------------------------------------------------------ #

    def exists(self, path: str) -> bool:
        url = self._url_for_path(encode_path_for_http(path))
        response = self._send("HEAD", url, headers=self._read_headers())
        logger.debug(
            "Checked file existence in storage",
            extra={"url": redact_url(url), "status": response.status_code},
        )
        return response.is_success

    def read(self, path: str) -> BinaryIO:
        url = self._url_for_path(encode_path_for_http(path))
        logger.debug("Reading file from storage", extra={"url": redact_url(url)})

        response = self._send("GET", url, headers=self._read_headers(), stream=True)
        if response.is_success:
            if response.status_code in _BODYLESS_SUCCESS_CODES:
                response.close()
                raise StorageError(
                    "The response body must not be null.",
                    url=url,
                    status_code=response.status_code,
                    reason=response.reason_phrase,
                )
            return io.BufferedReader(HttpResponseStream(response))

        response.close()
        error_type = (
            StorageNotFoundError
            if response.status_code == httpx.codes.NOT_FOUND
            else StorageError
        )
        raise error_type(
            f"Could not read from '{url}': {response.status_code} - {response.reason_phrase}",
            url=url,
            status_code=response.status_code,
            reason=response.reason_phrase,
        )

    def write(self, path: str, stream: BinaryIO) -> None:
        """Store ``stream`` at ``path``; the stream is read fully and closed."""
        http_path = encode_path_for_http(path)
        with stream:
            data = stream.read()

        url = self._url_for_path(http_path)
        logger.debug(
            "Writing file to storage", extra={"url": redact_url(url), "size_bytes": len(data)}
        )

        response = self._put(url, data)
        if response.is_success:
            return

        if response.status_code == httpx.codes.NOT_FOUND:
            logger.info(
                "Writing failed with error 404. Retrying after MKCOL",
                extra={"url": redact_url(url)},
            )
            self._write_with_webdav(http_path, data)
            return

        raise self._write_error(url, response)

    # ------------------------------------------------------------------ #
    # WebDAV recovery
    # ------------------------------------------------------------------ #

    def _write_with_webdav(self, http_path: str, data: bytes) -> None:
        self._create_collections(http_path)
        url = self._url_for_path(http_path)
        response = self._put(url, data)
        if not response.is_success:
            raise self._write_error(url, response)

    def _create_collections(self, http_path: str) -> None:
        # MKCOL does not create nested collections in one call.
        for collection_path in collection_prefixes(http_path):
            url = self._url_for_path(collection_path)
            logger.debug("Calling MKCOL", extra={"url": redact_url(url)})
            response = self._send("MKCOL", url, headers=self._headers)
            logger.debug(
                "MKCOL result",
                extra={"url": redact_url(url), "status": response.status_code},
            )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _url_for_path(self, http_path: str) -> str:
        return build_url(self.config.url, http_path, self.config.query)

    def _read_headers(self) -> dict:
        headers = dict(self._headers)
        headers["Cache-Control"] = f"max-age={self.config.cache_max_age_seconds}"
        return headers

    def _put(self, url: str, data: bytes) -> httpx.Response:
        return self._send("PUT", url, headers=self._headers, content=data)

    def _send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        content: Optional[bytes] = None,
        stream: bool = False,
    ) -> httpx.Response:
        """Send one request, translating transport failures into StorageError.

        Non-streamed responses are fully read and closed before returning.
        """
        client = self._client.get()
        try:
            request = client.build_request(method, url, headers=headers, content=content)
            return client.send(request, stream=stream)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise StorageError(f"{method} request to '{url}' failed: {exc}", url=url) from exc

    @staticmethod
    def _write_error(url: str, response: httpx.Response) -> StorageError:
        return StorageError(
            f"Could not store file at '{url}': {response.status_code} - {response.reason_phrase}",
            url=url,
            status_code=response.status_code,
            reason=response.reason_phrase,
        )
