# === NAVMAP v1 ===
# {
#   "module": "ArtifactStore.network.client",
#   "purpose": "HTTPX + Hishel HTTP Client Factory.",
#   "sections": [
#     {
#       "id": "lazyhttpclient",
#       "name": "LazyHttpClient",
#       "anchor": "class-lazyhttpclient",
#       "kind": "class"
#     },
#     {
#       "id": "create-http-client",
#       "name": "create_http_client",
#       "anchor": "function-create-http-client",
#       "kind": "function"
#     },
#     {
#       "id": "create-ssl-context",
#       "name": "_create_ssl_context",
#       "anchor": "function-create-ssl-context",
#       "kind": "function"
#     },
#     {
#       "id": "create-cache-transport",
#       "name": "_create_cache_transport",
#       "anchor": "function-create-cache-transport",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""HTTPX + Hishel HTTP Client Factory.

Builds the pooled HTTP client used by the HTTP storage backend and wraps it in
a lazily initialised, thread-safe holder.

Key design:
- **Lazy initialization**: the client is created on first use, not when the
  backend is constructed.
- **PID-aware**: if the process forks, the child detects this and rebuilds the
  client on first use to avoid sharing sockets with the parent.
- **Thread-safe**: a ``threading.Lock`` guards creation; the client itself is
  safe for concurrent requests.
- **Caching**: optional Hishel FileStorage cache for GET/HEAD, honouring the
  ``Cache-Control: max-age`` directive sent with each request.
- **Streaming**: responses are never buffered by the factory; callers decide.

Example:
    >>> from ArtifactStore.network.client import LazyHttpClient, create_http_client
    >>> holder = LazyHttpClient(create_http_client)
    >>> response = holder.get().head("https://store.example/art/file.yml")
    >>> holder.close()
"""

from __future__ import annotations

import logging
import os
import ssl
import threading
from pathlib import Path
from typing import Callable, Optional, Union

import certifi
import hishel
import httpx

from ArtifactStore.network.instrumentation import create_http_event_hooks
from ArtifactStore.network.policy import (
    ALLOW_HEURISTIC_CACHING,
    CACHE_STORAGE_CHECK_INTERVAL_SECONDS,
    CACHE_STORAGE_TTL_SECONDS,
    CACHEABLE_METHODS,
    CACHEABLE_STATUS_CODES,
    FOLLOW_REDIRECTS,
    HTTP2_ENABLED,
    HTTP_CONNECT_TIMEOUT,
    HTTP_POOL_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_WRITE_TIMEOUT,
    KEEPALIVE_EXPIRY,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
    TLS_VERIFY_ENABLED,
    TRANSPORT_RETRIES,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Lazy Client Holder
# ============================================================================


class LazyHttpClient:
    """Create an :class:`httpx.Client` on first use and reuse it afterwards."""

    def __init__(self, factory: Callable[[], httpx.Client]) -> None:
        self._factory = factory
        self._client: Optional[httpx.Client] = None
        self._bind_pid: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._client is not None

    def get(self) -> httpx.Client:
        """Return the shared client, creating it if needed.

        Behavior:
            - First call: creates the client and binds it to the current PID.
            - Subsequent calls: return the same client (thread-safe).
            - Process forked: the child closes the inherited client and
              rebuilds on its first call.
        """
        client = self._client
        if client is not None and self._bind_pid == os.getpid():
            return client

        with self._lock:
            # Double-check after lock acquired
            if self._client is not None and self._bind_pid == os.getpid():
                return self._client

            if self._client is not None:
                logger.debug("Process forked; closing inherited HTTP client and rebuilding.")
                self._close_quietly(self._client)
                self._client = None

            self._client = self._factory()
            self._bind_pid = os.getpid()
            logger.debug("HTTP client initialized", extra={"pid": self._bind_pid})
            return self._client

    def close(self) -> None:
        """Close the client and release pooled connections.

        Safe to call multiple times or when no client has been created.
        """
        with self._lock:
            if self._client is None:
                return
            try:
                self._client.close()
                logger.debug("HTTP client closed")
            finally:
                self._client = None
                self._bind_pid = None

    @staticmethod
    def _close_quietly(client: httpx.Client) -> None:
        try:
            client.close()
        except (OSError, RuntimeError) as exc:
            logger.debug(f"Error closing inherited client: {exc}")


# ============================================================================
# Client Factory
# ============================================================================


def create_http_client(
    *,
    verify_tls: bool = TLS_VERIFY_ENABLED,
    cache_dir: Optional[Union[str, Path]] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create an HTTPX client with bounded pooling and optional caching.

    Configuration:
    - Timeouts: connect only; reads and writes are not bounded
    - Connection pooling: few idle connections, kept alive for a minute
    - HTTP/2: negotiated when the origin supports it
    - Redirects: disabled
    - Caching: Hishel RFC 9111 file cache when ``cache_dir`` is given
    - Hooks: debug logging of every exchange

    Args:
        verify_tls: Verify server certificates against the certifi bundle.
        cache_dir: Directory for the Hishel response cache; ``None`` disables it.
        transport: Replace the network transport (used by tests).

    Returns:
        Fully configured httpx.Client ready for use
    """
    ssl_ctx = _create_ssl_context(verify_tls)

    base_transport = transport or httpx.HTTPTransport(
        verify=ssl_ctx,
        http2=HTTP2_ENABLED,
        limits=httpx.Limits(
            max_connections=MAX_CONNECTIONS,
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=KEEPALIVE_EXPIRY,
        ),
        retries=TRANSPORT_RETRIES,
    )
    if cache_dir is not None:
        base_transport = _create_cache_transport(base_transport, Path(cache_dir))

    client = httpx.Client(
        transport=base_transport,
        timeout=httpx.Timeout(
            connect=HTTP_CONNECT_TIMEOUT,
            read=HTTP_READ_TIMEOUT,
            write=HTTP_WRITE_TIMEOUT,
            pool=HTTP_POOL_TIMEOUT,
        ),
        follow_redirects=FOLLOW_REDIRECTS,
        event_hooks=create_http_event_hooks(),
    )

    logger.debug(
        "HTTPX client created",
        extra={
            "http2": HTTP2_ENABLED,
            "max_keepalive": MAX_KEEPALIVE_CONNECTIONS,
            "keepalive_expiry": KEEPALIVE_EXPIRY,
            "cache_dir": str(cache_dir) if cache_dir is not None else None,
        },
    )

    return client


def _create_ssl_context(verify_tls: bool) -> ssl.SSLContext:
    """Create SSL context with secure defaults.

    Uses the certifi bundle for verification. With ``verify_tls`` off the
    context accepts any certificate, which is only meant for development
    servers with self-signed certificates.
    """
    if not verify_tls:
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        logger.warning("TLS verification DISABLED (development only!)")
        return ctx

    ctx = ssl.create_default_context(cafile=certifi.where())
    ctx.check_hostname = True
    ctx.verify_mode = ssl.CERT_REQUIRED
    return ctx


def _create_cache_transport(
    transport: httpx.BaseTransport, cache_dir: Path
) -> hishel.CacheTransport:
    """Wrap ``transport`` with a Hishel file cache rooted at ``cache_dir``."""
    cache_dir.mkdir(parents=True, exist_ok=True)

    cache_storage = hishel.FileStorage(
        base_path=cache_dir,
        ttl=CACHE_STORAGE_TTL_SECONDS,
        check_ttl_every=CACHE_STORAGE_CHECK_INTERVAL_SECONDS,
    )
    cache_controller = hishel.Controller(
        cacheable_methods=CACHEABLE_METHODS,
        cacheable_status_codes=CACHEABLE_STATUS_CODES,
        allow_heuristics=ALLOW_HEURISTIC_CACHING,
    )
    return hishel.CacheTransport(
        transport=transport,
        storage=cache_storage,
        controller=cache_controller,
    )


__all__ = [
    "LazyHttpClient",
    "create_http_client",
]
