"""Network subsystem: HTTP client, caching and address helpers.

This package provides the HTTP stack the remote storage backend runs on:
- HTTPX: HTTP/1.1 and HTTP/2 client with connection pooling
- Hishel: RFC 9111-compliant HTTP caching for GET and HEAD

Modules:
- client: HTTPX client factory and lazy, PID-aware client holder
- policy: HTTP policy constants (timeouts, pooling, caching)
- instrumentation: Request/response hooks for structured logging
- urls: Path escaping and address construction
"""

from ArtifactStore.network.client import LazyHttpClient, create_http_client
from ArtifactStore.network.instrumentation import create_http_event_hooks
from ArtifactStore.network.policy import (
    HTTP2_ENABLED,
    HTTP_CONNECT_TIMEOUT,
    KEEPALIVE_EXPIRY,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
)
from ArtifactStore.network.urls import (
    build_url,
    collection_prefixes,
    encode_path_for_http,
    redact_url,
)

__all__ = [
    # Client lifecycle
    "LazyHttpClient",
    "create_http_client",
    # Timeouts and pooling
    "HTTP_CONNECT_TIMEOUT",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "KEEPALIVE_EXPIRY",
    "HTTP2_ENABLED",
    # Instrumentation
    "create_http_event_hooks",
    # Addressing
    "build_url",
    "collection_prefixes",
    "encode_path_for_http",
    "redact_url",
]
