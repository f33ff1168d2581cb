# === NAVMAP v1 ===
# {
#   "module": "ArtifactStore.network.policy",
#   "purpose": "HTTP policy constants and defaults.",
#   "sections": []
# }
# === /NAVMAP ===

"""HTTP policy constants and defaults.

Connection pooling, timeout and caching parameters shared by every HTTPX
client the storage backends create.  The pool is sized for the bursts of
small requests a WebDAV write recovery produces (one MKCOL per ancestor
collection followed by a retried PUT).
"""

# ============================================================================
# Timeout Budgets (seconds)
# ============================================================================

#: Connection establishment timeout (TCP + TLS handshake)
HTTP_CONNECT_TIMEOUT = 30.0

#: Read/write/pool phases are unbounded; callers impose their own deadlines
HTTP_READ_TIMEOUT = None
HTTP_WRITE_TIMEOUT = None
HTTP_POOL_TIMEOUT = None


# ============================================================================
# Connection Pooling
# ============================================================================

#: Maximum concurrent connections per client
MAX_CONNECTIONS = 100

#: Maximum idle connections kept open for reuse
MAX_KEEPALIVE_CONNECTIONS = 5

#: How long an idle connection stays in the pool (seconds)
KEEPALIVE_EXPIRY = 60.0

#: Transport-level connect retries. Storage errors surface to the caller.
TRANSPORT_RETRIES = 0


# ============================================================================
# HTTP/2 Settings
# ============================================================================

#: Negotiate HTTP/2 when the origin offers it; HTTP/1.1 otherwise
HTTP2_ENABLED = True


# ============================================================================
# Hishel RFC 9111 Cache Settings
# ============================================================================

#: Cache storage TTL (garbage collection interval, not freshness)
CACHE_STORAGE_TTL_SECONDS = 7 * 24 * 3600  # 7 days

#: How often to scan cache for expired entries (seconds)
CACHE_STORAGE_CHECK_INTERVAL_SECONDS = 24 * 3600  # once per day

#: Only the read-side verbs are cacheable; PUT and MKCOL always hit the origin
CACHEABLE_METHODS = ["GET", "HEAD"]

#: Cacheable HTTP status codes
CACHEABLE_STATUS_CODES = [200]

#: Only cache responses carrying explicit freshness information
ALLOW_HEURISTIC_CACHING = False


# ============================================================================
# Security
# ============================================================================

#: Verify TLS certificates against the certifi bundle
TLS_VERIFY_ENABLED = True

#: Redirects are not followed; a WebDAV PUT must land on the addressed resource
FOLLOW_REDIRECTS = False


__all__ = [
    # Timeouts
    "HTTP_CONNECT_TIMEOUT",
    "HTTP_READ_TIMEOUT",
    "HTTP_WRITE_TIMEOUT",
    "HTTP_POOL_TIMEOUT",
    # Connection pooling
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "KEEPALIVE_EXPIRY",
    "TRANSPORT_RETRIES",
    # HTTP/2
    "HTTP2_ENABLED",
    # Caching
    "CACHE_STORAGE_TTL_SECONDS",
    "CACHE_STORAGE_CHECK_INTERVAL_SECONDS",
    "CACHEABLE_METHODS",
    "CACHEABLE_STATUS_CODES",
    "ALLOW_HEURISTIC_CACHING",
    # Security
    "TLS_VERIFY_ENABLED",
    "FOLLOW_REDIRECTS",
]
