# === NAVMAP v1 ===
# {
#   "module": "ArtifactStore.network.instrumentation",
#   "purpose": "Request/response event hooks that log every storage HTTP call.",
#   "sections": [
#     {
#       "id": "create-http-event-hooks",
#       "name": "create_http_event_hooks",
#       "anchor": "function-create-http-event-hooks",
#       "kind": "function"
#     },
#     {
#       "id": "get-cache-state",
#       "name": "_get_cache_state",
#       "anchor": "function-get-cache-state",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""HTTP network layer instrumentation.

Emits one ``storage.http`` debug record per completed HTTP exchange with the
method, redacted URL, status, elapsed time and cache state. Hooks run before
the body is read, so they never consume streamed responses.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from ArtifactStore.network.urls import redact_url

logger = logging.getLogger(__name__)

# Start time lives on the request, so a failed exchange leaves nothing behind.
_START_TIME_KEY = "artifact_store.start_time"


def create_http_event_hooks(
    log: Optional[logging.Logger] = None,
) -> Dict[str, List[Callable[[Any], None]]]:
    """Create HTTPX event hooks for request logging.

    Args:
        log: Logger receiving the records; defaults to this module's logger.

    Returns:
        Dict with 'request' and 'response' hooks for an HTTPX client

    Usage:
        >>> import httpx
        >>> hooks = create_http_event_hooks()
        >>> client = httpx.Client(event_hooks=hooks)
    """
    target = log or logger

    def on_request(request: Any) -> None:
        request.extensions[_START_TIME_KEY] = time.perf_counter()

    def on_response(response: Any) -> None:
        start_time = response.request.extensions.get(_START_TIME_KEY)
        elapsed_ms = None
        if start_time is not None:
            elapsed_ms = round((time.perf_counter() - start_time) * 1000, 3)

        target.debug(
            "storage.http",
            extra={
                "method": response.request.method,
                "url_redacted": redact_url(str(response.request.url)),
                "status": response.status_code,
                "http_version": response.http_version,
                "cache": _get_cache_state(response),
                "elapsed_ms": elapsed_ms,
            },
        )

    return {
        "request": [on_request],
        "response": [on_response],
    }


def _get_cache_state(response: Any) -> str:
    """Return ``hit``/``miss`` from the Hishel response extensions."""
    extensions = getattr(response, "extensions", None) or {}
    if "from_cache" not in extensions:
        return "unknown"
    return "hit" if extensions["from_cache"] else "miss"


__all__ = [
    "create_http_event_hooks",
]
