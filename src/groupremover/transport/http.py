"""
GroupRemover HTTP Transport

Builds the httpx client used for Boundary API calls.

Centralizes timeouts and default headers so every call behaves the same,
and accepts an injected transport so tests can fake the backend.
"""

from __future__ import annotations

from typing import Dict, Optional

import httpx
import structlog

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "groupremover/0.1.0"


def build_http_client(
    base_url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    transport: Optional[httpx.BaseTransport] = None,
    extra_headers: Optional[Dict[str, str]] = None,
) -> httpx.Client:
    """
    Create an `httpx.Client` bound to a Boundary controller address.

    Args:
        base_url: Controller address without trailing slash
        timeout: Per-request timeout in seconds
        user_agent: User-Agent header value
        transport: Optional transport override (e.g. httpx.MockTransport)
        extra_headers: Headers merged over the defaults

    Returns:
        Configured client; the caller owns closing it
    """
    headers: Dict[str, str] = {
        "User-Agent": user_agent,
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)

    logger.debug("http_client_created", base_url=base_url, timeout=timeout)

    return httpx.Client(
        base_url=base_url,
        timeout=httpx.Timeout(timeout),
        headers=headers,
        transport=transport,
    )


def truncate_body(text: str, limit: int = 500) -> str:
    """Shorten a response body for inclusion in an error message."""
    if len(text) <= limit:
        return text
    return text[:limit] + "...(truncated)"
