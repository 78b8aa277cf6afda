"""Outbound HTTP client construction."""

from __future__ import annotations

import httpx

from ai_agent.config.schema import HttpConfig


def create_http_client(config: HttpConfig | None = None) -> httpx.AsyncClient:
    """Build the client used for ``read`` and the http skill."""
    config = config or HttpConfig()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.timeout, connect=10.0),
        follow_redirects=config.allow_redirects,
        max_redirects=config.max_redirects,
    )


def is_url_allowed(url: str, allowed: list[str]) -> bool:
    """An empty allowlist permits everything; entries match exactly or as a path prefix."""
    if not allowed:
        return True
    for entry in allowed:
        if url == entry or url.startswith(entry.rstrip("/") + "/"):
            return True
    return False
