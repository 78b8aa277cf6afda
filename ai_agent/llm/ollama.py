"""Async Ollama client.

Talks to the native Ollama HTTP API:

- ``POST /api/chat`` with ``stream: true``, answered with NDJSON lines of the
  form ``{"message": {"content": "..."}, "done": false}``
- ``POST /api/embed`` with ``{"model", "input"}``, answered with
  ``{"embeddings": [[...]]}``

No retries: a failed request fails the turn and the caller decides.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
from loguru import logger

from ai_agent.errors import ModelClientError
from ai_agent.llm.base import ChunkCallback


class OllamaClient:
    """Streaming chat and embedding client for one Ollama host.

    Usage::

        client = OllamaClient("http://localhost:11434")
        await client.chat("qwen3:0.6b", [{"role": "user", "content": "Hi"}], on_chunk=print_chunk)
        vectors = await client.embed("nomic-embed-text", "hello")
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.host = host.rstrip("/")
        self._timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=10.0),
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
            )
        return self._client

    # ── Chat ──────────────────────────────────────────────────────

    async def chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        *,
        options: dict[str, Any] | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> None:
        """Stream a chat completion, forwarding each content chunk.

        Raises:
            ModelClientError on HTTP failure, malformed stream lines or an
            ``error`` field in the stream.
        """
        body: dict[str, Any] = {"model": model, "messages": messages, "stream": True}
        if options:
            body["options"] = options

        client = self._get_client()
        url = f"{self.host}/api/chat"
        try:
            async with client.stream("POST", url, json=body) as resp:
                if resp.status_code >= 400:
                    detail = (await resp.aread()).decode(errors="replace")[:500]
                    raise ModelClientError(
                        f"Ollama chat HTTP {resp.status_code}: {detail}",
                        status_code=resp.status_code,
                    )
                async for line in resp.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        data = json.loads(line)
                    except ValueError as e:
                        raise ModelClientError(f"Ollama chat: undecodable line {line[:200]!r}") from e
                    if not isinstance(data, dict):
                        raise ModelClientError(f"Ollama chat: expected a JSON object, got {line[:200]!r}")
                    if data.get("error"):
                        raise ModelClientError(f"Ollama chat: {data['error']}")

                    content = (data.get("message") or {}).get("content", "")
                    if content and on_chunk is not None:
                        await on_chunk(content)
                    if data.get("done"):
                        break
        except httpx.HTTPError as e:
            logger.error(f"Ollama chat request to {url} failed: {e}")
            raise ModelClientError(f"Ollama chat request failed: {e}") from e

    # ── Embeddings ────────────────────────────────────────────────

    async def embed(self, model: str, text: str) -> list[list[float]]:
        client = self._get_client()
        url = f"{self.host}/api/embed"
        try:
            resp = await client.post(url, json={"model": model, "input": text})
        except httpx.HTTPError as e:
            logger.error(f"Ollama embed request to {url} failed: {e}")
            raise ModelClientError(f"Ollama embed request failed: {e}") from e

        if resp.status_code >= 400:
            raise ModelClientError(
                f"Ollama embed HTTP {resp.status_code}: {resp.text[:500]}",
                status_code=resp.status_code,
            )
        try:
            embeddings = resp.json()["embeddings"]
        except (ValueError, KeyError, TypeError) as e:
            raise ModelClientError(f"Ollama embed: unexpected response {resp.text[:200]!r}") from e
        return embeddings

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
