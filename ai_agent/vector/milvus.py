"""Milvus vector store over the v2 RESTful API."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from ai_agent.errors import VectorStoreError

CONTENT_FIELD = "content"
EMBEDDING_FIELD = "content_embedding"


class MilvusClient:
    """Insert and search text embeddings in a Milvus collection.

    Collections are expected to carry a ``content`` VARCHAR field and a
    ``content_embedding`` float vector field indexed with the L2 metric.
    """

    def __init__(
        self,
        host: str = "http://localhost:19530",
        token: str | None = None,
        top_k: int = 3,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.host = host.rstrip("/")
        self.top_k = top_k
        self._token = token
        self._timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout, connect=10.0))
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        url = f"{self.host}{path}"
        try:
            resp = await self._get_client().post(url, json=body, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"Milvus request to {url} failed: {e}")
            raise VectorStoreError(f"Milvus request failed: {e}") from e

        if resp.status_code >= 400:
            raise VectorStoreError(f"Milvus HTTP {resp.status_code}: {resp.text[:500]}", resp.status_code)
        try:
            payload = resp.json()
        except ValueError as e:
            raise VectorStoreError(f"Milvus returned non-JSON body: {resp.text[:200]!r}") from e
        if not isinstance(payload, dict):
            raise VectorStoreError(f"Milvus returned an unexpected body: {resp.text[:200]!r}")

        # Milvus reports failures in-band with HTTP 200
        if payload.get("code", 0) != 0:
            raise VectorStoreError(f"Milvus error: {payload.get('message', 'unknown')}", payload.get("code"))
        return payload.get("data")

    async def insert(self, collection: str, text: str, vector: list[float]) -> None:
        await self._post(
            "/v2/vectordb/entities/insert",
            {
                "collectionName": collection,
                "data": [{CONTENT_FIELD: text, EMBEDDING_FIELD: vector}],
            },
        )
        logger.debug(f"Milvus: inserted {len(text)} chars into '{collection}'")

    async def search(self, collection: str, vector: list[float]) -> list[str]:
        data = await self._post(
            "/v2/vectordb/entities/search",
            {
                "collectionName": collection,
                "data": [vector],
                "annsField": EMBEDDING_FIELD,
                "limit": self.top_k,
                "outputFields": [CONTENT_FIELD],
                "searchParams": {"metricType": "L2"},
            },
        )
        hits = data or []
        return [hit[CONTENT_FIELD] for hit in hits if hit.get(CONTENT_FIELD)]

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
