"""Vector store interface consumed by the agent core."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class VectorStore(Protocol):
    """Text + embedding storage with similarity search.

    Implementations must be safe to share between sessions.
    """

    async def insert(self, collection: str, text: str, vector: list[float]) -> None:
        ...

    async def search(self, collection: str, vector: list[float]) -> list[str]:
        """Return stored texts ranked from most to least similar."""
        ...

    async def close(self) -> None:
        ...
