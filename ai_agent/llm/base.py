"""Model client interface consumed by the agent core."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

ChunkCallback = Callable[[str], Awaitable[None]]


@runtime_checkable
class ModelClient(Protocol):
    """Chat + embedding backend.

    ``chat`` streams every text chunk to ``on_chunk`` as it arrives; an
    exception raised by the callback aborts the request. Transport failures
    surface as :class:`~ai_agent.errors.ModelClientError`.
    """

    async def chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        *,
        options: dict[str, Any] | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> None:
        ...

    async def embed(self, model: str, text: str) -> list[list[float]]:
        ...

    async def close(self) -> None:
        ...
