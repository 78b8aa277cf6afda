"""Supervisor gate: a second model call that vetoes incoherent responses."""

from __future__ import annotations

from typing import Any

from loguru import logger

from ai_agent.errors import SupervisorRejectedError
from ai_agent.llm.base import ModelClient

REVIEW_PROMPT = (
    "Analyze the logical coherence of the following content.\n"
    "If there are logical problems such as contradictions, unreasonable causal relationships, "
    "or incomplete reasoning, output 'true';\n"
    "if there are no logical problems, output 'false'.\n"
    "Content to be analyzed:\n"
)

ACCEPT_VERDICT = "false"


class Supervisor:
    """Ask a supervisor model whether a candidate response has logical problems.

    Only a verdict of exactly ``false`` (surrounding whitespace ignored)
    accepts the response; ``true`` and anything unexpected reject it.
    """

    def __init__(self, model_client: ModelClient, model: str, options: dict[str, Any] | None = None) -> None:
        self.model_client = model_client
        self.model = model
        self.options = options

    async def verdict(self, text: str) -> str:
        parts: list[str] = []

        async def collect(chunk: str) -> None:
            parts.append(chunk)

        await self.model_client.chat(
            self.model,
            [{"role": "system", "content": REVIEW_PROMPT + text}],
            options=self.options,
            on_chunk=collect,
        )
        return "".join(parts)

    async def review(self, text: str) -> None:
        """Raise :class:`SupervisorRejectedError` unless the response is accepted."""
        verdict = await self.verdict(text)
        if verdict.strip() != ACCEPT_VERDICT:
            logger.warning(f"Supervisor '{self.model}' rejected response (verdict={verdict.strip()[:40]!r})")
            raise SupervisorRejectedError(verdict)
