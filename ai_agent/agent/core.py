"""The base agent: persona, base skills and backend handles."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from ai_agent.agent.prompt import persona_prompt
from ai_agent.agent.registry import SkillRegistry, dispatch
from ai_agent.agent.supervisor import Supervisor
from ai_agent.config.schema import AgentConfig
from ai_agent.errors import ConfigError
from ai_agent.llm.base import ChunkCallback, ModelClient
from ai_agent.llm.ollama import OllamaClient
from ai_agent.skills.base import ResultCallback, Skill, discard_result
from ai_agent.utils.http import create_http_client
from ai_agent.vector.base import VectorStore
from ai_agent.vector.milvus import MilvusClient


class Agent:
    """Shared identity and capabilities behind one or more sessions.

    Usage::

        agent = Agent.from_config(load_config())
        agent.learn_skill("sleep", SleepSkill())
        session = AgentDouble(agent, character="a travel planner")
        await session.listen_and_watch("Plan a weekend in Lisbon", on_chunk=print_chunk)
    """

    def __init__(
        self,
        config: AgentConfig,
        model_client: ModelClient,
        *,
        vector_store: VectorStore | None = None,
        http_client: httpx.AsyncClient | None = None,
        character: str | None = None,
        role: str | None = None,
        skills: dict[str, Skill] | None = None,
    ) -> None:
        if config is None:
            raise ConfigError("agent configuration is required")
        if model_client is None:
            raise ConfigError("a model client is required")

        self.config = config
        self.model_client = model_client
        self.vector_store = vector_store
        self.http_client = http_client or create_http_client(config.http)
        self.character = character or config.character
        self.role = role or config.role
        self.skills = SkillRegistry(skills)
        self.supervisor = (
            Supervisor(model_client, config.supervisor_model, self.options)
            if config.supervisor_enabled
            else None
        )

    @classmethod
    def from_config(cls, config: AgentConfig, **kwargs: Any) -> Agent:
        """Build an agent with Ollama and, when configured, Milvus backends."""
        model_client = OllamaClient(config.ollama_host, timeout=config.ollama_timeout)
        vector_store = None
        if config.milvus_host:
            vector_store = MilvusClient(config.milvus_host, token=config.milvus_token)
        return cls(config, model_client, vector_store=vector_store, **kwargs)

    @property
    def options(self) -> dict[str, Any]:
        return {"temperature": self.config.model_temperature}

    # ── Persona ───────────────────────────────────────────────────

    def set_character(self, character: str) -> Agent:
        self.character = character
        return self

    def set_role(self, role: str) -> Agent:
        self.role = role
        return self

    def description(self) -> str:
        return persona_prompt(self.character, self.role)

    # ── Skills ────────────────────────────────────────────────────

    def learn_skill(self, name: str, skill: Skill) -> Agent:
        self.skills.learn(name, skill)
        return self

    async def command(self, name: str, payload: Any = None, on_result: ResultCallback = discard_result) -> None:
        """Invoke one of the base skills directly."""
        await dispatch([self.skills], name, payload, on_result)

    # ── Model access ──────────────────────────────────────────────

    async def talk(
        self,
        model: str,
        messages: list[dict[str, Any]],
        on_chunk: ChunkCallback | None = None,
        *,
        options: dict[str, Any] | None = None,
    ) -> str:
        """Stream one completion, forwarding chunks, and return the full text.

        ``options`` overrides the agent's own sampling options.
        """
        parts: list[str] = []

        async def collect(chunk: str) -> None:
            parts.append(chunk)
            if on_chunk is not None:
                await on_chunk(chunk)

        await self.model_client.chat(
            model,
            messages,
            options=options if options is not None else self.options,
            on_chunk=collect,
        )
        return "".join(parts)

    async def review_response(self, text: str) -> None:
        if self.supervisor is not None:
            await self.supervisor.review(text)

    async def close(self) -> None:
        """Close the base skills and every backend client."""
        for skill in self.skills.values():
            await skill.close()
        await self.model_client.close()
        if self.vector_store is not None:
            await self.vector_store.close()
        await self.http_client.aclose()
        logger.debug("Agent closed")
