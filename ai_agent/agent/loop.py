"""Conversation sessions and the turn/loop controller.

A turn streams one model response, commits it, runs the tool calls it
contains and decides whether to continue. In ``chat`` mode a run is one turn;
in ``loop`` mode turns repeat until the model writes ``<loop_end/>``, repeats
itself, goes silent, or the task running the session is cancelled.
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from loguru import logger

from ai_agent.agent.core import Agent
from ai_agent.agent.memory import Memory, Role
from ai_agent.agent.prompt import assemble_system_prompts, persona_prompt
from ai_agent.agent.protocol import ToolInvocation, detect_loop_end, parse_tool_calls
from ai_agent.agent.registry import SkillRegistry, dispatch
from ai_agent.agent.supervisor import Supervisor
from ai_agent.config.schema import AgentConfig, AgentMode, EvictionPolicy
from ai_agent.errors import (
    AgentError,
    ConfigError,
    SkillExecutionError,
    SkillNotFoundError,
    SkillPayloadError,
)
from ai_agent.llm.base import ChunkCallback
from ai_agent.skills.base import ResultCallback, Skill, discard_result

THINK_PROMPT = "Let me think and output something"


class TurnState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    REVIEWING = "reviewing"
    DISPATCHING = "dispatching"
    CHECKPOINTING = "checkpointing"
    EVICTING = "evicting"
    DECIDING = "deciding"


class StopReason(str, Enum):
    EMPTY_RESPONSE = "empty_response"
    DUPLICATE_RESPONSE = "duplicate_response"
    SINGLE_TURN = "single_turn"
    LOOP_END = "loop_end"


@dataclass
class RunResult:
    """How a run ended."""

    stop_reason: StopReason
    turns: int
    last_response: str = ""


class Checkpoint(ABC):
    """Hook invoked once per turn, after tool dispatch and before eviction.

    Raising aborts the turn; the exception reaches the caller unchanged.
    """

    @abstractmethod
    async def run(self, session: AgentDouble) -> None:
        ...


class FunctionCheckpoint(Checkpoint):
    """Adapt a plain coroutine function to :class:`Checkpoint`."""

    def __init__(self, func: Callable[[AgentDouble], Awaitable[None]]) -> None:
        self._func = func

    async def run(self, session: AgentDouble) -> None:
        await self._func(session)


def format_output(output: Any) -> str:
    if isinstance(output, str):
        return output
    return json.dumps(output, ensure_ascii=False, default=str)


class AgentDouble:
    """One conversation session on top of a shared :class:`Agent`.

    Session skills take priority over the agent's skills. A session is not
    safe for concurrent use; create one per conversation.
    """

    def __init__(
        self,
        agent: Agent,
        *,
        config: AgentConfig | None = None,
        character: str | None = None,
        role: str | None = None,
        skills: dict[str, Skill] | None = None,
        checkpoint: Checkpoint | None = None,
        mode: AgentMode | str | None = None,
    ) -> None:
        if agent is None:
            raise ConfigError("a session needs a base agent")

        self.agent = agent
        self.config = config or agent.config
        self.character = character or agent.character
        self.role = role or agent.role
        self.skills = SkillRegistry(skills)
        self.checkpoint = checkpoint
        self.mode = AgentMode(mode or self.config.agent_mode)
        self.supervisor = (
            Supervisor(agent.model_client, self.config.supervisor_model, self.options)
            if self.config.supervisor_enabled
            else None
        )
        self.memory = Memory()
        self.state = TurnState.IDLE
        self._prefix_len = 0
        self.init_memory()

    @property
    def registries(self) -> list[SkillRegistry]:
        return [self.skills, self.agent.skills]

    @property
    def options(self) -> dict[str, Any]:
        return {"temperature": self.config.model_temperature}

    # ── Persona and skills ────────────────────────────────────────

    def set_character(self, character: str) -> AgentDouble:
        self.character = character
        return self

    def set_role(self, role: str) -> AgentDouble:
        self.role = role
        return self

    def description(self) -> str:
        return persona_prompt(self.character, self.role)

    def learn_skill(self, name: str, skill: Skill) -> AgentDouble:
        self.skills.learn(name, skill)
        return self

    async def command(self, name: str, payload: Any = None, on_result: ResultCallback = discard_result) -> None:
        """Invoke one of the session skills directly."""
        await dispatch([self.skills], name, payload, on_result)

    # ── Memory ────────────────────────────────────────────────────

    def init_memory(self) -> AgentDouble:
        prompts = assemble_system_prompts(
            base_persona=self.agent.description(),
            session_persona=self.description(),
            embedding_model=self.config.embedding_model,
            collection=self.config.milvus_collection if self.agent.vector_store else None,
            base_skills=self.agent.skills,
            session_skills=self.skills,
            loop_mode=self.mode is AgentMode.LOOP,
        )
        for prompt in prompts:
            self.memory.append(Role.SYSTEM, prompt)
        self._prefix_len = len(prompts)
        return self

    def learn(self, info: str) -> AgentDouble:
        self.memory.append(Role.ASSISTANT, info)
        return self

    def forget(self, count: int) -> AgentDouble:
        self.memory.forget(count)
        self._prefix_len = min(self._prefix_len, len(self.memory))
        return self

    def reset_memory(self) -> AgentDouble:
        return self.forget(-1).init_memory()

    def memory_snapshot(self) -> Memory:
        return self.memory.snapshot()

    def load_memory(self, snapshot: Memory) -> AgentDouble:
        self.memory.restore(snapshot)
        prefix = 0
        for entry in self.memory:
            if entry.role is not Role.SYSTEM:
                break
            prefix += 1
        self._prefix_len = prefix
        return self

    async def read(self, url: str) -> None:
        """Fetch ``url`` and fold a non-empty body into memory."""
        resp = await self.agent.http_client.get(url)
        if resp.status_code >= 400:
            raise AgentError(f"bad http status {resp.status_code} while reading {url}")
        if resp.text:
            self.memory.append(Role.ASSISTANT, resp.text)

    async def remember(self, info: str) -> None:
        """Embed ``info`` and store it in the vector collection."""
        store = self.agent.vector_store
        if store is None:
            raise ConfigError("no vector store configured")
        vectors = await self.agent.model_client.embed(self.config.embedding_model, info)
        if vectors and vectors[0]:
            await store.insert(self.config.milvus_collection, info, vectors[0])

    async def recall(self, prompt: str) -> list[str]:
        """Return stored texts related to ``prompt``; empty without a vector store."""
        store = self.agent.vector_store
        if store is None:
            return []
        vectors = await self.agent.model_client.embed(self.config.embedding_model, prompt)
        if not vectors or not vectors[0]:
            return []
        return await store.search(self.config.milvus_collection, vectors[0])

    # ── Entry points ──────────────────────────────────────────────

    async def listen_and_watch(
        self,
        message: str,
        images: list[str] | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> RunResult:
        """Answer a user message, running tool calls and loop turns as needed."""
        context = await self.recall(message)
        if context:
            self.memory.append(Role.SYSTEM, "Context: \n" + "\n".join(context))
        self.memory.append(Role.USER, message, images)
        return await self._run(on_chunk)

    async def think(self, on_chunk: ChunkCallback | None = None) -> RunResult:
        """Let the model continue on its own without new user input."""
        self.memory.append(Role.ASSISTANT, THINK_PROMPT)
        return await self._run(on_chunk)

    # ── Turn controller ───────────────────────────────────────────

    async def _run(self, on_chunk: ChunkCallback | None) -> RunResult:
        previous: str | None = None
        turns = 0
        try:
            while True:
                turns += 1
                self.state = TurnState.GENERATING
                text = await self.agent.talk(
                    self.config.chat_model,
                    self.memory.to_messages(self.config.annotate_recalls),
                    on_chunk,
                    options=self.options,
                )

                # Nothing to review or commit
                if not text:
                    logger.debug(f"Turn {turns}: empty response, stopping")
                    return RunResult(StopReason.EMPTY_RESPONSE, turns)

                if self.supervisor is not None:
                    self.state = TurnState.REVIEWING
                    await self.supervisor.review(text)

                if text == previous:
                    logger.debug(f"Turn {turns}: response repeats the previous turn, stopping")
                    return RunResult(StopReason.DUPLICATE_RESPONSE, turns, text)
                previous = text

                self.memory.append(Role.ASSISTANT, text)

                self.state = TurnState.DISPATCHING
                await self._dispatch_all(parse_tool_calls(text), on_chunk)

                if self.checkpoint is not None:
                    self.state = TurnState.CHECKPOINTING
                    await self.checkpoint.run(self)

                self.state = TurnState.EVICTING
                self._evict_if_needed()

                self.state = TurnState.DECIDING
                if self.mode is AgentMode.CHAT:
                    return RunResult(StopReason.SINGLE_TURN, turns, text)
                if detect_loop_end(text):
                    logger.info(f"Loop ended by marker after {turns} turn(s)")
                    return RunResult(StopReason.LOOP_END, turns, text)

                self.state = TurnState.IDLE
                await asyncio.sleep(self.config.loop_interval)
        finally:
            self.state = TurnState.IDLE

    async def _dispatch_all(self, invocations: list[ToolInvocation], on_chunk: ChunkCallback | None) -> None:
        for invocation in invocations:
            name = invocation.function

            async def on_result(output: Any, name: str = name) -> None:
                await self._fold(f"The result of function [{name}]: {format_output(output)}", on_chunk)

            try:
                await dispatch(self.registries, name, invocation.context, on_result)
            except (SkillNotFoundError, SkillPayloadError, SkillExecutionError) as e:
                logger.warning(f"Skill '{name}' failed: {e}")
                await self._fold(f"The error [{e}] happened during executing the function [{name}].", on_chunk)
                if invocation.abort_on_error:
                    break
                continue

            await self._fold(f"The function [{name}] has been executed successfully.", on_chunk)

    async def _fold(self, text: str, on_chunk: ChunkCallback | None) -> None:
        self.memory.append(Role.TOOL, text)
        if on_chunk is not None:
            await on_chunk(text)

    def _evict_if_needed(self) -> None:
        limit = self.config.context_limit
        if self.memory.content_length() <= limit:
            return

        if self.config.eviction_policy is EvictionPolicy.RESET:
            removed = self.memory.forget(-1)
            self._prefix_len = 0
        else:
            removed = 0
            while self.memory.content_length() > limit and len(self.memory) > self._prefix_len:
                removed += self.memory.drop_oldest(1, keep=self._prefix_len)
        logger.info(
            f"Memory over {limit} chars, evicted {removed} entries "
            f"({self.config.eviction_policy.value}, {len(self.memory)} left)"
        )
