"""Test configuration and shared fixtures."""

import copy
import sys
from pathlib import Path
from typing import Any, Callable, Union

import pytest
from pydantic import BaseModel

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ai_agent.agent.core import Agent  # noqa: E402
from ai_agent.config.schema import AgentConfig  # noqa: E402
from ai_agent.skills.base import ResultCallback, Skill  # noqa: E402

CHAT_MODEL = "chat-model"
JUDGE_MODEL = "judge-model"

Reply = Union[str, Callable[[list[dict[str, Any]]], str]]


class ScriptedModelClient:
    """Model client double that replays scripted replies per model.

    A script is either a list of replies consumed in order (the last one
    repeats) or a callable receiving the request messages.
    """

    def __init__(
        self,
        scripts: dict[str, Union[list[str], Callable[[list[dict[str, Any]]], str]]] | None = None,
        chunk_size: int = 4,
        embedding: list[float] | None = None,
    ):
        self.scripts = scripts or {}
        self.chunk_size = chunk_size
        self.embedding = embedding if embedding is not None else [0.1, 0.2, 0.3]
        self.calls: list[tuple[str, list[dict[str, Any]]]] = []
        self.embed_calls: list[tuple[str, str]] = []
        self.options: list[tuple[str, dict[str, Any] | None]] = []
        self.closed = False

    def _reply(self, model: str, messages: list[dict[str, Any]]) -> str:
        script = self.scripts.get(model, [""])
        if callable(script):
            return script(messages)
        if len(script) > 1:
            return script.pop(0)
        return script[0] if script else ""

    async def chat(self, model, messages, *, options=None, on_chunk=None):
        self.calls.append((model, copy.deepcopy(messages)))
        self.options.append((model, options))
        reply = self._reply(model, messages)
        for i in range(0, len(reply), self.chunk_size):
            if on_chunk is not None:
                await on_chunk(reply[i:i + self.chunk_size])

    async def embed(self, model, text):
        self.embed_calls.append((model, text))
        return [list(self.embedding)] if self.embedding else []

    async def close(self):
        self.closed = True

    def chat_calls(self, model: str = CHAT_MODEL) -> list[list[dict[str, Any]]]:
        return [messages for called, messages in self.calls if called == model]


class FakeVectorStore:
    """In-memory vector store returning everything stored, newest first."""

    def __init__(self, stored: list[str] | None = None):
        self.stored: list[tuple[str, str, list[float]]] = [("ai_agent", text, [0.0]) for text in stored or []]
        self.searches: list[tuple[str, list[float]]] = []
        self.closed = False

    async def insert(self, collection, text, vector):
        self.stored.append((collection, text, list(vector)))

    async def search(self, collection, vector):
        self.searches.append((collection, list(vector)))
        return [text for coll, text, _ in reversed(self.stored) if coll == collection][:3]

    async def close(self):
        self.closed = True


class QueryParams(BaseModel):
    query: str


class SearchSkill(Skill):
    """Reports a canned answer for any query."""

    description = "Search the web. Parameters: query (string)"
    params = QueryParams

    def __init__(self, answer: str = "Sunny, 25°C"):
        self.answer = answer
        self.queries: list[str] = []

    async def execute(self, params: QueryParams, on_result: ResultCallback) -> None:
        self.queries.append(params.query)
        await on_result(self.answer)


class FailingSkill(Skill):
    description = "Always fails"

    def __init__(self, message: str = "boom"):
        self.message = message
        self.calls = 0

    async def execute(self, params: Any, on_result: ResultCallback) -> None:
        self.calls += 1
        raise RuntimeError(self.message)


class RecordingSkill(Skill):
    """Accepts any payload and records it."""

    description = "Records payloads"

    def __init__(self):
        self.payloads: list[Any] = []

    async def execute(self, params: Any, on_result: ResultCallback) -> None:
        self.payloads.append(params)


@pytest.fixture(scope="session")
def project_path():
    """Return the project root path."""
    return Path(__file__).parent.parent


@pytest.fixture
def config():
    return AgentConfig(
        chat_model=CHAT_MODEL,
        supervisor_model=JUDGE_MODEL,
        embedding_model="embed-model",
        milvus_collection="ai_agent",
        loop_interval=0.0,
    )


@pytest.fixture
def model_client():
    return ScriptedModelClient()


@pytest.fixture
def agent(config, model_client):
    return Agent(config, model_client, character="a test agent", role="a tester")
