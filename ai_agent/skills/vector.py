"""Vector store and embedding skills."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ai_agent.llm.base import ModelClient
from ai_agent.skills.base import ResultCallback, Skill
from ai_agent.vector.base import VectorStore


class VectorInsertParams(BaseModel):
    collection: str
    content: str
    vector: list[float] = Field(min_length=1)


class VectorSearchParams(BaseModel):
    collection: str
    vector: list[float] = Field(min_length=1)


class EmbeddingParams(BaseModel):
    model: str
    content: str


class VectorInsertSkill(Skill):
    description = """Store a text and its embedding vector in a vector collection.
Parameters:
- collection: string - collection name
- content: string - the text to store
- vector: array of numbers - the embedding of the text"""
    params = VectorInsertParams

    def __init__(self, store: VectorStore) -> None:
        self.store = store

    async def execute(self, params: VectorInsertParams, on_result: ResultCallback) -> None:
        await self.store.insert(params.collection, params.content, params.vector)


class VectorSearchSkill(Skill):
    description = """Find the stored texts most similar to an embedding vector.
Parameters:
- collection: string - collection name
- vector: array of numbers - the query embedding
Returns: a ranked list of texts"""
    params = VectorSearchParams

    def __init__(self, store: VectorStore) -> None:
        self.store = store

    async def execute(self, params: VectorSearchParams, on_result: ResultCallback) -> None:
        await on_result(await self.store.search(params.collection, params.vector))


class EmbeddingSkill(Skill):
    description = """Compute the embedding vectors of a text.
Parameters:
- model: string - embedding model name
- content: string - the text to embed
Returns: a list of embedding vectors"""
    params = EmbeddingParams

    def __init__(self, model_client: ModelClient) -> None:
        self.model_client = model_client

    async def execute(self, params: EmbeddingParams, on_result: ResultCallback) -> None:
        await on_result(await self.model_client.embed(params.model, params.content))
