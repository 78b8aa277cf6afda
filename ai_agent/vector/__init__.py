"""Vector store backends."""

from ai_agent.vector.base import VectorStore
from ai_agent.vector.milvus import MilvusClient

__all__ = ["VectorStore", "MilvusClient"]
