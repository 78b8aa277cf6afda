"""Model backend clients.

- ModelClient: the chat + embedding interface the agent consumes
- OllamaClient: streaming implementation over the Ollama HTTP API
"""

from ai_agent.llm.base import ChunkCallback, ModelClient
from ai_agent.llm.ollama import OllamaClient

__all__ = ["ChunkCallback", "ModelClient", "OllamaClient"]
