"""Configuration schema for ai-agent."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ai_agent.mcp.config import MCPServerConfig


class AgentMode(str, Enum):
    CHAT = "chat"
    LOOP = "loop"


class EvictionPolicy(str, Enum):
    RESET = "reset"
    SLIDING_WINDOW = "sliding_window"


class HttpConfig(BaseModel):
    """Outbound HTTP settings shared by ``read`` and the http skill."""

    timeout: float = 30.0
    allow_redirects: bool = True
    max_redirects: int = 10
    allowed_urls: list[str] = Field(default_factory=list)  # Empty = any


class AgentConfig(BaseSettings):
    """Validated agent configuration.

    Read from ``AIAGENT_*`` environment variables; nested sections use a
    double underscore, e.g. ``AIAGENT_HTTP__TIMEOUT=10``.
    """

    model_config = SettingsConfigDict(
        env_prefix="AIAGENT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Models
    chat_model: str = "qwen3:0.6b"
    embedding_model: str = "nomic-embed-text"
    supervisor_model: str = "qwen3:0.6b"
    model_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    supervisor_enabled: bool = False

    # Backends
    ollama_host: str = "http://localhost:11434"
    ollama_timeout: float = 120.0
    milvus_host: Optional[str] = None
    milvus_token: Optional[str] = None
    milvus_collection: str = "ai_agent"

    http: HttpConfig = Field(default_factory=HttpConfig)
    mcp: Optional[MCPServerConfig] = None

    # Memory and loop control
    context_limit: int = Field(default=1_000_000, gt=0)  # characters
    eviction_policy: EvictionPolicy = EvictionPolicy.RESET
    agent_mode: AgentMode = AgentMode.CHAT
    loop_interval: float = Field(default=1.0, ge=0.0)  # seconds
    annotate_recalls: bool = False

    # Persona
    character: str = "a helpful assistant"
    role: str = "an agent that uses tools to complete tasks"

    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_models(self) -> AgentConfig:
        if not self.chat_model.strip():
            raise ValueError("chat_model is required")
        if self.supervisor_enabled and not self.supervisor_model.strip():
            raise ValueError("supervisor_model is required when the supervisor is enabled")
        return self
