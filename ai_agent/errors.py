"""Exception hierarchy for the agent runtime.

Errors fall into two groups. Invocation errors (``SkillNotFoundError``,
``SkillPayloadError``, ``SkillExecutionError``) are localized to a single tool
call and narrated back into the conversation. Everything else terminates the
current turn and reaches the caller.
"""

from __future__ import annotations

from typing import Any


class AgentError(Exception):
    """Base class for every error raised by the runtime."""


class ConfigError(AgentError):
    """Missing or invalid configuration; no session can be created."""


class SkillNotFoundError(AgentError):
    """No registry knows the requested skill."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"skill [{name}] hasn't been learned")


class SkillPayloadError(AgentError):
    """The payload does not match the skill's parameter schema."""

    def __init__(self, name: str, detail: str) -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"invalid payload for skill [{name}]: {detail}")


class SkillExecutionError(AgentError):
    """The skill was found and validated but failed while running."""

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        super().__init__(str(cause) or type(cause).__name__)


class ToolCallDecodeError(AgentError):
    """A ``<tool>`` region could not be decoded; the whole batch is untrusted."""

    def __init__(self, fragment: str, detail: str) -> None:
        self.fragment = fragment
        self.detail = detail
        super().__init__(f"malformed tool call {fragment!r}: {detail}")


class SupervisorRejectedError(AgentError):
    """The supervisor model judged the response incoherent."""

    def __init__(self, verdict: str) -> None:
        self.verdict = verdict
        super().__init__("response from model is non-compliant")


class ModelClientError(AgentError):
    """Transport or protocol failure talking to the model backend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class VectorStoreError(AgentError):
    """Transport or protocol failure talking to the vector store."""

    def __init__(self, message: str, code: Any = None) -> None:
        self.code = code
        super().__init__(message)


class MCPError(AgentError):
    """Failure reported by, or while talking to, an MCP server."""
