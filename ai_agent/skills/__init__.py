"""Built-in skills.

- filesystem: rooted file and directory read/write/remove
- http: outbound requests with an optional URL allowlist
- sleep: timed pause
- mcp: bridge to an MCP server's tools
- vector: vector insert/search and embedding generation
- team: delegate to other sessions
"""

from ai_agent.skills.base import Skill, ResultCallback, discard_result
from ai_agent.skills.filesystem import (
    DirectoryReaderSkill,
    DirectoryRemoverSkill,
    DirectoryWriterSkill,
    FileReaderSkill,
    FileRemoverSkill,
    FileWriterSkill,
)
from ai_agent.skills.http import HttpSkill
from ai_agent.skills.mcp import MCPSkill
from ai_agent.skills.sleep import SleepSkill
from ai_agent.skills.team import TeamSkill
from ai_agent.skills.vector import EmbeddingSkill, VectorInsertSkill, VectorSearchSkill

__all__ = [
    "Skill",
    "ResultCallback",
    "discard_result",
    "FileReaderSkill",
    "FileWriterSkill",
    "FileRemoverSkill",
    "DirectoryReaderSkill",
    "DirectoryWriterSkill",
    "DirectoryRemoverSkill",
    "HttpSkill",
    "MCPSkill",
    "SleepSkill",
    "TeamSkill",
    "EmbeddingSkill",
    "VectorInsertSkill",
    "VectorSearchSkill",
]
