"""MCP configuration for ai-agent."""

from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional


class MCPServerConfig(BaseModel):
    """Configuration for a single MCP server."""

    # "stream": streamable HTTP endpoint (e.g., http://localhost:8001/mcp)
    # "sse": legacy event stream (e.g., http://localhost:8001/sse)
    url: str
    transport: Literal["stream", "sse"] = "stream"
    enabled: bool = True
    timeout: float = 30.0

    # Optional authentication
    api_key: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)

    # Tool filtering
    include_tools: List[str] = Field(default_factory=list)  # Empty = all
    exclude_tools: List[str] = Field(default_factory=list)
