"""MCP (Model Context Protocol) integration."""

from ai_agent.mcp.client import MCPClient
from ai_agent.mcp.config import MCPServerConfig

__all__ = ["MCPClient", "MCPServerConfig"]
