"""Skill bridging tool calls to an MCP server."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ai_agent.mcp.client import MCPClient
from ai_agent.skills.base import ResultCallback, Skill


class MCPCallParams(BaseModel):
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class MCPSkill(Skill):
    """Expose every tool of one MCP server through a single skill.

    The catalogue lists the tools discovered at :meth:`MCPClient.initialize`.
    """

    params = MCPCallParams

    def __init__(self, client: MCPClient) -> None:
        self.client = client

    def describe(self) -> str:
        tools = "\n\n".join(self.client.describe_tools()) or "(no tools discovered)"
        return f"""Call MCP (Model Context Protocol) tools and services. This skill enables interaction with external tools and services through the MCP protocol.
1. Tool list:
{tools}
2. Parameters:
- name: string - The name of the MCP tool or service to call
- arguments: object - Arguments to pass to the MCP tool
3. Returns: Result from the MCP tool execution"""

    async def execute(self, params: MCPCallParams, on_result: ResultCallback) -> None:
        result = await self.client.call_tool(params.name, params.arguments)
        await on_result(result)

    async def close(self) -> None:
        await self.client.close()
