"""Tests for the MCP, vector, embedding and team skills."""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from conftest import CHAT_MODEL, FakeVectorStore, ScriptedModelClient

from ai_agent.agent.core import Agent
from ai_agent.agent.loop import AgentDouble
from ai_agent.agent.registry import SkillRegistry, dispatch
from ai_agent.errors import MCPError, SkillExecutionError, SkillPayloadError
from ai_agent.mcp.client import MCPClient
from ai_agent.skills.mcp import MCPSkill
from ai_agent.skills.team import TeamSkill
from ai_agent.skills.vector import EmbeddingSkill, VectorInsertSkill, VectorSearchSkill


@pytest.fixture
def mcp_client():
    client = MagicMock(spec=MCPClient)
    client.describe_tools.return_value = ['{"name": "get_weather"}']
    client.call_tool = AsyncMock(return_value=['{"type": "text", "text": "Sunny"}'])
    return client


def test_mcp_skill_lists_tools(mcp_client):
    description = MCPSkill(mcp_client).describe()
    assert '{"name": "get_weather"}' in description
    assert "arguments" in description


@pytest.mark.asyncio
async def test_mcp_skill_calls_tool(mcp_client):
    registry = SkillRegistry({"mcp": MCPSkill(mcp_client)})
    on_result = AsyncMock()

    await dispatch([registry], "mcp", {"name": "get_weather", "arguments": {"city": "Paris"}}, on_result)

    mcp_client.call_tool.assert_awaited_once_with("get_weather", {"city": "Paris"})
    on_result.assert_awaited_once_with(['{"type": "text", "text": "Sunny"}'])


@pytest.mark.asyncio
async def test_mcp_skill_error(mcp_client):
    mcp_client.call_tool.side_effect = MCPError("error while calling mcp tool [get_weather]")
    registry = SkillRegistry({"mcp": MCPSkill(mcp_client)})
    with pytest.raises(SkillExecutionError, match="get_weather"):
        await dispatch([registry], "mcp", {"name": "get_weather"}, AsyncMock())


@pytest.mark.asyncio
async def test_mcp_skill_requires_name(mcp_client):
    registry = SkillRegistry({"mcp": MCPSkill(mcp_client)})
    with pytest.raises(SkillPayloadError):
        await dispatch([registry], "mcp", {"arguments": {}}, AsyncMock())


@pytest.mark.asyncio
async def test_vector_insert_and_search():
    store = FakeVectorStore()
    registry = SkillRegistry({
        "insert": VectorInsertSkill(store),
        "search": VectorSearchSkill(store),
    })

    await dispatch([registry], "insert", {"collection": "notes", "content": "hello", "vector": [1, 2]}, AsyncMock())
    assert store.stored == [("notes", "hello", [1.0, 2.0])]

    on_result = AsyncMock()
    await dispatch([registry], "search", {"collection": "notes", "vector": [1, 2]}, on_result)
    on_result.assert_awaited_once_with(["hello"])


@pytest.mark.asyncio
async def test_vector_insert_rejects_empty_vector():
    registry = SkillRegistry({"insert": VectorInsertSkill(FakeVectorStore())})
    with pytest.raises(SkillPayloadError):
        await dispatch([registry], "insert", {"collection": "n", "content": "x", "vector": []}, AsyncMock())


@pytest.mark.asyncio
async def test_embedding_skill():
    client = ScriptedModelClient(embedding=[0.5, 0.25])
    registry = SkillRegistry({"embed": EmbeddingSkill(client)})
    on_result = AsyncMock()

    await dispatch([registry], "embed", {"model": "nomic-embed-text", "content": "hi"}, on_result)

    on_result.assert_awaited_once_with([[0.5, 0.25]])
    assert client.embed_calls == [("nomic-embed-text", "hi")]


@pytest.fixture
def member(config):
    client = ScriptedModelClient({CHAT_MODEL: ["Paris is lovely in spring."]}, chunk_size=100)
    agent = Agent(config, client)
    return AgentDouble(agent, character="a travel expert", role="a consultant")


def test_team_skill_describes_members(member):
    description = TeamSkill({"traveller": member}).describe()
    assert "traveller: " in description
    assert "a travel expert" in description


@pytest.mark.asyncio
async def test_team_skill_forwards_to_member(member):
    registry = SkillRegistry({"team": TeamSkill({"traveller": member})})
    outputs = []

    async def on_result(output):
        outputs.append(output)

    await dispatch([registry], "team", {"member": "traveller", "message": "When to visit Paris?"}, on_result)

    assert outputs == ["Paris is lovely in spring."]
    assert member.memory[-1].content == "Paris is lovely in spring."
    assert member.memory[-2].content == "When to visit Paris?"


@pytest.mark.asyncio
async def test_team_skill_unknown_member(member):
    registry = SkillRegistry({"team": TeamSkill({"traveller": member})})
    with pytest.raises(SkillExecutionError, match="not found member"):
        await dispatch([registry], "team", {"member": "chef", "message": "hi"}, AsyncMock())


@pytest.mark.asyncio
async def test_team_skill_inside_a_session(config, member):
    """The lead agent delegates via a tool call and sees the member's answer."""
    call = {"function": "team", "context": {"member": "traveller", "message": "When to visit Paris?"}}
    lead_client = ScriptedModelClient({CHAT_MODEL: [f"<tool>{json.dumps(call)}</tool>"]})
    lead = AgentDouble(Agent(config, lead_client), skills={"team": TeamSkill({"traveller": member})})

    await lead.listen_and_watch("Plan my trip")

    tool_entries = [e.content for e in lead.memory if e.role.value == "tool"]
    assert tool_entries == [
        "The result of function [team]: Paris is lovely in spring.",
        "The function [team] has been executed successfully.",
    ]
