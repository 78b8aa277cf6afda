"""Agent core: memory, tool-call protocol, skill dispatch and the turn loop."""

from ai_agent.agent.core import Agent
from ai_agent.agent.loop import AgentDouble, Checkpoint, FunctionCheckpoint, RunResult, StopReason, TurnState
from ai_agent.agent.memory import Entry, Memory, Role
from ai_agent.agent.protocol import ToolInvocation, detect_loop_end, parse_tool_calls
from ai_agent.agent.registry import SkillRegistry, dispatch, resolve_skill

__all__ = [
    "Agent",
    "AgentDouble",
    "Checkpoint",
    "FunctionCheckpoint",
    "RunResult",
    "StopReason",
    "TurnState",
    "Entry",
    "Memory",
    "Role",
    "ToolInvocation",
    "detect_loop_end",
    "parse_tool_calls",
    "SkillRegistry",
    "dispatch",
    "resolve_skill",
]
