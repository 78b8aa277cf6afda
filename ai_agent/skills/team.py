"""Team skill: forward a message to another session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from ai_agent.skills.base import ResultCallback, Skill

if TYPE_CHECKING:
    from ai_agent.agent.loop import AgentDouble


class TeamParams(BaseModel):
    member: str
    message: str


class TeamSkill(Skill):
    """Delegate work to named member sessions.

    The member's streamed output is reported back chunk by chunk.
    """

    params = TeamParams

    def __init__(self, members: dict[str, AgentDouble]) -> None:
        self.members = dict(members)

    def describe(self) -> str:
        roster = "\n\n".join(f"{name}: {member.description()}" for name, member in self.members.items())
        return f"""The "team" skill represents a collaborative group of AI agents, each with specialized roles and capabilities.
1. Team Members
{roster}
2. Invocation Context
{{
  "member": "[specific member name]",
  "message": "[message or task description for the member]"
}}
member: Specifies which team member should handle the task.
message: Contains the detailed request, question, or instruction for the designated member."""

    async def execute(self, params: TeamParams, on_result: ResultCallback) -> None:
        member = self.members.get(params.member)
        if member is None:
            raise LookupError(f"not found member [{params.member}]")
        await member.listen_and_watch(params.message, on_chunk=on_result)
