"""Skill registries and the dispatch boundary.

Resolution walks an ordered list of registries (session first, base agent
second) on every call, so a session skill shadows a base skill of the same
name and late registrations are picked up immediately.
"""

from __future__ import annotations

from typing import Any, Iterator, Sequence

from loguru import logger
from pydantic import ValidationError

from ai_agent.errors import (
    SkillExecutionError,
    SkillNotFoundError,
    SkillPayloadError,
)
from ai_agent.skills.base import ResultCallback, Skill


class SkillRegistry:
    """Ordered mapping of skill name to skill."""

    def __init__(self, skills: dict[str, Skill] | None = None) -> None:
        self._skills: dict[str, Skill] = dict(skills or {})

    def learn(self, name: str, skill: Skill) -> None:
        if name in self._skills:
            logger.debug(f"SkillRegistry: replacing skill '{name}'")
        self._skills[name] = skill

    def get(self, name: str) -> Skill | None:
        return self._skills.get(name)

    def names(self) -> list[str]:
        return list(self._skills)

    def catalogue(self) -> str:
        """Render ``name: description`` lines for the system prompt."""
        return "\n\n".join(f"{name}: {skill.describe()}" for name, skill in self._skills.items())

    def __contains__(self, name: object) -> bool:
        return name in self._skills

    def __len__(self) -> int:
        return len(self._skills)

    def __iter__(self) -> Iterator[str]:
        return iter(self._skills)

    def values(self) -> list[Skill]:
        return list(self._skills.values())


def resolve_skill(registries: Sequence[SkillRegistry], name: str) -> Skill:
    """Return the first skill named ``name`` in priority order."""
    for registry in registries:
        skill = registry.get(name)
        if skill is not None:
            return skill
    raise SkillNotFoundError(name)


def validate_payload(name: str, skill: Skill, payload: Any) -> Any:
    if skill.params is None:
        return payload
    try:
        return skill.params.model_validate(payload if payload is not None else {})
    except ValidationError as e:
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise SkillPayloadError(name, detail) from e


async def dispatch(
    registries: Sequence[SkillRegistry],
    name: str,
    payload: Any,
    on_result: ResultCallback,
) -> None:
    """Resolve, validate and run one skill call.

    Raises:
        SkillNotFoundError: no registry knows ``name``.
        SkillPayloadError: ``payload`` does not fit the skill's schema.
        SkillExecutionError: the skill raised while running.
    """
    skill = resolve_skill(registries, name)
    params = validate_payload(name, skill, payload)

    logger.debug(f"Dispatching skill '{name}'")
    try:
        await skill.execute(params, on_result)
    except Exception as e:
        raise SkillExecutionError(name, e) from e
