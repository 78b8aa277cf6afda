"""Timed sleep skill."""

from __future__ import annotations

import asyncio
import re
from typing import Union

from pydantic import BaseModel, field_validator

from ai_agent.skills.base import ResultCallback, Skill

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: Union[str, float, int]) -> float:
    """Convert ``"1m30s"``, ``"250ms"`` or a bare number of seconds to seconds."""
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            pos = 0
            seconds = 0.0
            for match in _DURATION_PART.finditer(text):
                if match.start() != pos:
                    break
                seconds += float(match.group(1)) * _UNITS[match.group(2)]
                pos = match.end()
            if not text or pos != len(text):
                raise ValueError(f"invalid duration {value!r}")
    if seconds < 0:
        raise ValueError("duration must not be negative")
    return seconds


class SleepParams(BaseModel):
    duration: Union[str, float]

    @field_validator("duration")
    @classmethod
    def _to_seconds(cls, value: Union[str, float]) -> float:
        return parse_duration(value)


class SleepSkill(Skill):
    description = """Pause for a while before continuing.
Parameters:
- duration: string - e.g. "500ms", "2s", "1m30s", or a number of seconds"""
    params = SleepParams

    async def execute(self, params: SleepParams, on_result: ResultCallback) -> None:
        await asyncio.sleep(params.duration)
