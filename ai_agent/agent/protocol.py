"""Tool-call protocol embedded in model output.

A model requests a skill by writing::

    <tool>{"function": "search", "context": {"query": "..."}, "abort_on_error": true}</tool>

Any number of such regions may appear; they are executed in textual order.
``<loop_end/>`` anywhere in the text ends an autonomous loop.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from ai_agent.errors import ToolCallDecodeError

TOOL_OPEN = "<tool>"
TOOL_CLOSE = "</tool>"
LOOP_END_MARKER = "<loop_end/>"

_TOOL_PATTERN = re.compile(re.escape(TOOL_OPEN) + r"(.*?)" + re.escape(TOOL_CLOSE), re.DOTALL)


class ToolInvocation(BaseModel):
    """A single model-requested skill call, valid for one turn."""

    model_config = ConfigDict(frozen=True)

    function: str
    context: Any = None
    abort_on_error: bool = False


def parse_tool_calls(text: str) -> list[ToolInvocation]:
    """Extract every tool invocation from ``text``.

    Raises:
        ToolCallDecodeError: if any region is not a valid invocation object.
    """
    invocations = []
    for match in _TOOL_PATTERN.finditer(text):
        fragment = match.group(1).strip()
        try:
            invocations.append(ToolInvocation.model_validate_json(fragment, strict=True))
        except ValidationError as e:
            raise ToolCallDecodeError(fragment, _describe(e)) from e
    return invocations


def detect_loop_end(text: str) -> bool:
    return LOOP_END_MARKER in text


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return f"{loc}: {first.get('msg', 'invalid')}"
