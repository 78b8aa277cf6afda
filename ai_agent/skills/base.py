"""Base class for agent skills."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

ResultCallback = Callable[[Any], Awaitable[None]]


class Skill(ABC):
    """A capability the model can invoke by name.

    Subclasses declare a pydantic ``params`` model describing the payload they
    accept; the dispatcher validates the raw ``context`` from the tool call
    against it and hands the parsed model to :meth:`execute`. Skills with
    ``params = None`` receive the raw payload untouched.

    Output is reported through ``on_result``; returning normally means the
    call succeeded, raising means it failed.
    """

    description: str = ""
    params: type[BaseModel] | None = None

    def describe(self) -> str:
        return self.description

    @abstractmethod
    async def execute(self, params: Any, on_result: ResultCallback) -> None:
        """Run the skill with validated parameters."""
        ...

    async def close(self) -> None:
        """Release resources held by the skill."""


async def discard_result(output: Any) -> None:
    """Result callback that ignores skill output."""
