"""Conversation memory: an ordered log of role-tagged entries."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass
class Entry:
    """One unit of conversation memory.

    ``recalls`` counts how many model requests this entry has been part of.
    """

    role: Role
    content: str
    images: list[str] = field(default_factory=list)
    recalls: int = 0

    def to_message(self, annotate: bool = False) -> dict[str, Any]:
        content = self.content
        if annotate and self.recalls > 0:
            content = f"[seen {self.recalls} time(s) before] {content}"
        message: dict[str, Any] = {"role": self.role.value, "content": content}
        if self.images:
            message["images"] = list(self.images)
        return message


class Memory:
    """Append-only conversation log with explicit bulk eviction.

    Insertion order is the order sent to the model. Entries are never
    reordered; they leave only through :meth:`forget`, :meth:`drop_oldest`
    or :meth:`restore`.
    """

    def __init__(self, entries: list[Entry] | None = None) -> None:
        self._entries: list[Entry] = list(entries or [])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> Entry:
        return self._entries[index]

    @property
    def entries(self) -> list[Entry]:
        return list(self._entries)

    def append(
        self,
        role: Role | str,
        content: str,
        images: list[str] | None = None,
    ) -> Entry:
        entry = Entry(role=Role(role), content=content, images=list(images or []))
        self._entries.append(entry)
        return entry

    # ── Eviction ──────────────────────────────────────────────────

    def forget(self, count: int) -> int:
        """Evict the newest ``count`` entries; a negative count clears everything.

        Returns the number of entries removed.
        """
        size = len(self._entries)
        if count < 0 or count >= size:
            self._entries.clear()
            return size
        if count:
            del self._entries[size - count:]
        return count

    def drop_oldest(self, count: int, keep: int = 0) -> int:
        """Evict up to ``count`` of the oldest entries after a protected prefix."""
        keep = max(0, min(keep, len(self._entries)))
        count = max(0, min(count, len(self._entries) - keep))
        del self._entries[keep:keep + count]
        return count

    # ── Snapshots ─────────────────────────────────────────────────

    def snapshot(self) -> Memory:
        return Memory(copy.deepcopy(self._entries))

    def restore(self, snapshot: Memory) -> None:
        self._entries = copy.deepcopy(snapshot._entries)

    # ── Serialization ─────────────────────────────────────────────

    def content_length(self) -> int:
        """Total character count of all entry contents."""
        return sum(len(entry.content) for entry in self._entries)

    def to_messages(self, annotate_recalls: bool = False) -> list[dict[str, Any]]:
        """Render entries as model messages and bump their recall counters."""
        messages = []
        for entry in self._entries:
            messages.append(entry.to_message(annotate_recalls))
            entry.recalls += 1
        return messages
