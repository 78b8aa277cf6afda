"""Tests for conversation memory."""

import pytest

from ai_agent.agent.memory import Entry, Memory, Role


@pytest.fixture
def memory():
    mem = Memory()
    mem.append(Role.SYSTEM, "persona")
    mem.append(Role.USER, "hello", ["img-1"])
    mem.append(Role.ASSISTANT, "hi there")
    return mem


def test_append_returns_entry(memory):
    entry = memory.append("tool", "result")
    assert isinstance(entry, Entry)
    assert entry.role is Role.TOOL
    assert memory[-1] is entry
    assert len(memory) == 4


def test_append_rejects_unknown_role(memory):
    with pytest.raises(ValueError):
        memory.append("narrator", "nope")
    assert len(memory) == 3


def test_forget_zero_is_noop(memory):
    assert memory.forget(0) == 0
    assert [e.content for e in memory] == ["persona", "hello", "hi there"]


def test_forget_negative_clears(memory):
    assert memory.forget(-1) == 3
    assert len(memory) == 0


def test_forget_more_than_length_clears(memory):
    memory.forget(10)
    assert len(memory) == 0
    memory.forget(1)
    assert len(memory) == 0


def test_forget_drops_newest(memory):
    assert memory.forget(2) == 2
    assert [e.content for e in memory] == ["persona"]


def test_drop_oldest_keeps_prefix(memory):
    memory.append(Role.TOOL, "ack")
    removed = memory.drop_oldest(2, keep=1)
    assert removed == 2
    assert [e.content for e in memory] == ["persona", "ack"]


def test_drop_oldest_never_touches_prefix(memory):
    assert memory.drop_oldest(10, keep=3) == 0
    assert len(memory) == 3


def test_content_length_counts_characters(memory):
    memory.append(Role.USER, "héllo")
    assert memory.content_length() == len("persona") + len("hello") + len("hi there") + 5


def test_snapshot_restore_roundtrip(memory):
    snap = memory.snapshot()
    restored = Memory()
    restored.restore(snap)
    assert restored.entries == memory.entries


def test_snapshot_is_independent(memory):
    snap = memory.snapshot()
    snap.append(Role.USER, "extra")
    snap[1].images.append("img-2")
    snap[0].content = "changed"
    assert len(memory) == 3
    assert memory[1].images == ["img-1"]
    assert memory[0].content == "persona"


def test_restore_does_not_alias_snapshot(memory):
    snap = memory.snapshot()
    memory.restore(snap)
    snap[2].content = "mutated later"
    snap.append(Role.TOOL, "later")
    assert memory[2].content == "hi there"
    assert len(memory) == 3


def test_to_messages_increments_recalls(memory):
    messages = memory.to_messages()
    assert messages[1] == {"role": "user", "content": "hello", "images": ["img-1"]}
    assert "images" not in messages[0]
    assert all(e.recalls == 1 for e in memory)
    memory.to_messages()
    assert all(e.recalls == 2 for e in memory)


def test_to_messages_annotates_repeated_entries(memory):
    memory.to_messages(annotate_recalls=True)
    memory.append(Role.USER, "new")
    messages = memory.to_messages(annotate_recalls=True)
    assert messages[0]["content"] == "[seen 1 time(s) before] persona"
    assert messages[-1]["content"] == "new"
