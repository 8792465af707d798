"""Shared fixtures: a throwaway workspace with a .claude marker."""

from __future__ import annotations

import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from convmem.memory.index import IndexBuilder
from convmem.memory.store import RecordHandle, RecordStore
from convmem.paths import Workspace

SKILL_MD = """\
---
name: conversation-memory
description: Save and recall past conversations. Active memory keywords: (no active memories)
---

# Conversation Memory
"""


def write_summary(
    record: RecordHandle,
    topic: str = "Topic",
    keywords: str = "alpha, beta",
    time: str = "2026-01-11 14:30",
) -> None:
    record.summary_path.write_text(
        f"# Conversation Memory: {topic}\n\n"
        "## Meta\n\n"
        f"- **Time**: {time}\n"
        f"- **Keywords**: {keywords}\n\n"
        "## Summary\n\nBody text.\n",
        encoding="utf-8",
    )


def set_age(record: RecordHandle, days: float, now: datetime) -> None:
    """Backdate a record directory's mtime to now - days."""
    ts = (now - timedelta(days=days)).timestamp()
    os.utime(record.path, (ts, ts))


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    (tmp_path / ".claude").mkdir()
    return Workspace(claude_dir=tmp_path / ".claude")


@pytest.fixture
def store(workspace: Workspace) -> RecordStore:
    return RecordStore(workspace)


@pytest.fixture
def builder(workspace: Workspace, store: RecordStore) -> IndexBuilder:
    return IndexBuilder(workspace, store)


@pytest.fixture
def skill_file(workspace: Workspace) -> Path:
    workspace.skill_dir.mkdir(parents=True)
    workspace.skill_file.write_text(SKILL_MD, encoding="utf-8")
    return workspace.skill_file
