"""Tests for workspace discovery and layout."""

from __future__ import annotations

from pathlib import Path

import pytest

from convmem.errors import ConfigurationError
from convmem.paths import Workspace, find_claude_root


class TestFindClaudeRoot:
    def test_found_in_start_dir(self, tmp_path: Path):
        (tmp_path / ".claude").mkdir()
        assert find_claude_root(tmp_path) == (tmp_path / ".claude").resolve()

    def test_found_in_ancestor(self, tmp_path: Path):
        (tmp_path / ".claude").mkdir()
        deep = tmp_path / "a" / "b" / "c"
        deep.mkdir(parents=True)
        assert find_claude_root(deep) == (tmp_path / ".claude").resolve()

    def test_nearest_wins(self, tmp_path: Path):
        (tmp_path / ".claude").mkdir()
        inner = tmp_path / "project"
        (inner / ".claude").mkdir(parents=True)
        assert find_claude_root(inner) == (inner / ".claude").resolve()

    def test_file_is_not_a_marker(self, tmp_path: Path):
        child = tmp_path / "child"
        child.mkdir()
        (child / ".claude").write_text("not a dir")
        (tmp_path / ".claude").mkdir()
        assert find_claude_root(child) == (tmp_path / ".claude").resolve()


class TestWorkspace:
    def test_discover_missing_marker(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr("convmem.paths.find_claude_root", lambda start=None: None)
        with pytest.raises(ConfigurationError):
            Workspace.discover(tmp_path)

    def test_derived_paths(self, tmp_path: Path):
        (tmp_path / ".claude").mkdir()
        ws = Workspace.discover(tmp_path, skill_name="conversation-memory-zh")
        claude = (tmp_path / ".claude").resolve()
        assert ws.root == tmp_path.resolve()
        assert ws.memories_dir == claude / "data" / "conversation-memory-zh" / "memories"
        assert ws.active_dir == ws.memories_dir / "active"
        assert ws.archive_dir == ws.memories_dir / "archive"
        assert ws.index_file == ws.memories_dir / "index.md"
        assert ws.skill_file == claude / "skills" / "conversation-memory-zh" / "SKILL.md"

    def test_partition_dir(self, workspace: Workspace):
        assert workspace.partition_dir("active") == workspace.active_dir
        assert workspace.partition_dir("archive") == workspace.archive_dir
        with pytest.raises(ValueError):
            workspace.partition_dir("trash")


class TestEnsure:
    def test_creates_structure(self, workspace: Workspace):
        workspace.ensure()
        assert workspace.active_dir.is_dir()
        assert workspace.archive_dir.is_dir()
        content = workspace.index_file.read_text(encoding="utf-8")
        assert "(No active memories)" in content
        assert "<!-- INDEX_START -->" in content

    def test_idempotent_keeps_index(self, workspace: Workspace):
        workspace.ensure()
        workspace.index_file.write_text("custom", encoding="utf-8")
        workspace.ensure()
        assert workspace.index_file.read_text(encoding="utf-8") == "custom"

    def test_chinese_seed(self, workspace: Workspace):
        workspace.ensure(language="zh")
        assert "活跃记忆索引" in workspace.index_file.read_text(encoding="utf-8")
