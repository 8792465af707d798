"""Workspace discovery and the fixed memory layout below it.

Layout:
    <workspace>/
    └── .claude/
        ├── skills/<skill-name>/SKILL.md     # description carries the keyword line
        └── data/<skill-name>/memories/
            ├── index.md                     # regenerated, never hand-edited
            ├── active/mem-YYYYMMDD-HHMMSS/
            └── archive/mem-YYYYMMDD-HHMMSS/
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from convmem.errors import ConfigurationError
from convmem.memory.templates import INDEX_FILENAME

if TYPE_CHECKING:
    from convmem.memory.store import Partition

logger = logging.getLogger(__name__)

MARKER_DIR = ".claude"
DEFAULT_SKILL_NAME = "conversation-memory"


def find_claude_root(start: Path | None = None) -> Path | None:
    """Walk up from start, return the nearest .claude/ directory."""
    p = (start or Path.cwd()).resolve()
    while True:
        candidate = p / MARKER_DIR
        if candidate.is_dir():
            return candidate
        if p == p.parent:
            return None
        p = p.parent


@dataclass(frozen=True)
class Workspace:
    """Resolved workspace. Derived paths are recomputed on every access."""

    claude_dir: Path
    skill_name: str = DEFAULT_SKILL_NAME

    @classmethod
    def discover(
        cls, start: Path | None = None, skill_name: str = DEFAULT_SKILL_NAME
    ) -> Workspace:
        claude_dir = find_claude_root(start)
        if claude_dir is None:
            raise ConfigurationError(
                f"Cannot find {MARKER_DIR} directory above {start or Path.cwd()}, "
                "ensure running in the correct workspace"
            )
        return cls(claude_dir=claude_dir, skill_name=skill_name)

    @property
    def root(self) -> Path:
        return self.claude_dir.parent

    @property
    def skill_dir(self) -> Path:
        return self.claude_dir / "skills" / self.skill_name

    @property
    def data_dir(self) -> Path:
        return self.claude_dir / "data" / self.skill_name

    @property
    def memories_dir(self) -> Path:
        return self.data_dir / "memories"

    @property
    def active_dir(self) -> Path:
        return self.memories_dir / "active"

    @property
    def archive_dir(self) -> Path:
        return self.memories_dir / "archive"

    @property
    def index_file(self) -> Path:
        return self.memories_dir / INDEX_FILENAME

    @property
    def skill_file(self) -> Path:
        return self.skill_dir / "SKILL.md"

    def partition_dir(self, partition: Partition) -> Path:
        if partition == "active":
            return self.active_dir
        if partition == "archive":
            return self.archive_dir
        raise ValueError(f"Unknown partition: {partition!r}")

    def ensure(self, language: str = "en") -> None:
        """Create the memories tree and seed an empty index. Idempotent."""
        for d in [self.memories_dir, self.active_dir, self.archive_dir]:
            d.mkdir(parents=True, exist_ok=True)

        if not self.index_file.exists():
            from convmem.memory.index import render_index_document

            self.index_file.write_text(render_index_document([], [], language), encoding="utf-8")
            logger.info("Seeded %s", self.index_file)
