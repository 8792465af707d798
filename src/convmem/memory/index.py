"""Index builder — regenerate index.md and the SKILL.md keyword line.

The index is a pure function of the active records' summaries: it is
rewritten in full on every rebuild and never merged with what is on disk.
"""

from __future__ import annotations

import logging
import os
import stat
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from convmem.errors import NotFoundError
from convmem.memory.extract import extract_metadata
from convmem.memory.templates import (
    EMPTY_DESCRIPTION_KEYWORDS,
    EMPTY_KEYWORDS,
    EMPTY_TABLE_ROWS,
    TABLE_HEADERS,
    render_index,
)

if TYPE_CHECKING:
    from convmem.memory.store import RecordStore
    from convmem.paths import Workspace

logger = logging.getLogger(__name__)

KEYWORD_TRUNCATE_AT = 30
MAX_DESCRIPTION_KEYWORDS = 15

PLACEHOLDER_KEYWORDS = frozenset(
    {"{keyword1}", "{keyword2}", "{keyword3}", "{关键词1}", "{关键词2}", "{关键词3}"}
)

_KEYWORD_SPLIT_RE = re.compile(r"[,，]")

# (pattern, replacement label). Each variant keeps its own label.
SKILL_KEYWORD_LINES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"Active memory keywords:[ \t]*.+"), "Active memory keywords: "),
    (re.compile(r"活跃记忆关键词：.+"), "活跃记忆关键词："),
)


@dataclass
class IndexEntry:
    """One row of the index table."""

    id: str
    topic: str
    keywords: str
    date: str


@dataclass
class IndexResult:
    entries: list[IndexEntry] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    skill_updated: bool = False


def collect_active_metadata(store: RecordStore) -> list[IndexEntry]:
    """Metadata for every active record, newest id first."""
    entries = []
    for record in store.list_records("active"):
        try:
            meta = extract_metadata(record.summary_path)
        except NotFoundError:
            logger.warning("Skipping %s: no readable summary", record.name)
            continue
        entries.append(
            IndexEntry(id=record.name, topic=meta.topic, keywords=meta.keywords, date=meta.date)
        )
    # Names encode creation time, so id order is creation order.
    entries.sort(key=lambda e: e.id, reverse=True)
    return entries


def aggregate_keywords(entries: list[IndexEntry]) -> list[str]:
    """Deduplicated keywords in first-seen order, placeholders dropped."""
    seen: dict[str, None] = {}
    for entry in entries:
        if not entry.keywords:
            continue
        for token in _KEYWORD_SPLIT_RE.split(entry.keywords):
            token = token.strip()
            if token and token not in PLACEHOLDER_KEYWORDS:
                seen.setdefault(token, None)
    return list(seen)


def truncate_keywords(text: str, limit: int = KEYWORD_TRUNCATE_AT) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def render_index_table(entries: list[IndexEntry], language: str = "en") -> str:
    rows = [TABLE_HEADERS[language]]
    if not entries:
        rows.append(EMPTY_TABLE_ROWS[language])
    for e in entries:
        rows.append(f"| {e.id} | {e.topic} | {truncate_keywords(e.keywords)} | {e.date} |")
    return "\n".join(rows)


def render_index_document(
    entries: list[IndexEntry], keywords: list[str], language: str = "en"
) -> str:
    keywords_line = ", ".join(keywords) if keywords else EMPTY_KEYWORDS[language]
    return render_index(render_index_table(entries, language), keywords_line, language)


def render_description_keywords(keywords: list[str], language: str = "en") -> str:
    if not keywords:
        return EMPTY_DESCRIPTION_KEYWORDS[language]
    return ", ".join(keywords[:MAX_DESCRIPTION_KEYWORDS])


def _atomic_write(path: Path, content: str) -> None:
    """Write to a temp file beside path, then rename over it.

    An existing file keeps its permission bits.
    """
    mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else 0o644
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def update_skill_file(path: Path, keywords_line: str) -> bool:
    """Splice keywords_line into the SKILL.md keyword line.

    A missing file or an unmatched line leaves everything untouched.
    """
    if not path.exists():
        logger.warning("Skill file not found: %s", path)
        return False

    content = path.read_text(encoding="utf-8")
    updated = content
    matched = False
    for pattern, label in SKILL_KEYWORD_LINES:
        updated, n = pattern.subn(lambda _m, label=label: label + keywords_line, updated, count=1)
        matched = matched or n > 0

    if not matched:
        logger.warning("No active-memory keyword line found in %s; left unchanged", path)
        return False
    if updated != content:
        _atomic_write(path, updated)
    return True


class IndexBuilder:
    """Rebuilds index.md and the SKILL.md keyword line from active records."""

    def __init__(self, workspace: Workspace, store: RecordStore, language: str = "en") -> None:
        self.workspace = workspace
        self.store = store
        self.language = language

    def rebuild(self) -> IndexResult:
        self.workspace.ensure(self.language)

        entries = collect_active_metadata(self.store)
        keywords = aggregate_keywords(entries)

        _atomic_write(
            self.workspace.index_file,
            render_index_document(entries, keywords, self.language),
        )
        logger.info("Rebuilt %s (%d active records)", self.workspace.index_file, len(entries))

        skill_updated = update_skill_file(
            self.workspace.skill_file,
            render_description_keywords(keywords, self.language),
        )
        return IndexResult(entries=entries, keywords=keywords, skill_updated=skill_updated)
