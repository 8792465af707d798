"""Metadata extraction from summary.md.

Each field is described by an ordered tuple of label patterns (English
first, then Chinese). The first pattern that matches wins; new label
variants are added to the table, not to the code.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import frontmatter

from convmem.errors import NotFoundError

logger = logging.getLogger(__name__)

UNKNOWN_TOPIC = "Unknown Topic"

EXTRACTION_RULES: dict[str, tuple[re.Pattern[str], ...]] = {
    "topic": (
        re.compile(r"^# Conversation Memory:[ \t]*(.+)$", re.MULTILINE),
        re.compile(r"^# 对话记忆：(.+)$", re.MULTILINE),
    ),
    "keywords": (
        re.compile(r"\*\*Keywords\*\*:[ \t]*(.+)$", re.MULTILINE),
        re.compile(r"\*\*关键词\*\*：(.+)$", re.MULTILINE),
    ),
    "date": (
        re.compile(r"\*\*Time\*\*:[ \t]*(.+)$", re.MULTILINE),
        re.compile(r"\*\*时间\*\*：(.+)$", re.MULTILINE),
    ),
}

# Front-matter keys consulted when no label matched, in order.
FRONTMATTER_KEYS: dict[str, tuple[str, ...]] = {
    "topic": ("title", "topic"),
    "keywords": ("keywords",),
    "date": ("date", "time"),
}

DEFAULTS = {"topic": UNKNOWN_TOPIC, "keywords": "", "date": ""}


@dataclass
class RecordMetadata:
    """Fields pulled out of a summary. Empty string means no data."""

    topic: str = UNKNOWN_TOPIC
    keywords: str = ""
    date: str = ""


def _match_label(field: str, text: str) -> str | None:
    for pattern in EXTRACTION_RULES[field]:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return None


def _from_frontmatter(field: str, meta: dict) -> str | None:
    for key in FRONTMATTER_KEYS[field]:
        value = meta.get(key)
        if value is None or value == "":
            continue
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v).strip() for v in value)
        return str(value).strip()
    return None


def _split_frontmatter(text: str) -> tuple[dict, str]:
    """Separate YAML front matter from the body. Malformed front matter is ignored."""
    try:
        post = frontmatter.loads(text)
        return dict(post.metadata), post.content
    except Exception:
        return {}, text


def parse_summary(text: str) -> RecordMetadata:
    """Extract topic, keywords and date from summary text. Never raises on content."""
    meta, body = _split_frontmatter(text)
    values: dict[str, str] = {}
    for field in EXTRACTION_RULES:
        value = _match_label(field, body)
        if value is None:
            value = _from_frontmatter(field, meta)
        values[field] = DEFAULTS[field] if value is None else value

    # "2026-01-11 14:30" -> "2026-01-11"
    date = values["date"].split(" ")[0] if values["date"] else ""
    return RecordMetadata(topic=values["topic"], keywords=values["keywords"], date=date)


def extract_metadata(summary_path: Path) -> RecordMetadata:
    """Read a summary file and parse it."""
    try:
        text = summary_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise NotFoundError(f"Cannot read summary {summary_path}: {e}") from e
    return parse_summary(text)
