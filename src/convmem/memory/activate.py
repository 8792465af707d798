"""Reactivation, archive listing and keyword search across both partitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from convmem.errors import NotFoundError
from convmem.memory.extract import RecordMetadata, extract_metadata
from convmem.memory.store import PARTITIONS

if TYPE_CHECKING:
    from convmem.memory.index import IndexBuilder, IndexResult
    from convmem.memory.store import Partition, RecordHandle, RecordStore

logger = logging.getLogger(__name__)


@dataclass
class RecordSummary:
    """A record plus the metadata shown in listings."""

    record: RecordHandle
    mtime: datetime
    topic: str
    keywords: str

    @property
    def partition(self) -> Partition:
        return self.record.partition


@dataclass
class ActivationResult:
    record: RecordHandle
    already_active: bool
    topic: str
    index: IndexResult | None = None


def _metadata(record: RecordHandle) -> RecordMetadata:
    try:
        return extract_metadata(record.summary_path)
    except NotFoundError:
        logger.debug("No readable summary for %s", record.name)
        return RecordMetadata()


def _summaries(store: RecordStore, partition: Partition) -> list[RecordSummary]:
    """Records of a partition, most recently modified first."""
    items = []
    for record in store.list_records(partition):
        meta = _metadata(record)
        items.append(
            RecordSummary(
                record=record, mtime=record.mtime, topic=meta.topic, keywords=meta.keywords
            )
        )
    items.sort(key=lambda s: (s.mtime, s.record.name), reverse=True)
    return items


def reactivate(store: RecordStore, builder: IndexBuilder, name: str) -> ActivationResult:
    """Move an archived record back to active and rebuild the index."""
    active = store.get(name, "active")
    if active:
        logger.info("Memory %s is already active", name)
        return ActivationResult(record=active, already_active=True, topic=_metadata(active).topic)

    if store.get(name, "archive") is None:
        raise NotFoundError(f"Memory {name} not found")

    store.workspace.ensure(store.language)
    record = store.relocate(name, "archive", "active")
    index = builder.rebuild()
    return ActivationResult(
        record=record, already_active=False, topic=_metadata(record).topic, index=index
    )


def list_archived(store: RecordStore) -> list[RecordSummary]:
    return _summaries(store, "archive")


def _matches(summary: RecordSummary, needle: str) -> bool:
    """Cheap fields first; the full conversation log is read last."""
    if needle in summary.record.name.lower():
        return True
    if needle in summary.topic.lower():
        return True
    if needle in summary.keywords.lower():
        return True
    log_path = summary.record.log_path
    if log_path.is_file():
        return needle in log_path.read_text(encoding="utf-8", errors="replace").lower()
    return False


def search(store: RecordStore, keyword: str) -> list[RecordSummary]:
    """Case-insensitive substring search; active hits first, then archived."""
    needle = keyword.lower()
    hits = []
    for partition in PARTITIONS:
        hits.extend(s for s in _summaries(store, partition) if _matches(s, needle))
    return hits
