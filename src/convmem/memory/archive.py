"""Archival policy — move stale or surplus records out of the active set.

Rules, evaluated in order:
1. age:      last modified more than ``archive_after_days`` ago.
2. capacity: of the records left after rule 1, the oldest beyond
             ``max_active``.
   forced:   with ``force``, exactly the single oldest remaining record,
             instead of the capacity check.

Age always wins, so a record is tagged with at most one reason.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from convmem.config import ArchiveConfig
    from convmem.memory.index import IndexBuilder, IndexResult
    from convmem.memory.store import RecordHandle, RecordStore

logger = logging.getLogger(__name__)

ArchiveReason = Literal["age", "capacity", "forced"]

_SECONDS_PER_DAY = 60 * 60 * 24


@dataclass
class ActiveRecordAge:
    """An active record with its modification time."""

    record: RecordHandle
    mtime: datetime
    days_since_modified: float


@dataclass
class ArchiveCandidate:
    record: RecordHandle
    mtime: datetime
    days_since_modified: float
    reason: ArchiveReason


@dataclass
class ArchiveReport:
    candidates: list[ArchiveCandidate] = field(default_factory=list)
    dry_run: bool = False
    moved: list[RecordHandle] = field(default_factory=list)
    index: IndexResult | None = None


@dataclass
class ArchiveStats:
    active: list[ActiveRecordAge]
    archived_count: int
    max_active: int
    archive_after_days: float

    def is_stale(self, item: ActiveRecordAge) -> bool:
        return item.days_since_modified > self.archive_after_days


class ArchivePolicy:
    """Decides which active records to archive and applies the decision."""

    def __init__(
        self, store: RecordStore, config: ArchiveConfig, now: datetime | None = None
    ) -> None:
        self.store = store
        self.config = config
        self._now = now

    @property
    def now(self) -> datetime:
        return self._now or datetime.now()

    def active_by_age(self) -> list[ActiveRecordAge]:
        """Active records, oldest modification first."""
        now = self.now
        items = []
        for record in self.store.list_records("active"):
            mtime = record.mtime
            days = (now - mtime).total_seconds() / _SECONDS_PER_DAY
            items.append(ActiveRecordAge(record=record, mtime=mtime, days_since_modified=days))
        items.sort(key=lambda i: (i.mtime, i.record.name))
        return items

    def candidates(self, force: bool = False) -> list[ArchiveCandidate]:
        items = self.active_by_age()

        def tag(item: ActiveRecordAge, reason: ArchiveReason) -> ArchiveCandidate:
            return ArchiveCandidate(
                record=item.record,
                mtime=item.mtime,
                days_since_modified=item.days_since_modified,
                reason=reason,
            )

        result = [
            tag(i, "age") for i in items if i.days_since_modified > self.config.archive_after_days
        ]
        taken = {c.record.name for c in result}
        remaining = [i for i in items if i.record.name not in taken]

        if force:
            result.extend(tag(i, "forced") for i in remaining[:1])
        else:
            excess = len(remaining) - self.config.max_active
            if excess > 0:
                result.extend(tag(i, "capacity") for i in remaining[:excess])
        return result

    def run(
        self,
        dry_run: bool = False,
        force: bool = False,
        builder: IndexBuilder | None = None,
    ) -> ArchiveReport:
        """Compute candidates; unless dry_run, archive them and rebuild the index once."""
        report = ArchiveReport(candidates=self.candidates(force=force), dry_run=dry_run)
        if dry_run or not report.candidates:
            return report

        for candidate in report.candidates:
            moved = self.store.relocate(candidate.record.name, "active", "archive")
            report.moved.append(moved)
            logger.info("Archived %s (%s)", candidate.record.name, candidate.reason)

        if builder is not None:
            report.index = builder.rebuild()
        return report

    def stats(self) -> ArchiveStats:
        return ArchiveStats(
            active=self.active_by_age(),
            archived_count=len(self.store.list_records("archive")),
            max_active=self.config.max_active,
            archive_after_days=self.config.archive_after_days,
        )
