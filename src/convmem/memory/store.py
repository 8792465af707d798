"""Record store — create, enumerate and relocate record directories."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from convmem.errors import DuplicateRecordError, InvalidRecordNameError, NotFoundError
from convmem.memory.templates import LOG_FILENAME, SUMMARY_FILENAME, render_log, render_summary

if TYPE_CHECKING:
    from convmem.paths import Workspace

logger = logging.getLogger(__name__)

Partition = Literal["active", "archive"]
PARTITIONS: tuple[Partition, ...] = ("active", "archive")

RECORD_NAME_RE = re.compile(r"^mem-\d{8}-\d{6}$")


def generate_record_name(now: datetime | None = None) -> str:
    """Format: mem-YYYYMMDD-HHMMSS (local time)."""
    return (now or datetime.now()).strftime("mem-%Y%m%d-%H%M%S")


def is_record_name(name: str) -> bool:
    return bool(RECORD_NAME_RE.match(name))


def check_record_name(name: str) -> None:
    """Reject names that would not resolve to a direct child of a partition."""
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\0" in name:
        raise InvalidRecordNameError(f"Invalid memory name: {name!r}")


@dataclass(frozen=True)
class RecordHandle:
    """A record directory in one partition."""

    name: str
    path: Path
    partition: Partition

    @property
    def summary_path(self) -> Path:
        return self.path / SUMMARY_FILENAME

    @property
    def log_path(self) -> Path:
        return self.path / LOG_FILENAME

    @property
    def mtime(self) -> datetime:
        return datetime.fromtimestamp(self.path.stat().st_mtime)


class RecordStore:
    """Read/write access to the record partitions of one workspace."""

    def __init__(self, workspace: Workspace, language: str = "en") -> None:
        self.workspace = workspace
        self.language = language

    def _handle(self, name: str, partition: Partition) -> RecordHandle:
        check_record_name(name)
        return RecordHandle(
            name=name,
            path=self.workspace.partition_dir(partition) / name,
            partition=partition,
        )

    def create(self, name: str | None = None, now: datetime | None = None) -> RecordHandle:
        """Create a record with template summary and log documents."""
        now = now or datetime.now()
        name = name or generate_record_name(now)
        check_record_name(name)
        if not is_record_name(name):
            logger.warning(
                "Record name %r does not follow mem-YYYYMMDD-HHMMSS; it will not be indexed",
                name,
            )

        existing = self.locate(name)
        if existing:
            raise DuplicateRecordError(f"Memory {name} already exists in {existing.partition}")

        self.workspace.ensure(self.language)
        record = self._handle(name, "active")
        if record.path.exists():
            raise DuplicateRecordError(f"Memory {name} already exists")

        record.path.mkdir(parents=True)
        record.summary_path.write_text(render_summary(now, self.language), encoding="utf-8")
        record.log_path.write_text(render_log(now, self.language), encoding="utf-8")
        logger.info("Created record %s", record.path)
        return record

    def list_records(self, partition: Partition) -> list[RecordHandle]:
        """Managed records in a partition. Foreign directories are skipped."""
        partition_dir = self.workspace.partition_dir(partition)
        if not partition_dir.is_dir():
            return []
        return [
            self._handle(p.name, partition)
            for p in sorted(partition_dir.iterdir())
            if p.is_dir() and is_record_name(p.name)
        ]

    def get(self, name: str, partition: Partition) -> RecordHandle | None:
        record = self._handle(name, partition)
        return record if record.path.is_dir() else None

    def locate(self, name: str) -> RecordHandle | None:
        """Find a record in either partition, active first."""
        for partition in PARTITIONS:
            record = self.get(name, partition)
            if record:
                return record
        return None

    def relocate(
        self, name: str, from_partition: Partition, to_partition: Partition
    ) -> RecordHandle:
        """Move a record between partitions with a single rename."""
        existing = self.get(name, to_partition)
        if existing:
            logger.debug("Record %s already in %s", name, to_partition)
            return existing

        source = self.get(name, from_partition)
        if source is None:
            raise NotFoundError(f"Memory {name} not found in {from_partition}")

        target = self._handle(name, to_partition)
        target.path.parent.mkdir(parents=True, exist_ok=True)
        source.path.rename(target.path)
        logger.info("Moved %s: %s -> %s", name, from_partition, to_partition)
        return target
