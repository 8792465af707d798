"""Tests for the archival policy."""

from __future__ import annotations

from datetime import datetime

import pytest

from convmem.config import ArchiveConfig
from convmem.memory.archive import ArchivePolicy
from convmem.memory.index import IndexBuilder
from convmem.memory.store import RecordStore

from conftest import set_age, write_summary

NOW = datetime(2026, 6, 1, 12, 0, 0)


@pytest.fixture
def make_records(store: RecordStore):
    """Create named records with the given ages in days."""

    def _make(ages: dict[str, float]):
        records = {}
        for name, days in ages.items():
            record = store.create(name)
            write_summary(record, topic=name)
            set_age(record, days, NOW)
            records[name] = record
        return records

    return _make


def _policy(store: RecordStore, **kwargs) -> ArchivePolicy:
    return ArchivePolicy(store, ArchiveConfig(**kwargs), now=NOW)


class TestCandidates:
    def test_nothing_to_archive(self, store: RecordStore, make_records):
        make_records({"mem-20260530-000000": 2, "mem-20260531-000000": 1})
        assert _policy(store).candidates() == []

    def test_age_rule(self, store: RecordStore, make_records):
        make_records({"mem-20260501-000000": 15, "mem-20260531-000000": 1})
        candidates = _policy(store).candidates()
        assert [(c.record.name, c.reason) for c in candidates] == [
            ("mem-20260501-000000", "age")
        ]
        assert candidates[0].days_since_modified == pytest.approx(15)

    def test_age_threshold_is_strict(self, store: RecordStore, make_records):
        make_records({"mem-20260518-000000": 14})
        assert _policy(store, archive_after_days=14).candidates() == []

    def test_capacity_archives_oldest(self, store: RecordStore, make_records):
        # T1 < T2 < T3 by modification time; names deliberately out of order
        make_records(
            {"mem-20260103-000000": 3, "mem-20260101-000000": 2, "mem-20260102-000000": 1}
        )
        candidates = _policy(store, max_active=2).candidates()
        assert [(c.record.name, c.reason) for c in candidates] == [
            ("mem-20260103-000000", "capacity")
        ]

    def test_capacity_counts_only_remaining(self, store: RecordStore, make_records):
        make_records(
            {
                "mem-20260101-000000": 30,
                "mem-20260102-000000": 3,
                "mem-20260103-000000": 2,
                "mem-20260104-000000": 1,
            }
        )
        candidates = _policy(store, max_active=2).candidates()
        assert [(c.record.name, c.reason) for c in candidates] == [
            ("mem-20260101-000000", "age"),
            ("mem-20260102-000000", "capacity"),
        ]

    def test_force_picks_single_oldest(self, store: RecordStore, make_records):
        make_records(
            {"mem-20260101-000000": 1, "mem-20260102-000000": 3, "mem-20260103-000000": 2}
        )
        candidates = _policy(store, max_active=20).candidates(force=True)
        assert [(c.record.name, c.reason) for c in candidates] == [
            ("mem-20260102-000000", "forced")
        ]

    def test_force_skips_capacity(self, store: RecordStore, make_records):
        make_records(
            {"mem-20260101-000000": 3, "mem-20260102-000000": 2, "mem-20260103-000000": 1}
        )
        candidates = _policy(store, max_active=1).candidates(force=True)
        assert [c.reason for c in candidates] == ["forced"]

    def test_force_after_age(self, store: RecordStore, make_records):
        make_records({"mem-20260101-000000": 20, "mem-20260102-000000": 2, "mem-20260103-000000": 1})
        candidates = _policy(store).candidates(force=True)
        assert [(c.record.name, c.reason) for c in candidates] == [
            ("mem-20260101-000000", "age"),
            ("mem-20260102-000000", "forced"),
        ]

    def test_force_with_no_records(self, store: RecordStore):
        store.workspace.ensure()
        assert _policy(store).candidates(force=True) == []


class TestRun:
    def test_dry_run_moves_nothing(self, store: RecordStore, builder: IndexBuilder, make_records):
        make_records({"mem-20260101-000000": 30})
        report = _policy(store).run(dry_run=True, builder=builder)
        assert len(report.candidates) == 1
        assert report.moved == []
        assert report.index is None
        assert [r.name for r in store.list_records("active")] == ["mem-20260101-000000"]

    def test_apply_capacity(self, store: RecordStore, builder: IndexBuilder, make_records):
        make_records(
            {"mem-20260101-000000": 3, "mem-20260102-000000": 2, "mem-20260103-000000": 1}
        )
        report = _policy(store, max_active=2).run(builder=builder)

        assert [r.name for r in report.moved] == ["mem-20260101-000000"]
        assert [r.name for r in store.list_records("archive")] == ["mem-20260101-000000"]
        assert [r.name for r in store.list_records("active")] == [
            "mem-20260102-000000",
            "mem-20260103-000000",
        ]
        index = store.workspace.index_file.read_text(encoding="utf-8")
        assert "mem-20260101-000000" not in index
        assert "mem-20260103-000000" in index

    def test_rebuilds_index_once(
        self, store: RecordStore, builder: IndexBuilder, make_records, monkeypatch
    ):
        make_records({"mem-20260101-000000": 30, "mem-20260102-000000": 20})
        calls = []
        original = builder.rebuild
        monkeypatch.setattr(builder, "rebuild", lambda: calls.append(1) or original())
        report = _policy(store).run(builder=builder)
        assert len(report.moved) == 2
        assert calls == [1]

    def test_no_candidates_skips_rebuild(self, store: RecordStore, builder: IndexBuilder, make_records):
        make_records({"mem-20260101-000000": 1})
        report = _policy(store).run(builder=builder)
        assert report.index is None
        assert report.moved == []


class TestStats:
    def test_stats(self, store: RecordStore, make_records):
        make_records({"mem-20260101-000000": 20, "mem-20260102-000000": 1})
        store.create("mem-20250101-000000")
        store.relocate("mem-20250101-000000", "active", "archive")

        stats = _policy(store).stats()
        assert stats.archived_count == 1
        assert stats.max_active == 20
        assert [i.record.name for i in stats.active] == [
            "mem-20260101-000000",
            "mem-20260102-000000",
        ]
        assert stats.is_stale(stats.active[0])
        assert not stats.is_stale(stats.active[1])
