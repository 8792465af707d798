"""Command entry points: save, index, activate, archive.

Each command is a separate invocation that loads config, discovers the
workspace once and passes it down. Commands return an exit code; progress
goes to stdout, diagnostics to stderr.
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from convmem.config import ConvmemConfig, load_config
from convmem.errors import ConvmemError
from convmem.memory.activate import list_archived, reactivate, search
from convmem.memory.archive import ArchivePolicy
from convmem.memory.index import IndexBuilder, IndexResult, truncate_keywords
from convmem.memory.store import RecordStore
from convmem.memory.templates import format_datetime
from convmem.paths import Workspace

logger = logging.getLogger(__name__)

_LISTING_KEYWORDS_AT = 50


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@dataclass
class Context:
    """Everything a command needs, built once per invocation."""

    config: ConvmemConfig
    workspace: Workspace
    store: RecordStore
    builder: IndexBuilder

    @classmethod
    def open(cls, config: ConvmemConfig) -> Context:
        workspace = Workspace.discover(config.workdir, skill_name=config.skill_name)
        store = RecordStore(workspace, language=config.language)
        builder = IndexBuilder(workspace, store, language=config.language)
        return cls(config=config, workspace=workspace, store=store, builder=builder)


def command(func: Callable[[Context, list[str]], int]) -> Callable[[list[str] | None], int]:
    """Wrap a command: config, logging, workspace, and error-to-exit-code mapping."""

    @functools.wraps(func)
    def wrapper(argv: list[str] | None = None) -> int:
        args = sys.argv[1:] if argv is None else list(argv)
        try:
            config = load_config()
            _setup_logging(config.log_level)
            return func(Context.open(config), args)
        except ConvmemError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except OSError as e:
            logger.debug("I/O failure", exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return wrapper


def _print_index_result(ctx: Context, result: IndexResult) -> None:
    print(f"✓ Updated {ctx.workspace.index_file}")
    if result.skill_updated:
        print(f"✓ Updated keywords in {ctx.workspace.skill_file}")
    print("\nIndex update complete")
    print(f"  - Active memories: {len(result.entries)}")
    print(f"  - Keywords count: {len(result.keywords)}")
    if result.entries:
        print("\nActive memory list:")
        for i, entry in enumerate(result.entries, 1):
            print(f"  {i}. {entry.id} - {entry.topic}")


# ── save ───────────────────────────────────────────────────


@command
def save_main(ctx: Context, args: list[str]) -> int:
    """convmem-save [memory-name]"""
    if args and args[0] in ("-h", "--help"):
        print("Usage: convmem-save [memory-name]")
        print("  memory-name defaults to mem-YYYYMMDD-HHMMSS from the current time")
        return 0

    record = ctx.store.create(args[0] if args else None)
    print(f"✓ Memory created: {record.name}")
    print(f"  Path: {record.path}")
    print("")
    print("Edit these files to complete the memory:")
    print(f"  1. {record.summary_path} - summary")
    print(f"  2. {record.log_path} - raw conversation")

    print("")
    _print_index_result(ctx, ctx.builder.rebuild())

    active = len(ctx.store.list_records("active"))
    limit = ctx.config.archive.max_active
    if active > limit:
        print("")
        print(f"⚠️ Active memories ({active}) exceed the limit ({limit}); consider archiving:")
        print("  convmem-archive")
    return 0


# ── index ──────────────────────────────────────────────────


@command
def index_main(ctx: Context, args: list[str]) -> int:
    """convmem-index"""
    print("Updating memory index...\n")
    _print_index_result(ctx, ctx.builder.rebuild())
    return 0


# ── activate ───────────────────────────────────────────────


def _activate_help() -> None:
    print("Usage:")
    print("  convmem-activate <memory-name>       Reactivate an archived memory")
    print("  convmem-activate --list              List archived memories")
    print("  convmem-activate --search <keyword>  Search active and archived memories")
    print("  convmem-activate --help              Show this help")


def _print_keywords(keywords: str) -> None:
    if keywords:
        print(f"   Keywords: {truncate_keywords(keywords, _LISTING_KEYWORDS_AT)}")


@command
def activate_main(ctx: Context, args: list[str]) -> int:
    if not args or args[0] in ("-h", "--help"):
        _activate_help()
        return 0

    if args[0] == "--list":
        archived = list_archived(ctx.store)
        if not archived:
            print("No archived memories")
            return 0
        print(f"Archived memories ({len(archived)}):\n")
        for i, item in enumerate(archived, 1):
            print(f"{i}. {item.record.name}")
            print(f"   Topic: {item.topic}")
            print(f"   Modified: {format_datetime(item.mtime)}")
            _print_keywords(item.keywords)
            print("")
        return 0

    if args[0] == "--search":
        if len(args) < 2 or not args[1]:
            print("Error: a search keyword is required", file=sys.stderr)
            return 1
        hits = search(ctx.store, args[1])
        if not hits:
            print(f'No memories found containing "{args[1]}"')
            return 0
        print(f"Search results ({len(hits)}):\n")
        for i, item in enumerate(hits, 1):
            label = "[active]" if item.partition == "active" else "[archived]"
            print(f"{i}. {label} {item.record.name}")
            print(f"   Topic: {item.topic}")
            _print_keywords(item.keywords)
            print("")
        return 0

    result = reactivate(ctx.store, ctx.builder, args[0])
    if result.already_active:
        print(f"Memory {result.record.name} is already active")
        return 0
    print(f"✓ Memory activated: {result.record.name}")
    print(f"  To: {result.record.path}")
    print(f"  Topic: {result.topic}")
    if result.index is not None:
        print("")
        _print_index_result(ctx, result.index)
    return 0


# ── archive ────────────────────────────────────────────────


def _archive_help(ctx: Context) -> None:
    cfg = ctx.config.archive
    print("Usage:")
    print("  convmem-archive              Archive stale memories")
    print("  convmem-archive --dry-run    Preview what would be archived")
    print("  convmem-archive --force      Also archive the oldest memory")
    print("  convmem-archive --stats      Show memory statistics")
    print("  convmem-archive --help       Show this help")
    print("")
    print("Rules:")
    print(f"  - Memories not modified for more than {cfg.archive_after_days:g} days are archived")
    print(f"  - If more than {cfg.max_active} memories are active, the oldest are archived")


def _show_stats(ctx: Context, now: datetime) -> None:
    stats = ArchivePolicy(ctx.store, ctx.config.archive, now=now).stats()
    print("=== Memory statistics ===\n")
    print(f"Active memories: {len(stats.active)} (limit: {stats.max_active})")
    print(f"Archived memories: {stats.archived_count}")
    print(f"Archive threshold: {stats.archive_after_days:g} days without modification")
    print("")
    if stats.active:
        print("--- Active memories ---\n")
        for i, item in enumerate(stats.active, 1):
            days = int(item.days_since_modified)
            status = "⚠️ due for archive" if stats.is_stale(item) else "✓"
            print(f"{i}. {item.record.name} {status}")
            print(f"   Modified: {format_datetime(item.mtime)} ({days} days ago)")
            print("")


@command
def archive_main(ctx: Context, args: list[str]) -> int:
    if "--help" in args or "-h" in args:
        _archive_help(ctx)
        return 0

    now = datetime.now()
    if "--stats" in args:
        _show_stats(ctx, now)
        return 0

    dry_run = "--dry-run" in args
    force = "--force" in args
    policy = ArchivePolicy(ctx.store, ctx.config.archive, now=now)
    report = policy.run(dry_run=dry_run, force=force, builder=ctx.builder)

    if not report.candidates:
        print("No memories need archiving")
        return 0

    prefix = "[preview] " if dry_run else ""
    print(f"{prefix}Archiving {len(report.candidates)} memories:\n")
    for i, c in enumerate(report.candidates, 1):
        print(f"{i}. {c.record.name}")
        print(f"   Reason: {c.reason}")
        print(f"   Modified: {format_datetime(c.mtime)} ({int(c.days_since_modified)} days ago)")
        print("")

    if dry_run:
        print("Preview only, nothing was moved. Run convmem-archive to apply.")
        return 0

    print(f"✓ Archived {len(report.moved)} memories to {ctx.workspace.archive_dir}")
    if report.index is not None:
        print("")
        _print_index_result(ctx, report.index)
    return 0


COMMANDS: dict[str, Callable[[list[str] | None], int]] = {
    "save": save_main,
    "index": index_main,
    "activate": activate_main,
    "archive": archive_main,
}
