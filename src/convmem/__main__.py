"""Entry point: python -m convmem <command> [args]

- save [name]                         Create a memory record and rebuild the index
- index                               Rebuild index.md and the SKILL.md keywords
- activate <name>|--list|--search kw  Reactivate, list or search memories
- archive [--dry-run] [--force]|--stats
"""

from __future__ import annotations

import sys

from convmem.cli import COMMANDS


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    cmd = args[0] if args else ""

    if cmd not in COMMANDS:
        print("Usage: python -m convmem [save|index|activate|archive] [args]")
        print("  save      — Create a new memory record")
        print("  index     — Rebuild the active memory index")
        print("  activate  — Reactivate, list or search archived memories")
        print("  archive   — Archive old memories, or show --stats")
        return 0 if cmd in ("-h", "--help") else 1

    return COMMANDS[cmd](args[1:])


if __name__ == "__main__":
    sys.exit(main())
