"""Conversation memory records: store, metadata, index and archival.

Layout (below <workspace>/.claude/data/<skill-name>/memories/):
    ├── index.md                       # Active index: table + keyword summary
    ├── active/
    │   └── mem-20260111-143000/
    │       ├── summary.md             # Title, keywords, time, sections
    │       └── conversation.md        # Raw transcript
    └── archive/                       # Same shape; excluded from the index

A record's state is the partition its directory lives in. Records move, they
are never copied or deleted.
"""
