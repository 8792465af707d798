"""Document templates for records and the active-memory index.

Both English and Chinese wordings are kept here so the rest of the package
only has to pass a language code around.
"""

from __future__ import annotations

from datetime import datetime

SUMMARY_FILENAME = "summary.md"
LOG_FILENAME = "conversation.md"
INDEX_FILENAME = "index.md"

_SUMMARY_TEMPLATES = {
    "en": """\
# Conversation Memory: {{topic title}}

## Meta

- **Time**: {now}
- **Duration**: about {{N}} minutes
- **Turns**: {{N}}
- **Keywords**: {{keyword1}}, {{keyword2}}, {{keyword3}}

## Summary

{{One or two paragraphs describing the topic and background of this conversation}}

## Key Decisions

1. {{decision1}}
2. {{decision2}}
3. ...

## Conclusions

- {{conclusion1}}
- {{conclusion2}}
- ...

## Todo

- [ ] {{todo1}}
- [ ] {{todo2}}
- ...

## Related Files

- `{{file path 1}}` - {{short note}}
- `{{file path 2}}` - {{short note}}
- ...

## Source

For the full raw conversation, see [{log_filename}]({log_filename})
""",
    "zh": """\
# 对话记忆：{{主题标题}}

## 元信息

- **时间**：{now}
- **持续**：约 {{N}} 分钟
- **对话轮次**：{{N}} 轮
- **关键词**：{{关键词1}}, {{关键词2}}, {{关键词3}}

## 主题摘要

{{用 1-2 段话概括这次对话的主题和背景}}

## 关键决策

1. {{决策1}}
2. {{决策2}}
3. ...

## 重要结论

- {{结论1}}
- {{结论2}}
- ...

## 待办事项

- [ ] {{待办1}}
- [ ] {{待办2}}
- ...

## 相关文件

- `{{文件路径1}}` - {{简要说明}}
- `{{文件路径2}}` - {{简要说明}}
- ...

## 溯源

如需查看完整原始对话，请参阅 [{log_filename}]({log_filename})
""",
}

_LOG_TEMPLATES = {
    "en": """\
# Raw Conversation Log

## Info

- **Start time**: {started}
- **End time**: {{YYYY-MM-DD HH:MM:SS}}
- **Turns**: {{N}}

---

## Conversation

### User [{{HH:MM:SS}}]

{{first user message}}

---

### Claude [{{HH:MM:SS}}]

{{first reply}}

---

{{continue with every turn...}}
""",
    "zh": """\
# 原始对话记录

## 对话信息

- **开始时间**：{started}
- **结束时间**：{{YYYY-MM-DD HH:MM:SS}}
- **对话轮次**：{{N}} 轮

---

## 对话内容

### 用户 [{{HH:MM:SS}}]

{{用户的第一条消息}}

---

### Claude [{{HH:MM:SS}}]

{{Claude 的第一条回复}}

---

{{继续记录所有对话轮次...}}
""",
}

_INDEX_TEMPLATES = {
    "en": """\
# Active Memory Index

> This file is automatically updated by scripts, recording summary info of all active memories.

## Index Table

<!-- INDEX_START -->
{table}
<!-- INDEX_END -->

## Keywords Summary

<!-- KEYWORDS_START -->
{keywords}
<!-- KEYWORDS_END -->

## Usage

1. Find relevant memory from the index table
2. Read `active/{{memory-id}}/{summary}` for details
3. For raw conversation, read `active/{{memory-id}}/{log}`
""",
    "zh": """\
# 活跃记忆索引

> 此文件由脚本自动更新，记录所有活跃记忆的摘要信息。

## 索引表

<!-- INDEX_START -->
{table}
<!-- INDEX_END -->

## 关键词汇总

<!-- KEYWORDS_START -->
{keywords}
<!-- KEYWORDS_END -->

## 使用说明

1. 根据索引表找到相关记忆
2. 读取对应记忆的 `active/{{记忆ID}}/{summary}` 了解详情
3. 如需原始对话，读取 `active/{{记忆ID}}/{log}`
""",
}

TABLE_HEADERS = {
    "en": "| Memory ID | Topic | Keywords | Date |\n|-----------|-------|----------|------|",
    "zh": "| 记忆ID | 主题 | 关键词 | 时间 |\n|--------|------|--------|------|",
}

EMPTY_TABLE_ROWS = {
    "en": "| (No active memories) | - | - | - |",
    "zh": "| （暂无活跃记忆） | - | - | - |",
}

EMPTY_KEYWORDS = {
    "en": "(No valid keywords yet)",
    "zh": "（暂无有效关键词）",
}

EMPTY_DESCRIPTION_KEYWORDS = {
    "en": "(no active memories)",
    "zh": "（无活跃记忆）",
}


def format_datetime(dt: datetime) -> str:
    """Minute-precision timestamp used in templates and listings."""
    return dt.strftime("%Y-%m-%d %H:%M")


def render_summary(now: datetime, language: str = "en") -> str:
    return _SUMMARY_TEMPLATES[language].format(
        now=format_datetime(now), log_filename=LOG_FILENAME
    )


def render_log(now: datetime, language: str = "en") -> str:
    return _LOG_TEMPLATES[language].format(started=now.strftime("%Y-%m-%d %H:%M:%S"))


def render_index(table: str, keywords: str, language: str = "en") -> str:
    return _INDEX_TEMPLATES[language].format(
        table=table, keywords=keywords, summary=SUMMARY_FILENAME, log=LOG_FILENAME
    )
