"""
Serialize a TranscriptRecord for export consumers
"""

import json
from typing import List

from .models import Role, TranscriptRecord

EXPORT_PREFIX = "deepseek-chat"


def to_json(record: TranscriptRecord, indent: int = 2) -> str:
    """Structured export: the persisted ``messages``/``metadata`` shape"""
    return json.dumps(record.to_dict(), indent=indent, ensure_ascii=False)


def export_filename(record: TranscriptRecord, extension: str = "json", prefix: str = EXPORT_PREFIX) -> str:
    """e.g. deepseek-chat-<chatId>-2024-05-01.json"""
    date = record.metadata.export_date[:10]
    return f"{prefix}-{record.metadata.chat_id}-{date}.{extension.lstrip('.')}"


def to_markdown(record: TranscriptRecord) -> str:
    """Readable Markdown document with one section per turn"""
    metadata = record.metadata
    parts: List[str] = [f"# {metadata.title or 'Chat Conversation'}", ""]
    source = f" from {metadata.url}" if metadata.url else ""
    parts += [f"Exported {metadata.export_date}{source}", "", "---", ""]

    counters = {Role.HUMAN: 0, Role.AGENT: 0}
    for message in record.messages:
        counters[message.role] += 1
        if message.role is Role.HUMAN:
            parts += [f"## 👤 User Message {counters[message.role]}", ""]
            parts += [message.content, ""]
            continue

        parts += [f"## 🤖 Assistant Response {counters[message.role]}", ""]
        if message.has_reasoning:
            parts += ["### 🧠 Thinking Process", "", message.reasoning_content, ""]
            parts += ["### 🚀 Response", ""]
        parts += [message.content, "", "---", ""]

    return "\n".join(parts).rstrip() + "\n"
