"""
Transcript value objects and their persisted dictionary form
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Role(str, Enum):
    """Author of a turn; the value is the persisted ``type`` field"""
    HUMAN = "user"
    AGENT = "assistant"


class RoleFilter(str, Enum):
    ALL = "all"
    HUMAN = "human"
    AGENT = "agent"

    @classmethod
    def parse(cls, value: Any) -> "RoleFilter":
        """Accept a RoleFilter, its value, or the export dialog's labels"""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        try:
            return _ROLE_FILTER_ALIASES[key]
        except KeyError:
            raise ValueError(
                f"Unknown role filter {value!r}; expected one of: "
                + ", ".join(sorted(_ROLE_FILTER_ALIASES))
            ) from None

    def admits(self, role: Role) -> bool:
        if self is RoleFilter.HUMAN:
            return role is Role.HUMAN
        if self is RoleFilter.AGENT:
            return role is Role.AGENT
        return True


_ROLE_FILTER_ALIASES = {
    "all": RoleFilter.ALL,
    "both": RoleFilter.ALL,
    "human": RoleFilter.HUMAN,
    "user": RoleFilter.HUMAN,
    "agent": RoleFilter.AGENT,
    "ai": RoleFilter.AGENT,
    "assistant": RoleFilter.AGENT,
}


@dataclass(frozen=True)
class TurnRecord:
    """One conversation turn

    ``reasoning_content`` is set exactly when ``has_reasoning`` is true.
    """
    role: Role
    content: str
    timestamp: str
    has_reasoning: bool = False
    reasoning_content: Optional[str] = None

    def __post_init__(self):
        has_text = bool(self.reasoning_content and self.reasoning_content.strip())
        if self.has_reasoning != has_text:
            raise ValueError(
                "has_reasoning must be true exactly when reasoning_content is non-empty"
            )

    def without_reasoning(self) -> "TurnRecord":
        """Copy of this turn with the reasoning dropped"""
        if not self.has_reasoning:
            return self
        return replace(self, has_reasoning=False, reasoning_content=None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp,
            "hasThinking": self.has_reasoning,
            "thinkingContent": self.reasoning_content,
        }


@dataclass(frozen=True)
class TranscriptMetadata:
    export_date: str
    url: str = ""
    title: str = ""
    chat_id: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exportDate": self.export_date,
            "url": self.url,
            "title": self.title,
            "chatId": self.chat_id,
        }


@dataclass(frozen=True)
class TranscriptRecord:
    """Ordered turns (document order is conversation order) plus metadata"""
    metadata: TranscriptMetadata
    messages: Tuple[TurnRecord, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.messages, tuple):
            object.__setattr__(self, "messages", tuple(self.messages))

    def to_dict(self) -> Dict[str, Any]:
        """Persisted export shape; key names are a contract with export consumers"""
        return {
            "messages": [message.to_dict() for message in self.messages],
            "metadata": self.metadata.to_dict(),
        }
