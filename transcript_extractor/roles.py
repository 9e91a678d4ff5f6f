"""
Classify a turn as written by the human or by the agent

The chat markup has no reliable author field, so this is an approximate,
best-effort heuristic. Decision order:
  1. a class signature unique to human bubbles
  2. an author data attribute on the turn or its nearest marked ancestor
  3. a reasoning block (only agents think out loud)
  4. two indicator sets, one point per matching indicator; ties go to the
     human when the text is short
Thresholds live in HeuristicSettings; the indicator sets are plain data.
"""

import logging
from dataclasses import dataclass
from itertools import chain
from typing import Any, Callable, List, Optional, Tuple

from bs4.element import Tag

from .config import DEFAULT_SETTINGS, HeuristicSettings
from .models import Role
from .reasoning import extract_reasoning

logger = logging.getLogger(__name__)

HUMAN_CLASS_SIGNATURE = "d29f3d7d"
AUTHOR_ATTRIBUTES = ("data-role", "data-author", "data-message-author-role")
HUMAN_AUTHORS = frozenset({"user", "human"})
AGENT_AUTHORS = frozenset({"assistant", "ai", "agent", "bot", "model"})

# Marks a reasoning argument the caller did not supply
NOT_EXTRACTED = object()


@dataclass(frozen=True)
class Indicator:
    """A named yes/no feature of a turn"""
    name: str
    test: Callable[[Optional[Tag], str, HeuristicSettings], bool]

    def __call__(self, node: Optional[Tag], text: str, settings: HeuristicSettings) -> bool:
        return bool(self.test(node, text, settings))


@dataclass(frozen=True)
class RoleScores:
    human: int
    agent: int
    human_matches: Tuple[str, ...] = ()
    agent_matches: Tuple[str, ...] = ()


def _class_list(node: Optional[Tag]) -> List[str]:
    if not isinstance(node, Tag):
        return []
    return list(node.get("class") or [])


def _contains(selector: str):
    return lambda node, text, settings: node is not None and node.select_one(selector) is not None


def _class_mentions(*fragments: str):
    return lambda node, text, settings: any(
        fragment in cls for cls in _class_list(node) for fragment in fragments
    )


HUMAN_INDICATORS = (
    Indicator("user-bubble", _contains(".fbb737a4")),
    Indicator("user-avatar", _contains('[class*="avatar-user"], [data-testid="user-avatar"]')),
    Indicator("user-icon", _contains('[class*="icon-user"]')),
    Indicator("human-class", _class_mentions("human")),
    Indicator("short-text", lambda node, text, settings: len(text) < settings.human_short_text),
)

AGENT_INDICATORS = (
    Indicator("markdown-body", _contains(".ds-markdown")),
    Indicator("code", _contains("pre, code")),
    Indicator("assistant-class", _class_mentions("assistant", "_7d763a7")),
    Indicator("thought-prefix", lambda node, text, settings: text.startswith("Thought for")),
    Indicator("long-text", lambda node, text, settings: len(text) > settings.agent_long_text),
)


def author_attribute_role(node: Optional[Tag]) -> Optional[Role]:
    """Role named by the nearest author attribute on the node or its ancestors"""
    if not isinstance(node, Tag):
        return None
    for element in chain([node], node.parents):
        for attribute in AUTHOR_ATTRIBUTES:
            value = element.get(attribute)
            if not isinstance(value, str):
                continue
            value = value.strip().lower()
            if value in HUMAN_AUTHORS:
                return Role.HUMAN
            if value in AGENT_AUTHORS:
                return Role.AGENT
    return None


def score_role(node: Optional[Tag], text: str, settings: Optional[HeuristicSettings] = None) -> RoleScores:
    """One point per matching indicator, for each role"""
    settings = settings or DEFAULT_SETTINGS
    text = text or ""
    human = tuple(indicator.name for indicator in HUMAN_INDICATORS if indicator(node, text, settings))
    agent = tuple(indicator.name for indicator in AGENT_INDICATORS if indicator(node, text, settings))
    return RoleScores(human=len(human), agent=len(agent), human_matches=human, agent_matches=agent)


def classify_role(
    node: Optional[Tag],
    text: str,
    settings: Optional[HeuristicSettings] = None,
    reasoning: Any = NOT_EXTRACTED,
) -> Role:
    """Best-effort author classification; never raises for odd markup

    Pass ``reasoning`` when the caller already ran extract_reasoning on the
    node (None included); otherwise it is extracted here.
    """
    settings = settings or DEFAULT_SETTINGS
    text = text or ""

    if any(HUMAN_CLASS_SIGNATURE in cls for cls in _class_list(node)):
        return Role.HUMAN

    attributed = author_attribute_role(node)
    if attributed is not None:
        return attributed

    if reasoning is NOT_EXTRACTED:
        reasoning = extract_reasoning(node, settings)
    if reasoning is not None:
        return Role.AGENT

    scores = score_role(node, text, settings)
    logger.debug(
        "Role scores human=%d %s agent=%d %s",
        scores.human, scores.human_matches, scores.agent, scores.agent_matches,
    )
    if scores.human == scores.agent:
        return Role.HUMAN if len(text) < settings.tie_break_length else Role.AGENT
    return Role.HUMAN if scores.human > scores.agent else Role.AGENT
