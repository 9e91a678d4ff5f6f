"""
Find the agent's reasoning ("thinking") section inside a turn
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from bs4.element import Tag

from .config import DEFAULT_SETTINGS, HeuristicSettings
from .markdown import render
from .text import normalize_content, normalize_whitespace

logger = logging.getLogger(__name__)

THOUGHT_BALLOON = "\U0001F4AD"


@dataclass(frozen=True)
class ReasoningBlock:
    header: str
    body: str
    node: Optional[Tag] = field(default=None, repr=False, compare=False)

    @property
    def full_text(self) -> str:
        return f"{self.header}\n\n{self.body}".strip()


def find_reasoning_container(turn_node: Tag, settings: HeuristicSettings = DEFAULT_SETTINGS) -> Optional[Tag]:
    """First descendant matching a reasoning signature, tried in priority order"""
    for selector in settings.reasoning_selectors:
        match = turn_node.select_one(selector)
        if match is not None:
            return match
    return None


def _find_header(turn_node: Tag, settings: HeuristicSettings) -> str:
    for selector in settings.reasoning_header_selectors:
        element = turn_node.select_one(selector)
        if element is None:
            continue
        text = normalize_whitespace(element.get_text()).strip()
        if text:
            return text
    return settings.default_reasoning_header


def _keyword_candidate(turn_node: Tag, settings: HeuristicSettings) -> Optional[Tag]:
    # Approximate: a keyword-bearing element whose parent carries a thinking marker
    for element in turn_node.find_all(True):
        text = element.get_text().strip()
        if not text:
            continue
        lowered = text.lower()
        if not any(keyword in lowered for keyword in settings.reasoning_keywords):
            continue
        parent = element.parent
        if parent is None:
            continue
        classes = " ".join(parent.get("class") or [])
        if THOUGHT_BALLOON in parent.get_text() or "think" in classes or "thought" in classes:
            return element
    return None


def _render_body(container: Tag, header: str) -> str:
    lines = render(container).split("\n")
    return normalize_content("\n".join(line for line in lines if line.strip() != header))


def extract_reasoning(turn_node: Optional[Tag], settings: Optional[HeuristicSettings] = None) -> Optional[ReasoningBlock]:
    """Return the turn's reasoning block, or None when it has none"""
    if not isinstance(turn_node, Tag):
        return None
    settings = settings or DEFAULT_SETTINGS

    container = find_reasoning_container(turn_node, settings)
    if container is not None:
        header = _find_header(turn_node, settings)
        return ReasoningBlock(header=header, body=_render_body(container, header), node=container)

    candidate = _keyword_candidate(turn_node, settings)
    if candidate is not None:
        logger.debug("Reasoning found by keyword scan in <%s>", candidate.name)
        header = settings.default_reasoning_header
        return ReasoningBlock(header=header, body=_render_body(candidate, header), node=candidate)

    return None


def has_reasoning_block(turn_node: Optional[Tag], settings: Optional[HeuristicSettings] = None) -> bool:
    """Whether the turn holds a reasoning section"""
    return extract_reasoning(turn_node, settings) is not None
