"""
Find the nodes that hold individual conversation turns

Strategies are tried in order and the first one that finds anything wins:
one strategy per structural selector (most specific first), then a
content-shape scan for pages whose markup matches none of the selectors.
"""

import logging
import re
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from bs4.element import Tag

from .config import DEFAULT_SETTINGS, HeuristicSettings

logger = logging.getLogger(__name__)

Strategy = Callable[[Tag], List[Tag]]

SHAPE_CANDIDATES = ["div", "section", "article"]
INTERACTIVE_CONTROLS = ["input", "button", "select", "textarea"]
CHROME_REGIONS = ["nav", "header", "footer", "aside"]
PINNED_POSITIONS = frozenset({"fixed", "sticky"})

_STYLE_DECLARATION = re.compile(r"([\w-]+)\s*:\s*([^;]+)")
_PIXELS = re.compile(r"^(\d+(?:\.\d+)?)(?:px)?$")


def parse_inline_style(node: Tag) -> Dict[str, str]:
    """Declarations of the node's style attribute, lower-cased"""
    style = node.get("style") or ""
    return {
        match.group(1).lower(): match.group(2).strip().lower()
        for match in _STYLE_DECLARATION.finditer(style)
    }


def declared_size(node: Tag, style: Dict[str, str], dimension: str) -> Optional[float]:
    """Pixel size from inline style or attribute; None when not declared in pixels"""
    for raw in (style.get(dimension), node.get(dimension)):
        if not isinstance(raw, str):
            continue
        match = _PIXELS.match(raw.strip().lower())
        if match:
            return float(match.group(1))
    return None


def _is_hidden(node: Tag, style: Dict[str, str]) -> bool:
    return (
        node.has_attr("hidden")
        or style.get("display") == "none"
        or style.get("visibility") == "hidden"
    )


def innermost(nodes: Iterable[Tag]) -> List[Tag]:
    """Drop every node that wraps another node of the set; order is kept

    A wrapper matched together with the turns inside it is a thread region,
    not a turn, so a turn never contains another turn.
    """
    nodes = list(nodes)
    wrappers = set()
    for node in nodes:
        wrappers.update(id(parent) for parent in node.parents)
    return [node for node in nodes if id(node) not in wrappers]


def selector_strategy(selector: str) -> Strategy:
    """Turns are the innermost matches of a CSS selector, in document order"""
    def strategy(root: Tag) -> List[Tag]:
        matches = innermost(root.select(selector))
        if matches:
            logger.info("Found %d turns using selector: %s", len(matches), selector)
        return matches

    strategy.__name__ = f"selector_strategy({selector!r})"
    return strategy


def looks_like_turn(node: Tag, settings: HeuristicSettings = DEFAULT_SETTINGS) -> bool:
    """Content-shape test for a node that no structural selector recognised

    A static snapshot has no layout, so geometry is read from the inline
    style and size attributes; undeclared sizes pass.
    """
    text = node.get_text().strip()
    if len(text) < settings.shape_min_text:
        return False
    if node.find(INTERACTIVE_CONTROLS) is not None:
        return False
    if node.find_parent(CHROME_REGIONS) is not None:
        return False

    style = parse_inline_style(node)
    if style.get("position") in PINNED_POSITIONS or _is_hidden(node, style):
        return False

    width = declared_size(node, style, "width")
    if width is not None and width < settings.shape_min_width:
        return False
    height = declared_size(node, style, "height")
    if height is not None and height < settings.shape_min_height:
        return False
    return True


def content_shape_strategy(settings: Optional[HeuristicSettings] = None) -> Strategy:
    """Fallback strategy for pages no structural selector recognises"""
    settings = settings or DEFAULT_SETTINGS

    def strategy(root: Tag) -> List[Tag]:
        # find_all walks in document order, which stands in for vertical position
        turns = innermost(node for node in root.find_all(SHAPE_CANDIDATES) if looks_like_turn(node, settings))
        logger.info("Found %d potential turns using content-based detection", len(turns))
        return turns

    strategy.__name__ = "content_shape_strategy"
    return strategy


def default_strategies(settings: Optional[HeuristicSettings] = None) -> List[Strategy]:
    """Selector strategies in priority order, then the content-shape scan"""
    settings = settings or DEFAULT_SETTINGS
    strategies = [selector_strategy(selector) for selector in settings.turn_selectors]
    strategies.append(content_shape_strategy(settings))
    return strategies


def segment(
    root: Optional[Tag],
    strategies: Optional[Sequence[Strategy]] = None,
    settings: Optional[HeuristicSettings] = None,
) -> List[Tag]:
    """Ordered turn nodes of the document; an empty list when nothing qualifies"""
    if not isinstance(root, Tag):
        return []
    if strategies is None:
        strategies = default_strategies(settings)

    for strategy in strategies:
        nodes = strategy(root)
        if nodes:
            return list(nodes)
        logger.debug("%s found nothing", getattr(strategy, "__name__", strategy))

    logger.warning("No conversation turns found")
    return []
