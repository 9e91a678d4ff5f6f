"""
Extraction pipeline: page snapshot in, TranscriptRecord out

segment -> per turn (classify, reasoning, primary content) -> records.
The document is only read, so running twice on the same snapshot with the
same ``exported_at`` gives an identical record.
"""

import logging
import re
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from .config import DEFAULT_SETTINGS, HeuristicSettings
from .markdown import render
from .models import RoleFilter, TranscriptMetadata, TranscriptRecord, TurnRecord
from .reasoning import ReasoningBlock, extract_reasoning
from .roles import classify_role
from .segmentation import segment
from .text import normalize_content, normalize_whitespace

logger = logging.getLogger(__name__)

INTERACTIVE_SELECTOR = "button, input, select, textarea, svg"
MARKDOWN_BLOCK_SELECTOR = ".ds-markdown"
USER_BUBBLE_SELECTOR = ".fbb737a4"
CHAT_ID_PATTERN = re.compile(r"/s/([a-f0-9-]+)")


def isoformat(moment: datetime) -> str:
    """UTC timestamp with millisecond precision and a Z suffix"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def extract_chat_id(url: Optional[str]) -> str:
    """Chat id from a /s/<id> url path, or unknown when there is none"""
    if not url:
        return "unknown"
    match = CHAT_ID_PATTERN.search(urlparse(url).path)
    return match.group(1) if match else "unknown"


def _owner_document(node: Tag) -> Tag:
    top = node
    for parent in node.parents:
        top = parent
    return top


def _document_title(document: Optional[Tag]) -> str:
    if document is None:
        return ""
    title = document.find("title")
    if title is None:
        return ""
    return normalize_whitespace(title.get_text()).strip()


def _document_url(document: Optional[Tag]) -> str:
    if document is None:
        return ""
    canonical = document.find("link", rel="canonical")
    if canonical is not None and canonical.get("href"):
        return canonical["href"].strip()
    og_url = document.find("meta", attrs={"property": "og:url"})
    if og_url is not None and og_url.get("content"):
        return og_url["content"].strip()
    return ""


def extract_timestamp(node: Tag, fallback: str, settings: HeuristicSettings = DEFAULT_SETTINGS) -> str:
    """Best-effort timestamp of a turn; ``fallback`` when the turn shows none"""
    for selector in settings.timestamp_selectors:
        element = node.select_one(selector)
        if element is None:
            continue
        value = element.get("datetime") or normalize_whitespace(element.get_text()).strip()
        if value:
            return value
    return fallback


def _within(node: Tag, ids: set) -> bool:
    return id(node) in ids or any(id(parent) in ids for parent in node.parents)


def extract_primary_content(
    node: Tag,
    reasoning: Optional[ReasoningBlock] = None,
    settings: HeuristicSettings = DEFAULT_SETTINGS,
) -> str:
    """The turn's answer text with reasoning and interactive controls cut out"""
    excluded: List[Tag] = list(node.select(INTERACTIVE_SELECTOR))
    reasoning_nodes: List[Tag] = []
    for selector in settings.reasoning_selectors:
        reasoning_nodes.extend(node.select(selector))
    if reasoning is not None:
        if reasoning.node is not None:
            reasoning_nodes.append(reasoning.node)
        for selector in settings.reasoning_header_selectors:
            excluded.extend(node.select(selector))
    excluded.extend(reasoning_nodes)
    reasoning_ids = {id(item) for item in reasoning_nodes}

    block_ids: set = set()
    blocks: List[Tag] = []
    for block in node.select(MARKDOWN_BLOCK_SELECTOR):
        if _within(block, reasoning_ids) or _within(block, block_ids):
            continue
        blocks.append(block)
        block_ids.add(id(block))

    texts = [normalize_content(render(block, exclude=excluded)) for block in blocks]
    texts = [text for text in texts if text]
    if texts:
        return normalize_content("\n\n".join(texts))

    bubble = node.select_one(USER_BUBBLE_SELECTOR)
    if bubble is not None and not _within(bubble, reasoning_ids):
        return normalize_content(render(bubble, exclude=excluded))

    return normalize_content(render(node, exclude=excluded))


def parse_turn(
    node: Tag,
    fallback_timestamp: str,
    settings: Optional[HeuristicSettings] = None,
) -> Optional[TurnRecord]:
    """Build the record for one turn node, or None when it holds no real content"""
    settings = settings or DEFAULT_SETTINGS
    if not isinstance(node, Tag):
        return None
    text = node.get_text().strip()
    if not text:
        return None

    reasoning = extract_reasoning(node, settings)
    role = classify_role(node, text, settings, reasoning=reasoning)
    content = extract_primary_content(node, reasoning, settings)
    if len(content.strip()) < settings.min_turn_length:
        logger.debug("Skipping <%s>: %d characters of content", node.name, len(content.strip()))
        return None

    reasoning_text = reasoning.full_text if reasoning is not None else ""
    return TurnRecord(
        role=role,
        content=content,
        timestamp=extract_timestamp(node, fallback_timestamp, settings),
        has_reasoning=bool(reasoning_text.strip()),
        reasoning_content=reasoning_text if reasoning_text.strip() else None,
    )


def extract_transcript(
    root: Optional[Tag],
    *,
    url: Optional[str] = None,
    title: Optional[str] = None,
    exported_at: Optional[datetime] = None,
    settings: Optional[HeuristicSettings] = None,
) -> TranscriptRecord:
    """Extract every turn of a chat page snapshot, in conversation order

    Finding no turns is a valid outcome and yields an empty record.
    """
    settings = settings or DEFAULT_SETTINGS
    export_date = isoformat(exported_at or datetime.now(timezone.utc))
    document = _owner_document(root) if isinstance(root, Tag) else None
    if url is None:
        url = _document_url(document)
    if title is None:
        title = _document_title(document)
    metadata = TranscriptMetadata(
        export_date=export_date,
        url=url,
        title=title,
        chat_id=extract_chat_id(url),
    )

    if not isinstance(root, Tag):
        logger.warning("Nothing to extract: no document root")
        return TranscriptRecord(metadata=metadata)

    nodes = segment(root, settings=settings)
    messages = []
    for node in nodes:
        turn = parse_turn(node, export_date, settings)
        if turn is not None:
            messages.append(turn)

    logger.info("Extracted %d turns from %d candidate nodes", len(messages), len(nodes))
    return TranscriptRecord(metadata=metadata, messages=tuple(messages))


def extract_transcript_from_html(html: str, **kwargs: Any) -> TranscriptRecord:
    """Parse a saved page with lxml and extract its transcript"""
    return extract_transcript(BeautifulSoup(html or "", "lxml"), **kwargs)


def filter_transcript(
    record: TranscriptRecord,
    role_filter: Any = RoleFilter.ALL,
    include_reasoning: bool = True,
) -> TranscriptRecord:
    """New record restricted to one role and, optionally, without reasoning

    The input record is left untouched.
    """
    role_filter = RoleFilter.parse(role_filter)
    messages = tuple(
        message if include_reasoning else message.without_reasoning()
        for message in record.messages
        if role_filter.admits(message.role)
    )
    return replace(record, messages=messages)
