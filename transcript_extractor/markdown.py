"""
Markup renderer: converts an HTML subtree into normalized Markdown text

Handlers are looked up by tag name in two dispatch tables (block and inline).
Tags with no handler are transparent: their children are rendered in place,
so content the renderer does not understand is never dropped.

Code regions are protected from blank-line collapsing. The ``pre`` handler
stashes the code body in the render context and leaves a sentinel line in the
output; ``finalize`` trims line ends, collapses blank lines, and only then
swaps each sentinel for a fenced block.
"""

import re
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from .text import collapse_blank_lines, normalize_whitespace, trim_line_ends

SKIPPED_TAGS = frozenset({"script", "style", "noscript", "template"})
LIST_CONTAINERS = frozenset({"ul", "ol"})

_BLANK_RUN = re.compile(r"\n{3,}")
_NEWLINES = re.compile(r"\n+")
_LOOSE_NESTED_ITEM = re.compile(r"\n{2,}(?=(?:- |\d+\. ))")
_CRLF = re.compile(r"\r\n?")
_LANGUAGE_CLASS = re.compile(r"^(?:language|lang)-(.+)$")
_BACKTICK_RUN = re.compile(r"`+")

# Private-use code points delimit code sentinels; page text never carries them
SENTINEL_OPEN = "\ue000"
SENTINEL_CLOSE = "\ue001"


@dataclass
class ListContext:
    """One open list: ordered lists count their own items"""
    ordered: bool
    index: int = 0


@dataclass
class CodeBlock:
    body: str
    language: str = ""


@dataclass
class RenderContext:
    """Mutable traversal state owned by a single top-level render call"""
    list_stack: List[ListContext] = field(default_factory=list)
    code_blocks: List[CodeBlock] = field(default_factory=list)
    excluded: Set[int] = field(default_factory=set)
    token: str = field(default_factory=lambda: uuid.uuid4().hex)

    def stash_code(self, block: CodeBlock) -> str:
        self.code_blocks.append(block)
        return self.sentinel(len(self.code_blocks) - 1)

    def sentinel(self, index: int) -> str:
        return f"{SENTINEL_OPEN}CODE_BLOCK_{self.token}_{index}{SENTINEL_CLOSE}"


Handler = Callable[[Tag, RenderContext], str]


def convert_children(node: PageElement, context: RenderContext) -> str:
    """Render every child of a node, in order"""
    contents = getattr(node, "contents", None)
    if not contents:
        return ""
    return "".join(convert_node(child, context) for child in list(contents))


def convert_node(node: Optional[PageElement], context: RenderContext) -> str:
    """Render one node; unknown tags pass through to their children"""
    if node is None:
        return ""
    if isinstance(node, PreformattedString):
        # comments, doctypes, CDATA, processing instructions
        return ""
    if isinstance(node, NavigableString):
        return _render_text(node)
    if not isinstance(node, Tag):
        return ""
    if id(node) in context.excluded:
        return ""

    name = (node.name or "").lower()
    if name in SKIPPED_TAGS:
        return ""

    handler = BLOCK_HANDLERS.get(name) or INLINE_HANDLERS.get(name)
    if handler is not None:
        return handler(node, context)
    return convert_children(node, context)


def _is_block(element: Optional[PageElement]) -> bool:
    return isinstance(element, Tag) and (element.name or "").lower() in BLOCK_HANDLERS


def _render_text(node: NavigableString) -> str:
    text = str(node)
    if text.strip():
        return normalize_whitespace(text)
    if not text:
        return ""

    # Formatting whitespace between block elements or list items is not content
    parent = node.parent
    if parent is not None and (parent.name or "").lower() in LIST_CONTAINERS:
        return ""
    if _is_block(node.previous_sibling) or _is_block(node.next_sibling):
        return ""
    return " "


def _block(content: str) -> str:
    return f"\n\n{content}\n\n" if content else ""


def _heading(level: int) -> Handler:
    marker = "#" * level

    def handle(node: Tag, context: RenderContext) -> str:
        content = convert_children(node, context).strip()
        return _block(f"{marker} {content}") if content else ""

    return handle


def handle_block_container(node: Tag, context: RenderContext) -> str:
    return _block(convert_children(node, context).strip())


def handle_blockquote(node: Tag, context: RenderContext) -> str:
    """Prefix every line of the quoted content with a quote marker"""
    inner = convert_children(node, context).strip()
    if not inner:
        return ""
    # Paragraph breaks inside the quote become bare ">" lines
    lines = _BLANK_RUN.sub("\n\n", inner).split("\n")
    return _block("\n".join(f"> {line}" if line.strip() else ">" for line in lines))


def _list(ordered: bool) -> Handler:
    def handle(node: Tag, context: RenderContext) -> str:
        nested = bool(context.list_stack)
        context.list_stack.append(ListContext(ordered=ordered))
        try:
            body = convert_children(node, context)
        finally:
            context.list_stack.pop()

        body = _BLANK_RUN.sub("\n\n", body).strip("\n")
        if not body.strip():
            return ""
        # A nested list hangs directly under its parent item
        return f"\n{body}\n" if nested else _block(body)

    return handle


def handle_list_item(node: Tag, context: RenderContext) -> str:
    """Render one item with its marker from the innermost open list"""
    current = context.list_stack[-1] if context.list_stack else None
    marker = "- "
    if current is not None and current.ordered:
        current.index += 1
        marker = f"{current.index}. "

    content = _BLANK_RUN.sub("\n\n", convert_children(node, context).strip())
    if not content and marker == "- ":
        # Empty ordered items still render so later numbers match the page
        return ""
    content = _LOOSE_NESTED_ITEM.sub("\n", content)
    # Continuation lines, including nested lists, sit two spaces deeper
    content = content.replace("\n", "\n  ")
    return f"{marker}{content}\n"


def _code_language(node: Tag) -> str:
    candidates = [node]
    inner = node.find("code")
    if inner is not None:
        candidates.append(inner)
    for candidate in candidates:
        for cls in candidate.get("class") or []:
            match = _LANGUAGE_CLASS.match(cls)
            if match:
                return match.group(1)
    return ""


def handle_pre(node: Tag, context: RenderContext) -> str:
    """Stash the code body and leave a sentinel line in its place"""
    text = _CRLF.sub("\n", node.get_text())
    body = text.lstrip("\n").rstrip()
    if not body:
        return ""
    return _block(context.stash_code(CodeBlock(body=body, language=_code_language(node))))


def _cell_text(cell: Tag, context: RenderContext) -> str:
    text = convert_children(cell, context).strip()
    return _NEWLINES.sub(" ", text).replace("|", "\\|")


def handle_table(node: Tag, context: RenderContext) -> str:
    """Render the table's own rows as pipe-delimited lines"""
    rows = []
    for row in node.find_all("tr"):
        if row.find_parent("table") is not node or id(row) in context.excluded:
            continue
        cells = row.find_all(["th", "td"], recursive=False)
        if not cells:
            continue
        texts = [_cell_text(cell, context) for cell in cells]
        is_header = all(cell.name == "th" for cell in cells)
        rows.append((texts, is_header))

    if not rows:
        return ""

    lines = []
    for position, (texts, is_header) in enumerate(rows):
        lines.append("| " + " | ".join(texts) + " |")
        if position == 0 and is_header:
            lines.append("| " + " | ".join("---" for _ in texts) + " |")
    return _block("\n".join(lines))


def handle_strong(node: Tag, context: RenderContext) -> str:
    content = convert_children(node, context).strip()
    return f"**{content}**" if content else ""


def handle_emphasis(node: Tag, context: RenderContext) -> str:
    content = convert_children(node, context).strip()
    return f"*{content}*" if content else ""


def handle_code(node: Tag, context: RenderContext) -> str:
    """Inline code in backticks; raw text when it is the body of a pre"""
    parent = node.parent
    if parent is not None and (parent.name or "").lower() == "pre":
        return node.get_text()
    content = normalize_whitespace(node.get_text()).strip()
    return f"`{content}`" if content else ""


def handle_anchor(node: Tag, context: RenderContext) -> str:
    """Link as [text](href), falling back to the href or the bare text"""
    href = node.get("href") or ""
    content = convert_children(node, context).strip() or href
    if not content:
        return ""
    if not href:
        return content
    return f"[{content}]({href})"


def handle_image(node: Tag, context: RenderContext) -> str:
    """Image as ![alt](src), or just the alt text without a source"""
    alt = normalize_whitespace(node.get("alt") or "")
    src = node.get("src") or ""
    if not src:
        return alt
    return f"![{alt}]({src})"


def handle_inline_wrapper(node: Tag, context: RenderContext) -> str:
    return convert_children(node, context)


BLOCK_HANDLERS: Dict[str, Handler] = {
    "h1": _heading(1),
    "h2": _heading(2),
    "h3": _heading(3),
    "h4": _heading(4),
    "h5": _heading(5),
    "h6": _heading(6),
    "p": handle_block_container,
    "div": handle_block_container,
    "section": handle_block_container,
    "article": handle_block_container,
    "header": handle_block_container,
    "footer": handle_block_container,
    "main": handle_block_container,
    "figure": handle_block_container,
    "blockquote": handle_blockquote,
    "ul": _list(ordered=False),
    "ol": _list(ordered=True),
    "li": handle_list_item,
    "pre": handle_pre,
    "table": handle_table,
}

INLINE_HANDLERS: Dict[str, Handler] = {
    "br": lambda node, context: "\n",
    "strong": handle_strong,
    "b": handle_strong,
    "em": handle_emphasis,
    "i": handle_emphasis,
    "code": handle_code,
    "a": handle_anchor,
    "span": handle_inline_wrapper,
    "mark": handle_inline_wrapper,
    "small": handle_inline_wrapper,
    "label": handle_inline_wrapper,
    "hr": lambda node, context: "\n\n---\n\n",
    "img": handle_image,
}


def _fence(block: CodeBlock, prefix: str) -> str:
    # The fence outruns any backtick run in the code, so no code line can close it
    longest = max((len(run) for run in _BACKTICK_RUN.findall(block.body)), default=0)
    marker = "`" * max(3, longest + 1)
    lines = [f"{marker}{block.language}"] + block.body.split("\n") + [marker]
    return "\n".join(prefix + line if line else prefix.rstrip() for line in lines)


def _restore_code_blocks(value: str, context: RenderContext) -> str:
    """Swap each code sentinel for its fenced block"""
    if not context.code_blocks:
        return value

    start = re.escape(f"{SENTINEL_OPEN}CODE_BLOCK_{context.token}_")
    end = re.escape(SENTINEL_CLOSE)
    own_line = re.compile(rf"^([ \t>]*){start}(\d+){end}[ \t]*$", re.MULTILINE)
    anywhere = re.compile(rf"{start}(\d+){end}")

    value = own_line.sub(
        lambda m: _fence(context.code_blocks[int(m.group(2))], m.group(1)), value
    )
    return anywhere.sub(
        lambda m: "\n" + _fence(context.code_blocks[int(m.group(1))], "") + "\n", value
    )


def finalize(value: str, context: RenderContext) -> str:
    """Trim line ends, collapse blank lines, then restore fenced code (in that order)"""
    value = collapse_blank_lines(trim_line_ends(value))
    return _restore_code_blocks(value, context).strip()


def render(node: Optional[PageElement], exclude: Optional[Iterable[PageElement]] = None) -> str:
    """Render a subtree to Markdown, skipping the subtrees listed in ``exclude``

    The document is only read; excluded subtrees are skipped by identity.
    """
    if node is None:
        return ""
    context = RenderContext()
    if exclude:
        context.excluded.update(id(item) for item in exclude if item is not None)
    return finalize(convert_node(node, context), context)


def html_to_markdown(html: str) -> str:
    """Parse an HTML string and render the whole fragment"""
    if not html:
        return ""
    return render(BeautifulSoup(html, "lxml"))
