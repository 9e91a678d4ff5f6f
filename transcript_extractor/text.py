"""
Whitespace and blank-line rules shared by the renderer and the extractors
"""

import re

_NBSP = "\u00a0"
_HORIZONTAL_WS = re.compile(r"[ \t\f\v]+")
_LINE_END_WS = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUN = re.compile(r"\n{3,}")
_TRAILING_WS = re.compile(r"[\s\u00a0]+$")
# A fenced code region, possibly indented or quoted, closed by the same prefix and fence
_FENCED_BLOCK = re.compile(r"^([ \t>]*)(`{3,})(?!`)[^\n]*\n.*?^\1\2[ \t]*$", re.MULTILINE | re.DOTALL)


def normalize_whitespace(value: str) -> str:
    """Turn non-breaking spaces into spaces and squeeze horizontal whitespace"""
    return _HORIZONTAL_WS.sub(" ", value.replace(_NBSP, " "))


def trim_line_ends(value: str) -> str:
    """Strip trailing spaces and tabs from every line"""
    return _LINE_END_WS.sub("", value)


def collapse_blank_lines(value: str) -> str:
    """Drop trailing whitespace and keep at most one blank line between blocks"""
    return _BLANK_RUN.sub("\n\n", value.rstrip())


def _outside_fences(value: str, transform) -> str:
    pieces = []
    last = 0
    for match in _FENCED_BLOCK.finditer(value):
        pieces.append(transform(value[last:match.start()]))
        pieces.append(match.group(0))
        last = match.end()
    pieces.append(transform(value[last:]))
    return "".join(pieces)


def normalize_content(value: str) -> str:
    """Canonical form for a piece of turn content; fenced code is left alone"""
    if not value:
        return ""
    value = _outside_fences(value, lambda text: _BLANK_RUN.sub("\n\n", text))
    return _TRAILING_WS.sub("", value).strip()
