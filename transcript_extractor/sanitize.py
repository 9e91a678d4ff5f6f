"""
HTML sanitizer for saved chat pages
Strips styling noise and keeps only the structure the extractor relies on
"""

from bs4 import BeautifulSoup

from .segmentation import parse_inline_style

REMOVED_TAGS = ["script", "style", "noscript"]
KEPT_ATTRIBUTES = {
    "role", "href", "src", "alt", "datetime", "hidden", "width", "height",
    "rel", "property", "content",
}
KEPT_STYLE_PROPERTIES = ("position", "width", "height", "display", "visibility")

# Class fragments the segmentation, role and reasoning heuristics look for
KEPT_CLASS_KEYWORDS = [
    "ds-message",
    "ds-markdown",
    "d29f3d7d",
    "fbb737a4",
    "_7d763a7",
    "_5255ff8",
    "message",
    "think",
    "thought",
    "avatar",
    "icon-user",
    "human",
    "assistant",
    "time",
    "language-",
    "lang-",
]


def _kept_classes(value):
    """Class names the extraction heuristics look for"""
    classes = value if isinstance(value, list) else str(value).split()
    return [cls for cls in classes if any(keyword in cls for keyword in KEPT_CLASS_KEYWORDS)]


def sanitize_html(html: str) -> str:
    """Clean HTML by removing styling attributes and simplifying structure

    Parses its own copy of the page. The result is not prettified: indenting
    would add whitespace inside text nodes and change the extracted text.
    """
    soup = BeautifulSoup(html or "", "lxml")

    for element in soup.find_all(REMOVED_TAGS):
        element.decompose()

    for element in soup.find_all(True):
        kept = {}
        for attr, value in element.attrs.items():
            if attr.startswith("data-") or attr in KEPT_ATTRIBUTES:
                kept[attr] = value
            elif attr == "class":
                important = _kept_classes(value)
                if important:
                    kept["class"] = important
            elif attr == "style":
                style = parse_inline_style(element)
                declarations = [
                    f"{name}: {style[name]}" for name in KEPT_STYLE_PROPERTIES if name in style
                ]
                if declarations:
                    kept["style"] = "; ".join(declarations)
        element.attrs = kept

    return str(soup)
