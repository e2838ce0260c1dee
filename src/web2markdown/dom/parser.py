"""Build the immutable document tree from HTML using BeautifulSoup."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import Any, Optional, Union

from bs4 import BeautifulSoup, Tag
from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction

from .nodes import ElementNode, Node, TextNode, find_first, text_content

logger = logging.getLogger(__name__)

DOCUMENT_TAG = "#document"

# NavigableString subclasses that carry no visible text
_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


def detect_encoding(html: bytes) -> str:
    """Detect character encoding from a meta charset declaration."""
    head = html[:2048].decode("latin-1", errors="ignore")
    charset_match = re.search(r'charset=["\']?([^"\'\s>;]+)', head, re.IGNORECASE)
    if charset_match:
        return charset_match.group(1).strip()
    return "utf-8"


def decode_html(html: Union[bytes, str]) -> str:
    """Decode raw HTML bytes, falling back to UTF-8 with replacement."""
    if isinstance(html, str):
        return html
    encoding = detect_encoding(html)
    try:
        return html.decode(encoding, errors="replace")
    except LookupError:
        logger.debug(f"Unknown encoding {encoding!r}, falling back to utf-8")
        return html.decode("utf-8", errors="replace")


def _attr_value(value: object) -> str:
    # bs4 returns multi-valued attributes (class, rel, ...) as lists
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return "" if value is None else str(value)


def _element(tag: Tag, children: list[Node]) -> ElementNode:
    attrs = tuple((str(name), _attr_value(value)) for name, value in tag.attrs.items())
    return ElementNode(tag.name or DOCUMENT_TAG, attrs, tuple(children))


def _convert(root: Tag) -> ElementNode:
    # Explicit stack: deeply nested markup must not hit the recursion limit
    stack: list[tuple[Tag, Iterator[Any], list[Node]]] = [(root, iter(root.children), [])]
    while True:
        tag, children, converted = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            element = _element(tag, converted)
            if not stack:
                return element
            stack[-1][2].append(element)
        elif isinstance(child, Tag):
            stack.append((child, iter(child.children), []))
        elif isinstance(child, NavigableString) and not isinstance(child, _SKIPPED_STRINGS):
            converted.append(TextNode(str(child)))


def from_soup(soup: Union[BeautifulSoup, Tag]) -> ElementNode:
    """Convert a BeautifulSoup document or tag into an ElementNode tree."""
    root = _convert(soup)
    if isinstance(soup, BeautifulSoup):
        return ElementNode(DOCUMENT_TAG, (), root.children)
    return root


def parse_html(html: Union[bytes, str], parser: str = "html.parser") -> ElementNode:
    """
    Parse an HTML document into an immutable tree rooted at a ``#document`` node.

    Args:
        html: Raw HTML bytes or decoded text
        parser: BeautifulSoup tree builder to use

    Returns:
        Document root element
    """
    soup = BeautifulSoup(decode_html(html), parser)
    return from_soup(soup)


def find_title(root: Node) -> str:
    """Return the collapsed text of the first ``<title>`` element, or an empty string."""
    title = find_first(root, lambda element: element.tag == "title")
    if title is None:
        return ""
    return " ".join(text_content(title).split())


def find_base_href(root: Node) -> Optional[str]:
    """Return the ``href`` of the first ``<base>`` element, if any."""
    base = find_first(root, lambda element: element.tag == "base" and element.has_attr("href"))
    if base is None:
        return None
    href = (base.get("href") or "").strip()
    return href or None
