"""Document tree model, selectors and HTML adapter."""

from .nodes import ElementNode, Node, TextNode, find_first, iter_elements, prune, text_content
from .parser import find_base_href, find_title, from_soup, parse_html
from .selectors import Selector, compile_selectors

__all__ = [
    # Nodes
    "Node",
    "TextNode",
    "ElementNode",
    "iter_elements",
    "find_first",
    "text_content",
    "prune",
    # Selectors
    "Selector",
    "compile_selectors",
    # HTML adapter
    "parse_html",
    "from_soup",
    "find_title",
    "find_base_href",
]
