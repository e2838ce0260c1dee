"""Main content location: boilerplate pruning and content root selection."""

import logging
from collections.abc import Iterable
from typing import Optional

from ..dom.nodes import ElementNode, Node, find_first, prune
from ..dom.selectors import Selector, compile_selectors
from ..errors import NoContentFound

logger = logging.getLogger(__name__)

# Tags that never carry readable content
DENY_TAGS = frozenset(
    {
        "script",
        "style",
        "noscript",
        "iframe",
        "object",
        "embed",
        "nav",
        "header",
        "footer",
        "aside",
    }
)

# Class/role heuristics for boilerplate (extensible via ExtractionConfig)
BOILERPLATE_SELECTORS = [
    ".advertisement",
    ".ad",
    ".sidebar",
    ".menu",
    ".navigation",
    ".social-share",
    ".comments",
    '[role="navigation"]',
    '[role="banner"]',
    '[role="contentinfo"]',
    '[role="complementary"]',
]

# Main content candidates, highest priority first
CONTENT_SELECTORS = [
    "main",
    "article",
    '[role="main"]',
    '[role="article"]',
    ".main-content",
    ".content",
    ".post-content",
    ".article-content",
    "#content",
]


class ContentLocator:
    """
    Selects the subtree holding a page's primary content.

    Works on a pruned copy of the document: every element whose tag is in
    the deny-list or that matches a boilerplate selector is dropped first,
    then content selectors are tried in priority order and the first match
    wins. Falls back to ``<body>``.

    Example:
        locator = ContentLocator(remove_selectors=[".cookie-banner"])
        root = locator.locate(parse_html(html))
    """

    def __init__(
        self,
        content_selectors: Optional[Iterable[str]] = None,
        remove_selectors: Optional[Iterable[str]] = None,
        deny_tags: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the locator.

        Args:
            content_selectors: Main content selectors (replaces defaults)
            remove_selectors: Boilerplate selectors (extends defaults)
            deny_tags: Tags to prune (replaces defaults)

        Raises:
            SelectorError: If any selector cannot be parsed
        """
        self._content_selectors = compile_selectors(
            CONTENT_SELECTORS if content_selectors is None else content_selectors
        )
        boilerplate = list(BOILERPLATE_SELECTORS)
        if remove_selectors:
            boilerplate.extend(remove_selectors)
        self._boilerplate_selectors = compile_selectors(boilerplate)
        self._deny_tags = frozenset(tag.lower() for tag in (DENY_TAGS if deny_tags is None else deny_tags))

    @property
    def content_selectors(self) -> list[Selector]:
        return list(self._content_selectors)

    @property
    def boilerplate_selectors(self) -> list[Selector]:
        return list(self._boilerplate_selectors)

    def is_boilerplate(self, element: ElementNode) -> bool:
        """Check whether an element is removed before rendering."""
        if element.tag in self._deny_tags:
            return True
        return any(selector.matches(element) for selector in self._boilerplate_selectors)

    def prune(self, root: Node) -> Node:
        """Return a copy of ``root`` with all boilerplate subtrees removed."""
        return prune(root, self.is_boilerplate)

    def locate(self, root: Node) -> ElementNode:
        """
        Find the content root in a pruned copy of the document.

        Args:
            root: Whole document tree (never modified)

        Returns:
            The first element matching a content selector, else the pruned body

        Raises:
            NoContentFound: If neither a content element nor a body exists
        """
        pruned = self.prune(root)

        for selector in self._content_selectors:
            element = find_first(pruned, selector.matches)
            if element is not None:
                logger.debug(f"Content root matched {selector.text!r}: <{element.tag}>")
                return element

        body = find_first(pruned, lambda element: element.tag == "body")
        if body is None:
            logger.warning("No content selector matched and the document has no body")
            raise NoContentFound()

        logger.debug("No content selector matched, falling back to <body>")
        return body
