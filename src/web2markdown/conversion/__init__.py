"""Content extraction engine (DOM tree to markdown)."""

from .extractor import PageExtractor, extract
from .locator import BOILERPLATE_SELECTORS, CONTENT_SELECTORS, DENY_TAGS, ContentLocator
from .normalizer import normalize_markdown
from .protocols import Locator, Renderer
from .renderer import MarkdownRenderer, RenderState
from .urls import resolve_reference

__all__ = [
    # Protocols
    "Locator",
    "Renderer",
    # Implementations
    "ContentLocator",
    "MarkdownRenderer",
    "RenderState",
    "normalize_markdown",
    "resolve_reference",
    # Entry points
    "extract",
    "PageExtractor",
    # Default tables
    "DENY_TAGS",
    "BOILERPLATE_SELECTORS",
    "CONTENT_SELECTORS",
]
