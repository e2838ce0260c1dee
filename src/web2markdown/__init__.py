"""
web2markdown - Convert a web page's main content to clean markdown.

Usage:
    from web2markdown import PageExtractor, ExtractionConfig

    extractor = PageExtractor(ExtractionConfig(include_images=False))
    result = extractor.extract_html(html, "https://example.com/article")
    print(result.content)

    # Full pipeline with LLM refinement and clipboard delivery
    from web2markdown import Converter, Web2MarkdownConfig

    async with Converter(Web2MarkdownConfig()) as converter:
        ctx = await converter.convert("https://example.com/article")
"""

__version__ = "1.0.0"

from .conversion import ContentLocator, MarkdownRenderer, PageExtractor, RenderState, extract, normalize_markdown
from .core.converter import Converter, convert_blocking
from .dom import ElementNode, Node, TextNode, parse_html
from .errors import (
    ConfigurationError,
    DeliveryError,
    NoContentFound,
    RefineError,
    UnresolvableReference,
    Web2MarkdownError,
)
from .models import (
    ConversionEvent,
    DeliveryConfig,
    EventType,
    ExtractionConfig,
    ExtractionResult,
    NetworkConfig,
    RefineConfig,
    Web2MarkdownConfig,
)
from .settings import SettingsStore

__all__ = [
    "__version__",
    # Extraction core
    "extract",
    "PageExtractor",
    "ContentLocator",
    "MarkdownRenderer",
    "RenderState",
    "normalize_markdown",
    "ExtractionResult",
    # Document tree
    "Node",
    "TextNode",
    "ElementNode",
    "parse_html",
    # Pipeline
    "Converter",
    "convert_blocking",
    "ConversionEvent",
    "EventType",
    # Config
    "Web2MarkdownConfig",
    "ExtractionConfig",
    "RefineConfig",
    "DeliveryConfig",
    "NetworkConfig",
    "SettingsStore",
    # Errors
    "Web2MarkdownError",
    "NoContentFound",
    "UnresolvableReference",
    "ConfigurationError",
    "RefineError",
    "DeliveryError",
]
