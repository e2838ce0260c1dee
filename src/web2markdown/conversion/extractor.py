"""Top-level extraction: locate, render, normalize."""

import logging
from typing import Optional, Union
from urllib.parse import urljoin

from ..dom.nodes import Node
from ..dom.parser import find_base_href, find_title, parse_html
from ..models.config import ExtractionConfig
from ..models.result import ExtractionResult
from .locator import ContentLocator
from .normalizer import normalize_markdown
from .protocols import Locator, Renderer
from .renderer import MarkdownRenderer, RenderState

logger = logging.getLogger(__name__)


def _locator_for(config: ExtractionConfig) -> ContentLocator:
    return ContentLocator(
        content_selectors=config.content_selectors,
        remove_selectors=config.remove_selectors,
    )


def extract(
    document_root: Node,
    config: Optional[ExtractionConfig] = None,
    *,
    url: str = "",
    title: str = "",
    base_url: Optional[str] = None,
    locator: Optional[Locator] = None,
) -> ExtractionResult:
    """
    Extract the main content of a document as markdown.

    Args:
        document_root: Whole document tree (never modified)
        config: Extraction settings (defaults if None)
        url: Page URL, recorded in the result and used as base URL
        title: Page title
        base_url: Overrides ``url`` for resolving relative references
        locator: Content locator (a ContentLocator built from ``config`` if None)

    Returns:
        ExtractionResult with normalized markdown content

    Raises:
        NoContentFound: If the document has no content element and no body
    """
    config = config or ExtractionConfig()
    locator = locator or _locator_for(config)

    content_root = locator.locate(document_root)

    renderer: Renderer = MarkdownRenderer(include_images=config.include_images, base_url=base_url or url)
    raw = renderer.render(content_root, RenderState())
    content = normalize_markdown(raw)

    logger.debug(f"Extracted {len(content)} characters from <{content_root.tag}> of {url or 'document'}")
    return ExtractionResult(title=title, source_url=url, content=content)


class PageExtractor:
    """
    Extracts markdown from raw HTML pages.

    Parses with BeautifulSoup, reads the title and any ``<base href>``,
    then runs :func:`extract`.

    Example:
        extractor = PageExtractor(ExtractionConfig(include_images=False))
        result = extractor.extract_html(html_bytes, "https://docs.example.com/page")
        print(result.content)
    """

    def __init__(self, config: Optional[ExtractionConfig] = None, locator: Optional[Locator] = None):
        self.config = config or ExtractionConfig()
        self._locator: Locator = locator or _locator_for(self.config)

    def extract(self, document_root: Node, url: str = "", title: str = "") -> ExtractionResult:
        """Extract from an already-built document tree."""
        return extract(document_root, self.config, url=url, title=title, locator=self._locator)

    def extract_html(self, html: Union[bytes, str], url: str = "") -> ExtractionResult:
        """
        Parse and extract an HTML document.

        Args:
            html: Raw HTML bytes or text
            url: Page URL for link resolution

        Returns:
            ExtractionResult

        Raises:
            NoContentFound: If the document has no body
        """
        root = parse_html(html)
        base_href = find_base_href(root)
        base_url = urljoin(url, base_href) if base_href else None
        return extract(
            root,
            self.config,
            url=url,
            title=find_title(root),
            base_url=base_url,
            locator=self._locator,
        )
