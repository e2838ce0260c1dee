"""Main Converter class wiring extraction, refinement and delivery."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Union

from ..conversion.extractor import PageExtractor
from ..delivery.clipboard import ClipboardWriter
from ..delivery.notifier import Notifier
from ..http.client import AsyncHttpClient
from ..http.protocols import HttpClient
from ..models.config import Web2MarkdownConfig
from ..pipeline.base import ConversionContext, ConversionPipeline, EventEmitter
from ..pipeline.steps import DeliverStep, ExtractStep, FetchStep, RefineStep
from ..refine.client import LLMRefiner

logger = logging.getLogger(__name__)


class Converter:
    """
    Primary API: convert a web page to markdown.

    Owns two HTTP sessions, one for fetching pages (network settings) and
    one for the refine endpoint (refine retry and timeout settings), and
    builds the fetch -> extract -> refine -> deliver pipeline from the
    configuration.

    Example:
        config = Web2MarkdownConfig(refine=RefineConfig(api_key="$OPENAI_API_KEY"))

        async with Converter(config) as converter:
            ctx = await converter.convert("https://example.com/article")
            if ctx.succeeded:
                print(ctx.markdown)
    """

    def __init__(
        self,
        config: Web2MarkdownConfig | None = None,
        *,
        http_client: HttpClient | None = None,
        clipboard: ClipboardWriter | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        """
        Initialize the converter.

        Args:
            config: Configuration (defaults if None)
            http_client: HTTP client used for both page fetches and refine
                requests, instead of the owned AsyncHttpClients
            clipboard: Clipboard writer for delivery
            notifier: Notifier for completion and error notices
        """
        self.config = config or Web2MarkdownConfig()
        self._owns_client = http_client is None
        self._http_client: HttpClient | None = http_client
        self._refine_client: HttpClient | None = http_client
        self._clipboard = clipboard or ClipboardWriter()
        self._notifier = notifier or Notifier(enabled=self.config.delivery.show_notifications)
        self._extractor = PageExtractor(self.config.extraction)

    async def __aenter__(self) -> Converter:
        if self._owns_client:
            network = self.config.network
            refine = self.config.refine
            page_client = AsyncHttpClient(
                max_retries=network.max_retries,
                user_agent=network.user_agent,
                proxy=network.proxy,
                default_timeout=network.timeout,
            )
            # Refine requests follow their own retry and timeout settings
            refine_client = AsyncHttpClient(
                max_retries=refine.max_retries,
                user_agent=network.user_agent,
                proxy=network.proxy,
                default_timeout=refine.timeout,
            )
            await page_client.__aenter__()
            await refine_client.__aenter__()
            self._http_client = page_client
            self._refine_client = refine_client
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._owns_client:
            for client in (self._http_client, self._refine_client):
                if isinstance(client, AsyncHttpClient):
                    await client.__aexit__(exc_type, exc_val, exc_tb)
            self._http_client = None
            self._refine_client = None

    @property
    def http_client(self) -> HttpClient | None:
        """Client used for page fetches."""
        return self._http_client

    @property
    def refine_client(self) -> HttpClient | None:
        """Client used for refine requests."""
        return self._refine_client

    def _require_client(self) -> HttpClient:
        if self._http_client is None:
            raise RuntimeError("Converter not initialized. Use 'async with' context manager.")
        return self._http_client

    def _require_refine_client(self) -> HttpClient:
        if self._refine_client is None:
            raise RuntimeError("Converter not initialized. Use 'async with' context manager.")
        return self._refine_client

    def build_refiner(self) -> LLMRefiner | None:
        """Return a refiner, or None when refinement is disabled."""
        if not self.config.refine.enabled:
            return None
        return LLMRefiner(self.config.refine, self._require_refine_client())

    def build_pipeline(self) -> ConversionPipeline:
        """Build the conversion pipeline for the current configuration."""
        client = self._require_client()
        return ConversionPipeline(
            steps=[
                FetchStep(client),
                ExtractStep(self._extractor),
                RefineStep(self.build_refiner()),
                DeliverStep(self.config.delivery, self._clipboard, self._notifier),
            ]
        )

    async def convert(
        self,
        url: str,
        html: Union[bytes, str, None] = None,
        emit: EventEmitter | None = None,
    ) -> ConversionContext:
        """
        Convert one page.

        Args:
            url: Page URL (fetched unless ``html`` is given)
            html: Page HTML already in hand
            emit: Optional event callback

        Returns:
            ConversionContext; ``ctx.error`` is set on failure
        """
        ctx = await self.build_pipeline().execute(url, html=html, emit=emit)
        if ctx.error:
            logger.error(f"Conversion of {url} failed: {ctx.error}")
            self._notifier.error(ctx.error)
        return ctx

    async def test_connection(self) -> tuple[bool, str]:
        """Check the refine endpoint with a minimal request."""
        return await LLMRefiner(self.config.refine, self._require_refine_client()).test_connection()


def convert_blocking(
    url: str,
    config: Web2MarkdownConfig | None = None,
    html: Union[bytes, str, None] = None,
) -> ConversionContext:
    """
    Synchronous wrapper around :meth:`Converter.convert`.

    Example:
        ctx = convert_blocking("https://example.com", Web2MarkdownConfig())
    """

    async def run() -> ConversionContext:
        async with Converter(config) as converter:
            return await converter.convert(url, html=html)

    return asyncio.run(run())
