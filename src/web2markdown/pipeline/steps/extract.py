"""ExtractStep - main content extraction pipeline step."""

import logging
from typing import Optional

from ...conversion.extractor import PageExtractor
from ...models.events import ConversionEvent, EventType
from ..base import ConversionContext, EventEmitter

logger = logging.getLogger(__name__)


class ExtractStep:
    """
    Pipeline step that runs the extraction core on ``ctx.html``.

    Populates ctx.extraction and ctx.markdown. NoContentFound propagates
    so the pipeline records the failure.
    """

    name = "extract"

    def __init__(self, extractor: Optional[PageExtractor] = None):
        self._extractor = extractor or PageExtractor()

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        if ctx.html is None:
            raise ValueError("No HTML content to extract")

        result = self._extractor.extract_html(ctx.html, ctx.url)
        if result.is_empty:
            logger.warning(f"Extraction of {ctx.url} produced no text")

        ctx.extraction = result
        ctx.markdown = result.content

        if emit:
            emit(
                ConversionEvent(
                    type=EventType.CONTENT_EXTRACTED,
                    url=ctx.url,
                    characters=len(result.content),
                    message=f"Extracted {len(result.content)} characters",
                )
            )
        return ctx
