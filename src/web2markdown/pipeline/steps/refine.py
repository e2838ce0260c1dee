"""RefineStep - LLM refinement pipeline step."""

import logging
from typing import Optional

from ...models.events import ConversionEvent, EventType
from ...refine.client import LLMRefiner
from ..base import ConversionContext, EventEmitter

logger = logging.getLogger(__name__)


class RefineStep:
    """
    Pipeline step that replaces the extracted markdown with the LLM's version.

    With no refiner (refinement disabled) the extracted markdown is kept.
    """

    name = "refine"

    def __init__(self, refiner: Optional[LLMRefiner] = None):
        self._refiner = refiner

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        if ctx.extraction is None:
            raise ValueError("No extracted content to refine")

        if self._refiner is None:
            logger.debug("Refinement disabled, keeping extracted markdown")
            if emit:
                emit(ConversionEvent(type=EventType.REFINE_SKIPPED, url=ctx.url, message="Refinement disabled"))
            return ctx

        if emit:
            emit(
                ConversionEvent(
                    type=EventType.REFINE_STARTED,
                    url=ctx.url,
                    message=f"Refining with {self._refiner.config.model}",
                )
            )

        ctx.markdown = await self._refiner.refine_result(ctx.extraction)
        ctx.refined = True

        if emit:
            emit(
                ConversionEvent(
                    type=EventType.REFINE_COMPLETED,
                    url=ctx.url,
                    characters=len(ctx.markdown),
                    message=f"Refined to {len(ctx.markdown)} characters",
                )
            )
        return ctx
