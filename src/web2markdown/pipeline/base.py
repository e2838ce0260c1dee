"""Base classes for the conversion pipeline."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol, Union, runtime_checkable

from ..models.events import ConversionEvent, EventType
from ..models.result import ExtractionResult

# Type alias for event emitter function
EventEmitter = Callable[[ConversionEvent], None]


@dataclass
class ConversionContext:
    """
    Context object passed through pipeline steps.

    Attributes:
        url: Page URL (also the base URL for relative references)
        html: Page HTML, fetched or supplied by the caller
        extraction: Result of the extraction core
        markdown: Current markdown (extracted, then refined, then decorated)
        refined: True once the refine step replaced the markdown
        copied: True once the markdown reached the clipboard
        output_path: File the markdown was written to, if any
        should_skip: If True, remaining steps will be skipped
        skip_reason: Human-readable reason for skipping
        error: Error message if an exception occurred
    """

    url: str
    html: Optional[Union[bytes, str]] = None

    extraction: Optional[ExtractionResult] = None
    markdown: Optional[str] = None

    refined: bool = False
    copied: bool = False
    output_path: Optional[Path] = None

    should_skip: bool = False
    skip_reason: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def title(self) -> str:
        return self.extraction.title if self.extraction else ""

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.markdown is not None


@runtime_checkable
class ConversionStep(Protocol):
    """
    Protocol for pipeline steps.

    Error Handling Contract:
    - For expected skips: set ctx.should_skip = True and ctx.skip_reason
    - For failures: raise an exception
    - The pipeline will catch exceptions and set ctx.error
    """

    name: str

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        """
        Execute this pipeline step.

        Args:
            ctx: The conversion context with accumulated state
            emit: Optional callback to emit events

        Returns:
            The (possibly modified) context
        """
        ...


@dataclass
class ConversionPipeline:
    """
    Pipeline converting a single page through multiple steps.

    Steps are executed in order. If a step sets ctx.should_skip = True,
    remaining steps are skipped. If a step raises an exception, the
    error is captured in ctx.error and processing stops.

    Example:
        pipeline = ConversionPipeline(steps=[
            FetchStep(http_client),
            ExtractStep(extractor),
            RefineStep(refiner),
            DeliverStep(delivery_config),
        ])

        ctx = await pipeline.execute(url, emit=log_event)
        if ctx.error:
            logger.error(f"Failed: {ctx.error}")
    """

    steps: list[ConversionStep]

    async def execute(
        self,
        url: str,
        html: Optional[Union[bytes, str]] = None,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        """
        Execute the pipeline for a page.

        Args:
            url: The page URL
            html: Page HTML if already available (skips fetching)
            emit: Optional callback for emitting events

        Returns:
            ConversionContext with final state (check error for status)
        """
        ctx = ConversionContext(url=url, html=html)

        if emit:
            emit(ConversionEvent(type=EventType.STARTED, url=url, message=f"Converting {url}"))

        for step in self.steps:
            if ctx.should_skip:
                break

            try:
                ctx = await step.execute(ctx, emit)
            except Exception as e:
                ctx.error = f"{step.name}: {e}"
                ctx.should_skip = True

                if emit:
                    emit(
                        ConversionEvent(
                            type=EventType.CONVERSION_FAILED,
                            url=url,
                            error=ctx.error,
                        )
                    )
                break

        if emit and ctx.error is None:
            emit(
                ConversionEvent(
                    type=EventType.COMPLETED,
                    url=url,
                    characters=len(ctx.markdown or ""),
                    message=ctx.skip_reason or "Conversion complete",
                )
            )
        return ctx

    def add_step(self, step: ConversionStep) -> "ConversionPipeline":
        """
        Add a step to the pipeline (fluent API).

        Args:
            step: The step to add

        Returns:
            Self for chaining
        """
        self.steps.append(step)
        return self
