"""DeliverStep - clipboard, file output and notification pipeline step."""

import logging
from typing import Optional

from ...delivery.clipboard import ClipboardWriter
from ...delivery.notifier import Notifier
from ...delivery.page_info import append_page_info
from ...errors import DeliveryError
from ...models.config import DeliveryConfig
from ...models.events import ConversionEvent, EventType
from ..base import ConversionContext, EventEmitter

logger = logging.getLogger(__name__)


class DeliverStep:
    """
    Pipeline step that hands the final markdown to the user.

    Appends the source footer when configured, copies to the clipboard,
    writes the output file and shows a completion notice. A clipboard
    failure is reported but does not fail the conversion.
    """

    name = "deliver"

    def __init__(
        self,
        config: Optional[DeliveryConfig] = None,
        clipboard: Optional[ClipboardWriter] = None,
        notifier: Optional[Notifier] = None,
    ):
        self._config = config or DeliveryConfig()
        self._clipboard = clipboard or ClipboardWriter()
        self._notifier = notifier or Notifier(enabled=self._config.show_notifications)

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        if ctx.markdown is None:
            raise ValueError("No markdown to deliver")

        if self._config.append_page_info:
            ctx.markdown = append_page_info(ctx.markdown, ctx.title, ctx.url)

        if self._config.auto_copy:
            try:
                self._clipboard.copy(ctx.markdown)
                ctx.copied = True
                if emit:
                    emit(ConversionEvent(type=EventType.COPIED_TO_CLIPBOARD, url=ctx.url))
            except DeliveryError as e:
                logger.warning(f"Failed to copy to clipboard: {e}")
                self._notifier.error(f"Failed to copy to clipboard: {e}")

        output_file = self._config.output_file
        if output_file is not None:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(ctx.markdown + "\n", encoding="utf-8")
            ctx.output_path = output_file
            logger.debug(f"Saved {ctx.url} to {output_file}")
            if emit:
                emit(ConversionEvent(type=EventType.SAVED, url=ctx.url, output_path=output_file))

        if ctx.copied:
            self._notifier.success("Content converted and copied to clipboard!")
        else:
            self._notifier.success("Content converted to markdown!")
        return ctx
