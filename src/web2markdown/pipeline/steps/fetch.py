"""FetchStep - HTTP fetching pipeline step."""

import logging
from typing import Optional

from ...errors import Web2MarkdownError
from ...http.client import decode_response
from ...http.protocols import HttpClient
from ...models.events import ConversionEvent, EventType
from ..base import ConversionContext, EventEmitter

logger = logging.getLogger(__name__)

# Allowed content types for HTML documents
ALLOWED_CONTENT_TYPES = frozenset(
    {
        "text/html",
        "application/xhtml+xml",
        "text/xml",
        "application/xml",
    }
)


class FetchStep:
    """
    Pipeline step that fetches page HTML via HTTP.

    Does nothing when the caller already supplied ``ctx.html``.

    Raises:
        Web2MarkdownError: On HTTP error status or non-HTML content type
    """

    name = "fetch"

    def __init__(self, http_client: HttpClient, validate_content_type: bool = True) -> None:
        """
        Initialize the fetch step.

        Args:
            http_client: HTTP client implementing HttpClient protocol
            validate_content_type: If True, reject non-HTML content types
        """
        self._client = http_client
        self._validate_content_type = validate_content_type

    def _is_valid_content_type(self, content_type: str) -> bool:
        if not content_type:
            return True  # Allow if not specified

        base_type = content_type.lower().split(";")[0].strip()
        return base_type in ALLOWED_CONTENT_TYPES

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        """
        Fetch ``ctx.url`` into ``ctx.html``.

        Args:
            ctx: Conversion context with URL to fetch
            emit: Optional callback to emit events

        Returns:
            ConversionContext with html and status_code populated
        """
        if ctx.html is not None:
            return ctx

        url = ctx.url
        if emit:
            emit(ConversionEvent(type=EventType.FETCH_STARTED, url=url, message=f"Fetching {url}"))

        response = await self._client.get(url)
        ctx.status_code = response.status_code

        if not response.ok:
            raise Web2MarkdownError(f"HTTP {response.status_code} fetching {url}")

        if self._validate_content_type and not self._is_valid_content_type(response.content_type):
            raise Web2MarkdownError(f"Invalid content type: {response.content_type}")

        ctx.html = decode_response(response)

        logger.debug(f"Fetched {url}: {len(response.content)} bytes")
        if emit:
            emit(
                ConversionEvent(
                    type=EventType.FETCH_COMPLETED,
                    url=url,
                    status_code=response.status_code,
                    message=f"Fetched {len(response.content)} bytes",
                )
            )
        return ctx
