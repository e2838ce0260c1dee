"""Async HTTP client with retry logic."""

from __future__ import annotations

import asyncio
import logging
import random
from types import TracebackType
from typing import Any

import aiohttp

from ..dom.parser import decode_html
from .protocols import HttpResponse

logger = logging.getLogger(__name__)


class AsyncHttpClient:
    """
    Async HTTP client with retry logic.

    Features:
    - Exponential backoff retry for transient failures
    - Content size limits to prevent memory exhaustion
    - Timeout controls

    Example:
        async with AsyncHttpClient() as client:
            response = await client.get("https://example.com")
            html = client.decode_content(response)
    """

    # Status codes that warrant a retry
    RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

    # Exceptions that warrant a retry
    RETRYABLE_EXCEPTIONS = (
        aiohttp.ClientError,
        asyncio.TimeoutError,
        ConnectionError,
    )

    def __init__(
        self,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        max_content_size: int = 20 * 1024 * 1024,
        user_agent: str | None = None,
        proxy: str | None = None,
        default_timeout: float = 30.0,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            max_retries: Maximum retry attempts for failed requests
            retry_base_delay: Base delay for exponential backoff (seconds)
            max_content_size: Maximum response size in bytes
            user_agent: Custom User-Agent string
            proxy: Proxy URL
            default_timeout: Default request timeout in seconds
        """
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._max_content_size = max_content_size
        self._proxy = proxy
        self._default_timeout = default_timeout

        if user_agent is None:
            user_agent = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (web2markdown/1.0)"
        self._user_agent = user_agent

        self._session: aiohttp.ClientSession | None = None

    @property
    def max_retries(self) -> int:
        return self._max_retries

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context and create session."""
        self._session = aiohttp.ClientSession(headers={"User-Agent": self._user_agent})
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _calculate_retry_delay(self, attempt: int) -> float:
        """
        Calculate delay for exponential backoff with jitter.

        Args:
            attempt: Current attempt number (0-indexed)

        Returns:
            Delay in seconds
        """
        delay: float = self._retry_base_delay * (2**attempt)
        jitter: float = random.uniform(0, 1)
        return delay + jitter

    async def _read_limited(self, response: aiohttp.ClientResponse) -> bytes:
        content_length = response.headers.get("Content-Length")
        if content_length and content_length.isdigit() and int(content_length) > self._max_content_size:
            raise ValueError(f"Content too large: {content_length} bytes")

        content = b""
        async for chunk in response.content.iter_chunked(8192):
            content += chunk
            if len(content) > self._max_content_size:
                raise ValueError(f"Content size limit exceeded: >{self._max_content_size} bytes")
        return content

    async def _request(
        self,
        method: str,
        url: str,
        *,
        timeout: float | None,
        headers: dict[str, str] | None,
        json_body: dict[str, Any] | None = None,
    ) -> HttpResponse:
        if self._session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        timeout_val = timeout or self._default_timeout
        last_error: Exception | None = None

        for attempt in range(self._max_retries + 1):
            try:
                async with self._session.request(
                    method,
                    url,
                    json=json_body,
                    timeout=aiohttp.ClientTimeout(total=timeout_val),
                    headers=headers,
                    proxy=self._proxy,
                    allow_redirects=True,
                ) as response:
                    if response.status in self.RETRYABLE_STATUS_CODES and attempt < self._max_retries:
                        delay = self._calculate_retry_delay(attempt)
                        logger.warning(
                            f"Got {response.status} for {method} {url}, retrying in {delay:.1f}s "
                            f"(attempt {attempt + 1}/{self._max_retries + 1})"
                        )
                        await asyncio.sleep(delay)
                        continue

                    content = await self._read_limited(response)
                    return HttpResponse(
                        status_code=response.status,
                        content=content,
                        content_type=response.headers.get("Content-Type", ""),
                        headers=dict(response.headers),
                        url=str(response.url),
                    )

            except self.RETRYABLE_EXCEPTIONS as e:
                last_error = e
                if attempt < self._max_retries:
                    delay = self._calculate_retry_delay(attempt)
                    logger.warning(
                        f"Error requesting {url}: {e}, retrying in {delay:.1f}s "
                        f"(attempt {attempt + 1}/{self._max_retries + 1})"
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"HTTP error for {url} after {self._max_retries + 1} attempts: {e}")
                    raise

        if last_error:
            raise last_error
        raise RuntimeError(f"Unexpected error requesting {url}")

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP GET request with retry logic.

        Retryable statuses (429, 5xx) are retried; the final response is
        returned whatever its status.

        Raises:
            aiohttp.ClientError: On network errors after retries exhausted
            ValueError: On content size exceeded
        """
        return await self._request("GET", url, timeout=timeout, headers=headers)

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        POST a JSON payload with retry logic.

        Raises:
            aiohttp.ClientError: On network errors after retries exhausted
        """
        return await self._request("POST", url, timeout=timeout, headers=headers, json_body=payload)

    def decode_content(self, response: HttpResponse) -> str:
        """Decode response content to string."""
        return decode_response(response)


def decode_response(response: HttpResponse) -> str:
    """
    Decode response content to string.

    Fallback chain:
    1. Content-Type header charset
    2. HTML meta charset
    3. UTF-8 with replacement
    """
    encoding = None
    for part in response.content_type.split(";"):
        part = part.strip()
        if part.lower().startswith("charset="):
            encoding = part.split("=", 1)[1].strip().strip("\"'")
            break

    if encoding:
        try:
            return response.content.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.debug(f"Failed to decode with declared encoding: {encoding}")

    return decode_html(response.content)
