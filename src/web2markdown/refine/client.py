"""Refine collaborator: OpenAI-compatible chat completions client."""

from __future__ import annotations

import logging
from typing import Any

from ..errors import ConfigurationError, RefineError
from ..http.protocols import HttpClient, HttpResponse
from ..models.config import RefineConfig
from ..models.result import ExtractionResult
from ..prompts import CONNECTION_TEST_MESSAGE, build_messages, build_user_message

logger = logging.getLogger(__name__)


def _error_detail(response: HttpResponse) -> str:
    """Pull ``error.message`` out of a JSON error body when present."""
    try:
        data = response.json()
    except ValueError:
        return "Unknown error"
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return "Unknown error"


class LLMRefiner:
    """
    Sends extracted content to a chat completion endpoint for cleanup.

    The request carries a system prompt and a single user message built
    from the page title, URL and extracted markdown; the reply is
    ``choices[0].message.content``.

    Example:
        async with AsyncHttpClient() as http:
            refiner = LLMRefiner(RefineConfig(api_key="$OPENAI_API_KEY"), http)
            markdown = await refiner.refine_result(result)
    """

    def __init__(self, config: RefineConfig, http_client: HttpClient):
        """
        Initialize the refiner.

        Args:
            config: Endpoint, model, credentials and sampling settings
            http_client: Client used for the POST request
        """
        self._config = config
        self._client = http_client

    @property
    def config(self) -> RefineConfig:
        return self._config

    def _headers(self) -> dict[str, str]:
        if not self._config.api_key:
            raise ConfigurationError("API key not configured. Set refine.api_key in the settings.")
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.api_key}",
        }

    def build_payload(self, title: str, url: str, content: str) -> dict[str, Any]:
        """Build the JSON request body for a refine call."""
        return {
            "model": self._config.model,
            "messages": build_messages(self._config.system_prompt, build_user_message(title, url, content)),
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
        }

    async def refine(self, title: str, url: str, content: str) -> str:
        """
        Refine extracted markdown through the LLM.

        Args:
            title: Page title
            url: Page URL
            content: Extracted markdown

        Returns:
            Markdown produced by the model

        Raises:
            ConfigurationError: If no API key is configured
            RefineError: On error status or malformed response
        """
        headers = self._headers()
        payload = self.build_payload(title, url, content)

        logger.debug(f"Refining {len(content)} characters from {url} with {self._config.model}")
        response = await self._client.post_json(
            self._config.endpoint,
            payload,
            timeout=self._config.timeout,
            headers=headers,
        )

        if not response.ok:
            raise RefineError(
                f"API request failed: {response.status_code} {_error_detail(response)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            markdown = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise RefineError(f"Malformed response from {self._config.endpoint}: {e}") from e

        if not isinstance(markdown, str):
            raise RefineError("Response message content is not text")

        logger.debug(f"Refine returned {len(markdown)} characters")
        return markdown

    async def refine_result(self, result: ExtractionResult) -> str:
        """Refine an extraction result."""
        return await self.refine(result.title, result.source_url, result.content)

    async def test_connection(self) -> tuple[bool, str]:
        """
        Send a minimal request to check endpoint, model and credentials.

        Returns:
            Tuple of (success, human-readable message)
        """
        if not self._config.endpoint or not self._config.api_key:
            return False, "Please configure the endpoint and API key first"

        payload = {
            "model": self._config.model,
            "messages": build_messages("", CONNECTION_TEST_MESSAGE),
            "max_tokens": 10,
        }
        try:
            response = await self._client.post_json(
                self._config.endpoint,
                payload,
                timeout=self._config.timeout,
                headers=self._headers(),
            )
        except Exception as e:
            logger.debug(f"Connection test failed: {e}")
            return False, f"Connection failed: {e}"

        if response.ok:
            return True, "Connection successful!"
        return False, f"Connection failed: {response.status_code} - {_error_detail(response)}"
