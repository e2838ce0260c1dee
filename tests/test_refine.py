"""Tests for prompt construction and the LLM refine client."""

import json
from unittest.mock import AsyncMock

import pytest
from web2markdown.errors import ConfigurationError, RefineError
from web2markdown.http import HttpResponse, decode_response
from web2markdown.models import ExtractionResult, RefineConfig
from web2markdown.prompts import build_messages, build_user_message, messages_for_result
from web2markdown.refine import LLMRefiner

ENDPOINT = "https://llm.example.com/v1/chat/completions"


def json_response(data, status_code: int = 200) -> HttpResponse:
    return HttpResponse(
        status_code=status_code,
        content=json.dumps(data).encode("utf-8"),
        content_type="application/json",
        headers={},
        url=ENDPOINT,
    )


def completion(text: str) -> HttpResponse:
    return json_response({"choices": [{"message": {"role": "assistant", "content": text}}]})


@pytest.fixture
def config():
    return RefineConfig(endpoint=ENDPOINT, api_key="sk-test", model="test-model", system_prompt="Be tidy.")


@pytest.fixture
def http_client():
    client = AsyncMock()
    client.post_json = AsyncMock(return_value=completion("# Refined"))
    return client


class TestPrompts:
    """Tests for message construction."""

    def test_user_message_layout(self):
        """Test title, URL and content ordering."""
        message = build_user_message("Title", "https://x.com", "# Body")

        assert message == "Title: Title\nURL: https://x.com\n\nContent:\n# Body"

    def test_system_prompt_first(self):
        """Test role ordering."""
        messages = build_messages("System", "User")

        assert [m["role"] for m in messages] == ["system", "user"]

    def test_empty_system_prompt_omitted(self):
        """Test no system message without a prompt."""
        assert build_messages("", "User") == [{"role": "user", "content": "User"}]

    def test_messages_for_result(self):
        """Test building messages from an extraction result."""
        result = ExtractionResult(title="T", source_url="https://x.com", content="C")

        messages = messages_for_result(result, "S")

        assert messages[0] == {"role": "system", "content": "S"}
        assert messages[1]["content"] == "Title: T\nURL: https://x.com\n\nContent:\nC"


class TestLLMRefiner:
    """Tests for LLMRefiner."""

    @pytest.mark.asyncio
    async def test_refine_returns_message_content(self, config, http_client):
        """Test a successful completion."""
        refiner = LLMRefiner(config, http_client)

        markdown = await refiner.refine("T", "https://x.com", "raw")

        assert markdown == "# Refined"

    @pytest.mark.asyncio
    async def test_request_shape(self, config, http_client):
        """Test endpoint, headers and payload."""
        refiner = LLMRefiner(config, http_client)

        await refiner.refine("T", "https://x.com", "raw")

        args, kwargs = http_client.post_json.call_args
        assert args[0] == ENDPOINT
        payload = args[1]
        assert payload["model"] == "test-model"
        assert payload["temperature"] == 0.3
        assert payload["max_tokens"] == 4000
        assert payload["messages"][0] == {"role": "system", "content": "Be tidy."}
        assert payload["messages"][1]["content"].startswith("Title: T\nURL: https://x.com")
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["timeout"] == config.timeout

    @pytest.mark.asyncio
    async def test_refine_result(self, config, http_client):
        """Test refining an ExtractionResult."""
        refiner = LLMRefiner(config, http_client)
        result = ExtractionResult(title="Page", source_url="https://x.com/p", content="body")

        assert await refiner.refine_result(result) == "# Refined"
        assert "Content:\nbody" in http_client.post_json.call_args[0][1]["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_missing_api_key(self, http_client):
        """Test refusing to call without credentials."""
        refiner = LLMRefiner(RefineConfig(endpoint=ENDPOINT), http_client)

        with pytest.raises(ConfigurationError):
            await refiner.refine("T", "u", "c")
        http_client.post_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_error_status_uses_error_message(self, config, http_client):
        """Test error.message extraction."""
        http_client.post_json.return_value = json_response({"error": {"message": "Invalid API key"}}, 401)
        refiner = LLMRefiner(config, http_client)

        with pytest.raises(RefineError) as exc_info:
            await refiner.refine("T", "u", "c")

        assert exc_info.value.status_code == 401
        assert "401" in str(exc_info.value)
        assert "Invalid API key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_error_status_with_non_json_body(self, config, http_client):
        """Test unknown error detail."""
        http_client.post_json.return_value = HttpResponse(
            status_code=502, content=b"<html>Bad gateway</html>", content_type="text/html", headers={}, url=ENDPOINT
        )
        refiner = LLMRefiner(config, http_client)

        with pytest.raises(RefineError, match="Unknown error"):
            await refiner.refine("T", "u", "c")

    @pytest.mark.asyncio
    async def test_malformed_response(self, config, http_client):
        """Test responses without choices."""
        http_client.post_json.return_value = json_response({"choices": []})
        refiner = LLMRefiner(config, http_client)

        with pytest.raises(RefineError, match="Malformed response"):
            await refiner.refine("T", "u", "c")

    @pytest.mark.asyncio
    async def test_connection_success(self, config, http_client):
        """Test a working endpoint."""
        refiner = LLMRefiner(config, http_client)

        ok, message = await refiner.test_connection()

        assert ok is True
        assert message == "Connection successful!"
        payload = http_client.post_json.call_args[0][1]
        assert payload["max_tokens"] == 10
        assert payload["messages"] == [{"role": "user", "content": "Test connection"}]

    @pytest.mark.asyncio
    async def test_connection_without_key(self, http_client):
        """Test configuration check before sending."""
        refiner = LLMRefiner(RefineConfig(endpoint=ENDPOINT), http_client)

        ok, message = await refiner.test_connection()

        assert ok is False
        assert message == "Please configure the endpoint and API key first"
        http_client.post_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_connection_error_status(self, config, http_client):
        """Test a rejected request."""
        http_client.post_json.return_value = json_response({"error": {"message": "model not found"}}, 404)
        refiner = LLMRefiner(config, http_client)

        ok, message = await refiner.test_connection()

        assert ok is False
        assert message == "Connection failed: 404 - model not found"

    @pytest.mark.asyncio
    async def test_connection_network_error(self, config, http_client):
        """Test transport failures are reported, not raised."""
        http_client.post_json.side_effect = ConnectionError("refused")
        refiner = LLMRefiner(config, http_client)

        ok, message = await refiner.test_connection()

        assert ok is False
        assert "refused" in message


class TestDecodeResponse:
    """Tests for response decoding."""

    def test_header_charset(self):
        """Test the Content-Type charset wins."""
        response = HttpResponse(
            status_code=200,
            content="café".encode("latin-1"),
            content_type="text/html; charset=ISO-8859-1",
            headers={},
            url="https://x.com",
        )

        assert decode_response(response) == "café"

    def test_utf8_fallback(self):
        """Test decoding without a declared charset."""
        response = HttpResponse(
            status_code=200, content="naïve".encode("utf-8"), content_type="text/html", headers={}, url="https://x.com"
        )

        assert decode_response(response) == "naïve"
