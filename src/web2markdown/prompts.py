"""Prompt text and message construction for the refine service."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.result import ExtractionResult

DEFAULT_SYSTEM_PROMPT = """You are a web content extraction and formatting assistant. \
Convert the provided webpage content into clean, well-structured Markdown.

1. Extract the complete main content verbatim. Do not summarize, shorten or add commentary.
2. Ignore navigation, advertisements, sidebars, comment sections and other boilerplate.
3. Preserve the heading hierarchy using Markdown headers (#, ##, ###).
4. Keep paragraphs, lists, links, images, emphasis, blockquotes and code blocks in Markdown syntax.
5. Include the original title as the main header.

Return only the Markdown content, without any preamble or explanation."""

CONNECTION_TEST_MESSAGE = "Test connection"


def build_user_message(title: str, url: str, content: str) -> str:
    """Combine page title, URL and content into the single user message."""
    return f"Title: {title}\nURL: {url}\n\nContent:\n{content}"


def build_messages(system_prompt: str, user_message: str) -> list[dict[str, str]]:
    """Build the role-tagged message list for a chat completion request."""
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": user_message})
    return messages


def messages_for_result(result: ExtractionResult, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> list[dict[str, str]]:
    """Build chat messages for an extraction result."""
    return build_messages(system_prompt, build_user_message(result.title, result.source_url, result.content))
