"""Extraction result value object."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class ExtractionResult:
    """
    Immutable output of a single extraction.

    Attributes:
        title: Document title (may be empty)
        source_url: Page URL the document was captured from
        content: Normalized markdown of the main content
        captured_at: UTC time of capture
    """

    title: str
    source_url: str
    content: str
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()

    def to_dict(self) -> dict[str, Any]:
        """Convert to plain data, with an ISO 8601 timestamp."""
        return {
            "title": self.title,
            "url": self.source_url,
            "content": self.content,
            "timestamp": self.captured_at.isoformat(),
        }
