"""Event types emitted by the conversion pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional


class EventType(str, Enum):
    """Types of events emitted while converting a page."""

    # Lifecycle
    STARTED = "started"
    COMPLETED = "completed"

    # Fetch
    FETCH_STARTED = "fetch_started"
    FETCH_COMPLETED = "fetch_completed"

    # Extraction
    CONTENT_EXTRACTED = "content_extracted"

    # Refine
    REFINE_STARTED = "refine_started"
    REFINE_COMPLETED = "refine_completed"
    REFINE_SKIPPED = "refine_skipped"

    # Delivery
    COPIED_TO_CLIPBOARD = "copied_to_clipboard"
    SAVED = "saved"

    CONVERSION_FAILED = "conversion_failed"


@dataclass
class ConversionEvent:
    """
    Event emitted during a conversion.

    Example:
        def on_event(event: ConversionEvent) -> None:
            if event.is_error:
                print(f"Error: {event.url} - {event.error}")
    """

    type: EventType

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    url: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    # Typed payload fields for specific events
    characters: Optional[int] = None
    status_code: Optional[int] = None
    output_path: Optional[Path] = None

    @property
    def is_error(self) -> bool:
        return self.type == EventType.CONVERSION_FAILED
