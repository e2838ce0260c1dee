"""Configuration, result and event models."""

from .config import (
    DeliveryConfig,
    ExtractionConfig,
    NetworkConfig,
    RefineConfig,
    Web2MarkdownConfig,
)
from .events import ConversionEvent, EventType
from .result import ExtractionResult

__all__ = [
    # Config
    "ExtractionConfig",
    "RefineConfig",
    "DeliveryConfig",
    "NetworkConfig",
    "Web2MarkdownConfig",
    # Results
    "ExtractionResult",
    # Events
    "EventType",
    "ConversionEvent",
]
