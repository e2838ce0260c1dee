"""Pipeline step implementations."""

from .deliver import DeliverStep
from .extract import ExtractStep
from .fetch import FetchStep
from .refine import RefineStep

__all__ = [
    "FetchStep",
    "ExtractStep",
    "RefineStep",
    "DeliverStep",
]
