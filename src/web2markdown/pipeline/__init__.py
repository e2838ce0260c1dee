"""Conversion pipeline: fetch, extract, refine, deliver."""

from .base import ConversionContext, ConversionPipeline, ConversionStep, EventEmitter
from .steps import DeliverStep, ExtractStep, FetchStep, RefineStep

__all__ = [
    "ConversionContext",
    "ConversionPipeline",
    "ConversionStep",
    "EventEmitter",
    "FetchStep",
    "ExtractStep",
    "RefineStep",
    "DeliverStep",
]
