"""Refine collaborator (LLM post-processing)."""

from .client import LLMRefiner

__all__ = ["LLMRefiner"]
