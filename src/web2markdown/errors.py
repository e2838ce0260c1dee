"""Exception hierarchy for web2markdown."""

from __future__ import annotations


class Web2MarkdownError(Exception):
    """Base class for all web2markdown errors."""


class NoContentFound(Web2MarkdownError):
    """No renderable root (not even a body) exists in the document."""

    def __init__(self, message: str = "Failed to extract content: no body element found"):
        super().__init__(message)


class UnresolvableReference(Web2MarkdownError, ValueError):
    """
    A link or image reference could not be turned into an absolute URL.

    Raised by the URL resolver and always recovered inside the renderer,
    which degrades the element to plain text.
    """

    def __init__(self, reference: str, base_url: str = "", reason: str = ""):
        self.reference = reference
        self.base_url = base_url
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Cannot resolve {reference!r} against {base_url!r}{detail}")


class ConfigurationError(Web2MarkdownError):
    """Invalid or incomplete configuration (missing API key, bad selector, unknown setting)."""


class SelectorError(ConfigurationError):
    """A content or boilerplate selector could not be parsed."""


class RefineError(Web2MarkdownError):
    """The refine service returned an error status or a malformed response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DeliveryError(Web2MarkdownError):
    """The result could not be delivered (e.g. no clipboard backend available)."""
