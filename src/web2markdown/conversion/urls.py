"""Resolution of link and image references against a page base URL."""

from urllib.parse import urljoin, urlsplit

from ..errors import UnresolvableReference

# Emitted verbatim, never joined against the base URL
PASSTHROUGH_PREFIXES = ("#", "mailto:", "tel:")
ABSOLUTE_PREFIXES = ("http://", "https://", "data:")
REJECTED_SCHEMES = ("javascript:", "vbscript:")


def _check_parsable(url: str, reference: str, base_url: str) -> None:
    try:
        urlsplit(url)
    except ValueError as e:
        raise UnresolvableReference(reference, base_url, str(e)) from e


def resolve_reference(reference: str, base_url: str) -> str:
    """
    Turn a link or image reference into the URL to emit.

    Fragment, mail and phone references are returned unchanged. Absolute
    http(s) and data URIs are returned unchanged. Everything else is
    joined against ``base_url``.

    Args:
        reference: Raw ``href``/``src`` attribute value
        base_url: Absolute URL of the page (or its ``<base href>``)

    Returns:
        The reference to emit in markdown

    Raises:
        UnresolvableReference: If the reference is empty, a script URL,
            unparsable, or relative with no absolute base URL
    """
    reference = reference.strip()
    if not reference:
        raise UnresolvableReference(reference, base_url, "empty reference")

    lowered = reference.lower()
    if lowered.startswith(REJECTED_SCHEMES):
        raise UnresolvableReference(reference, base_url, "script reference")

    if lowered.startswith(PASSTHROUGH_PREFIXES + ABSOLUTE_PREFIXES):
        _check_parsable(reference, reference, base_url)
        return reference

    try:
        base = urlsplit(base_url)
    except ValueError as e:
        raise UnresolvableReference(reference, base_url, f"invalid base URL: {e}") from e
    if not base.scheme or (base.scheme in ("http", "https") and not base.netloc):
        raise UnresolvableReference(reference, base_url, "base URL is not absolute")

    try:
        resolved = urljoin(base_url, reference)
    except ValueError as e:
        raise UnresolvableReference(reference, base_url, str(e)) from e
    _check_parsable(resolved, reference, base_url)
    return resolved
