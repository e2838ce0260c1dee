"""Post-processing of raw renderer output into presentable markdown."""

import re

# Fenced code blocks emitted for <pre>; their contents are kept verbatim
_FENCE_RE = re.compile(r"```\n.*?\n```", re.DOTALL)

_EXCESS_NEWLINES_RE = re.compile(r"\n\s*\n\s*\n+")
# Runs inside a line; indentation at the start of a line is left to the next rule
_SPACE_RUN_RE = re.compile(r"(?<=\S)[ \t]+")
# Line indentation, except in front of a list bullet (nested list indentation)
_LEADING_SPACE_RE = re.compile(r"\n[ \t]+(?![ \t]|[-*] |\d+\. )")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+\n")


def _normalize_prose(text: str) -> str:
    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    text = _SPACE_RUN_RE.sub(" ", text)
    text = _LEADING_SPACE_RE.sub("\n", text)
    return _TRAILING_SPACE_RE.sub("\n", text)


def normalize_markdown(text: str) -> str:
    """
    Clean up concatenated renderer output.

    Outside fenced code blocks, in order: collapse three or more newlines
    (blank lines included) to two, collapse space/tab runs to one space,
    strip indentation after a newline (keeping nested list bullet
    indentation), strip spaces before a newline. The whole result is then
    trimmed.

    Idempotent: ``normalize_markdown(normalize_markdown(x)) == normalize_markdown(x)``.

    Args:
        text: Raw markdown stream

    Returns:
        Normalized markdown
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    parts: list[str] = []
    pos = 0
    for fence in _FENCE_RE.finditer(text):
        parts.append(_normalize_prose(text[pos : fence.start()]))
        parts.append(fence.group(0))
        pos = fence.end()
    parts.append(_normalize_prose(text[pos:]))

    return "".join(parts).strip()
