"""Minimal CSS selector matching for boilerplate and content heuristics."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from ..errors import SelectorError
from .nodes import ElementNode

_TAG_RE = re.compile(r"\*|[A-Za-z][A-Za-z0-9-]*")
_PART_RE = re.compile(
    r"""
    \.(?P<cls>[\w-]+)
    | \#(?P<id>[\w-]+)
    | \[\s*(?P<attr>[\w:-]+)\s*
        (?:=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\]\s]+))\s*)?
      \]
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class CompoundSelector:
    """A tag with any number of class, id and attribute constraints."""

    tag: Optional[str] = None
    classes: tuple[str, ...] = ()
    ids: tuple[str, ...] = ()
    attributes: tuple[tuple[str, Optional[str]], ...] = ()

    def matches(self, element: ElementNode) -> bool:
        if self.tag is not None and element.tag != self.tag:
            return False
        if self.classes:
            element_classes = element.classes
            if not all(cls in element_classes for cls in self.classes):
                return False
        if any(element.get("id") != ident for ident in self.ids):
            return False
        for name, value in self.attributes:
            if value is None:
                if not element.has_attr(name):
                    return False
            elif element.get(name) != value:
                return False
        return True


def _parse_compound(text: str, source: str) -> CompoundSelector:
    tag: Optional[str] = None
    pos = 0
    tag_match = _TAG_RE.match(text)
    if tag_match:
        tag = None if tag_match.group(0) == "*" else tag_match.group(0).lower()
        pos = tag_match.end()

    classes: list[str] = []
    ids: list[str] = []
    attributes: list[tuple[str, Optional[str]]] = []
    while pos < len(text):
        part = _PART_RE.match(text, pos)
        if part is None:
            raise SelectorError(f"Unsupported selector syntax {text[pos:]!r} in {source!r}")
        if part.group("cls"):
            classes.append(part.group("cls"))
        elif part.group("id"):
            ids.append(part.group("id"))
        else:
            value = next(
                (v for v in (part.group("dq"), part.group("sq"), part.group("bare")) if v is not None),
                None,
            )
            attributes.append((part.group("attr").lower(), value))
        pos = part.end()

    if pos == 0:
        raise SelectorError(f"Empty selector in {source!r}")
    return CompoundSelector(tag, tuple(classes), tuple(ids), tuple(attributes))


class Selector:
    """
    A comma-separated group of compound selectors.

    Supports ``tag``, ``*``, ``.class``, ``#id``, ``[attr]`` and
    ``[attr="value"]``. Combinators are not supported.

    Example:
        selector = Selector('.sidebar, [role="navigation"]')
        selector.matches(element)
    """

    def __init__(self, text: str):
        self.text = text
        groups = [group.strip() for group in text.split(",")]
        if not text.strip() or any(not group for group in groups):
            raise SelectorError(f"Empty selector in {text!r}")
        for group in groups:
            if not _is_quoted_space(group):
                raise SelectorError(f"Combinators are not supported: {group!r}")
        self._compounds = tuple(_parse_compound(group, text) for group in groups)

    def matches(self, element: ElementNode) -> bool:
        return any(compound.matches(element) for compound in self._compounds)

    __call__ = matches

    def __repr__(self) -> str:
        return f"Selector({self.text!r})"


def _is_quoted_space(group: str) -> bool:
    """True when every whitespace character in ``group`` sits inside [...] brackets."""
    depth = 0
    for ch in group:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth = max(0, depth - 1)
        elif ch.isspace() and depth == 0:
            return False
    return True


def compile_selectors(selectors: Iterable[str]) -> list[Selector]:
    """Compile selector strings, preserving order."""
    return [Selector(text) for text in selectors]
