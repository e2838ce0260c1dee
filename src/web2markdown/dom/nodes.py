"""Immutable document tree used by the extraction engine."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Callable, Optional, Union


@dataclass(frozen=True)
class TextNode:
    """A run of raw character data."""

    text: str


@dataclass(frozen=True)
class ElementNode:
    """
    An element with a tag, ordered attributes and ordered children.

    Tag and attribute names are stored lower-cased so lookups are
    case-insensitive. Instances are never mutated; pruning builds a new tree.

    Example:
        link = ElementNode("a", (("href", "/docs"),), (TextNode("Docs"),))
        link.get("HREF")  # "/docs"
    """

    tag: str
    attrs: tuple[tuple[str, str], ...] = ()
    children: tuple[Node, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "tag", self.tag.lower())
        object.__setattr__(self, "attrs", tuple((name.lower(), value) for name, value in self.attrs))
        object.__setattr__(self, "children", tuple(self.children))

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first attribute value for ``name`` (case-insensitive)."""
        name = name.lower()
        for key, value in self.attrs:
            if key == name:
                return value
        return default

    def has_attr(self, name: str) -> bool:
        name = name.lower()
        return any(key == name for key, _ in self.attrs)

    @property
    def classes(self) -> tuple[str, ...]:
        return tuple((self.get("class") or "").split())

    @property
    def element_children(self) -> Iterator[ElementNode]:
        return (child for child in self.children if isinstance(child, ElementNode))


Node = Union[TextNode, ElementNode]

NodePredicate = Callable[[ElementNode], bool]


def iter_elements(node: Node) -> Iterator[ElementNode]:
    """Yield ``node`` (if an element) and every descendant element in document order."""
    if not isinstance(node, ElementNode):
        return
    stack: list[ElementNode] = [node]
    while stack:
        element = stack.pop()
        yield element
        stack.extend(reversed(list(element.element_children)))


def find_first(node: Node, predicate: NodePredicate) -> Optional[ElementNode]:
    """Return the first element (pre-order, including ``node``) matching ``predicate``."""
    for element in iter_elements(node):
        if predicate(element):
            return element
    return None


def text_content(node: Node) -> str:
    """Concatenate all descendant text, like the DOM ``textContent`` property."""
    parts: list[str] = []
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, TextNode):
            parts.append(current.text)
        else:
            stack.extend(reversed(current.children))
    return "".join(parts)


def prune(node: Node, predicate: NodePredicate) -> Node:
    """
    Return a copy of ``node`` without any descendant element matching ``predicate``.

    The root itself is never removed. Matching elements are dropped together
    with their whole subtree, at any depth. The input tree is left untouched.
    Uses an explicit stack, so nesting depth is not bounded by the recursion limit.
    """
    if isinstance(node, TextNode):
        return TextNode(node.text)

    # (element, iterator over its children, children kept so far)
    stack: list[tuple[ElementNode, Iterator[Node], list[Node]]] = [(node, iter(node.children), [])]
    while True:
        element, children, kept = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            copy = ElementNode(element.tag, element.attrs, tuple(kept))
            if not stack:
                return copy
            stack[-1][2].append(copy)
        elif isinstance(child, TextNode):
            kept.append(TextNode(child.text))
        elif not predicate(child):
            stack.append((child, iter(child.children), []))
