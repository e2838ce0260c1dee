"""Tree-to-markdown rendering."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from ..dom.nodes import ElementNode, Node, TextNode, text_content
from ..errors import UnresolvableReference
from .urls import resolve_reference

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
BLOCK_TAGS = frozenset({"p", "div", "section"})
LIST_TAGS = frozenset({"ul", "ol"})
CELL_TAGS = frozenset({"td", "th"})
BOLD_TAGS = frozenset({"strong", "b"})
EMPHASIS_TAGS = frozenset({"em", "i"})
STRIKE_TAGS = frozenset({"del", "s", "strike"})


@dataclass
class RenderState:
    """
    Context threaded through a single render walk.

    Attributes:
        list_depth: Number of enclosing ``ul``/``ol`` elements
        literal: True inside ``pre``, where text is emitted verbatim
    """

    list_depth: int = 0
    literal: bool = False




# Pending work: a node to render (with its parent tag), text to emit, or an exit action
_Work = Union[tuple[Node, Optional[str]], str, Callable[[], None]]


class _Walk:
    """Output buffer and work stack for one render call."""

    def __init__(self, state: RenderState):
        self.state = state
        self.out: list[str] = []
        self._stack: list[_Work] = []

    def emit(self, text: str) -> None:
        self.out.append(text)

    def descend(self, element: ElementNode, after: Union[str, Callable[[], None], None] = None) -> None:
        """Schedule ``element``'s children, then ``after`` once they are all rendered."""
        if after is not None:
            self._stack.append(after)
        for child in reversed(element.children):
            self._stack.append((child, element.tag))

    def push(self, node: Node, parent_tag: Optional[str]) -> None:
        self._stack.append((node, parent_tag))

    def pop(self) -> Optional[_Work]:
        return self._stack.pop() if self._stack else None


_Rule = Callable[[ElementNode, _Walk, Optional[str]], None]


class MarkdownRenderer:
    """
    Converts a document subtree into a markdown text stream.

    Dispatch is by lower-cased tag name; unknown elements are transparent
    and only their children are rendered. Rendering never raises for
    malformed references: such links and images degrade to plain text.
    The walk keeps its own stack, so arbitrarily deep trees render.

    Example:
        renderer = MarkdownRenderer(include_images=False, base_url="https://example.com/")
        raw = renderer.render(content_root)
    """

    def __init__(self, include_images: bool = True, base_url: str = ""):
        """
        Initialize the renderer.

        Args:
            include_images: Emit ``![alt](src)`` for images
            base_url: Absolute URL used to resolve relative references
        """
        self.include_images = include_images
        self.base_url = base_url

        self._rules: dict[str, _Rule] = {
            "img": self._render_image,
            "a": self._render_link,
            "ul": self._render_list,
            "ol": self._render_list,
            "li": self._render_list_item,
            "pre": self._render_preformatted,
            "code": self._render_code,
            "blockquote": self._wrapper("\n\n> ", "\n\n"),
            "table": self._wrapper("\n\n", "\n\n"),
            "tr": self._wrapper("|", "\n"),
            "br": self._render_line_break,
            "hr": self._render_rule,
            "u": self._wrapper("<u>", "</u>"),
        }
        for tag in HEADING_TAGS:
            self._rules[tag] = self._render_heading
        for tag in BLOCK_TAGS:
            self._rules[tag] = self._wrapper("\n\n", "\n")
        for tag in CELL_TAGS:
            self._rules[tag] = self._wrapper(" ", " |")
        for tag in BOLD_TAGS:
            self._rules[tag] = self._wrapper("**", "**")
        for tag in EMPHASIS_TAGS:
            self._rules[tag] = self._wrapper("*", "*")
        for tag in STRIKE_TAGS:
            self._rules[tag] = self._wrapper("~~", "~~")

    def render(self, node: Node, state: Optional[RenderState] = None) -> str:
        """
        Render ``node`` and its descendants.

        Args:
            node: Subtree to render
            state: Initial state (a fresh one is created if None)

        Returns:
            Raw, un-normalized markdown
        """
        walk = _Walk(state or RenderState())
        walk.push(node, None)
        while True:
            work = walk.pop()
            if work is None:
                break
            if isinstance(work, tuple):
                self._render_node(work[0], walk, work[1])
            elif isinstance(work, str):
                walk.emit(work)
            else:
                work()
        return "".join(walk.out)

    def _render_node(self, node: Node, walk: _Walk, parent_tag: Optional[str]) -> None:
        if isinstance(node, TextNode):
            walk.emit(node.text if walk.state.literal else _WHITESPACE_RE.sub(" ", node.text))
            return
        rule = self._rules.get(node.tag)
        if rule is None:
            walk.descend(node)
        else:
            rule(node, walk, parent_tag)

    def _wrapper(self, prefix: str, suffix: str) -> _Rule:
        def rule(element: ElementNode, walk: _Walk, parent_tag: Optional[str]) -> None:
            walk.emit(prefix)
            walk.descend(element, suffix)

        return rule

    def _resolve(self, reference: str) -> Optional[str]:
        try:
            return resolve_reference(reference, self.base_url)
        except UnresolvableReference as e:
            logger.debug(f"Degrading to plain text: {e}")
            return None

    def _render_image(self, element: ElementNode, walk: _Walk, parent_tag: Optional[str]) -> None:
        if not self.include_images:
            return
        source = (element.get("src") or "").strip() or (element.get("data-src") or "").strip()
        if not source:
            return
        resolved = self._resolve(source)
        if resolved is None:
            return
        alt = " ".join((element.get("alt") or "").split())
        walk.emit(f"![{alt}]({resolved})")

    def _render_link(self, element: ElementNode, walk: _Walk, parent_tag: Optional[str]) -> None:
        href = element.get("href")
        text = " ".join(text_content(element).split())
        resolved = self._resolve(href) if href and text else None
        if resolved is None:
            walk.descend(element)
            return
        walk.emit(f"[{text}]({resolved})")

    def _render_heading(self, element: ElementNode, walk: _Walk, parent_tag: Optional[str]) -> None:
        walk.emit(f"\n\n{'#' * int(element.tag[1])} ")
        walk.descend(element, "\n\n")

    def _render_list(self, element: ElementNode, walk: _Walk, parent_tag: Optional[str]) -> None:
        state = walk.state

        def leave() -> None:
            state.list_depth -= 1
            walk.emit("\n")

        state.list_depth += 1
        walk.emit("\n")
        walk.descend(element, leave)

    def _render_list_item(self, element: ElementNode, walk: _Walk, parent_tag: Optional[str]) -> None:
        indent = "  " * max(0, walk.state.list_depth - 1)
        bullet = "1. " if parent_tag == "ol" else "- "
        walk.emit(f"\n{indent}{bullet}")
        walk.descend(element)

    def _render_preformatted(self, element: ElementNode, walk: _Walk, parent_tag: Optional[str]) -> None:
        state = walk.state
        was_literal = state.literal

        def leave() -> None:
            state.literal = was_literal
            walk.emit("\n```\n\n")

        walk.emit("\n\n```\n")
        state.literal = True
        walk.descend(element, leave)

    def _render_code(self, element: ElementNode, walk: _Walk, parent_tag: Optional[str]) -> None:
        if walk.state.literal or parent_tag == "pre":
            walk.descend(element)
            return
        walk.emit("`")
        walk.descend(element, "`")

    def _render_line_break(self, element: ElementNode, walk: _Walk, parent_tag: Optional[str]) -> None:
        walk.emit("\n")

    def _render_rule(self, element: ElementNode, walk: _Walk, parent_tag: Optional[str]) -> None:
        walk.emit("\n\n---\n\n")
