"""Protocol definitions for the extraction engine."""

from typing import Optional, Protocol

from ..dom.nodes import ElementNode, Node
from .renderer import RenderState


class Locator(Protocol):
    """
    Protocol for selecting the main content subtree.

    Implementations must not modify the input tree and raise
    NoContentFound when no renderable root exists.
    """

    def locate(self, root: Node) -> ElementNode:
        """
        Select the content root.

        Args:
            root: Whole document tree

        Returns:
            A pruned copy of the content subtree
        """
        ...


class Renderer(Protocol):
    """
    Protocol for converting a subtree to raw markdown.

    Implementations should be deterministic and degrade malformed
    elements to plain text rather than raising.
    """

    def render(self, node: Node, state: Optional[RenderState] = None) -> str:
        """
        Render a subtree.

        Args:
            node: Subtree to render
            state: Initial render state

        Returns:
            Raw markdown (not yet normalized)
        """
        ...
