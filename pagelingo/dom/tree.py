"""
Document tree abstraction layer.

The engine never touches a rendering engine directly. Everything goes
through these interfaces so the segmenter and orchestrator can run against
a browser bridge, an HTML parser, or the in-memory tree used in tests.

Node objects are opaque to the engine; only identity matters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pagelingo.core.models import NodeKind, Rect

Node = Any


# =============================================================================
# Document Tree
# =============================================================================


class DocumentTree(ABC):
    """
    Traversal, classification and mutation of a document.

    Tag names are reported upper-case for elements, "#text" for text nodes
    and "#document-fragment" for fragments and shadow roots.
    """

    @property
    @abstractmethod
    def root(self) -> Node:
        """The element translation starts from (usually the body)."""
        pass

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    @abstractmethod
    def children(self, node: Node) -> list[Node]:
        """Child nodes in document order."""
        pass

    @abstractmethod
    def parent(self, node: Node) -> Node | None:
        """Parent node, or the fragment for shadow-root children."""
        pass

    @abstractmethod
    def node_kind(self, node: Node) -> NodeKind:
        pass

    @abstractmethod
    def tag_name(self, node: Node) -> str:
        pass

    @abstractmethod
    def shadow_root(self, node: Node) -> Node | None:
        """Shadow root attached to an element, if any."""
        pass

    @abstractmethod
    def host(self, fragment: Node) -> Node | None:
        """Element hosting a shadow root."""
        pass

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    @abstractmethod
    def text_content(self, node: Node) -> str:
        pass

    @abstractmethod
    def set_text_content(self, node: Node, text: str) -> None:
        pass

    @abstractmethod
    def get_attribute(self, node: Node, name: str) -> str | None:
        pass

    @abstractmethod
    def set_attribute(self, node: Node, name: str, value: str) -> None:
        pass

    @abstractmethod
    def has_class(self, node: Node, class_name: str) -> bool:
        pass

    @abstractmethod
    def is_content_editable(self, node: Node) -> bool:
        pass

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_text_node(self, text: str) -> Node:
        pass

    @abstractmethod
    def create_wrapper(self, text: str, style: str, class_names: list[str] | None = None) -> Node:
        """Create the element that replaces a translated text node."""
        pass

    @abstractmethod
    def replace_node(self, old: Node, new: Node) -> None:
        """Put `new` where `old` is. Detached `old` nodes are ignored."""
        pass

    # -------------------------------------------------------------------------
    # Document title
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_title(self) -> str:
        pass

    @abstractmethod
    def set_title(self, title: str) -> None:
        pass

    @abstractmethod
    def title_element(self) -> Node | None:
        pass

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def is_marked_no_translate(self, node: Node) -> bool:
        """Check the `notranslate` class and the `translate="no"` attribute."""
        return self.has_class(node, "notranslate") or self.get_attribute(node, "translate") == "no"

    def iter_elements(self, node: Node):
        """Yield element descendants of `node` in document order."""
        for child in self.children(node):
            if self.node_kind(child) == NodeKind.ELEMENT:
                yield child
                yield from self.iter_elements(child)


# =============================================================================
# Visibility
# =============================================================================


class VisibilityAdapter(ABC):
    """Geometry and visibility of the host viewport."""

    @abstractmethod
    def bounding_box(self, node: Node) -> Rect | None:
        """Viewport-relative box of a node, None when it has no layout."""
        pass

    @property
    @abstractmethod
    def viewport_height(self) -> float:
        pass

    @abstractmethod
    def is_document_visible(self) -> bool:
        pass
