"""
In-memory document tree.

A small DOM-like tree for hosts without a rendering engine and for tests.
It implements both `DocumentTree` and `VisibilityAdapter`, and reports its
own mutations to an optional change feed the way a mutation observer would.

Usage:
    doc = MemoryDocument(
        element("BODY",
            element("P", text("Hello "), element("B", text("world"))),
            element("DIV", text("Second block"), class_="notranslate"),
        )
    )
"""

from __future__ import annotations

from typing import Any

from pagelingo.core.errors import DocumentTreeError
from pagelingo.core.events import ChangeFeed
from pagelingo.core.models import NodeKind, Rect
from pagelingo.dom.tags import FRAGMENT_NODE_NAME, TEXT_NODE_NAME
from pagelingo.dom.tree import DocumentTree, VisibilityAdapter

_EDITABLE_VALUES = {"", "true", "plaintext-only"}


class MemoryNode:
    """A node of the in-memory tree."""

    __slots__ = ("tag", "text", "attributes", "children", "parent", "shadow", "host", "rect")

    def __init__(
        self,
        tag: str,
        text: str = "",
        attributes: dict[str, str] | None = None,
        children: list[MemoryNode] | None = None,
        rect: Rect | None = None,
    ):
        self.tag = tag if tag.startswith("#") else tag.upper()
        self.text = text
        self.attributes: dict[str, str] = dict(attributes or {})
        self.children: list[MemoryNode] = []
        self.parent: MemoryNode | None = None
        self.shadow: MemoryNode | None = None
        self.host: MemoryNode | None = None
        self.rect = rect
        for child in children or []:
            self.append(child)

    @property
    def kind(self) -> NodeKind:
        if self.tag == TEXT_NODE_NAME:
            return NodeKind.TEXT
        if self.tag == FRAGMENT_NODE_NAME:
            return NodeKind.FRAGMENT
        return NodeKind.ELEMENT

    @property
    def classes(self) -> list[str]:
        return self.attributes.get("class", "").split()

    def append(self, child: MemoryNode) -> MemoryNode:
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def index_in_parent(self) -> int:
        if self.parent is None:
            raise DocumentTreeError("Node is detached")
        for i, sibling in enumerate(self.parent.children):
            if sibling is self:
                return i
        raise DocumentTreeError("Node not found in its parent")

    def __repr__(self) -> str:
        if self.kind == NodeKind.TEXT:
            return f"<text {self.text[:30]!r}>"
        return f"<{self.tag} children={len(self.children)}>"


# =============================================================================
# Builders
# =============================================================================


def text(value: str) -> MemoryNode:
    """Create a text node."""
    return MemoryNode(TEXT_NODE_NAME, text=value)


def element(tag: str, *children: MemoryNode, rect: Rect | None = None, **attributes: Any) -> MemoryNode:
    """
    Create an element.

    Keyword arguments become attributes; a trailing underscore is dropped
    (`class_="x"`) and other underscores become dashes.
    """
    attrs = {
        key.rstrip("_").replace("_", "-"): str(value)
        for key, value in attributes.items()
    }
    return MemoryNode(tag, attributes=attrs, children=list(children), rect=rect)


def attach_shadow(host: MemoryNode, *children: MemoryNode) -> MemoryNode:
    """Attach a shadow root with the given children to `host`."""
    fragment = MemoryNode(FRAGMENT_NODE_NAME, children=list(children))
    fragment.host = host
    host.shadow = fragment
    return fragment


# =============================================================================
# Document
# =============================================================================


class MemoryDocument(DocumentTree, VisibilityAdapter):
    """
    Document backed by `MemoryNode` objects.

    Nodes without a rect inherit their nearest ancestor's; when nothing
    has one, `default_rect` is used (on screen unless set otherwise).
    """

    def __init__(
        self,
        body: MemoryNode | None = None,
        title: str = "",
        feed: ChangeFeed | None = None,
        viewport_height: float = 800.0,
        default_rect: Rect | None = Rect(top=10, bottom=30),
        visible: bool = True,
    ):
        self.body = body or MemoryNode("BODY")
        self.title_node = element("TITLE", text(title))
        self.feed = feed
        self._viewport_height = viewport_height
        self.default_rect = default_rect
        self.visible = visible

    # =========================================================================
    # DocumentTree
    # =========================================================================

    @property
    def root(self) -> MemoryNode:
        return self.body

    def children(self, node: MemoryNode) -> list[MemoryNode]:
        return list(node.children)

    def parent(self, node: MemoryNode) -> MemoryNode | None:
        return node.parent

    def node_kind(self, node: MemoryNode) -> NodeKind:
        return node.kind

    def tag_name(self, node: MemoryNode) -> str:
        return node.tag

    def shadow_root(self, node: MemoryNode) -> MemoryNode | None:
        return node.shadow

    def host(self, fragment: MemoryNode) -> MemoryNode | None:
        return fragment.host

    def text_content(self, node: MemoryNode) -> str:
        if node.kind == NodeKind.TEXT:
            return node.text
        return "".join(self.text_content(child) for child in node.children)

    def set_text_content(self, node: MemoryNode, value: str) -> None:
        if node.kind == NodeKind.TEXT:
            node.text = value
            return
        removed = list(node.children)
        for child in removed:
            child.parent = None
        node.children = []
        added = node.append(text(value))
        self._record(added=[added], removed=removed)

    def get_attribute(self, node: MemoryNode, name: str) -> str | None:
        if node.kind != NodeKind.ELEMENT:
            return None
        return node.attributes.get(name)

    def set_attribute(self, node: MemoryNode, name: str, value: str) -> None:
        if node.kind != NodeKind.ELEMENT:
            raise DocumentTreeError(f"Cannot set attribute on {node!r}")
        node.attributes[name] = value

    def has_class(self, node: MemoryNode, class_name: str) -> bool:
        return node.kind == NodeKind.ELEMENT and class_name in node.classes

    def is_content_editable(self, node: MemoryNode) -> bool:
        current: MemoryNode | None = node
        while current is not None:
            if current.kind == NodeKind.FRAGMENT:
                current = current.host
                continue
            value = current.attributes.get("contenteditable")
            if value is not None:
                return value.lower() in _EDITABLE_VALUES
            current = current.parent
        return False

    def create_text_node(self, value: str) -> MemoryNode:
        return text(value)

    def create_wrapper(self, value: str, style: str, class_names: list[str] | None = None) -> MemoryNode:
        attrs = {"style": style}
        if class_names:
            attrs["class"] = " ".join(class_names)
        return MemoryNode("FONT", attributes=attrs, children=[text(value)])

    def replace_node(self, old: MemoryNode, new: MemoryNode) -> None:
        parent = old.parent
        if parent is None:
            return
        index = old.index_in_parent()
        if new.parent is not None:
            new.parent.children.remove(new)
        parent.children[index] = new
        new.parent = parent
        old.parent = None
        self._record(added=[new], removed=[old])

    def get_title(self) -> str:
        return self.text_content(self.title_node)

    def set_title(self, title: str) -> None:
        self.title_node.children = []
        self.title_node.append(text(title))

    def title_element(self) -> MemoryNode | None:
        return self.title_node

    # =========================================================================
    # Host-side mutations (reported to the change feed)
    # =========================================================================

    def append_child(self, parent: MemoryNode, child: MemoryNode) -> MemoryNode:
        parent.append(child)
        self._record(added=[child])
        return child

    def remove_child(self, child: MemoryNode) -> None:
        if child.parent is None:
            return
        child.parent.children.remove(child)
        child.parent = None
        self._record(removed=[child])

    def _record(self, added: list[MemoryNode] = (), removed: list[MemoryNode] = ()) -> None:
        if self.feed is not None:
            self.feed.record(added=added, removed=removed)

    # =========================================================================
    # VisibilityAdapter
    # =========================================================================

    def bounding_box(self, node: MemoryNode) -> Rect | None:
        current: MemoryNode | None = node
        while current is not None:
            if current.rect is not None:
                return current.rect
            current = current.parent if current.kind != NodeKind.FRAGMENT else current.host
        return self.default_rect

    @property
    def viewport_height(self) -> float:
        return self._viewport_height

    def set_viewport_height(self, height: float) -> None:
        self._viewport_height = height

    def is_document_visible(self) -> bool:
        return self.visible
