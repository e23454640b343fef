"""
Document segmentation.

Walks a document tree and groups its text nodes into pieces: maximal runs
of inline text bounded by block-level structure. Each piece is sent to the
provider as one row, so a sentence split across <b> or <a> stays together
while separate paragraphs never mix.

Also collects translatable attribute values (placeholder, alt, value,
title) in a separate pass.
"""

from __future__ import annotations

import logging
from typing import Any

from pagelingo.core.models import AttributeEntry, AttributeName, NodeKind, Piece, TagCategory
from pagelingo.dom.tags import LIST_OWNER_TAGS, OPTION_TAG, TagClassifier
from pagelingo.dom.tree import DocumentTree, Node

logger = logging.getLogger(__name__)

DEFAULT_SIZE_LIMIT = 1000

# Browsers render these when a submit/reset button has no value
DEFAULT_BUTTON_VALUES = {"submit": "Submit Query", "reset": "Reset"}


class _Walk:
    """Mutable state of one segmentation pass."""

    def __init__(self, root: Node):
        self.root = root
        self.pieces: list[Piece] = [Piece()]
        self.size = 0

    @property
    def current(self) -> Piece:
        return self.pieces[-1]

    def close(self, bottom_element: Node) -> None:
        """Close the current piece if it holds any text."""
        if not self.current.nodes:
            return
        self.size = 0
        self.current.bottom_element = bottom_element
        self.pieces.append(Piece())


class Segmenter:
    """
    Splits a document into pieces and attribute entries.

    Usage:
        segmenter = Segmenter(tree, TagClassifier())
        pieces = segmenter.segment(tree.root)
        attributes = segmenter.collect_attributes(tree.root)
    """

    def __init__(
        self,
        tree: DocumentTree,
        classifier: TagClassifier | None = None,
        size_limit: int = DEFAULT_SIZE_LIMIT,
        translate_button_values: bool = False,
    ):
        self.tree = tree
        self.classifier = classifier or TagClassifier()
        self.size_limit = size_limit
        self.translate_button_values = translate_button_values

    # =========================================================================
    # Pieces
    # =========================================================================

    def segment(self, root: Node | None = None) -> list[Piece]:
        """
        Group the text under `root` into pieces, in document order.

        Whitespace-only text nodes are ignored. Excluded subtrees
        (untranslatable tags, `notranslate`, `translate="no"`, editable
        content) close the current piece and contribute nothing.
        """
        root = self.tree.root if root is None else root
        walk = _Walk(root)
        self._visit(root, walk, None, None)

        pieces = walk.pieces
        if pieces and not pieces[-1].nodes:
            pieces.pop()

        logger.debug("Segmented %d pieces", len(pieces))
        return pieces

    def _visit(self, node: Node, walk: _Walk, last_element: Node, list_owner: Node) -> None:
        tree = self.tree
        kind = tree.node_kind(node)

        if kind == NodeKind.TEXT:
            self._add_text(node, walk, last_element, list_owner)
            return

        if kind == NodeKind.FRAGMENT:
            last_element = tree.host(node)
            list_owner = None
        else:
            last_element = node
            if tree.tag_name(node) in LIST_OWNER_TAGS:
                list_owner = node
            if self._is_excluded(node):
                walk.close(last_element)
                return

        bottom = last_element
        last_element, list_owner = self._visit_children(
            tree.children(node), walk, last_element, list_owner
        )
        if walk.current.bottom_element is None:
            walk.current.bottom_element = bottom

        shadow = tree.shadow_root(node) if kind == NodeKind.ELEMENT else None
        if shadow is not None:
            self._visit_children(tree.children(shadow), walk, last_element, list_owner)
            if walk.current.bottom_element is None:
                walk.current.bottom_element = bottom

    def _visit_children(
        self,
        children: list[Node],
        walk: _Walk,
        last_element: Node,
        list_owner: Node,
    ) -> tuple[Node, Node]:
        tree = self.tree
        for child in children:
            if tree.node_kind(child) == NodeKind.ELEMENT:
                last_element = child
                if tree.tag_name(child) in LIST_OWNER_TAGS:
                    list_owner = child

            if self.classifier.is_inline_text(tree.tag_name(child)):
                self._visit(child, walk, last_element, list_owner)
                continue

            walk.close(last_element)
            self._visit(child, walk, last_element, list_owner)
            walk.close(last_element)

        return last_element, list_owner

    def _add_text(self, node: Node, walk: _Walk, last_element: Node, list_owner: Node) -> None:
        content = self.tree.text_content(node)
        if not content.strip():
            return

        piece = walk.current
        if piece.parent_element is None:
            if list_owner is not None and self._is_option_text(node):
                piece.parent_element = list_owner
                piece.top_element = list_owner
                piece.bottom_element = list_owner
            else:
                piece.parent_element = self._block_ancestor(node, walk.root)

        if piece.top_element is None:
            piece.top_element = last_element

        if walk.size > self.size_limit:
            walk.size = 0
            piece.bottom_element = last_element
            walk.pieces.append(Piece(parent_element=piece.parent_element, top_element=last_element))
            piece = walk.current

        walk.size += len(content)
        piece.nodes.append(node)
        piece.bottom_element = None

    def _is_excluded(self, element: Node) -> bool:
        category = self.classifier.classify(self.tree.tag_name(element))
        if category in (TagCategory.INLINE_IGNORE, TagCategory.NO_TRANSLATE):
            return True
        return self.tree.is_marked_no_translate(element) or self.tree.is_content_editable(element)

    def _is_option_text(self, node: Node) -> bool:
        parent = self.tree.parent(node)
        return (
            parent is not None
            and self.tree.node_kind(parent) == NodeKind.ELEMENT
            and self.tree.tag_name(parent) == OPTION_TAG
        )

    def _block_ancestor(self, node: Node, root: Node) -> Node | None:
        """Nearest ancestor that is not inline, stopping at `root`."""
        tree = self.tree
        current = tree.parent(node)
        while (
            current is not None
            and current is not root
            and tree.node_kind(current) == NodeKind.ELEMENT
            and self.classifier.is_inline(tree.tag_name(current))
        ):
            current = tree.parent(current)

        if current is not None and tree.node_kind(current) == NodeKind.FRAGMENT:
            current = tree.host(current)
        return current

    # =========================================================================
    # Attributes
    # =========================================================================

    def collect_attributes(self, root: Node | None = None) -> list[AttributeEntry]:
        """
        Collect translatable attribute values of the elements under `root`.

        Entries come in a fixed order: all placeholders, then alt texts,
        then button values (when enabled), then titles.
        """
        root = self.tree.root if root is None else root
        elements = [e for e in self.tree.iter_elements(root) if not self.tree.is_marked_no_translate(e)]

        entries: list[AttributeEntry] = []
        for element in elements:
            if self.tree.tag_name(element) in ("INPUT", "TEXTAREA"):
                self._add_attribute(entries, element, AttributeName.PLACEHOLDER)

        for element in elements:
            tag = self.tree.tag_name(element)
            if tag in ("AREA", "IMG") or (tag == "INPUT" and self._input_type(element) == "image"):
                self._add_attribute(entries, element, AttributeName.ALT)

        if self.translate_button_values:
            for element in elements:
                if self.tree.tag_name(element) != "INPUT":
                    continue
                input_type = self._input_type(element)
                if input_type not in ("button", "submit", "reset"):
                    continue
                value = self.tree.get_attribute(element, AttributeName.VALUE.value)
                if not value and input_type in DEFAULT_BUTTON_VALUES:
                    entries.append(
                        AttributeEntry(element, AttributeName.VALUE, DEFAULT_BUTTON_VALUES[input_type])
                    )
                else:
                    self._add_attribute(entries, element, AttributeName.VALUE)

        for element in elements:
            self._add_attribute(entries, element, AttributeName.TITLE)

        return entries

    def _add_attribute(self, entries: list[AttributeEntry], element: Node, name: AttributeName) -> None:
        value = self.tree.get_attribute(element, name.value)
        if value and value.strip():
            entries.append(AttributeEntry(node=element, attr_name=name, original=value))

    def _input_type(self, element: Any) -> str:
        return (self.tree.get_attribute(element, "type") or "").lower()
