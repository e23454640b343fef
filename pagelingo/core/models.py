"""
Core data models for the translation engine.

Pieces and attribute entries reference live document nodes, so they are
plain dataclasses compared by identity. Everything here is rebuilt on each
translation pass and discarded on restore.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable


# =============================================================================
# Enums
# =============================================================================


class PageLanguageState(str, Enum):
    """Whether the document currently shows substituted text."""

    ORIGINAL = "original"
    TRANSLATED = "translated"


class NodeKind(str, Enum):
    """Kinds of nodes the engine distinguishes."""

    TEXT = "text"
    ELEMENT = "element"
    FRAGMENT = "fragment"  # document fragment / shadow root


class TagCategory(str, Enum):
    """How the segmenter treats an element."""

    INLINE_TEXT = "inline_text"  # Keeps the current piece open
    INLINE_IGNORE = "inline_ignore"  # Closes the piece, content excluded
    NO_TRANSLATE = "no_translate"  # Skipped entirely
    BLOCK = "block"  # Closes the piece before and after


class DualStyle(str, Enum):
    """Visual treatment of substituted text."""

    UNDERLINE = "underline"
    NONE = "none"
    HIGHLIGHT = "highlight"
    WEAKENING = "weakening"
    MASK = "mask"


class AttributeName(str, Enum):
    """Attributes whose values are translated."""

    PLACEHOLDER = "placeholder"
    ALT = "alt"
    VALUE = "value"
    TITLE = "title"


# =============================================================================
# Geometry
# =============================================================================


@dataclass(frozen=True)
class Rect:
    """Bounding box of a node relative to the viewport."""

    top: float
    bottom: float
    left: float = 0.0
    right: float = 0.0


# =============================================================================
# Translation units
# =============================================================================


@dataclass(eq=False)
class Piece:
    """
    A maximal run of text nodes translated as one unit.

    Bounded by block-level structure. `top_element` and `bottom_element`
    are used to decide whether the piece is on screen.
    """

    parent_element: Any = None
    top_element: Any = None
    bottom_element: Any = None
    nodes: list[Any] = field(default_factory=list)
    is_translated: bool = False

    def text(self, tree: Any) -> str:
        """Concatenated text of the piece's nodes, read through `tree`."""
        return "".join(tree.text_content(node) for node in self.nodes)

    def covers(self, nodes: Iterable[Any]) -> bool:
        """Check whether any of the given nodes belongs to this piece."""
        own = {id(node) for node in self.nodes}
        return any(id(node) in own for node in nodes)

    def __repr__(self) -> str:
        return (
            f"<Piece(nodes={len(self.nodes)}, "
            f"translated={self.is_translated})>"
        )


@dataclass(eq=False)
class AttributeEntry:
    """A translatable attribute value on an element."""

    node: Any
    attr_name: AttributeName
    original: str
    is_translated: bool = False


@dataclass(eq=False)
class RestoreEntry:
    """Snapshot needed to reverse a single text substitution."""

    node: Any  # The substitution wrapper now in the document
    original_text: str
