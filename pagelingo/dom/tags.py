"""
Tag classification for segmentation.
"""

from __future__ import annotations

from pagelingo.core.models import TagCategory

TEXT_NODE_NAME = "#text"
FRAGMENT_NODE_NAME = "#document-fragment"

INLINE_TEXT_TAGS: frozenset[str] = frozenset({
    TEXT_NODE_NAME,
    "A",
    "ABBR",
    "ACRONYM",
    "B",
    "BDO",
    "BIG",
    "CITE",
    "DFN",
    "EM",
    "I",
    "LABEL",
    "Q",
    "S",
    "SMALL",
    "SPAN",
    "STRONG",
    "SUB",
    "SUP",
    "U",
    "TT",
    "VAR",
})

# PRE joins this set unless preformatted text is translated
INLINE_IGNORE_TAGS: frozenset[str] = frozenset({"BR", "CODE", "KBD", "WBR"})

NO_TRANSLATE_TAGS: frozenset[str] = frozenset({
    "TITLE",
    "SCRIPT",
    "STYLE",
    "TEXTAREA",
    "SVG",
})

# Text under OPTION belongs to the owning list element
LIST_OWNER_TAGS: frozenset[str] = frozenset({"SELECT", "DATALIST"})
OPTION_TAG = "OPTION"


class TagClassifier:
    """Maps tag names to the category the segmenter acts on."""

    def __init__(self, translate_pre: bool = False):
        self._inline_ignore = set(INLINE_IGNORE_TAGS)
        self.set_translate_pre(translate_pre)

    @property
    def translate_pre(self) -> bool:
        return "PRE" not in self._inline_ignore

    def set_translate_pre(self, enabled: bool) -> None:
        """Toggle whether PRE content is translated or ignored."""
        if enabled:
            self._inline_ignore.discard("PRE")
        else:
            self._inline_ignore.add("PRE")

    def classify(self, tag_name: str) -> TagCategory:
        tag = tag_name.upper() if tag_name != TEXT_NODE_NAME else tag_name
        if tag in INLINE_TEXT_TAGS:
            return TagCategory.INLINE_TEXT
        if tag in self._inline_ignore:
            return TagCategory.INLINE_IGNORE
        if tag in NO_TRANSLATE_TAGS:
            return TagCategory.NO_TRANSLATE
        return TagCategory.BLOCK

    def is_inline_text(self, tag_name: str) -> bool:
        return self.classify(tag_name) == TagCategory.INLINE_TEXT

    def is_inline(self, tag_name: str) -> bool:
        """Inline text or inline ignore."""
        return self.classify(tag_name) in (TagCategory.INLINE_TEXT, TagCategory.INLINE_IGNORE)

    def is_segmentation_root(self, tag_name: str) -> bool:
        """
        Check whether an added node should be segmented on its own.

        Inline and untranslatable additions are left to their block.
        """
        return self.classify(tag_name) == TagCategory.BLOCK
