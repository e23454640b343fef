"""
Keyword protection for text sent to a translation provider.

Dictionary terms are swapped for short numbered markers before
translation (`@%3#$`) and swapped back afterwards, so the provider cannot
translate or mangle them. The marker number indexes a compression map that
remembers the matched text with its original casing.

Usage:
    codec = KeywordCodec()
    encoded = codec.encode("Contact Acme Corp today", {"acme corp": "ACME Corp"})
    # "Contact @%1#$ today"
    codec.decode(encoded, {"acme corp": "ACME Corp"})
    # "Contact ACME Corp today"
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Mapping

from pagelingo.core.errors import KeywordProtocolError
from pagelingo.text.delimiters import collapse_delimiters, is_boundary

logger = logging.getLogger(__name__)

# Markers must not contain word characters next to the index, otherwise a
# provider may glue the index to neighbouring digits or words.
START_MARK = "@%"
END_MARK = "#$"

# Some providers insert a space inside the markers.
MANGLED_START_MARK = "@ %"
MANGLED_END_MARK = "# $"

# Wraps each character of an in-word match while a key is being processed.
CHAR_MARK = "#n%o#"

_MARKER_PATTERN = re.compile(re.escape(START_MARK) + r"\d+" + re.escape(END_MARK))


# =============================================================================
# Compression Map
# =============================================================================


class CompressionMap:
    """
    Index -> matched text store for one translation pass.

    Indices start at 1 and only grow until `reset()`.
    """

    def __init__(self):
        self._entries: dict[int, str] = {}
        self._current = 0

    def store(self, value: str) -> int:
        """Store a matched keyword and return its index."""
        self._current += 1
        self._entries[self._current] = value
        return self._current

    def lookup(self, index: int) -> str | None:
        """Get the matched keyword for an index."""
        return self._entries.get(index)

    def reset(self) -> None:
        self._entries.clear()
        self._current = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, index: object) -> bool:
        return index in self._entries


def normalize_dictionary(dictionary: Mapping[str, str]) -> dict[str, str]:
    """Lower-case the keys of a keyword dictionary, keeping its order."""
    normalized: dict[str, str] = {}
    for keyword, replacement in dictionary.items():
        key = str(keyword).strip().lower()
        if key:
            normalized[key] = "" if replacement is None else str(replacement)
    return normalized


# =============================================================================
# Codec
# =============================================================================


class KeywordCodec:
    """
    Encodes dictionary terms into markers and decodes them back.

    The compression map is shared between encode and decode; the owner
    resets it whenever a new translation pass starts.
    """

    def __init__(self, compression: CompressionMap | None = None):
        self.compression = compression or CompressionMap()

    def encode(self, text: str, dictionary: Mapping[str, str]) -> str:
        """
        Replace dictionary terms in `text` with protection markers.

        Longer keys are processed first so "spring boot" wins over "spring".
        A match is only protected when it stands as a whole word; matches
        inside a larger token are left as they are.
        """
        dictionary = normalize_dictionary(dictionary)
        if not dictionary:
            return text

        for keyword in sorted(dictionary, key=len, reverse=True):
            if self._find(text, keyword, 0) is None:
                continue
            text = collapse_delimiters(text)
            text = self._protect_keyword(text, keyword)

        return text

    def decode(self, translated: str, dictionary: Mapping[str, str]) -> str:
        """
        Resolve protection markers in provider output.

        Raises:
            KeywordProtocolError: If a marker is unbalanced or its index is
                not in the compression map.
        """
        dictionary = normalize_dictionary(dictionary)
        if not dictionary:
            return translated

        text = collapse_delimiters(translated)
        text = text.replace(MANGLED_START_MARK, START_MARK)
        text = text.replace(MANGLED_END_MARK, END_MARK)

        # Replacements are never rescanned for markers
        position = 0
        while True:
            start = text.find(START_MARK, position)
            if start != -1:
                end = text.find(END_MARK, start + len(START_MARK))
            else:
                end = text.find(END_MARK, position)

            if start == -1 and end == -1:
                break
            if start == -1 or end == -1:
                raise KeywordProtocolError("Unbalanced protection marker", translated)

            raw_index = text[start + len(START_MARK):end].strip()
            keyword = self._resolve(raw_index, translated)

            front = text[:start]
            back = text[end + len(END_MARK):]
            value = dictionary.get(keyword.lower()) or keyword

            if not is_boundary(front[-1:]):
                front += " "
            if not is_boundary(back[:1]):
                back = " " + back
            text = front + value + back
            position = len(front) + len(value)

        return text

    def markers(self, text: str) -> list[str]:
        """List the protection markers present in a text."""
        return _MARKER_PATTERN.findall(text)

    # =========================================================================
    # Internals
    # =========================================================================

    def _resolve(self, raw_index: str, translated: str) -> str:
        try:
            index = int(raw_index)
        except ValueError:
            raise KeywordProtocolError(
                f"Marker index {raw_index!r} is not a number", translated
            ) from None

        keyword = self.compression.lookup(index)
        if keyword is None:
            raise KeywordProtocolError(f"Unknown marker index {index}", translated)
        return keyword

    def _protect_keyword(self, text: str, keyword: str) -> str:
        position = 0
        while True:
            span = self._find(text, keyword, position)
            if span is None:
                break
            start, end = span
            matched = text[start:end]
            before = text[start - 1] if start > 0 else "\n"
            after = text[end] if end < len(text) else "\n"

            if is_boundary(before) and is_boundary(after):
                index = self.compression.store(matched)
                replacement = f"{START_MARK}{index}{END_MARK}"
            else:
                replacement = CHAR_MARK + CHAR_MARK.join(matched) + CHAR_MARK

            text = text[:start] + replacement + text[end:]
            position = start + len(replacement)

        return text.replace(CHAR_MARK, "")

    def _find(self, text: str, keyword: str, position: int) -> tuple[int, int] | None:
        """Find the next case-insensitive match outside existing markers."""
        protected = [m.span() for m in _MARKER_PATTERN.finditer(text)]
        for match in _iter_matches(text, keyword, position):
            start, end = match
            if any(start < p_end and p_start < end for p_start, p_end in protected):
                continue
            return match
        return None


def _iter_matches(text: str, keyword: str, position: int) -> Iterator[tuple[int, int]]:
    pattern = re.compile(re.escape(keyword), re.IGNORECASE)
    for match in pattern.finditer(text, position):
        yield match.span()
