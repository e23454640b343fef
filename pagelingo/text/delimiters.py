"""
Word-boundary classification.

A character is a boundary when it is whitespace, an HTML space variant, or
punctuation from the Latin, CJK or other Unicode punctuation blocks. A few
currency and math symbols ($, yen, ^, +, =) are included as well because
dictionary terms next to them should still be matched as whole words.
"""

from __future__ import annotations

import re

# Inclusive code point ranges. Unicode punctuation categories plus CJK
# full-width punctuation, currency/math extras and nbsp/ensp/emsp/thinsp/
# zwnj/zwj.
_BOUNDARY_RANGES: tuple[tuple[int, int], ...] = (
    # ASCII: ! " # $ % & ' ( ) * + , - . / : ; < = > ? @ [ \ ] ^ _ ` { | } ~
    (0x0021, 0x002F),
    (0x003A, 0x0040),
    (0x005B, 0x0060),
    (0x007B, 0x007E),
    # Latin-1 and HTML spaces
    (0x00A0, 0x00A1),
    (0x00A7, 0x00A7),
    (0x00AB, 0x00AB),
    (0x00B6, 0x00B7),
    (0x00BB, 0x00BB),
    (0x00BF, 0x00BF),
    (0x2002, 0x2003),
    (0x2009, 0x2009),
    (0x200C, 0x200D),
    # Greek, Armenian, Hebrew, Arabic, Syriac, NKo, Samaritan, Mandaic
    (0x037E, 0x037E),
    (0x0387, 0x0387),
    (0x055A, 0x055F),
    (0x0589, 0x058A),
    (0x05BE, 0x05BE),
    (0x05C0, 0x05C0),
    (0x05C3, 0x05C3),
    (0x05C6, 0x05C6),
    (0x05F3, 0x05F4),
    (0x0609, 0x060A),
    (0x060C, 0x060D),
    (0x061B, 0x061B),
    (0x061E, 0x061F),
    (0x066A, 0x066D),
    (0x06D4, 0x06D4),
    (0x0700, 0x070D),
    (0x07F7, 0x07F9),
    (0x0830, 0x083E),
    (0x085E, 0x085E),
    # Indic, Sinhala, Thai, Tibetan, Myanmar, Georgian, Ethiopic
    (0x0964, 0x0965),
    (0x0970, 0x0970),
    (0x0AF0, 0x0AF0),
    (0x0DF4, 0x0DF4),
    (0x0E4F, 0x0E4F),
    (0x0E5A, 0x0E5B),
    (0x0F04, 0x0F12),
    (0x0F14, 0x0F14),
    (0x0F3A, 0x0F3D),
    (0x0F85, 0x0F85),
    (0x0FD0, 0x0FD4),
    (0x0FD9, 0x0FDA),
    (0x104A, 0x104F),
    (0x10FB, 0x10FB),
    (0x1360, 0x1368),
    # Canadian syllabics, Ogham, Runic, Philippine, Khmer, Mongolian, ...
    (0x1400, 0x1400),
    (0x166D, 0x166E),
    (0x169B, 0x169C),
    (0x16EB, 0x16ED),
    (0x1735, 0x1736),
    (0x17D4, 0x17D6),
    (0x17D8, 0x17DA),
    (0x1800, 0x180A),
    (0x1944, 0x1945),
    (0x1A1E, 0x1A1F),
    (0x1AA0, 0x1AA6),
    (0x1AA8, 0x1AAD),
    (0x1B5A, 0x1B60),
    (0x1BFC, 0x1BFF),
    (0x1C3B, 0x1C3F),
    (0x1C7E, 0x1C7F),
    (0x1CC0, 0x1CC7),
    (0x1CD3, 0x1CD3),
    # General punctuation, brackets and math delimiters
    (0x2010, 0x2027),
    (0x2030, 0x2043),
    (0x2045, 0x2051),
    (0x2053, 0x205E),
    (0x207D, 0x207E),
    (0x208D, 0x208E),
    (0x2329, 0x232A),
    (0x2768, 0x2775),
    (0x27C5, 0x27C6),
    (0x27E6, 0x27EF),
    (0x2983, 0x2998),
    (0x29D8, 0x29DB),
    (0x29FC, 0x29FD),
    (0x2CF9, 0x2CFC),
    (0x2CFE, 0x2CFF),
    (0x2D70, 0x2D70),
    (0x2E00, 0x2E2E),
    (0x2E30, 0x2E3B),
    # CJK symbols and punctuation
    (0x3001, 0x3003),
    (0x3008, 0x3011),
    (0x3014, 0x301F),
    (0x3030, 0x3030),
    (0x303D, 0x303D),
    (0x30A0, 0x30A0),
    (0x30FB, 0x30FB),
    # Lisu, Vai, Cyrillic ext, Bamum, Phags-pa, Saurashtra, ...
    (0xA4FE, 0xA4FF),
    (0xA60D, 0xA60F),
    (0xA673, 0xA673),
    (0xA67E, 0xA67E),
    (0xA6F2, 0xA6F7),
    (0xA874, 0xA877),
    (0xA8CE, 0xA8CF),
    (0xA8F8, 0xA8FA),
    (0xA92E, 0xA92F),
    (0xA95F, 0xA95F),
    (0xA9C1, 0xA9CD),
    (0xA9DE, 0xA9DF),
    (0xAA5C, 0xAA5F),
    (0xAADE, 0xAADF),
    (0xAAF0, 0xAAF1),
    (0xABEB, 0xABEB),
    # Presentation forms and full-width ASCII
    (0xFD3E, 0xFD3F),
    (0xFE10, 0xFE19),
    (0xFE30, 0xFE52),
    (0xFE54, 0xFE61),
    (0xFE63, 0xFE63),
    (0xFE68, 0xFE68),
    (0xFE6A, 0xFE6B),
    (0xFF01, 0xFF03),
    (0xFF05, 0xFF0A),
    (0xFF0C, 0xFF0F),
    (0xFF1A, 0xFF1B),
    (0xFF1F, 0xFF20),
    (0xFF3B, 0xFF3D),
    (0xFF3F, 0xFF3F),
    (0xFF5B, 0xFF5B),
    (0xFF5D, 0xFF5D),
    (0xFF5F, 0xFF65),
    (0xFFE5, 0xFFE5),  # Full-width yen
)

BOUNDARY_CODEPOINTS: frozenset[int] = frozenset(
    code for start, end in _BOUNDARY_RANGES for code in range(start, end + 1)
)

_SPACE_RUN = re.compile(r" {2,}")


def _is_boundary_char(c: str) -> bool:
    return c.isspace() or ord(c) in BOUNDARY_CODEPOINTS


def is_boundary(ch: str) -> bool:
    """
    Check whether a character delimits words.

    The empty string stands for the start or end of a string and is a
    boundary. For longer strings, any boundary character counts.
    """
    if not ch:
        return True
    return any(_is_boundary_char(c) for c in ch)


def collapse_delimiters(text: str) -> str:
    """Replace newlines with spaces and collapse runs of spaces."""
    return _SPACE_RUN.sub(" ", text.replace("\n", " "))
