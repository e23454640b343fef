"""
Text handling - word boundaries and keyword protection.
"""

from pagelingo.text.codec import CompressionMap, KeywordCodec, normalize_dictionary
from pagelingo.text.delimiters import collapse_delimiters, is_boundary

__all__ = [
    "CompressionMap",
    "KeywordCodec",
    "normalize_dictionary",
    "collapse_delimiters",
    "is_boundary",
]
