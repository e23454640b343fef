"""
Language codes.

Usage:
    from pagelingo.i18n import fix_language_code

    fix_language_code("pt_BR")  # "pt"
"""

from pagelingo.i18n.languages import (
    LANGUAGE_NAMES,
    SUPPORTED_LANGUAGES,
    UNDETERMINED,
    fix_language_code,
    get_language_name,
    normalize_language_code,
)

__all__ = [
    "LANGUAGE_NAMES",
    "SUPPORTED_LANGUAGES",
    "UNDETERMINED",
    "fix_language_code",
    "get_language_name",
    "normalize_language_code",
]
