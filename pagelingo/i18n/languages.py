"""
Language codes and utilities.

Detected page languages arrive in many shapes ("en-US", "pt_BR", "iw",
"Chinese"). Everything is normalized to the short codes the translation
services accept before it is compared with user preferences.
"""

from __future__ import annotations

# Code for a language that could not be detected
UNDETERMINED = "und"

LANGUAGE_NAMES: dict[str, str] = {
    "af": "Afrikaans",
    "am": "Amharic",
    "ar": "Arabic",
    "az": "Azerbaijani",
    "be": "Belarusian",
    "bg": "Bulgarian",
    "bn": "Bengali",
    "bs": "Bosnian",
    "ca": "Catalan",
    "cs": "Czech",
    "cy": "Welsh",
    "da": "Danish",
    "de": "German",
    "el": "Greek",
    "en": "English",
    "eo": "Esperanto",
    "es": "Spanish",
    "et": "Estonian",
    "eu": "Basque",
    "fa": "Persian",
    "fi": "Finnish",
    "fr": "French",
    "ga": "Irish",
    "gl": "Galician",
    "gu": "Gujarati",
    "ha": "Hausa",
    "he": "Hebrew",
    "hi": "Hindi",
    "hr": "Croatian",
    "hu": "Hungarian",
    "hy": "Armenian",
    "id": "Indonesian",
    "is": "Icelandic",
    "it": "Italian",
    "ja": "Japanese",
    "jv": "Javanese",
    "ka": "Georgian",
    "kk": "Kazakh",
    "km": "Khmer",
    "kn": "Kannada",
    "ko": "Korean",
    "lo": "Lao",
    "lt": "Lithuanian",
    "lv": "Latvian",
    "mk": "Macedonian",
    "ml": "Malayalam",
    "mn": "Mongolian",
    "mr": "Marathi",
    "ms": "Malay",
    "my": "Burmese",
    "ne": "Nepali",
    "nl": "Dutch",
    "no": "Norwegian",
    "pa": "Punjabi",
    "pl": "Polish",
    "pt": "Portuguese",
    "ro": "Romanian",
    "ru": "Russian",
    "si": "Sinhala",
    "sk": "Slovak",
    "sl": "Slovenian",
    "sq": "Albanian",
    "sr": "Serbian",
    "sv": "Swedish",
    "sw": "Swahili",
    "ta": "Tamil",
    "te": "Telugu",
    "th": "Thai",
    "tl": "Tagalog",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "ur": "Urdu",
    "uz": "Uzbek",
    "vi": "Vietnamese",
    "yo": "Yoruba",
    "zh": "Chinese (Simplified)",
    "zh-cn": "Chinese (Simplified, China)",
    "zh-tw": "Chinese (Traditional)",
    "zu": "Zulu",
}

SUPPORTED_LANGUAGES: frozenset[str] = frozenset(LANGUAGE_NAMES)

# Deprecated ISO codes and common alternates
_CODE_ALIASES = {
    "iw": "he",
    "ji": "yi",
    "in": "id",
    "jw": "jv",
    "fil": "tl",
    "nb": "no",
    "nn": "no",
}

# Chinese variants written in simplified script
_SIMPLIFIED_CHINESE = {"zh-cn", "zh-sg", "zh-hans"}

# Chinese variants written in traditional script
_TRADITIONAL_CHINESE = {"zh-tw", "zh-hk", "zh-mo", "zh-hant"}

_NAME_VARIANTS = {
    "english": "en",
    "spanish": "es",
    "french": "fr",
    "german": "de",
    "chinese": "zh",
    "japanese": "ja",
    "korean": "ko",
    "portuguese": "pt",
    "italian": "it",
    "russian": "ru",
    "arabic": "ar",
    "hindi": "hi",
    "dutch": "nl",
    "polish": "pl",
    "vietnamese": "vi",
    "turkish": "tr",
    "hebrew": "he",
    "persian": "fa",
    "farsi": "fa",
    "ukrainian": "uk",
    # Common misspellings
    "portugese": "pt",
}


# =============================================================================
# Utilities
# =============================================================================


def get_language_name(code: str) -> str:
    """Get human-readable language name."""
    return LANGUAGE_NAMES.get(code.lower(), code)


def normalize_language_code(code: str) -> str:
    """Normalize language code to standard form."""
    code = code.lower().strip().replace("_", "-")
    return _NAME_VARIANTS.get(code, code)


def fix_language_code(code: str | None) -> str | None:
    """
    Map a detected or configured language to a supported code.

    Region subtags are dropped except for Chinese, which keeps its script
    as "zh-cn" or "zh-tw". Returns None when the language is not supported.

    Examples:
        fix_language_code("en-US")    # "en"
        fix_language_code("zh_HK")    # "zh-tw"
        fix_language_code("zh-Hans")  # "zh-cn"
        fix_language_code("iw")       # "he"
    """
    if not code:
        return None

    code = normalize_language_code(code)
    if code in _SIMPLIFIED_CHINESE:
        return "zh-cn"
    if code in _TRADITIONAL_CHINESE:
        return "zh-tw"

    primary = code.split("-", 1)[0]
    primary = _CODE_ALIASES.get(primary, primary)
    return primary if primary in SUPPORTED_LANGUAGES else None
