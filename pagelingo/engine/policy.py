"""
Auto-translate rules.

Decides whether a page should be translated without the user asking,
either when its language is detected or when the user arrives from a
translated page by following a link.
"""

from __future__ import annotations

from pagelingo.config_loader import UserPreferences
from pagelingo.core.models import PageLanguageState
from pagelingo.i18n.languages import UNDETERMINED, fix_language_code


def _normalized(codes: list[str]) -> set[str]:
    return {fix_language_code(code) or code.lower() for code in codes}


def should_auto_translate(
    host: str | None,
    detected_language: str | None,
    target_language: str,
    preferences: UserPreferences,
) -> bool:
    """
    Check whether a page should be translated as soon as it is loaded.

    Sites in `always_translate_sites` are always translated. Otherwise the
    detected language must be known, differ from the target and be listed
    in `always_translate_langs`, and the site must not be excluded.
    """
    if host and host in preferences.always_translate_sites:
        return True

    language = fix_language_code(detected_language)
    if not language or language == UNDETERMINED:
        return False
    if host and host in preferences.never_translate_sites:
        return False
    if language == fix_language_code(target_language):
        return False
    return language in _normalized(preferences.always_translate_langs)


def should_translate_on_link_click(
    state: PageLanguageState,
    original_language: str | None,
    target_language: str,
    preferences: UserPreferences,
) -> bool:
    """
    Check whether a page opened from a translated page should follow suit.
    """
    if not preferences.auto_translate_on_link_click:
        return False
    if state != PageLanguageState.ORIGINAL:
        return False

    language = fix_language_code(original_language)
    if language and language == fix_language_code(target_language):
        return False
    return not (language and language in _normalized(preferences.never_translate_langs))
