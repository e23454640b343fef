"""
Tests for page messages, auto-translate rules and language codes.
"""

import asyncio

import pytest

from pagelingo.config_loader import UserPreferences
from pagelingo.core.models import PageLanguageState
from pagelingo.engine.messages import MessageRouter, PageAction
from pagelingo.engine.policy import should_auto_translate, should_translate_on_link_click
from pagelingo.i18n.languages import fix_language_code, get_language_name


@pytest.fixture
def router(engine):
    return MessageRouter(engine)


# =============================================================================
# Router
# =============================================================================


class TestMessageRouter:
    def test_every_action_has_a_handler(self, router):
        assert set(router.actions) == {action.value for action in PageAction}

    @pytest.mark.asyncio
    async def test_translate_and_restore(self, router, engine, provider):
        assert await router.handle({"action": "translatePage", "targetLanguage": "de"}) is None
        assert engine.state == PageLanguageState.TRANSLATED
        assert provider.html_requests[0][1] == "de"

        await router.handle({"action": "restorePage"})
        assert engine.state == PageLanguageState.ORIGINAL

    @pytest.mark.asyncio
    async def test_translate_to_original_restores(self, router, engine):
        await router.handle({"action": "translatePage", "targetLanguage": "de"})
        await router.handle({"action": "translatePage", "targetLanguage": "original"})

        assert engine.state == PageLanguageState.ORIGINAL

    @pytest.mark.asyncio
    async def test_translate_without_language_uses_current_target(self, router, engine, provider):
        await router.handle({"action": "translatePage"})

        assert provider.html_requests[0][1] == "en"
        assert engine.target_language == "en"

    @pytest.mark.asyncio
    async def test_toggle(self, router, engine):
        await router.handle({"action": "toggle-translation"})
        assert engine.is_translated

        await router.handle({"action": "toggle-translation"})
        assert not engine.is_translated

    @pytest.mark.asyncio
    async def test_queries(self, router, engine):
        assert await router.handle({"action": "getCurrentPageLanguageState"}) == "original"
        assert await router.handle({"action": "getCurrentPageTranslatorService"}) == "google"
        assert await router.handle({"action": "getCurrentPageLanguage"}) == "und"

        await router.handle({"action": "translatePage", "targetLanguage": "ja"})

        assert await router.handle({"action": "getCurrentPageLanguageState"}) == "translated"
        assert await router.handle({"action": "getCurrentPageLanguage"}) == "ja"

    @pytest.mark.asyncio
    async def test_swap_service(self, router):
        await router.handle({"action": "swapTranslationService"})
        assert await router.handle({"action": "getCurrentPageTranslatorService"}) == "yandex"

    @pytest.mark.asyncio
    async def test_original_language_waits_for_detection(self, router, engine):
        query = asyncio.create_task(router.handle({"action": "getOriginalTabLanguage"}))
        await asyncio.sleep(0)
        assert not query.done()

        await engine.on_language_detected("pt-BR")
        assert await query == "pt"

    @pytest.mark.asyncio
    async def test_link_click(self, make_engine):
        engine = make_engine(UserPreferences(auto_translate_on_link_click=True))
        router = MessageRouter(engine)
        await engine.on_language_detected("de")

        await router.handle({"action": "autoTranslateBecauseClickedALink"})

        assert engine.is_translated

    @pytest.mark.asyncio
    async def test_link_click_disabled(self, router, engine):
        await engine.on_language_detected("de")

        await router.handle({"action": "autoTranslateBecauseClickedALink"})

        assert not engine.is_translated

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", [
        {"action": "dance"},
        {"action": ""},
        {"targetLanguage": "de"},
        "translatePage",
        None,
    ])
    async def test_unknown_and_malformed_messages(self, router, engine, message):
        assert await router.handle(message) is None
        assert engine.state == PageLanguageState.ORIGINAL


# =============================================================================
# Auto-translate rules
# =============================================================================


class TestShouldAutoTranslate:
    def test_always_translated_site(self):
        preferences = UserPreferences(always_translate_sites=["news.example"])
        assert should_auto_translate("news.example", None, "en", preferences)

    def test_always_translated_language(self):
        preferences = UserPreferences(always_translate_langs=["de", "fr"])

        assert should_auto_translate("a.example", "de-AT", "en", preferences)
        assert not should_auto_translate("a.example", "es", "en", preferences)

    def test_unknown_language(self):
        preferences = UserPreferences(always_translate_langs=["de"])

        assert not should_auto_translate("a.example", "und", "en", preferences)
        assert not should_auto_translate("a.example", None, "en", preferences)

    def test_never_translated_site_wins_over_language(self):
        preferences = UserPreferences(
            always_translate_langs=["de"],
            never_translate_sites=["a.example"],
        )
        assert not should_auto_translate("a.example", "de", "en", preferences)

    def test_target_language_is_never_translated(self):
        preferences = UserPreferences(always_translate_langs=["en"])
        assert not should_auto_translate("a.example", "en-GB", "en", preferences)


class TestShouldTranslateOnLinkClick:
    @pytest.fixture
    def preferences(self):
        return UserPreferences(auto_translate_on_link_click=True, never_translate_langs=["ja"])

    def test_foreign_page(self, preferences):
        assert should_translate_on_link_click(PageLanguageState.ORIGINAL, "de", "en", preferences)

    def test_undetermined_language_is_translated(self, preferences):
        assert should_translate_on_link_click(PageLanguageState.ORIGINAL, "und", "en", preferences)

    def test_same_language(self, preferences):
        assert not should_translate_on_link_click(PageLanguageState.ORIGINAL, "en", "en", preferences)

    def test_never_translated_language(self, preferences):
        assert not should_translate_on_link_click(PageLanguageState.ORIGINAL, "ja", "en", preferences)

    def test_already_translated(self, preferences):
        assert not should_translate_on_link_click(PageLanguageState.TRANSLATED, "de", "en", preferences)

    def test_disabled(self):
        assert not should_translate_on_link_click(
            PageLanguageState.ORIGINAL, "de", "en", UserPreferences()
        )


# =============================================================================
# Language codes
# =============================================================================


class TestLanguageCodes:
    @pytest.mark.parametrize("code, expected", [
        ("en-US", "en"),
        ("DE", "de"),
        ("pt_BR", "pt"),
        ("zh-HK", "zh-tw"),
        ("zh_TW", "zh-tw"),
        ("zh-CN", "zh-cn"),
        ("zh-Hans", "zh-cn"),
        ("zh", "zh"),
        ("iw", "he"),
        ("jw", "jv"),
        ("xx-unknown", None),
        ("", None),
        (None, None),
    ])
    def test_fix_language_code(self, code, expected):
        assert fix_language_code(code) == expected

    def test_language_names(self):
        assert get_language_name("de") == "German"
        assert get_language_name("zh-tw") == "Chinese (Traditional)"
        assert get_language_name("zh-cn") == "Chinese (Simplified, China)"
