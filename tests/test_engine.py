"""
Tests for the translation orchestrator.
"""

import asyncio

import pytest

from conftest import GatedProvider, RecordingProvider, find_all, serialize, upper
from pagelingo.config_loader import SiteRule, UserPreferences
from pagelingo.core.events import ChangeFeed
from pagelingo.core.models import PageLanguageState, Rect
from pagelingo.dom.memory import MemoryDocument, element, text

TRADEMARK = chr(0x2122)


def wrapper_texts(document: MemoryDocument) -> list[str]:
    return [document.text_content(w) for w in find_all(document.body, "FONT")]


# =============================================================================
# Translate / restore
# =============================================================================


class TestTranslatePage:
    @pytest.mark.asyncio
    async def test_translate_and_restore_round_trip(self, engine, page):
        before = serialize(page.body)

        await engine.translate_page("de")

        assert engine.state == PageLanguageState.TRANSLATED
        assert engine.current_page_language == "de"
        assert wrapper_texts(page) == ["HELLO ", "WORLD", "!", "CONTACT ACME CORP TODAY"]
        assert page.get_title() == "MY PAGE"
        assert page.body.children[2].attributes["placeholder"] == "SEARCH"

        engine.restore_page()

        assert engine.state == PageLanguageState.ORIGINAL
        assert serialize(page.body) == before
        assert page.get_title() == "My page"
        assert engine.pieces == []
        assert engine.attributes == []
        assert len(engine.codec.compression) == 0

    @pytest.mark.asyncio
    async def test_request_shape(self, engine, provider):
        await engine.translate_page("de")

        service, target, source, dont_sort = provider.html_requests[0]
        assert (service, target, dont_sort) == ("google", "de", False)
        assert source == [["Hello ", "world", "!"], ["Contact Acme Corp today"]]
        assert provider.text_requests == [("google", "de", ["Search"])]

    @pytest.mark.asyncio
    async def test_dictionary_terms_are_protected(self, make_engine, page):
        provider = RecordingProvider()
        engine = make_engine(
            UserPreferences(dictionary={"acme corp": "ACME Corp" + TRADEMARK}),
            translation_provider=provider,
        )

        await engine.translate_page("de")

        assert provider.html_requests[0][2][1] == ["Contact @%1#$ today"]
        assert wrapper_texts(page)[-1] == "Contact ACME Corp" + TRADEMARK + " today"

    @pytest.mark.asyncio
    async def test_wrappers_carry_style(self, make_engine, page):
        engine = make_engine(UserPreferences(site_rules={"example.com": SiteRule(style="highlight")}))

        await engine.translate_page("de")

        wrapper = find_all(page.body, "FONT")[0]
        assert "background-color: #EAD0B3" in wrapper.attributes["style"]
        assert "notranslate" in wrapper.classes

    @pytest.mark.asyncio
    async def test_retranslate_restores_first(self, engine, page, provider):
        await engine.translate_page("de")
        await engine.translate_page("fr")

        wrappers = find_all(page.body, "FONT")
        assert len(wrappers) == 4
        assert all(w.parent.tag != "FONT" for w in wrappers)
        assert provider.html_requests[-1][2][0] == ["Hello ", "world", "!"]
        assert provider.html_requests[-1][1] == "fr"

    @pytest.mark.asyncio
    async def test_title_not_translated_when_disabled(self, make_engine, page, provider):
        engine = make_engine(UserPreferences(translate_title=False))

        await engine.translate_page("de")

        assert page.get_title() == "My page"
        assert provider.single_requests == []

    @pytest.mark.asyncio
    async def test_title_marked_notranslate(self, engine, page):
        page.title_node.attributes["class"] = "notranslate"

        await engine.translate_page("de")

        assert page.get_title() == "My page"

    @pytest.mark.asyncio
    async def test_state_observers(self, engine):
        states = []
        engine.on_state_change(states.append)

        await engine.toggle()
        await engine.toggle()

        assert states == [PageLanguageState.TRANSLATED, PageLanguageState.ORIGINAL]


# =============================================================================
# Epochs
# =============================================================================


class TestEpochs:
    @pytest.mark.asyncio
    async def test_restore_cancels_in_flight_batch(self, make_engine, page):
        provider = GatedProvider(transform=upper)
        engine = make_engine(translation_provider=provider)
        before = serialize(page.body)

        task = asyncio.create_task(engine.translate_page("de"))
        await provider.started.wait()
        engine.restore_page()
        provider.gate.set()
        await task

        assert serialize(page.body) == before
        assert find_all(page.body, "FONT") == []
        assert page.get_title() == "My page"

    @pytest.mark.asyncio
    async def test_stale_results_are_dropped(self, make_engine, page):
        provider = GatedProvider(transform=upper)
        engine = make_engine(translation_provider=provider)

        first = asyncio.create_task(engine.translate_page("de"))
        await provider.started.wait()
        second = asyncio.create_task(engine.translate_page("fr"))
        provider.gate.set()
        await asyncio.gather(first, second)

        wrappers = find_all(page.body, "FONT")
        assert len(wrappers) == 4
        assert all(w.parent.tag != "FONT" for w in wrappers)
        assert engine.target_language == "fr"


# =============================================================================
# Provider responses
# =============================================================================


class TestResponses:
    @pytest.mark.asyncio
    async def test_short_response_keeps_piece_flagged(self, engine, page, provider):
        provider.html_results = lambda source: [[cell.upper() for cell in source[0]]]

        await engine.translate_page("de")

        assert wrapper_texts(page) == ["HELLO ", "WORLD", "!"]
        assert all(piece.is_translated for piece in engine.pieces)

        await engine.scheduler.translate_visible()
        assert len(provider.html_requests) == 1

    @pytest.mark.asyncio
    async def test_empty_cells_are_skipped(self, engine, page, provider):
        provider.html_results = lambda source: [["", "WORLD", ""], [""]]

        await engine.translate_page("de")

        assert wrapper_texts(page) == ["WORLD"]

    @pytest.mark.asyncio
    async def test_surplus_cells_join_last_node(self, make_engine, page, provider):
        engine = make_engine(UserPreferences(dont_sort_results=True))
        provider.html_results = lambda source: [["A", "B", "C", "D"], ["X"]]

        await engine.translate_page("de")

        assert provider.html_requests[0][3] is True
        assert wrapper_texts(page) == ["A ", "B", "C D", "X"]

    @pytest.mark.asyncio
    async def test_lost_markers_fall_back_to_unprotected_request(self, make_engine, page, provider):
        engine = make_engine(UserPreferences(dictionary={"acme corp": ""}))
        provider.html_results = lambda source: [
            [cell.replace("@%", "@%9") for cell in row] for row in source
        ]

        await engine.translate_page("de")

        assert ("google", "de", "Contact Acme Corp today") in provider.single_requests
        assert wrapper_texts(page)[-1] == "CONTACT ACME CORP TODAY"
        assert wrapper_texts(page)[0] == "Hello "

    @pytest.mark.asyncio
    async def test_failed_fallback_keeps_original_text(self, make_engine, page, provider):
        engine = make_engine(UserPreferences(dictionary={"acme corp": ""}))
        provider.html_results = lambda source: [["x", "y", "z"], ["@%1 broken"]]
        provider.fail_single = True

        await engine.translate_page("de")

        assert wrapper_texts(page)[-1] == "Contact Acme Corp today"

    @pytest.mark.asyncio
    async def test_provider_error_leaves_document_alone(self, engine, page, provider):
        provider.fail_html = True

        await engine.translate_page("de")

        assert find_all(page.body, "FONT") == []
        assert engine.state == PageLanguageState.TRANSLATED
        assert all(piece.is_translated for piece in engine.pieces)
        assert page.body.children[2].attributes["placeholder"] == "SEARCH"

    @pytest.mark.asyncio
    async def test_engine_mutations_are_not_reported(self, engine, feed):
        await engine.translate_page("de")
        assert not feed.has_pending


# =============================================================================
# Visibility
# =============================================================================


class TestVisibility:
    @pytest.fixture
    def long_page(self):
        body = element(
            "BODY",
            element("P", text("Near")),
            element("DIV", text("Far"), rect=Rect(top=2000, bottom=2100)),
            element("IMG", alt="Footer logo", rect=Rect(top=2200, bottom=2300)),
        )
        return MemoryDocument(body, feed=ChangeFeed(), viewport_height=800)

    @pytest.mark.asyncio
    async def test_only_visible_pieces_are_sent(self, make_engine, long_page, provider):
        engine = make_engine(document=long_page)

        await engine.translate_page("de")

        assert wrapper_texts(long_page) == ["NEAR"]
        assert provider.text_requests == []

        long_page.set_viewport_height(2500)
        pieces, attributes = await engine.scheduler.translate_visible()

        assert len(pieces) == 1
        assert len(attributes) == 1
        assert wrapper_texts(long_page) == ["NEAR", "FAR"]
        assert long_page.body.children[2].attributes["alt"] == "FOOTER LOGO"

    @pytest.mark.asyncio
    async def test_without_visibility_everything_is_sent(self, make_engine, long_page):
        engine = make_engine(document=long_page, with_visibility=False)

        await engine.translate_page("de")

        assert wrapper_texts(long_page) == ["NEAR", "FAR"]

    @pytest.mark.asyncio
    async def test_hidden_document_waits(self, make_engine, long_page, provider):
        long_page.visible = False
        engine = make_engine(document=long_page)

        await engine.translate_page("de")
        assert provider.html_requests == []

        long_page.visible = True
        await engine.scheduler.translate_visible()
        assert wrapper_texts(long_page) == ["NEAR"]


# =============================================================================
# Services and languages
# =============================================================================


class TestServices:
    @pytest.mark.asyncio
    async def test_swap_provider_retranslates(self, engine, page, provider):
        await engine.translate_page("de")

        assert await engine.swap_provider() == "yandex"
        assert provider.html_requests[-1][0] == "yandex"
        assert len(find_all(page.body, "FONT")) == 4

        assert await engine.swap_provider() == "google"

    @pytest.mark.asyncio
    async def test_swap_provider_on_original_page(self, engine, provider):
        assert await engine.swap_provider() == "yandex"
        assert provider.html_requests == []
        assert engine.state == PageLanguageState.ORIGINAL

    @pytest.mark.asyncio
    async def test_auto_translate_on_detection(self, make_engine):
        engine = make_engine(UserPreferences(target_language="en", always_translate_langs=["fr"]))

        assert await engine.on_language_detected("fr-FR") is True
        assert engine.original_language == "fr"
        assert engine.state == PageLanguageState.TRANSLATED
        assert engine.current_page_language == "en"

        engine.restore_page()
        assert engine.current_page_language == "fr"

    @pytest.mark.asyncio
    async def test_never_translate_site(self, make_engine):
        engine = make_engine(UserPreferences(
            always_translate_langs=["fr"],
            never_translate_sites=["example.com"],
        ))

        assert await engine.on_language_detected("fr") is False
        assert engine.state == PageLanguageState.ORIGINAL

    @pytest.mark.asyncio
    async def test_unknown_language(self, engine):
        assert await engine.on_language_detected("und") is False
        assert await engine.wait_for_original_language() == "und"

    @pytest.mark.asyncio
    async def test_link_navigation(self, make_engine):
        engine = make_engine(UserPreferences(auto_translate_on_link_click=True, target_language="en"))
        await engine.on_language_detected("de")

        assert await engine.on_link_navigation() is True
        assert engine.state == PageLanguageState.TRANSLATED

    @pytest.mark.asyncio
    async def test_dispose_stops_scheduler(self, engine):
        await engine.translate_page("de")
        assert engine.scheduler.running

        engine.dispose()
        assert not engine.scheduler.running
        assert not engine.scheduler.enabled
