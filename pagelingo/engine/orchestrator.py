"""
Translation orchestrator.

`TranslationEngine` owns the translation state of one document: the pieces
and attributes found by the segmenter, the snapshot needed to restore the
original text, and the epoch counter that invalidates in-flight requests.

Usage:
    engine = TranslationEngine(tree, provider, visibility=tree, feed=feed)
    await engine.translate_page("de")
    ...
    engine.restore_page()

Translation is incremental: `translate_page` only sends what is visible
and the scheduler picks up the rest as it scrolls into view or is added
to the document.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from pagelingo.config import Settings, get_settings
from pagelingo.config_loader import UserPreferences
from pagelingo.core.errors import KeywordProtocolError, TranslationProviderError
from pagelingo.core.events import ChangeFeed
from pagelingo.core.models import AttributeEntry, PageLanguageState, Piece, RestoreEntry
from pagelingo.core.utils import split_outer_whitespace
from pagelingo.dom.segmenter import Segmenter
from pagelingo.dom.styles import WrapperStyle, build_wrapper_style
from pagelingo.dom.tags import TagClassifier
from pagelingo.dom.tree import DocumentTree, VisibilityAdapter
from pagelingo.engine.policy import should_auto_translate, should_translate_on_link_click
from pagelingo.engine.scheduler import IncrementalScheduler
from pagelingo.i18n.languages import UNDETERMINED, fix_language_code, get_language_name
from pagelingo.integrations.sentry import capture_message, set_tag
from pagelingo.providers.base import TranslationProvider
from pagelingo.text.codec import KeywordCodec

logger = logging.getLogger(__name__)

StateObserver = Callable[[PageLanguageState], Any]


class TranslationEngine:
    """
    Translates a document in place and restores it on demand.

    All state is per instance; a host with several documents (frames,
    tabs) creates one engine for each.
    """

    def __init__(
        self,
        tree: DocumentTree,
        provider: TranslationProvider,
        visibility: VisibilityAdapter | None = None,
        feed: ChangeFeed | None = None,
        preferences: UserPreferences | None = None,
        settings: Settings | None = None,
        host_name: str | None = None,
    ):
        self.tree = tree
        self.provider = provider
        self.visibility = visibility
        self.feed = feed
        self.preferences = preferences or UserPreferences()
        self.settings = settings or get_settings()
        self.host_name = host_name

        self.classifier = TagClassifier(translate_pre=self.preferences.translate_pre)
        self.segmenter = Segmenter(
            tree,
            self.classifier,
            size_limit=self.settings.piece_size_limit,
            translate_button_values=self.settings.translate_button_values,
        )
        self.codec = KeywordCodec()
        self.scheduler = IncrementalScheduler(
            self,
            consolidation_interval=self.settings.consolidation_interval,
            visibility_interval=self.settings.visibility_interval,
            viewport_buffer=self.settings.viewport_buffer,
        )

        # Page state
        self.state = PageLanguageState.ORIGINAL
        self.epoch = 0
        self.target_language = self.preferences.target_language
        self.service_id = self._initial_service()
        self.original_language = UNDETERMINED
        self.current_page_language = UNDETERMINED

        # Rebuilt on every pass, dropped on restore
        self.pieces: list[Piece] = []
        self.attributes: list[AttributeEntry] = []
        self._restore_entries: list[RestoreEntry] = []
        self._original_title: str | None = None

        self._observers: list[StateObserver] = []
        self._language_known = asyncio.Event()

    def _initial_service(self) -> str:
        services = self.settings.translator_services
        requested = self.preferences.page_translator_service
        if requested in services or not services:
            return requested
        return self.settings.default_service

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_translated(self) -> bool:
        return self.state == PageLanguageState.TRANSLATED

    def on_state_change(self, callback: StateObserver) -> None:
        """Register a callback invoked with the new state on every transition."""
        self._observers.append(callback)

    def _set_state(self, state: PageLanguageState) -> None:
        self.state = state
        logger.info("Page language state: %s", state.value)
        for callback in list(self._observers):
            try:
                callback(state)
            except Exception:
                logger.exception("State observer failed")

    def _is_current(self, epoch: int) -> bool:
        return self.is_translated and epoch == self.epoch

    # =========================================================================
    # Operations
    # =========================================================================

    async def translate_page(self, target_language: str | None = None) -> None:
        """
        Translate the document into `target_language` (or the current one).

        A translated page is restored first. Only the first visible batch is
        awaited; everything else is left to the scheduler.
        """
        self.epoch += 1
        if self.is_translated:
            self.restore_page()

        self.codec.compression.reset()
        self.classifier.set_translate_pre(self.preferences.translate_pre)
        if target_language:
            self.target_language = target_language

        root = self.tree.root
        self.pieces = self.segmenter.segment(root)
        self.attributes = self.segmenter.collect_attributes(root)
        logger.debug(
            "Found %d pieces and %d attributes to translate into %s",
            len(self.pieces),
            len(self.attributes),
            get_language_name(self.target_language),
        )

        self._set_state(PageLanguageState.TRANSLATED)
        self.current_page_language = self.target_language
        set_tag("translator_service", self.service_id)

        epoch = self.epoch
        self.scheduler.enable()

        jobs = [self.scheduler.translate_visible()]
        if self.preferences.translate_title:
            jobs.append(self._translate_title(epoch))
        await asyncio.gather(*jobs)

    def restore_page(self) -> None:
        """Put the original text and attributes back."""
        self.epoch += 1
        self.scheduler.disable()
        self._set_state(PageLanguageState.ORIGINAL)
        self.current_page_language = self.original_language

        if self._original_title is not None:
            self.tree.set_title(self._original_title)
        self._original_title = None

        for entry in self._restore_entries:
            self.tree.replace_node(entry.node, self.tree.create_text_node(entry.original_text))
        self._restore_entries = []

        for attribute in self.attributes:
            if attribute.is_translated:
                self.tree.set_attribute(attribute.node, attribute.attr_name.value, attribute.original)

        self.attributes = []
        self.pieces = []
        self.codec.compression.reset()
        if self.feed is not None:
            self.feed.take_records()

    async def swap_provider(self) -> str:
        """Switch to the next configured translation service."""
        services = self.settings.translator_services
        if services:
            index = services.index(self.service_id) if self.service_id in services else -1
            self.service_id = services[(index + 1) % len(services)]
        logger.info("Translator service is now %s", self.service_id)

        if self.is_translated:
            await self.translate_page()
        return self.service_id

    async def toggle(self) -> PageLanguageState:
        if self.is_translated:
            self.restore_page()
        else:
            await self.translate_page()
        return self.state

    def dispose(self) -> None:
        """Stop background work without touching the document."""
        self.scheduler.disable()
        self._observers.clear()

    # =========================================================================
    # Page language
    # =========================================================================

    async def on_language_detected(self, language: str | None) -> bool:
        """
        Record the page's original language and auto-translate if wanted.

        Returns True when a translation was started.
        """
        code = fix_language_code(language) if language and language != UNDETERMINED else None
        self.original_language = code or UNDETERMINED
        if not self.is_translated:
            self.current_page_language = self.original_language
        self._language_known.set()

        if self.is_translated:
            return False
        if should_auto_translate(self.host_name, code, self.target_language, self.preferences):
            logger.info("Auto-translating %s page", self.original_language)
            await self.translate_page()
            return True
        return False

    async def wait_for_original_language(self) -> str:
        """Wait until the page language has been detected."""
        await self._language_known.wait()
        return self.original_language

    async def on_link_navigation(self) -> bool:
        """Translate a page that was opened from a translated page."""
        if not self.preferences.auto_translate_on_link_click:
            return False
        language = await self.wait_for_original_language()
        if should_translate_on_link_click(self.state, language, self.target_language, self.preferences):
            await self.translate_page()
            return True
        return False

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def dispatch(self, pieces: list[Piece], attributes: list[AttributeEntry]) -> None:
        """Send one batch of pieces and attributes and apply the results."""
        epoch = self.epoch
        jobs = []
        if pieces:
            jobs.append(self._translate_pieces(pieces, epoch))
        if attributes:
            jobs.append(self._translate_attributes(attributes, epoch))
        await asyncio.gather(*jobs)

    async def _translate_pieces(self, pieces: list[Piece], epoch: int) -> None:
        dictionary = self.preferences.dictionary
        source = [
            [self.codec.encode(self.tree.text_content(node), dictionary) for node in piece.nodes]
            for piece in pieces
        ]
        service, target = self.service_id, self.target_language

        logger.debug("Dispatching %d pieces to %s (epoch %d)", len(pieces), service, epoch)
        try:
            results = await self.provider.translate_html(
                service, target, source, self.preferences.dont_sort_results
            )
        except TranslationProviderError as e:
            logger.warning("Translation of %d pieces failed: %s", len(pieces), e)
            return

        if not self._is_current(epoch):
            logger.debug("Dropping results of stale epoch %d", epoch)
            return

        style = build_wrapper_style(
            self.preferences.dual_style,
            self.preferences.custom_dual_style,
            self.preferences.show_dual_language,
            self.preferences.site_style(self.host_name),
        )
        for piece, row in zip(pieces, results):
            for index, translated in self._row_cells(piece, row):
                if not self._is_current(epoch):
                    return
                await self._apply(piece, index, translated, style, epoch)

        if self.feed is not None:
            self.feed.take_records()

    def _row_cells(self, piece: Piece, row: list[str]) -> list[tuple[int, str]]:
        """Pair node indices with their translations; short rows stop early."""
        count = len(piece.nodes)
        if self.preferences.dont_sort_results and row and len(row) > count:
            # Surplus strings are joined onto the last node
            cells = list(enumerate(row[: count - 1]))
            cells.append((count - 1, " ".join(row[count - 1:])))
        else:
            cells = list(enumerate(row[:count]))
        return [(index, text) for index, text in cells if text]

    async def _apply(self, piece: Piece, index: int, translated: str, style: WrapperStyle, epoch: int) -> None:
        node = piece.nodes[index]
        original = self.tree.text_content(node)

        wrapper = self.tree.create_wrapper(original, style.style, style.class_names)
        self.tree.replace_node(node, wrapper)
        piece.nodes[index] = wrapper
        self._restore_entries.append(RestoreEntry(node=wrapper, original_text=original))

        decoded = await self._decode(translated, original, epoch)
        if decoded is None or not self._is_current(epoch):
            return

        lead, _, trail = split_outer_whitespace(original)
        self.tree.set_text_content(wrapper, lead + decoded.strip() + trail)

    async def _decode(self, translated: str, original: str, epoch: int) -> str | None:
        try:
            return self.codec.decode(translated, self.preferences.dictionary)
        except KeywordProtocolError as e:
            capture_message(f"Protection markers lost, retranslating without them: {e}", level="warning")

        try:
            result = await self.provider.translate_single_text(self.service_id, self.target_language, original)
        except TranslationProviderError as e:
            logger.warning("Unprotected retranslation failed: %s", e)
            return None

        if not self._is_current(epoch):
            return None
        return result or None

    async def _translate_attributes(self, attributes: list[AttributeEntry], epoch: int) -> None:
        try:
            results = await self.provider.translate_text(
                self.service_id, self.target_language, [entry.original for entry in attributes]
            )
        except TranslationProviderError as e:
            logger.warning("Translation of %d attributes failed: %s", len(attributes), e)
            return

        if not self._is_current(epoch):
            logger.debug("Dropping attribute results of stale epoch %d", epoch)
            return

        for entry, value in zip(attributes, results):
            if value:
                self.tree.set_attribute(entry.node, entry.attr_name.value, value)

    async def _translate_title(self, epoch: int) -> None:
        if not self._is_current(epoch):
            return
        title_element = self.tree.title_element()
        if title_element is not None and self.tree.is_marked_no_translate(title_element):
            return

        title = self.tree.get_title()
        if not title.strip():
            return
        self._original_title = title

        try:
            result = await self.provider.translate_single_text(self.service_id, self.target_language, title)
        except TranslationProviderError as e:
            logger.warning("Title translation failed: %s", e)
            return

        if result and self._is_current(epoch):
            self.tree.set_title(result)
