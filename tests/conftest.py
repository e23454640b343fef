"""
Shared fixtures: an in-memory page, scripted providers and engine factories.
"""

from __future__ import annotations

import asyncio
from typing import Callable

import pytest

from pagelingo.config import Settings
from pagelingo.config_loader import UserPreferences
from pagelingo.core.errors import TranslationProviderError
from pagelingo.core.events import ChangeFeed
from pagelingo.core.models import NodeKind
from pagelingo.dom.memory import MemoryDocument, MemoryNode, element, text
from pagelingo.engine.orchestrator import TranslationEngine
from pagelingo.providers.base import EchoTranslationProvider


# =============================================================================
# Providers
# =============================================================================


class RecordingProvider(EchoTranslationProvider):
    """
    Echo provider that records every request.

    `transform` is applied to every string; `html_results` replaces the
    whole translateHTML response; `fail_html`/`fail_single` raise.
    """

    def __init__(self, transform: Callable[[str], str] | None = None):
        self.transform = transform or (lambda s: s)
        self.single_transform: Callable[[str], str] | None = None
        self.html_results: Callable[[list[list[str]]], list[list[str]]] | None = None
        self.fail_html = False
        self.fail_single = False

        self.html_requests: list[tuple[str, str, list[list[str]], bool]] = []
        self.text_requests: list[tuple[str, str, list[str]]] = []
        self.single_requests: list[tuple[str, str, str]] = []

    async def translate_html(self, service_id, target_language, source, dont_sort_results=False):
        self.html_requests.append((service_id, target_language, source, dont_sort_results))
        if self.fail_html:
            raise TranslationProviderError("html backend down")
        if self.html_results is not None:
            return self.html_results(source)
        return [[self.transform(cell) for cell in row] for row in source]

    async def translate_text(self, service_id, target_language, source):
        self.text_requests.append((service_id, target_language, source))
        return [self.transform(s) for s in source]

    async def translate_single_text(self, service_id, target_language, source):
        self.single_requests.append((service_id, target_language, source))
        if self.fail_single:
            raise TranslationProviderError("single backend down")
        transform = self.single_transform or self.transform
        return transform(source)


class GatedProvider(RecordingProvider):
    """Holds translateHTML responses until `gate` is set."""

    def __init__(self, transform: Callable[[str], str] | None = None):
        super().__init__(transform)
        self.started = asyncio.Event()
        self.gate = asyncio.Event()

    async def translate_html(self, service_id, target_language, source, dont_sort_results=False):
        self.started.set()
        await self.gate.wait()
        return await super().translate_html(service_id, target_language, source, dont_sort_results)


# =============================================================================
# Helpers
# =============================================================================


def upper(value: str) -> str:
    return value.upper()


def serialize(node: MemoryNode):
    """Structural snapshot of a subtree (text, tags, attributes)."""
    if node.kind == NodeKind.TEXT:
        return node.text
    return (
        node.tag,
        tuple(sorted(node.attributes.items())),
        tuple(serialize(child) for child in node.children),
    )


def find_all(node: MemoryNode, tag: str) -> list[MemoryNode]:
    found = []
    for child in node.children:
        if child.tag == tag:
            found.append(child)
        found.extend(find_all(child, tag))
    return found


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Settings with loops slow enough to never tick during a test."""
    return Settings(
        _env_file=None,
        consolidation_interval=60.0,
        visibility_interval=60.0,
    )


@pytest.fixture
def feed():
    return ChangeFeed(source="page")


@pytest.fixture
def page(feed):
    """A small page: a paragraph with inline markup, a block and an input."""
    body = element(
        "BODY",
        element("P", text("Hello "), element("B", text("world")), text("!")),
        element("DIV", text("Contact Acme Corp today")),
        element("INPUT", placeholder="Search", type="text"),
    )
    return MemoryDocument(body, title="My page", feed=feed)


@pytest.fixture
def provider():
    return RecordingProvider(transform=upper)


@pytest.fixture
def make_engine(page, feed, provider, settings):
    """Factory for engines over the shared page; disposed after the test."""
    engines: list[TranslationEngine] = []

    def factory(
        preferences: UserPreferences | None = None,
        document: MemoryDocument | None = None,
        translation_provider=None,
        host_name: str | None = "example.com",
        with_visibility: bool = True,
    ) -> TranslationEngine:
        document = document or page
        engine = TranslationEngine(
            document,
            translation_provider or provider,
            visibility=document if with_visibility else None,
            feed=document.feed,
            preferences=preferences or UserPreferences(),
            settings=settings,
            host_name=host_name,
        )
        engines.append(engine)
        return engine

    yield factory

    for engine in engines:
        engine.dispose()


@pytest.fixture
def engine(make_engine):
    return make_engine()
