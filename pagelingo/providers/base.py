"""
Base class for translation providers.

A provider is the opaque batched translation backend. The engine only
relies on the shape of requests and responses; which vendor answers them
is decided by the service id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class TranslationProvider(ABC):
    """
    Batched translation backend.

    Example:
        class VendorProvider(TranslationProvider):
            async def translate_html(self, service_id, target_language, source, dont_sort_results=False):
                ...
    """

    @abstractmethod
    async def translate_html(
        self,
        service_id: str,
        target_language: str,
        source: list[list[str]],
        dont_sort_results: bool = False,
    ) -> list[list[str]]:
        """
        Translate rows of text fragments.

        Each row is one piece; each cell one text node. Responses may be
        shorter than the request, and with `dont_sort_results` a row may
        hold more cells than were sent.

        Raises:
            TranslationProviderError: If the request fails.
        """
        pass

    @abstractmethod
    async def translate_text(
        self,
        service_id: str,
        target_language: str,
        source: list[str],
    ) -> list[str]:
        """Translate a flat list of strings (attribute values)."""
        pass

    @abstractmethod
    async def translate_single_text(
        self,
        service_id: str,
        target_language: str,
        source: str,
    ) -> str:
        """Translate one string (page title, decode recovery)."""
        pass

    async def close(self) -> None:
        """Release any resources held by the provider."""
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class EchoTranslationProvider(TranslationProvider):
    """A provider that returns the original text (useful for testing)."""

    async def translate_html(
        self,
        service_id: str,
        target_language: str,
        source: list[list[str]],
        dont_sort_results: bool = False,
    ) -> list[list[str]]:
        return [list(row) for row in source]

    async def translate_text(self, service_id: str, target_language: str, source: list[str]) -> list[str]:
        return list(source)

    async def translate_single_text(self, service_id: str, target_language: str, source: str) -> str:
        return source
