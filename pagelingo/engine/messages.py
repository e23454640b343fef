"""
Page message routing.

The host (popup, background worker, keyboard shortcuts) controls a page by
sending small JSON messages such as `{"action": "translatePage",
"targetLanguage": "de"}`. `MessageRouter` validates them and calls the
matching engine operation.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pagelingo.engine.orchestrator import TranslationEngine

logger = logging.getLogger(__name__)

# targetLanguage value that means "show the original page"
ORIGINAL_LANGUAGE = "original"


class PageAction(str, Enum):
    """Actions a page understands."""

    TRANSLATE_PAGE = "translatePage"
    RESTORE_PAGE = "restorePage"
    TOGGLE_TRANSLATION = "toggle-translation"
    SWAP_TRANSLATION_SERVICE = "swapTranslationService"
    GET_ORIGINAL_TAB_LANGUAGE = "getOriginalTabLanguage"
    GET_CURRENT_PAGE_LANGUAGE = "getCurrentPageLanguage"
    GET_CURRENT_PAGE_LANGUAGE_STATE = "getCurrentPageLanguageState"
    GET_CURRENT_PAGE_TRANSLATOR_SERVICE = "getCurrentPageTranslatorService"
    AUTO_TRANSLATE_BECAUSE_CLICKED_A_LINK = "autoTranslateBecauseClickedALink"


class PageMessage(BaseModel):
    """A message sent to a page."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str = Field(min_length=1)
    target_language: str | None = Field(None, alias="targetLanguage")


Handler = Callable[[PageMessage], Awaitable[Any]]


class MessageRouter:
    """
    Dispatches page messages to a `TranslationEngine`.

    Query actions return their answer; commands return None. Unknown
    actions and malformed messages are logged and ignored.
    """

    def __init__(self, engine: TranslationEngine):
        self.engine = engine
        self._handlers: dict[str, Handler] = {
            PageAction.TRANSLATE_PAGE.value: self._translate_page,
            PageAction.RESTORE_PAGE.value: self._restore_page,
            PageAction.TOGGLE_TRANSLATION.value: self._toggle,
            PageAction.SWAP_TRANSLATION_SERVICE.value: self._swap_service,
            PageAction.GET_ORIGINAL_TAB_LANGUAGE.value: self._original_language,
            PageAction.GET_CURRENT_PAGE_LANGUAGE.value: self._current_language,
            PageAction.GET_CURRENT_PAGE_LANGUAGE_STATE.value: self._language_state,
            PageAction.GET_CURRENT_PAGE_TRANSLATOR_SERVICE.value: self._translator_service,
            PageAction.AUTO_TRANSLATE_BECAUSE_CLICKED_A_LINK.value: self._link_clicked,
        }

    @property
    def actions(self) -> list[str]:
        return list(self._handlers)

    async def handle(self, message: dict[str, Any]) -> Any:
        """
        Handle one message.

        Args:
            message: The raw message, e.g. {"action": "restorePage"}

        Returns:
            The answer for query actions, None otherwise
        """
        try:
            parsed = PageMessage.model_validate(message)
        except ValidationError as e:
            logger.warning("Ignoring malformed message %r: %s", message, e)
            return None

        handler = self._handlers.get(parsed.action)
        if handler is None:
            logger.debug("Ignoring unknown action %s", parsed.action)
            return None
        return await handler(parsed)

    # =========================================================================
    # Commands
    # =========================================================================

    async def _translate_page(self, message: PageMessage) -> None:
        if message.target_language == ORIGINAL_LANGUAGE:
            self.engine.restore_page()
        else:
            await self.engine.translate_page(message.target_language)

    async def _restore_page(self, message: PageMessage) -> None:
        self.engine.restore_page()

    async def _toggle(self, message: PageMessage) -> None:
        await self.engine.toggle()

    async def _swap_service(self, message: PageMessage) -> None:
        await self.engine.swap_provider()

    async def _link_clicked(self, message: PageMessage) -> None:
        await self.engine.on_link_navigation()

    # =========================================================================
    # Queries
    # =========================================================================

    async def _original_language(self, message: PageMessage) -> str:
        return await self.engine.wait_for_original_language()

    async def _current_language(self, message: PageMessage) -> str:
        return self.engine.current_page_language

    async def _language_state(self, message: PageMessage) -> str:
        return self.engine.state.value

    async def _translator_service(self, message: PageMessage) -> str:
        return self.engine.service_id
