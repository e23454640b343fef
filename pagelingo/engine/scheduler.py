"""
Incremental translation scheduler.

Two loops run while a page is translated:

- consolidation: every couple of seconds, drains the change feed and
  turns content added to the document since the last tick into new
  pieces;
- visibility: several times a second, sends the pieces and attributes
  that have scrolled into view.

Both ticks can also be driven directly (`consolidate()`,
`translate_visible()`), which is what tests and hosts with their own
timers do.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pagelingo.core.events import Event, Subscription
from pagelingo.core.models import AttributeEntry, PageLanguageState, Piece, TagCategory
from pagelingo.dom.tree import Node
from pagelingo.integrations.sentry import capture_exception

if TYPE_CHECKING:
    from pagelingo.engine.orchestrator import TranslationEngine

logger = logging.getLogger(__name__)


class IncrementalScheduler:
    """
    Drives translation of content that becomes visible or is added later.

    Pieces are flagged translated when they are dispatched, not when the
    results arrive; a failed or short response is never retried.
    """

    def __init__(
        self,
        engine: TranslationEngine,
        consolidation_interval: float = 2.0,
        visibility_interval: float = 0.6,
        viewport_buffer: float = 0.0,
    ):
        self.engine = engine
        self.consolidation_interval = consolidation_interval
        self.visibility_interval = visibility_interval
        self.viewport_buffer = viewport_buffer

        self.enabled = False
        self._added: list[Node] = []
        self._removed: list[Node] = []
        self._subscription: Subscription | None = None
        self._tasks: list[asyncio.Task] = []

    @property
    def pending_nodes(self) -> list[Node]:
        return list(self._added)

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def enable(self) -> None:
        """Start watching for new content and start both loops."""
        self.disable()
        self.enabled = True

        feed = self.engine.feed
        if feed is not None and self.engine.preferences.translate_dynamic_content:
            self._subscription = feed.subscribe(self._on_content_changed)

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, ticks must be driven manually")
            return

        if self._subscription is not None:
            self._tasks.append(asyncio.create_task(self._consolidation_loop()))
        self._tasks.append(asyncio.create_task(self._visibility_loop()))

    def disable(self) -> None:
        """Stop both loops and forget pending content."""
        self.enabled = False
        for task in self._tasks:
            task.cancel()
        self._tasks = []

        if self._subscription is not None and self.engine.feed is not None:
            self.engine.feed.unsubscribe(self._subscription)
        self._subscription = None
        self._added = []
        self._removed = []

    def on_visibility_change(self, visible: bool) -> None:
        """Resume when the document becomes visible again, pause otherwise."""
        if visible and self.engine.state == PageLanguageState.TRANSLATED:
            self.enable()
        else:
            self.disable()

    # =========================================================================
    # Consolidation
    # =========================================================================

    async def _on_content_changed(self, event: Event) -> None:
        classifier = self.engine.classifier
        tree = self.engine.tree

        for node in event.payload.get("added", []):
            if classifier.classify(tree.tag_name(node)) != TagCategory.BLOCK:
                continue
            if not any(node is pending for pending in self._added):
                self._added.append(node)

        self._removed.extend(event.payload.get("removed", []))

    def consolidate(self) -> list[Piece]:
        """
        Segment content added since the last tick.

        Only pieces that share no node with an existing piece are kept.

        Returns:
            The pieces appended to the engine
        """
        added, removed = self._added, self._removed
        self._added, self._removed = [], []
        removed_ids = {id(node) for node in removed}

        appended: list[Piece] = []
        for node in added:
            if id(node) in removed_ids:
                continue
            for piece in self.engine.segmenter.segment(node):
                if any(existing.covers(piece.nodes) for existing in self.engine.pieces):
                    continue
                self.engine.pieces.append(piece)
                appended.append(piece)

        if appended:
            logger.debug("Consolidated %d new pieces", len(appended))
        return appended

    async def _consolidation_loop(self) -> None:
        while True:
            await asyncio.sleep(self.consolidation_interval)
            try:
                if self.engine.feed is not None:
                    await self.engine.feed.flush()
                self.consolidate()
            except Exception as e:
                capture_exception(e, loop="consolidation")

    # =========================================================================
    # Visibility
    # =========================================================================

    async def translate_visible(self) -> tuple[list[Piece], list[AttributeEntry]]:
        """
        Dispatch untranslated pieces and attributes that are on screen.

        Without a visibility adapter everything counts as on screen.

        Returns:
            The pieces and attributes that were dispatched
        """
        engine = self.engine
        if engine.state != PageLanguageState.TRANSLATED:
            return [], []
        if engine.visibility is not None and not engine.visibility.is_document_visible():
            return [], []

        pieces = [p for p in engine.pieces if not p.is_translated and self._piece_in_view(p)]
        attributes = [a for a in engine.attributes if not a.is_translated and self._node_in_view(a.node)]

        for piece in pieces:
            piece.is_translated = True
        for attribute in attributes:
            attribute.is_translated = True

        if pieces or attributes:
            await engine.dispatch(pieces, attributes)
        return pieces, attributes

    async def _visibility_loop(self) -> None:
        while True:
            await asyncio.sleep(self.visibility_interval)
            try:
                await self.translate_visible()
            except Exception as e:
                capture_exception(e, loop="visibility")

    def _piece_in_view(self, piece: Piece) -> bool:
        if self.engine.visibility is None:
            return True
        return self._edge_in_view(piece.top_element, "bottom") or self._edge_in_view(piece.bottom_element, "top")

    def _node_in_view(self, node: Node) -> bool:
        if self.engine.visibility is None:
            return True
        return self._edge_in_view(node, "top") or self._edge_in_view(node, "bottom")

    def _edge_in_view(self, node: Node, edge: str) -> bool:
        if node is None:
            return False
        rect = self.engine.visibility.bounding_box(node)
        if rect is None:
            return False
        position = getattr(rect, edge)
        height = self.engine.visibility.viewport_height
        return -self.viewport_buffer < position <= height + self.viewport_buffer
