"""
Message-passing translation provider.

The document context does not talk to the translation vendor itself; it
sends requests to a backend over a message channel and waits for replies.
Requests carry a correlation id so replies can arrive in any order, and
each request has its own timeout.

Usage:
    client_side, server_side = QueueTransport.pair()
    server = RpcServer(EchoTranslationProvider(), server_side)
    server.start()

    provider = RpcTranslationProvider(client_side, timeout=10.0)
    rows = await provider.translate_html("google", "de", [["Hello"]])
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from pagelingo.config import get_settings
from pagelingo.core.errors import RpcTimeoutError, RpcTransportError, TranslationProviderError
from pagelingo.core.utils import generate_id
from pagelingo.providers.base import TranslationProvider

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================


class RpcAction(str, Enum):
    """Requests understood by the backend."""

    TRANSLATE_HTML = "translateHTML"
    TRANSLATE_TEXT = "translateText"
    TRANSLATE_SINGLE_TEXT = "translateSingleText"


class RpcRequest(BaseModel):
    """A translation request sent to the backend."""
    id: str = Field(default_factory=lambda: generate_id("req"))
    action: RpcAction
    service_id: str
    target_language: str
    source: list[list[str]] | list[str] | str
    dont_sort_results: bool = False


class RpcResponse(BaseModel):
    """Reply to an `RpcRequest`, matched by `id`."""
    id: str
    result: list[list[str]] | list[str] | str | None = None
    error: str | None = None


# =============================================================================
# Transport
# =============================================================================


class RpcTransport(ABC):
    """A bidirectional channel of JSON-compatible messages."""

    @abstractmethod
    async def send(self, message: dict[str, Any]) -> None:
        """
        Send a message.

        Raises:
            RpcTransportError: If the message cannot be handed over.
        """
        pass

    @abstractmethod
    async def receive(self) -> dict[str, Any]:
        """Wait for the next incoming message."""
        pass

    async def close(self) -> None:
        pass


class QueueTransport(RpcTransport):
    """In-process transport over a pair of asyncio queues."""

    def __init__(self, outbound: asyncio.Queue, inbound: asyncio.Queue):
        self._outbound = outbound
        self._inbound = inbound
        self._closed = False

    @classmethod
    def pair(cls) -> tuple[QueueTransport, QueueTransport]:
        """Create two connected ends (client side, server side)."""
        a_to_b: asyncio.Queue = asyncio.Queue()
        b_to_a: asyncio.Queue = asyncio.Queue()
        return cls(a_to_b, b_to_a), cls(b_to_a, a_to_b)

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: dict[str, Any]) -> None:
        if self._closed:
            raise RpcTransportError("Transport is closed")
        await self._outbound.put(message)

    async def receive(self) -> dict[str, Any]:
        return await self._inbound.get()

    async def close(self) -> None:
        self._closed = True


# =============================================================================
# Client
# =============================================================================


class RpcTranslationProvider(TranslationProvider):
    """
    Provider that forwards requests over an `RpcTransport`.

    A background reader resolves pending requests by correlation id.
    Replies for unknown ids (for example after a timeout) are dropped.
    """

    def __init__(self, transport: RpcTransport, timeout: float | None = None):
        self.transport = transport
        self.timeout = get_settings().rpc_timeout if timeout is None else timeout
        self._pending: dict[str, asyncio.Future] = {}
        self._reader: asyncio.Task | None = None

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def translate_html(
        self,
        service_id: str,
        target_language: str,
        source: list[list[str]],
        dont_sort_results: bool = False,
    ) -> list[list[str]]:
        result = await self._call(
            RpcAction.TRANSLATE_HTML, service_id, target_language, source, dont_sort_results
        )
        return [list(row) for row in result or []]

    async def translate_text(self, service_id: str, target_language: str, source: list[str]) -> list[str]:
        result = await self._call(RpcAction.TRANSLATE_TEXT, service_id, target_language, source)
        return list(result or [])

    async def translate_single_text(self, service_id: str, target_language: str, source: str) -> str:
        result = await self._call(RpcAction.TRANSLATE_SINGLE_TEXT, service_id, target_language, source)
        return result or ""

    async def close(self) -> None:
        """Stop the reader and fail every pending request."""
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None

        for request_id, future in list(self._pending.items()):
            if not future.done():
                future.set_exception(RpcTransportError(f"Provider closed before {request_id} completed"))
        self._pending.clear()
        await self.transport.close()

    # =========================================================================
    # Internals
    # =========================================================================

    async def _call(
        self,
        action: RpcAction,
        service_id: str,
        target_language: str,
        source: Any,
        dont_sort_results: bool = False,
    ) -> Any:
        self._ensure_reader()

        request = RpcRequest(
            action=action,
            service_id=service_id,
            target_language=target_language,
            source=source,
            dont_sort_results=dont_sort_results,
        )
        future = asyncio.get_running_loop().create_future()
        self._pending[request.id] = future

        try:
            await self._send(request.model_dump(mode="json"))
            logger.debug("Sent %s request %s", action.value, request.id)
            response: RpcResponse = await asyncio.wait_for(future, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise RpcTimeoutError(request.id, self.timeout) from None
        finally:
            self._pending.pop(request.id, None)

        if response.error:
            raise TranslationProviderError(f"{action.value} failed: {response.error}")
        return response.result

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(RpcTransportError),
        reraise=True,
    )
    async def _send(self, message: dict[str, Any]) -> None:
        """Send with retry on transport errors."""
        await self.transport.send(message)

    def _ensure_reader(self) -> None:
        if self._reader is None or self._reader.done():
            self._reader = asyncio.create_task(self._read_loop())

    async def _read_loop(self) -> None:
        while True:
            message = await self.transport.receive()
            try:
                response = RpcResponse.model_validate(message)
            except ValidationError:
                logger.warning("Dropping malformed RPC message: %r", message)
                continue

            future = self._pending.get(response.id)
            if future is None or future.done():
                logger.debug("No pending request for response %s", response.id)
                continue
            future.set_result(response)


# =============================================================================
# Server
# =============================================================================


class RpcServer:
    """
    Serves RPC requests from a backend provider.

    Each request is handled in its own task, so replies may be sent in a
    different order than the requests arrived.
    """

    def __init__(self, backend: TranslationProvider, transport: RpcTransport):
        self.backend = backend
        self.transport = transport
        self._task: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.serve())

    async def stop(self) -> None:
        tasks = list(self._inflight)
        if self._task is not None:
            tasks.append(self._task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        self._inflight.clear()

    async def serve(self) -> None:
        """Receive requests until cancelled."""
        while True:
            message = await self.transport.receive()
            task = asyncio.create_task(self._respond(message))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _respond(self, message: dict[str, Any]) -> None:
        response = await self.handle(message)
        try:
            await self.transport.send(response.model_dump(mode="json"))
        except RpcTransportError:
            logger.warning("Could not send response %s", response.id)

    async def handle(self, message: dict[str, Any]) -> RpcResponse:
        """Run one request against the backend."""
        try:
            request = RpcRequest.model_validate(message)
        except ValidationError as e:
            request_id = message.get("id", "") if isinstance(message, dict) else ""
            return RpcResponse(id=str(request_id), error=f"Invalid request: {e.error_count()} errors")

        try:
            if request.action == RpcAction.TRANSLATE_HTML:
                result = await self.backend.translate_html(
                    request.service_id,
                    request.target_language,
                    request.source,
                    request.dont_sort_results,
                )
            elif request.action == RpcAction.TRANSLATE_TEXT:
                result = await self.backend.translate_text(
                    request.service_id, request.target_language, request.source
                )
            else:
                result = await self.backend.translate_single_text(
                    request.service_id, request.target_language, request.source
                )
        except Exception as e:
            logger.exception("Backend failed on %s", request.id)
            return RpcResponse(id=request.id, error=str(e) or e.__class__.__name__)

        return RpcResponse(id=request.id, result=result)
