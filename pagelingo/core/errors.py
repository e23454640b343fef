"""
Error types for the translation engine.

None of these are fatal to a page: the engine recovers locally from
protocol violations and provider failures and always leaves the document
in a consistent original/translated state.
"""

from __future__ import annotations


class PagelingoError(Exception):
    """Base exception for all engine errors."""
    pass


class ConfigurationError(PagelingoError):
    """Raised when settings or user preferences are invalid."""
    pass


class DocumentTreeError(PagelingoError):
    """Raised when a document tree operation cannot be performed."""
    pass


class KeywordProtocolError(PagelingoError):
    """
    Raised when a protection marker cannot be resolved during decode.

    The provider reordered, merged or invented a marker. Callers abandon
    protected decoding and request an unprotected translation instead.
    """

    def __init__(self, message: str, translated: str = ""):
        super().__init__(message)
        self.translated = translated


class TranslationProviderError(PagelingoError):
    """Raised when the translation provider fails a request."""
    pass


class RpcTimeoutError(TranslationProviderError):
    """Raised when an RPC response does not arrive in time."""

    def __init__(self, request_id: str, timeout: float):
        super().__init__(f"Request {request_id} timed out after {timeout:.1f}s")
        self.request_id = request_id
        self.timeout = timeout


class RpcTransportError(TranslationProviderError):
    """Raised when a request cannot be handed to the transport."""
    pass
