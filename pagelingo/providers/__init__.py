"""
Translation providers.

- base: Provider interface and the echo provider
- rpc: Request/response provider over a message transport
"""

from pagelingo.providers.base import EchoTranslationProvider, TranslationProvider
from pagelingo.providers.rpc import (
    QueueTransport,
    RpcAction,
    RpcRequest,
    RpcResponse,
    RpcServer,
    RpcTranslationProvider,
    RpcTransport,
)

__all__ = [
    "TranslationProvider",
    "EchoTranslationProvider",
    "QueueTransport",
    "RpcAction",
    "RpcRequest",
    "RpcResponse",
    "RpcServer",
    "RpcTranslationProvider",
    "RpcTransport",
]
