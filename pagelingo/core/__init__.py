"""
Core module - data models and infrastructure.

This module contains:
- models: Pieces, attribute entries, restore entries and enums
- events: Event bus and the document change feed
- errors: Exception hierarchy
- utils: Shared utility functions
"""

from pagelingo.core.models import (
    AttributeEntry,
    AttributeName,
    DualStyle,
    NodeKind,
    PageLanguageState,
    Piece,
    Rect,
    RestoreEntry,
    TagCategory,
)

from pagelingo.core.events import (
    CONTENT_CHANGED,
    ChangeFeed,
    Event,
    EventBus,
    Subscription,
)

from pagelingo.core.errors import (
    ConfigurationError,
    DocumentTreeError,
    KeywordProtocolError,
    PagelingoError,
    RpcTimeoutError,
    RpcTransportError,
    TranslationProviderError,
)

from pagelingo.core.utils import (
    generate_id,
    utc_now,
)

__all__ = [
    # Models
    "AttributeEntry",
    "AttributeName",
    "DualStyle",
    "NodeKind",
    "PageLanguageState",
    "Piece",
    "Rect",
    "RestoreEntry",
    "TagCategory",
    # Events
    "CONTENT_CHANGED",
    "ChangeFeed",
    "Event",
    "EventBus",
    "Subscription",
    # Errors
    "ConfigurationError",
    "DocumentTreeError",
    "KeywordProtocolError",
    "PagelingoError",
    "RpcTimeoutError",
    "RpcTransportError",
    "TranslationProviderError",
    # Utils
    "generate_id",
    "utc_now",
]
