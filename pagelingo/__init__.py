"""
pagelingo - in-place, incremental document translation.

Usage:
    from pagelingo import TranslationEngine, MemoryDocument, EchoTranslationProvider

    engine = TranslationEngine(document, EchoTranslationProvider(), visibility=document)
    await engine.translate_page("de")
"""

from pagelingo.dom.memory import MemoryDocument
from pagelingo.engine.messages import MessageRouter
from pagelingo.engine.orchestrator import TranslationEngine
from pagelingo.providers.base import EchoTranslationProvider, TranslationProvider

__version__ = "0.1.0"

__all__ = [
    "TranslationEngine",
    "MessageRouter",
    "MemoryDocument",
    "TranslationProvider",
    "EchoTranslationProvider",
]
