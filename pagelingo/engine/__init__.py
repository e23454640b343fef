"""
Translation engine - orchestration, scheduling and page control.
"""

from pagelingo.engine.messages import MessageRouter, PageAction, PageMessage
from pagelingo.engine.orchestrator import TranslationEngine
from pagelingo.engine.policy import should_auto_translate, should_translate_on_link_click
from pagelingo.engine.scheduler import IncrementalScheduler

__all__ = [
    "TranslationEngine",
    "IncrementalScheduler",
    "MessageRouter",
    "PageAction",
    "PageMessage",
    "should_auto_translate",
    "should_translate_on_link_click",
]
