"""
Document layer - tree interface, segmentation and wrapper styles.
"""

from pagelingo.dom.memory import MemoryDocument, MemoryNode, attach_shadow, element, text
from pagelingo.dom.segmenter import Segmenter
from pagelingo.dom.styles import WrapperStyle, build_wrapper_style
from pagelingo.dom.tags import TagClassifier
from pagelingo.dom.tree import DocumentTree, VisibilityAdapter

__all__ = [
    "DocumentTree",
    "VisibilityAdapter",
    "MemoryDocument",
    "MemoryNode",
    "attach_shadow",
    "element",
    "text",
    "Segmenter",
    "TagClassifier",
    "WrapperStyle",
    "build_wrapper_style",
]
