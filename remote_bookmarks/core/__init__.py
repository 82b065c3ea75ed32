"""
Core bookmark extraction and synchronization modules.

This package contains the format parsers (JSON bookmarks document, RSS/Atom,
OPML and HTML), the extraction orchestrator and sanitizer, and the sync
collaborators around them (fetch, bookmark store, sync manager).
"""

from .data_models import (
    FORMAT_VERSION,
    BookmarkFolder,
    BookmarkLeaf,
    BookmarkNode,
    BookmarkTree,
)
from .delegate import ExtractionDelegate
from .extractor import BookmarkExtractor, extract
from .sanitizer import MAX_CHILDREN, sanitize

__all__ = [
    'FORMAT_VERSION',
    'MAX_CHILDREN',
    'BookmarkFolder',
    'BookmarkLeaf',
    'BookmarkNode',
    'BookmarkTree',
    'BookmarkExtractor',
    'ExtractionDelegate',
    'extract',
    'sanitize',
]
