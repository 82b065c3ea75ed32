"""
Data models for Remote Bookmarks.

This module defines the bookmark tree produced by every extractor. A node is
either a ``BookmarkLeaf`` (a bookmark with a URL) or a ``BookmarkFolder`` (a
folder with children); there is no node that is both or neither.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

FORMAT_VERSION = 1
UNTITLED = "Untitled"


def title_or_untitled(title: Optional[str]) -> str:
    """Return the stripped title, or ``"Untitled"`` when it is missing or blank."""
    if title is None:
        return UNTITLED
    title = title.strip()
    return title or UNTITLED


@dataclass(frozen=True)
class BookmarkLeaf:
    """A single bookmark."""

    title: str
    url: str

    def __post_init__(self):
        if not self.url or not self.url.strip():
            raise ValueError("A bookmark needs a non-blank url")

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "url": self.url, "bookmarks": None}


@dataclass(frozen=True)
class BookmarkFolder:
    """A folder holding bookmarks and other folders."""

    title: str
    children: Tuple["BookmarkNode", ...] = ()

    def __post_init__(self):
        # Accept any iterable but always store a tuple
        object.__setattr__(self, "children", tuple(self.children))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "url": None,
            "bookmarks": [child.to_dict() for child in self.children],
        }


BookmarkNode = Union[BookmarkLeaf, BookmarkFolder]


@dataclass(frozen=True)
class BookmarkTree:
    """
    Result of an extraction: the top-level entries of a remote document.

    ``to_dict`` produces the JSON bookmarks document wire format, which is
    also one of the accepted input formats.
    """

    entries: Tuple[BookmarkNode, ...] = field(default_factory=tuple)
    format_version: int = FORMAT_VERSION

    def __post_init__(self):
        object.__setattr__(self, "entries", tuple(self.entries))

    def is_valid(self) -> bool:
        return self.format_version == FORMAT_VERSION

    def count_bookmarks(self) -> int:
        """Count leaves at every depth."""
        return _count_leaves(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.format_version,
            "bookmarks": [entry.to_dict() for entry in self.entries],
        }


def _count_leaves(nodes: Tuple[BookmarkNode, ...]) -> int:
    count = 0
    for node in nodes:
        if isinstance(node, BookmarkFolder):
            count += _count_leaves(node.children)
        else:
            count += 1
    return count
