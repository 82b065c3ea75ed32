"""
JSON bookmarks document parser.

The JSON format is the project's own self-describing format::

    {"version": 1, "bookmarks": [{"title": "...", "url": "...", "bookmarks": null}]}

Items with a ``url`` are bookmarks; items with a ``bookmarks`` list are
folders. ``formatVersion`` and ``entries`` are accepted as aliases.
"""

import logging
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .data_models import (
    FORMAT_VERSION,
    BookmarkFolder,
    BookmarkLeaf,
    BookmarkNode,
    BookmarkTree,
    title_or_untitled,
)


class BookmarkItemModel(BaseModel):
    """Wire shape of a single bookmark or folder."""

    model_config = ConfigDict(strict=True)

    title: Optional[str] = None
    url: Optional[str] = None
    bookmarks: Optional[List["BookmarkItemModel"]] = Field(
        default=None, validation_alias=AliasChoices("bookmarks", "entries")
    )


class BookmarksDocumentModel(BaseModel):
    """Wire shape of a whole JSON bookmarks document."""

    model_config = ConfigDict(strict=True)

    version: int = Field(validation_alias=AliasChoices("version", "formatVersion"))
    bookmarks: List[BookmarkItemModel] = Field(
        validation_alias=AliasChoices("bookmarks", "entries")
    )


BookmarkItemModel.model_rebuild()


class JsonBookmarksParser:
    """Parses bodies written in the JSON bookmarks document format."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def parse(self, body: str) -> Optional[BookmarkTree]:
        """
        Parse a JSON bookmarks document.

        Args:
            body: Raw fetched text

        Returns:
            BookmarkTree, or None if the body is not a valid JSON bookmarks
            document of the supported version
        """
        try:
            document = BookmarksDocumentModel.model_validate_json(body)
        except (ValidationError, ValueError, RecursionError) as e:
            self.logger.warning(
                f"Text can't be parsed as JSON bookmarks document: {_first_line(e)}"
            )
            return None

        if document.version != FORMAT_VERSION:
            self.logger.warning(
                f"Invalid bookmarks document: unsupported version {document.version}"
            )
            return None

        try:
            entries = self._to_nodes(document.bookmarks)
        except RecursionError:
            self.logger.warning("Bookmarks document is nested too deeply")
            return None
        return BookmarkTree(entries=entries)

    def _to_nodes(self, items: List[BookmarkItemModel]) -> List[BookmarkNode]:
        nodes = []
        for item in items:
            node = self._to_node(item)
            if node is not None:
                nodes.append(node)
        return nodes

    def _to_node(self, item: BookmarkItemModel) -> Optional[BookmarkNode]:
        title = title_or_untitled(item.title)
        # A url always wins over nested bookmarks
        if item.url is not None and item.url.strip():
            return BookmarkLeaf(title=title, url=item.url.strip())
        if item.bookmarks is not None:
            return BookmarkFolder(title=title, children=self._to_nodes(item.bookmarks))
        self.logger.warning(f"Item '{title}' has neither a url nor bookmarks, skipping")
        return None


def _first_line(error: Exception) -> str:
    return str(error).splitlines()[0] if str(error) else type(error).__name__
