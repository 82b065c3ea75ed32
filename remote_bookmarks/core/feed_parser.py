"""
RSS and Atom feed parser.

Every feed entry with a link becomes a bookmark; feeds never produce folders.
"""

import logging
from typing import List, Optional

from lxml import etree

from .data_models import BookmarkLeaf, BookmarkTree, title_or_untitled
from .markup import (
    first_element_by_tag_name,
    elements_by_tag_name,
    non_blank_attribute,
    parse_xml,
    tag_name,
    text_content,
)

FEED_ROOT_TAGS = ("rss", "feed")


class FeedParser:
    """Extracts bookmarks from RSS (``item``) and Atom (``entry``) feeds."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def parse(self, body: str) -> Optional[BookmarkTree]:
        """
        Parse an RSS or Atom feed.

        Args:
            body: Raw fetched text

        Returns:
            BookmarkTree with one bookmark per linked entry, or None if the
            body is not a feed
        """
        try:
            root = parse_xml(body)
        except (etree.XMLSyntaxError, ValueError) as e:
            self.logger.warning(f"Text can't be parsed as RSS nor Atom: {e}")
            return None

        if tag_name(root) not in FEED_ROOT_TAGS:
            self.logger.warning(
                "Text can't be parsed as RSS nor Atom: root element is not 'rss' nor 'feed'"
            )
            return None

        # `item` is for RSS / `entry` is for Atom
        entries = list(elements_by_tag_name(root, "item"))
        if not entries:
            entries = list(elements_by_tag_name(root, "entry"))

        bookmarks: List[BookmarkLeaf] = []
        for entry in entries:
            bookmark = self._parse_entry(entry)
            if bookmark is not None:
                bookmarks.append(bookmark)

        self.logger.debug(f"Found {len(bookmarks)} linked entries in {len(entries)}")
        return BookmarkTree(entries=bookmarks)

    def _parse_entry(self, entry: etree._Element) -> Optional[BookmarkLeaf]:
        link = self._entry_link(entry)
        if link is None:
            return None

        title_element = first_element_by_tag_name(entry, "title")
        title = text_content(title_element) if title_element is not None else None
        return BookmarkLeaf(title=title_or_untitled(title), url=link)

    def _entry_link(self, entry: etree._Element) -> Optional[str]:
        """RSS puts the link in the element text, Atom in its href attribute."""
        link_element = first_element_by_tag_name(entry, "link")
        if link_element is None:
            return None
        return text_content(link_element) or non_blank_attribute(link_element, "href")
