"""
Bookmark extraction entry point.

``extract`` sniffs the format of a fetched body by trying each parser in
turn: JSON bookmarks document, RSS/Atom feed, OPML, then HTML. The first
parser that recognizes the body wins and its tree is sanitized before being
returned. ``None`` means no parser recognized the body.
"""

import logging
from typing import Optional

from .data_models import BookmarkTree
from .feed_parser import FeedParser
from .html_parser import HtmlBookmarkParser
from .json_document import JsonBookmarksParser
from .opml_parser import OpmlParser
from .sanitizer import MAX_CHILDREN, sanitize


class BookmarkExtractor:
    """Tries every supported document format, in order, on a fetched body."""

    def __init__(self, max_children: int = MAX_CHILDREN):
        """
        Initialize the extractor.

        Args:
            max_children: Maximum number of entries kept at each tree level
        """
        self.logger = logging.getLogger(__name__)
        self.max_children = max_children
        self.json_parser = JsonBookmarksParser()
        self.feed_parser = FeedParser()
        self.opml_parser = OpmlParser()
        self.html_parser = HtmlBookmarkParser()

    def extract(
        self, body: str, xpath: Optional[str], document_url: str
    ) -> Optional[BookmarkTree]:
        """
        Extract a bookmark tree from a body of unknown format.

        Args:
            body: Raw fetched text
            xpath: Optional XPath expression, only used for HTML bodies
            document_url: URL of the document, used to resolve relative links

        Returns:
            Sanitized BookmarkTree, or None if the format is not recognized
        """
        tree = self.json_parser.parse(body)
        if tree is None:
            self.logger.debug("Could not parse fetched text as JSON, trying RSS/Atom")
            tree = self.feed_parser.parse(body)
        if tree is None:
            self.logger.debug("Could not parse fetched text as RSS/Atom, trying OPML")
            tree = self.opml_parser.parse(body)
        if tree is None:
            self.logger.debug("Could not parse fetched text as OPML, trying HTML")
            tree = self.html_parser.parse(body, xpath, document_url)
        if tree is None:
            self.logger.debug("Could not parse fetched text as HTML, give up")
            return None

        return sanitize(tree, self.max_children)


def extract(
    body: str, xpath: Optional[str], document_url: str
) -> Optional[BookmarkTree]:
    """Extract bookmarks with default settings; see BookmarkExtractor.extract."""
    return BookmarkExtractor().extract(body, xpath, document_url)
