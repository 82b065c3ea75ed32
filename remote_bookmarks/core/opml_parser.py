"""
OPML outline parser.

Outlines with a URL become bookmarks. Outlines without one become folders of
their own nested outlines; an outline with neither is dropped.
"""

import logging
from typing import List, Optional

from lxml import etree

from .data_models import (
    BookmarkFolder,
    BookmarkLeaf,
    BookmarkNode,
    BookmarkTree,
    title_or_untitled,
)
from .markup import (
    children_by_tag_name,
    first_element_by_tag_name,
    non_blank_attribute,
    parse_xml,
    tag_name,
)

TITLE_ATTRIBUTES = ("text", "title")
URL_ATTRIBUTES = ("url", "htmlUrl", "xmlUrl")


class OpmlParser:
    """Extracts a folder tree from an OPML document."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def parse(self, body: str) -> Optional[BookmarkTree]:
        """
        Parse an OPML document.

        Only the direct ``outline`` children of ``body`` are top-level
        entries; deeper outlines are reached by recursion.

        Args:
            body: Raw fetched text

        Returns:
            BookmarkTree, or None if the body is not OPML
        """
        try:
            root = parse_xml(body)
        except (etree.XMLSyntaxError, ValueError) as e:
            self.logger.warning(f"Text can't be parsed as OPML: {e}")
            return None

        if tag_name(root) != "opml":
            self.logger.warning("Text can't be parsed as OPML: root element is not 'opml'")
            return None

        body_element = first_element_by_tag_name(root, "body")
        if body_element is None:
            self.logger.warning("No body element found in the document")
            return None

        try:
            entries = self._parse_outlines(children_by_tag_name(body_element, "outline"))
        except RecursionError:
            self.logger.warning("Text can't be parsed as OPML: outlines nested too deeply")
            return None
        return BookmarkTree(entries=entries)

    def _parse_outlines(self, outlines: List[etree._Element]) -> List[BookmarkNode]:
        nodes = []
        for outline in outlines:
            node = self._parse_outline(outline)
            if node is not None:
                nodes.append(node)
        return nodes

    def _parse_outline(self, outline: etree._Element) -> Optional[BookmarkNode]:
        title = title_or_untitled(non_blank_attribute(outline, *TITLE_ATTRIBUTES))
        url = non_blank_attribute(outline, *URL_ATTRIBUTES)
        if url is not None:
            return BookmarkLeaf(title=title, url=url)

        children = children_by_tag_name(outline, "outline")
        if not children:
            self.logger.warning(
                f"Outline '{title}' has no url attribute and no outline children"
            )
            return None
        return BookmarkFolder(title=title, children=self._parse_outlines(children))
