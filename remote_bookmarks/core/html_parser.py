"""
HTML bookmark parser.

Every ``<a href>`` of a page becomes a bookmark. An XPath expression can
narrow the page down: it may point at a list of ``a`` elements, or at a single
element whose ``a`` descendants are used.
"""

import logging
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from lxml import etree

from .data_models import BookmarkLeaf, BookmarkTree, title_or_untitled
from .markup import is_element, parse_html, text_content

ANCHOR_TAG = "a"
# Schemes whose URLs need a host, and characters no host may contain
HOST_SCHEMES = ("http", "https", "ftp", "ws", "wss")
FORBIDDEN_HOST_CHARACTERS = frozenset(" <>^|\"")


def resolve_url(href: Optional[str], base_url: str) -> Optional[str]:
    """
    Resolve ``href`` against ``base_url``.

    Returns:
        Absolute URL, or None if ``href`` is blank, does not resolve to an
        absolute URL, or names a host no browser would accept
    """
    if href is None:
        return None
    # Browsers drop ASCII tabs and newlines anywhere in a URL
    href = href.strip().replace("\t", "").replace("\n", "").replace("\r", "")
    if not href:
        return None
    try:
        resolved = urljoin(base_url or "", href)
        parsed = urlparse(resolved)
        host = parsed.hostname
    except ValueError:
        return None
    if not parsed.scheme:
        return None
    if parsed.scheme in HOST_SCHEMES and not _is_valid_host(host):
        return None
    return resolved


def _is_valid_host(host: Optional[str]) -> bool:
    if not host:
        return False
    return not any(c.isspace() or c in FORBIDDEN_HOST_CHARACTERS for c in host)


def is_anchor(node) -> bool:
    return is_element(node) and node.tag.lower() == ANCHOR_TAG


class HtmlBookmarkParser:
    """Extracts bookmarks from the anchors of an HTML document."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def parse(
        self, body: str, xpath: Optional[str], document_url: str
    ) -> Optional[BookmarkTree]:
        """
        Parse an HTML document.

        Args:
            body: Raw fetched text
            xpath: Optional XPath expression selecting the anchors to use
            document_url: URL the document was fetched from, used to resolve
                relative links

        Returns:
            BookmarkTree with one bookmark per resolvable anchor, or None
        """
        try:
            root = parse_html(body)
        except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
            self.logger.warning(f"Text can't be parsed as HTML: {e}")
            return None

        if xpath is not None:
            self.logger.debug(f"Using XPath expression: {xpath}")
            anchors = self._anchors_at_xpath(root, xpath)
        else:
            anchors = self._anchors_in_body(root)
        if anchors is None:
            return None

        self.logger.debug(f"Found {len(anchors)} <a> elements")
        bookmarks = []
        for anchor in anchors:
            url = resolve_url(anchor.get("href"), document_url)
            if url is None:
                continue
            bookmarks.append(
                BookmarkLeaf(title=title_or_untitled(text_content(anchor)), url=url)
            )
        return BookmarkTree(entries=bookmarks)

    def _anchors_in_body(self, root: etree._Element) -> Optional[List[etree._Element]]:
        body = root.find(".//body")
        if body is None:
            self.logger.warning("No body found in the document")
            return None
        return list(body.iter(ANCHOR_TAG))

    def _anchors_at_xpath(
        self, root: etree._Element, xpath: str
    ) -> Optional[List[etree._Element]]:
        try:
            nodes = self._nodes_at_xpath(root, xpath)
        except (etree.XPathError, ValueError) as e:
            # lxml rejects NUL, control characters and lone surrogates with ValueError
            self.logger.warning(f"Error evaluating XPath expression {xpath!r}: {e}")
            return None
        if nodes is None:
            return None

        if not nodes:
            self.logger.warning(f"No nodes found at XPath '{xpath}'")
            return None

        if len(nodes) == 1:
            single_node = nodes[0]
            if is_anchor(single_node):
                return [single_node]
            if not is_element(single_node):
                self.logger.warning(f"Node at XPath is not an Element: {single_node!r}")
                return None
            return list(single_node.iter(ANCHOR_TAG))

        # Several nodes: only the anchors among them count
        return [node for node in nodes if is_anchor(node)]

    def _nodes_at_xpath(self, root: etree._Element, xpath: str) -> Optional[list]:
        """Evaluate ``xpath`` against the whole document and drain the node set."""
        result = root.getroottree().xpath(xpath)
        if not isinstance(result, list):
            self.logger.warning(
                f"XPath '{xpath}' evaluates to a {type(result).__name__}, not nodes"
            )
            return None
        return list(result)
