"""
Markup helpers shared by the feed, OPML and HTML parsers.

Bodies arrive as text, so they are re-encoded as UTF-8 and parsed with an
explicit encoding; an XML declaration naming another encoding would otherwise
make lxml refuse a ``str`` input.
"""

from typing import Iterator, List, Optional

from lxml import etree, html

BODY_ENCODING = "utf-8"


def parse_xml(body: str) -> etree._Element:
    """
    Parse ``body`` as XML and return its root element.

    External entities and network access are disabled.

    Raises:
        etree.XMLSyntaxError: If the body is not well-formed XML
    """
    parser = etree.XMLParser(
        encoding=BODY_ENCODING,
        resolve_entities=False,
        no_network=True,
        huge_tree=False,
    )
    return etree.fromstring(body.encode(BODY_ENCODING), parser=parser)


def parse_html(body: str) -> html.HtmlElement:
    """
    Parse ``body`` as an HTML document and return the ``html`` element.

    Raises:
        etree.ParserError: If the body is empty
    """
    parser = html.HTMLParser(encoding=BODY_ENCODING, no_network=True)
    return html.document_fromstring(body.encode(BODY_ENCODING), parser=parser)


def is_element(node) -> bool:
    """True for real elements; comments and processing instructions are excluded."""
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


def tag_name(element: etree._Element) -> str:
    """Qualified tag name as written in the document (``prefix:local`` or ``local``)."""
    local_name = etree.QName(element).localname
    if element.prefix:
        return f"{element.prefix}:{local_name}"
    return local_name


def elements_by_tag_name(element: etree._Element, name: str) -> Iterator[etree._Element]:
    """Descendants of ``element`` with the given tag name, in document order."""
    for descendant in element.iterdescendants():
        if is_element(descendant) and tag_name(descendant) == name:
            yield descendant


def first_element_by_tag_name(
    element: etree._Element, name: str
) -> Optional[etree._Element]:
    return next(elements_by_tag_name(element, name), None)


def children_by_tag_name(element: etree._Element, name: str) -> List[etree._Element]:
    """Direct children of ``element`` with the given tag name."""
    return [
        child
        for child in element.iterchildren()
        if is_element(child) and tag_name(child) == name
    ]


def text_content(element: etree._Element) -> str:
    """All text inside ``element``, stripped."""
    return "".join(element.itertext()).strip()


def non_blank_attribute(element: etree._Element, *names: str) -> Optional[str]:
    """First attribute among ``names`` whose value is not blank."""
    for name in names:
        value = element.get(name)
        if value is not None and value.strip():
            return value.strip()
    return None
