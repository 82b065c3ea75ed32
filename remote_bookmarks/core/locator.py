"""
XPath locator fragment of remote bookmark URLs.

A remote URL can select part of an HTML page by ending with
``#__xpath=<percent-encoded XPath expression>``, e.g.::

    https://en.wikipedia.org/wiki/List_of_James_Bond_films#__xpath=//table//th/i//a

The fragment is not part of the document URL and is stripped before fetching.
"""

from typing import Optional
from urllib.parse import unquote

XPATH_FRAGMENT_MARKER = "#__xpath="


def extract_locator(url: str) -> Optional[str]:
    """Return the decoded XPath expression of ``url``, or None if there is none."""
    _, marker, expression = url.rpartition(XPATH_FRAGMENT_MARKER)
    if not marker or not expression.strip():
        return None
    return unquote(expression)


def strip_locator(url: str) -> str:
    """Return ``url`` without its XPath fragment."""
    document_url, marker, _ = url.rpartition(XPATH_FRAGMENT_MARKER)
    return document_url if marker else url
