"""
Pytest configuration and shared fixtures for remote bookmarks tests.

This module provides sample remote documents in every supported format and
helpers shared across the test modules.
"""

import json
from typing import Any, Dict, List

import pytest

from remote_bookmarks.core.bookmark_store import ROOT_ID, JsonFileBookmarkStore
from remote_bookmarks.core.data_models import BookmarkFolder, BookmarkLeaf, BookmarkTree

# ============================================================================
# Sample Documents
# ============================================================================

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example channel</title>
    <link>http://x/</link>
    <item><title>A</title><link>http://x/1</link></item>
    <item><title>B</title></item>
  </channel>
</rss>"""

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example feed</title>
  <link href="http://y/"/>
  <entry><title>C</title><link href="http://y/2"/></entry>
</feed>"""

OPML_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<opml version="2.0">
  <head><title>Subscriptions</title></head>
  <body>
    <outline text="Folder">
      <outline text="Leaf" url="http://z/3"/>
    </outline>
  </body>
</opml>"""

HTML_DOCUMENT = """<!DOCTYPE html>
<html>
  <head><title>Links</title></head>
  <body>
    <nav><a href="/home">Home</a></nav>
    <div id="links">
      <a href="/p">P</a>
      <a href="/q">Q</a>
    </div>
  </body>
</html>"""


@pytest.fixture
def rss_feed() -> str:
    return RSS_FEED


@pytest.fixture
def atom_feed() -> str:
    return ATOM_FEED


@pytest.fixture
def opml_document() -> str:
    return OPML_DOCUMENT


@pytest.fixture
def html_document() -> str:
    return HTML_DOCUMENT


def make_json_document(
    bookmarks: List[Dict[str, Any]], version: int = 1
) -> str:
    """Serialize a JSON bookmarks document."""
    return json.dumps({"version": version, "bookmarks": bookmarks})


def flat_bookmarks(count: int) -> List[Dict[str, Any]]:
    return [
        {"title": f"Bookmark {i}", "url": f"https://example.com/{i}", "bookmarks": None}
        for i in range(count)
    ]


@pytest.fixture
def json_document() -> str:
    return make_json_document(
        [
            {"title": "Python", "url": "https://www.python.org/", "bookmarks": None},
            {
                "title": "Docs",
                "url": None,
                "bookmarks": [
                    {"title": "lxml", "url": "https://lxml.de/", "bookmarks": None},
                ],
            },
        ]
    )


@pytest.fixture
def nested_tree() -> BookmarkTree:
    return BookmarkTree(
        entries=(
            BookmarkLeaf(title="Python", url="https://www.python.org/"),
            BookmarkFolder(
                title="Docs",
                children=(BookmarkLeaf(title="lxml", url="https://lxml.de/"),),
            ),
        )
    )


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def store(tmp_path) -> JsonFileBookmarkStore:
    """Empty JSON store with a "News" and a "Links" folder."""
    bookmark_store = JsonFileBookmarkStore(tmp_path / "bookmarks.json")
    bookmark_store.create_folder(ROOT_ID, "News")
    bookmark_store.create_folder(ROOT_ID, "Links")
    return bookmark_store
