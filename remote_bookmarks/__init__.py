"""
Remote Bookmarks.

Mirrors remote documents (JSON bookmark documents, RSS/Atom feeds, OPML
outlines and HTML pages) into folders of a bookmark store.
"""

__version__ = "1.0.0"
