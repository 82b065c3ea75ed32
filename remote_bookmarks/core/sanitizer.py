"""
Bounds the size of extracted bookmark trees.

Remote documents are untrusted: every level of the tree is cut down to its
first ``MAX_CHILDREN`` entries before it reaches the bookmark store.
"""

from typing import Iterable, Tuple

from .data_models import (
    FORMAT_VERSION,
    BookmarkFolder,
    BookmarkNode,
    BookmarkTree,
)

MAX_CHILDREN = 100


def sanitize(tree: BookmarkTree, max_children: int = MAX_CHILDREN) -> BookmarkTree:
    """
    Return a capped copy of ``tree`` with the canonical format version.

    Args:
        tree: Any successfully extracted tree
        max_children: Maximum number of entries kept at each level

    Returns:
        New BookmarkTree; applying it again yields an equal tree
    """
    return BookmarkTree(
        entries=_sanitize_nodes(tree.entries, max_children),
        format_version=FORMAT_VERSION,
    )


def _sanitize_nodes(
    nodes: Iterable[BookmarkNode], max_children: int
) -> Tuple[BookmarkNode, ...]:
    kept = tuple(nodes)[:max_children]
    return tuple(_sanitize_node(node, max_children) for node in kept)


def _sanitize_node(node: BookmarkNode, max_children: int) -> BookmarkNode:
    if isinstance(node, BookmarkFolder):
        return BookmarkFolder(
            title=node.title,
            children=_sanitize_nodes(node.children, max_children),
        )
    return node
