"""
Bookmark store interface and a JSON file implementation.

The sync manager only needs four operations from the store it populates:
find a folder by title, empty it, and create folders and bookmarks in it.
"""

import json
import logging
import threading
from abc import abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from ..utils.error_handler import BookmarkStoreError
from .sync_state import SyncState

ROOT_ID = "0"


@runtime_checkable
class BookmarkStore(Protocol):
    """
    Protocol for stores that synchronized folders are written to.

    Node ids are opaque strings chosen by the store.
    """

    @abstractmethod
    def find_folder(self, title: str) -> Optional[str]:
        """Return the id of the first folder named ``title``, or None."""
        ...

    @abstractmethod
    def empty_folder(self, folder_id: str) -> None:
        """Remove every child of the folder."""
        ...

    @abstractmethod
    def create_folder(self, parent_id: str, title: str) -> str:
        """Create a folder at the end of ``parent_id`` and return its id."""
        ...

    @abstractmethod
    def create_bookmark(self, parent_id: str, title: str, url: str) -> str:
        """Create a bookmark at the end of ``parent_id`` and return its id."""
        ...


class JsonFileBookmarkStore:
    """
    Bookmark store kept in a JSON file.

    The file holds a single root folder (id ``"0"``) plus the last sync state.
    Changes stay in memory until ``save`` is called.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = logging.getLogger(__name__)
        self.lock = threading.RLock()
        self.sync_state = SyncState.initial_state()
        self._root: Dict[str, Any] = {"id": ROOT_ID, "title": "", "children": []}
        self._nodes: Dict[str, Dict[str, Any]] = {ROOT_ID: self._root}
        self._next_id = 1
        if self.path.exists():
            self._load()

    def _load(self) -> None:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._root = data["root"]
            self._nodes = {}
            self._index(self._root)
            numeric_ids = [int(node_id) for node_id in self._nodes if node_id.isdigit()]
            self.sync_state = SyncState.from_dict(data.get("sync_state") or {})
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise BookmarkStoreError(f"Could not load bookmark store {self.path}: {e}") from e

        self._next_id = max(numeric_ids, default=0) + 1
        self.logger.debug(f"Loaded {len(self._nodes)} nodes from {self.path}")

    def _index(self, node: Dict[str, Any]) -> None:
        self._nodes[node["id"]] = node
        for child in node.get("children") or []:
            self._index(child)

    def _new_id(self) -> str:
        node_id = str(self._next_id)
        self._next_id += 1
        return node_id

    def _folder(self, folder_id: str) -> Dict[str, Any]:
        node = self._nodes.get(folder_id)
        if node is None or "children" not in node:
            raise BookmarkStoreError(f"No folder with id {folder_id}")
        return node

    def find_folder(self, title: str) -> Optional[str]:
        with self.lock:
            for node in self._walk(self._root):
                if "children" in node and node["id"] != ROOT_ID and node["title"] == title:
                    return node["id"]
        return None

    def _walk(self, node: Dict[str, Any]):
        yield node
        for child in node.get("children") or []:
            yield from self._walk(child)

    def empty_folder(self, folder_id: str) -> None:
        with self.lock:
            folder = self._folder(folder_id)
            for child in folder["children"]:
                for node in self._walk(child):
                    self._nodes.pop(node["id"], None)
            folder["children"] = []

    def create_folder(self, parent_id: str, title: str) -> str:
        with self.lock:
            parent = self._folder(parent_id)
            node = {"id": self._new_id(), "title": title, "children": []}
            parent["children"].append(node)
            self._nodes[node["id"]] = node
            return node["id"]

    def create_bookmark(self, parent_id: str, title: str, url: str) -> str:
        with self.lock:
            parent = self._folder(parent_id)
            node = {"id": self._new_id(), "title": title, "url": url}
            parent["children"].append(node)
            self._nodes[node["id"]] = node
            return node["id"]

    def children(self, folder_id: str) -> List[Dict[str, Any]]:
        """Return copies of the direct children of a folder."""
        with self.lock:
            return json.loads(json.dumps(self._folder(folder_id)["children"]))

    def save(self) -> None:
        """Write the store to its file, replacing the previous content atomically."""
        with self.lock:
            data = {"root": self._root, "sync_state": self.sync_state.to_dict()}
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_file = self.path.with_suffix(".tmp")
            try:
                with open(temp_file, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                temp_file.replace(self.path)
            except OSError as e:
                raise BookmarkStoreError(f"Could not save bookmark store {self.path}: {e}") from e
        self.logger.debug(f"Saved bookmark store to {self.path}")
