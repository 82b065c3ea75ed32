"""
Folder synchronization.

For each configured sync item the remote document is fetched, turned into a
bookmark tree and written into the store folder of the same name, replacing
the folder's previous content. A failing item is recorded in the sync state
and does not stop the others.
"""

import asyncio
import logging
from typing import Callable, Iterable, Optional, Sequence

from ..utils.error_handler import (
    ExtractionError,
    FetchError,
    FolderNotFoundError,
    RemoteBookmarksError,
    error_message_chain,
)
from .bookmark_store import BookmarkStore
from .data_models import BookmarkFolder, BookmarkNode, BookmarkTree
from .delegate import ExtractionDelegate
from .extractor import BookmarkExtractor
from .fetch import fetch_text
from .locator import extract_locator, strip_locator
from .sync_state import SyncState

UNRECOGNIZED_MESSAGE = (
    "Fetched object doesn't seem to be either valid `bookmarks` JSON format "
    "document, RSS/Atom feed, OPML, or HTML"
)


class SyncManager:
    """Mirrors remote bookmark documents into folders of a bookmark store."""

    def __init__(
        self,
        store: BookmarkStore,
        sync_items: Sequence,
        extractor: Optional[BookmarkExtractor] = None,
        fetcher: Callable[[str], str] = fetch_text,
        delegate: Optional[ExtractionDelegate] = None,
        state: Optional[SyncState] = None,
        on_state_change: Optional[Callable[[SyncState], None]] = None,
    ):
        """
        Initialize the sync manager.

        Args:
            store: Store holding the folders to populate
            sync_items: Objects with ``folder_name`` and ``remote_bookmarks_url``
            extractor: Extractor used by the synchronous sync
            fetcher: Downloads the text of a URL
            delegate: Extraction delegate used by the asynchronous sync
            state: Sync state to start from
            on_state_change: Called with every new sync state
        """
        self.logger = logging.getLogger(__name__)
        self.store = store
        self.sync_items = list(sync_items)
        self.extractor = extractor or BookmarkExtractor()
        self.fetcher = fetcher
        self.delegate = delegate
        self._owns_delegate = False
        self.sync_state = state or SyncState.initial_state()
        self.on_state_change = on_state_change

    def _save_sync_state(self, transform: Callable[[SyncState], SyncState]) -> None:
        self.sync_state = transform(self.sync_state)
        if self.on_state_change:
            self.on_state_change(self.sync_state)

    def sync_folders(self) -> SyncState:
        """
        Synchronize every configured folder.

        Returns:
            The sync state at the end of the pass
        """
        self.logger.info("Start syncing...")
        self._save_sync_state(lambda s: s.as_start_syncing())
        for item in self.sync_items:
            folder_name = item.folder_name
            self._save_sync_state(lambda s: s.as_syncing(folder_name))
            try:
                self.sync_folder(folder_name, item.remote_bookmarks_url)
            except RemoteBookmarksError as e:
                self._record_error(folder_name, e)
            else:
                self._record_success(folder_name)
        self._save_sync_state(lambda s: s.as_finish_syncing())
        self.logger.info("Sync finished")
        return self.sync_state

    async def async_sync_folders(self) -> SyncState:
        """
        Like ``sync_folders``, extracting through the extraction delegate.

        A delegate created by the manager itself is shut down when the pass
        ends; an injected delegate is left to its owner.
        """
        self.logger.info("Start syncing...")
        self._save_sync_state(lambda s: s.as_start_syncing())
        try:
            for item in self.sync_items:
                folder_name = item.folder_name
                self._save_sync_state(lambda s: s.as_syncing(folder_name))
                try:
                    await self.async_sync_folder(folder_name, item.remote_bookmarks_url)
                except RemoteBookmarksError as e:
                    self._record_error(folder_name, e)
                else:
                    self._record_success(folder_name)
        finally:
            self.close()
        self._save_sync_state(lambda s: s.as_finish_syncing())
        self.logger.info("Sync finished")
        return self.sync_state

    def close(self) -> None:
        """Shut down the extraction delegate if this manager created it."""
        if self._owns_delegate and self.delegate is not None:
            self.logger.debug("Shutting down extraction delegate")
            self.delegate.shutdown()
            self.delegate = None
            self._owns_delegate = False

    def _record_success(self, folder_name: str) -> None:
        self.logger.info(f"Finished sync of '{folder_name}' successfully")
        self._save_sync_state(lambda s: s.as_success(folder_name))

    def _record_error(self, folder_name: str, error: Exception) -> None:
        message = error_message_chain(error)
        self.logger.warning(f"Finished sync of '{folder_name}' with error: {message}")
        self._save_sync_state(lambda s: s.as_error(folder_name, message))

    def sync_folder(self, folder_name: str, remote_bookmarks_url: str) -> int:
        """
        Replace the content of a folder with the bookmarks of a remote document.

        Returns:
            Number of bookmarks created

        Raises:
            FolderNotFoundError: If the store has no such folder
            FetchError: If the document cannot be downloaded
            ExtractionError: If the document format is not recognized
        """
        self.logger.info(f"Syncing '{folder_name}' to {remote_bookmarks_url}")
        folder_id = self._find_folder(folder_name)
        body = self._fetch(folder_name, remote_bookmarks_url)
        tree = self.extractor.extract(
            body,
            extract_locator(remote_bookmarks_url),
            strip_locator(remote_bookmarks_url),
        )
        return self._replace_folder_content(folder_id, tree)

    async def async_sync_folder(self, folder_name: str, remote_bookmarks_url: str) -> int:
        """
        Asynchronous ``sync_folder`` using the extraction delegate.

        Without an injected delegate one is created on first use; callers
        outside ``async_sync_folders`` release it with ``close``.
        """
        if self.delegate is None:
            self.delegate = ExtractionDelegate(max_children=self.extractor.max_children)
            self._owns_delegate = True

        self.logger.info(f"Syncing '{folder_name}' to {remote_bookmarks_url}")
        folder_id = self._find_folder(folder_name)
        body = await asyncio.to_thread(self._fetch, folder_name, remote_bookmarks_url)
        tree = await self.delegate.extract(
            body,
            extract_locator(remote_bookmarks_url),
            strip_locator(remote_bookmarks_url),
        )
        return self._replace_folder_content(folder_id, tree)

    def _find_folder(self, folder_name: str) -> str:
        folder_id = self.store.find_folder(folder_name)
        if folder_id is None:
            raise FolderNotFoundError(folder_name)
        return folder_id

    def _fetch(self, folder_name: str, remote_bookmarks_url: str) -> str:
        url = strip_locator(remote_bookmarks_url)
        self.logger.debug(f"Fetching bookmarks from remote {url}")
        try:
            return self.fetcher(url)
        except FetchError as e:
            raise FetchError(
                f"Could not fetch remote bookmarks from {url} for folder '{folder_name}'",
                status=e.status,
            ) from e

    def _replace_folder_content(self, folder_id: str, tree: Optional[BookmarkTree]) -> int:
        if tree is None:
            raise ExtractionError(UNRECOGNIZED_MESSAGE)
        self.store.empty_folder(folder_id)
        self.logger.debug(f"Populating folder {folder_id}")
        return self._populate_folder(folder_id, tree.entries)

    def _populate_folder(self, folder_id: str, nodes: Iterable[BookmarkNode]) -> int:
        created = 0
        for node in nodes:
            if isinstance(node, BookmarkFolder):
                child_id = self.store.create_folder(folder_id, node.title)
                created += self._populate_folder(child_id, node.children)
            else:
                self.store.create_bookmark(folder_id, node.title, node.url)
                created += 1
        return created
