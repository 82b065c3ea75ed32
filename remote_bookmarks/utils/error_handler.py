"""
Error types for Remote Bookmarks.

The extraction engine itself never raises: every parser failure is logged and
turned into ``None``. The exceptions below are raised by the collaborators
around it (configuration, fetch, delegate, store and sync) where a failure has
to reach the caller.
"""

from typing import List, Optional


# ============================================================================
# Unified Exception Hierarchy for Remote Bookmarks
# ============================================================================


class RemoteBookmarksError(Exception):
    """Base exception for all remote bookmarks errors."""

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(RemoteBookmarksError, ValueError):
    """Invalid or unreadable configuration."""

    pass


# ============================================================================
# Network Errors
# ============================================================================


class NetworkError(RemoteBookmarksError):
    """Network/HTTP related errors."""

    pass


class FetchError(NetworkError):
    """Raised when a remote document cannot be downloaded."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


# ============================================================================
# Extraction Errors
# ============================================================================


class ExtractionError(RemoteBookmarksError):
    """Raised when a fetched document is not in any recognized format."""

    pass


class ExtractionTimeoutError(ExtractionError):
    """Raised when the extraction delegate does not answer in time."""

    pass


# ============================================================================
# Store Errors
# ============================================================================


class BookmarkStoreError(RemoteBookmarksError):
    """Bookmark store errors."""

    pass


class FolderNotFoundError(BookmarkStoreError):
    """Raised when a sync target folder does not exist in the store."""

    def __init__(self, folder_name: str):
        super().__init__(f"Could not find folder '{folder_name}'")
        self.folder_name = folder_name


def error_message_chain(error: BaseException) -> str:
    """
    Join the messages of an exception and all of its causes.

    Args:
        error: The outermost exception

    Returns:
        Messages separated by ": ", outermost first, without duplicates
    """
    messages: List[str] = []
    current: Optional[BaseException] = error
    seen = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        message = str(current).strip() or type(current).__name__
        if message not in messages:
            messages.append(message)
        current = current.__cause__ or current.__context__
    return ": ".join(messages)
