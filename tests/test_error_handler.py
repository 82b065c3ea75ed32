"""
Tests for the error hierarchy and message chaining.
"""

from remote_bookmarks.utils.error_handler import (
    BookmarkStoreError,
    ConfigurationError,
    ExtractionError,
    ExtractionTimeoutError,
    FetchError,
    FolderNotFoundError,
    NetworkError,
    RemoteBookmarksError,
    error_message_chain,
)


class TestErrorHierarchy:
    """Test cases for the exception classes."""

    def test_everything_is_a_remote_bookmarks_error(self):
        for error in (
            FetchError("x"),
            ExtractionTimeoutError("x"),
            FolderNotFoundError("News"),
        ):
            assert isinstance(error, RemoteBookmarksError)

    def test_subclasses(self):
        assert issubclass(FetchError, NetworkError)
        assert issubclass(ExtractionTimeoutError, ExtractionError)
        assert issubclass(FolderNotFoundError, BookmarkStoreError)
        assert issubclass(ConfigurationError, ValueError)

    def test_fetch_error_status(self):
        assert FetchError("x", status=500).status == 500
        assert FetchError("x").status is None

    def test_folder_not_found_message(self):
        error = FolderNotFoundError("News")
        assert str(error) == "Could not find folder 'News'"
        assert error.folder_name == "News"


class TestErrorMessageChain:
    """Test cases for error_message_chain."""

    def test_single_error(self):
        assert error_message_chain(ValueError("bad")) == "bad"

    def test_chained_causes(self):
        try:
            try:
                raise OSError("connection refused")
            except OSError as e:
                raise FetchError("Could not fetch") from e
        except FetchError as outer:
            assert error_message_chain(outer) == "Could not fetch: connection refused"

    def test_empty_message_uses_type_name(self):
        assert error_message_chain(TimeoutError()) == "TimeoutError"

    def test_duplicate_messages_are_skipped(self):
        outer = RemoteBookmarksError("same")
        outer.__cause__ = RemoteBookmarksError("same")
        assert error_message_chain(outer) == "same"
