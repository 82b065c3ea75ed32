"""
Tests for remote document download.
"""

from unittest.mock import MagicMock

import pytest
import requests

from remote_bookmarks.core.fetch import DEFAULT_USER_AGENT, fetch_text
from remote_bookmarks.utils.error_handler import FetchError, NetworkError


def make_response(status_code=200, text="body", reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    response.text = text
    return response


class TestFetchText:
    """Test cases for fetch_text."""

    def setup_method(self):
        """Set up test fixtures."""
        self.session = MagicMock()
        self.session.get.return_value = make_response(text="<rss/>")

    def test_returns_body(self):
        assert fetch_text("http://example.com/feed", session=self.session) == "<rss/>"

    def test_cache_busting_headers(self):
        fetch_text("http://example.com/", timeout=5, session=self.session)

        _, kwargs = self.session.get.call_args
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["Cache-Control"] == "no-cache"
        assert kwargs["headers"]["Pragma"] == "no-cache"
        assert kwargs["headers"]["User-Agent"] == DEFAULT_USER_AGENT

    def test_without_cache_busting(self):
        fetch_text("http://example.com/", cache_busting=False, session=self.session)

        _, kwargs = self.session.get.call_args
        assert "Cache-Control" not in kwargs["headers"]
        assert "Pragma" not in kwargs["headers"]

    def test_custom_user_agent(self):
        fetch_text("http://example.com/", session=self.session, user_agent="agent/2")
        _, kwargs = self.session.get.call_args
        assert kwargs["headers"]["User-Agent"] == "agent/2"

    def test_error_status(self):
        self.session.get.return_value = make_response(404, reason="Not Found")

        with pytest.raises(FetchError) as exc_info:
            fetch_text("http://example.com/missing", session=self.session)

        assert exc_info.value.status == 404
        assert "404 Not Found" in str(exc_info.value)

    def test_connection_error(self):
        self.session.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(FetchError) as exc_info:
            fetch_text("http://example.com/", session=self.session)

        assert isinstance(exc_info.value, NetworkError)
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)
        assert exc_info.value.status is None

    def test_timeout(self):
        self.session.get.side_effect = requests.Timeout("slow")
        with pytest.raises(FetchError):
            fetch_text("http://example.com/", session=self.session)

    def test_file_url(self, tmp_path):
        document = tmp_path / "bookmarks.opml"
        document.write_text("<opml/>", encoding="utf-8")

        assert fetch_text(document.as_uri(), session=self.session) == "<opml/>"
        self.session.get.assert_not_called()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FetchError):
            fetch_text((tmp_path / "missing.json").as_uri())
