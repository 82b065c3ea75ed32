"""
Tests for the command-line interface.
"""

import json
from unittest.mock import patch

import pytest
import toml

from remote_bookmarks.cli import CLIInterface, main
from remote_bookmarks.config.pydantic_config import ENV_FETCH_TIMEOUT, ENV_LOG_LEVEL
from remote_bookmarks.core.bookmark_store import ROOT_ID, JsonFileBookmarkStore
from remote_bookmarks.utils.error_handler import FetchError

from conftest import HTML_DOCUMENT, RSS_FEED


@pytest.fixture(autouse=True)
def cli_environment(tmp_path, monkeypatch):
    """Isolate the CLI from the working directory and the real logging setup."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(ENV_FETCH_TIMEOUT, raising=False)
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
    with patch("remote_bookmarks.cli.setup_logging") as mock_setup_logging:
        yield mock_setup_logging


def write_config(tmp_path, **overrides):
    data = {
        "store_path": str(tmp_path / "bookmarks.json"),
        "sync_items": [
            {"folder_name": "News", "remote_bookmarks_url": "http://x/feed"},
            {
                "folder_name": "Links",
                "remote_bookmarks_url": "http://h/page#__xpath=//div[@id='links']",
            },
        ],
    }
    data.update(overrides)
    path = tmp_path / "remote_bookmarks.toml"
    path.write_text(toml.dumps(data), encoding="utf-8")
    return path


def fake_fetch(documents):
    def fetch(url, **kwargs):
        if url not in documents:
            raise FetchError(f"404 Not Found for {url}", status=404)
        return documents[url]

    return fetch


class TestArgumentParsing:
    """Test cases for argument parsing."""

    def setup_method(self):
        """Set up test fixtures."""
        self.cli = CLIInterface()

    def test_extract_arguments(self):
        args = self.cli.parse_args(
            ["-v", "--timeout", "5", "extract", "http://x/", "--xpath", "//a", "-o", "out.json"]
        )

        assert args.verbose is True
        assert args.timeout == 5
        assert args.command == "extract"
        assert args.url == "http://x/"
        assert args.xpath == "//a"
        assert str(args.output) == "out.json"

    def test_sync_arguments(self):
        args = self.cli.parse_args(["--delegate", "sync", "--create-folders"])

        assert args.use_delegate is True
        assert args.command == "sync"
        assert args.create_folders is True

    def test_no_command(self, capsys):
        assert self.cli.run([]) == 1
        assert "usage" in capsys.readouterr().err


class TestExtractCommand:
    """Test cases for the extract command."""

    def test_prints_json_document(self, capsys, cli_environment):
        with patch(
            "remote_bookmarks.cli.fetch_text", side_effect=fake_fetch({"http://x/feed": RSS_FEED})
        ):
            assert main(["extract", "http://x/feed"]) == 0

        document = json.loads(capsys.readouterr().out)
        assert document == {
            "version": 1,
            "bookmarks": [{"title": "A", "url": "http://x/1", "bookmarks": None}],
        }
        cli_environment.assert_called_once()

    def test_locator_fragment(self, capsys):
        with patch(
            "remote_bookmarks.cli.fetch_text",
            side_effect=fake_fetch({"http://h/page": HTML_DOCUMENT}),
        ) as mock_fetch:
            assert main(["extract", "http://h/page#__xpath=//div[@id='links']"]) == 0

        assert mock_fetch.call_args[0][0] == "http://h/page"
        document = json.loads(capsys.readouterr().out)
        assert [b["url"] for b in document["bookmarks"]] == ["http://h/p", "http://h/q"]

    def test_xpath_option_wins_over_fragment(self, capsys):
        with patch(
            "remote_bookmarks.cli.fetch_text",
            side_effect=fake_fetch({"http://h/page": HTML_DOCUMENT}),
        ):
            assert main(["extract", "http://h/page#__xpath=//table", "--xpath", "//nav"]) == 0

        document = json.loads(capsys.readouterr().out)
        assert [b["title"] for b in document["bookmarks"]] == ["Home"]

    def test_output_file(self, tmp_path, capsys):
        output = tmp_path / "out.json"
        with patch(
            "remote_bookmarks.cli.fetch_text", side_effect=fake_fetch({"http://x/feed": RSS_FEED})
        ):
            assert main(["extract", "http://x/feed", "-o", str(output)]) == 0

        assert capsys.readouterr().out == ""
        assert json.loads(output.read_text(encoding="utf-8"))["version"] == 1

    def test_unrecognized_document(self, capsys):
        with patch("remote_bookmarks.cli.fetch_text", return_value=""):
            assert main(["extract", "http://x/empty"]) == 1
        assert "is not a JSON bookmarks document" in capsys.readouterr().err

    def test_fetch_error(self, capsys):
        with patch("remote_bookmarks.cli.fetch_text", side_effect=fake_fetch({})):
            assert main(["extract", "http://x/missing"]) == 1
        assert "404 Not Found" in capsys.readouterr().err

    def test_timeout_option_reaches_fetch(self):
        with patch("remote_bookmarks.cli.fetch_text", return_value=RSS_FEED) as mock_fetch:
            main(["--timeout", "7", "extract", "http://x/feed"])
        assert mock_fetch.call_args[1]["timeout"] == 7

    def test_invalid_config(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"network": {"timeout": 0}}), encoding="utf-8")

        assert main(["--config", str(path), "extract", "http://x/"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("Configuration Validation Failed")
        assert "Unexpected Configuration Error" not in err

    def test_missing_config(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "none.toml"), "extract", "http://x/"]) == 1
        assert "Configuration File Not Found" in capsys.readouterr().err


class TestSyncCommand:
    """Test cases for the sync command."""

    def test_sync_with_created_folders(self, tmp_path, capsys):
        config_path = write_config(tmp_path)
        documents = {"http://x/feed": RSS_FEED, "http://h/page": HTML_DOCUMENT}

        with patch("remote_bookmarks.cli.fetch_text", side_effect=fake_fetch(documents)):
            assert main(["--config", str(config_path), "sync", "--create-folders"]) == 0

        assert capsys.readouterr().out.splitlines() == ["News: success", "Links: success"]
        store = JsonFileBookmarkStore(tmp_path / "bookmarks.json")
        news = store.children(store.find_folder("News"))
        links = store.children(store.find_folder("Links"))
        assert [b["url"] for b in news] == ["http://x/1"]
        assert [b["url"] for b in links] == ["http://h/p", "http://h/q"]
        assert store.sync_state.last_sync is not None

    def test_missing_folders_are_errors(self, tmp_path, capsys):
        config_path = write_config(tmp_path)
        existing = JsonFileBookmarkStore(tmp_path / "bookmarks.json")
        existing.create_folder(ROOT_ID, "News")
        existing.save()

        with patch("remote_bookmarks.cli.fetch_text", return_value=RSS_FEED):
            assert main(["--config", str(config_path), "sync"]) == 1

        assert capsys.readouterr().out.splitlines() == ["News: success", "Links: error"]
        store = JsonFileBookmarkStore(tmp_path / "bookmarks.json")
        assert store.sync_state.folder_states["Links"].message == (
            "Could not find folder 'Links'"
        )

    def test_store_option(self, tmp_path):
        config_path = write_config(tmp_path)
        other_store = tmp_path / "other.json"

        with patch("remote_bookmarks.cli.fetch_text", return_value=RSS_FEED):
            main(["--config", str(config_path), "sync", "--store", str(other_store), "--create-folders"])

        assert other_store.exists()
        assert not (tmp_path / "bookmarks.json").exists()

    def test_sync_disabled(self, tmp_path):
        config_path = write_config(tmp_path, sync_enabled=False)

        with patch("remote_bookmarks.cli.fetch_text") as mock_fetch:
            assert main(["--config", str(config_path), "sync"]) == 0
        mock_fetch.assert_not_called()

    def test_no_sync_items(self, tmp_path, capsys):
        config_path = write_config(tmp_path, sync_items=[])

        assert main(["--config", str(config_path), "sync"]) == 1
        assert "no sync_items" in capsys.readouterr().err


class TestWatchCommand:
    """Test cases for the watch command."""

    def test_repeats_on_the_configured_period(self, tmp_path, capsys):
        config_path = write_config(tmp_path, sync_period_minutes=5)
        documents = {"http://x/feed": RSS_FEED, "http://h/page": HTML_DOCUMENT}

        with patch(
            "remote_bookmarks.cli.fetch_text", side_effect=fake_fetch(documents)
        ) as mock_fetch, patch("remote_bookmarks.cli.time.sleep") as mock_sleep:
            exit_code = main(
                ["--config", str(config_path), "watch", "--create-folders", "--passes", "3"]
            )

        assert exit_code == 0
        assert mock_fetch.call_count == 6
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(300)
        assert capsys.readouterr().out.splitlines().count("News: success") == 3

    def test_default_period(self, tmp_path):
        config_path = write_config(tmp_path)

        with patch("remote_bookmarks.cli.fetch_text", return_value=RSS_FEED), patch(
            "remote_bookmarks.cli.time.sleep"
        ) as mock_sleep:
            main(["--config", str(config_path), "watch", "--create-folders", "--passes", "2"])

        mock_sleep.assert_called_once_with(30 * 60)

    def test_interrupt_stops_watching(self, tmp_path):
        config_path = write_config(tmp_path)

        with patch("remote_bookmarks.cli.fetch_text", return_value=RSS_FEED), patch(
            "remote_bookmarks.cli.time.sleep", side_effect=KeyboardInterrupt
        ):
            assert main(["--config", str(config_path), "watch", "--create-folders"]) == 0

        store = JsonFileBookmarkStore(tmp_path / "bookmarks.json")
        assert store.sync_state.last_sync is not None

    def test_last_pass_errors(self, tmp_path):
        config_path = write_config(tmp_path)

        with patch("remote_bookmarks.cli.fetch_text", return_value=RSS_FEED), patch(
            "remote_bookmarks.cli.time.sleep"
        ):
            assert main(["--config", str(config_path), "watch", "--passes", "1"]) == 1

    def test_sync_disabled(self, tmp_path):
        config_path = write_config(tmp_path, sync_enabled=False)

        with patch("remote_bookmarks.cli.fetch_text") as mock_fetch, patch(
            "remote_bookmarks.cli.time.sleep"
        ) as mock_sleep:
            assert main(["--config", str(config_path), "watch"]) == 0

        mock_fetch.assert_not_called()
        mock_sleep.assert_not_called()


class TestCreateConfig:
    """Test cases for --create-config."""

    def test_writes_sample(self, tmp_path):
        path = tmp_path / "sample.toml"

        assert main(["--create-config", str(path)]) == 0
        assert "sync_items" in toml.load(path)

    def test_refuses_to_overwrite(self, tmp_path, capsys):
        path = tmp_path / "sample.json"
        path.write_text("{}", encoding="utf-8")

        assert main(["--create-config", str(path)]) == 1
        assert path.read_text(encoding="utf-8") == "{}"

    def test_unknown_extension(self, tmp_path):
        assert main(["--create-config", str(tmp_path / "sample.yaml")]) == 1
