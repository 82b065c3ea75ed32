"""
Command-line interface for Remote Bookmarks.

Three commands are available:

- ``extract`` downloads one remote document and prints the bookmark tree
  found in it as a JSON bookmarks document.
- ``sync`` mirrors every configured remote document into its folder of the
  JSON bookmark store.
- ``watch`` repeats the sync every ``sync_period_minutes`` while
  ``sync_enabled`` is set.
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from remote_bookmarks.config.configuration import Configuration
from remote_bookmarks.config.pydantic_config import (
    ConfigurationManager,
    format_config_error,
)
from remote_bookmarks.core.bookmark_store import ROOT_ID, JsonFileBookmarkStore
from remote_bookmarks.core.data_models import BookmarkTree
from remote_bookmarks.core.fetch import fetch_text
from remote_bookmarks.core.locator import extract_locator, strip_locator
from remote_bookmarks.core.sync_manager import SyncManager
from remote_bookmarks.utils.error_handler import (
    ConfigurationError,
    RemoteBookmarksError,
    error_message_chain,
)
from remote_bookmarks.utils.logging_setup import setup_logging


class CLIInterface:
    """Command line interface for extraction and folder sync."""

    def __init__(self):
        self.parser = self._create_parser()
        self.logger = logging.getLogger(__name__)

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser."""
        parser = argparse.ArgumentParser(
            prog="remote-bookmarks",
            description=(
                "Remote Bookmarks - mirror JSON, RSS/Atom, OPML and HTML "
                "documents into bookmark folders"
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  remote-bookmarks extract https://example.com/feed.xml
  remote-bookmarks extract https://example.com/links.html --xpath "//ul[@id='links']"
  remote-bookmarks extract "https://example.com/page#__xpath=//table//a" -o links.json
  remote-bookmarks --config remote_bookmarks.toml sync
  remote-bookmarks --config remote_bookmarks.toml watch --create-folders
  remote-bookmarks --create-config remote_bookmarks.toml

Locator fragment:
  A URL ending with #__xpath=<percent-encoded XPath> only keeps the anchors
  selected by the XPath expression when the document is HTML.
""",
        )
        parser.add_argument(
            "--config", "-c", type=Path, help="Configuration file (TOML or JSON)"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable debug logging"
        )
        parser.add_argument(
            "--timeout", type=float, help="Fetch timeout in seconds"
        )
        parser.add_argument(
            "--delegate",
            action="store_true",
            dest="use_delegate",
            help="Extract in a worker process",
        )
        parser.add_argument(
            "--create-config",
            type=Path,
            metavar="FILE",
            help="Write a sample configuration file (.toml or .json) and exit",
        )

        subparsers = parser.add_subparsers(dest="command")

        extract_parser = subparsers.add_parser(
            "extract", help="Extract the bookmarks of one remote document"
        )
        extract_parser.add_argument("url", help="URL of the remote document")
        extract_parser.add_argument(
            "--xpath", help="XPath expression selecting anchors of an HTML document"
        )
        extract_parser.add_argument(
            "--output", "-o", type=Path, help="Write the JSON document to a file"
        )

        sync_parser = subparsers.add_parser(
            "sync", help="Sync every configured folder once"
        )
        sync_parser.add_argument("--store", type=Path, help="JSON bookmark store file")
        sync_parser.add_argument(
            "--create-folders",
            action="store_true",
            help="Create missing sync folders at the top of the store",
        )

        watch_parser = subparsers.add_parser(
            "watch", help="Sync every configured folder on the configured period"
        )
        watch_parser.add_argument("--store", type=Path, help="JSON bookmark store file")
        watch_parser.add_argument(
            "--create-folders",
            action="store_true",
            help="Create missing sync folders at the top of the store",
        )
        watch_parser.add_argument(
            "--passes",
            type=int,
            metavar="N",
            help="Stop after N sync passes (default: run until interrupted)",
        )

        return parser

    def parse_args(self, args=None) -> argparse.Namespace:
        """Parse command line arguments."""
        return self.parser.parse_args(args)

    def process_arguments(self, args: argparse.Namespace) -> Configuration:
        """
        Load configuration and apply command-line overrides.

        Raises:
            ValueError: If the configuration is invalid
            FileNotFoundError: If the configuration file does not exist
        """
        config = Configuration(args.config)
        config.update_from_args(
            {
                "verbose": args.verbose,
                "timeout": args.timeout,
                "store": getattr(args, "store", None),
                "use_delegate": args.use_delegate,
            }
        )
        setup_logging(config.config.logging)
        return config

    def _handle_create_config(self, output_path: Path) -> int:
        """Write a sample configuration file."""
        suffix = output_path.suffix.lower().lstrip(".")
        if suffix not in ("toml", "json"):
            print("Error: configuration file must end with .toml or .json", file=sys.stderr)
            return 1
        if output_path.exists():
            print(f"Error: {output_path} already exists", file=sys.stderr)
            return 1

        ConfigurationManager.create_sample_config(output_path, suffix)
        print(f"Sample configuration written to {output_path}")
        return 0

    def run(self, args=None) -> int:
        """Execute CLI interface."""
        parsed_args = self.parse_args(args)

        if parsed_args.create_config:
            return self._handle_create_config(parsed_args.create_config)

        if not parsed_args.command:
            self.parser.print_help(sys.stderr)
            return 1

        try:
            config = self.process_arguments(parsed_args)
        except ConfigurationError as e:
            print(str(e), file=sys.stderr)
            return 1
        except (ValueError, FileNotFoundError) as e:
            print(format_config_error(e), file=sys.stderr)
            return 1

        try:
            if parsed_args.command == "extract":
                return self.run_extract(config, parsed_args)
            if parsed_args.command == "watch":
                return self.run_watch(config, parsed_args)
            return self.run_sync(config, parsed_args)
        except RemoteBookmarksError as e:
            self.logger.error(error_message_chain(e))
            print(f"Error: {error_message_chain(e)}", file=sys.stderr)
            return 1

    def run_extract(self, config: Configuration, args: argparse.Namespace) -> int:
        """Fetch and extract a single document."""
        network = config.config.network
        document_url = strip_locator(args.url)
        xpath = args.xpath or extract_locator(args.url)

        body = fetch_text(
            document_url,
            timeout=network.timeout,
            cache_busting=network.cache_busting,
            user_agent=network.user_agent,
        )
        tree = self._extract(config, body, xpath, document_url)
        if tree is None:
            print(
                f"Error: {document_url} is not a JSON bookmarks document, "
                "an RSS/Atom feed, an OPML document or HTML",
                file=sys.stderr,
            )
            return 1

        self.logger.info(f"Extracted {tree.count_bookmarks()} bookmarks from {document_url}")
        output = json.dumps(tree.to_dict(), indent=2, ensure_ascii=False)
        if args.output:
            args.output.write_text(output + "\n", encoding="utf-8")
        else:
            print(output)
        return 0

    def _extract(
        self, config: Configuration, body: str, xpath: Optional[str], document_url: str
    ) -> Optional[BookmarkTree]:
        delegate = config.create_delegate()
        if delegate is None:
            return config.create_extractor().extract(body, xpath, document_url)
        with delegate:
            return asyncio.run(delegate.extract(body, xpath, document_url))

    def run_sync(self, config: Configuration, args: argparse.Namespace) -> int:
        """Sync every configured folder once and save the store."""
        exit_code = self._check_sync_settings(config)
        if exit_code is not None:
            return exit_code
        return self._sync_pass(config, args)

    def run_watch(self, config: Configuration, args: argparse.Namespace) -> int:
        """
        Sync every configured folder, then again every ``sync_period_minutes``.

        Runs until interrupted, or for ``--passes`` passes.

        Returns:
            Exit code of the last pass, 0 when interrupted
        """
        exit_code = self._check_sync_settings(config)
        if exit_code is not None:
            return exit_code

        settings = config.config
        period_seconds = settings.sync_period_minutes * 60
        passes = 0
        try:
            while True:
                exit_code = self._sync_pass(config, args)
                passes += 1
                if args.passes is not None and passes >= args.passes:
                    return exit_code
                self.logger.info(
                    f"Next sync in {settings.sync_period_minutes} minutes"
                )
                time.sleep(period_seconds)
        except KeyboardInterrupt:
            self.logger.info(f"Watch stopped after {passes} passes")
            return 0

    def _check_sync_settings(self, config: Configuration) -> Optional[int]:
        """Return an exit code when there is nothing to sync, else None."""
        settings = config.config
        if not settings.sync_enabled:
            self.logger.info("Sync disabled, nothing to do")
            return 0
        if not settings.sync_items:
            print("Error: no sync_items configured", file=sys.stderr)
            return 1
        return None

    def _sync_pass(self, config: Configuration, args: argparse.Namespace) -> int:
        """Run one sync pass over the configured folders and save the store."""
        settings = config.config
        store = JsonFileBookmarkStore(config.get_store_path())
        if args.create_folders:
            for item in settings.sync_items:
                if store.find_folder(item.folder_name) is None:
                    store.create_folder(ROOT_ID, item.folder_name)

        network = settings.network

        def fetcher(url: str) -> str:
            return fetch_text(
                url,
                timeout=network.timeout,
                cache_busting=network.cache_busting,
                user_agent=network.user_agent,
            )

        def save_state(state) -> None:
            store.sync_state = state

        delegate = config.create_delegate()
        manager = SyncManager(
            store,
            settings.sync_items,
            extractor=config.create_extractor(),
            fetcher=fetcher,
            delegate=delegate,
            state=store.sync_state,
            on_state_change=save_state,
        )
        if delegate is None:
            state = manager.sync_folders()
        else:
            with delegate:
                state = asyncio.run(manager.async_sync_folders())
        store.save()

        for folder_name, folder_state in state.folder_states.items():
            print(f"{folder_name}: {folder_state.name}")
        return 1 if state.has_errors else 0


def main(args=None):
    """Main entry point for the CLI."""
    cli = CLIInterface()
    return cli.run(args)


if __name__ == "__main__":
    sys.exit(main())
