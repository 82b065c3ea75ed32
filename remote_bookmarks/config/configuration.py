"""
Configuration management for Remote Bookmarks.

Thin wrapper around the Pydantic-based ConfigurationManager exposing the
settings the CLI and the sync manager need.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.delegate import ExtractionDelegate
from ..core.extractor import BookmarkExtractor
from .pydantic_config import ConfigurationManager, RemoteBookmarksConfig, SyncItem


class Configuration:
    """Configuration wrapper around the Pydantic-based system."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to user configuration file (TOML/JSON)
        """
        self._manager = ConfigurationManager(config_path)
        self._config = self._manager.config

    @property
    def config(self) -> RemoteBookmarksConfig:
        """Get the underlying Pydantic configuration."""
        return self._config

    def update_from_args(self, args: Dict[str, Any]) -> None:
        """
        Update configuration from command-line arguments.

        Args:
            args: Dictionary of parsed arguments
        """
        self._manager.update_from_cli_args(args)
        self._config = self._manager.config

    def get_sync_items(self) -> List[SyncItem]:
        return list(self._config.sync_items)

    def get_store_path(self) -> Path:
        return self._config.store_path

    def create_extractor(self) -> BookmarkExtractor:
        """Create an extractor using the configured tree size limit."""
        return BookmarkExtractor(max_children=self._config.extraction.max_children)

    def create_delegate(self) -> Optional[ExtractionDelegate]:
        """Create the extraction delegate, or None when it is disabled."""
        extraction = self._config.extraction
        if not extraction.use_delegate:
            return None
        return ExtractionDelegate(
            max_workers=extraction.delegate_workers,
            timeout=extraction.delegate_timeout,
            max_children=extraction.max_children,
        )


def create_configuration(config_path: Optional[Path] = None) -> Configuration:
    """
    Create a new Configuration instance.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Configuration instance
    """
    return Configuration(config_path)
