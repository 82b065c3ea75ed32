"""
Pydantic-based configuration system for Remote Bookmarks.

Configuration is read from a TOML or JSON file, completed with environment
variable overrides and validated by the models below.
"""

import json
import os
import sys
from pathlib import Path
from typing import Dict, List, Literal, Optional
from urllib.parse import urlparse

import toml
from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
)

from ..utils.error_handler import ConfigurationError

ENV_FETCH_TIMEOUT = "REMOTE_BOOKMARKS_FETCH_TIMEOUT"
ENV_LOG_LEVEL = "REMOTE_BOOKMARKS_LOG_LEVEL"

SUPPORTED_URL_SCHEMES = ("http", "https", "file")


class NetworkConfig(BaseModel):
    """Remote document download settings."""

    timeout: float = Field(
        default=45.0,
        ge=1,
        le=600,
        description="Fetch timeout in seconds",
    )
    cache_busting: bool = Field(
        default=True,
        description="Ask caches not to serve stored copies",
    )
    user_agent: str = Field(
        default="remote-bookmarks/1.0",
        min_length=1,
        description="User-Agent header of fetch requests",
    )


class ExtractionConfig(BaseModel):
    """Bookmark extraction settings."""

    max_children: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum entries kept at each level of an extracted tree",
    )
    use_delegate: bool = Field(
        default=False,
        description="Extract in a worker process instead of the calling thread",
    )
    delegate_timeout: float = Field(
        default=60.0,
        gt=0,
        le=3600,
        description="Seconds to wait for the extraction worker",
    )
    delegate_workers: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Number of extraction worker processes",
    )

    @field_validator("max_children")
    @classmethod
    def validate_max_children(cls, v):
        """Warn when trees are allowed to grow very wide."""
        if v > 1000:
            import warnings

            warnings.warn(
                f"Large max_children ({v}) lets remote documents create very "
                "large folders. Consider keeping the default of 100.",
                UserWarning,
            )
        return v


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: Optional[str] = Field(
        default="remote_bookmarks.log",
        description="Log file name under logs/, or null to disable file logging",
    )
    console_output: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class SyncItem(BaseModel):
    """A store folder and the remote document mirrored into it."""

    folder_name: str = Field(min_length=1)
    remote_bookmarks_url: str

    @field_validator("folder_name")
    @classmethod
    def validate_folder_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Folder name must not be blank")
        return v

    @field_validator("remote_bookmarks_url")
    @classmethod
    def validate_remote_bookmarks_url(cls, v: str) -> str:
        v = v.strip()
        scheme = urlparse(v).scheme
        if scheme not in SUPPORTED_URL_SCHEMES:
            raise ValueError(
                f"URL scheme must be one of {', '.join(SUPPORTED_URL_SCHEMES)} "
                f"(got: {scheme or 'none'})"
            )
        return v


class RemoteBookmarksConfig(BaseModel):
    """Main configuration model."""

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    sync_enabled: bool = True
    sync_period_minutes: int = Field(
        default=30,
        ge=1,
        le=24 * 60,
        description="Minutes between two sync passes of the scheduler",
    )
    sync_items: List[SyncItem] = Field(default_factory=list)
    store_path: Path = Field(
        default=Path("bookmarks.json"),
        description="JSON bookmark store file",
    )

    @field_validator("store_path", mode="before")
    @classmethod
    def validate_store_path(cls, v):
        """Ensure the store path is a Path object."""
        if isinstance(v, str):
            return Path(v)
        return v


class ConfigurationManager:
    """Manages loading and validation of configuration from multiple sources."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file (TOML or JSON)
        """
        self._config: Optional[RemoteBookmarksConfig] = None
        self._load_configuration(config_path)

    def _get_default_config_paths(self) -> List[Path]:
        """Get list of default configuration file paths to try."""
        if getattr(sys, "frozen", False):
            app_dir = Path(sys.executable).parent
        else:
            app_dir = Path.cwd()
        return [
            app_dir / "remote_bookmarks.toml",
            app_dir / "remote_bookmarks.json",
        ]

    def _load_configuration(self, config_path: Optional[Path] = None) -> None:
        """Load configuration from file or use defaults."""
        config_data: Dict = {}

        if config_path:
            config_data = self._load_config_file(Path(config_path))
        else:
            for path in self._get_default_config_paths():
                if path.exists():
                    config_data = self._load_config_file(path)
                    break

        self._load_overrides_from_env(config_data)

        try:
            self._config = RemoteBookmarksConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(format_config_error(e))

    def _load_config_file(self, config_path: Path) -> Dict:
        """Load configuration from TOML or JSON file."""
        if not config_path.exists():
            raise FileNotFoundError(
                2, "Configuration file not found", str(config_path)
            )

        try:
            if config_path.suffix.lower() == ".toml":
                return toml.load(config_path)
            elif config_path.suffix.lower() == ".json":
                with open(config_path, "r", encoding="utf-8") as f:
                    return json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported configuration file format: {config_path.suffix}"
                )
        except (toml.TomlDecodeError, json.JSONDecodeError, OSError) as e:
            raise ConfigurationError(f"Failed to load configuration from {config_path}: {e}")

    def _load_overrides_from_env(self, config_data: Dict) -> None:
        """Apply environment variable overrides."""
        timeout = os.getenv(ENV_FETCH_TIMEOUT)
        if timeout:
            config_data.setdefault("network", {})["timeout"] = timeout

        log_level = os.getenv(ENV_LOG_LEVEL)
        if log_level:
            config_data.setdefault("logging", {})["level"] = log_level

    def update_from_cli_args(self, args: Dict) -> None:
        """Update configuration from command-line arguments."""
        if not self._config:
            raise RuntimeError("Configuration not loaded")

        config_dict = self._config.model_dump()

        if args.get("verbose"):
            config_dict["logging"]["level"] = "DEBUG"

        if args.get("timeout") is not None:
            config_dict["network"]["timeout"] = args["timeout"]

        if args.get("store"):
            config_dict["store_path"] = args["store"]

        if args.get("use_delegate"):
            config_dict["extraction"]["use_delegate"] = True

        try:
            self._config = RemoteBookmarksConfig(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(format_config_error(e))

    @property
    def config(self) -> RemoteBookmarksConfig:
        """Get the current configuration."""
        if not self._config:
            raise RuntimeError("Configuration not loaded")
        return self._config

    @staticmethod
    def create_sample_config(output_path: Path, format: str = "toml") -> None:
        """Create a sample configuration file."""
        sample_config = {
            "network": {"timeout": 45.0, "cache_busting": True},
            "extraction": {
                "max_children": 100,
                "use_delegate": False,
                "delegate_timeout": 60.0,
            },
            "logging": {"level": "INFO", "log_file": "remote_bookmarks.log"},
            "sync_enabled": True,
            "sync_period_minutes": 30,
            "store_path": "bookmarks.json",
            "sync_items": [
                {
                    "folder_name": "Sample",
                    "remote_bookmarks_url": (
                        "https://en.wikipedia.org/wiki/List_of_James_Bond_films"
                        "#__xpath=//table//th/i//a"
                    ),
                }
            ],
        }

        if format.lower() == "toml":
            with open(output_path, "w", encoding="utf-8") as f:
                toml.dump(sample_config, f)
        elif format.lower() == "json":
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(sample_config, f, indent=2)
        else:
            raise ValueError(f"Unsupported format: {format}")


class ConfigurationErrorFormatter:
    """Formats Pydantic validation errors into user-friendly messages."""

    @staticmethod
    def format_validation_error(error: ValidationError) -> str:
        """
        Convert Pydantic ValidationError into a user-friendly error message.

        Args:
            error: Pydantic ValidationError instance

        Returns:
            Formatted error message with helpful guidance
        """
        error_messages = [
            ConfigurationErrorFormatter._format_by_error_type(
                ConfigurationErrorFormatter._format_error_location(detail["loc"]),
                detail["type"],
                detail,
                detail.get("input", "N/A"),
            )
            for detail in error.errors()
        ]

        header = "Configuration Validation Failed:\n"
        footer = (
            "\n\nTips:\n"
            "- Check the configuration file format (TOML or JSON)\n"
            "- Each sync item needs a folder_name and a remote_bookmarks_url\n"
            "- Use 'remote-bookmarks --create-config FILE' to generate a sample file"
        )
        return header + "\n".join(error_messages) + footer

    @staticmethod
    def _format_error_location(location: tuple) -> str:
        """Format the error location path."""
        if not location:
            return "Configuration"

        path_parts = []
        for part in location:
            if isinstance(part, str):
                path_parts.append(part)
            else:
                path_parts.append(f"[{part}]")

        return " -> ".join(path_parts)

    @staticmethod
    def _format_by_error_type(
        location: str, error_type: str, error_detail: dict, input_value
    ) -> str:
        """Format error message based on Pydantic error type."""

        if error_type == "missing":
            return f"- {location}: Required field is missing"

        elif error_type in [
            "greater_than_equal",
            "less_than_equal",
            "greater_than",
            "less_than",
        ]:
            ctx = error_detail.get("ctx", {})
            operator, limit = {
                "greater_than_equal": (">=", ctx.get("ge")),
                "less_than_equal": ("<=", ctx.get("le")),
                "greater_than": (">", ctx.get("gt")),
                "less_than": ("<", ctx.get("lt")),
            }[error_type]
            return f"- {location}: Value must be {operator} {limit} (got: {input_value})"

        elif error_type == "literal_error":
            expected = error_detail.get("ctx", {}).get("expected", "valid option")
            return f"- {location}: Must be one of {expected} (got: {input_value})"

        else:
            msg = error_detail.get("msg", "Invalid configuration value")
            return f"- {location}: {msg} (got: {input_value})"


def format_config_error(error: Exception) -> str:
    """
    Format any configuration-related error into a user-friendly message.

    Args:
        error: Exception that occurred during configuration

    Returns:
        Formatted error message
    """
    if isinstance(error, ValidationError):
        return ConfigurationErrorFormatter.format_validation_error(error)

    elif isinstance(error, FileNotFoundError):
        return (
            f"Configuration File Not Found:\n"
            f"Could not find configuration file: {error.filename}\n\n"
            f"Solutions:\n"
            f"- Create a configuration file using: remote-bookmarks --create-config FILE\n"
            f"- Use default configuration by omitting the --config parameter"
        )

    else:
        return f"Unexpected Configuration Error:\n{str(error)}"
