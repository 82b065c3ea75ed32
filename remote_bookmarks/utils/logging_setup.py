"""
Logging configuration for Remote Bookmarks.

This module sets up logging based on configuration settings.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(config=None, log_file: Optional[str] = None) -> Optional[Path]:
    """
    Set up logging configuration.

    Args:
        config: Optional LoggingConfig; defaults apply when omitted
        log_file: Optional log file name override

    Returns:
        Path of the log file, or None when file logging is disabled
    """
    log_level = getattr(config, "level", "INFO")
    console_output = getattr(config, "console_output", True)

    if log_file is None:
        log_file = getattr(config, "log_file", "remote_bookmarks.log")

    handlers = []
    log_path = None

    if log_file:
        log_dir = Path.cwd() / "logs"
        log_dir.mkdir(exist_ok=True)

        # Create timestamped log file
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = log_dir / f"{Path(log_file).stem}_{timestamp}.log"

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handlers.append(file_handler)

    if console_output:
        # stderr keeps stdout free for extracted documents
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handlers.append(console_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=getattr(logging, log_level.upper()), handlers=handlers, force=True
    )

    logger = logging.getLogger(__name__)
    logger.info(f"Remote Bookmarks starting - Log file: {log_path}")
    logger.info(f"Log level: {log_level}")

    # Reduce noise from some libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    return log_path
