#!/usr/bin/env python3
"""
Main entry point for Remote Bookmarks.
"""

import sys
from remote_bookmarks.cli import main


if __name__ == "__main__":
    sys.exit(main())
