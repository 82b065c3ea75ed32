"""
Remote document download.

Documents are always re-downloaded: caches along the way are asked not to
answer from their stored copies.
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests

from ..utils.error_handler import FetchError

DEFAULT_TIMEOUT = 45.0
DEFAULT_USER_AGENT = "remote-bookmarks/1.0"
NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}

logger = logging.getLogger(__name__)


def fetch_text(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    cache_busting: bool = True,
    session: Optional[requests.Session] = None,
    user_agent: str = DEFAULT_USER_AGENT,
) -> str:
    """
    Download the text of a remote document.

    Args:
        url: http(s) or file URL of the document
        timeout: Request timeout in seconds
        cache_busting: Send no-cache request headers
        session: Optional requests session to reuse
        user_agent: User-Agent header value

    Returns:
        The decoded body

    Raises:
        FetchError: If the document cannot be downloaded
    """
    if urlparse(url).scheme == "file":
        return _read_file(url)

    headers = {"User-Agent": user_agent}
    if cache_busting:
        headers.update(NO_CACHE_HEADERS)

    http = session or requests
    logger.debug(f"Fetching {url} (timeout={timeout}s)")
    try:
        response = http.get(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(f"Could not fetch from {url}") from e

    if not response.ok:
        raise FetchError(
            f"{response.status_code} {response.reason or 'error'} for {url}",
            status=response.status_code,
        )

    try:
        return response.text
    except (requests.RequestException, LookupError) as e:
        raise FetchError(
            f"Could not download text from {url}", status=response.status_code
        ) from e


def _read_file(url: str) -> str:
    path = Path(url2pathname(urlparse(url).path))
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FetchError(f"Could not read {path}") from e
