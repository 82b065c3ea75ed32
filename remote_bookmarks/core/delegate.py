"""
Asynchronous extraction delegate.

Extraction is CPU-bound markup parsing. Callers running an event loop hand it
to a worker executor instead: each call is one request/response round trip,
bounded by a timeout. The executor is created on first use.
"""

import asyncio
import logging
import threading
from concurrent.futures import Executor, ProcessPoolExecutor
from typing import Callable, Optional

from ..utils.error_handler import ExtractionTimeoutError
from .data_models import BookmarkTree
from .extractor import BookmarkExtractor
from .sanitizer import MAX_CHILDREN

DEFAULT_TIMEOUT = 60.0


def _run_extraction(
    body: str, xpath: Optional[str], document_url: str, max_children: int
) -> Optional[BookmarkTree]:
    # Module level so that process pools can pickle it
    return BookmarkExtractor(max_children=max_children).extract(body, xpath, document_url)


class ExtractionDelegate:
    """
    Runs extractions on a lazily created, shared executor.

    The executor is created at most once, even when several coroutines or
    threads make their first call at the same time. A timed out call stops
    waiting for its result; if the work already started it keeps running
    in the executor until it finishes.
    """

    def __init__(
        self,
        executor_factory: Optional[Callable[[int], Executor]] = None,
        max_workers: int = 1,
        timeout: float = DEFAULT_TIMEOUT,
        max_children: int = MAX_CHILDREN,
    ):
        """
        Initialize the delegate.

        Args:
            executor_factory: Called with ``max_workers`` to create the
                executor; defaults to a process pool
            max_workers: Number of workers of the executor
            timeout: Seconds to wait for each extraction
            max_children: Maximum number of entries kept at each tree level
        """
        self.logger = logging.getLogger(__name__)
        self._executor_factory = executor_factory or (
            lambda workers: ProcessPoolExecutor(max_workers=workers)
        )
        self.max_workers = max_workers
        self.timeout = timeout
        self.max_children = max_children
        self._executor: Optional[Executor] = None
        self._lock = threading.Lock()

    @property
    def is_started(self) -> bool:
        return self._executor is not None

    def ensure_executor(self) -> Executor:
        """Return the executor, creating it if it does not exist yet."""
        if self._executor is not None:
            return self._executor
        with self._lock:
            if self._executor is None:
                self.logger.debug(
                    f"Creating extraction executor ({self.max_workers} workers)"
                )
                self._executor = self._executor_factory(self.max_workers)
            return self._executor

    async def extract(
        self,
        body: str,
        xpath: Optional[str],
        document_url: str,
        timeout: Optional[float] = None,
    ) -> Optional[BookmarkTree]:
        """
        Extract bookmarks in the executor.

        Args:
            body: Raw fetched text
            xpath: Optional XPath expression for HTML bodies
            document_url: URL of the document
            timeout: Overrides the delegate timeout for this call

        Returns:
            Sanitized BookmarkTree, or None if the format is not recognized

        Raises:
            ExtractionTimeoutError: If no result arrived in time
        """
        executor = self.ensure_executor()
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(
            executor, _run_extraction, body, xpath, document_url, self.max_children
        )
        wait_for = self.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(future, timeout=wait_for)
        except asyncio.TimeoutError as e:
            self.logger.warning(
                f"Extraction of {document_url} did not finish in {wait_for}s"
            )
            raise ExtractionTimeoutError(
                f"Extraction of {document_url} timed out after {wait_for}s"
            ) from e

    def shutdown(self, wait: bool = True) -> None:
        """Shut the executor down; the next call creates a new one."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
