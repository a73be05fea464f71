"""
Bounded worker pool for row jobs.

Each row job writes only its own output row, so jobs need no locking and
may run in any order.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable

logger = logging.getLogger(__name__)

RowFn = Callable[[int], None]


class BoundedWorkerPool:
    """Runs row jobs with at most `limit` of them in flight."""

    def __init__(self, limit: int = 1):
        self.limit = max(1, int(limit))

    def run_rows(self, row_count: int, row_fn: RowFn) -> None:
        """
        Call row_fn(y) for every y in [0, row_count) and return when all are done.

        There is no cancellation: a failing row doesn't stop the others.
        Once every job has finished, the exception of the lowest failing
        row is re-raised.
        """
        if row_count <= 0:
            return

        workers = min(self.limit, row_count)
        if workers == 1:
            first: BaseException | None = None
            for y in range(row_count):
                try:
                    row_fn(y)
                except Exception as e:
                    if first is None:
                        first = e
            if first is not None:
                raise first
            return

        logger.debug("Running %d rows on %d workers", row_count, workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="row") as executor:
            futures: list[Future[None]] = [
                executor.submit(row_fn, y) for y in range(row_count)
            ]
            wait(futures)

        for y, future in enumerate(futures):
            exc = future.exception()
            if exc is not None:
                logger.debug("Row %d failed: %s", y, exc)
                raise exc


def run_rows(row_count: int, concurrency_limit: int, row_fn: RowFn) -> None:
    BoundedWorkerPool(concurrency_limit).run_rows(row_count, row_fn)
