from __future__ import annotations

"""
Fork-join worker pool for the per-particle phases.

parallel_for() splits an index range into contiguous chunks, maps them over a
reused ThreadPoolExecutor and consumes every chunk result before returning.
Returning from parallel_for() is the barrier between solver phases; an
exception raised by any chunk propagates to the caller.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable


class WorkerPool:
    def __init__(self, max_workers: int | None = None):
        if max_workers is None:
            max_workers = os.cpu_count() or 1
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        self.max_workers = int(max_workers)
        # reuse executor to avoid recreating threads every phase
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers) if self.max_workers > 1 else None

    def parallel_for(self, n: int, body: Callable[[int], None]) -> None:
        if n <= 0:
            return

        if self._executor is None or n < 2 * self.max_workers:
            for i in range(n):
                body(i)
            return

        def run_chunk(bounds: tuple[int, int]) -> None:
            start, stop = bounds
            for i in range(start, stop):
                body(i)

        chunk_size = max(1, n // self.max_workers)
        chunks = [(s, min(s + chunk_size, n)) for s in range(0, n, chunk_size)]

        # draining the iterator waits for every chunk and re-raises worker errors
        for _ in self._executor.map(run_chunk, chunks):
            pass

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
