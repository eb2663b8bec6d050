"""Multiprocessing backend using a process pool."""

from __future__ import annotations

import multiprocessing as mp
from collections.abc import Callable, Sequence
from concurrent.futures import ProcessPoolExecutor
from typing import Any

from .base import ParallelBackend


class MultiprocessingBackend(ParallelBackend):
    """
    Multiprocessing backend for shared-memory parallelism.

    Uses a process pool, so work functions and their arguments must be
    picklable. The pool is created lazily and reused across calls; call
    ``shutdown()`` (or use the backend as a context manager) to release it.
    """

    def __init__(self, n_workers: int | None = None) -> None:
        """
        Initialize multiprocessing backend.

        Args:
            n_workers: Number of worker processes. Defaults to CPU count.
        """
        if n_workers is not None and n_workers < 1:
            raise ValueError(f"n_workers must be positive, got {n_workers}")
        self._n_workers = n_workers or mp.cpu_count()
        self._executor: ProcessPoolExecutor | None = None

    @property
    def name(self) -> str:
        """Return backend name."""
        return "multiprocessing"

    @property
    def n_workers(self) -> int:
        """Return number of parallel workers."""
        return self._n_workers

    def parallel_map(
        self,
        func: Callable[[Any], Any],
        items: Sequence[Any],
    ) -> list[Any]:
        """
        Apply function to items in parallel using the process pool.

        Exceptions raised by a worker are re-raised in the caller.
        """
        if len(items) == 0:
            return []

        if self._executor is None:
            self._executor = ProcessPoolExecutor(max_workers=self._n_workers)

        return list(self._executor.map(func, items))

    def shutdown(self) -> None:
        """Shut down the worker pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> MultiprocessingBackend:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
