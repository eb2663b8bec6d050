"""Serial (single-process) backend."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from .base import ParallelBackend


class SerialBackend(ParallelBackend):
    """
    Serial backend for single-process execution.

    This is the default backend and provides the reference implementation.
    """

    @property
    def name(self) -> str:
        """Return backend name."""
        return "serial"

    @property
    def n_workers(self) -> int:
        """Return number of parallel workers."""
        return 1

    def parallel_map(
        self,
        func: Callable[[Any], Any],
        items: Sequence[Any],
    ) -> list[Any]:
        """Apply function to items in order in the calling process."""
        return [func(item) for item in items]
