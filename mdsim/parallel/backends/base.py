"""Abstract base class for parallel backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any

import numpy as np
from numpy.typing import NDArray


class ParallelBackend(ABC):
    """
    Abstract base class for parallelization backends.

    Force providers distribute independent work items through this
    interface, allowing transparent switching between serial and
    process-based execution.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return backend name."""
        ...

    @property
    @abstractmethod
    def n_workers(self) -> int:
        """Return number of parallel workers."""
        ...

    @abstractmethod
    def parallel_map(
        self,
        func: Callable[[Any], Any],
        items: Sequence[Any],
    ) -> list[Any]:
        """
        Apply a function to every item, preserving order.

        Args:
            func: Function to apply. Must be picklable for process backends.
            items: Work items.

        Returns:
            Results for each item.
        """
        ...

    def reduce_sum(
        self,
        partials: Sequence[NDArray[np.floating]],
    ) -> NDArray[np.floating]:
        """
        Combine per-worker partial arrays by summation.

        Args:
            partials: Arrays of identical shape, one per work item.

        Returns:
            Element-wise sum.
        """
        if len(partials) == 0:
            raise ValueError("Nothing to reduce")
        total = np.array(partials[0], dtype=np.float64)
        for partial in partials[1:]:
            total += partial
        return total
