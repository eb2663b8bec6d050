"""Boundary conditions at the faces of the simulation cell."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

from .config import BoundaryMode
from .exceptions import UnsupportedModeError
from .system.box import CubicCell


class BoundaryCondition(ABC):
    """
    Abstract base class for boundary handlers.

    Handlers are stateless: every call decides from the positions and
    velocities passed in.
    """

    @abstractmethod
    def apply(
        self,
        positions: NDArray[np.floating],
        velocities: NDArray[np.floating],
    ) -> None:
        """
        Enforce the boundary on a configuration, in place.

        Args:
            positions: Particle positions, shape (3, N).
            velocities: Particle velocities, shape (3, N).
        """
        ...


class ClosedBoundary(BoundaryCondition):
    """
    Reflecting walls of a closed cubic cell.

    A velocity component is negated whenever the matching coordinate lies
    strictly outside ``[cell.low, cell.high]``. Positions are left where
    they are, so a particle may stay outside for a few steps until its
    reversed velocity carries it back.

    Attributes:
        cell: The enclosing cell.
    """

    def __init__(self, cell: CubicCell) -> None:
        self.cell = cell

    def apply(
        self,
        positions: NDArray[np.floating],
        velocities: NDArray[np.floating],
    ) -> None:
        """Flip every velocity component whose coordinate is outside the cell."""
        outside = self.cell.outside(positions)
        velocities[outside] *= -1.0

    def __repr__(self) -> str:
        return f"ClosedBoundary(side={self.cell.side}, origin={self.cell.origin})"


def make_boundary(mode: BoundaryMode | str, cell: CubicCell) -> BoundaryCondition:
    """
    Create the boundary handler for a mode.

    Raises:
        UnsupportedModeError: For open (periodic) boundaries.
    """
    mode = BoundaryMode(mode)
    if mode is BoundaryMode.CLOSED:
        return ClosedBoundary(cell)
    raise UnsupportedModeError(
        f"boundary mode {mode.value!r} is not supported; only 'closed' is implemented"
    )
