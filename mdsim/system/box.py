"""Cubic simulation cell."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..config import integer_cube_root
from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class CubicCell:
    """
    Closed cubic simulation cell with one corner at ``origin``.

    Every axis spans ``[origin, origin + side]``.

    Attributes:
        side: Edge length of the cube.
        origin: Coordinate of the lower corner on every axis.
    """

    side: float
    origin: float = 0.0

    def __post_init__(self) -> None:
        """Validate and convert the geometry."""
        side = float(self.side)
        origin = float(self.origin)
        if not math.isfinite(side) or side <= 0:
            raise ConfigurationError(f"cell side must be positive, got {self.side}")
        if not math.isfinite(origin):
            raise ConfigurationError(f"cell origin must be finite, got {self.origin}")
        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(self, "side", side)
        object.__setattr__(self, "origin", origin)

    @classmethod
    def for_particles(cls, n_particles: int) -> CubicCell:
        """Create the cell of side ``cbrt(n_particles)`` at the origin."""
        return cls(float(integer_cube_root(n_particles)))

    @property
    def low(self) -> float:
        """Return the lower bound shared by all axes."""
        return self.origin

    @property
    def high(self) -> float:
        """Return the upper bound shared by all axes."""
        return self.origin + self.side

    @property
    def lengths(self) -> NDArray[np.floating]:
        """Return cell lengths [lx, ly, lz]."""
        return np.full(3, self.side)

    @property
    def volume(self) -> float:
        """Return cell volume."""
        return self.side**3

    def outside(self, positions: NDArray[np.floating]) -> NDArray[np.bool_]:
        """
        Flag coordinates lying strictly outside the cell.

        Args:
            positions: Positions array of shape (3, N).

        Returns:
            Boolean array of shape (3, N), True where the coordinate on that
            axis is below ``low`` or above ``high``.
        """
        positions = np.asarray(positions)
        return (positions < self.low) | (positions > self.high)

    def contains(self, positions: NDArray[np.floating]) -> NDArray[np.bool_]:
        """Return a per-particle mask, True where all three coordinates are inside."""
        return ~self.outside(positions).any(axis=0)
