"""Initial particle placement."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from ..config import integer_cube_root


def cubic_lattice(n_particles: int, spacing: float = 1.0) -> NDArray[np.floating]:
    """
    Place particles on a simple cubic lattice.

    Particle ``i`` sits at integer lattice point ``(i % s, (i // s) % s,
    i // s**2)`` scaled by ``spacing``, i.e. x fills fastest, then y, then z.

    Args:
        n_particles: Number of particles; must be a perfect cube.
        spacing: Distance between neighbouring lattice points.

    Returns:
        Positions array of shape (3, N).

    Raises:
        ConfigurationError: If ``n_particles`` has no integer cube root.
    """
    side = integer_cube_root(n_particles)
    index = np.arange(n_particles)

    positions = np.empty((3, n_particles), dtype=np.float64)
    positions[0] = index % side
    positions[1] = (index // side) % side
    positions[2] = index // (side * side)

    return positions * spacing
