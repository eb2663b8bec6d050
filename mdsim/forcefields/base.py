"""Base interface for force providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray


class ForceProvider(ABC):
    """
    Abstract base class for force computation modules.

    Force providers are pure functions of the positions they are given and
    their own parameters: they keep no state between calls and never modify
    the positions array.

    Attributes:
        mass: Mass shared by every particle, used to turn forces into
            accelerations.
    """

    mass: float = 1.0

    @abstractmethod
    def compute(self, positions: NDArray[np.floating]) -> NDArray[np.floating]:
        """
        Compute forces on all particles.

        Args:
            positions: Particle positions, shape (3, N).

        Returns:
            Forces array of shape (3, N).
        """
        ...

    def compute_with_energy(
        self, positions: NDArray[np.floating]
    ) -> tuple[NDArray[np.floating], float]:
        """
        Compute forces and potential energy.

        Default implementation computes forces only; subclasses should
        override if energy is needed.

        Args:
            positions: Particle positions, shape (3, N).

        Returns:
            Tuple of (forces array, potential energy).
        """
        forces = self.compute(positions)
        return forces, 0.0

    def accelerations(self, positions: NDArray[np.floating]) -> NDArray[np.floating]:
        """Compute accelerations a = F / m, shape (3, N)."""
        return self.compute(positions) / self.mass

    def accelerations_with_energy(
        self, positions: NDArray[np.floating]
    ) -> tuple[NDArray[np.floating], float]:
        """Compute accelerations and potential energy in one evaluation."""
        forces, energy = self.compute_with_energy(positions)
        return forces / self.mass, energy
