"""Initial velocity generation."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

from ..exceptions import ConfigurationError


class VelocitySampler(ABC):
    """
    Abstract base class for initial velocity generators.

    Samplers that target a prescribed temperature belong here as further
    subclasses; none is provided.
    """

    @abstractmethod
    def sample(self, n_particles: int) -> NDArray[np.floating]:
        """
        Draw initial velocities.

        Args:
            n_particles: Number of particles.

        Returns:
            Velocities array of shape (3, N).
        """
        ...


class NormalVelocitySampler(VelocitySampler):
    """
    Independent normal velocity components.

    Every Cartesian component of every particle is drawn from
    ``Normal(0, std)``. This does not produce an equilibrated ensemble at any
    particular temperature.

    Attributes:
        std: Standard deviation of each component.
        rng: Random generator used for sampling.
    """

    def __init__(
        self,
        std: float = 2.0,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> None:
        """
        Initialize the sampler.

        Args:
            std: Standard deviation of each velocity component.
            rng: Generator to draw from. Takes precedence over ``seed``.
            seed: Seed for a fresh ``np.random.default_rng`` if no
                generator is given.
        """
        if not math.isfinite(std) or std < 0:
            raise ConfigurationError(f"velocity std must be non-negative, got {std}")
        self.std = float(std)
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def sample(self, n_particles: int) -> NDArray[np.floating]:
        """Draw a (3, N) array of normal velocity components."""
        return self.rng.normal(0.0, self.std, size=(3, n_particles))
