"""Particle system state representation."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray


def _check_shape(name: str, array: NDArray[np.floating], n_particles: int) -> None:
    if array.shape != (3, n_particles):
        raise ValueError(
            f"{name} shape {array.shape} incompatible with {n_particles} particles; "
            "expected (3, N)"
        )


@dataclass
class ParticleSystem:
    """
    Single source of truth for the particle state.

    A pure data container owned by the integrator for the duration of a
    run. Arrays are column-per-particle: row k holds the k-th Cartesian
    component of every particle.

    Attributes:
        positions: Particle positions, shape (3, N).
        velocities: Particle velocities, shape (3, N).
        accelerations: Particle accelerations, shape (3, N).
        time: Current simulation time.
        step: Number of completed integration steps.
    """

    positions: NDArray[np.floating]
    velocities: NDArray[np.floating]
    accelerations: NDArray[np.floating]
    time: float = 0.0
    step: int = 0

    def __post_init__(self) -> None:
        """Validate and convert arrays."""
        self.positions = np.array(self.positions, dtype=np.float64)
        self.velocities = np.array(self.velocities, dtype=np.float64)
        self.accelerations = np.array(self.accelerations, dtype=np.float64)

        if self.positions.ndim != 2 or self.positions.shape[0] != 3:
            raise ValueError(
                f"positions must have shape (3, N), got {self.positions.shape}"
            )
        n_particles = self.positions.shape[1]
        _check_shape("velocities", self.velocities, n_particles)
        _check_shape("accelerations", self.accelerations, n_particles)

    @property
    def n_particles(self) -> int:
        """Return number of particles."""
        return self.positions.shape[1]

    @classmethod
    def create(
        cls,
        positions: ArrayLike,
        velocities: ArrayLike | None = None,
        accelerations: ArrayLike | None = None,
        time: float = 0.0,
        step: int = 0,
    ) -> ParticleSystem:
        """
        Create a system with optional velocity/acceleration initialization.

        Args:
            positions: Particle positions, shape (3, N).
            velocities: Particle velocities, shape (3, N). Defaults to zeros.
            accelerations: Accelerations, shape (3, N). Defaults to zeros.
            time: Current simulation time.
            step: Number of completed steps.

        Returns:
            New ParticleSystem instance.
        """
        positions = np.asarray(positions, dtype=np.float64)

        if velocities is None:
            velocities = np.zeros_like(positions)
        if accelerations is None:
            accelerations = np.zeros_like(positions)

        return cls(
            positions=positions,
            velocities=velocities,
            accelerations=accelerations,
            time=time,
            step=step,
        )

    def copy(self) -> ParticleSystem:
        """Create a deep copy of this system."""
        return ParticleSystem(
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            accelerations=self.accelerations.copy(),
            time=self.time,
            step=self.step,
        )

    def freeze(self) -> FrozenParticleSystem:
        """Create an immutable snapshot of this system."""
        return FrozenParticleSystem(
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            accelerations=self.accelerations.copy(),
            time=self.time,
            step=self.step,
        )

    def kinetic_energy(self, mass: float = 1.0) -> float:
        """Compute total kinetic energy: sum(0.5 * m * v^2)."""
        return float(0.5 * mass * np.sum(self.velocities**2))

    def center_of_mass_velocity(self) -> NDArray[np.floating]:
        """Compute center of mass velocity (uniform masses)."""
        return self.velocities.mean(axis=1)


@dataclass(frozen=True)
class FrozenParticleSystem:
    """
    Immutable snapshot of the particle state.

    Handed to reporters so that slow consumers never observe later steps.
    """

    positions: NDArray[np.floating]
    velocities: NDArray[np.floating]
    accelerations: NDArray[np.floating]
    time: float
    step: int

    def __post_init__(self) -> None:
        """Make arrays read-only."""
        self.positions.flags.writeable = False
        self.velocities.flags.writeable = False
        self.accelerations.flags.writeable = False

    @property
    def n_particles(self) -> int:
        """Return number of particles."""
        return self.positions.shape[1]

    def kinetic_energy(self, mass: float = 1.0) -> float:
        """Compute total kinetic energy: sum(0.5 * m * v^2)."""
        return float(0.5 * mass * np.sum(self.velocities**2))

    def thaw(self) -> ParticleSystem:
        """Create a mutable copy of this frozen snapshot."""
        return ParticleSystem(
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            accelerations=self.accelerations.copy(),
            time=self.time,
            step=self.step,
        )
