"""Lennard-Jones force implementation."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from ..exceptions import ConfigurationError, NumericalDomainError
from ..parallel import ParallelBackend, SerialBackend
from .base import ForceProvider


def _pair_chunk_forces(
    args: tuple[NDArray[np.floating], NDArray[np.integer], NDArray[np.integer], float, float],
) -> tuple[NDArray[np.floating], float]:
    """
    Forces and energy from one chunk of the pair list.

    Module level so that process pools can pickle it. Each call writes only
    into its own freshly allocated array.
    """
    positions, i_indices, j_indices, epsilon, sigma = args
    n_particles = positions.shape[1]
    forces = np.zeros((3, n_particles), dtype=np.float64)

    # Displacement from j to i: positive magnitude pushes i away from j
    dr = positions[:, i_indices] - positions[:, j_indices]
    r = np.sqrt(np.sum(dr**2, axis=0))

    bad = ~np.isfinite(r) | (r == 0.0)
    if np.any(bad):
        k = int(np.argmax(bad))
        raise NumericalDomainError(
            f"particles {int(i_indices[k])} and {int(j_indices[k])} are at "
            f"distance {r[k]}; the pair force is undefined"
        )

    with np.errstate(over="ignore", invalid="ignore"):
        sig_over_r = sigma / r
        sig_over_r_6 = sig_over_r**6
        sig_over_r_7 = sig_over_r_6 * sig_over_r
        sig_over_r_12 = sig_over_r_6**2
        sig_over_r_13 = sig_over_r_12 * sig_over_r

        force_mag = 24.0 * epsilon * (2.0 * sig_over_r_13 - sig_over_r_7)
        force_vectors = force_mag * (dr / r)

        energy = float(4.0 * epsilon * sigma * np.sum(sig_over_r_12 - sig_over_r_6))

    # Newton's third law
    np.add.at(forces.T, i_indices, force_vectors.T)
    np.add.at(forces.T, j_indices, -force_vectors.T)

    return forces, energy


class LennardJonesForce(ForceProvider):
    """
    Lennard-Jones 12-6 pair force for a single particle species.

    Pair force on particle i from particle j at separation r:

        F = 24 * epsilon * [2*(sigma/r)^13 - (sigma/r)^7] * (r_i - r_j) / r

    A positive magnitude is repulsive. The force vanishes at the
    equilibrium distance sigma * 2^(1/6), is repulsive below it and
    attractive above it.

    Every unordered pair is evaluated once (O(N^2)) and applied with
    opposite signs to both partners. Pairs can be split across the workers
    of a parallel backend; partial force arrays are summed afterwards.

    Attributes:
        epsilon: Interaction strength.
        sigma: Characteristic length.
        mass: Particle mass.
        backend: Parallel backend distributing pair chunks.
    """

    def __init__(
        self,
        epsilon: float = 1.0,
        sigma: float = 0.1,
        mass: float = 1.0,
        backend: ParallelBackend | None = None,
    ) -> None:
        """
        Initialize Lennard-Jones force.

        Args:
            epsilon: Interaction strength.
            sigma: Characteristic length.
            mass: Mass of every particle.
            backend: Parallel backend; defaults to serial evaluation.
        """
        for name, value in (("epsilon", epsilon), ("sigma", sigma), ("mass", mass)):
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be positive and finite, got {value}")

        self.epsilon = float(epsilon)
        self.sigma = float(sigma)
        self.mass = float(mass)
        self.backend = backend if backend is not None else SerialBackend()

    @property
    def equilibrium_distance(self) -> float:
        """Return the zero-force separation sigma * 2^(1/6)."""
        return self.sigma * 2.0 ** (1.0 / 6.0)

    def pair_force_magnitude(self, r: float | NDArray[np.floating]) -> float | NDArray[np.floating]:
        """
        Return the signed pair force magnitude at separation ``r``.

        Positive values are repulsive, negative values attractive.
        """
        sig_over_r = self.sigma / np.asarray(r, dtype=np.float64)
        magnitude = 24.0 * self.epsilon * (2.0 * sig_over_r**13 - sig_over_r**7)
        return float(magnitude) if np.ndim(magnitude) == 0 else magnitude

    def pair_energy(self, r: float | NDArray[np.floating]) -> float | NDArray[np.floating]:
        """Return the pair potential whose negative derivative is the pair force."""
        sig_over_r = self.sigma / np.asarray(r, dtype=np.float64)
        energy = 4.0 * self.epsilon * self.sigma * (sig_over_r**12 - sig_over_r**6)
        return float(energy) if np.ndim(energy) == 0 else energy

    def _evaluate(
        self, positions: NDArray[np.floating]
    ) -> tuple[NDArray[np.floating], float]:
        positions = np.asarray(positions, dtype=np.float64)
        if positions.ndim != 2 or positions.shape[0] != 3:
            raise ValueError(f"positions must have shape (3, N), got {positions.shape}")

        n = positions.shape[1]
        forces = np.zeros((3, n), dtype=np.float64)
        if n < 2:
            return forces, 0.0

        i_indices, j_indices = np.triu_indices(n, k=1)
        n_chunks = min(self.backend.n_workers, len(i_indices))
        chunks = [
            (positions, i_chunk, j_chunk, self.epsilon, self.sigma)
            for i_chunk, j_chunk in zip(
                np.array_split(i_indices, n_chunks), np.array_split(j_indices, n_chunks)
            )
        ]

        results = self.backend.parallel_map(_pair_chunk_forces, chunks)
        forces = self.backend.reduce_sum([partial for partial, _ in results])
        energy = float(sum(partial_energy for _, partial_energy in results))

        if not np.all(np.isfinite(forces)):
            raise NumericalDomainError(
                "non-finite Lennard-Jones forces; particles are too close together"
            )

        return forces, energy

    def compute(self, positions: NDArray[np.floating]) -> NDArray[np.floating]:
        """
        Compute Lennard-Jones forces.

        Args:
            positions: Particle positions, shape (3, N). Not modified.

        Returns:
            Forces array of shape (3, N).

        Raises:
            NumericalDomainError: For coincident or non-finite positions, or
                when the forces overflow.
        """
        forces, _ = self._evaluate(positions)
        return forces

    def compute_with_energy(
        self, positions: NDArray[np.floating]
    ) -> tuple[NDArray[np.floating], float]:
        """Compute Lennard-Jones forces and potential energy."""
        return self._evaluate(positions)
