"""Velocity Verlet integrator implementation."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..exceptions import ConfigurationError
from .base import Integrator

if TYPE_CHECKING:
    from ..boundaries import BoundaryCondition
    from ..forcefields import ForceProvider
    from ..system import ParticleSystem


class VelocityVerletIntegrator(Integrator):
    """
    Velocity Verlet (Stoermer) integrator with one force evaluation per step.

    Algorithm:
        r(t + dt) = r(t) + dt * v(t) + 0.5 * dt^2 * a(t)
        a(t + dt) = F(r(t + dt)) / m
        v(t + dt) = v(t) + 0.5 * dt * (a(t) + a(t + dt))

    Only a(t + dt) is stored back, so the next step starts from the new
    accelerations alone. The optional boundary handler runs after the
    velocity update.

    Properties:
    - Symplectic and time-reversible
    - Second-order accurate
    - Bounded long-run energy error, not exact conservation

    Attributes:
        boundary: Boundary handler applied after each step, or None.
    """

    def __init__(self, dt: float, boundary: BoundaryCondition | None = None) -> None:
        """
        Initialize Velocity Verlet integrator.

        Args:
            dt: Integration timestep.
            boundary: Boundary handler applied after every step.
        """
        if not math.isfinite(dt) or dt <= 0:
            raise ConfigurationError(f"timestep must be positive and finite, got {dt}")
        self._dt = float(dt)
        self.boundary = boundary

    @property
    def timestep(self) -> float:
        """Return the integration timestep."""
        return self._dt

    def step(self, system: ParticleSystem, force_provider: ForceProvider) -> float:
        """
        Perform one Velocity Verlet step.

        The system is only modified once the new accelerations are known, so
        a failing force evaluation leaves it at the previous step.

        Args:
            system: Particle system with accelerations at current positions.
            force_provider: Force computation module.

        Returns:
            Potential energy at the new positions.
        """
        dt = self._dt
        accel_old = system.accelerations

        positions_new = system.positions + dt * system.velocities + 0.5 * dt**2 * accel_old

        accel_new, energy = force_provider.accelerations_with_energy(positions_new)

        accel_combined = accel_old + accel_new
        velocities_new = system.velocities + 0.5 * dt * accel_combined

        system.positions = positions_new
        system.velocities = velocities_new
        system.accelerations = accel_new
        system.time += dt
        system.step += 1

        if self.boundary is not None:
            self.boundary.apply(system.positions, system.velocities)

        return energy
