"""Base interface for integrators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..forcefields import ForceProvider
    from ..system import ParticleSystem


class Integrator(ABC):
    """
    Abstract base class for time integration algorithms.

    Integrators advance a particle system by one fixed timestep, calling the
    force provider for the accelerations they need. Steps are strictly
    sequential.
    """

    @abstractmethod
    def step(self, system: ParticleSystem, force_provider: ForceProvider) -> float:
        """
        Advance the system by one time step, in place.

        Args:
            system: Particle system; ``accelerations`` must hold the
                accelerations at the current positions.
            force_provider: Force computation module.

        Returns:
            Potential energy of the new configuration.
        """
        ...

    @property
    @abstractmethod
    def timestep(self) -> float:
        """Return the integration timestep."""
        ...
