"""
mdsim - Lennard-Jones particle dynamics in a closed cubic cell.

Particles start on a simple cubic lattice with normally distributed
velocities and are advanced with velocity Verlet; walls reflect the velocity
component of any particle that leaves the cell.

Quick Start:
    >>> from mdsim import SimulationParameters, simulate
    >>> params = SimulationParameters(n_particles=27, n_steps=100, serialize=False)
    >>> result = simulate.run(params)
"""

__version__ = "1.0.0"

# High-level APIs
from . import plotting, simulate
from .boundaries import ClosedBoundary, make_boundary
from .config import BoundaryMode, SimulationParameters, load_parameters
from .engines import MDEngine
from .exceptions import (
    ConfigurationError,
    NumericalDomainError,
    SimulationError,
    UnsupportedModeError,
)
from .forcefields import LennardJonesForce
from .integrators import VelocityVerletIntegrator

# Core components for advanced users
from .system import CubicCell, NormalVelocitySampler, ParticleSystem, cubic_lattice

__all__ = [
    "simulate",
    "plotting",
    "BoundaryMode",
    "ClosedBoundary",
    "ConfigurationError",
    "CubicCell",
    "LennardJonesForce",
    "MDEngine",
    "NormalVelocitySampler",
    "NumericalDomainError",
    "ParticleSystem",
    "SimulationError",
    "SimulationParameters",
    "UnsupportedModeError",
    "VelocityVerletIntegrator",
    "cubic_lattice",
    "load_parameters",
    "make_boundary",
]
