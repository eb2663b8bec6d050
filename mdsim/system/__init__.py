"""Particle state, simulation cell and initial conditions."""

from .box import CubicCell
from .lattice import cubic_lattice
from .state import FrozenParticleSystem, ParticleSystem
from .velocities import NormalVelocitySampler, VelocitySampler

__all__ = [
    "CubicCell",
    "FrozenParticleSystem",
    "NormalVelocitySampler",
    "ParticleSystem",
    "VelocitySampler",
    "cubic_lattice",
]
