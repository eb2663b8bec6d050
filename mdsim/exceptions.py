"""Exceptions raised by the simulation core."""

from __future__ import annotations


class SimulationError(RuntimeError):
    """Base class for all errors raised by the simulation core."""


class ConfigurationError(SimulationError, ValueError):
    """
    Invalid run configuration.

    Raised before any integration happens, e.g. for a particle count without
    an integer cube root or a non-positive timestep.
    """


class NumericalDomainError(SimulationError, FloatingPointError):
    """
    The simulation left its valid numerical regime.

    Raised by force providers for coincident particles or non-finite forces.
    Never retried: the computation is deterministic.
    """


class UnsupportedModeError(SimulationError, NotImplementedError):
    """A declared but unimplemented mode was requested."""
