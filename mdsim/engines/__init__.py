"""Simulation engine and reporters."""

from .engine import MDEngine
from .reporters import (
    CallbackReporter,
    EnergyReporter,
    Reporter,
    ReporterGroup,
    SnapshotReporter,
    StateReporter,
    TrajectoryReporter,
)

__all__ = [
    "MDEngine",
    "Reporter",
    "ReporterGroup",
    "StateReporter",
    "TrajectoryReporter",
    "SnapshotReporter",
    "CallbackReporter",
    "EnergyReporter",
]
