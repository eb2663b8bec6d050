"""
Simple high-level simulation API.

This module wires run parameters, the engine and the output reporters
together for a single run.

Example:
    >>> from mdsim import SimulationParameters, simulate
    >>> params = SimulationParameters(n_particles=27, n_steps=100, seed=1, serialize=False)
    >>> result = simulate.run(params, verbose=False)
    >>> print(result.final_state.positions.shape)
    (3, 27)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import numpy as np
from numpy.typing import NDArray

from .config import SimulationParameters
from .engines import EnergyReporter, MDEngine, SnapshotReporter, StateReporter
from .io import create_output_directory

if TYPE_CHECKING:
    import threading

    from .parallel import ParallelBackend
    from .system import ParticleSystem, VelocitySampler


@dataclass
class SimulationResult:
    """Results from a simulation run."""

    final_state: ParticleSystem

    # Energy time series
    times: NDArray[np.floating] = field(default_factory=lambda: np.array([]))
    kinetic_energy: NDArray[np.floating] = field(default_factory=lambda: np.array([]))
    potential_energy: NDArray[np.floating] = field(default_factory=lambda: np.array([]))
    total_energy: NDArray[np.floating] = field(default_factory=lambda: np.array([]))

    # Output
    output_directory: Path | None = None
    snapshot_errors: list[tuple[int, OSError]] = field(default_factory=list)

    # Metadata
    n_particles: int = 0
    n_steps: int = 0
    timestep: float = 0.0
    cell_side: float = 0.0

    @property
    def energy_drift(self) -> float:
        """Return the relative change of total energy over the run."""
        if len(self.total_energy) < 2 or self.total_energy[0] == 0:
            return 0.0
        return float(
            (self.total_energy[-1] - self.total_energy[0]) / abs(self.total_energy[0])
        )


def run(
    params: SimulationParameters | None = None,
    *,
    sampler: VelocitySampler | None = None,
    backend: ParallelBackend | None = None,
    energy_every: int = 1,
    progress_every: int = 0,
    progress_file: TextIO | None = None,
    cancel_event: threading.Event | None = None,
    verbose: bool = True,
) -> SimulationResult:
    """
    Run one simulation from parameters.

    Builds the engine, creates the timestamped output directory and attaches
    a snapshot writer when ``params.serialize`` is set, then integrates
    ``params.n_steps`` steps.

    Args:
        params: Run parameters (default: the reference 64-particle setup).
        sampler: Velocity sampler overriding the normal sampler.
        backend: Parallel backend for the force evaluation.
        energy_every: Record energies every N steps.
        progress_every: Print a state line every N steps (0 disables).
        progress_file: Stream for progress lines (default: stdout).
        cancel_event: Event stopping the run at the next step boundary.
        verbose: Print a run summary.

    Returns:
        SimulationResult with the final state and energy series.
    """
    if params is None:
        params = SimulationParameters()

    engine = MDEngine.from_parameters(params, sampler=sampler, backend=backend)

    energies = EnergyReporter(frequency=energy_every)
    engine.add_reporter(energies)

    if progress_every > 0:
        engine.add_reporter(StateReporter(frequency=progress_every, file=progress_file))

    output_directory = None
    snapshots = None
    if params.serialize:
        output_directory = create_output_directory(params.output_root)
        snapshots = SnapshotReporter(output_directory)
        engine.add_reporter(snapshots)

    if verbose:
        print(
            f"LJ system: N={params.n_particles}, cell={params.cell_side}, "
            f"dt={params.timestep:g}, steps={params.n_steps}"
        )
        if output_directory is not None:
            print(f"Writing snapshots to {output_directory}")
        print("Running...", end=" ", flush=True)

    final_state = engine.run(params.n_steps, cancel_event=cancel_event)

    if verbose:
        print("done")

    result = SimulationResult(
        final_state=final_state,
        times=energies.times,
        kinetic_energy=energies.kinetic_energy,
        potential_energy=energies.potential_energy,
        total_energy=energies.total_energy,
        output_directory=output_directory,
        snapshot_errors=snapshots.errors if snapshots is not None else [],
        n_particles=params.n_particles,
        n_steps=final_state.step,
        timestep=params.timestep,
        cell_side=float(params.cell_side),
    )

    if verbose:
        print("\nResults:")
        print(f"  Steps completed: {result.n_steps}")
        print(f"  Final total energy: {engine.total_energy:.6e}")
        print(f"  Relative energy drift: {result.energy_drift:.2e}")
        print(f"  Steps per second: {engine.performance['steps_per_second']:.1f}")
        if result.snapshot_errors:
            print(f"  Failed snapshot writes: {len(result.snapshot_errors)}")

    return result
