"""Reporter implementations for simulation output."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

import numpy as np

from ..io.snapshots import write_snapshot

if TYPE_CHECKING:
    from ..system import FrozenParticleSystem


class Reporter(ABC):
    """
    Abstract base class for simulation reporters.

    Reporters are called after integration steps with an immutable
    snapshot of the system. They must not influence the physics.
    """

    @abstractmethod
    def report(self, state: FrozenParticleSystem, **kwargs: Any) -> None:
        """
        Generate report for current state.

        Args:
            state: Snapshot of the system after the step.
            **kwargs: Additional information (e.g., energies).
        """
        ...

    @property
    @abstractmethod
    def frequency(self) -> int:
        """Return reporting frequency (every N steps)."""
        ...

    def should_report(self, step: int) -> bool:
        """Check if reporter should run at this step."""
        return step % self.frequency == 0

    def initialize(self, state: FrozenParticleSystem) -> None:
        """Initialize reporter (called before simulation)."""
        pass

    def finalize(self, state: FrozenParticleSystem) -> None:
        """Finalize reporter (called after simulation)."""
        pass


class ReporterGroup:
    """
    Collection of reporters with automatic frequency handling.
    """

    def __init__(self, reporters: list[Reporter] | None = None) -> None:
        self._reporters: list[Reporter] = list(reporters) if reporters else []

    def __len__(self) -> int:
        return len(self._reporters)

    def __iter__(self):
        return iter(self._reporters)

    def add(self, reporter: Reporter) -> None:
        """Add a reporter to the group."""
        self._reporters.append(reporter)

    def remove(self, reporter: Reporter) -> None:
        """Remove a reporter from the group."""
        self._reporters.remove(reporter)

    def due(self, step: int) -> bool:
        """Check if any reporter fires at this step."""
        return any(reporter.should_report(step) for reporter in self._reporters)

    def initialize(self, state: FrozenParticleSystem) -> None:
        """Initialize all reporters."""
        for reporter in self._reporters:
            reporter.initialize(state)

    def report(self, state: FrozenParticleSystem, **kwargs: Any) -> None:
        """Run all reporters that should fire at this step."""
        for reporter in self._reporters:
            if reporter.should_report(state.step):
                reporter.report(state, **kwargs)

    def finalize(self, state: FrozenParticleSystem) -> None:
        """Finalize all reporters."""
        for reporter in self._reporters:
            reporter.finalize(state)


class StateReporter(Reporter):
    """
    Reporter that prints simulation state to console or file.

    Outputs step, time, kinetic energy, potential energy and total energy.
    """

    def __init__(
        self,
        frequency: int = 1000,
        file: TextIO | None = None,
        separator: str = "\t",
    ) -> None:
        """
        Initialize state reporter.

        Args:
            frequency: Reporting frequency (every N steps).
            file: Output file (defaults to stdout).
            separator: Field separator.
        """
        self._frequency = frequency
        self._file = file if file is not None else sys.stdout
        self._separator = separator
        self._header_written = False

    @property
    def frequency(self) -> int:
        return self._frequency

    def initialize(self, state: FrozenParticleSystem) -> None:
        """Write header."""
        if not self._header_written:
            headers = ["Step", "Time", "KE", "PE", "Total"]
            self._file.write(self._separator.join(headers) + "\n")
            self._header_written = True

    def report(self, state: FrozenParticleSystem, **kwargs: Any) -> None:
        """
        Report current state.

        Args:
            state: Current simulation state.
            **kwargs: Should include 'potential_energy' and 'kinetic_energy'.
        """
        pe = kwargs.get("potential_energy", 0.0)
        ke = kwargs.get("kinetic_energy", state.kinetic_energy())
        total = ke + pe

        values = [
            f"{state.step}",
            f"{state.time:.6g}",
            f"{ke:.6f}",
            f"{pe:.6f}",
            f"{total:.6f}",
        ]

        self._file.write(self._separator.join(values) + "\n")
        self._file.flush()


class TrajectoryReporter(Reporter):
    """
    Reporter that keeps positions (and optionally velocities) in memory.
    """

    def __init__(self, frequency: int = 100, include_velocities: bool = False) -> None:
        """
        Initialize trajectory reporter.

        Args:
            frequency: Reporting frequency.
            include_velocities: Also store velocities.
        """
        self._frequency = frequency
        self._include_velocities = include_velocities

        self._positions: list[np.ndarray] = []
        self._velocities: list[np.ndarray] = []
        self._times: list[float] = []
        self._steps: list[int] = []

    @property
    def frequency(self) -> int:
        return self._frequency

    def report(self, state: FrozenParticleSystem, **kwargs: Any) -> None:
        """Store current frame."""
        self._positions.append(np.array(state.positions))
        self._times.append(state.time)
        self._steps.append(state.step)

        if self._include_velocities:
            self._velocities.append(np.array(state.velocities))

    @property
    def n_frames(self) -> int:
        """Return number of stored frames."""
        return len(self._positions)

    @property
    def positions(self) -> np.ndarray:
        """Return positions as (n_frames, 3, n_particles) array."""
        return np.array(self._positions)

    @property
    def velocities(self) -> np.ndarray | None:
        """Return velocities if stored."""
        if not self._include_velocities:
            return None
        return np.array(self._velocities)

    @property
    def times(self) -> np.ndarray:
        """Return times array."""
        return np.array(self._times)

    @property
    def steps(self) -> np.ndarray:
        """Return step indices."""
        return np.array(self._steps, dtype=np.int64)


class CallbackReporter(Reporter):
    """
    Reporter that calls a user-defined function.
    """

    def __init__(
        self,
        callback: Callable[[FrozenParticleSystem, dict[str, Any]], None],
        frequency: int = 1,
    ) -> None:
        """
        Initialize callback reporter.

        Args:
            callback: Function to call with (state, kwargs).
            frequency: Reporting frequency.
        """
        self._callback = callback
        self._frequency = frequency

    @property
    def frequency(self) -> int:
        return self._frequency

    def report(self, state: FrozenParticleSystem, **kwargs: Any) -> None:
        """Call the callback function."""
        self._callback(state, kwargs)


class EnergyReporter(Reporter):
    """
    Reporter that tracks energy components over time.
    """

    def __init__(self, frequency: int = 100) -> None:
        """
        Initialize energy reporter.

        Args:
            frequency: Reporting frequency.
        """
        self._frequency = frequency
        self._steps: list[int] = []
        self._times: list[float] = []
        self._kinetic: list[float] = []
        self._potential: list[float] = []

    @property
    def frequency(self) -> int:
        return self._frequency

    def report(self, state: FrozenParticleSystem, **kwargs: Any) -> None:
        """Record energies."""
        self._steps.append(state.step)
        self._times.append(state.time)
        self._kinetic.append(kwargs.get("kinetic_energy", state.kinetic_energy()))
        self._potential.append(kwargs.get("potential_energy", 0.0))

    @property
    def kinetic_energy(self) -> np.ndarray:
        """Return kinetic energy time series."""
        return np.array(self._kinetic)

    @property
    def potential_energy(self) -> np.ndarray:
        """Return potential energy time series."""
        return np.array(self._potential)

    @property
    def total_energy(self) -> np.ndarray:
        """Return total energy time series."""
        return self.kinetic_energy + self.potential_energy

    @property
    def times(self) -> np.ndarray:
        """Return times array."""
        return np.array(self._times)

    def clear(self) -> None:
        """Clear stored data."""
        self._steps.clear()
        self._times.clear()
        self._kinetic.clear()
        self._potential.clear()


class SnapshotReporter(Reporter):
    """
    Persistence sink writing one CSV position snapshot per reported step.

    Writes run on a single background thread so slow storage never stalls
    the simulation clock. Files are indexed from 0: the positions after the
    first step go to ``mds-0.csv``. Failed writes are collected in
    ``errors`` once the reporter is finalized; they never reach the physics
    loop.
    """

    def __init__(
        self,
        directory: str | Path,
        frequency: int = 1,
        precision: int = 9,
    ) -> None:
        """
        Initialize snapshot reporter.

        Args:
            directory: Existing directory receiving ``mds-<index>.csv`` files.
            frequency: Reporting frequency.
            precision: Decimal places per coordinate.
        """
        self.directory = Path(directory)
        self._frequency = frequency
        self._precision = precision
        self._executor: ThreadPoolExecutor | None = None
        self._pending: list[tuple[int, Future]] = []
        self._n_written = 0
        self._last_written: Path | None = None
        self._errors: list[tuple[int, OSError]] = []

    @property
    def frequency(self) -> int:
        return self._frequency

    def initialize(self, state: FrozenParticleSystem) -> None:
        """Start the writer thread."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="snapshot-writer"
            )

    def report(self, state: FrozenParticleSystem, **kwargs: Any) -> None:
        """Queue the snapshot of this step for writing."""
        if self._executor is None:
            self.initialize(state)
        index = state.step - 1
        future = self._executor.submit(
            write_snapshot, self.directory, index, state.positions, self._precision
        )
        self._pending.append((index, future))
        self._collect(block=False)

    def finalize(self, state: FrozenParticleSystem) -> None:
        """Wait for queued writes and stop the writer thread."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._collect(block=True)

    def _collect(self, block: bool) -> None:
        still_pending = []
        unexpected: BaseException | None = None
        for index, future in self._pending:
            if not block and not future.done():
                still_pending.append((index, future))
                continue
            error = future.exception()
            if error is None:
                self._n_written += 1
                self._last_written = future.result()
            elif isinstance(error, OSError):
                self._errors.append((index, error))
            elif unexpected is None:
                unexpected = error
        self._pending = still_pending
        if unexpected is not None:
            raise unexpected

    @property
    def n_written(self) -> int:
        """Return the number of snapshots written so far."""
        return self._n_written

    @property
    def last_written(self) -> Path | None:
        """Return the most recently written snapshot file."""
        return self._last_written

    @property
    def errors(self) -> list[tuple[int, OSError]]:
        """Return (snapshot index, error) pairs for failed writes."""
        return list(self._errors)
