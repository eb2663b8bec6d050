"""Tests for the simulation engine and reporters."""

import io
import threading

import numpy as np
import pytest

from mdsim.config import SimulationParameters
from mdsim.engines import (
    CallbackReporter,
    EnergyReporter,
    MDEngine,
    SnapshotReporter,
    StateReporter,
    TrajectoryReporter,
)
from mdsim.engines.reporters import Reporter
from mdsim.exceptions import (
    ConfigurationError,
    NumericalDomainError,
    UnsupportedModeError,
)
from mdsim.forcefields import LennardJonesForce
from mdsim.integrators import VelocityVerletIntegrator
from mdsim.io import read_snapshot
from mdsim.system import ParticleSystem, cubic_lattice


class FailAfter(LennardJonesForce):
    """Lennard-Jones force that fails from the n-th evaluation on."""

    def __init__(self, calls, **kwargs):
        super().__init__(**kwargs)
        self.remaining = calls

    def compute_with_energy(self, positions):
        if self.remaining <= 0:
            raise NumericalDomainError("particles 0 and 1 are at distance 0")
        self.remaining -= 1
        return super().compute_with_energy(positions)


class LifecycleReporter(Reporter):
    """Records which hooks were called."""

    def __init__(self):
        self.events = []

    @property
    def frequency(self):
        return 1

    def initialize(self, state):
        self.events.append(("initialize", state.step))

    def report(self, state, **kwargs):
        self.events.append(("report", state.step))

    def finalize(self, state):
        self.events.append(("finalize", state.step))


class BrokenFinalize(Reporter):
    """Reporter whose cleanup always fails."""

    @property
    def frequency(self):
        return 1

    def report(self, state, **kwargs):
        pass

    def finalize(self, state):
        raise RuntimeError("disk full")


@pytest.fixture
def params():
    return SimulationParameters(n_particles=8, timestep=1e-3, n_steps=10, seed=42, serialize=False)


@pytest.fixture
def engine(params):
    return MDEngine.from_parameters(params)


class TestMDEngine:
    """Tests for MDEngine."""

    def test_from_parameters(self, engine, params):
        """Test engine construction from run parameters."""
        state = engine.state

        assert state.positions.shape == (3, 8)
        np.testing.assert_array_equal(state.positions, cubic_lattice(8))
        assert state.step == 0
        assert state.time == 0.0
        assert isinstance(engine.integrator, VelocityVerletIntegrator)
        assert engine.integrator.timestep == params.timestep
        assert engine.integrator.boundary.cell.side == 2
        assert isinstance(engine.force_provider, LennardJonesForce)
        assert engine.force_provider.sigma == params.sigma

    def test_accelerations_seeded(self, engine):
        """Test accelerations are computed before the first step."""
        np.testing.assert_allclose(
            engine.state.accelerations,
            engine.force_provider.accelerations(engine.state.positions),
        )

    def test_engine_owns_copy(self):
        """Test the caller's system is not advanced by the engine."""
        system = ParticleSystem.create(positions=cubic_lattice(8), velocities=np.ones((3, 8)))
        engine = MDEngine(system, VelocityVerletIntegrator(dt=1e-3), LennardJonesForce())

        engine.run(3)

        assert system.step == 0
        np.testing.assert_array_equal(system.positions, cubic_lattice(8))

    def test_open_boundary_unsupported(self, params):
        """Test that open boundaries fail before anything runs."""
        with pytest.raises(UnsupportedModeError):
            MDEngine.from_parameters(params.replace(boundary="open"))

    def test_coincident_particles_on_construction(self):
        """Test that seeding forces rejects coincident particles."""
        positions = cubic_lattice(8)
        positions[:, 3] = positions[:, 2]
        system = ParticleSystem.create(positions=positions)

        with pytest.raises(NumericalDomainError, match="particles 2 and 3"):
            MDEngine(system, VelocityVerletIntegrator(dt=1e-3), LennardJonesForce())

    def test_run_zero_steps(self, engine):
        """Test that zero steps leave the state untouched."""
        before = engine.state.copy()

        final = engine.run(0)

        assert final.step == 0
        np.testing.assert_array_equal(final.positions, before.positions)
        np.testing.assert_array_equal(final.velocities, before.velocities)

    def test_run_steps(self, engine, params):
        """Test a plain run."""
        final = engine.run(10)

        assert final is engine.state
        assert final.step == 10
        assert final.time == pytest.approx(10 * params.timestep)
        assert engine.performance["total_steps"] == 10
        assert not engine.running

    def test_runs_accumulate(self, engine):
        """Test consecutive runs continue from the current state."""
        engine.run(4)
        engine.run(3)

        assert engine.state.step == 7

    @pytest.mark.parametrize("nsteps", [-1, 2.5, True, "3"])
    def test_invalid_nsteps(self, engine, nsteps):
        """Test rejection of invalid step counts."""
        with pytest.raises(ConfigurationError):
            engine.run(nsteps)

    def test_seeded_runs_reproducible(self, params):
        """Test equal seeds give equal trajectories."""
        first = MDEngine.from_parameters(params).run(20)
        second = MDEngine.from_parameters(params).run(20)

        np.testing.assert_array_equal(first.positions, second.positions)
        np.testing.assert_array_equal(first.velocities, second.velocities)

    def test_energies(self, engine):
        """Test energy bookkeeping."""
        engine.run(2)

        assert engine.kinetic_energy == pytest.approx(engine.state.kinetic_energy())
        assert engine.total_energy == pytest.approx(
            engine.kinetic_energy + engine.potential_energy
        )

    def test_callback_stops_run(self, engine):
        """Test early termination from the step callback."""
        final = engine.run(100, callback=lambda eng: eng.state.step >= 5)

        assert final.step == 5

    def test_stop_from_reporter(self, engine):
        """Test stop() takes effect at the next step boundary."""

        def request_stop(state, kwargs):
            if state.step == 2:
                engine.stop()

        engine.add_reporter(CallbackReporter(request_stop))

        assert engine.run(100).step == 2

    def test_cancel_event(self, engine):
        """Test cancellation through an event."""
        event = threading.Event()

        def cancel(state, kwargs):
            if state.step == 3:
                event.set()

        engine.add_reporter(CallbackReporter(cancel))

        assert engine.run(100, cancel_event=event).step == 3

    def test_cancel_event_already_set(self, engine):
        """Test that a set event prevents any step."""
        event = threading.Event()
        event.set()

        assert engine.run(10, cancel_event=event).step == 0

    def test_error_propagates_and_finalizes(self):
        """Test a failing force evaluation ends the run."""
        system = ParticleSystem.create(positions=cubic_lattice(8))
        # One evaluation for seeding, then three steps succeed
        force = FailAfter(4)
        lifecycle = LifecycleReporter()
        engine = MDEngine(system, VelocityVerletIntegrator(dt=1e-3), force, [lifecycle])

        with pytest.raises(NumericalDomainError):
            engine.run(10)

        assert engine.state.step == 3
        assert lifecycle.events[0] == ("initialize", 0)
        assert lifecycle.events[-1] == ("finalize", 3)
        assert not engine.running

    def test_stop_before_run(self, engine):
        """Test a stop request made before run prevents every step."""
        engine.stop()

        assert engine.run(3).step == 0
        # The request does not outlive the run it stopped
        assert engine.run(2).step == 2

    def test_finalize_failure_keeps_run_error(self):
        """Test a failing reporter cleanup does not replace the run error."""
        system = ParticleSystem.create(positions=cubic_lattice(8))
        engine = MDEngine(
            system, VelocityVerletIntegrator(dt=1e-3), FailAfter(3), [BrokenFinalize()]
        )

        with pytest.raises(NumericalDomainError) as excinfo:
            engine.run(5)

        notes = getattr(excinfo.value, "__notes__", [])
        assert any("finalization also failed" in note for note in notes)
        assert engine.state.step == 2
        assert not engine.running

    def test_finalize_failure_after_clean_run(self, engine):
        """Test cleanup errors surface when the run itself succeeded."""
        engine.add_reporter(BrokenFinalize())

        with pytest.raises(RuntimeError, match="disk full"):
            engine.run(2)

        assert not engine.running


class TestReporters:
    """Tests for reporters attached to the engine."""

    def test_reporter_lifecycle(self, engine):
        """Test hook order over a run."""
        lifecycle = LifecycleReporter()
        engine.add_reporter(lifecycle)

        engine.run(2)

        assert lifecycle.events == [
            ("initialize", 0),
            ("report", 1),
            ("report", 2),
            ("finalize", 2),
        ]

    def test_remove_reporter(self, engine):
        """Test detaching a reporter."""
        lifecycle = LifecycleReporter()
        engine.add_reporter(lifecycle)
        engine.remove_reporter(lifecycle)

        engine.run(2)

        assert lifecycle.events == []
        assert len(engine.reporters) == 0

    def test_reporters_get_frozen_state(self, engine):
        """Test reporters cannot write into the simulation state."""
        received = []
        engine.add_reporter(CallbackReporter(lambda state, kwargs: received.append(state)))

        engine.run(1)

        with pytest.raises(ValueError):
            received[0].positions[0, 0] = 5.0

    def test_state_reporter(self, engine):
        """Test tabular state output."""
        buffer = io.StringIO()
        engine.add_reporter(StateReporter(frequency=2, file=buffer))

        engine.run(4)

        lines = buffer.getvalue().splitlines()
        assert lines[0].split("\t") == ["Step", "Time", "KE", "PE", "Total"]
        assert len(lines) == 3
        assert lines[1].startswith("2\t")
        assert lines[2].startswith("4\t")

    def test_trajectory_reporter(self, engine):
        """Test in-memory trajectory storage."""
        trajectory = TrajectoryReporter(frequency=2, include_velocities=True)
        engine.add_reporter(trajectory)

        engine.run(6)

        assert trajectory.n_frames == 3
        assert trajectory.positions.shape == (3, 3, 8)
        assert trajectory.velocities.shape == (3, 3, 8)
        np.testing.assert_array_equal(trajectory.steps, [2, 4, 6])
        np.testing.assert_allclose(trajectory.positions[-1], engine.state.positions)

    def test_energy_reporter(self, engine, params):
        """Test energy time series."""
        energies = EnergyReporter(frequency=1)
        engine.add_reporter(energies)

        engine.run(5)

        assert len(energies.kinetic_energy) == 5
        np.testing.assert_allclose(energies.times, params.timestep * np.arange(1, 6))
        np.testing.assert_allclose(
            energies.total_energy, energies.kinetic_energy + energies.potential_energy
        )
        assert energies.potential_energy[-1] == pytest.approx(engine.potential_energy)

        energies.clear()
        assert len(energies.times) == 0

    def test_snapshot_reporter(self, engine, tmp_path):
        """Test one snapshot file per step."""
        snapshots = SnapshotReporter(tmp_path)
        engine.add_reporter(snapshots)

        engine.run(3)

        names = sorted(path.name for path in tmp_path.iterdir())
        assert names == ["mds-0.csv", "mds-1.csv", "mds-2.csv"]
        assert snapshots.n_written == 3
        assert snapshots.last_written == tmp_path / "mds-2.csv"
        assert snapshots.errors == []
        np.testing.assert_allclose(
            read_snapshot(tmp_path / "mds-2.csv"), engine.state.positions, atol=1e-8
        )

    def test_snapshot_failures_collected(self, engine, tmp_path):
        """Test that failed writes do not stop the run."""
        snapshots = SnapshotReporter(tmp_path / "missing")
        engine.add_reporter(snapshots)

        final = engine.run(3)

        assert final.step == 3
        assert [index for index, _ in snapshots.errors] == [0, 1, 2]
        assert all(isinstance(error, OSError) for _, error in snapshots.errors)
        assert snapshots.n_written == 0
        assert snapshots.last_written is None

    def test_snapshot_unexpected_error_raised(self, engine, tmp_path):
        """Test that writer errors other than OSError end the run."""
        engine.add_reporter(SnapshotReporter(tmp_path, precision="x"))

        with pytest.raises(ValueError):
            engine.run(3)
