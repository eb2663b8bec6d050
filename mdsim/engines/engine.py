"""MD simulation engine implementation."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from ..boundaries import make_boundary
from ..exceptions import ConfigurationError
from ..forcefields import LennardJonesForce
from ..integrators import VelocityVerletIntegrator
from ..system import CubicCell, NormalVelocitySampler, ParticleSystem, cubic_lattice
from .reporters import Reporter, ReporterGroup

if TYPE_CHECKING:
    from ..config import SimulationParameters
    from ..forcefields import ForceProvider
    from ..integrators import Integrator
    from ..parallel import ParallelBackend
    from ..system import VelocitySampler


class MDEngine:
    """
    Molecular dynamics simulation engine.

    Owns the particle system for the duration of a run and orchestrates the
    main loop:
    - Force seeding before the first step
    - State propagation (integrator, which also applies the boundary)
    - Output (reporters receive frozen snapshots)
    - Cooperative cancellation at step boundaries

    Errors raised by the force provider are never caught here; they end the
    run and reach the caller unchanged.

    Example usage:
        engine = MDEngine.from_parameters(SimulationParameters(n_steps=1000))
        engine.add_reporter(StateReporter(frequency=100))
        engine.run(nsteps=1000)

    Attributes:
        state: Current particle system.
        integrator: Time integration algorithm.
        force_provider: Force computation module.
    """

    def __init__(
        self,
        system: ParticleSystem,
        integrator: Integrator,
        force_provider: ForceProvider,
        reporters: Iterable[Reporter] = (),
    ) -> None:
        """
        Initialize MD engine.

        Args:
            system: Initial particle system; copied, the engine owns its copy.
            integrator: Time integrator.
            force_provider: Force computation module.
            reporters: Reporters to attach.
        """
        self._system = system.copy()
        self._integrator = integrator
        self._force_provider = force_provider
        self._reporters = ReporterGroup(list(reporters))

        # Tracking
        self._running = False
        self._stop_requested = False
        self._total_steps = 0
        self._wall_time = 0.0

        # Seed accelerations at the initial positions
        accelerations, energy = force_provider.accelerations_with_energy(
            self._system.positions
        )
        self._system.accelerations = accelerations
        self._last_potential_energy = energy

    @classmethod
    def from_parameters(
        cls,
        params: SimulationParameters,
        sampler: VelocitySampler | None = None,
        backend: ParallelBackend | None = None,
        reporters: Iterable[Reporter] = (),
    ) -> MDEngine:
        """
        Build an engine from run parameters.

        Particles start on the cubic lattice with sampled velocities inside
        a closed cell of side ``cbrt(N)``.

        Args:
            params: Validated run parameters.
            sampler: Velocity sampler; defaults to a normal sampler seeded
                with ``params.seed``.
            backend: Parallel backend for the force evaluation.
            reporters: Reporters to attach.

        Raises:
            UnsupportedModeError: If an open boundary is requested.
        """
        cell = CubicCell.for_particles(params.n_particles)
        boundary = make_boundary(params.boundary, cell)

        if sampler is None:
            sampler = NormalVelocitySampler(std=params.velocity_std, seed=params.seed)

        system = ParticleSystem.create(
            positions=cubic_lattice(params.n_particles),
            velocities=sampler.sample(params.n_particles),
        )
        force_provider = LennardJonesForce(
            epsilon=params.epsilon,
            sigma=params.sigma,
            mass=params.mass,
            backend=backend,
        )
        integrator = VelocityVerletIntegrator(dt=params.timestep, boundary=boundary)

        return cls(system, integrator, force_provider, reporters)

    @property
    def state(self) -> ParticleSystem:
        """Return current particle system."""
        return self._system

    @property
    def integrator(self) -> Integrator:
        """Return integrator."""
        return self._integrator

    @property
    def force_provider(self) -> ForceProvider:
        """Return force provider."""
        return self._force_provider

    @property
    def reporters(self) -> ReporterGroup:
        """Return attached reporters."""
        return self._reporters

    @property
    def potential_energy(self) -> float:
        """Return last computed potential energy."""
        return self._last_potential_energy

    @property
    def kinetic_energy(self) -> float:
        """Return current kinetic energy."""
        return self._system.kinetic_energy(self._force_provider.mass)

    @property
    def total_energy(self) -> float:
        """Return total energy."""
        return self.kinetic_energy + self.potential_energy

    @property
    def performance(self) -> dict[str, float]:
        """Return performance statistics."""
        if self._wall_time == 0:
            return {"steps_per_second": 0.0, "wall_time": 0.0, "total_steps": 0}

        return {
            "steps_per_second": self._total_steps / self._wall_time,
            "wall_time": self._wall_time,
            "total_steps": self._total_steps,
        }

    def add_reporter(self, reporter: Reporter) -> None:
        """Add a reporter."""
        self._reporters.add(reporter)

    def remove_reporter(self, reporter: Reporter) -> None:
        """Remove a reporter."""
        self._reporters.remove(reporter)

    def step(self) -> None:
        """
        Perform a single simulation step.

        1. Integration step (positions, forces, velocities, boundary)
        2. Report
        """
        self._last_potential_energy = self._integrator.step(
            self._system, self._force_provider
        )

        if self._reporters.due(self._system.step):
            self._reporters.report(
                self._system.freeze(),
                potential_energy=self._last_potential_energy,
                kinetic_energy=self.kinetic_energy,
            )

    def run(
        self,
        nsteps: int,
        callback: Callable[[MDEngine], bool] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ParticleSystem:
        """
        Run simulation for specified number of steps.

        Cancellation is only honoured between steps, never inside one.

        Args:
            nsteps: Number of steps to run; 0 leaves the state untouched.
            callback: Optional callback called after each step.
                     Return True to stop simulation early.
            cancel_event: Optional event; once set, no further step starts.

        Returns:
            Final particle system.
        """
        if isinstance(nsteps, bool) or not isinstance(nsteps, int) or nsteps < 0:
            raise ConfigurationError(f"nsteps must be a non-negative integer, got {nsteps!r}")

        self._running = True
        self._reporters.initialize(self._system.freeze())

        start_time = time.perf_counter()

        try:
            for _ in range(nsteps):
                if self._stop_requested:
                    break
                if cancel_event is not None and cancel_event.is_set():
                    break

                self.step()
                self._total_steps += 1

                if callback is not None and callback(self):
                    break
        except BaseException as exc:
            self._wall_time += time.perf_counter() - start_time
            try:
                self._reporters.finalize(self._system.freeze())
            except Exception as finalize_error:
                # Keep the failure of the run itself as the reported error
                exc.add_note(f"reporter finalization also failed: {finalize_error!r}")
            raise
        else:
            self._wall_time += time.perf_counter() - start_time
            self._reporters.finalize(self._system.freeze())
        finally:
            self._running = False
            self._stop_requested = False

        return self._system

    def stop(self) -> None:
        """
        Signal the simulation to stop before the next step.

        A request made before ``run`` starts stops that run before its first
        step. The request is cleared when ``run`` returns.
        """
        self._stop_requested = True

    @property
    def running(self) -> bool:
        """Return True while ``run`` is executing."""
        return self._running

