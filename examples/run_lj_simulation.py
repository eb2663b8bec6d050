#!/usr/bin/env python
"""
Example: assembling a Lennard-Jones run from its components.

This script demonstrates how to:
1. Place particles on the cubic lattice inside a closed cell
2. Set up the Lennard-Jones force on a process pool
3. Integrate with velocity Verlet and reflecting walls
4. Record energies and a trajectory with reporters
5. Plot the results

Usage:
    python examples/run_lj_simulation.py
"""

import numpy as np

from mdsim import plotting
from mdsim.boundaries import ClosedBoundary
from mdsim.engines import EnergyReporter, MDEngine, StateReporter, TrajectoryReporter
from mdsim.forcefields import LennardJonesForce
from mdsim.integrators import VelocityVerletIntegrator
from mdsim.parallel import MultiprocessingBackend
from mdsim.simulate import SimulationResult
from mdsim.system import CubicCell, NormalVelocitySampler, ParticleSystem, cubic_lattice


def main():
    n_particles = 64
    cell = CubicCell.for_particles(n_particles)

    system = ParticleSystem.create(
        positions=cubic_lattice(n_particles),
        velocities=NormalVelocitySampler(std=2.0, seed=7).sample(n_particles),
    )
    print(f"{n_particles} particles in a cell of side {cell.side}")

    with MultiprocessingBackend(n_workers=2) as backend:
        force = LennardJonesForce(epsilon=1.0, sigma=0.1, backend=backend)
        integrator = VelocityVerletIntegrator(dt=1e-4, boundary=ClosedBoundary(cell))

        energies = EnergyReporter(frequency=10)
        trajectory = TrajectoryReporter(frequency=100)
        engine = MDEngine(
            system,
            integrator,
            force,
            reporters=[energies, trajectory, StateReporter(frequency=500)],
        )
        final = engine.run(5000)

    inside = cell.contains(final.positions)
    print(f"\nParticles inside the cell: {np.count_nonzero(inside)}/{n_particles}")
    print(f"Frames stored: {trajectory.n_frames}")
    print(f"Steps per second: {engine.performance['steps_per_second']:.1f}")

    result = SimulationResult(
        final_state=final,
        times=energies.times,
        kinetic_energy=energies.kinetic_energy,
        potential_energy=energies.potential_energy,
        total_energy=energies.total_energy,
        n_particles=n_particles,
        n_steps=final.step,
        timestep=integrator.timestep,
        cell_side=float(cell.side),
    )

    plotting.energy(result, show=False)
    plotting.save("lj_energy.png")
    plotting.positions(final.positions, cell=cell, show=False)
    plotting.save("lj_positions.png")
    plotting.close()


if __name__ == "__main__":
    main()
