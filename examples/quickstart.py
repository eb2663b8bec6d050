#!/usr/bin/env python
"""
Quick start example - the simplest way to run a simulation.

Runs the reference closed-cell setup at reduced size, once without and
once with CSV snapshots.

Usage:
    python examples/quickstart.py
"""

from mdsim import SimulationParameters, simulate


def main():
    print("=" * 60)
    print("mdsim Quick Start")
    print("=" * 60)

    # 1. In-memory run, nothing written to disk
    print("\n1. 27 particles, no snapshots:")
    print("-" * 40)
    params = SimulationParameters(
        n_particles=27, timestep=1e-4, n_steps=2000, seed=1, serialize=False
    )
    result = simulate.run(params)
    print(f"   Energy conserved: {abs(result.energy_drift) < 1e-3}")

    # 2. Same run with one CSV snapshot per step
    print("\n2. 8 particles, snapshots under ./runs:")
    print("-" * 40)
    params = SimulationParameters(
        n_particles=8, timestep=1e-4, n_steps=200, seed=1, output_root="runs"
    )
    result = simulate.run(params)
    print(f"   Snapshots in: {result.output_directory}")

    print("\n" + "=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
