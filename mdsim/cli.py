"""Command line entry point."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from . import __version__, simulate
from .config import SimulationParameters, load_parameters
from .exceptions import ConfigurationError, SimulationError, UnsupportedModeError
from .parallel import MultiprocessingBackend, get_backend


def banner() -> str:
    """Return the startup banner."""
    return f"Molecular Dynamic Simulation (Ver. {__version__})"


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mdsim",
        description="Lennard-Jones particles in a closed cubic cell (velocity Verlet).",
    )
    parser.add_argument("--config", default=None, help="YAML file with run parameters.")
    parser.add_argument(
        "--particles", type=int, default=None, help="Number of particles (a perfect cube)."
    )
    parser.add_argument("--timestep", type=float, default=None, help="Integration timestep.")
    parser.add_argument("--steps", type=int, default=None, help="Number of steps.")
    parser.add_argument("--seed", type=int, default=None, help="Velocity sampler seed.")
    parser.add_argument(
        "--output-root", default=None, help="Directory receiving the run directory."
    )
    parser.add_argument(
        "--no-serialize",
        action="store_true",
        help="Do not write per-step position snapshots.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker processes for the force evaluation (1 = serial).",
    )
    parser.add_argument(
        "--progress-every",
        type=int,
        default=0,
        metavar="N",
        help="Print a state line every N steps.",
    )
    parser.add_argument("--plot", default=None, metavar="FILE", help="Save an energy plot.")
    parser.add_argument(
        "--skip-banner",
        action="store_true",
        help="Suppress the startup banner (useful for scripts).",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress the run summary.")
    return parser.parse_args(argv)


def _build_parameters(args: argparse.Namespace) -> SimulationParameters:
    params = load_parameters(args.config) if args.config else SimulationParameters()

    overrides = {
        "n_particles": args.particles,
        "timestep": args.timestep,
        "n_steps": args.steps,
        "seed": args.seed,
        "output_root": args.output_root,
    }
    changes = {key: value for key, value in overrides.items() if value is not None}
    if args.no_serialize:
        changes["serialize"] = False

    return params.replace(**changes) if changes else params


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run one simulation from command line arguments.

    Returns:
        Exit status: 0 on success, 2 for configuration errors, 1 when the
        simulation fails.
    """
    args = _parse_args(argv)

    if not args.skip_banner:
        print(banner())

    try:
        params = _build_parameters(args)
    except (ConfigurationError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.workers < 1:
        print(f"error: --workers must be positive, got {args.workers}", file=sys.stderr)
        return 2
    backend = (
        get_backend("multiprocessing", n_workers=args.workers)
        if args.workers > 1
        else get_backend()
    )

    try:
        result = simulate.run(
            params,
            backend=backend,
            progress_every=args.progress_every,
            verbose=not args.quiet,
        )
    except (ConfigurationError, UnsupportedModeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except SimulationError as exc:
        print(f"simulation failed: {exc}", file=sys.stderr)
        return 1
    finally:
        if isinstance(backend, MultiprocessingBackend):
            backend.shutdown()

    if args.plot:
        from . import plotting

        plotting.energy(result, show=False)
        plotting.save(args.plot)
        plotting.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
