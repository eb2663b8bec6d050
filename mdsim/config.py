"""Run configuration."""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from .exceptions import ConfigurationError


class BoundaryMode(str, Enum):
    """Boundary handling at the faces of the simulation cell."""

    CLOSED = "closed"
    # Periodic wrapping; declared but not supported.
    OPEN = "open"


def integer_cube_root(n: int) -> int:
    """
    Return the integer side length ``s`` with ``s**3 == n``.

    Args:
        n: Number of particles.

    Returns:
        Cube root of ``n``.

    Raises:
        ConfigurationError: If ``n`` is not a positive perfect cube.
    """
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise ConfigurationError(f"particle count must be an integer, got {n!r}")
    n = int(n)
    if n < 1:
        raise ConfigurationError(f"particle count must be positive, got {n}")

    guess = round(n ** (1.0 / 3.0))
    for side in (guess - 1, guess, guess + 1):
        if side > 0 and side**3 == n:
            return side

    raise ConfigurationError(
        f"particle count {n} has no integer cube root; "
        "the lattice and cell need a perfect cube"
    )


@dataclass(frozen=True)
class SimulationParameters:
    """
    Immutable parameters of one simulation run.

    Defaults reproduce the reference argon-like setup: 64 particles on a
    4x4x4 lattice, sigma = 0.1, epsilon = 1, unit mass.

    Attributes:
        n_particles: Number of particles; must be a perfect cube.
        timestep: Integration timestep.
        n_steps: Total number of integration steps.
        epsilon: Lennard-Jones well depth.
        sigma: Lennard-Jones characteristic length.
        mass: Mass of every particle.
        velocity_std: Standard deviation of the initial velocity components.
        boundary: Boundary mode of the cell.
        serialize: Write a position snapshot after every step.
        output_root: Directory under which the run directory is created.
        seed: Seed for the velocity sampler; None draws fresh entropy.
    """

    n_particles: int = 64
    timestep: float = 1.0e-6
    n_steps: int = 1_000_000
    epsilon: float = 1.0
    sigma: float = 0.1
    mass: float = 1.0
    velocity_std: float = 2.0
    boundary: BoundaryMode = BoundaryMode.CLOSED
    serialize: bool = True
    output_root: str = "."
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate parameters; every violation is fatal."""
        integer_cube_root(self.n_particles)

        if isinstance(self.n_steps, bool) or not isinstance(self.n_steps, (int, np.integer)):
            raise ConfigurationError(f"n_steps must be an integer, got {self.n_steps!r}")
        if self.n_steps <= 0:
            raise ConfigurationError(f"n_steps must be positive, got {self.n_steps}")

        for name in ("timestep", "epsilon", "sigma", "mass", "velocity_std"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
                raise ConfigurationError(f"{name} must be a real number, got {value!r}")

        for name in ("timestep", "epsilon", "sigma", "mass"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be positive and finite, got {value}")

        if not math.isfinite(self.velocity_std) or self.velocity_std < 0:
            raise ConfigurationError(
                f"velocity_std must be non-negative, got {self.velocity_std}"
            )

        if self.seed is not None and (
            isinstance(self.seed, bool)
            or not isinstance(self.seed, (int, np.integer))
            or self.seed < 0
        ):
            raise ConfigurationError(
                f"seed must be a non-negative integer or None, got {self.seed!r}"
            )

        if not isinstance(self.serialize, (bool, np.bool_)):
            raise ConfigurationError(f"serialize must be true or false, got {self.serialize!r}")

        try:
            boundary = BoundaryMode(self.boundary)
        except (TypeError, ValueError):
            raise ConfigurationError(f"unknown boundary mode {self.boundary!r}") from None
        object.__setattr__(self, "boundary", boundary)

    @property
    def cell_side(self) -> int:
        """Return the side length of the cubic cell."""
        return integer_cube_root(self.n_particles)

    @property
    def total_time(self) -> float:
        """Return the simulated time covered by the run."""
        return self.n_steps * self.timestep

    def replace(self, **changes: Any) -> SimulationParameters:
        """Return a validated copy with the given fields changed."""
        return dataclasses.replace(self, **changes)


_FIELDS = {f.name for f in dataclasses.fields(SimulationParameters)}


def parameters_from_mapping(raw: Mapping[str, Any]) -> SimulationParameters:
    """
    Build parameters from a plain mapping.

    Keys may sit at the top level or under a ``simulation`` mapping.

    Raises:
        ConfigurationError: On unknown keys or invalid values.
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"configuration must be a mapping, got {type(raw).__name__}"
        )
    if "simulation" in raw:
        raw = raw["simulation"] or {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError("the 'simulation' section must be a mapping")

    unknown = sorted(set(raw) - _FIELDS)
    if unknown:
        raise ConfigurationError(f"unknown configuration keys: {', '.join(unknown)}")

    values = dict(raw)
    for name in ("timestep", "epsilon", "sigma", "mass", "velocity_std"):
        if name in values:
            try:
                values[name] = float(values[name])
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(
                    f"{name} must be a number, got {values[name]!r}"
                ) from exc
    if "output_root" in values:
        values["output_root"] = str(values["output_root"])

    return SimulationParameters(**values)


def load_parameters(path: str | Path) -> SimulationParameters:
    """
    Load parameters from a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Validated simulation parameters.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: On malformed YAML or invalid parameters.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found at {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"invalid YAML in {config_path}: {exc}") from exc

    return parameters_from_mapping({} if raw is None else raw)
