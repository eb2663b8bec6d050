"""
Built-in plotting utilities for simulation results.

Example:
    >>> from mdsim import simulate, plotting
    >>> result = simulate.run(params)
    >>> plotting.energy(result, show=False)
    >>> plotting.save("energy.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike

if TYPE_CHECKING:
    from .simulate import SimulationResult
    from .system import CubicCell

# Try to import matplotlib, but don't fail if not available
try:
    import matplotlib.pyplot as plt

    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False
    plt = None


def _check_matplotlib():
    """Check if matplotlib is available."""
    if not HAS_MATPLOTLIB:
        raise ImportError(
            "matplotlib is required for plotting. "
            "Install it with: pip install matplotlib"
        )


def energy(
    result: SimulationResult,
    show: bool = True,
    figsize: tuple[float, float] = (10, 6),
):
    """
    Plot energy time series.

    Shows kinetic, potential, and total energy vs time, and the relative
    deviation of the total energy from its initial value.

    Args:
        result: SimulationResult from a run.
        show: Whether to display the plot immediately.
        figsize: Figure size (width, height) in inches.

    Returns:
        The matplotlib figure.
    """
    _check_matplotlib()

    fig, axes = plt.subplots(1, 2, figsize=figsize)
    times = result.times

    ax = axes[0]
    ax.plot(times, result.kinetic_energy, "b-", label="Kinetic", alpha=0.7, lw=0.8)
    ax.plot(times, result.potential_energy, "r-", label="Potential", alpha=0.7, lw=0.8)
    ax.plot(times, result.total_energy, "k-", label="Total", lw=1.5)
    ax.set_xlabel("Time")
    ax.set_ylabel("Energy")
    ax.set_title("Energy vs Time")
    ax.legend()
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    if len(result.total_energy) > 0:
        e0 = result.total_energy[0]
        rel_error = (
            (result.total_energy - e0) / abs(e0) * 100
            if e0 != 0
            else result.total_energy * 0
        )
        ax.plot(times, rel_error, "k-", lw=1)
        ax.axhline(y=0, color="r", linestyle="--", alpha=0.5)
    ax.set_xlabel("Time")
    ax.set_ylabel("Relative Energy Error (%)")
    ax.set_title(f"Energy Conservation (drift: {result.energy_drift:.2e})")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    if show:
        plt.show()
    return fig


def positions(
    positions: ArrayLike,
    cell: CubicCell | None = None,
    show: bool = True,
    figsize: tuple[float, float] = (6, 6),
):
    """
    Scatter particle positions in 3D.

    Args:
        positions: Positions array of shape (3, N).
        cell: Optional cell whose edges are drawn.
        show: Whether to display the plot immediately.
        figsize: Figure size (width, height) in inches.

    Returns:
        The matplotlib figure.
    """
    _check_matplotlib()

    positions = np.asarray(positions)
    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(projection="3d")
    ax.scatter(positions[0], positions[1], positions[2], s=20, c="b", alpha=0.8)

    if cell is not None:
        lo, hi = cell.low, cell.high
        corners = np.array(
            [[x, y, z] for x in (lo, hi) for y in (lo, hi) for z in (lo, hi)]
        )
        for a in range(8):
            for b in range(a + 1, 8):
                # Edges join corners differing in exactly one coordinate
                if np.count_nonzero(corners[a] != corners[b]) == 1:
                    ax.plot(*zip(corners[a], corners[b]), "k-", lw=0.5, alpha=0.5)

    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("z")
    ax.set_title(f"{positions.shape[1]} particles")

    if show:
        plt.show()
    return fig


def save(filename: str | Path, dpi: int = 150) -> None:
    """
    Save the current figure to file.

    Args:
        filename: Output filename (e.g., "plot.png", "plot.pdf").
        dpi: Resolution in dots per inch.
    """
    _check_matplotlib()
    plt.savefig(filename, dpi=dpi, bbox_inches="tight")
    print(f"Saved: {filename}")


def close() -> None:
    """Close all open figures."""
    _check_matplotlib()
    plt.close("all")
