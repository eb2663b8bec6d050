"""Per-step position snapshots in CSV form.

Format: one row per particle, three comma-separated fixed-decimal
coordinates per row, every row newline-terminated, no header.
"""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from numpy.typing import ArrayLike, NDArray

SNAPSHOT_PREFIX = "mds-"


def snapshot_filename(index: int) -> str:
    """
    Return the file name of snapshot ``index``.

    Indices start at 0 for the positions after the first step, so the
    snapshot after step ``k`` is ``mds-<k-1>.csv``.
    """
    return f"{SNAPSHOT_PREFIX}{index}.csv"


def format_snapshot(positions: ArrayLike, precision: int = 9) -> str:
    """
    Render positions as snapshot text.

    Args:
        positions: Positions array of shape (3, N).
        precision: Decimal places per coordinate.

    Returns:
        Snapshot text with N lines.
    """
    positions = np.asarray(positions, dtype=np.float64)
    if positions.ndim != 2 or positions.shape[0] != 3:
        raise ValueError(f"positions must have shape (3, N), got {positions.shape}")

    buffer = io.StringIO()
    np.savetxt(buffer, positions.T, fmt=f"%.{precision}f", delimiter=",")
    return buffer.getvalue()


def write_snapshot(
    directory: str | Path,
    index: int,
    positions: ArrayLike,
    precision: int = 9,
) -> Path:
    """
    Write the snapshot for one step.

    Args:
        directory: Existing output directory.
        index: Snapshot index used in the file name.
        positions: Positions array of shape (3, N).
        precision: Decimal places per coordinate.

    Returns:
        Path of the written file.
    """
    path = Path(directory) / snapshot_filename(index)
    path.write_text(format_snapshot(positions, precision), encoding="utf-8")
    return path


def read_snapshot(path: str | Path) -> NDArray[np.floating]:
    """
    Read a snapshot back into a (3, N) positions array.

    Args:
        path: Snapshot file.

    Returns:
        Positions array of shape (3, N).
    """
    rows = np.loadtxt(Path(path), delimiter=",", ndmin=2, dtype=np.float64)
    if rows.size == 0:
        return np.zeros((3, 0), dtype=np.float64)
    if rows.shape[1] != 3:
        raise ValueError(f"{path}: expected 3 columns per row, got {rows.shape[1]}")
    return rows.T.copy()
