"""Run output directories."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

RUN_DIRECTORY_FORMAT = "mds-%d-%m-%Y_%I-%M-%S"


def run_directory_name(now: datetime | None = None) -> str:
    """Return the timestamped directory name for a run started at ``now``."""
    if now is None:
        now = datetime.now()
    return now.strftime(RUN_DIRECTORY_FORMAT)


def create_output_directory(root: str | Path = ".", now: datetime | None = None) -> Path:
    """
    Create the timestamped output directory of a run.

    Args:
        root: Parent directory; created if missing.
        now: Start time of the run. Defaults to the current local time.

    Returns:
        Path of the run directory.
    """
    path = Path(root) / run_directory_name(now)
    path.mkdir(parents=True, exist_ok=True)
    return path
