"""Snapshot serialization and output directories."""

from .output import create_output_directory, run_directory_name
from .snapshots import (
    format_snapshot,
    read_snapshot,
    snapshot_filename,
    write_snapshot,
)

__all__ = [
    "create_output_directory",
    "format_snapshot",
    "read_snapshot",
    "run_directory_name",
    "snapshot_filename",
    "write_snapshot",
]
