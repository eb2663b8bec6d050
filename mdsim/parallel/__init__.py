"""Parallel execution of force evaluations."""

from .backends.base import ParallelBackend
from .backends.multiprocessing_backend import MultiprocessingBackend
from .backends.serial import SerialBackend
from .dispatcher import create_backend, get_backend

__all__ = [
    "ParallelBackend",
    "SerialBackend",
    "MultiprocessingBackend",
    "create_backend",
    "get_backend",
]
