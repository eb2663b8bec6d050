"""Force field implementations."""

from .base import ForceProvider
from .lj import LennardJonesForce

__all__ = ["ForceProvider", "LennardJonesForce"]
