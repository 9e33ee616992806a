"""Package-manager backend implementations."""

from .debian import DebianBackend
from .rhel import RhelBackend

__all__ = [
    "DebianBackend",
    "RhelBackend",
]
