"""Domain interfaces package - Protocols for ports."""

from .transport import Transport

__all__ = [
    "Transport",
]
