"""HTTP infrastructure package."""

from .transport import RequestsTransport

__all__ = ['RequestsTransport']
