"""In-memory infrastructure package (test double for the transport)."""

from .transport import InMemoryTransport, RecordedRequest, ScriptedReply

__all__ = ['InMemoryTransport', 'RecordedRequest', 'ScriptedReply']
