"""
Transport protocol interface.
Defines the contract for the component that performs the network exchange.
"""

from __future__ import annotations
from typing import Protocol, BinaryIO, Sequence, runtime_checkable

from ..models.upload import FilePart


@runtime_checkable
class Transport(Protocol):
    """Protocol for transport implementations.

    A transport carries mutable in-flight state; it must never be shared
    between two client sessions. Use clone() to get an independent one.
    """

    def fetch(self, url: str, files: Sequence[FilePart], sink: BinaryIO) -> None:
        """Perform the exchange, writing the raw response body into sink.

        Raises TransportFailure (or a subclass) when the exchange does not
        complete, including when it is interrupted by abort_in_flight().
        """
        ...

    def url_encode(self, text: str) -> str:
        """Percent-encode text for use as a query name or value."""
        ...

    def abort_in_flight(self) -> None:
        """Interrupt the current exchange. Safe to call from another thread."""
        ...

    def reset_after_abort(self) -> None:
        """Clear the abort signal so that new exchanges are accepted."""
        ...

    def clone(self) -> Transport:
        """Return an independent transport with equivalent configuration."""
        ...
