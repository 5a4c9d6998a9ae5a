"""Domain models package."""

from .upload import FilePart, FilePartKind
from .request import EndpointRequest, Param
from .results import AddedFile

__all__ = [
    "FilePart",
    "FilePartKind",
    "EndpointRequest",
    "Param",
    "AddedFile",
]
