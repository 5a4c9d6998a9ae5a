"""Domain layer - Pure client logic with no network dependencies."""

from .errors import (
    ErrorKind,
    IpfsError,
    TransportFailure,
    DaemonError,
    RequestAborted,
    MalformedResponse,
    MissingField,
    NotFound,
    VerificationFailed,
)
from .models import FilePart, FilePartKind, EndpointRequest, AddedFile

__all__ = [
    "ErrorKind",
    "IpfsError",
    "TransportFailure",
    "DaemonError",
    "RequestAborted",
    "MalformedResponse",
    "MissingField",
    "NotFound",
    "VerificationFailed",
    "FilePart",
    "FilePartKind",
    "EndpointRequest",
    "AddedFile",
]
