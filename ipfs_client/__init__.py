"""
ipfs_client - A client for the HTTP API of an IPFS daemon.
"""

__version__ = "0.1.0"

__all__ = [
    "IpfsClient",
    "PinRmMode",
    "FilePart",
    "FilePartKind",
    "IpfsError",
    "ErrorKind",
    "TransportFailure",
    "DaemonError",
    "RequestAborted",
    "MalformedResponse",
    "MissingField",
    "NotFound",
    "VerificationFailed",
]

# Lazy attribute access keeps `import ipfs_client.domain...` free of the
# requests/pydantic imports the facade pulls in.
def __getattr__(name: str):  # pragma: no cover - simple lazy loader
    if name in {"IpfsClient", "PinRmMode"}:
        from . import client
        return getattr(client, name)
    if name in {"FilePart", "FilePartKind"}:
        from .domain.models import upload
        return getattr(upload, name)
    if name in __all__:
        from .domain import errors
        return getattr(errors, name)
    raise AttributeError(f"module 'ipfs_client' has no attribute {name!r}")
