"""
Error taxonomy for the IPFS client.
Every failure raised by the client is an IpfsError tagged with an ErrorKind.
"""

from __future__ import annotations
import json
from enum import Enum
from typing import Any, Dict, Optional


# Bound for offending text quoted inside error messages
_MAX_QUOTED_CHARS = 1024


class ErrorKind(Enum):
    """Kinds of failure a client operation can report."""
    TRANSPORT_FAILURE = "transport_failure"
    MALFORMED_RESPONSE = "malformed_response"
    MISSING_FIELD = "missing_field"
    NOT_FOUND = "not_found"
    VERIFICATION_FAILED = "verification_failed"


def quote_text(text: str, limit: int = _MAX_QUOTED_CHARS) -> str:
    """Escape text for an error message, keeping at most `limit` characters."""
    if len(text) > limit:
        return repr(text[:limit]) + f" ... ({len(text) - limit} more chars)"
    return repr(text)


class IpfsError(Exception):
    """Base exception for all IPFS client errors."""

    kind: ErrorKind = ErrorKind.TRANSPORT_FAILURE

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class TransportFailure(IpfsError):
    """The network exchange with the daemon could not complete."""

    kind = ErrorKind.TRANSPORT_FAILURE


class DaemonError(TransportFailure):
    """The daemon answered with a non-success HTTP status."""

    def __init__(
        self,
        status_code: int,
        daemon_message: str,
        code: Optional[int] = None,
        url: Optional[str] = None,
    ):
        details: Dict[str, Any] = {"status": status_code}
        if code is not None:
            details["code"] = code
        super().__init__(f"Daemon error (HTTP {status_code}): {daemon_message}", details)
        self.status_code = status_code
        self.daemon_message = daemon_message
        self.code = code
        self.url = url

    @classmethod
    def from_reply(cls, status_code: int, body: bytes, url: Optional[str] = None) -> DaemonError:
        """Build from an error reply, e.g. {"Message": "...", "Code": 0, "Type": "error"}."""
        text = body.decode('utf-8', errors='replace').strip()
        try:
            payload = json.loads(text)
        except ValueError:
            payload = None
        if isinstance(payload, dict) and 'Message' in payload:
            code = payload.get('Code')
            return cls(status_code, str(payload['Message']), code if isinstance(code, int) else None, url)
        return cls(status_code, text or f"empty reply from {url or 'daemon'}", None, url)


class RequestAborted(TransportFailure):
    """The request was interrupted by abort(), or refused until reset()."""


class MalformedResponse(IpfsError):
    """A response body, or one NDJSON line of it, is not valid JSON."""

    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(self, reason: str, text: str, line_number: int = 0):
        where = f" on line {line_number}" if line_number else ""
        super().__init__(f"Malformed JSON reply{where}: {reason}\nInput JSON:\n{quote_text(text)}")
        self.reason = reason
        self.text = text
        self.line_number = line_number


class MissingField(IpfsError):
    """A well-formed reply lacks a field the operation needs."""

    kind = ErrorKind.MISSING_FIELD

    def __init__(self, field: str, value: Any, line_number: int = 0):
        super().__init__(
            f'Unexpected reply: valid JSON, but without the "{field}" property '
            f"on line {line_number}:\n{quote_text(_dump(value))}"
        )
        self.field = field
        self.value = value
        self.line_number = line_number


class NotFound(IpfsError):
    """The reply stream ended without containing the searched entity."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, key: str, response: str):
        # The full body is kept in the message for diagnosis
        super().__init__(f"Could not find info for peer {key} in response: {response}")
        self.key = key
        self.response = response


class VerificationFailed(IpfsError):
    """The reply is well-formed but does not confirm the requested effect."""

    kind = ErrorKind.VERIFICATION_FAILED

    def __init__(self, message: str, response: Any):
        super().__init__(f"{message}: {_dump(response)}")
        self.response = response


def _dump(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
