"""
Response decoder - Domain service for parsing daemon replies.
Handles single JSON documents, newline-delimited JSON streams and the
field extraction every endpoint-specific reshape goes through.
"""

from __future__ import annotations
import io
import json
from typing import Any, Iterator, Union

from ..errors import MalformedResponse, MissingField


RawBody = Union[str, bytes, bytearray]


def as_text(raw: RawBody) -> str:
    """Decode a raw body to text (UTF-8, undecodable bytes replaced)."""
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode('utf-8', errors='replace')
    return raw


def decode(raw: RawBody) -> Any:
    """Parse the whole body as one JSON document."""
    text = as_text(raw)
    try:
        return json.loads(text)
    except ValueError as e:
        raise MalformedResponse(str(e), text) from e


def decode_lines(raw: RawBody) -> Iterator[Any]:
    """Lazily parse the body as newline-delimited JSON, one value per line.

    Lines are numbered from 1. Blank lines are not skipped: they fail like any
    other malformed line. A final line without a trailing newline is parsed;
    an empty body yields nothing.
    """
    # newline='\n' splits on LF only, leaving other separators inside lines
    stream = io.StringIO(as_text(raw), newline='\n')
    for line_number, line in enumerate(stream, start=1):
        line = line[:-1] if line.endswith('\n') else line
        try:
            yield json.loads(line)
        except ValueError as e:
            raise MalformedResponse(str(e), line, line_number) from e


def require_field(value: Any, field: str, line_number: int = 0) -> Any:
    """Return value[field], failing with MissingField when it is absent."""
    if not isinstance(value, dict) or field not in value:
        raise MissingField(field, value, line_number)
    return value[field]


def require_path(value: Any, *fields: str, line_number: int = 0) -> Any:
    """Follow nested fields, e.g. require_path(reply, 'Root', 'Cid', '/')."""
    for field in fields:
        value = require_field(value, field, line_number)
    return value
