"""
Folds over newline-delimited daemon replies.
Each function consumes a raw multi-line body and reduces it to the single
value the corresponding client operation returns.
"""

from __future__ import annotations
from typing import Any, Dict, List

from ..errors import NotFound
from ..models.results import AddedFile
from .response_decoder import RawBody, as_text, decode_lines, require_field


def find_peer_addresses(raw: RawBody, peer_id: str) -> List[Any]:
    """Return the addresses of `peer_id` from a `routing/findpeer` reply.

    The reply is many lines like
        {..., "Responses": [{"Addrs": ["...", "..."], "ID": "<peer>"}], ...}
    and the first entry whose ID matches wins.
    """
    for line_number, chunk in enumerate(decode_lines(raw), start=1):
        responses = chunk.get('Responses') if isinstance(chunk, dict) else None
        if not isinstance(responses, list):
            continue
        for entry in responses:
            if isinstance(entry, dict) and entry.get('ID') == peer_id:
                return require_field(entry, 'Addrs', line_number)

    raise NotFound(peer_id, as_text(raw))


def collect_lines(raw: RawBody) -> List[Any]:
    """Turn a multi-line reply into one array, in arrival order."""
    return list(decode_lines(raw))


def merge_added_files(raw: RawBody) -> List[Dict[str, Any]]:
    """Merge `add` progress lines into one {path, hash, size} record per path.

    The daemon reports e.g.
        {"Name":"foo.txt","Bytes":4}
        {"Name":"foo.txt","Hash":"QmWP..."}
    and lines for different paths may interleave, so records are keyed by
    name. Output order is the order in which each path was first seen.
    """
    records: Dict[str, AddedFile] = {}
    for line_number, chunk in enumerate(decode_lines(raw), start=1):
        path = require_field(chunk, 'Name', line_number)
        record = records.get(path)
        if record is None:
            record = records[path] = AddedFile(path=path)
        record.merge(chunk)
    return [record.to_dict() for record in records.values()]
