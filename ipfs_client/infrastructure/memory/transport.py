"""
In-memory transport used for unit tests.

- Does not open sockets
- Replies are scripted per endpoint path and consumed in order
- Honours abort/reset with the same rules as RequestsTransport
"""

from __future__ import annotations
import json
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Deque, Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import parse_qsl, quote, urlsplit

from ...domain.errors import DaemonError, RequestAborted, TransportFailure
from ...domain.interfaces.transport import Transport
from ...domain.models.upload import FilePart


@dataclass
class ScriptedReply:
    body: bytes = b''
    status: int = 200
    hang: bool = False  # block until aborted


@dataclass
class RecordedRequest:
    url: str
    path: str
    params: List[Tuple[str, str]]
    files: List[Tuple[str, bytes]] = field(default_factory=list)

    def values(self, name: str) -> List[str]:
        """All values of the query parameter `name`, in order."""
        return [v for k, v in self.params if k == name]


class InMemoryTransport(Transport):
    """Scripted fake transport."""

    def __init__(self, poll_interval: float = 0.01, logger: Optional[logging.Logger] = None):
        self._poll_interval = poll_interval
        self._logger = logger or logging.getLogger(__name__)
        self._replies: Dict[str, Deque[ScriptedReply]] = {}
        self.requests: List[RecordedRequest] = []

        self._abort = threading.Event()
        self._in_flight = threading.Event()

    # ---- scripting helpers for tests ----

    def add_reply(self, endpoint: str, body: Any = b'', status: int = 200) -> None:
        """Queue a reply for `endpoint` (e.g. "pin/add").

        `body` may be bytes, text, or a JSON value that is serialized.
        """
        if isinstance(body, str):
            body = body.encode('utf-8')
        elif not isinstance(body, (bytes, bytearray)):
            body = json.dumps(body).encode('utf-8')
        self._queue(endpoint).append(ScriptedReply(body=bytes(body), status=status))

    def add_lines(self, endpoint: str, lines: Iterable[Any]) -> None:
        """Queue an NDJSON reply, one JSON value per line."""
        self.add_reply(endpoint, ''.join(json.dumps(line) + '\n' for line in lines))

    def add_hanging_reply(self, endpoint: str) -> None:
        """Queue a reply that never completes on its own."""
        self._queue(endpoint).append(ScriptedReply(hang=True))

    def wait_until_in_flight(self, timeout: float) -> bool:
        """Block until a hanging reply is being served."""
        return self._in_flight.wait(timeout)

    @property
    def last_request(self) -> RecordedRequest:
        return self.requests[-1]

    def _queue(self, endpoint: str) -> Deque[ScriptedReply]:
        return self._replies.setdefault(endpoint.strip('/'), deque())

    def _match(self, path: str) -> Optional[str]:
        # Longest scripted endpoint that the URL path ends with ("pin/add" beats "add")
        candidates = [e for e in self._replies if path == e or path.endswith('/' + e)]
        return max(candidates, key=len) if candidates else None

    # ---- Transport protocol ----

    def fetch(self, url: str, files: Sequence[FilePart], sink: BinaryIO) -> None:
        if self._abort.is_set():
            raise RequestAborted("Request refused: transport was aborted, reset() it first", {"url": url})

        parts = urlsplit(url)
        path = parts.path.rstrip('/')
        recorded = RecordedRequest(url=url, path=path, params=parse_qsl(parts.query, keep_blank_values=True))
        for part in files:
            with part.open_payload() as payload:
                recorded.files.append((part.name, payload.read()))
        self.requests.append(recorded)

        endpoint = self._match(path)
        if endpoint is None or not self._replies[endpoint]:
            raise TransportFailure(f"No reply scripted for {path}", {"url": url})
        reply = self._replies[endpoint].popleft()

        if reply.hang:
            self._in_flight.set()
            try:
                while not self._abort.wait(self._poll_interval):
                    continue
            finally:
                self._in_flight.clear()
            raise RequestAborted(f"Request to {url} aborted", {"url": url})

        if reply.status >= 400:
            raise DaemonError.from_reply(reply.status, reply.body, url)
        sink.write(reply.body)

    def url_encode(self, text: str) -> str:
        return quote(text, safe='')

    def abort_in_flight(self) -> None:
        self._abort.set()
        self._logger.info("Aborting in-flight request")

    def reset_after_abort(self) -> None:
        self._abort.clear()
        self._logger.info("Transport reset after abort")

    def clone(self) -> InMemoryTransport:
        """Independent transport with a copy of the pending script."""
        other = InMemoryTransport(poll_interval=self._poll_interval, logger=self._logger)
        for endpoint, replies in self._replies.items():
            other._replies[endpoint] = deque(replies)
        return other

    def close(self) -> None:
        self._replies.clear()
