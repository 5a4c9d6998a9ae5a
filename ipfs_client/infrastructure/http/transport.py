"""
HTTP transport - Infrastructure implementation of the Transport protocol.
Performs daemon exchanges with requests and supports cross-thread abort.
"""

from __future__ import annotations
import contextlib
import logging
import threading
from typing import BinaryIO, Callable, Optional, Sequence, Tuple
from urllib.parse import quote

import requests
from urllib3.exceptions import HTTPError as Urllib3Error

from ...domain.errors import DaemonError, IpfsError, RequestAborted, TransportFailure
from ...domain.interfaces.transport import Transport
from ...domain.models.upload import FilePart
from .adapter import AbortableAdapter


DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_CONNECT_TIMEOUT = 10.0


class RequestsTransport(Transport):
    """Transport backed by a private requests.Session.

    Abort protocol: abort_in_flight() sets a flag and shuts down the socket
    of the exchange in flight through AbortableAdapter, which unblocks the
    calling thread whether it is sending, waiting for headers or reading the
    body. The read loop also checks the flag between chunks. While the flag
    is set every fetch() is refused with RequestAborted until
    reset_after_abort() is called. Only the TCP connect itself is not
    interruptible; it is bounded by connect_timeout.
    """

    def __init__(
        self,
        verbose: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        connect_timeout: Optional[float] = DEFAULT_CONNECT_TIMEOUT,
        session_factory: Callable[[], requests.Session] = requests.Session,
        logger: Optional[logging.Logger] = None
    ):
        self._verbose = verbose
        self._chunk_size = chunk_size
        self._connect_timeout = connect_timeout
        self._session_factory = session_factory
        self._logger = logger or logging.getLogger(__name__)

        self._abort = threading.Event()
        self._session, self._adapter = self._new_session()

        if verbose:
            # Low-level connection tracing
            logging.getLogger('urllib3').setLevel(logging.DEBUG)

    def _new_session(self) -> Tuple[requests.Session, AbortableAdapter]:
        session = self._session_factory()
        adapter = AbortableAdapter(self._abort, logger=self._logger)
        session.mount('http://', adapter)
        session.mount('https://', adapter)
        return session, adapter

    def _trace(self, msg: str) -> None:
        self._logger.log(logging.INFO if self._verbose else logging.DEBUG, msg)

    def fetch(self, url: str, files: Sequence[FilePart], sink: BinaryIO) -> None:
        """POST to url (multipart when files are given), streaming the body into sink."""
        if self._abort.is_set():
            raise RequestAborted("Request refused: transport was aborted, reset() it first", {"url": url})

        self._trace(f">> POST {url} ({len(files)} file part(s))")
        adapter = self._adapter
        try:
            status, received = self._exchange(url, files, sink)
        except RequestAborted:
            # The interrupted connection is unusable; later calls get fresh pools
            self._session.close()
            self._session, self._adapter = self._new_session()
            raise
        finally:
            adapter.detach()

        self._trace(f"<< {status} {url} ({received} bytes)")

    def _exchange(self, url: str, files: Sequence[FilePart], sink: BinaryIO) -> Tuple[int, int]:
        with contextlib.ExitStack() as stack:
            multipart = [
                ('file', (part.name, stack.enter_context(part.open_payload())))
                for part in files
            ]
            try:
                response = self._session.post(
                    url,
                    files=multipart or None,
                    stream=True,
                    timeout=(self._connect_timeout, None),
                )
            except requests.RequestException as e:
                if self._abort.is_set():
                    raise RequestAborted(f"Request to {url} aborted", {"url": url}) from e
                self._logger.debug(f"Request to {url} failed: {e}")
                raise TransportFailure(f"Request to {url} failed: {e}", {"url": url}) from e

            try:
                return response.status_code, self._read_body(url, response, sink)
            finally:
                response.close()

    def _read_body(self, url: str, response: requests.Response, sink: BinaryIO) -> int:
        received = 0
        try:
            if not response.ok:
                raise DaemonError.from_reply(response.status_code, response.content, url)
            for chunk in response.iter_content(chunk_size=self._chunk_size):
                if self._abort.is_set():
                    break
                sink.write(chunk)
                received += len(chunk)
        except IpfsError:
            raise
        except (requests.RequestException, Urllib3Error, OSError) as e:
            # A socket shut down under the reader surfaces as assorted I/O errors
            if self._abort.is_set():
                raise RequestAborted(f"Request to {url} aborted", {"url": url}) from e
            self._logger.debug(f"Reading reply from {url} failed: {e}")
            raise TransportFailure(f"Reading reply from {url} failed: {e}", {"url": url}) from e

        if self._abort.is_set():
            raise RequestAborted(f"Request to {url} aborted after {received} bytes", {"url": url})
        return received

    def url_encode(self, text: str) -> str:
        return quote(text, safe='')

    def abort_in_flight(self) -> None:
        self._abort.set()
        self._adapter.interrupt()

    def reset_after_abort(self) -> None:
        self._abort.clear()
        self._logger.info("Transport reset after abort")

    def clone(self) -> RequestsTransport:
        return RequestsTransport(
            verbose=self._verbose,
            chunk_size=self._chunk_size,
            connect_timeout=self._connect_timeout,
            session_factory=self._session_factory,
            logger=self._logger
        )

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()
