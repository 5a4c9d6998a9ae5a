"""
Abortable HTTP adapter for requests.

Keeps a handle on the urllib3 connection of the exchange in flight so another
thread can shut its socket down. Shutting down (rather than closing the
response) wakes a reader blocked in recv() without touching the buffered
reader lock the reading thread holds, and it also covers the time spent
connecting and waiting for response headers.
"""

from __future__ import annotations
import logging
import socket
import threading
from typing import Any, Dict, Optional, Type

from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool


def _tracked_pool(
    pool_cls: Type[HTTPConnectionPool],
    conn_cls: Type[HTTPConnection],
    adapter: AbortableAdapter
) -> Type[HTTPConnectionPool]:
    """Subclass a urllib3 pool so its connections report to `adapter`."""

    class TrackedConnection(conn_cls):
        def connect(self):
            super().connect()
            adapter._connected(self)

        def request(self, *args, **kwargs):
            # Called on the requesting thread, before any connect
            adapter._attach(self)
            return super().request(*args, **kwargs)

    class TrackedPool(pool_cls):
        ConnectionCls = TrackedConnection

    return TrackedPool


class AbortableAdapter(HTTPAdapter):
    """HTTPAdapter whose in-flight exchange can be cut from another thread.

    The adapter shares the transport's abort event: once it is set, the
    connection in use (or the next one to be used) has its socket shut down.
    """

    def __init__(self, abort: threading.Event, logger: Optional[logging.Logger] = None, **kwargs: Any):
        self._abort = abort
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._conn: Optional[HTTPConnection] = None
        self._pool_classes: Dict[str, Type[HTTPConnectionPool]] = {
            'http': _tracked_pool(HTTPConnectionPool, HTTPConnection, self),
            'https': _tracked_pool(HTTPSConnectionPool, HTTPSConnection, self),
        }
        super().__init__(**kwargs)

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = dict(self._pool_classes)

    def proxy_manager_for(self, proxy: str, **proxy_kwargs: Any):
        manager = super().proxy_manager_for(proxy, **proxy_kwargs)
        # SOCKS managers bring their own pool classes
        if not proxy.lower().startswith('socks'):
            manager.pool_classes_by_scheme = dict(self._pool_classes)
        return manager

    def interrupt(self) -> None:
        """Shut down the socket of the exchange in flight, if any."""
        with self._lock:
            conn = self._conn
            if conn is not None:
                self._logger.info("Shutting down socket of in-flight request")
                self._shutdown(conn)

    def detach(self) -> None:
        """Forget the current connection once its exchange is over."""
        with self._lock:
            self._conn = None

    def _attach(self, conn: HTTPConnection) -> None:
        with self._lock:
            self._conn = conn
            if self._abort.is_set():
                self._shutdown(conn)

    def _connected(self, conn: HTTPConnection) -> None:
        # An abort that landed while connect() was running found no socket
        with self._lock:
            if self._abort.is_set() and conn is self._conn:
                self._shutdown(conn)

    def _shutdown(self, conn: HTTPConnection) -> None:
        sock = getattr(conn, 'sock', None)
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            self._logger.debug(f"Ignoring error while shutting down socket: {e}")
