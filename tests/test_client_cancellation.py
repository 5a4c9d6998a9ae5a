import io
import threading
import time

import pytest

from ipfs_client.client import IpfsClient
from ipfs_client.domain.errors import RequestAborted, TransportFailure
from ipfs_client.infrastructure.memory.transport import InMemoryTransport


def _call_in_thread(fn):
    outcome = {}

    def target():
        try:
            outcome['result'] = fn()
        except Exception as e:  # collected for the assertion below
            outcome['error'] = e

    t = threading.Thread(target=target, daemon=True)
    t.start()
    return t, outcome


def test_abort_interrupts_blocked_call():
    transport = InMemoryTransport()
    transport.add_hanging_reply('cat')
    client = IpfsClient(transport=transport)

    t, outcome = _call_in_thread(lambda: client.files_get('/ipfs/QmSlow', io.BytesIO()))
    assert transport.wait_until_in_flight(timeout=5.0)

    started = time.monotonic()
    client.abort()
    t.join(timeout=5.0)

    assert not t.is_alive()
    assert time.monotonic() - started < 5.0
    assert isinstance(outcome.get('error'), RequestAborted)
    assert isinstance(outcome['error'], TransportFailure)


def test_calls_refused_until_reset():
    transport = InMemoryTransport()
    transport.add_reply('id', {'ID': 'QmNode'})
    client = IpfsClient(transport=transport)

    client.abort()
    with pytest.raises(RequestAborted):
        client.id()
    # Refused calls never reach the daemon
    assert transport.requests == []

    client.reset()
    assert client.id() == {'ID': 'QmNode'}


def test_abort_without_call_in_flight_is_harmless():
    transport = InMemoryTransport()
    client = IpfsClient(transport=transport)
    client.abort()
    client.reset()
    transport.add_reply('version', {'Version': '0.20.0'})
    assert client.version()['Version'] == '0.20.0'


def test_abort_does_not_affect_copies():
    transport = InMemoryTransport()
    transport.add_reply('id', {'ID': 'QmNode'})
    client = IpfsClient(transport=transport)
    other = client.clone()

    client.abort()
    assert other.id() == {'ID': 'QmNode'}
    with pytest.raises(RequestAborted):
        client.id()
