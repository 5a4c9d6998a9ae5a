import io

import pytest
import requests

from ipfs_client.domain.errors import DaemonError, RequestAborted, TransportFailure
from ipfs_client.domain.models.upload import FilePart
from ipfs_client.infrastructure.http.transport import RequestsTransport


class _FakeResponse:
    def __init__(self, chunks=(b'',), status_code=200, on_chunk=None):
        self.status_code = status_code
        self._chunks = list(chunks)
        self._on_chunk = on_chunk
        self.closed = False

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def content(self):
        return b''.join(self._chunks)

    def iter_content(self, chunk_size=1):
        for i, chunk in enumerate(self._chunks):
            if self._on_chunk is not None:
                self._on_chunk(i)
            yield chunk

    def close(self):
        self.closed = True


class _FakeSession:
    def __init__(self):
        self.calls = []
        self.response = _FakeResponse()
        self.error = None
        self.closed = False
        self.adapters = {}

    def mount(self, prefix, adapter):
        self.adapters[prefix] = adapter

    def post(self, url, files=None, stream=False, timeout=None):
        uploaded = None
        if files is not None:
            # Payload streams are only open for the duration of the call
            uploaded = [(field, name, stream_.read()) for field, (name, stream_) in files]
        self.calls.append({'url': url, 'files': uploaded, 'stream': stream, 'timeout': timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture
def session():
    return _FakeSession()


@pytest.fixture
def transport(session):
    return RequestsTransport(session_factory=lambda: session)


def test_fetch_streams_body_into_sink(transport, session):
    session.response = _FakeResponse([b'Hello ', b'IPFS'])
    sink = io.BytesIO()
    transport.fetch('http://localhost:5001/api/v0/cat?arg=x', [], sink)
    assert sink.getvalue() == b'Hello IPFS'
    call = session.calls[0]
    assert call['files'] is None
    assert call['stream'] is True
    assert session.response.closed


def test_fetch_sends_multipart_parts(transport, session, tmp_path):
    local = tmp_path / 'b.bin'
    local.write_bytes(b'\x00\x01')
    session.response = _FakeResponse([b'{}'])
    transport.fetch('http://h/api/v0/add', [
        FilePart.from_contents('a.txt', 'text'),
        FilePart.from_path('b.bin', local),
    ], io.BytesIO())
    assert session.calls[0]['files'] == [('file', 'a.txt', b'text'), ('file', 'b.bin', b'\x00\x01')]


def test_non_success_status_raises_daemon_error(transport, session):
    session.response = _FakeResponse([b'{"Message": "merkledag: not found", "Code": 0, "Type": "error"}'], 500)
    sink = io.BytesIO()
    with pytest.raises(DaemonError) as ei:
        transport.fetch('http://h/api/v0/block/get?arg=x', [], sink)
    assert ei.value.status_code == 500
    assert ei.value.daemon_message == 'merkledag: not found'
    assert ei.value.code == 0
    assert sink.getvalue() == b''


def test_daemon_error_with_plain_text_body(transport, session):
    session.response = _FakeResponse([b'404 page not found\n'], 404)
    with pytest.raises(DaemonError) as ei:
        transport.fetch('http://h/api/v0/nope', [], io.BytesIO())
    assert ei.value.daemon_message == '404 page not found'


def test_connection_error_is_transport_failure(transport, session):
    session.error = requests.ConnectionError('connection refused')
    with pytest.raises(TransportFailure) as ei:
        transport.fetch('http://h/api/v0/id', [], io.BytesIO())
    assert not isinstance(ei.value, RequestAborted)
    assert 'connection refused' in str(ei.value)


def test_abort_flag_checked_between_chunks(session):
    transport = RequestsTransport(session_factory=lambda: session)

    def on_chunk(i):
        if i == 1:
            transport.abort_in_flight()

    session.response = _FakeResponse([b'first', b'second', b'third'], on_chunk=on_chunk)
    sink = io.BytesIO()
    with pytest.raises(RequestAborted):
        transport.fetch('http://h/api/v0/cat?arg=x', [], sink)
    assert sink.getvalue() == b'first'
    assert session.response.closed


def test_refuses_until_reset(transport, session):
    transport.abort_in_flight()
    with pytest.raises(RequestAborted):
        transport.fetch('http://h/api/v0/id', [], io.BytesIO())
    assert session.calls == []

    transport.reset_after_abort()
    session.response = _FakeResponse([b'{"ID": "Qm"}'])
    sink = io.BytesIO()
    transport.fetch('http://h/api/v0/id', [], sink)
    assert sink.getvalue() == b'{"ID": "Qm"}'


def test_url_encode_escapes_reserved():
    transport = RequestsTransport(session_factory=_FakeSession)
    assert transport.url_encode('a b&c=d/e') == 'a%20b%26c%3Dd%2Fe'


def test_clone_uses_fresh_session():
    sessions = []

    def factory():
        s = _FakeSession()
        sessions.append(s)
        return s

    transport = RequestsTransport(session_factory=factory)
    other = transport.clone()
    assert other is not transport
    assert len(sessions) == 2

    transport.abort_in_flight()
    sessions[1].response = _FakeResponse([b'ok'])
    sink = io.BytesIO()
    other.fetch('http://h/api/v0/version', [], sink)
    assert sink.getvalue() == b'ok'


def test_abortable_adapter_mounted_for_both_schemes(transport, session):
    assert set(session.adapters) == {'http://', 'https://'}
    assert session.adapters['http://'] is session.adapters['https://']

    session.response = _FakeResponse([b'{}'])
    transport.fetch('http://h/api/v0/id', [], io.BytesIO())
    # Connect is bounded, reads are not: abort is what ends a stalled read
    assert session.calls[0]['timeout'] == (10.0, None)


def test_close_closes_session(transport, session):
    transport.close()
    assert session.closed
