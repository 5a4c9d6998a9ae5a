import pytest

from ipfs_client.domain.errors import ErrorKind, MalformedResponse, MissingField
from ipfs_client.domain.services.response_decoder import (
    decode,
    decode_lines,
    require_field,
    require_path,
)


def test_decode_single_document_from_bytes():
    assert decode(b'{"ID": "Qm", "Addresses": ["/ip4/1"]}') == {'ID': 'Qm', 'Addresses': ['/ip4/1']}


def test_decode_failure_carries_text():
    with pytest.raises(MalformedResponse) as ei:
        decode('{"ID": ')
    err = ei.value
    assert err.kind is ErrorKind.MALFORMED_RESPONSE
    assert err.text == '{"ID": '
    assert err.line_number == 0
    assert 'Input JSON' in str(err)


def test_decode_failure_message_is_bounded():
    text = 'x' * 5000
    with pytest.raises(MalformedResponse) as ei:
        decode(text)
    assert len(str(ei.value)) < 2000
    assert ei.value.text == text


def test_decode_lines_in_order():
    body = '{"a": 1}\n{"a": 2}\n{"a": 3}\n'
    assert list(decode_lines(body)) == [{'a': 1}, {'a': 2}, {'a': 3}]


def test_decode_lines_last_line_without_newline():
    assert list(decode_lines('{"a": 1}\n{"a": 2}')) == [{'a': 1}, {'a': 2}]


def test_decode_lines_empty_body():
    assert list(decode_lines(b'')) == []


def test_decode_lines_is_lazy():
    lines = decode_lines('{"a": 1}\nnot json\n')
    assert next(lines) == {'a': 1}
    with pytest.raises(MalformedResponse) as ei:
        next(lines)
    assert ei.value.line_number == 2
    assert ei.value.text == 'not json'


def test_decode_lines_blank_line_fails():
    with pytest.raises(MalformedResponse) as ei:
        list(decode_lines('{"a": 1}\n\n{"a": 2}\n'))
    assert ei.value.line_number == 2


def test_decode_lines_tolerates_crlf():
    assert list(decode_lines('{"a": 1}\r\n{"a": 2}\r\n')) == [{'a': 1}, {'a': 2}]


def test_require_field():
    assert require_field({'Path': '/ipfs/Qm'}, 'Path') == '/ipfs/Qm'
    assert require_field({'Value': None}, 'Value') is None


def test_require_field_missing():
    with pytest.raises(MissingField) as ei:
        require_field({'Other': 1}, 'Path', 7)
    err = ei.value
    assert err.kind is ErrorKind.MISSING_FIELD
    assert err.field == 'Path'
    assert err.line_number == 7
    assert '"Path"' in str(err) and 'line 7' in str(err)


def test_require_field_on_non_object():
    with pytest.raises(MissingField):
        require_field(['Path'], 'Path')


def test_require_path_nested():
    reply = {'Root': {'Cid': {'/': 'bafy'}, 'PinErrorMsg': ''}}
    assert require_path(reply, 'Root', 'Cid', '/') == 'bafy'
    with pytest.raises(MissingField) as ei:
        require_path({'Root': {}}, 'Root', 'Cid', '/')
    assert ei.value.field == 'Cid'
