import json
from unittest.mock import MagicMock

import pytest
import requests
from conftest import API_KEY, BULLYING

from tuteliq import NetworkError, RequestsTransport, RequestTimeoutError, Tuteliq


def _response(status=200, headers=None, content=b"{}"):
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    resp.content = content
    return resp


def test_requests_transport_round_trip():
    session = MagicMock(spec=requests.Session)
    client = Tuteliq(API_KEY, transport=RequestsTransport(session))
    session.request.return_value = _response(
        200, {"X-Request-ID": "req_r"}, b'{"success": true, "config": {}, "message": "ok"}'
    )
    result = client.get_policy()
    assert result.message == "ok"
    args, kwargs = session.request.call_args
    assert args[0] == "GET"
    assert args[1] == "https://api.tuteliq.ai/api/v1/policy"
    assert kwargs["headers"]["Authorization"] == f"Bearer {API_KEY}"
    assert kwargs["timeout"] == 30.0
    assert client.last_request_id == "req_r"
    client.close()
    session.close.assert_not_called()


def test_real_session_detected():
    from tuteliq.adapters import coerce_transport

    session = requests.Session()
    transport = coerce_transport(session)
    assert isinstance(transport, RequestsTransport)
    assert transport.session is session
    session.close()


def test_requests_body_sent_as_data():
    session = MagicMock()
    session.request.return_value = _response(200, {}, json.dumps(BULLYING).encode())
    client = Tuteliq(API_KEY, transport=RequestsTransport(session))
    client.detect_bullying("hi")
    _, kwargs = session.request.call_args
    assert kwargs["data"].startswith(b'{"text":"hi"')


@pytest.mark.parametrize(
    "exc,cls,message",
    [
        (requests.ConnectTimeout("slow"), RequestTimeoutError, "Request timed out after 30 seconds"),
        (requests.ReadTimeout("slow"), RequestTimeoutError, "Request timed out after 30 seconds"),
        (requests.ConnectionError("down"), NetworkError, "No internet connection"),
        (requests.TooManyRedirects("loop"), NetworkError, "loop"),
    ],
)
def test_requests_exception_mapping(exc, cls, message):
    session = MagicMock()
    session.request.side_effect = exc
    transport = RequestsTransport(session)
    with pytest.raises(cls) as ei:
        transport.send("GET", "https://api.tuteliq.ai/x", {}, None, 30.0)
    assert ei.value.message == message


def test_owned_session_closed():
    transport = RequestsTransport()
    transport.session = MagicMock()
    transport.close()
    transport.session.close.assert_called_once()
