import json

import httpx
import pytest

from tuteliq import AsyncTuteliq, Tuteliq

API_KEY = "tq_test_key_1234567890"

BULLYING = {
    "is_bullying": True,
    "bullying_type": ["insults"],
    "confidence": 0.9,
    "severity": "high",
    "rationale": "direct insults",
    "recommended_action": "flag_for_moderator",
    "risk_score": 0.75,
}

UNSAFE = {
    "unsafe": False,
    "categories": [],
    "severity": "low",
    "confidence": 0.8,
    "risk_score": 0.1,
    "rationale": "nothing concerning",
    "recommended_action": "none",
}


class Recorder:
    """MockTransport handler that records requests and replays queued responses."""

    def __init__(self, *responses):
        self.requests: list[httpx.Request] = []
        self.responses = list(responses)
        self.routes = {}

    def route(self, path, response):
        self.routes[path] = response
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path in self.routes:
            resp = self.routes[request.url.path]
        elif len(self.responses) > 1:
            resp = self.responses.pop(0)
        elif self.responses:
            resp = self.responses[0]
        else:
            resp = httpx.Response(200, json={})
        if isinstance(resp, BaseException):
            raise resp
        if callable(resp):
            return resp(request)
        return resp

    @property
    def calls(self) -> int:
        return len(self.requests)

    def body(self, idx: int = -1):
        return json.loads(self.requests[idx].content)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_client():
    clients = []

    def _make(handler, **kwargs):
        kwargs.setdefault("retry_delay", 0.001)
        client = Tuteliq(API_KEY, transport=httpx.Client(transport=httpx.MockTransport(handler)), **kwargs)
        clients.append(client)
        return client

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def make_async_client():
    def _make(handler, **kwargs):
        kwargs.setdefault("retry_delay", 0.001)
        return AsyncTuteliq(
            API_KEY, transport=httpx.AsyncClient(transport=httpx.MockTransport(handler)), **kwargs
        )

    return _make
