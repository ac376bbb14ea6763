import threading

import pytest

from rss_viewer.decoding import classify_response
from rss_viewer.models import FeedItem, FeedResponse


class FakeClient:
    """Stand-in for FeedClient that answers from canned status/body pairs."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.gates = {}
        self.calls = []
        self.closed = False
        self._lock = threading.Lock()

    def hold(self, url):
        gate = threading.Event()
        self.gates[url] = gate
        return gate

    def fetch(self, effect):
        with self._lock:
            self.calls.append(effect)
        gate = self.gates.get(effect.url)
        if gate is not None:
            gate.wait(5)
        answer = self.responses[effect.url]
        if isinstance(answer, Exception):
            raise answer
        status, reason, body = answer
        return FeedResponse(
            seq=effect.seq,
            url=effect.url,
            outcome=classify_response(status, reason, body),
        )

    def close(self):
        self.closed = True


@pytest.fixture
def item():
    return FeedItem(
        title="First post",
        link="https://example.com/1",
        description="Hello <b>world</b>",
        pub_date="Mon, 01 Jan 2024 00:00:00 GMT",
    )


@pytest.fixture
def other_item():
    return FeedItem(
        title="Second post",
        link="https://example.com/2",
        description="Another one",
    )


@pytest.fixture
def fake_client():
    return FakeClient()
