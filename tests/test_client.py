from types import SimpleNamespace

import pytest
import requests

from rss_viewer.client import FeedClient, build_feed_url
from rss_viewer.models import Failed, FeedItem, FetchFeed, Loaded


class FakeSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, timeout=None):
        self.requests.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        pass


def _response(status, reason, text):
    return SimpleNamespace(status_code=status, reason=reason, text=text)


def test_build_feed_url_passes_input_through():
    url = build_feed_url("http://backend:8080/", "http://example.com/rss?a=1&b=2")

    assert url == "http://backend:8080/feed?url=http://example.com/rss?a=1&b=2"


def test_fetch_issues_single_request_and_decodes_items():
    session = FakeSession(
        _response(200, "OK", '[{"title":"A","link":"http://x","description":"d"}]')
    )
    client = FeedClient("http://backend", session=session)

    response = client.fetch(FetchFeed(seq=3, url="http://feed"))

    assert session.requests == [("http://backend/feed?url=http://feed", None)]
    assert response.seq == 3
    assert response.url == "http://feed"
    assert response.outcome == Loaded((FeedItem("A", "http://x", "d"),))
    assert "User-Agent" in session.headers


def test_fetch_passes_configured_timeout():
    session = FakeSession(_response(200, "OK", "[]"))
    client = FeedClient("http://backend", timeout=2.5, session=session)

    client.fetch(FetchFeed(seq=1, url="u"))

    assert session.requests[0][1] == 2.5


def test_fetch_client_error_message():
    session = FakeSession(_response(404, "Not Found", '{"message":"feed not found"}'))
    client = FeedClient("http://backend", session=session)

    response = client.fetch(FetchFeed(seq=1, url="u"))

    assert response.outcome == Failed("feed not found")


def test_fetch_server_error_status_text():
    session = FakeSession(_response(500, "Internal Server Error", "garbage"))
    client = FeedClient("http://backend", session=session)

    response = client.fetch(FetchFeed(seq=1, url="u"))

    assert response.outcome == Failed("Internal Server Error")


@pytest.mark.parametrize(
    "error, message",
    [
        (requests.Timeout("slow"), "request timed out"),
        (requests.exceptions.ConnectTimeout("slow"), "request timed out"),
        (requests.ConnectionError("refused"), "network error"),
        (requests.exceptions.MissingSchema("no scheme"), "bad url"),
        (requests.exceptions.InvalidURL("bad"), "bad url"),
        (requests.exceptions.TooManyRedirects("loop"), "unexpected response"),
    ],
)
def test_fetch_transport_errors_are_absorbed(error, message):
    client = FeedClient("http://backend", session=FakeSession(error=error))

    response = client.fetch(FetchFeed(seq=7, url="u"))

    assert response.seq == 7
    assert response.outcome == Failed(message)


def test_fetch_deeply_nested_body_is_absorbed():
    body = "[" * 200000 + "]" * 200000
    client = FeedClient("http://backend", session=FakeSession(_response(200, "OK", body)))

    response = client.fetch(FetchFeed(seq=1, url="u"))

    assert isinstance(response.outcome, Failed)
    assert response.outcome.message.startswith("This is not valid JSON!")
