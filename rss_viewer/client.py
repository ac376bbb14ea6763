"""HTTP access to the feed backend."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .decoding import TransportErrorKind, classify_response, classify_transport_error
from .models import FeedResponse, FetchFeed

logger = logging.getLogger(__name__)

USER_AGENT = "rss-viewer/0.1"

_BAD_URL_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.URLRequired,
)


def build_feed_url(base_url: str, raw_url: str) -> str:
    """Return the backend feed endpoint for ``raw_url``, passed through as typed."""
    return f"{base_url.rstrip('/')}/feed?url={raw_url}"


def transport_error_kind(exc: requests.RequestException) -> TransportErrorKind:
    if isinstance(exc, requests.Timeout):
        return TransportErrorKind.TIMEOUT
    if isinstance(exc, _BAD_URL_ERRORS):
        return TransportErrorKind.BAD_URL
    if isinstance(exc, requests.ConnectionError):
        return TransportErrorKind.NETWORK
    return TransportErrorKind.OTHER


class FeedClient:
    """Performs ``FetchFeed`` effects and turns the result into a ``FeedResponse``."""

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        user_agent: str = USER_AGENT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent, "Accept": "application/json"})

    def fetch(self, effect: FetchFeed) -> FeedResponse:
        url = build_feed_url(self.base_url, effect.url)
        logger.info("Requesting feed #%d: %s", effect.seq, url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            kind = transport_error_kind(exc)
            logger.warning("Feed request #%d failed (%s): %s", effect.seq, kind.value, exc)
            outcome = classify_transport_error(kind)
        else:
            logger.info(
                "Feed request #%d returned %s %s",
                effect.seq,
                response.status_code,
                response.reason,
            )
            outcome = classify_response(
                response.status_code, response.reason, response.text
            )
        return FeedResponse(seq=effect.seq, url=effect.url, outcome=outcome)

    def close(self) -> None:
        self.session.close()
