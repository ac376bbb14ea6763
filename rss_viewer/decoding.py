"""Decoding and classification of backend responses."""

from __future__ import annotations

import enum
import json
import logging
from http import HTTPStatus
from typing import Any, List, Optional

from .models import FeedItem, Failed, Loaded, Outcome

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """Raised when a response body does not have the expected shape."""


class TransportErrorKind(enum.Enum):
    TIMEOUT = "timeout"
    NETWORK = "network"
    BAD_URL = "bad_url"
    OTHER = "other"


_TRANSPORT_MESSAGES = {
    TransportErrorKind.TIMEOUT: "request timed out",
    TransportErrorKind.NETWORK: "network error",
    TransportErrorKind.BAD_URL: "bad url",
    TransportErrorKind.OTHER: "unexpected response",
}

_TYPE_NAMES = {
    dict: "an OBJECT",
    list: "an ARRAY",
    str: "a STRING",
    bool: "a BOOL",
    int: "a NUMBER",
    float: "a NUMBER",
    type(None): "null",
}


def _describe(value: Any) -> str:
    kind = _TYPE_NAMES.get(type(value), type(value).__name__)
    snippet = json.dumps(value, ensure_ascii=False)
    if len(snippet) > 60:
        snippet = snippet[:57] + "..."
    return f"{kind}: {snippet}"


def _parse_json(body: str) -> Any:
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError, RecursionError) as exc:
        raise DecodeError(f"This is not valid JSON! {exc}") from exc


def _require_string(obj: dict, key: str, path: str) -> str:
    if key not in obj:
        raise DecodeError(f"Expecting an OBJECT with a field named `{key}` at {path}")
    value = obj[key]
    if not isinstance(value, str):
        raise DecodeError(
            f"Expecting a STRING at {path}.{key} but instead got {_describe(value)}"
        )
    return value


def _decode_item(value: Any, path: str) -> FeedItem:
    if not isinstance(value, dict):
        raise DecodeError(
            f"Expecting an OBJECT at {path} but instead got {_describe(value)}"
        )

    pub_date = value.get("pub_date")
    if pub_date is not None and not isinstance(pub_date, str):
        raise DecodeError(
            f"Expecting null or a STRING at {path}.pub_date "
            f"but instead got {_describe(pub_date)}"
        )

    return FeedItem(
        title=_require_string(value, "title", path),
        link=_require_string(value, "link", path),
        description=_require_string(value, "description", path),
        pub_date=pub_date,
    )


def decode_items(body: str) -> List[FeedItem]:
    """Decode a JSON array of feed items; any bad element fails the whole list."""
    payload = _parse_json(body)
    if not isinstance(payload, list):
        raise DecodeError(f"Expecting an ARRAY at $ but instead got {_describe(payload)}")
    return [_decode_item(value, f"$[{index}]") for index, value in enumerate(payload)]


def decode_error_message(body: str) -> str:
    """Decode a ``{"message": string}`` error body."""
    payload = _parse_json(body)
    if not isinstance(payload, dict):
        raise DecodeError(
            f"Expecting an OBJECT at $ but instead got {_describe(payload)}"
        )
    return _require_string(payload, "message", "$")


def status_text(status: int, reason: Optional[str]) -> str:
    """Return the reason phrase, falling back to the standard one for ``status``."""
    if reason:
        return reason
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"Bad status: {status}"


def classify_response(status: int, reason: Optional[str], body: str) -> Outcome:
    """Map an HTTP status and body onto a loaded or failed outcome."""
    if 200 <= status < 300:
        try:
            items = decode_items(body)
        except DecodeError as exc:
            logger.info("Feed body failed to decode: %s", exc)
            return Failed(str(exc))
        logger.info("Decoded %d feed items", len(items))
        return Loaded(tuple(items))

    if 400 <= status < 500:
        try:
            message = decode_error_message(body)
        except DecodeError:
            logger.info("Unstructured %d error body; using status text", status)
            return Failed(status_text(status, reason))
        return Failed(message)

    return Failed(status_text(status, reason))


def classify_transport_error(kind: TransportErrorKind) -> Outcome:
    return Failed(_TRANSPORT_MESSAGES[kind])
