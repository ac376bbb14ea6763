"""Shared data models for rss_viewer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class FeedItem:
    """Single feed entry as returned by the backend."""

    title: str
    link: str
    description: str
    pub_date: Optional[str] = None


# Request state variants.


@dataclass(frozen=True)
class NotAsked:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Success:
    items: Tuple[FeedItem, ...]


@dataclass(frozen=True)
class Failure:
    message: str


RequestState = Union[NotAsked, Loading, Success, Failure]


# Classified outcomes of a completed request.


@dataclass(frozen=True)
class Loaded:
    items: Tuple[FeedItem, ...]


@dataclass(frozen=True)
class Failed:
    message: str


Outcome = Union[Loaded, Failed]


@dataclass(frozen=True)
class Model:
    """Whole application state; replaced, never mutated."""

    input_text: str = ""
    request: RequestState = NotAsked()
    preview: Optional[FeedItem] = None
    submitted_url: Optional[str] = None
    pending_url: Optional[str] = None
    request_seq: int = 0


# Events accepted by the transition function.


@dataclass(frozen=True)
class InputChanged:
    text: str


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class HoverItem:
    item: FeedItem


@dataclass(frozen=True)
class ClosePreview:
    pass


@dataclass(frozen=True)
class FeedResponse:
    """Completed network call, tagged with the submission it answers."""

    seq: int
    url: str
    outcome: Outcome


Event = Union[InputChanged, Submit, HoverItem, ClosePreview, FeedResponse]


@dataclass(frozen=True)
class FetchFeed:
    """Request to fetch ``url`` through the backend."""

    seq: int
    url: str
