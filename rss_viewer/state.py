"""Pure state transitions for the feed viewer."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Tuple

from .models import (
    ClosePreview,
    Event,
    Failed,
    Failure,
    FeedResponse,
    FetchFeed,
    HoverItem,
    InputChanged,
    Loaded,
    Loading,
    Model,
    Submit,
    Success,
)

logger = logging.getLogger(__name__)


def can_submit(model: Model) -> bool:
    """Submitting requires non-empty input that differs from the last fetched URL."""
    return bool(model.input_text) and model.input_text != model.submitted_url


def update(model: Model, event: Event) -> Tuple[Model, Optional[FetchFeed]]:
    """Apply ``event`` and return the new model plus an optional fetch to perform."""
    if isinstance(event, InputChanged):
        return replace(model, input_text=event.text), None

    if isinstance(event, Submit):
        if not can_submit(model):
            logger.debug("Submit ignored for input %r", model.input_text)
            return model, None
        seq = model.request_seq + 1
        url = model.input_text
        logger.debug("Submitting request #%d for %s", seq, url)
        new_model = replace(
            model,
            request=Loading(),
            preview=None,
            pending_url=url,
            request_seq=seq,
        )
        return new_model, FetchFeed(seq=seq, url=url)

    if isinstance(event, HoverItem):
        if not isinstance(model.request, Success):
            logger.debug("Preview ignored; no items displayed")
            return model, None
        return replace(model, preview=event.item), None

    if isinstance(event, ClosePreview):
        return replace(model, preview=None), None

    if isinstance(event, FeedResponse):
        return _apply_response(model, event), None

    raise TypeError(f"Unsupported event: {event!r}")


def _apply_response(model: Model, event: FeedResponse) -> Model:
    if event.seq != model.request_seq:
        logger.debug(
            "Dropping stale response #%d (latest is #%d)", event.seq, model.request_seq
        )
        return model

    outcome = event.outcome
    if isinstance(outcome, Loaded):
        return replace(
            model,
            request=Success(outcome.items),
            submitted_url=event.url,
            pending_url=None,
        )
    if isinstance(outcome, Failed):
        return replace(model, request=Failure(outcome.message), pending_url=None)
    raise TypeError(f"Unsupported outcome: {outcome!r}")
