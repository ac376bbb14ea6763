"""Rendering helpers for the viewer page."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .models import Failure, Loading, Model, Success
from .state import can_submit
from .templating import get_environment

PLACEHOLDER = "input RSS URL"
SUBMIT_LABEL = "view RSS"


def build_view(model: Model) -> Dict[str, Any]:
    """Flatten the model into the values the templates display."""
    rows = []
    if isinstance(model.request, Success):
        rows = [
            {
                "index": index,
                "pub_date": item.pub_date or "-",
                "title": item.title,
                "link": item.link,
            }
            for index, item in enumerate(model.request.items, start=1)
        ]

    preview: Optional[Dict[str, str]] = None
    if model.preview is not None:
        preview = {
            "title": model.preview.title,
            "description": model.preview.description,
        }

    error = model.request.message if isinstance(model.request, Failure) else None

    return {
        "input_text": model.input_text,
        "placeholder": PLACEHOLDER,
        "submit_label": SUBMIT_LABEL,
        "submit_enabled": can_submit(model),
        "loading": isinstance(model.request, Loading),
        "rows": rows,
        "preview": preview,
        "error": error,
    }


def render_html(model: Model) -> str:
    """Render the page as HTML using the Jinja2 template."""
    template = get_environment().get_template("page.html.j2")
    return template.render(view=build_view(model))


def render_text(model: Model) -> str:
    """Render the page for a terminal."""
    template = get_environment().get_template("page.txt.j2")
    return template.render(view=build_view(model))
