"""Render feedback digests using Jinja2 templates."""
from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader

from flexjar_analytics.filters import FilterSpec, TeamDirectory
from flexjar_analytics.models import Submission, Theme
from flexjar_analytics.reporting.context import DigestContext, build_digest_context
from flexjar_analytics.utils import WireModel, round_half_up

__all__ = ["render_digest", "render_context", "render_json"]

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Markdown output needs no HTML escaping; it would mangle apostrophes.
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)


def _stars(value: Optional[float]) -> str:
    """Return a five-star bar for a 1-5 rating."""
    if value is None:
        return ""
    full = max(0, min(5, round_half_up(value)))
    return "★" * full + "☆" * (5 - full)


_env.filters["stars"] = _stars


def render_context(context: DigestContext) -> str:
    """Render a Markdown digest from an already built :class:`DigestContext`."""
    template = _env.get_template("digest.md.j2")
    text = template.render(**context.to_dict())
    logger.debug("Digest rendered len=%d masked=%s", len(text), context.masked)
    return text


def render_digest(
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    themes: Sequence[Theme] = (),
    teams: Optional[TeamDirectory] = None,
    *,
    title: Optional[str] = None,
    today: Optional[datetime.date] = None,
) -> str:
    """Render a Markdown digest of *items*."""
    context = build_digest_context(items, spec, themes, teams, title=title, today=today)
    return render_context(context)


def render_json(result: WireModel, *, indent: Optional[int] = 2) -> str:
    """Serialize an aggregator result as JSON (non-ASCII kept readable)."""
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=indent)
