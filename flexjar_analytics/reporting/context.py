"""Context dataclass for rendering the Markdown feedback digest.

This module defines `DigestContext`, a typed container that holds all
values expected by the Jinja2 template located in
`flexjar_analytics/reporting/templates/digest.md.j2`.

Building the context runs the aggregators; the template only formats.
"""
from __future__ import annotations

import datetime
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from flexjar_analytics import config
from flexjar_analytics.analysis.themes import ThemeStat
from flexjar_analytics.filters import FilterSpec, TeamDirectory, apply_filters, as_filter_spec
from flexjar_analytics.models import Submission, Theme
from flexjar_analytics.reporting.blockers import blocker_stats
from flexjar_analytics.reporting.discovery import discovery_stats
from flexjar_analytics.reporting.models import OverviewResult, TextFieldStats
from flexjar_analytics.reporting.overview import overview_stats
from flexjar_analytics.reporting.task_priority import task_priority_stats
from flexjar_analytics.reporting.toptasks import top_tasks_stats

__all__ = [
    "Headline",
    "ThemeLine",
    "TaskLine",
    "DigestContext",
    "build_digest_context",
]

DEFAULT_TITLE = "Flexjar feedback digest"


@dataclass(slots=True)
class Headline:
    """Totals displayed at the top of the digest."""

    total: int
    with_text: int
    period_from: str
    period_to: str
    days: int
    average_rating: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` representation suitable for Jinja."""
        return asdict(self)


@dataclass(slots=True)
class ThemeLine:
    name: str
    count: int
    examples: List[str] = field(default_factory=list)
    success_rate: Optional[str] = None


@dataclass(slots=True)
class TaskLine:
    task: str
    total: int
    success_rate: str
    tpi: Optional[int] = None


@dataclass(slots=True)
class DigestContext:
    """Container with all fields used by the digest template."""

    # Header & meta
    title: str
    date: str  # ISO-8601 date the digest was built
    headline: Headline

    # Privacy masking replaces every section below
    masked: bool = False
    privacy_reason: Optional[str] = None

    # Sections; empty lists are skipped by the template
    tasks: List[TaskLine] = field(default_factory=list)
    overall_tpi: Optional[int] = None
    long_neck: List[str] = field(default_factory=list)
    discovery_themes: List[ThemeLine] = field(default_factory=list)
    blocker_themes: List[ThemeLine] = field(default_factory=list)
    top_words: List[str] = field(default_factory=list)
    recent_comments: List[str] = field(default_factory=list)

    # Misc / versioning
    version: str = "1"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` (recursively) for Jinja rendering."""
        return asdict(self)

    # Alias for convenience (e.g. template kwargs)
    __call__ = to_dict


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------
def _theme_lines(stats: Iterable[ThemeStat]) -> List[ThemeLine]:
    return [
        ThemeLine(
            name=s.theme,
            count=s.count,
            examples=list(s.examples),
            success_rate=None if s.success_rate is None else f"{s.success_rate:.0%}",
        )
        for s in stats
    ]


def _recent_comments(overview: OverviewResult, limit: int) -> List[str]:
    responses = [
        r
        for stat in overview.field_stats.values()
        if isinstance(stat.stats, TextFieldStats)
        for r in stat.stats.recent_responses
    ]
    responses.sort(key=lambda r: r.submitted_at, reverse=True)
    return [r.text for r in responses[:limit]]


def build_digest_context(
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    themes: Sequence[Theme] = (),
    teams: Optional[TeamDirectory] = None,
    *,
    title: Optional[str] = None,
    today: Optional[datetime.date] = None,
) -> DigestContext:
    """Run every aggregator over *items* and collect the digest sections.

    The function is *pure*; it does not mutate *items* or *themes*.
    """
    today = today or datetime.date.today()
    spec = as_filter_spec(spec)
    # filter once; the aggregators re-apply the same spec idempotently
    items = apply_filters(items, spec, teams)

    overview = overview_stats(items, spec, teams, today=today)
    headline = Headline(
        total=overview.total_count,
        with_text=overview.count_with_text,
        period_from=overview.period.from_date,
        period_to=overview.period.to_date,
        days=overview.period.days,
        average_rating=(
            None if overview.average_rating is None else round(overview.average_rating, 1)
        ),
    )
    context = DigestContext(
        title=title or DEFAULT_TITLE,
        date=today.isoformat(),
        headline=headline,
        version=os.getenv("FLEXJAR_DIGEST_VERSION", "1"),
    )
    if overview.privacy is not None:
        context.masked = True
        context.privacy_reason = overview.privacy.reason
        return context

    top_tasks = top_tasks_stats(items, spec, themes, teams)
    context.tasks = [
        TaskLine(
            task=t.task,
            total=t.total_count,
            success_rate=t.formatted_success_rate,
            tpi=t.tpi_score,
        )
        for t in top_tasks.tasks
    ]
    context.overall_tpi = top_tasks.overall_tpi

    priority = task_priority_stats(items, spec, teams)
    context.long_neck = [t.task for t in priority.long_neck()]

    discovery = discovery_stats(items, spec, themes, teams)
    context.discovery_themes = _theme_lines(discovery.themes)
    context.top_words = [w.word for w in discovery.word_frequency[: config.FIELD_KEYWORD_LIMIT]]

    context.blocker_themes = _theme_lines(blocker_stats(items, spec, themes, teams).themes)
    context.recent_comments = _recent_comments(overview, config.RECENT_LIMIT)
    return context
