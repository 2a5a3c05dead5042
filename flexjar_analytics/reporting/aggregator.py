"""Dispatch a named report to its aggregator."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Union

from flexjar_analytics.exceptions import UnknownReportError
from flexjar_analytics.filters import FilterSpec, TeamDirectory, as_filter_spec
from flexjar_analytics.models import Submission, Theme
from flexjar_analytics.reporting.blockers import blocker_stats
from flexjar_analytics.reporting.catalog import context_tags, survey_type_distribution
from flexjar_analytics.reporting.discovery import discovery_stats
from flexjar_analytics.reporting.overview import overview_stats
from flexjar_analytics.reporting.task_priority import task_priority_stats
from flexjar_analytics.reporting.toptasks import top_tasks_stats
from flexjar_analytics.utils import WireModel

__all__ = ["REPORTS", "aggregate"]

logger = logging.getLogger(__name__)

Report = Callable[
    [Sequence[Submission], FilterSpec, Sequence[Theme], Optional[TeamDirectory]],
    WireModel,
]

# Report name -> aggregator. Every entry takes the same four arguments.
REPORTS: Dict[str, Report] = {
    "overview": lambda items, spec, themes, teams: overview_stats(items, spec, teams),
    "top-tasks": top_tasks_stats,
    "discovery": discovery_stats,
    "blockers": blocker_stats,
    "task-priority": lambda items, spec, themes, teams: task_priority_stats(
        items, spec, teams
    ),
    "context-tags": lambda items, spec, themes, teams: context_tags(
        items, spec, spec.survey_id, teams=teams
    ),
    "survey-types": lambda items, spec, themes, teams: survey_type_distribution(items),
}


def aggregate(
    report: str,
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    themes: Sequence[Theme] = (),
    teams: Optional[TeamDirectory] = None,
) -> WireModel:
    """Run the aggregator registered under *report*.

    Raises
    ------
    UnknownReportError
        If *report* is not a key of :data:`REPORTS`.
    """
    try:
        func = REPORTS[report]
    except KeyError:
        raise UnknownReportError(report) from None

    items = list(items)
    spec = as_filter_spec(spec)
    logger.debug("Running %s report over %d submissions", report, len(items))
    return func(items, spec, themes, teams)
