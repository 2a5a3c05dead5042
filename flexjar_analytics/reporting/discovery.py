"""Discovery survey analysis: what visitors came to do and whether they managed."""
from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from flexjar_analytics import config
from flexjar_analytics.analysis.extractors import blocker_text, success_status, task_text
from flexjar_analytics.analysis.themes import cluster_by_theme, select_themes
from flexjar_analytics.analysis.wordfreq import TextResponse, word_frequency
from flexjar_analytics.filters import FilterSpec, TeamDirectory, apply_filters, as_filter_spec
from flexjar_analytics.models import AnalysisContext, Submission, SurveyType, Theme
from flexjar_analytics.reporting.models import DiscoveryRecent, DiscoveryResult

__all__ = ["discovery_stats"]

logger = logging.getLogger(__name__)


def discovery_stats(
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    themes: Sequence[Theme] = (),
    teams: Optional[TeamDirectory] = None,
) -> DiscoveryResult:
    """Cluster and rank the free-text tasks of Discovery responses.

    Every Discovery submission counts towards ``totalSubmissions``; only
    those with a task text feed the word frequency, themes and recent list.
    """
    spec = as_filter_spec(spec)
    filtered = [
        item
        for item in apply_filters(items, spec, teams)
        if item.survey_type == SurveyType.DISCOVERY
    ]

    responses: List[TextResponse] = []
    recent: List[DiscoveryRecent] = []
    for item in filtered:
        task = task_text(item)
        if task is None:
            logger.debug("Discovery submission %s has no task text", item.id)
            continue
        status = success_status(item)
        success = status.value if status is not None else None
        responses.append(
            TextResponse(text=task, submitted_at=item.submitted_at, success=success)
        )
        recent.append(
            DiscoveryRecent(
                task=task,
                submitted_at=item.submitted_at,
                success=success,
                blocker=blocker_text(item),
            )
        )

    pool = select_themes(themes, AnalysisContext.GENERAL_FEEDBACK, spec.team)
    recent.sort(key=lambda r: r.submitted_at, reverse=True)

    return DiscoveryResult(
        total_submissions=len(filtered),
        word_frequency=word_frequency(responses),
        themes=cluster_by_theme(responses, pool, with_success_rate=True),
        recent_responses=recent[: config.RECENT_LIMIT],
    )
