"""What stopped people: analysis of Top Tasks blocker texts."""
from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence, Union

from flexjar_analytics import config
from flexjar_analytics.analysis.extractors import blocker_text, task_label
from flexjar_analytics.analysis.themes import cluster_by_theme, select_themes
from flexjar_analytics.analysis.wordfreq import TextResponse, word_frequency
from flexjar_analytics.filters import FilterSpec, TeamDirectory, apply_filters, as_filter_spec
from flexjar_analytics.models import AnalysisContext, Submission, SurveyType, Theme
from flexjar_analytics.reporting.models import BlockerResult, RecentBlocker

__all__ = ["BLOCKER_OTHER_ID", "blocker_stats"]

# Theme id of the catch-all bucket for blockers
BLOCKER_OTHER_ID = "blocker-annet"


def blocker_stats(
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    themes: Sequence[Theme] = (),
    teams: Optional[TeamDirectory] = None,
) -> BlockerResult:
    """Rank and cluster blocker texts. Use the ``task`` filter to drill down."""
    spec = as_filter_spec(spec)

    responses: List[TextResponse] = []
    recent: List[RecentBlocker] = []
    for item in apply_filters(items, spec, teams):
        if item.survey_type != SurveyType.TOP_TASKS:
            continue
        text = blocker_text(item)
        if text is None:
            continue
        responses.append(TextResponse(text=text, submitted_at=item.submitted_at))
        recent.append(
            RecentBlocker(
                blocker=text,
                task=task_label(item) or "",
                submitted_at=item.submitted_at,
            )
        )

    pool = select_themes(themes, AnalysisContext.BLOCKER, spec.team)
    recent.sort(key=lambda r: r.submitted_at, reverse=True)

    return BlockerResult(
        total_blockers=len(responses),
        word_frequency=word_frequency(responses),
        themes=cluster_by_theme(responses, pool, other_id=BLOCKER_OTHER_ID),
        recent_blockers=recent[: config.RECENT_LIMIT],
    )
