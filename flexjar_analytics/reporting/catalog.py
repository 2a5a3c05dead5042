"""Filter options and paged listing for the dashboard's filter bar."""
from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional, Union

from flexjar_analytics import config
from flexjar_analytics.filters import FilterSpec, TeamDirectory, apply_filters
from flexjar_analytics.models import Submission, SurveyType
from flexjar_analytics.reporting.models import (
    ContextTagsResult,
    FeedbackPage,
    MetadataValueCount,
    SurveyTypeCount,
    SurveyTypeDistribution,
)
from flexjar_analytics.utils import percentage

__all__ = [
    "available_tags",
    "context_tags",
    "feedback_page",
    "survey_type_distribution",
    "surveys_by_app",
]

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


def context_tags(
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    survey_id: Optional[str] = None,
    max_cardinality: Optional[int] = None,
    teams: Optional[TeamDirectory] = None,
) -> ContextTagsResult:
    """Metadata keys usable as segments, with value counts (most common first).

    Keys with more distinct values than *max_cardinality* are dropped; they
    are free-form identifiers rather than segments.
    """
    max_cardinality = (
        config.CONTEXT_TAG_MAX_CARDINALITY if max_cardinality is None else max_cardinality
    )
    values: Dict[str, Counter[str]] = {}
    for item in apply_filters(items, spec, teams):
        if survey_id and item.survey_id != survey_id:
            continue
        for key, value in item.metadata.items():
            values.setdefault(key, Counter())[value] += 1

    tags: Dict[str, List[MetadataValueCount]] = {}
    for key, counts in values.items():
        if len(counts) > max_cardinality:
            logger.debug("Dropping metadata key %s with %d distinct values", key, len(counts))
            continue
        tags[key] = [MetadataValueCount(value=v, count=c) for v, c in counts.most_common()]

    return ContextTagsResult(
        survey_id=survey_id, context_tags=tags, max_cardinality=max_cardinality
    )


def survey_type_distribution(items: Iterable[Submission]) -> SurveyTypeDistribution:
    """Number of distinct surveys per survey type.

    A survey's type is taken from its first submission; a missing type
    counts as ``custom``.
    """
    seen = set()
    counts: Counter[str] = Counter()
    for item in items:
        if item.survey_id in seen:
            continue
        seen.add(item.survey_id)
        counts[item.survey_type or SurveyType.CUSTOM.value] += 1

    total = len(seen)
    return SurveyTypeDistribution(
        total_surveys=total,
        distribution=[
            SurveyTypeCount(type=t, count=c, percentage=percentage(c, total))
            for t, c in counts.most_common()
        ],
    )


def surveys_by_app(items: Iterable[Submission]) -> Dict[str, List[str]]:
    """Survey ids per app, in first-seen order."""
    result: Dict[str, List[str]] = {}
    for item in items:
        surveys = result.setdefault(item.app or "unknown", [])
        if item.survey_id not in surveys:
            surveys.append(item.survey_id)
    return result


def available_tags(items: Iterable[Submission]) -> List[str]:
    """Sorted distinct tags used by any submission."""
    return sorted({tag for item in items for tag in item.tags})


def feedback_page(
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    page: int = 0,
    size: int = DEFAULT_PAGE_SIZE,
    teams: Optional[TeamDirectory] = None,
) -> FeedbackPage:
    """Return page *page* (zero-based) of the filtered submissions, newest first."""
    if page < 0 or size <= 0:
        raise ValueError("page must be >= 0 and size must be > 0")

    ordered = sorted(
        apply_filters(items, spec, teams), key=lambda i: i.submitted_at, reverse=True
    )
    start = page * size
    end = start + size
    return FeedbackPage(
        content=ordered[start:end],
        total_pages=math.ceil(len(ordered) / size),
        total_elements=len(ordered),
        size=size,
        number=page,
        has_next=end < len(ordered),
        has_previous=page > 0,
    )
