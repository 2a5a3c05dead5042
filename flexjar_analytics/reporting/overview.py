"""Generic overview statistics for any survey type."""
from __future__ import annotations

import datetime
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from flexjar_analytics import config
from flexjar_analytics.analysis.extractors import rating_value
from flexjar_analytics.analysis.wordfreq import SourceResponse, top_keywords
from flexjar_analytics.filters import FilterSpec, TeamDirectory, apply_filters, as_filter_spec
from flexjar_analytics.models import (
    Answer,
    ChoiceOption,
    FieldType,
    MultiChoiceAnswer,
    RatingAnswer,
    SingleChoiceAnswer,
    Submission,
    SurveyType,
    TextAnswer,
)
from flexjar_analytics.reporting.models import (
    ChoiceCount,
    ChoiceFieldStats,
    DayRating,
    FieldStat,
    GroupRating,
    OverviewResult,
    Period,
    PrivacyInfo,
    RatingFieldStats,
    TextFieldStats,
)
from flexjar_analytics.utils import percentage, round_half_up, safe_ratio

__all__ = ["calculate_period", "field_stats", "overview_stats"]

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"
RATING_SCALE = ("1", "2", "3", "4", "5")
PATHNAME_LIMIT = 10
LOW_PATH_LIMIT = 5
LOW_PATH_MIN_COUNT = 3
LOW_PATH_MAX_AVERAGE = 3.0


def _one_decimal(value: float) -> float:
    return round_half_up(value * 10) / 10


# ---------------------------------------------------------------------------
# Period
# ---------------------------------------------------------------------------


def calculate_period(
    from_date: Optional[datetime.date] = None,
    to_date: Optional[datetime.date] = None,
    *,
    today: Optional[datetime.date] = None,
) -> Period:
    """Return the effective reporting period (inclusive at both ends).

    A missing ``to_date`` defaults to *today*, a missing ``from_date`` to the
    start of the default period ending *today*. An inverted range has zero days.
    """
    today = today or datetime.date.today()
    start = from_date or today - datetime.timedelta(days=config.DEFAULT_PERIOD_DAYS - 1)
    end = to_date or today
    return Period(
        from_date=start.isoformat(),
        to_date=end.isoformat(),
        days=max(0, (end - start).days + 1),
    )


# ---------------------------------------------------------------------------
# Per-field statistics
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _FieldAccumulator:
    field_id: str
    field_type: FieldType
    label: str
    answers: List[Answer] = field(default_factory=list)
    texts: List[SourceResponse] = field(default_factory=list)
    options: Sequence[ChoiceOption] = ()


def _rating_stats(answers: Sequence[Answer]) -> Optional[RatingFieldStats]:
    ratings = [a.rating for a in answers if isinstance(a, RatingAnswer)]
    if not ratings:
        return None
    distribution = {key: 0 for key in RATING_SCALE}
    for rating in ratings:
        key = str(rating)
        if key in distribution:
            distribution[key] += 1
    return RatingFieldStats(
        average=safe_ratio(sum(ratings), len(ratings)), distribution=distribution
    )


def _text_stats(acc: _FieldAccumulator, total: int) -> Optional[TextFieldStats]:
    if not acc.texts:
        return None
    recent = sorted(acc.texts, key=lambda r: r.submitted_at, reverse=True)
    return TextFieldStats(
        response_count=len(acc.texts),
        response_rate=percentage(len(acc.texts), total),
        top_keywords=top_keywords(r.text for r in acc.texts),
        recent_responses=recent[: config.RECENT_LIMIT],
    )


def _choice_stats(acc: _FieldAccumulator) -> Optional[ChoiceFieldStats]:
    selections: Counter[str] = Counter()
    for answer in acc.answers:
        if isinstance(answer, SingleChoiceAnswer) and answer.selected_option_id:
            selections[answer.selected_option_id] += 1
        elif isinstance(answer, MultiChoiceAnswer):
            selections.update(answer.selected_option_ids)
    total = sum(selections.values())
    if not total:
        return None

    labels = {o.id: o.label for o in acc.options}
    # declared options first, then ids that were selected but never declared
    ids = list(labels) + [i for i in selections if i not in labels]
    return ChoiceFieldStats(
        distribution={
            option_id: ChoiceCount(
                label=labels.get(option_id, option_id),
                count=selections[option_id],
                percentage=percentage(selections[option_id], total),
            )
            for option_id in ids
        }
    )


def field_stats(items: Sequence[Submission]) -> Dict[str, FieldStat]:
    """Per-field statistics keyed by field id, in first-seen order.

    The field type is fixed by the first answer seen for a field id; answers
    of another variant on the same id are ignored. Fields without any usable
    response are omitted.
    """
    fields: Dict[str, _FieldAccumulator] = {}
    for item in items:
        for answer in item.answers:
            acc = fields.get(answer.field_id)
            if acc is None:
                acc = fields[answer.field_id] = _FieldAccumulator(
                    field_id=answer.field_id,
                    field_type=answer.field_type,
                    label=answer.question.label,
                )
            if answer.field_type != acc.field_type:
                continue
            acc.answers.append(answer)
            if not acc.options and answer.question.options:
                acc.options = answer.question.options
            if isinstance(answer, TextAnswer) and answer.text.strip():
                acc.texts.append(
                    SourceResponse(text=answer.text, submitted_at=item.submitted_at)
                )

    result: Dict[str, FieldStat] = {}
    for acc in fields.values():
        if acc.field_type == FieldType.RATING:
            stats = _rating_stats(acc.answers)
        elif acc.field_type == FieldType.TEXT:
            stats = _text_stats(acc, len(items))
        elif acc.field_type in (FieldType.SINGLE_CHOICE, FieldType.MULTI_CHOICE):
            stats = _choice_stats(acc)
        else:
            stats = None
        if stats is None:
            continue
        result[acc.field_id] = FieldStat(
            field_id=acc.field_id,
            field_type=acc.field_type.value,
            label=acc.label,
            stats=stats,
        )
    return result


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _RatingGroup:
    count: int = 0
    rated: int = 0
    total: int = 0

    def add(self, rating: Optional[int]) -> None:
        self.count += 1
        if rating is not None:
            self.rated += 1
            self.total += rating

    @property
    def average(self) -> float:
        return safe_ratio(self.total, self.rated)

    def to_result(self) -> GroupRating:
        return GroupRating(count=self.count, average_rating=_one_decimal(self.average))


def _lowest_rating_paths(paths: Dict[str, _RatingGroup]) -> Dict[str, GroupRating]:
    candidates = [
        (name, group)
        for name, group in paths.items()
        if name != UNKNOWN
        and group.count >= LOW_PATH_MIN_COUNT
        and group.rated
        and group.average < LOW_PATH_MAX_AVERAGE
    ]
    candidates.sort(key=lambda pair: pair[1].average)
    return {name: group.to_result() for name, group in candidates[:LOW_PATH_LIMIT]}


def _privacy(total: int, threshold: int) -> Optional[PrivacyInfo]:
    if not (0 < total < threshold):
        return None
    return PrivacyInfo(
        masked=True,
        threshold=threshold,
        reason=(
            f"Antall svar ({total}) er under {threshold}. "
            "Statistikk vises ikke av hensyn til personvern."
        ),
    )


def overview_stats(
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    teams: Optional[TeamDirectory] = None,
    *,
    today: Optional[datetime.date] = None,
    privacy_threshold: Optional[int] = None,
) -> OverviewResult:
    """Counts, rating breakdowns and per-field statistics for a result set.

    When the result set is non-empty but smaller than *privacy_threshold*
    (``MIN_AGGREGATION_THRESHOLD`` by default) every breakdown is emptied and
    ``privacy`` explains why. Totals and the period are always reported.
    """
    spec = as_filter_spec(spec)
    filtered = apply_filters(items, spec, teams)
    total = len(filtered)
    period = calculate_period(spec.from_date, spec.to_date, today=today)

    threshold = (
        config.MIN_AGGREGATION_THRESHOLD if privacy_threshold is None else privacy_threshold
    )
    with_text = sum(1 for item in filtered if item.has_text())
    privacy = _privacy(total, threshold)
    if privacy is not None:
        logger.info("Masking overview of %d submissions (threshold %d)", total, threshold)
        return OverviewResult(
            total_count=total,
            count_with_text=with_text,
            count_without_text=total - with_text,
            period=period,
            privacy=privacy,
        )

    by_rating = {key: 0 for key in RATING_SCALE}
    by_app: Counter[str] = Counter()
    by_date: Counter[str] = Counter()
    by_survey: Counter[str] = Counter()
    ratings_by_day: Dict[str, _RatingGroup] = {}
    devices: Dict[str, _RatingGroup] = {}
    paths: Dict[str, _RatingGroup] = {}
    rating_sum = rating_count = 0

    for item in filtered:
        rating = rating_value(item)
        devices.setdefault(item.device_type or UNKNOWN, _RatingGroup()).add(rating)
        paths.setdefault(item.pathname or UNKNOWN, _RatingGroup()).add(rating)
        if rating is not None:
            if str(rating) in by_rating:
                by_rating[str(rating)] += 1
            rating_sum += rating
            rating_count += 1
            ratings_by_day.setdefault(item.day, _RatingGroup()).add(rating)
        by_app[item.app or UNKNOWN] += 1
        by_date[item.day] += 1
        by_survey[item.survey_id] += 1

    top_paths = sorted(paths.items(), key=lambda pair: pair[1].count, reverse=True)

    return OverviewResult(
        total_count=total,
        count_with_text=with_text,
        count_without_text=total - with_text,
        period=period,
        by_rating=by_rating,
        by_app=dict(by_app),
        by_date=dict(by_date),
        by_survey_id=dict(by_survey),
        average_rating=safe_ratio(rating_sum, rating_count) if rating_count else None,
        rating_by_date={
            day: DayRating(average=_one_decimal(group.average), count=group.rated)
            for day, group in ratings_by_day.items()
        },
        by_device={name: group.to_result() for name, group in devices.items()},
        by_pathname={
            name: group.to_result() for name, group in top_paths[:PATHNAME_LIMIT]
        },
        lowest_rating_paths=_lowest_rating_paths(paths),
        field_stats=field_stats(filtered),
        survey_type=(filtered[0].survey_type or SurveyType.RATING.value) if filtered else None,
    )
