"""Flat filter specification and the single-pass filter pipeline.

A filter spec is the string mapping the HTTP layer receives as query
parameters. All present keys are AND-combined; a missing or empty key does
not constrain its dimension. The pipeline never reorders or mutates items.
"""
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from flexjar_analytics.analysis.extractors import task_label
from flexjar_analytics.models import RatingAnswer, Submission
from flexjar_analytics.utils import parse_day

__all__ = ["FilterSpec", "TeamDirectory", "apply_filters", "as_filter_spec", "matches"]

logger = logging.getLogger(__name__)

# team -> apps owned by the team
TeamDirectory = Mapping[str, Sequence[str]]

KNOWN_KEYS = frozenset(
    {
        "app",
        "surveyId",
        "team",
        "fromDate",
        "toDate",
        "deviceType",
        "query",
        "tag",
        "segment",
        "task",
        "hasText",
        "lowRating",
    }
)

LOW_RATING_MAX = 2


@dataclass(frozen=True, slots=True)
class FilterSpec:
    """Parsed filter specification. ``None``/empty means "no constraint"."""

    app: Optional[str] = None
    survey_id: Optional[str] = None
    team: Optional[str] = None
    from_date: Optional[datetime.date] = None
    to_date: Optional[datetime.date] = None
    device_type: Optional[str] = None
    query: Optional[str] = None
    tags: Tuple[str, ...] = ()
    segment: Tuple[Tuple[str, str], ...] = ()
    task: Optional[str] = None
    has_text: bool = False
    low_rating: bool = False

    @classmethod
    def from_mapping(cls, params: Optional[Mapping[str, str]]) -> "FilterSpec":
        """Parse the flat string mapping used on the wire.

        Unknown keys are ignored and unparseable dates mean "no bound".
        """
        if not params:
            return cls()

        unknown = set(params) - KNOWN_KEYS
        if unknown:
            logger.debug("Ignoring unsupported filter keys: %s", sorted(unknown))

        def _get(key: str) -> Optional[str]:
            value = params.get(key)
            if value is None:
                return None
            value = str(value).strip()
            return value or None

        return cls(
            app=_get("app"),
            survey_id=_get("surveyId"),
            team=_get("team"),
            from_date=_parse_bound("fromDate", _get("fromDate")),
            to_date=_parse_bound("toDate", _get("toDate")),
            device_type=_get("deviceType"),
            query=_get("query"),
            tags=_split_list(_get("tag")),
            segment=_parse_segment(_get("segment")),
            task=_get("task"),
            has_text=_get("hasText") == "true",
            low_rating=_get("lowRating") == "true",
        )

    def is_empty(self) -> bool:
        return self == FilterSpec()


def _parse_bound(key: str, raw: Optional[str]) -> Optional[datetime.date]:
    if raw is None:
        return None
    parsed = parse_day(raw)
    if parsed is None:
        logger.warning("Ignoring unparseable %s=%r", key, raw)
    return parsed


def _split_list(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _parse_segment(raw: Optional[str]) -> Tuple[Tuple[str, str], ...]:
    pairs: List[Tuple[str, str]] = []
    for part in _split_list(raw):
        key, sep, value = part.partition(":")
        if not sep or not key:
            logger.warning("Ignoring malformed segment filter %r", part)
            continue
        pairs.append((key, value))
    return tuple(pairs)


def as_filter_spec(spec: Union[FilterSpec, Mapping[str, str], None]) -> FilterSpec:
    if isinstance(spec, FilterSpec):
        return spec
    return FilterSpec.from_mapping(spec)


def matches(
    item: Submission,
    spec: Union[FilterSpec, Mapping[str, str], None],
    teams: Optional[TeamDirectory] = None,
) -> bool:
    """Return *True* if *item* satisfies every constraint in *spec*."""
    spec = as_filter_spec(spec)

    if spec.app and item.app != spec.app:
        return False
    if spec.survey_id and item.survey_id != spec.survey_id:
        return False
    if spec.team and teams is not None and item.app not in teams.get(spec.team, ()):
        return False

    if spec.from_date or spec.to_date:
        day = parse_day(item.submitted_at)
        if day is None:
            return False
        if spec.from_date and day < spec.from_date:
            return False
        if spec.to_date and day > spec.to_date:
            return False

    if spec.device_type and item.device_type != spec.device_type:
        return False

    if spec.query:
        haystack = "\n".join(item.text_values()).lower()
        if spec.query.lower() not in haystack:
            return False

    if spec.tags and not any(tag in item.tags for tag in spec.tags):
        return False

    if spec.segment:
        if not item.metadata:
            return False
        if not all(item.metadata.get(k) == v for k, v in spec.segment):
            return False

    if spec.task and task_label(item) != spec.task:
        return False

    if spec.has_text and not item.has_text():
        return False

    if spec.low_rating and not any(
        isinstance(a, RatingAnswer) and a.rating <= LOW_RATING_MAX for a in item.answers
    ):
        return False

    return True


def apply_filters(
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    teams: Optional[TeamDirectory] = None,
) -> List[Submission]:
    """Return the items matching *spec*, preserving their relative order."""
    spec = as_filter_spec(spec)
    if spec.is_empty():
        return list(items)
    return [item for item in items if matches(item, spec, teams)]
