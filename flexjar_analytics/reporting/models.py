"""Typed results returned by the aggregators.

Each result is a plain dataclass; ``to_dict()`` (from :class:`WireModel`)
produces the camelCase JSON shape the dashboard consumes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from flexjar_analytics.analysis.themes import ThemeStat
from flexjar_analytics.analysis.wordfreq import KeywordCount, SourceResponse, WordCount
from flexjar_analytics.models import Submission
from flexjar_analytics.utils import WireModel

# ---------------------------------------------------------------------------
# Top Tasks
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class BlockerThemeSummary(WireModel):
    theme_name: str
    color: str
    count: int
    examples: List[str] = field(default_factory=list)


@dataclass(slots=True)
class DailyStat(WireModel):
    total: int = 0
    success: int = 0


@dataclass(slots=True)
class TopTaskStats(WireModel):
    """Completion statistics for one task."""

    task: str
    total_count: int = 0
    success_count: int = 0
    partial_count: int = 0
    failure_count: int = 0
    success_rate: float = 0.0
    formatted_success_rate: str = "0%"
    blocker_counts: Dict[str, int] = field(default_factory=dict)
    blockers_by_theme: Optional[Dict[str, BlockerThemeSummary]] = None
    avg_time_ms: Optional[int] = None
    target_time_ms: Optional[int] = None
    tpi_score: Optional[int] = None


@dataclass(slots=True)
class TopTasksResult(WireModel):
    total_submissions: int
    tasks: List[TopTaskStats] = field(default_factory=list)
    daily_stats: Dict[str, DailyStat] = field(default_factory=dict)
    question_text: Optional[str] = None
    overall_tpi: Optional[int] = None
    avg_completion_time_ms: Optional[int] = None
    other_tasks_percentage: int = 0

    def task(self, name: str) -> Optional[TopTaskStats]:
        """Return the stats for task *name* or ``None``."""
        for stats in self.tasks:
            if stats.task == name:
                return stats
        return None


# ---------------------------------------------------------------------------
# Discovery & blockers
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class DiscoveryRecent(WireModel):
    task: str
    submitted_at: str
    success: Optional[str] = None
    blocker: Optional[str] = None


@dataclass(slots=True)
class DiscoveryResult(WireModel):
    total_submissions: int
    word_frequency: List[WordCount] = field(default_factory=list)
    themes: List[ThemeStat] = field(default_factory=list)
    recent_responses: List[DiscoveryRecent] = field(default_factory=list)


@dataclass(slots=True)
class RecentBlocker(WireModel):
    blocker: str
    task: str
    submitted_at: str


@dataclass(slots=True)
class BlockerResult(WireModel):
    total_blockers: int
    word_frequency: List[WordCount] = field(default_factory=list)
    themes: List[ThemeStat] = field(default_factory=list)
    recent_blockers: List[RecentBlocker] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Task priority
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class TaskVote(WireModel):
    task: str
    votes: int
    percentage: int = 0


@dataclass(slots=True)
class TaskPriorityResult(WireModel):
    total_submissions: int
    tasks: List[TaskVote] = field(default_factory=list)
    # number of leading tasks whose cumulative share reaches the threshold
    long_neck_cutoff: int = 0
    cumulative_percentage_at5: int = 0

    def long_neck(self) -> List[TaskVote]:
        """Tasks inside the long neck."""
        return self.tasks[: self.long_neck_cutoff]


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class RatingFieldStats(WireModel):
    average: float
    distribution: Dict[str, int]
    type: str = "rating"


@dataclass(slots=True)
class TextFieldStats(WireModel):
    response_count: int
    response_rate: int
    top_keywords: List[KeywordCount] = field(default_factory=list)
    recent_responses: List[SourceResponse] = field(default_factory=list)
    type: str = "text"


@dataclass(slots=True)
class ChoiceCount(WireModel):
    label: str
    count: int
    percentage: int = 0


@dataclass(slots=True)
class ChoiceFieldStats(WireModel):
    distribution: Dict[str, ChoiceCount]
    type: str = "choice"


@dataclass(slots=True)
class FieldStat(WireModel):
    field_id: str
    field_type: str
    label: str
    stats: Union[RatingFieldStats, TextFieldStats, ChoiceFieldStats]


@dataclass(slots=True)
class GroupRating(WireModel):
    """Submission count and mean rating for one group (device, path, ...)."""

    count: int
    average_rating: float


@dataclass(slots=True)
class DayRating(WireModel):
    average: float
    count: int


@dataclass(slots=True)
class Period(WireModel):
    from_date: str
    to_date: str
    days: int


@dataclass(slots=True)
class PrivacyInfo(WireModel):
    masked: bool
    threshold: int
    reason: Optional[str] = None


@dataclass(slots=True)
class OverviewResult(WireModel):
    total_count: int
    count_with_text: int
    count_without_text: int
    period: Period
    by_rating: Dict[str, int] = field(default_factory=dict)
    by_app: Dict[str, int] = field(default_factory=dict)
    by_date: Dict[str, int] = field(default_factory=dict)
    by_survey_id: Dict[str, int] = field(default_factory=dict)
    average_rating: Optional[float] = None
    rating_by_date: Dict[str, DayRating] = field(default_factory=dict)
    by_device: Dict[str, GroupRating] = field(default_factory=dict)
    by_pathname: Dict[str, GroupRating] = field(default_factory=dict)
    lowest_rating_paths: Dict[str, GroupRating] = field(default_factory=dict)
    field_stats: Dict[str, FieldStat] = field(default_factory=dict)
    survey_type: Optional[str] = None
    privacy: Optional[PrivacyInfo] = None


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class MetadataValueCount(WireModel):
    value: str
    count: int


@dataclass(slots=True)
class ContextTagsResult(WireModel):
    survey_id: Optional[str]
    context_tags: Dict[str, List[MetadataValueCount]] = field(default_factory=dict)
    max_cardinality: Optional[int] = None


@dataclass(slots=True)
class SurveyTypeCount(WireModel):
    type: str
    count: int
    percentage: int = 0


@dataclass(slots=True)
class SurveyTypeDistribution(WireModel):
    total_surveys: int
    distribution: List[SurveyTypeCount] = field(default_factory=list)


@dataclass(slots=True)
class FeedbackPage(WireModel):
    """One page of submissions, newest first. ``number`` is zero-based."""

    content: List[Submission]
    total_pages: int
    total_elements: int
    size: int
    number: int
    has_next: bool
    has_previous: bool
