"""Top Tasks completion statistics and the Task Performance Indicator."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from flexjar_analytics import config
from flexjar_analytics.analysis.extractors import (
    TASK_FIELDS,
    SuccessStatus,
    blocker_text,
    success_status,
    task_label,
)
from flexjar_analytics.analysis.themes import cluster_by_theme, select_themes
from flexjar_analytics.analysis.wordfreq import TextResponse
from flexjar_analytics.filters import FilterSpec, TeamDirectory, as_filter_spec, apply_filters
from flexjar_analytics.models import AnalysisContext, SingleChoiceAnswer, Submission, SurveyType, Theme
from flexjar_analytics.reporting.models import (
    BlockerThemeSummary,
    DailyStat,
    TopTaskStats,
    TopTasksResult,
)
from flexjar_analytics.utils import round_half_up, safe_ratio

__all__ = ["tpi_score", "top_tasks_stats"]

logger = logging.getLogger(__name__)

# Example blocker texts shown per theme on a task card
BLOCKER_THEME_EXAMPLES = 2

_OTHER_TASK_MARKERS = ("annet", "other")


def tpi_score(success_rate: float, avg_time_ms: float, target_time_ms: float) -> int:
    """Return the Task Performance Indicator (0-100).

    ``round(success_rate × min(1, target / avg) × 100)``. A non-positive
    average time counts as fully efficient.
    """
    efficiency = 1.0 if avg_time_ms <= 0 else min(1.0, target_time_ms / avg_time_ms)
    return round_half_up(success_rate * efficiency * 100)


@dataclass(slots=True)
class _TaskTally:
    task: str
    total: int = 0
    success: int = 0
    partial: int = 0
    failure: int = 0
    duration_sum: int = 0
    duration_count: int = 0
    blocker_counts: Dict[str, int] = field(default_factory=dict)
    blockers: List[TextResponse] = field(default_factory=list)

    def add(self, item: Submission, status: Optional[SuccessStatus]) -> None:
        self.total += 1
        if status == SuccessStatus.YES:
            self.success += 1
        elif status == SuccessStatus.PARTIAL:
            self.partial += 1
        elif status == SuccessStatus.NO:
            self.failure += 1

        if item.duration_ms:
            self.duration_sum += item.duration_ms
            self.duration_count += 1

        if status in (SuccessStatus.PARTIAL, SuccessStatus.NO):
            text = blocker_text(item)
            if text:
                self.blocker_counts[text] = self.blocker_counts.get(text, 0) + 1
                self.blockers.append(TextResponse(text=text, submitted_at=item.submitted_at))

    def avg_time_ms(self) -> int:
        if not self.duration_count:
            return config.DEFAULT_TIME_MS
        return round_half_up(self.duration_sum / self.duration_count)


def _blockers_by_theme(
    tally: _TaskTally, pool: Sequence[Theme]
) -> Optional[Dict[str, BlockerThemeSummary]]:
    if not tally.blockers:
        return None
    stats = cluster_by_theme(tally.blockers, pool, max_examples=BLOCKER_THEME_EXAMPLES)
    return {
        s.theme_id: BlockerThemeSummary(
            theme_name=s.theme, color=s.color, count=s.count, examples=s.examples
        )
        for s in stats
    } or None


def _to_stats(tally: _TaskTally, pool: Sequence[Theme]) -> TopTaskStats:
    rate = safe_ratio(tally.success, tally.total)
    avg_time = tally.avg_time_ms()
    target = config.TARGET_TIME_MS
    return TopTaskStats(
        task=tally.task,
        total_count=tally.total,
        success_count=tally.success,
        partial_count=tally.partial,
        failure_count=tally.failure,
        success_rate=rate,
        formatted_success_rate=f"{round_half_up(rate * 100)}%",
        blocker_counts=dict(tally.blocker_counts),
        blockers_by_theme=_blockers_by_theme(tally, pool),
        avg_time_ms=avg_time,
        target_time_ms=target,
        tpi_score=tpi_score(rate, avg_time, target),
    )


def _question_text(items: Iterable[Submission]) -> Optional[str]:
    for item in items:
        for answer in item.answers:
            if answer.field_id in TASK_FIELDS and isinstance(answer, SingleChoiceAnswer):
                return answer.question.label or None
    return None


def top_tasks_stats(
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    themes: Sequence[Theme] = (),
    teams: Optional[TeamDirectory] = None,
) -> TopTasksResult:
    """Aggregate Top Tasks responses into per-task success and TPI figures."""
    spec = as_filter_spec(spec)
    filtered = [
        item
        for item in apply_filters(items, spec, teams)
        if item.survey_type == SurveyType.TOP_TASKS
    ]
    pool = select_themes(themes, AnalysisContext.BLOCKER, spec.team)

    tallies: Dict[str, _TaskTally] = {}
    daily: Dict[str, DailyStat] = {}
    skipped = 0
    for item in filtered:
        label = task_label(item)
        if label is None:
            skipped += 1
            continue
        status = success_status(item)
        tally = tallies.get(label)
        if tally is None:
            tally = tallies[label] = _TaskTally(task=label)
        tally.add(item, status)

        day = daily.setdefault(item.day, DailyStat())
        day.total += 1
        if status == SuccessStatus.YES:
            day.success += 1

    if skipped:
        logger.debug("Skipped %d Top Tasks submissions without a task answer", skipped)

    tasks = sorted(
        (_to_stats(t, pool) for t in tallies.values()),
        key=lambda s: s.total_count,
        reverse=True,
    )
    total = sum(t.total_count for t in tasks)

    overall_tpi = avg_completion = None
    if tasks:
        overall_tpi = round_half_up(sum(t.tpi_score for t in tasks) / len(tasks))
        avg_completion = round_half_up(sum(t.avg_time_ms for t in tasks) / len(tasks))

    other = next(
        (t for t in tasks if any(m in t.task.lower() for m in _OTHER_TASK_MARKERS)),
        None,
    )
    other_pct = round_half_up(safe_ratio(other.total_count, total) * 100) if other else 0

    return TopTasksResult(
        total_submissions=total,
        tasks=tasks,
        daily_stats=daily,
        question_text=_question_text(filtered),
        overall_tpi=overall_tpi,
        avg_completion_time_ms=avg_completion,
        other_tasks_percentage=other_pct,
    )
