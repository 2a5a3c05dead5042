"""Task Priority ("long neck") vote distribution."""
from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Union

from flexjar_analytics import config
from flexjar_analytics.analysis.extractors import priority_answer
from flexjar_analytics.filters import FilterSpec, TeamDirectory, apply_filters
from flexjar_analytics.models import Submission, SurveyType
from flexjar_analytics.reporting.models import TaskPriorityResult, TaskVote
from flexjar_analytics.utils import percentage

__all__ = ["long_neck_cutoff", "task_priority_stats"]


def long_neck_cutoff(percentages: Iterable[int], threshold: Optional[int] = None) -> int:
    """Return the length of the shortest prefix whose sum reaches *threshold*.

    ``0`` means the threshold is never reached.
    """
    threshold = config.LONG_NECK_THRESHOLD if threshold is None else threshold
    cumulative = 0
    for index, pct in enumerate(percentages, start=1):
        cumulative += pct
        if cumulative >= threshold:
            return index
    return 0


def task_priority_stats(
    items: Iterable[Submission],
    spec: Union[FilterSpec, Mapping[str, str], None] = None,
    teams: Optional[TeamDirectory] = None,
) -> TaskPriorityResult:
    """Tally ``priority`` votes and locate the long neck."""
    filtered = [
        item
        for item in apply_filters(items, spec, teams)
        if item.survey_type == SurveyType.TASK_PRIORITY
    ]

    votes: Dict[str, int] = {}
    labels: Dict[str, str] = {}
    for item in filtered:
        answer = priority_answer(item)
        if answer is None:
            continue
        for option in answer.question.options:
            labels.setdefault(option.id, option.label)
        for option_id in answer.selected_option_ids:
            votes[option_id] = votes.get(option_id, 0) + 1

    total_votes = sum(votes.values())
    tasks = [
        TaskVote(
            task=labels.get(option_id, option_id),
            votes=count,
            percentage=percentage(count, total_votes),
        )
        for option_id, count in votes.items()
    ]
    # stable: ties keep first-seen order
    tasks.sort(key=lambda t: t.votes, reverse=True)

    return TaskPriorityResult(
        total_submissions=len(filtered),
        tasks=tasks,
        long_neck_cutoff=long_neck_cutoff(t.percentage for t in tasks),
        cumulative_percentage_at5=sum(t.percentage for t in tasks[:5]),
    )
