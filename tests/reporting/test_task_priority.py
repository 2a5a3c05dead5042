"""Unit tests for the Task Priority ("long neck") aggregator."""
import pytest
from builders import make_submission, make_vote

from flexjar_analytics.reporting.task_priority import long_neck_cutoff, task_priority_stats

OPTIONS = {"a": "Søke", "b": "Endre", "c": "Se status"}


def _votes(counts):
    items = []
    for option_id, n in counts.items():
        items += [make_vote(option_id, options=OPTIONS) for _ in range(n)]
    return items


def test_long_neck_scenario():
    result = task_priority_stats(_votes({"a": 50, "b": 30, "c": 20}))

    assert [(t.task, t.votes, t.percentage) for t in result.tasks] == [
        ("Søke", 50, 50),
        ("Endre", 30, 30),
        ("Se status", 20, 20),
    ]
    assert result.long_neck_cutoff == 2
    assert [t.task for t in result.long_neck()] == ["Søke", "Endre"]
    assert result.cumulative_percentage_at5 == 100
    assert result.total_submissions == 100


def test_multi_select_votes_count_per_option():
    items = [make_vote("a", "b", "c", options=OPTIONS), make_vote("a", options=OPTIONS)]
    result = task_priority_stats(items)

    assert result.total_submissions == 2
    assert [(t.task, t.votes) for t in result.tasks] == [("Søke", 2), ("Endre", 1), ("Se status", 1)]
    assert [t.percentage for t in result.tasks] == [50, 25, 25]


def test_unknown_option_keeps_raw_id():
    result = task_priority_stats([make_vote("zzz", options=OPTIONS)])
    assert result.tasks[0].task == "zzz"


@pytest.mark.parametrize(
    "percentages, expected",
    [
        ([50, 30, 20], 2),
        ([80], 1),
        ([10, 10, 10], 0),
        ([], 0),
    ],
)
def test_long_neck_cutoff_is_minimal_prefix(percentages, expected):
    assert long_neck_cutoff(percentages, 80) == expected


def test_ignores_other_survey_types_and_missing_answer():
    items = [make_vote("a", survey_type="rating"), make_submission(survey_type="taskPriority")]
    result = task_priority_stats(items)

    assert result.total_submissions == 1
    assert result.tasks == []
    assert result.long_neck_cutoff == 0
