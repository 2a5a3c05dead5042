"""Unit tests for the shared answer lookups."""
import pytest
from builders import choice, make_discovery, make_submission, make_top_task, multi, rating, text

from flexjar_analytics.analysis.extractors import (
    SuccessStatus,
    blocker_text,
    priority_answer,
    rating_value,
    success_status,
    task_label,
    task_text,
)


def test_task_label_resolves_option_label():
    item = make_top_task("soknad", task_options={"soknad": "Sende søknad"})
    assert task_label(item) == "Sende søknad"


def test_task_label_falls_back_to_raw_id():
    item = make_top_task("ukjent-id", task_options={"soknad": "Sende søknad"})
    assert task_label(item) == "ukjent-id"


def test_task_label_only_for_top_tasks():
    item = make_top_task("soknad", survey_type="discovery")
    assert task_label(item) is None


def test_task_label_wrong_variant_is_none():
    item = make_submission(text("Sende søknad", "task"), survey_type="topTasks")
    assert task_label(item) is None


@pytest.mark.parametrize(
    "option_id, options, expected",
    [
        ("ja", {"ja": "Ja"}, SuccessStatus.YES),
        ("Delvis", None, SuccessStatus.PARTIAL),
        ("no", None, SuccessStatus.NO),
        ("opt-3", {"opt-3": "Nei"}, SuccessStatus.NO),  # matched on label
        ("kanskje", None, None),
    ],
)
def test_success_status(option_id, options, expected):
    item = make_submission(choice(option_id, "taskSuccess", options))
    assert success_status(item) == expected


def test_success_status_missing():
    assert success_status(make_submission()) is None


def test_blocker_text_accepts_hindring_and_strips():
    item = make_submission(text("  fant ikke knappen ", "hindring"))
    assert blocker_text(item) == "fant ikke knappen"
    assert blocker_text(make_submission(text("   ", "blocker"))) is None


def test_task_text_from_text_or_choice():
    assert task_text(make_discovery("Se vedtak")) == "Se vedtak"
    chosen = make_submission(choice("a", "task", {"a": "Endre kontonummer"}))
    assert task_text(chosen) == "Endre kontonummer"
    assert task_text(make_discovery(None)) is None


def test_rating_value_and_priority_answer():
    item = make_submission(text("hei"), rating(4, "overall"), multi(["a", "b"]))
    assert rating_value(item) == 4
    assert priority_answer(item).selected_option_ids == ("a", "b")
    assert rating_value(make_submission()) is None
