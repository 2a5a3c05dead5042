"""Unit tests for the generic overview aggregator."""
import datetime

import pytest
from builders import choice, make_submission, multi, rating, text

from flexjar_analytics import config
from flexjar_analytics.reporting.overview import calculate_period, field_stats, overview_stats

TODAY = datetime.date(2025, 1, 31)


@pytest.fixture
def items():
    return [
        make_submission(
            rating(5), text("Veldig bra søknad"),
            submitted_at="2025-01-10T08:00:00Z", device="mobile", pathname="/a", app="app-a",
        ),
        make_submission(
            rating(2), submitted_at="2025-01-10T09:00:00Z", device="mobile", pathname="/b", app="app-a",
        ),
        make_submission(
            rating(1), submitted_at="2025-01-11T09:00:00Z", device="desktop", pathname="/b",
            app="app-b", survey_id="survey-2",
        ),
        make_submission(
            rating(2), text("treg side"),
            submitted_at="2025-01-12T09:00:00Z", device="desktop", pathname="/b", app="app-b",
        ),
        make_submission(submitted_at="2025-01-12T10:00:00Z", device="tablet"),
    ]


def test_counts_and_rating_breakdowns(items):
    result = overview_stats(items, today=TODAY)

    assert result.total_count == 5
    assert result.count_with_text == 2
    assert result.count_without_text == 3
    assert result.by_rating == {"1": 1, "2": 2, "3": 0, "4": 0, "5": 1}
    assert result.average_rating == 2.5
    assert result.by_date == {"2025-01-10": 2, "2025-01-11": 1, "2025-01-12": 2}
    assert result.by_app == {"app-a": 3, "app-b": 2}
    assert result.by_survey_id == {"survey-1": 4, "survey-2": 1}
    assert result.survey_type == "rating"


def test_rating_by_date_one_decimal(items):
    result = overview_stats(items, today=TODAY)
    assert result.rating_by_date["2025-01-10"].average == 3.5
    assert result.rating_by_date["2025-01-12"].count == 1


def test_device_mean_uses_rated_items_only(items):
    by_device = overview_stats(items, today=TODAY).by_device

    assert by_device["mobile"].count == 2
    assert by_device["mobile"].average_rating == 3.5
    assert by_device["tablet"].count == 1
    assert by_device["tablet"].average_rating == 0


def test_pathnames_and_lowest_rating_paths(items):
    result = overview_stats(items, today=TODAY)

    assert list(result.by_pathname) == ["/b", "/a", "unknown"]
    assert result.by_pathname["/b"].count == 3
    assert result.lowest_rating_paths == {"/b": result.by_pathname["/b"]}
    assert result.lowest_rating_paths["/b"].average_rating == pytest.approx(1.7)


def test_average_is_none_without_ratings():
    result = overview_stats([make_submission(text("hei"))], today=TODAY)
    assert result.average_rating is None
    assert "averageRating" not in result.to_dict()


def test_default_period_is_thirty_days_ending_today():
    period = calculate_period(today=TODAY)
    assert (period.from_date, period.to_date, period.days) == ("2025-01-02", "2025-01-31", 30)


def test_period_follows_filter_bounds(items):
    result = overview_stats(items, {"fromDate": "2025-01-10", "toDate": "2025-01-11"}, today=TODAY)
    assert result.period.to_dict() == {"fromDate": "2025-01-10", "toDate": "2025-01-11", "days": 2}
    assert result.total_count == 3


def test_inverted_or_future_period_has_zero_days():
    inverted = calculate_period(datetime.date(2025, 2, 1), datetime.date(2025, 1, 1), today=TODAY)
    future = calculate_period(datetime.date(2025, 3, 1), today=TODAY)

    assert inverted.days == 0
    assert (future.from_date, future.to_date, future.days) == ("2025-03-01", "2025-01-31", 0)


def test_privacy_masking(items, monkeypatch):
    monkeypatch.setattr(config, "MIN_AGGREGATION_THRESHOLD", 10)
    result = overview_stats(items, today=TODAY)

    assert result.privacy.masked is True
    assert result.privacy.threshold == 10
    assert "5" in result.privacy.reason
    assert result.total_count == 5
    assert result.by_rating == {}
    assert result.field_stats == {}
    assert result.average_rating is None


def test_privacy_not_applied_to_empty_or_large_sets(items):
    assert overview_stats([], today=TODAY, privacy_threshold=5).privacy is None
    assert overview_stats(items, today=TODAY, privacy_threshold=5).privacy is None


def test_field_stats_per_type():
    opts = {"a": "Alfa", "b": "Beta", "c": "Gamma"}
    items = [
        make_submission(rating(4), text("lang ventetid"), choice("a", "kanal", opts), submitted_at="2025-01-01T00:00:00Z"),
        make_submission(rating(2), text("  "), choice("b", "kanal", opts), submitted_at="2025-01-02T00:00:00Z"),
        make_submission(rating(3), text("ventetid"), submitted_at="2025-01-03T00:00:00Z"),
        make_submission(multi(["a", "c"], field_id="interesser", options=opts)),
    ]
    stats = field_stats(items)

    assert stats["rating"].to_dict()["stats"] == {
        "type": "rating",
        "average": 3.0,
        "distribution": {"1": 0, "2": 1, "3": 1, "4": 1, "5": 0},
    }

    comment = stats["comment"].stats
    assert comment.response_count == 2
    assert comment.response_rate == 50
    assert comment.top_keywords[0].word == "ventetid"
    assert [r.text for r in comment.recent_responses] == ["ventetid", "lang ventetid"]

    kanal = stats["kanal"].stats.to_dict()
    assert kanal["type"] == "choice"
    assert kanal["distribution"]["a"] == {"label": "Alfa", "count": 1, "percentage": 50}
    assert kanal["distribution"]["c"]["count"] == 0
    assert stats["interesser"].field_type == "MULTI_CHOICE"


def test_field_stats_omit_fields_without_responses():
    assert field_stats([make_submission(text("   "))]) == {}
