"""Unit tests for DigestContext and its builder."""
from __future__ import annotations

import datetime

from builders import make_discovery, make_submission, make_theme, make_top_task, make_vote, rating, text

from flexjar_analytics import config
from flexjar_analytics.models import AnalysisContext
from flexjar_analytics.reporting.context import DigestContext, Headline, build_digest_context

TODAY = datetime.date(2025, 1, 31)


def _sample_context() -> DigestContext:
    headline = Headline(
        total=3, with_text=1, period_from="2025-01-01", period_to="2025-01-31", days=31
    )
    return DigestContext(title="Digest", date="2025-01-31", headline=headline)


def test_to_dict_roundtrip() -> None:
    """`to_dict` should convert to a nested dict and alias __call__."""
    ctx = _sample_context()
    as_dict = ctx.to_dict()

    assert as_dict["title"] == "Digest"
    assert as_dict["headline"] == ctx.headline.to_dict()
    assert as_dict["tasks"] == []
    assert ctx() == as_dict


def _items():
    return [
        make_top_task("Søke", "ja", duration_ms=30000),
        make_top_task("Søke", "nei", blocker="BankID feilet"),
        make_discovery("søknad om dagpenger", "yes"),
        make_vote("a", options={"a": "Se vedtak"}),
        make_submission(rating(4), text("Fin side"), submitted_at="2025-01-20T10:00:00Z"),
    ]


def test_build_digest_context_collects_sections():
    themes = [
        make_theme("app", "Søknad", ["søknad"]),
        make_theme("login", "Innlogging", ["bankid"], context=AnalysisContext.BLOCKER),
    ]
    ctx = build_digest_context(_items(), themes=themes, today=TODAY)

    assert ctx.date == "2025-01-31"
    assert ctx.headline.total == 5
    assert ctx.headline.average_rating == 4.0
    assert [(t.task, t.success_rate) for t in ctx.tasks] == [("Søke", "50%")]
    assert ctx.long_neck == ["Se vedtak"]
    assert [t.name for t in ctx.discovery_themes] == ["Søknad"]
    assert ctx.discovery_themes[0].success_rate == "100%"
    assert [t.name for t in ctx.blocker_themes] == ["Innlogging"]
    assert "Fin side" in ctx.recent_comments
    assert ctx.masked is False


def test_masked_context_has_no_sections(monkeypatch):
    monkeypatch.setattr(config, "MIN_AGGREGATION_THRESHOLD", 50)
    ctx = build_digest_context(_items(), today=TODAY)

    assert ctx.masked is True
    assert ctx.privacy_reason
    assert ctx.tasks == []
    assert ctx.recent_comments == []


def test_filters_apply_to_every_section():
    ctx = build_digest_context(_items(), {"query": "dagpenger"}, today=TODAY)

    assert ctx.headline.total == 1
    assert ctx.tasks == []
    assert ctx.top_words == ["søknad", "dagpenger"]
