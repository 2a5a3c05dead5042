"""Unit tests for keyword theme clustering."""
from builders import make_theme

from flexjar_analytics.analysis.themes import (
    OTHER_THEME_COLOR,
    cluster_by_theme,
    select_themes,
)
from flexjar_analytics.analysis.wordfreq import TextResponse
from flexjar_analytics.models import AnalysisContext

PAY = make_theme("pay", "Utbetaling", ["utbetaling", "penger"], color="#10b981")
APPLICATION = make_theme("app", "Søknad", ["søknad"])
LOGIN = make_theme("login", "Innlogging", ["innlogging", "bankid"], context=AnalysisContext.BLOCKER)


def _r(text, success=None):
    return TextResponse(text=text, submitted_at="2025-01-01T12:00:00Z", success=success)


def test_response_counts_in_every_matching_theme():
    stats = cluster_by_theme([_r("Status på søknaden om utbetaling")], [PAY, APPLICATION])

    assert {s.theme_id: s.count for s in stats} == {"app": 1, "pay": 1}
    assert all(s.theme != "Annet" for s in stats)


def test_unmatched_responses_go_to_annet_last():
    stats = cluster_by_theme(
        [_r("søknader"), _r("søknaden min"), _r("noe helt annet"), _r("penger")],
        [PAY, APPLICATION],
    )

    assert [(s.theme, s.count) for s in stats] == [
        ("Søknad", 2),
        ("Utbetaling", 1),
        ("Annet", 1),
    ]
    assert stats[-1].theme_id == "annet"
    assert stats[-1].color == OTHER_THEME_COLOR


def test_every_response_lands_somewhere():
    responses = [_r(t) for t in ("søknad", "penger", "hei", "søknad om penger")]
    stats = cluster_by_theme(responses, [PAY, APPLICATION])
    other = next(s for s in stats if s.theme == "Annet")

    matched = sum(s.count for s in stats if s.theme != "Annet")
    # one inclusive double match ("søknad om penger")
    assert matched + other.count == len(responses) + 1


def test_examples_are_distinct_and_capped():
    responses = [_r("søknad"), _r("søknad"), _r("søknaden"), _r("søknader"), _r("min søknad")]
    stat = cluster_by_theme(responses, [APPLICATION], max_examples=3)[0]

    assert stat.count == 5
    assert stat.examples == ["søknad", "søknaden", "søknader"]


def test_success_rate_counts_partial_as_half():
    responses = [_r("søknad", "yes"), _r("søknad", "partial"), _r("søknad", "no"), _r("søknad")]
    stat = cluster_by_theme(responses, [APPLICATION], with_success_rate=True)[0]

    assert stat.success_rate == 1.5 / 4


def test_success_rate_omitted_by_default():
    stat = cluster_by_theme([_r("søknad", "yes")], [APPLICATION])[0]
    assert stat.success_rate is None
    assert "successRate" not in stat.to_dict()


def test_themes_without_matches_are_omitted():
    assert cluster_by_theme([_r("penger")], [PAY, APPLICATION])[0].theme_id == "pay"
    assert len(cluster_by_theme([_r("penger")], [PAY, APPLICATION])) == 1


def test_default_color_and_custom_other_id():
    stats = cluster_by_theme([_r("søknad"), _r("ukjent")], [APPLICATION], other_id="blocker-annet")
    assert stats[0].color == "#3b82f6"
    assert stats[1].theme_id == "blocker-annet"


def test_themes_are_not_mutated():
    before = (PAY.keywords, APPLICATION.keywords)
    cluster_by_theme([_r("søknad penger")], [PAY, APPLICATION])
    assert (PAY.keywords, APPLICATION.keywords) == before


def test_select_themes_partitions_pools_and_team():
    other_team = make_theme("x", "X", ["x"], team="team-b")
    themes = [PAY, APPLICATION, LOGIN, other_team]

    assert select_themes(themes, AnalysisContext.BLOCKER) == [LOGIN]
    assert select_themes(themes, AnalysisContext.GENERAL_FEEDBACK) == [PAY, APPLICATION, other_team]
    assert select_themes(themes, AnalysisContext.GENERAL_FEEDBACK, team="team-b") == [other_team]


def test_hyphenated_word_matches_joined_keyword():
    email = make_theme("mail", "E-post", ["epost"])
    stats = cluster_by_theme([_r("Fikk ikke e-post")], [email])

    assert [(s.theme, s.count) for s in stats] == [("E-post", 1)]


def test_annet_stays_last_even_when_largest():
    alfa = make_theme("a", "Alfa", ["alfa"])
    beta = make_theme("b", "Beta", ["beta"])
    responses = [_r("beta"), _r("alfa"), _r("x1"), _r("x2"), _r("x3")]

    stats = cluster_by_theme(responses, [beta, alfa])

    assert [(s.theme, s.count) for s in stats] == [("Alfa", 1), ("Beta", 1), ("Annet", 3)]
