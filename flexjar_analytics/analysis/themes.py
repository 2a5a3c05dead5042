"""Keyword/stem based theme clustering of free-text responses.

Matching is *inclusive*: a response is credited to every theme that has a
keyword stem among the response's stems. Responses that match no theme are
credited to a catch-all theme named "Annet". The clustering is a single fold
over (response × theme) into per-theme accumulators; themes themselves are
never mutated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set

from flexjar_analytics import config
from flexjar_analytics.analysis.extractors import SuccessStatus
from flexjar_analytics.analysis.text import stem_norwegian, stemmed_tokens
from flexjar_analytics.analysis.wordfreq import TextResponse
from flexjar_analytics.models import AnalysisContext, Theme
from flexjar_analytics.utils import WireModel, safe_ratio

__all__ = [
    "OTHER_THEME_NAME",
    "DEFAULT_THEME_COLOR",
    "OTHER_THEME_COLOR",
    "ThemeStat",
    "select_themes",
    "cluster_by_theme",
]

OTHER_THEME_NAME = "Annet"
DEFAULT_THEME_COLOR = "#3b82f6"
OTHER_THEME_COLOR = "#9ca3af"


@dataclass(slots=True)
class ThemeStat(WireModel):
    """Clustering result for one theme."""

    theme_id: str
    theme: str
    color: str
    count: int = 0
    examples: List[str] = field(default_factory=list)
    success_rate: Optional[float] = None


@dataclass(slots=True)
class _Accumulator:
    theme_id: str
    name: str
    color: str
    stems: Set[str]
    count: int = 0
    success: int = 0
    partial: int = 0
    examples: List[str] = field(default_factory=list)

    def credit(self, response: TextResponse, max_examples: int) -> None:
        self.count += 1
        if response.success == SuccessStatus.YES:
            self.success += 1
        elif response.success == SuccessStatus.PARTIAL:
            self.partial += 1
        if len(self.examples) < max_examples and response.text not in self.examples:
            self.examples.append(response.text)

    def to_stat(self, with_success_rate: bool) -> ThemeStat:
        rate = None
        if with_success_rate:
            rate = safe_ratio(self.success + 0.5 * self.partial, self.count)
        return ThemeStat(
            theme_id=self.theme_id,
            theme=self.name,
            color=self.color,
            count=self.count,
            examples=list(self.examples),
            success_rate=rate,
        )


def select_themes(
    themes: Iterable[Theme],
    context: AnalysisContext,
    team: Optional[str] = None,
) -> List[Theme]:
    """Return the theme pool for *context*.

    ``BLOCKER`` themes only cluster blocker text; every other theme clusters
    general text. *team*, when given, keeps only that team's themes.
    """
    pool = []
    for theme in themes:
        is_blocker = theme.analysis_context == AnalysisContext.BLOCKER
        if is_blocker != (context == AnalysisContext.BLOCKER):
            continue
        if team and theme.team != team:
            continue
        pool.append(theme)
    return pool


def cluster_by_theme(
    responses: Iterable[TextResponse],
    themes: Sequence[Theme],
    *,
    with_success_rate: bool = False,
    other_id: str = "annet",
    max_examples: Optional[int] = None,
) -> List[ThemeStat]:
    """Cluster *responses* into *themes* plus the "Annet" catch-all.

    Parameters
    ----------
    responses
        Texts to classify. ``success`` is only read when *with_success_rate*.
    themes
        Theme pool, already narrowed with :func:`select_themes`.
    with_success_rate
        Add ``successRate = (success + 0.5 × partial) / count`` per theme.
    other_id
        Theme id reported for the catch-all bucket.
    max_examples
        Distinct example texts kept per theme (default from config).

    Themes that matched nothing are omitted. The result is sorted by count
    descending with "Annet" always last; ties are ordered by theme name.
    """
    max_examples = config.MAX_THEME_EXAMPLES if max_examples is None else max_examples

    accumulators: List[_Accumulator] = [
        _Accumulator(
            theme_id=t.id,
            name=t.name,
            color=t.color or DEFAULT_THEME_COLOR,
            stems={stem_norwegian(k) for k in t.keywords if k.strip()},
        )
        for t in themes
    ]
    other = _Accumulator(
        theme_id=other_id, name=OTHER_THEME_NAME, color=OTHER_THEME_COLOR, stems=set()
    )

    for response in responses:
        stems = stemmed_tokens(response.text)
        matched = False
        for acc in accumulators:
            if acc.stems & stems:
                acc.credit(response, max_examples)
                matched = True
        if not matched:
            other.credit(response, max_examples)

    stats = [acc.to_stat(with_success_rate) for acc in accumulators if acc.count > 0]
    stats.sort(key=lambda s: (-s.count, s.theme))
    if other.count > 0:
        stats.append(other.to_stat(with_success_rate))
    return stats

