"""Ranked word frequencies over free-text responses."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from flexjar_analytics import config
from flexjar_analytics.analysis.text import extract_words
from flexjar_analytics.utils import WireModel

__all__ = ["TextResponse", "SourceResponse", "WordCount", "KeywordCount", "word_frequency", "top_keywords"]


@dataclass(frozen=True, slots=True)
class TextResponse:
    """A piece of free text with its submission time (and optional success)."""

    text: str
    submitted_at: str
    success: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SourceResponse(WireModel):
    text: str
    submitted_at: str


@dataclass(slots=True)
class WordCount(WireModel):
    word: str
    count: int = 0
    source_responses: List[SourceResponse] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class KeywordCount(WireModel):
    word: str
    count: int


def word_frequency(
    responses: Iterable[TextResponse],
    *,
    limit: Optional[int] = None,
    max_sources: Optional[int] = None,
) -> List[WordCount]:
    """Return the most frequent significant words in *responses*.

    Every occurrence counts towards ``count``. The example list of a word
    credits each response at most once and keeps at most *max_sources*
    entries. The result is sorted by count (ties keep first-seen order).
    """
    limit = config.WORD_FREQUENCY_LIMIT if limit is None else limit
    max_sources = config.MAX_SOURCE_RESPONSES if max_sources is None else max_sources

    words: Dict[str, WordCount] = {}
    for response in responses:
        credited = set()
        for word in extract_words(response.text):
            entry = words.get(word)
            if entry is None:
                entry = words[word] = WordCount(word=word)
            entry.count += 1
            if word not in credited and len(entry.source_responses) < max_sources:
                entry.source_responses.append(
                    SourceResponse(text=response.text, submitted_at=response.submitted_at)
                )
                credited.add(word)

    ranked = sorted(words.values(), key=lambda w: w.count, reverse=True)
    return ranked[:limit]


def top_keywords(texts: Iterable[str], limit: Optional[int] = None) -> List[KeywordCount]:
    """Plain ``{word, count}`` ranking without back-references."""
    limit = config.FIELD_KEYWORD_LIMIT if limit is None else limit
    counts: Counter[str] = Counter()
    for text in texts:
        counts.update(extract_words(text))
    return [KeywordCount(word=w, count=c) for w, c in counts.most_common(limit)]
