"""Norwegian-aware text normalization for keyword matching and word counts.

The stemmer is a fixed heuristic table, not a linguistic algorithm. Changing
the suffix list or the minimum stem length changes which responses cluster
together, so treat both as data.
"""
from __future__ import annotations

import re
from typing import FrozenSet, List, Set, Tuple

__all__ = [
    "STOP_WORDS",
    "SUFFIXES",
    "MIN_STEM_LENGTH",
    "stem_norwegian",
    "tokenize",
    "extract_words",
    "stemmed_tokens",
]

# Checked in order; the first suffix that fits wins.
SUFFIXES: Tuple[str, ...] = (
    # noun definite/indefinite forms
    "ene",
    "ane",
    "en",
    "et",
    "a",
    "er",
    "ar",
    # verb forms
    "te",
    "de",
    "ere",
    "est",
)

# A suffix is only stripped if at least this many letters remain.
MIN_STEM_LENGTH = 3

STOP_WORDS: FrozenSet[str] = frozenset(
    {
        # Norwegian function words, pronouns and auxiliaries
        "og", "i", "jeg", "det", "at", "en", "et", "den", "til", "er", "som",
        "på", "de", "med", "han", "av", "ikke", "ikkje", "der", "så", "var",
        "meg", "seg", "men", "ett", "har", "om", "vi", "min", "mitt", "ha",
        "hadde", "hun", "nå", "over", "da", "ved", "fra", "du", "ut", "sin",
        "dem", "oss", "opp", "man", "kan", "hans", "hvor", "eller", "hva",
        "skal", "selv", "sjøl", "her", "alle", "vil", "bli", "ble", "blei",
        "blitt", "kunne", "inn", "når", "være", "kom", "noen", "noe", "ville",
        "dere", "deres", "kun", "ja", "etter", "ned", "skulle", "denne", "for",
        "deg", "si", "sine", "sitt", "mot", "å", "meget", "hvorfor", "dette",
        "disse", "uten", "hvordan", "ingen", "din", "ditt", "blir", "samme",
        "hvilken", "hvilke", "sånn", "inni", "mellom", "vår", "hver", "hvem",
        "vors", "hvis", "både", "bare", "fordi", "før", "mange", "også", "slik",
        "vært", "begge", "siden", "henne", "hennar", "hennes",
        # English function words that show up in mixed-language answers
        "the", "and", "that", "this", "was", "were", "been", "have", "has",
        "had", "are", "is", "will", "would", "could", "should", "may", "might",
        "must", "shall", "can", "need", "you", "your", "yours", "they",
        "their", "theirs", "them", "she", "her", "hers", "him", "his", "its",
        "our", "ours", "who", "whom", "whose", "what", "which", "where",
        "when", "why", "how", "all", "each", "every", "both", "few", "more",
        "most", "other", "some", "such", "only", "own", "than", "too", "very",
        "just", "but", "because", "with", "about", "into", "through",
        "during", "before", "after", "above", "below", "between", "under",
        "again", "further", "then", "once", "here", "there", "any", "not",
        # short/noise words
        "litt", "veldig", "ganske", "helt", "fikk", "får", "fått", "gjør",
        "gjøre", "gjort", "går", "gå", "gikk", "gått", "ser", "sett", "tar",
        "tok", "tatt",
        # redaction placeholders
        "fjernet", "sladdet", "sensurert",
    }
)

# Anything that is not a lowercase letter, digit, Norwegian letter or whitespace
_NON_WORD_RE = re.compile(r"[^a-z0-9æøå\s]")

# Theme matching deletes punctuation instead, so "e-post" reads as "epost"
_THEME_STRIP_RE = re.compile(r"[^a-z0-9_æøå\s]")


def stem_norwegian(word: str) -> str:
    """Strip the first matching inflectional suffix from *word*.

    ``søknaden``, ``søknader`` and ``søknad`` all stem to ``søknad``. Short
    words are returned unchanged (lowercased) rather than over-stemmed.
    """
    stem = word.lower().strip()
    for suffix in SUFFIXES:
        if len(stem) > len(suffix) + MIN_STEM_LENGTH - 1 and stem.endswith(suffix):
            return stem[: -len(suffix)]
    return stem


def tokenize(text: str) -> List[str]:
    """Lowercase *text*, blank out punctuation and split on whitespace."""
    return _NON_WORD_RE.sub(" ", text.lower()).split()


def extract_words(text: str) -> List[str]:
    """Return the significant words of *text* for frequency analysis.

    Tokens of two letters or fewer and stop words are dropped.
    """
    return [w for w in tokenize(text) if len(w) > 2 and w not in STOP_WORDS]


def stemmed_tokens(text: str) -> Set[str]:
    """Return the set of stems in *text*, used for theme keyword matching.

    Unlike :func:`tokenize`, punctuation is removed rather than blanked out.
    """
    return {stem_norwegian(token) for token in _THEME_STRIP_RE.sub("", text.lower()).split()}
