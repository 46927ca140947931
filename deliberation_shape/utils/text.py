"""Text similarity utilities — normalization, word overlap, shared keywords."""

from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s]")
_SPACES = re.compile(r"\s+")

_STOPWORDS = frozenset(
    "the and for that this with from are was were have has had not but can will "
    "should must would could may might into than then them they their there these "
    "those what when where which while who why how all any more most some such "
    "only also very just over under about after before because".split()
)


def normalize_text(text: str) -> str:
    """Lowercase, strip punctuation, collapse whitespace."""
    lowered = _NON_WORD.sub(" ", text.lower())
    return _SPACES.sub(" ", lowered).strip()


def content_words(text: str) -> list[str]:
    """Normalized words longer than two characters, in order."""
    return [w for w in normalize_text(text).split(" ") if len(w) > 2]


def word_overlap(a: str, b: str) -> float:
    """Jaccard similarity over content words."""
    words_a = set(content_words(a))
    words_b = set(content_words(b))
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)


def shared_keywords(a: str, b: str, limit: int = 3) -> list[str]:
    """Content words (minus stopwords) present in both texts, in order of first use in a."""
    words_b = set(content_words(b))
    seen: set[str] = set()
    shared: list[str] = []
    for word in content_words(a):
        if word in words_b and word not in _STOPWORDS and word not in seen:
            seen.add(word)
            shared.append(word)
            if len(shared) >= limit:
                break
    return shared
