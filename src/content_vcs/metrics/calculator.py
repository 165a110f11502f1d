"""Content metrics: word count, keyword density, readability and SEO score.

Pure functions over a content snapshot. None of them raise for any text
input; empty or missing input degrades to 0 or None.
"""

import re

from content_vcs.models.document import ContentSnapshot
from content_vcs.models.version import VersionMetrics

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")

# Flesch Reading Ease coefficients
_FRE_BASE = 206.835
_FRE_SENTENCE_WEIGHT = 1.015
_FRE_SYLLABLE_WEIGHT = 84.6

# SEO checks: each is worth CHECK_POINTS, partial credit is half
CHECK_POINTS = 20
TITLE_RANGE = (30, 60)
META_DESCRIPTION_RANGE = (120, 160)
FULL_CONTENT_WORDS = 300
PARTIAL_CONTENT_WORDS = 100
KEYWORD_DENSITY_RANGE = (0.005, 0.03)


def word_count(content: str | None) -> int:
    """Count whitespace-delimited, non-empty tokens."""
    if not content:
        return 0
    return len(content.split())


def keyword_density(content: str | None, keyword: str | None) -> float | None:
    """Fraction of words taken up by exact, case-insensitive matches of ``keyword``.

    ``keyword`` may span several words; each phrase occurrence counts once
    against the total word count. Returns None when no keyword is given.
    """
    if not keyword or not keyword.strip():
        return None
    words = (content or "").lower().split()
    if not words:
        return 0.0

    phrase = keyword.lower().split()
    span = len(phrase)
    matches = sum(1 for i in range(len(words) - span + 1) if words[i : i + span] == phrase)
    return matches / len(words)


def count_syllables(word: str) -> int:
    """Approximate syllables as vowel groups, dropping a trailing silent 'e'."""
    word = word.lower()
    if len(word) <= 3:
        return 1
    groups = len(_VOWEL_GROUP_RE.findall(word)) or 1
    if word.endswith("e"):
        groups -= 1
    return max(1, groups)


def readability_score(content: str | None) -> float:
    """Simplified Flesch Reading Ease, floored at 0.

    A heuristic: sentences are runs of text between '.', '!' and '?', and
    syllables come from count_syllables.
    """
    if not content:
        return 0.0
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(content) if s.strip()]
    words = content.split()
    if not sentences or not words:
        return 0.0

    avg_sentence_len = len(words) / len(sentences)
    avg_syllables = sum(count_syllables(w) for w in words) / len(words)
    score = (
        _FRE_BASE
        - _FRE_SENTENCE_WEIGHT * avg_sentence_len
        - _FRE_SYLLABLE_WEIGHT * avg_syllables
    )
    return max(0.0, score)


def _length_points(text: str | None, low: int, high: int) -> int:
    if text and low <= len(text) <= high:
        return CHECK_POINTS
    if text:
        return CHECK_POINTS // 2
    return 0


def seo_score(snapshot: ContentSnapshot | None) -> float | None:
    """Weighted SEO composite out of 100.

    Five checks of 20 points each: title length, meta description length,
    content length, focus keyword density, and presence of secondary
    keywords. Returns None only when there is nothing to score.
    """
    if snapshot is None:
        return None

    score = 0
    max_score = 0

    max_score += CHECK_POINTS
    score += _length_points(snapshot.title, *TITLE_RANGE)

    max_score += CHECK_POINTS
    score += _length_points(snapshot.meta_description, *META_DESCRIPTION_RANGE)

    max_score += CHECK_POINTS
    words = word_count(snapshot.content)
    if words >= FULL_CONTENT_WORDS:
        score += CHECK_POINTS
    elif words >= PARTIAL_CONTENT_WORDS:
        score += CHECK_POINTS // 2

    max_score += CHECK_POINTS
    density = keyword_density(snapshot.content, snapshot.focus_keyword)
    if density:
        low, high = KEYWORD_DENSITY_RANGE
        score += CHECK_POINTS if low < density < high else CHECK_POINTS // 2

    max_score += CHECK_POINTS
    if snapshot.keywords:
        score += CHECK_POINTS

    if max_score == 0:
        return None
    return score / max_score * 100


def score_snapshot(snapshot: ContentSnapshot) -> VersionMetrics:
    """Compute every stored metric for a new version."""
    return VersionMetrics(
        keyword_density=keyword_density(snapshot.content, snapshot.focus_keyword),
        word_count=word_count(snapshot.content),
        seo_score=seo_score(snapshot),
        readability_score=readability_score(snapshot.content),
    )
