"""Opponent name normalization and similarity scoring."""

import re
from typing import Optional

from rapidfuzz.distance import Levenshtein

from matchlog import OpponentMatch

DEFAULT_THRESHOLD = 0.7

# Score for names where one contains the other ("Titans" / "Titans FC")
PARTIAL_MATCH_SCORE = 0.8

_WHITESPACE_RE = re.compile(r'\s+')
_PUNCTUATION_RE = re.compile(r'[.,\-_]')


def normalize(name: Optional[str]) -> str:
    """Normalize an opponent name for comparison.

    Trims, lowercases, collapses whitespace runs into a single space and
    removes periods, commas, hyphens and underscores. The result is only
    used for comparison, never for display.

    Args:
        name: Raw opponent name, may be None.

    Returns:
        Normalized name ('' for empty input).
    """
    if not name:
        return ''
    normalized = _WHITESPACE_RE.sub(' ', name.strip().lower())
    return _PUNCTUATION_RE.sub('', normalized)


def similarity(name_a: Optional[str], name_b: Optional[str]) -> float:
    """Calculate the similarity of two opponent names.

    Identical normalized names score 1.0, a single empty name scores 0.0,
    substring containment scores PARTIAL_MATCH_SCORE. All other pairs are
    scored by Levenshtein distance relative to the longer name.

    Args:
        name_a: First opponent name.
        name_b: Second opponent name.

    Returns:
        Similarity between 0.0 and 1.0.
    """
    norm_a = normalize(name_a)
    norm_b = normalize(name_b)

    if norm_a == norm_b:
        return 1.0
    if not norm_a or not norm_b:
        return 0.0
    if norm_a in norm_b or norm_b in norm_a:
        return PARTIAL_MATCH_SCORE

    distance = Levenshtein.distance(norm_a, norm_b)
    max_len = max(len(norm_a), len(norm_b))
    return max(0.0, 1.0 - distance / max_len)


def names_match(
    name_a: Optional[str],
    name_b: Optional[str],
    threshold: float = DEFAULT_THRESHOLD,
) -> bool:
    """Check whether two opponent names denote the same opponent."""
    return similarity(name_a, name_b) >= threshold


def find_best_match(
    input_name: Optional[str],
    candidates: list[str],
    threshold: float = DEFAULT_THRESHOLD,
) -> Optional[OpponentMatch]:
    """Find the candidate most similar to input_name.

    Ties keep the candidate seen first.

    Args:
        input_name: Opponent name to look up.
        candidates: Candidate opponent names.
        threshold: Minimum similarity (0–1).

    Returns:
        Best OpponentMatch at or above threshold, None otherwise.
    """
    if not input_name or not candidates:
        return None

    best: Optional[OpponentMatch] = None
    for candidate in candidates:
        score = similarity(input_name, candidate)
        if score < threshold:
            continue
        if best is None or score > best.similarity:
            best = OpponentMatch(name=candidate, similarity=score)

    return best
