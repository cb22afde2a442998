"""Lexical similarity algorithms.

Every function accepts arbitrary (possibly empty) strings, is symmetric and
reflexive, and never raises for string input.  Levenshtein is reported as a
0-100 percentage; Jaccard and Cosine as a 0-1 ratio.
"""
from __future__ import annotations

import math
from collections import Counter
from typing import List

from rapidfuzz.distance import Levenshtein


def round_half_up(value: float) -> int:
    """Round .5 upwards (57.5 -> 58), unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def tokenize(text: str) -> List[str]:
    """Lower-case and split on whitespace, dropping empty tokens."""
    return text.lower().split()


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost insert/delete/substitute edit distance over the full strings."""
    return Levenshtein.distance(a, b)


def levenshtein_similarity(a: str, b: str) -> int:
    """Case-insensitive edit-distance similarity as an integer percentage."""
    if not a and not b:
        return 100
    if not a or not b:
        return 0

    distance = levenshtein_distance(a.lower(), b.lower())
    max_length = max(len(a), len(b))
    similarity = (max_length - distance) / max_length * 100
    return max(0, round_half_up(similarity))


def jaccard_similarity(a: str, b: str) -> float:
    """|intersection| / |union| of the two word sets."""
    words1 = set(tokenize(a))
    words2 = set(tokenize(b))

    if not words1 and not words2:
        return 1.0
    if not words1 or not words2:
        return 0.0

    return len(words1 & words2) / len(words1 | words2)


def cosine_similarity(a: str, b: str) -> float:
    """Cosine of the angle between the two term-frequency vectors."""
    words1 = tokenize(a)
    words2 = tokenize(b)

    if not words1 and not words2:
        return 1.0
    if not words1 or not words2:
        return 0.0

    freq1 = Counter(words1)
    freq2 = Counter(words2)

    dot_product = sum(count * freq2[word] for word, count in freq1.items())
    norm1 = sum(c * c for c in freq1.values())
    norm2 = sum(c * c for c in freq2.values())

    if norm1 == 0 or norm2 == 0:
        return 0.0

    # Integer norms keep sqrt exact for identical inputs, so sim(a, a) == 1.0
    return dot_product / math.sqrt(norm1 * norm2)
