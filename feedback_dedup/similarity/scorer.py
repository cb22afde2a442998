"""Composite similarity scoring for feedback items.

The multi-algorithm score blends Levenshtein, Jaccard and Cosine and then
adds heuristic boosts.  The boosts favour recall: short feature
requests with little lexical overlap ("Dark mode?" vs "please add a dark
theme") must still surface as candidates for review.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Tuple

from feedback_dedup.similarity.algorithms import (
    cosine_similarity,
    jaccard_similarity,
    levenshtein_similarity,
    round_half_up,
)
from feedback_dedup.similarity.terms import (
    contains_substring,
    find_shared_feature_term,
    has_common_phrases,
    share_key_terms,
)
from feedback_dedup.utils.logger import log_warning

if TYPE_CHECKING:
    from feedback_dedup.policy import SimilarityConfig

ALGORITHMS = ("levenshtein", "jaccard", "cosine", "multi")

DEFAULT_ALGORITHM_WEIGHTS: Dict[str, float] = {
    "levenshtein": 0.3,
    "jaccard": 0.4,
    "cosine": 0.3,
}

# Additive boosts, applied before clamping to [0, 1]
COMMON_PHRASE_BOOST = 0.10
SUBSTRING_BOOST = 0.20
SHARED_TERM_BOOST = 0.15
SHORT_TEXT_SHARED_TERM_BOOST = 0.20
SHORT_TEXT_LENGTH = 30

# Overall score floor when both items mention the same feature term
FEATURE_TERM_FLOOR = 75.0


@dataclass(frozen=True)
class SimilarityResult:
    """Similarity of one (new submission, candidate) pair, all scores 0-100."""

    title_similarity: int
    description_similarity: int
    overall_similarity: int
    is_similar: bool

    @property
    def details(self) -> Dict[str, int]:
        return {
            "title_similarity": self.title_similarity,
            "description_similarity": self.description_similarity,
        }

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def normalize_weights(weights: Mapping[str, float], keys: Tuple[str, ...]) -> Dict[str, float]:
    """Scale ``weights`` over ``keys`` to sum to 1.

    A zero (or negative) total is an inconsistent configuration; it falls
    back to an even split instead of dividing by zero.
    """
    total = sum(weights.get(k, 0.0) for k in keys)
    if total <= 0:
        log_warning("Weights sum to zero, falling back to even split", weights=dict(weights))
        return {k: 1.0 / len(keys) for k in keys}
    return {k: weights.get(k, 0.0) / total for k in keys}


def multi_algorithm_similarity(
    a: str,
    b: str,
    weights: Optional[Mapping[str, float]] = None,
) -> float:
    """Weighted Levenshtein/Jaccard/Cosine blend plus heuristic boosts, 0-100."""
    w = normalize_weights(weights or DEFAULT_ALGORITHM_WEIGHTS, ("levenshtein", "jaccard", "cosine"))

    weighted = (
        levenshtein_similarity(a, b) / 100 * w["levenshtein"]
        + jaccard_similarity(a, b) * w["jaccard"]
        + cosine_similarity(a, b) * w["cosine"]
    )

    boost = 0.0
    if has_common_phrases(a, b):
        boost += COMMON_PHRASE_BOOST
    if contains_substring(a, b):
        boost += SUBSTRING_BOOST

    shares_term = share_key_terms(a, b, 1)
    if shares_term:
        boost += SHARED_TERM_BOOST
    if shares_term and len(a) < SHORT_TEXT_LENGTH and len(b) < SHORT_TEXT_LENGTH:
        boost += SHORT_TEXT_SHARED_TERM_BOOST

    return min(1.0, max(0.0, weighted + boost)) * 100


def score_similarity(
    a: str,
    b: str,
    algorithm: str = "multi",
    weights: Optional[Mapping[str, float]] = None,
) -> float:
    """Score two texts with the named algorithm on a 0-100 scale.

    ``weights`` only applies to ``"multi"``.
    """
    if algorithm == "levenshtein":
        return float(levenshtein_similarity(a, b))
    if algorithm == "jaccard":
        return jaccard_similarity(a, b) * 100
    if algorithm == "cosine":
        return cosine_similarity(a, b) * 100
    if algorithm == "multi":
        return multi_algorithm_similarity(a, b, weights)
    raise ValueError(f"Unknown similarity algorithm: {algorithm!r}. Valid options: {list(ALGORITHMS)}")


def compare_feedback(
    title1: str,
    desc1: str,
    title2: str,
    desc2: str,
    config: "SimilarityConfig",
) -> SimilarityResult:
    """Score two feedback items field by field and combine by title/description weight."""
    weights = config.algorithm_weights.model_dump()
    title_similarity = score_similarity(title1, title2, config.algorithm, weights)
    description_similarity = score_similarity(desc1, desc2, config.algorithm, weights)

    w = normalize_weights(
        {"title": config.title_weight, "description": config.description_weight},
        ("title", "description"),
    )
    overall = title_similarity * w["title"] + description_similarity * w["description"]

    if find_shared_feature_term(f"{title1} {desc1}", f"{title2} {desc2}"):
        overall = max(overall, FEATURE_TERM_FLOOR)

    return SimilarityResult(
        title_similarity=round_half_up(title_similarity),
        description_similarity=round_half_up(description_similarity),
        overall_similarity=round_half_up(overall),
        is_similar=overall >= config.similarity_threshold,
    )
