"""Text similarity algorithms, key-term heuristics and the composite scorer."""

from feedback_dedup.similarity.algorithms import (
    cosine_similarity,
    jaccard_similarity,
    levenshtein_distance,
    levenshtein_similarity,
    round_half_up,
)
from feedback_dedup.similarity.terms import (
    FEATURE_TERMS,
    contains_substring,
    extract_key_terms,
    find_shared_feature_term,
    has_common_phrases,
    share_key_terms,
)
from feedback_dedup.similarity.scorer import (
    SimilarityResult,
    compare_feedback,
    multi_algorithm_similarity,
    normalize_weights,
    score_similarity,
)

__all__ = [
    "FEATURE_TERMS",
    "SimilarityResult",
    "compare_feedback",
    "contains_substring",
    "cosine_similarity",
    "extract_key_terms",
    "find_shared_feature_term",
    "has_common_phrases",
    "jaccard_similarity",
    "levenshtein_distance",
    "levenshtein_similarity",
    "multi_algorithm_similarity",
    "normalize_weights",
    "round_half_up",
    "score_similarity",
    "share_key_terms",
]
