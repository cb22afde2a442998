"""Duplicate decision engine.

A single pass over the active pool per check: each candidate is scored by
the composite scorer and then run through a chain of decision rules,
ordered so that the composite score decides first and the heuristics only
escalate what it rejected.
"""

from feedback_dedup.dedup.result import DuplicateCheckOutcome, RuleVerdict, SimilarFeedback
from feedback_dedup.dedup.detector import NEAR_MISS_RATIO, DuplicateDetector

__all__ = [
    "DuplicateCheckOutcome",
    "DuplicateDetector",
    "NEAR_MISS_RATIO",
    "RuleVerdict",
    "SimilarFeedback",
]
