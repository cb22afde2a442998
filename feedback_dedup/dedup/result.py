"""Data classes for duplicate detection results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from feedback_dedup.models import FeedbackItem


@dataclass
class RuleVerdict:
    """Result of one decision rule.

    Attributes:
        is_duplicate: Whether the rule flagged the candidate as a duplicate.
        rule_name: Name of the rule that fired (e.g. ``"feature_term"``).
            ``None`` when the rule did not fire.
        reason: Human-readable explanation recorded in the audit entry.
    """

    is_duplicate: bool
    rule_name: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class SimilarFeedback:
    """An existing item surfaced to the submitter, with its score."""

    item: FeedbackItem
    similarity_score: int
    similarity_details: Dict[str, int] = field(default_factory=dict)

    @property
    def id(self) -> Union[int, str]:
        return self.item.id


@dataclass
class DuplicateCheckOutcome:
    """Result of checking one submission against the active pool.

    Attributes:
        is_duplicate: True when the best hit scores at or above the threshold.
        similar_feedback: Hits at or above the threshold, best first.
        exact_match: True if any candidate matched title and description exactly
            (case-insensitive).
        log_ids: Audit entry ids, one per compared candidate, in pool order.
        threshold: The category-resolved threshold the check ran with.
    """

    is_duplicate: bool
    similar_feedback: List[SimilarFeedback] = field(default_factory=list)
    exact_match: bool = False
    log_ids: List[str] = field(default_factory=list)
    threshold: Optional[int] = None

    @property
    def best_match(self) -> Optional[SimilarFeedback]:
        return self.similar_feedback[0] if self.similar_feedback else None
