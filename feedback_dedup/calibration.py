"""Detection-quality metrics computed from the audit trail.

Run by an external metrics job: it measures false-positive and
false-negative rates from recorded user actions and feeds them back into
the policy through ``recalibrate``.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from feedback_dedup.audit.entry import ComparisonLogEntry, UserAction
from feedback_dedup.audit.store import AuditLogStore
from feedback_dedup.dedup.detector import EXACT_MATCH_REASON
from feedback_dedup.policy import PolicyStore, SimilarityConfig
from feedback_dedup.utils.logger import log_info


def false_positive_rate(entries: Iterable[ComparisonLogEntry]) -> float:
    """Percent of duplicate verdicts the submitter overrode with "submit anyway"."""
    duplicates = [e for e in entries if e.is_duplicate]
    if not duplicates:
        return 0.0
    overridden = [
        e for e in duplicates
        if e.user_action is not None and e.user_action.action == UserAction.SUBMITTED_ANYWAY
    ]
    return len(overridden) / len(duplicates) * 100


def false_negative_rate(entries: Iterable[ComparisonLogEntry], manually_marked_duplicates: int) -> float:
    """Percent of non-duplicate verdicts later marked duplicate by a moderator.

    ``manually_marked_duplicates`` comes from the item store, since items
    marked duplicate outside a check leave no audit entry.
    """
    non_duplicates = [e for e in entries if not e.is_duplicate]
    if not non_duplicates:
        return 0.0
    return manually_marked_duplicates / len(non_duplicates) * 100


def detection_summary(entries: Iterable[ComparisonLogEntry]) -> Dict[str, Any]:
    """Aggregate figures for the administrative report."""
    entries = list(entries)
    duplicates = [e for e in entries if e.is_duplicate]
    actions = Counter(e.user_action.action.value for e in entries if e.user_action is not None)
    scores = [e.similarity_results.overall_similarity for e in entries]

    return {
        "total_checks": len(entries),
        "duplicates_detected": len(duplicates),
        "exact_matches": sum(1 for e in duplicates if e.final_decision.reason == EXACT_MATCH_REASON),
        "average_similarity_score": round(sum(scores) / len(scores), 2) if scores else 0.0,
        "false_positive_rate": round(false_positive_rate(entries), 2),
        "user_actions": dict(actions),
    }


def recalibrate(
    audit_store: AuditLogStore,
    policy_store: PolicyStore,
    manually_marked_duplicates: int = 0,
    time_range: Optional[tuple] = None,
) -> SimilarityConfig:
    """Measure error rates over the audit trail and adapt the threshold.

    Args:
        audit_store: Source of comparison entries.
        policy_store: Policy whose threshold is adjusted.
        manually_marked_duplicates: Items a moderator marked duplicate that
            the engine had let through.
        time_range: Optional inclusive ``(start_ms, end_ms)`` window.
    """
    entries: List[ComparisonLogEntry] = audit_store.query(time_range=time_range)
    fp_rate = false_positive_rate(entries)
    fn_rate = false_negative_rate(entries, manually_marked_duplicates)

    log_info("Recalibrating duplicate threshold",
             entries=len(entries),
             false_positive_rate=round(fp_rate, 2),
             false_negative_rate=round(fn_rate, 2))
    return policy_store.adjust_thresholds(fp_rate, fn_rate)
