"""Call contracts exposed to the surrounding web/API layer.

Thin functions over the process-wide policy and audit stores, so the
submission handler and the admin surface never construct engine objects
themselves.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple, Union

from feedback_dedup.audit.entry import ComparisonLogEntry, UserAction
from feedback_dedup.audit.store import get_audit_store
from feedback_dedup.dedup import DuplicateCheckOutcome, DuplicateDetector
from feedback_dedup.policy import SimilarityConfig, get_policy_store
from feedback_dedup.pool import AsyncCandidatePool, CandidatePool
from feedback_dedup.similarity import score_similarity as _score_similarity


def check_for_duplicates(
    title: str,
    description: str,
    category: str,
    pool: CandidatePool,
    ip: Optional[str] = None,
    user_id: Optional[str] = None,
    now: Optional[int] = None,
) -> DuplicateCheckOutcome:
    """Check a new submission against ``pool``'s active items.

    Raises:
        InputError: invalid submission.
        UpstreamFetchError: the pool could not be read; the caller must not
            treat this as "no duplicates".
    """
    return DuplicateDetector(pool).check(title, description, category, ip=ip, user_id=user_id, now=now)


async def acheck_for_duplicates(
    title: str,
    description: str,
    category: str,
    pool: Union[CandidatePool, AsyncCandidatePool],
    ip: Optional[str] = None,
    user_id: Optional[str] = None,
    now: Optional[int] = None,
) -> DuplicateCheckOutcome:
    return await DuplicateDetector(pool).acheck(title, description, category, ip=ip, user_id=user_id, now=now)


def score_similarity(
    text_a: str,
    text_b: str,
    algorithm: str = "multi",
    weights: Optional[Mapping[str, float]] = None,
) -> float:
    """Similarity of two texts on a 0-100 scale."""
    return _score_similarity(text_a, text_b, algorithm, weights)


def get_effective_config(category: Optional[str] = None) -> SimilarityConfig:
    return get_policy_store().get_category_config(category)


def update_config(partial: Mapping[str, Any]) -> SimilarityConfig:
    return get_policy_store().update(partial)


def reset_config() -> SimilarityConfig:
    return get_policy_store().reset()


def adjust_thresholds(false_positive_rate: float, false_negative_rate: float) -> SimilarityConfig:
    return get_policy_store().adjust_thresholds(false_positive_rate, false_negative_rate)


def record_user_action(log_id: str, action: Union[UserAction, str]) -> None:
    """Annotate a prior audit entry; unknown ids are silently ignored."""
    get_audit_store().record_user_action(log_id, action)


def query_logs(
    feedback_id: Optional[Union[int, str]] = None,
    time_range: Optional[Tuple[int, int]] = None,
    decision: Optional[bool] = None,
) -> List[ComparisonLogEntry]:
    return get_audit_store().query(feedback_id=feedback_id, time_range=time_range, decision=decision)
