"""Data classes for comparison audit entries."""

from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class UserAction(str, Enum):
    """What the submitter (or a moderator) did after seeing the verdict."""

    SUBMITTED_ANYWAY = "submitted_anyway"
    CANCELLED = "cancelled"
    MERGED = "merged"
    MARKED_AS_DUPLICATE = "marked_as_duplicate"


def now_ms() -> int:
    return int(time.time() * 1000)


def new_entry_id() -> str:
    return str(uuid.uuid4())


@dataclass
class NewFeedbackRecord:
    title: str
    description: str
    submitter_info: Optional[Dict[str, Any]] = None


@dataclass
class ComparedFeedbackRecord:
    id: Union[int, str]
    title: str
    description: str
    submitter_info: Optional[Dict[str, Any]] = None


@dataclass
class SimilarityRecord:
    """A ``SimilarityResult`` plus the algorithm and threshold that produced it."""

    algorithm: str
    threshold: int
    title_similarity: int
    description_similarity: int
    overall_similarity: int
    is_similar: bool


@dataclass
class TimeProximity:
    time_difference: int
    threshold: int
    is_within_threshold: bool


@dataclass
class MatchFlag:
    is_match: bool


@dataclass
class FinalDecision:
    is_duplicate: bool
    reason: str


@dataclass
class UserActionRecord:
    action: UserAction
    timestamp: int


@dataclass
class ComparisonLogEntry:
    """Audit record of one new-submission-vs-candidate evaluation.

    Attributes:
        id: UUID4 string, returned to the caller in ``log_ids``.
        timestamp: Epoch milliseconds of the comparison.
        new_feedback: The submission as it was checked.
        compared_with: The candidate it was compared with.
        similarity_results: Scores, algorithm and threshold.
        final_decision: Verdict and the reason for it.
        time_proximity: Submission-time check; absent for exact matches.
        ip_match: Anonymous-submitter IP check; absent for exact matches.
        user_match: Authenticated-submitter check; absent for exact matches.
        user_action: Attached later via ``AuditLogStore.record_user_action``.
    """

    id: str
    timestamp: int
    new_feedback: NewFeedbackRecord
    compared_with: ComparedFeedbackRecord
    similarity_results: SimilarityRecord
    final_decision: FinalDecision
    time_proximity: Optional[TimeProximity] = None
    ip_match: Optional[MatchFlag] = None
    user_match: Optional[MatchFlag] = None
    user_action: Optional[UserActionRecord] = None

    @property
    def is_duplicate(self) -> bool:
        return self.final_decision.is_duplicate

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.user_action is not None:
            data["user_action"]["action"] = self.user_action.action.value
        return data
