"""Pytest configuration and fixtures for feedback-dedup tests."""

import pytest
from unittest.mock import patch
from typing import Any, Dict, Optional

# Add the project root to the Python path
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from feedback_dedup import metrics as metrics_mod
from feedback_dedup.audit.entry import (
    ComparedFeedbackRecord,
    ComparisonLogEntry,
    FinalDecision,
    NewFeedbackRecord,
    SimilarityRecord,
    UserAction,
    UserActionRecord,
    new_entry_id,
)
from feedback_dedup.audit.store import AuditLogStore
from feedback_dedup.models import FeedbackItem
from feedback_dedup.policy import PolicyStore, SimilarityConfig

# Fixed "current time" for deterministic time-proximity checks (epoch ms)
NOW = 1_700_000_000_000
HOUR_MS = 60 * 60 * 1000


@pytest.fixture(autouse=True)
def noop_metrics():
    """Never talk to a DogStatsD agent from tests."""
    with patch.object(metrics_mod, "_client", metrics_mod._NoOpStatsd()):
        yield


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def policy_store() -> PolicyStore:
    """Policy store seeded with the documented defaults (ignores DUP_* env)."""
    return PolicyStore(SimilarityConfig())


@pytest.fixture
def audit_store() -> AuditLogStore:
    return AuditLogStore(max_entries=0)


@pytest.fixture
def global_stores(policy_store, audit_store):
    """Swap the process-wide policy and audit stores for fresh ones."""
    with (
        patch("feedback_dedup.policy._store", policy_store),
        patch("feedback_dedup.audit.store._store", audit_store),
    ):
        yield policy_store, audit_store


def build_item(
    item_id,
    title: str,
    description: str,
    category: str = "general",
    status: str = "active",
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
    timestamp: Optional[int] = None,
) -> FeedbackItem:
    submitter: Optional[Dict[str, Any]] = None
    if user_id or ip or timestamp:
        submitter = {"user_id": user_id, "ip": ip, "timestamp": timestamp}
    return FeedbackItem(
        id=item_id,
        title=title,
        description=description,
        category=category,
        status=status,
        submitter_info=submitter,
    )


@pytest.fixture
def make_item():
    return build_item


def build_entry(
    is_duplicate: bool = False,
    feedback_id=1,
    timestamp: int = NOW,
    overall: int = 50,
    reason: Optional[str] = None,
    action: Optional[UserAction] = None,
) -> ComparisonLogEntry:
    return ComparisonLogEntry(
        id=new_entry_id(),
        timestamp=timestamp,
        new_feedback=NewFeedbackRecord(title="New title", description="New description"),
        compared_with=ComparedFeedbackRecord(id=feedback_id, title="Old title", description="Old description"),
        similarity_results=SimilarityRecord(
            algorithm="multi",
            threshold=65,
            title_similarity=overall,
            description_similarity=overall,
            overall_similarity=overall,
            is_similar=overall >= 65,
        ),
        final_decision=FinalDecision(
            is_duplicate=is_duplicate,
            reason=reason or f"Content similarity: {overall}%",
        ),
        user_action=UserActionRecord(action=action, timestamp=timestamp) if action else None,
    )


@pytest.fixture
def make_entry():
    return build_entry
