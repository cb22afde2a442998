"""Decision rules applied to each scored candidate.

Each rule implements the ``DecisionRule`` protocol: a ``check`` method that
receives the ``CandidateContext`` (submission, candidate and every signal
computed for the pair) and returns a ``RuleVerdict``.  Rules run in order
and the first positive verdict decides; content similarity comes first so
the cheaper heuristics only escalate candidates the scorer rejected.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import List

from feedback_dedup.audit.entry import MatchFlag, TimeProximity
from feedback_dedup.dedup.result import RuleVerdict
from feedback_dedup.models import FeedbackItem, FeedbackSubmission
from feedback_dedup.similarity import (
    SimilarityResult,
    contains_substring,
    find_shared_feature_term,
    share_key_terms,
)


@dataclass(frozen=True)
class CandidateContext:
    """Everything known about one (submission, candidate) pair."""

    submission: FeedbackSubmission
    candidate: FeedbackItem
    similarity: SimilarityResult
    time_proximity: TimeProximity
    user_match: MatchFlag
    ip_match: MatchFlag


# ---------------------------------------------------------------------------
# Base protocol
# ---------------------------------------------------------------------------


class DecisionRule(abc.ABC):
    """Abstract base for duplicate decision rules."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short machine-readable name for logs."""

    @abc.abstractmethod
    def check(self, ctx: CandidateContext) -> RuleVerdict:
        """Evaluate the rule.

        Returns:
            A ``RuleVerdict``.  When ``is_duplicate`` is ``False`` the next
            rule in the chain is consulted.
        """


# ---------------------------------------------------------------------------
# Rule 1 – Content similarity (composite score against the threshold)
# ---------------------------------------------------------------------------


class ContentSimilarity(DecisionRule):
    @property
    def name(self) -> str:
        return "content_similarity"

    def check(self, ctx: CandidateContext) -> RuleVerdict:
        if ctx.similarity.is_similar:
            return RuleVerdict(
                is_duplicate=True,
                rule_name=self.name,
                reason=content_similarity_reason(ctx.similarity),
            )
        return RuleVerdict(is_duplicate=False)


def content_similarity_reason(similarity: SimilarityResult) -> str:
    return f"Content similarity: {similarity.overall_similarity}%"


# ---------------------------------------------------------------------------
# Rule 2 – Shared feature term ("dark mode", "login", ...)
# ---------------------------------------------------------------------------


class FeatureTermMatch(DecisionRule):
    """Both items mention the same product concept, whatever their wording."""

    @property
    def name(self) -> str:
        return "feature_term"

    def check(self, ctx: CandidateContext) -> RuleVerdict:
        term = find_shared_feature_term(ctx.candidate.combined_text, ctx.submission.combined_text)
        if term:
            return RuleVerdict(
                is_duplicate=True,
                rule_name=self.name,
                reason=f'Feature match detected: "{term}"',
            )
        return RuleVerdict(is_duplicate=False)


# ---------------------------------------------------------------------------
# Rule 3 – One title or description contains the other
# ---------------------------------------------------------------------------


class SubstringContainment(DecisionRule):
    @property
    def name(self) -> str:
        return "substring"

    def check(self, ctx: CandidateContext) -> RuleVerdict:
        if contains_substring(ctx.candidate.title, ctx.submission.title) or contains_substring(
            ctx.candidate.description, ctx.submission.description
        ):
            return RuleVerdict(
                is_duplicate=True,
                rule_name=self.name,
                reason="One text contains the other",
            )
        return RuleVerdict(is_duplicate=False)


# ---------------------------------------------------------------------------
# Rule 4 – Key terms shared in both title and description
# ---------------------------------------------------------------------------


class SharedKeyTerms(DecisionRule):
    @property
    def name(self) -> str:
        return "shared_key_terms"

    def check(self, ctx: CandidateContext) -> RuleVerdict:
        if share_key_terms(ctx.candidate.title, ctx.submission.title, 1) and share_key_terms(
            ctx.candidate.description, ctx.submission.description, 1
        ):
            return RuleVerdict(
                is_duplicate=True,
                rule_name=self.name,
                reason="Shared key terms detected",
            )
        return RuleVerdict(is_duplicate=False)


# ---------------------------------------------------------------------------
# Rule 5 – Same submitter inside the time window
# ---------------------------------------------------------------------------


class SubmitterProximity(DecisionRule):
    """The same user (or anonymous IP) submitted again within the time threshold."""

    @property
    def name(self) -> str:
        return "submitter_proximity"

    def check(self, ctx: CandidateContext) -> RuleVerdict:
        if ctx.time_proximity.is_within_threshold and (ctx.user_match.is_match or ctx.ip_match.is_match):
            return RuleVerdict(
                is_duplicate=True,
                rule_name=self.name,
                reason="Same submitter within time threshold with moderate content similarity",
            )
        return RuleVerdict(is_duplicate=False)


def build_default_rules() -> List[DecisionRule]:
    """Build the default ordered chain of decision rules.

    The order matters, first positive verdict wins:
      1. ContentSimilarity    – composite score >= threshold
      2. FeatureTermMatch     – same feature-dictionary phrase in both items
      3. SubstringContainment – a title or description contains the other
      4. SharedKeyTerms       – key terms shared in title AND description
      5. SubmitterProximity   – same submitter inside the time threshold
    """
    return [
        ContentSimilarity(),
        FeatureTermMatch(),
        SubstringContainment(),
        SharedKeyTerms(),
        SubmitterProximity(),
    ]
