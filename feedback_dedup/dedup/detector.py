"""Orchestrator for a duplicate check.

``DuplicateDetector`` takes one policy snapshot, fetches the active pool,
then makes a single linear pass over the candidates: self-skip, exact-match
short-circuit, cross-category gate, composite scoring, submitter signals,
and the decision-rule chain.  Every compared candidate leaves exactly one
audit entry; the outcome surfaces only hits at or above the threshold.
"""

from __future__ import annotations

import time
from typing import List, Optional, Tuple

from feedback_dedup import metrics
from feedback_dedup.audit.entry import (
    ComparedFeedbackRecord,
    ComparisonLogEntry,
    FinalDecision,
    MatchFlag,
    NewFeedbackRecord,
    SimilarityRecord,
    TimeProximity,
    new_entry_id,
    now_ms,
)
from feedback_dedup.audit.store import AuditLogStore, get_audit_store
from feedback_dedup.dedup.result import DuplicateCheckOutcome, RuleVerdict, SimilarFeedback
from feedback_dedup.dedup.rules import (
    CandidateContext,
    DecisionRule,
    build_default_rules,
    content_similarity_reason,
)
from feedback_dedup.errors import UpstreamFetchError
from feedback_dedup.models import FeedbackItem, FeedbackSubmission, validate_submission
from feedback_dedup.policy import PolicyStore, SimilarityConfig, get_policy_store
from feedback_dedup.pool import AsyncCandidatePool, CandidatePool, FetchResult
from feedback_dedup.similarity import compare_feedback
from feedback_dedup.utils.logger import log_debug, log_duplicate_detection, log_error, log_info

# Candidates scoring above this fraction of the threshold are kept internally
# as near misses; they are logged but filtered from the returned hits.
NEAR_MISS_RATIO = 0.8

EXACT_MATCH_REASON = "Exact match detected"


class DuplicateDetector:
    """Decide whether a new submission duplicates an active feedback item.

    Args:
        pool: Source of active items (sync or async).
        policy_store: Policy to snapshot per check.  Defaults to the
            process-wide store.
        audit_store: Destination of comparison entries.  Defaults to the
            process-wide store.
        rules: Ordered decision rules.  Defaults to ``build_default_rules()``.

    Usage::

        detector = DuplicateDetector(pool)
        outcome = detector.check("Add dark mode", "Please", "feature")
        if outcome.is_duplicate:
            # show outcome.similar_feedback to the submitter
            ...
    """

    def __init__(
        self,
        pool: Optional[CandidatePool | AsyncCandidatePool] = None,
        policy_store: Optional[PolicyStore] = None,
        audit_store: Optional[AuditLogStore] = None,
        rules: Optional[List[DecisionRule]] = None,
    ):
        self.pool = pool
        self.policy_store = policy_store if policy_store is not None else get_policy_store()
        self.audit_store = audit_store if audit_store is not None else get_audit_store()
        self.rules = rules if rules is not None else build_default_rules()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(
        self,
        title: str,
        description: str,
        category: str,
        ip: Optional[str] = None,
        user_id: Optional[str] = None,
        now: Optional[int] = None,
        policy: Optional[SimilarityConfig] = None,
    ) -> DuplicateCheckOutcome:
        """Run a duplicate check against the pool's active items.

        Args:
            title, description, category: The new submission.
            ip: Submitter IP, consulted only for anonymous submitters.
            user_id: Authenticated submitter id.
            now: Epoch milliseconds used for time proximity.  Defaults to now.
            policy: Explicit policy to use instead of a store snapshot.

        Raises:
            InputError: if the submission is invalid (nothing is compared or logged).
            UpstreamFetchError: if the active pool could not be fetched.
        """
        submission = validate_submission(title, description, category, ip, user_id)
        config = self._resolve_policy(submission, policy)
        if not isinstance(self.pool, CandidatePool):
            raise TypeError("check() needs a synchronous CandidatePool; use acheck() for async pools")
        items = self._unwrap(self.pool.fetch_active())
        return self._scan(submission, items, config, now)

    async def acheck(
        self,
        title: str,
        description: str,
        category: str,
        ip: Optional[str] = None,
        user_id: Optional[str] = None,
        now: Optional[int] = None,
        policy: Optional[SimilarityConfig] = None,
    ) -> DuplicateCheckOutcome:
        """Async variant of ``check``; awaits the pool when it is async."""
        submission = validate_submission(title, description, category, ip, user_id)
        config = self._resolve_policy(submission, policy)
        if isinstance(self.pool, AsyncCandidatePool):
            result = await self.pool.fetch_active()
        elif isinstance(self.pool, CandidatePool):
            result = self.pool.fetch_active()
        else:
            raise TypeError("acheck() needs a CandidatePool or AsyncCandidatePool")
        return self._scan(submission, self._unwrap(result), config, now)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_policy(self, submission: FeedbackSubmission, policy: Optional[SimilarityConfig]) -> SimilarityConfig:
        if policy is not None:
            return policy.for_category(submission.category)
        return self.policy_store.snapshot(submission.category)

    def _unwrap(self, result: FetchResult) -> List[FeedbackItem]:
        if not result.ok:
            log_error("Duplicate check aborted: active feedback unavailable", error=str(result.error))
            raise UpstreamFetchError(cause=result.error) from result.error
        return result.items

    def _scan(
        self,
        submission: FeedbackSubmission,
        items: List[FeedbackItem],
        config: SimilarityConfig,
        now: Optional[int],
    ) -> DuplicateCheckOutcome:
        started = time.perf_counter()
        now = now if now is not None else now_ms()
        threshold = config.similarity_threshold

        hits: List[SimilarFeedback] = []
        log_ids: List[str] = []
        exact_match = False

        log_debug(
            "Starting duplicate check",
            category=submission.category,
            candidates=len(items),
            threshold=threshold,
            algorithm=config.algorithm,
        )

        for candidate in items:
            if self._is_self(submission, candidate):
                continue

            if self._is_exact_match(submission, candidate):
                exact_match = True
                entry = self._exact_match_entry(submission, candidate, config, now)
                self.audit_store.append(entry)
                log_ids.append(entry.id)
                hits.append(SimilarFeedback(
                    item=candidate,
                    similarity_score=100,
                    similarity_details={"title_similarity": 100, "description_similarity": 100},
                ))
                continue

            if not config.enable_cross_category_detection and candidate.category != submission.category:
                continue

            similarity = compare_feedback(
                candidate.title, candidate.description,
                submission.title, submission.description,
                config,
            )
            ctx = CandidateContext(
                submission=submission,
                candidate=candidate,
                similarity=similarity,
                time_proximity=self._time_proximity(candidate, config, now),
                user_match=MatchFlag(is_match=self._user_match(submission, candidate)),
                ip_match=MatchFlag(is_match=self._ip_match(submission, candidate, config)),
            )
            verdict = self._decide(ctx)

            entry = self._comparison_entry(ctx, config, verdict, now)
            self.audit_store.append(entry)
            log_ids.append(entry.id)

            if verdict.is_duplicate or similarity.overall_similarity > threshold * NEAR_MISS_RATIO:
                hits.append(SimilarFeedback(
                    item=candidate,
                    similarity_score=similarity.overall_similarity,
                    similarity_details=similarity.details,
                ))

        hits.sort(key=lambda h: h.similarity_score, reverse=True)
        surfaced = [h for h in hits if h.similarity_score >= threshold]
        outcome = DuplicateCheckOutcome(
            is_duplicate=bool(hits) and hits[0].similarity_score >= threshold,
            similar_feedback=surfaced,
            exact_match=exact_match,
            log_ids=log_ids,
            threshold=threshold,
        )

        self._record_metrics(submission, outcome, len(log_ids), started)
        if outcome.is_duplicate:
            best = outcome.best_match
            log_duplicate_detection(best.similarity_score, best.id, exact_match=exact_match, hits=len(surfaced))
        else:
            log_info("No duplicate found", compared=len(log_ids), near_misses=len(hits) - len(surfaced))
        return outcome

    def _decide(self, ctx: CandidateContext) -> RuleVerdict:
        for rule in self.rules:
            verdict = rule.check(ctx)
            if verdict.is_duplicate:
                log_debug(
                    "Candidate flagged",
                    rule=verdict.rule_name,
                    candidate_id=ctx.candidate.id,
                    score=ctx.similarity.overall_similarity,
                )
                return verdict
        return RuleVerdict(is_duplicate=False, reason=content_similarity_reason(ctx.similarity))

    @staticmethod
    def _is_self(submission: FeedbackSubmission, candidate: FeedbackItem) -> bool:
        return (
            candidate.title == submission.title
            and candidate.description == submission.description
            and candidate.category == submission.category
        )

    @staticmethod
    def _is_exact_match(submission: FeedbackSubmission, candidate: FeedbackItem) -> bool:
        return (
            candidate.title.lower() == submission.title.lower()
            and candidate.description.lower() == submission.description.lower()
        )

    @staticmethod
    def _time_proximity(candidate: FeedbackItem, config: SimilarityConfig, now: int) -> TimeProximity:
        info = candidate.submitter_info
        if info is None or not info.timestamp:
            return TimeProximity(time_difference=0, threshold=config.time_threshold, is_within_threshold=False)
        difference = abs(now - info.timestamp)
        return TimeProximity(
            time_difference=difference,
            threshold=config.time_threshold,
            is_within_threshold=difference < config.time_threshold,
        )

    @staticmethod
    def _user_match(submission: FeedbackSubmission, candidate: FeedbackItem) -> bool:
        info = candidate.submitter_info
        return bool(submission.user_id and info is not None and info.user_id == submission.user_id)

    @staticmethod
    def _ip_match(submission: FeedbackSubmission, candidate: FeedbackItem, config: SimilarityConfig) -> bool:
        info = candidate.submitter_info
        return bool(
            not submission.user_id
            and config.check_ip_address
            and submission.ip
            and info is not None
            and info.ip == submission.ip
        )

    @staticmethod
    def _records(
        submission: FeedbackSubmission, candidate: FeedbackItem
    ) -> Tuple[NewFeedbackRecord, ComparedFeedbackRecord]:
        new = NewFeedbackRecord(
            title=submission.title,
            description=submission.description,
            submitter_info={"ip": submission.ip, "user_id": submission.user_id},
        )
        compared = ComparedFeedbackRecord(
            id=candidate.id,
            title=candidate.title,
            description=candidate.description,
            submitter_info=(
                candidate.submitter_info.model_dump(exclude_none=True)
                if candidate.submitter_info is not None else None
            ),
        )
        return new, compared

    def _exact_match_entry(
        self, submission: FeedbackSubmission, candidate: FeedbackItem, config: SimilarityConfig, now: int
    ) -> ComparisonLogEntry:
        new, compared = self._records(submission, candidate)
        return ComparisonLogEntry(
            id=new_entry_id(),
            timestamp=now,
            new_feedback=new,
            compared_with=compared,
            similarity_results=SimilarityRecord(
                algorithm=config.algorithm,
                threshold=config.similarity_threshold,
                title_similarity=100,
                description_similarity=100,
                overall_similarity=100,
                is_similar=True,
            ),
            final_decision=FinalDecision(is_duplicate=True, reason=EXACT_MATCH_REASON),
        )

    def _comparison_entry(
        self, ctx: CandidateContext, config: SimilarityConfig, verdict: RuleVerdict, now: int
    ) -> ComparisonLogEntry:
        new, compared = self._records(ctx.submission, ctx.candidate)
        return ComparisonLogEntry(
            id=new_entry_id(),
            timestamp=now,
            new_feedback=new,
            compared_with=compared,
            similarity_results=SimilarityRecord(
                algorithm=config.algorithm,
                threshold=config.similarity_threshold,
                title_similarity=ctx.similarity.title_similarity,
                description_similarity=ctx.similarity.description_similarity,
                overall_similarity=ctx.similarity.overall_similarity,
                is_similar=ctx.similarity.is_similar,
            ),
            time_proximity=ctx.time_proximity,
            ip_match=ctx.ip_match,
            user_match=ctx.user_match,
            final_decision=FinalDecision(is_duplicate=verdict.is_duplicate, reason=verdict.reason),
        )

    @staticmethod
    def _record_metrics(
        submission: FeedbackSubmission, outcome: DuplicateCheckOutcome, compared: int, started: float
    ) -> None:
        metrics.incr("checks", category=submission.category)
        metrics.incr("comparisons", value=compared)
        if outcome.is_duplicate:
            metrics.incr("duplicates.found", category=submission.category)
        if outcome.exact_match:
            metrics.incr("duplicates.exact")
        metrics.timing("check.duration", (time.perf_counter() - started) * 1000)
