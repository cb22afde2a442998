"""Runtime-mutable duplicate-detection policy.

``SimilarityConfig`` is an immutable value.  ``PolicyStore`` holds the
current one and replaces it atomically on every update, so a check that
took a snapshot keeps a consistent view however the policy changes while
it runs.  Per-category overrides are typed: a field set on the override
replaces the global value, an unset field inherits it.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from feedback_dedup.config import VALID_ALGORITHMS, get_config
from feedback_dedup.errors import ConfigInconsistency
from feedback_dedup.similarity.algorithms import round_half_up
from feedback_dedup.utils.logger import log_info, log_warning

DAY_MS = 24 * 60 * 60 * 1000

# Adaptive threshold bounds
ADAPT_TRIGGER_RATE = 10
MAX_ADAPTED_THRESHOLD = 95
MIN_ADAPTED_THRESHOLD = 50


class _PolicyModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class AlgorithmWeights(_PolicyModel):
    """Relative weights of the three lexical algorithms in the multi score."""

    levenshtein: float = Field(0.3, ge=0.0)
    jaccard: float = Field(0.4, ge=0.0)
    cosine: float = Field(0.3, ge=0.0)


class CategoryOverride(_PolicyModel):
    """Per-category policy fields; ``None`` means inherit the global value."""

    similarity_threshold: Optional[int] = Field(None, ge=0, le=100)
    title_weight: Optional[float] = Field(None, ge=0.0)
    description_weight: Optional[float] = Field(None, ge=0.0)
    algorithm: Optional[str] = None
    algorithm_weights: Optional[AlgorithmWeights] = None
    time_threshold: Optional[int] = Field(None, ge=0)
    check_ip_address: Optional[bool] = None
    enable_cross_category_detection: Optional[bool] = None

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v):
        if v is not None and v not in VALID_ALGORITHMS:
            raise ValueError(f"algorithm must be one of {list(VALID_ALGORITHMS)}")
        return v


def _default_category_settings() -> Dict[str, CategoryOverride]:
    return {
        "bug": CategoryOverride(similarity_threshold=60, title_weight=0.6, description_weight=0.4),
        "feature": CategoryOverride(similarity_threshold=60, title_weight=0.8, description_weight=0.2),
    }


class SimilarityConfig(_PolicyModel):
    """The complete detection policy."""

    # Similarity thresholds
    similarity_threshold: int = Field(65, ge=0, le=100)
    title_weight: float = Field(0.7, ge=0.0)
    description_weight: float = Field(0.3, ge=0.0)

    # Time-based detection
    time_threshold: int = Field(DAY_MS, ge=0, description="Submitter proximity window in ms")
    time_proximity_weight: float = Field(0.2, ge=0.0)

    # IP-based detection
    check_ip_address: bool = True
    ip_match_weight: float = Field(0.3, ge=0.0)

    # Algorithm selection
    algorithm: str = "multi"
    algorithm_weights: AlgorithmWeights = Field(default_factory=AlgorithmWeights)

    category_settings: Dict[str, CategoryOverride] = Field(default_factory=_default_category_settings)

    enable_cross_category_detection: bool = True

    # Adaptive thresholds
    enable_adaptive_thresholds: bool = True
    adaptation_rate: float = Field(0.05, ge=0.0, le=1.0)

    # Informational flags read by the surrounding application
    detailed_logging: bool = True
    monitor_performance: bool = True
    auto_merge_duplicates: bool = False
    notify_admins_on_duplicate: bool = True
    show_similarity_scores: bool = True
    highlight_similar_text: bool = True

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v):
        if v not in VALID_ALGORITHMS:
            raise ValueError(f"algorithm must be one of {list(VALID_ALGORITHMS)}")
        return v

    def for_category(self, category: Optional[str] = None) -> "SimilarityConfig":
        """Return this config with ``category``'s override fields applied."""
        if not category:
            return self
        override = self.category_settings.get(str(getattr(category, "value", category)))
        if override is None:
            return self
        return self.model_copy(update={name: value for name, value in override if value is not None})


DEFAULT_DUPLICATE_CONFIG = SimilarityConfig()


def _by_field_name(partial: Mapping[str, Any]) -> Dict[str, Any]:
    """Accept camelCase keys from the admin surface alongside field names."""
    aliases = {to_camel(name): name for name in SimilarityConfig.model_fields}
    return {aliases.get(key, key): value for key, value in partial.items()}


def defaults_from_settings() -> SimilarityConfig:
    """Documented defaults, with any ``DUP_*`` environment seeds applied."""
    settings = get_config()
    return SimilarityConfig(
        similarity_threshold=settings.dup_similarity_threshold,
        title_weight=settings.dup_title_weight,
        description_weight=settings.dup_description_weight,
        algorithm=settings.dup_algorithm,
        time_threshold=settings.dup_time_threshold_ms,
        check_ip_address=settings.dup_check_ip_address,
        enable_cross_category_detection=settings.dup_cross_category,
        enable_adaptive_thresholds=settings.dup_adaptive_thresholds,
        adaptation_rate=settings.dup_adaptation_rate,
    )


class PolicyStore:
    """Holds the live ``SimilarityConfig`` and swaps it atomically.

    Args:
        defaults: Value restored by ``reset()``.  Defaults to
            ``defaults_from_settings()``.
    """

    def __init__(self, defaults: Optional[SimilarityConfig] = None):
        self._defaults = defaults if defaults is not None else defaults_from_settings()
        self._current = self._defaults
        self._lock = threading.Lock()

    @property
    def defaults(self) -> SimilarityConfig:
        return self._defaults

    def get(self) -> SimilarityConfig:
        return self._current

    def snapshot(self, category: Optional[str] = None) -> SimilarityConfig:
        """Category-resolved view of the current policy, stable for the caller's lifetime."""
        return self._current.for_category(category)

    def get_category_config(self, category: Optional[str] = None) -> SimilarityConfig:
        return self.snapshot(category)

    def update(self, partial: Mapping[str, Any]) -> SimilarityConfig:
        """Merge ``partial`` over the current policy (top-level fields, last write wins).

        Raises:
            ConfigInconsistency: if the merged policy fails validation.
        """
        with self._lock:
            merged = self._current.model_dump()
            merged.update(_by_field_name(partial))
            try:
                new_config = SimilarityConfig.model_validate(merged)
            except ValidationError as e:
                raise ConfigInconsistency(f"Invalid duplicate-detection policy update: {e}") from e
            self._current = new_config

        if new_config.title_weight + new_config.description_weight == 0:
            log_warning("Title and description weights are both zero; scores will use an even split")
        log_info("Duplicate detection policy updated", fields=sorted(partial.keys()))
        return new_config

    def reset(self) -> SimilarityConfig:
        with self._lock:
            self._current = self._defaults
        log_info("Duplicate detection policy reset to defaults")
        return self._current

    def adjust_thresholds(self, false_positive_rate: float, false_negative_rate: float) -> SimilarityConfig:
        """Nudge the global threshold from measured error rates (percentages).

        High false positives raise it (capped at 95); high false negatives
        lower it (floored at 50).  Both may apply in one call.
        """
        with self._lock:
            current = self._current
            if not current.enable_adaptive_thresholds:
                return current

            rate = current.adaptation_rate
            threshold = current.similarity_threshold

            if false_positive_rate > ADAPT_TRIGGER_RATE:
                threshold = min(MAX_ADAPTED_THRESHOLD, threshold + round_half_up(rate * false_positive_rate))

            if false_negative_rate > ADAPT_TRIGGER_RATE:
                threshold = max(MIN_ADAPTED_THRESHOLD, threshold - round_half_up(rate * false_negative_rate))

            if threshold != current.similarity_threshold:
                self._current = current.model_copy(update={"similarity_threshold": threshold})

        if threshold != current.similarity_threshold:
            log_info("Similarity threshold adapted",
                     previous=current.similarity_threshold,
                     threshold=threshold,
                     false_positive_rate=false_positive_rate,
                     false_negative_rate=false_negative_rate)
            from feedback_dedup import metrics
            metrics.gauge("threshold.current", threshold)
        return self._current


# Global policy store (lazy loading)
_store: Optional[PolicyStore] = None


def get_policy_store() -> PolicyStore:
    """Get the process-wide policy store."""
    global _store
    if _store is None:
        _store = PolicyStore()
    return _store


def reload_policy_store() -> PolicyStore:
    """Rebuild the process-wide store from the current settings."""
    global _store
    _store = PolicyStore()
    return _store


def get_duplicate_config() -> SimilarityConfig:
    return get_policy_store().get()


def update_duplicate_config(partial: Mapping[str, Any]) -> SimilarityConfig:
    return get_policy_store().update(partial)


def reset_duplicate_config() -> SimilarityConfig:
    return get_policy_store().reset()


def get_category_config(category: Optional[str] = None) -> SimilarityConfig:
    return get_policy_store().get_category_config(category)


def adjust_thresholds(false_positive_rate: float, false_negative_rate: float) -> SimilarityConfig:
    return get_policy_store().adjust_thresholds(false_positive_rate, false_negative_rate)
