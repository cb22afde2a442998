"""Configuration management using Pydantic BaseSettings.

This module provides centralized, environment-driven settings with
validation and sensible defaults for the duplicate-detection engine.  The
runtime-mutable detection policy lives in ``feedback_dedup.policy``; the
``DUP_*`` values here only seed its initial defaults.
"""
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

VALID_ALGORITHMS = ("levenshtein", "jaccard", "cosine", "multi")


class Config(BaseSettings):
    """Main configuration class combining all settings."""

    # Logging Configuration
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format")

    # Audit log retention
    audit_max_entries: int = Field(10000, ge=0, le=1_000_000, description="Ring-buffer size of the audit log (0=unbounded)")
    audit_jsonl_path: str = Field("", description="Optional JSONL file receiving every audit entry")

    # Detection policy seeds
    dup_similarity_threshold: int = Field(65, ge=0, le=100, description="Global similarity threshold (0-100)")
    dup_title_weight: float = Field(0.7, ge=0.0, description="Relative weight of the title score")
    dup_description_weight: float = Field(0.3, ge=0.0, description="Relative weight of the description score")
    dup_algorithm: str = Field("multi", description="Similarity algorithm")
    dup_time_threshold_ms: int = Field(24 * 60 * 60 * 1000, ge=0, description="Submitter proximity window in ms")
    dup_check_ip_address: bool = Field(True, description="Consider submitter IP for anonymous submissions")
    dup_cross_category: bool = Field(True, description="Compare against items of other categories")
    dup_adaptive_thresholds: bool = Field(True, description="Allow threshold adaptation from FP/FN rates")
    dup_adaptation_rate: float = Field(0.05, ge=0.0, le=1.0, description="Threshold adaptation rate")

    # Metrics (DogStatsD)
    metrics_enabled: bool = Field(False, description="Emit DogStatsD metrics")
    dd_agent_host: str = Field("localhost", description="DogStatsD host")
    dd_agent_port: int = Field(8125, ge=1, le=65535, description="DogStatsD port")
    metrics_prefix: str = Field("feedback_dedup", description="Metric namespace")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level: {v}. Valid options: {valid_levels}')
        return v.upper()

    @field_validator('dup_algorithm')
    @classmethod
    def validate_algorithm(cls, v):
        if v.lower() not in VALID_ALGORITHMS:
            raise ValueError(f'Invalid algorithm: {v}. Valid options: {list(VALID_ALGORITHMS)}')
        return v.lower()

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []

        if self.dup_title_weight + self.dup_description_weight == 0:
            issues.append("DUP_TITLE_WEIGHT and DUP_DESCRIPTION_WEIGHT are both zero")

        if self.dup_similarity_threshold < 50:
            issues.append("DUP_SIMILARITY_THRESHOLD is very low, may flag many false duplicates")

        if self.audit_max_entries == 0 and not self.audit_jsonl_path:
            issues.append("AUDIT_MAX_ENTRIES=0 keeps every audit entry in memory without a durable sink")

        return issues

    def log_configuration(self) -> None:
        """Log the current configuration (sanitized)."""
        from feedback_dedup.utils.logger import log_info

        log_info("Configuration loaded",
                 similarity_threshold=self.dup_similarity_threshold,
                 algorithm=self.dup_algorithm,
                 title_weight=self.dup_title_weight,
                 description_weight=self.dup_description_weight,
                 cross_category=self.dup_cross_category,
                 adaptive_thresholds=self.dup_adaptive_thresholds,
                 audit_max_entries=self.audit_max_entries,
                 audit_jsonl=bool(self.audit_jsonl_path),
                 metrics_enabled=self.metrics_enabled,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
