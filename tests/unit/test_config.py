"""Unit tests for environment-driven settings."""

import pytest
from pydantic import ValidationError
from unittest.mock import patch

from feedback_dedup import config as config_mod
from feedback_dedup.config import Config, get_config, reload_config

pytestmark = pytest.mark.unit


@pytest.fixture
def clean_env(monkeypatch):
    for name in [
        "LOG_LEVEL", "AUDIT_MAX_ENTRIES", "AUDIT_JSONL_PATH",
        "DUP_SIMILARITY_THRESHOLD", "DUP_TITLE_WEIGHT", "DUP_DESCRIPTION_WEIGHT",
        "DUP_ALGORITHM", "METRICS_ENABLED",
    ]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfig:
    def test_defaults(self, clean_env):
        config = Config(_env_file=None)
        assert config.log_level == "INFO"
        assert config.audit_max_entries == 10000
        assert config.dup_similarity_threshold == 65
        assert config.dup_title_weight == 0.7
        assert config.dup_description_weight == 0.3
        assert config.dup_algorithm == "multi"
        assert config.dup_time_threshold_ms == 86_400_000
        assert config.metrics_enabled is False

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("DUP_SIMILARITY_THRESHOLD", "70")
        clean_env.setenv("DUP_ALGORITHM", "Cosine")
        clean_env.setenv("LOG_LEVEL", "debug")
        config = Config(_env_file=None)
        assert config.dup_similarity_threshold == 70
        assert config.dup_algorithm == "cosine"
        assert config.log_level == "DEBUG"

    def test_invalid_log_level(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            Config(_env_file=None)

    def test_invalid_algorithm(self, clean_env):
        clean_env.setenv("DUP_ALGORITHM", "soundex")
        with pytest.raises(ValidationError):
            Config(_env_file=None)

    def test_threshold_out_of_range(self, clean_env):
        clean_env.setenv("DUP_SIMILARITY_THRESHOLD", "101")
        with pytest.raises(ValidationError):
            Config(_env_file=None)


class TestValidateConfiguration:
    def test_clean_configuration(self, clean_env):
        assert Config(_env_file=None).validate_configuration() == []

    def test_zero_weights(self, clean_env):
        config = Config(_env_file=None, dup_title_weight=0, dup_description_weight=0)
        assert any("both zero" in i for i in config.validate_configuration())

    def test_low_threshold(self, clean_env):
        config = Config(_env_file=None, dup_similarity_threshold=30)
        assert any("very low" in i for i in config.validate_configuration())

    def test_unbounded_audit_without_sink(self, clean_env):
        config = Config(_env_file=None, audit_max_entries=0)
        assert any("AUDIT_MAX_ENTRIES" in i for i in config.validate_configuration())
        config = Config(_env_file=None, audit_max_entries=0, audit_jsonl_path="/tmp/audit.jsonl")
        assert config.validate_configuration() == []

    def test_log_configuration(self, clean_env):
        with patch("feedback_dedup.utils.logger.log_info") as mock_log:
            Config(_env_file=None).log_configuration()
        assert mock_log.call_args.args[0] == "Configuration loaded"
        assert mock_log.call_args.kwargs["similarity_threshold"] == 65


class TestGlobalConfig:
    def test_get_config_cached_and_reloadable(self, clean_env):
        with patch.object(config_mod, "_config", None):
            first = get_config()
            assert get_config() is first
            assert reload_config() is not first
