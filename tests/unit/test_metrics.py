"""Unit tests for feedback_dedup.metrics module."""

import pytest
from unittest.mock import MagicMock, patch

import feedback_dedup.metrics as metrics_mod
from feedback_dedup.metrics import _NoOpStatsd, _tags, gauge, incr, timing

pytestmark = pytest.mark.unit


class TestNoOpStatsd:
    def test_all_methods_are_noop(self):
        client = _NoOpStatsd()
        client.increment("x", value=1)
        client.gauge("x", value=1.0)
        client.timing("x", value=1.0)
        client.close()


class TestTags:
    def test_empty_returns_empty_list(self):
        assert _tags(None) == []

    def test_with_values(self):
        tags = _tags({"category": "bug", "env": "prod"})
        assert "category:bug" in tags
        assert "env:prod" in tags

    def test_none_values_filtered(self):
        assert _tags({"category": None, "env": "prod"}) == ["env:prod"]


class TestMetricsEnabled:
    def test_incr_forwards_tags(self):
        mock_client = MagicMock()
        with patch.object(metrics_mod, "_client", mock_client):
            incr("checks", category="bug")
        mock_client.increment.assert_called_once_with("checks", value=1, tags=["category:bug"])

    def test_untagged_metric_passes_none(self):
        mock_client = MagicMock()
        with patch.object(metrics_mod, "_client", mock_client):
            incr("comparisons", value=4)
        mock_client.increment.assert_called_once_with("comparisons", value=4, tags=None)

    def test_gauge_and_timing(self):
        mock_client = MagicMock()
        with patch.object(metrics_mod, "_client", mock_client):
            gauge("threshold.current", 70)
            timing("check.duration", 12.5)
        mock_client.gauge.assert_called_once_with("threshold.current", value=70, tags=None)
        mock_client.timing.assert_called_once_with("check.duration", value=12.5, tags=None)


class TestInitClient:
    def test_disabled_uses_noop(self):
        config = MagicMock(metrics_enabled=False)
        with (
            patch.object(metrics_mod, "_client", None),
            patch("feedback_dedup.config.get_config", return_value=config),
        ):
            metrics_mod._init_client()
            assert isinstance(metrics_mod._client, _NoOpStatsd)

    def test_enabled_creates_dogstatsd(self):
        config = MagicMock(metrics_enabled=True, dd_agent_host="agent", dd_agent_port=8125, metrics_prefix="fd")
        with (
            patch.object(metrics_mod, "_client", None),
            patch("feedback_dedup.config.get_config", return_value=config),
            patch.object(metrics_mod, "DogStatsd") as mock_cls,
            patch.object(metrics_mod.atexit, "register"),
        ):
            metrics_mod._init_client()
            mock_cls.assert_called_once_with(host="agent", port=8125, namespace="fd")
            assert metrics_mod._client is mock_cls.return_value

    def test_client_error_falls_back_to_noop(self):
        config = MagicMock(metrics_enabled=True, dd_agent_host="agent", dd_agent_port=8125, metrics_prefix="fd")
        with (
            patch.object(metrics_mod, "_client", None),
            patch("feedback_dedup.config.get_config", return_value=config),
            patch.object(metrics_mod, "DogStatsd", side_effect=OSError("no socket")),
        ):
            metrics_mod._init_client()
            assert isinstance(metrics_mod._client, _NoOpStatsd)
