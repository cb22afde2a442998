"""Engine self-observability via DogStatsD custom metrics.

When METRICS_ENABLED=true, this module emits operational metrics to a local
Datadog Agent (or DogStatsD sidecar).  When disabled, or if the client
cannot be created, all calls become no-ops.

Metrics emitted (under METRICS_PREFIX):
  - checks                (count, tagged by category)
  - comparisons           (count)
  - duplicates.found      (count)
  - duplicates.exact      (count)
  - check.duration        (timing, ms)
  - threshold.current     (gauge)
"""

from __future__ import annotations

import atexit
from typing import Dict, List, Optional

from datadog import DogStatsd

from feedback_dedup.utils.logger import log_debug, log_info, log_warning


class _NoOpStatsd:
    """Stand-in client used while metrics are disabled."""

    def increment(self, *a, **kw):
        pass

    def gauge(self, *a, **kw):
        pass

    def timing(self, *a, **kw):
        pass

    def close(self):
        pass


_client = None  # will be _NoOpStatsd or real DogStatsd


def _init_client() -> None:
    global _client
    if _client is not None:
        return

    from feedback_dedup.config import get_config

    config = get_config()

    if not config.metrics_enabled:
        log_debug("DogStatsD metrics disabled (METRICS_ENABLED=false)")
        _client = _NoOpStatsd()
        return

    try:
        _client = DogStatsd(
            host=config.dd_agent_host,
            port=config.dd_agent_port,
            namespace=config.metrics_prefix,
        )
    except OSError as exc:
        log_warning("DogStatsD unavailable, metrics disabled", error=str(exc))
        _client = _NoOpStatsd()
        return

    atexit.register(_client.close)
    log_info(
        "DogStatsD client initialized",
        host=config.dd_agent_host,
        port=config.dd_agent_port,
        prefix=config.metrics_prefix,
    )


def _get_client():
    if _client is None:
        _init_client()
    return _client


def _tags(extra: Optional[Dict[str, object]] = None) -> List[str]:
    """Build tag list from key-value pairs, filtering out None values."""
    tags: List[str] = []
    if extra:
        tags.extend(f"{k}:{v}" for k, v in extra.items() if v is not None)
    return tags


# --- Public API ---


def incr(metric: str, value: int = 1, **extra_tags) -> None:
    """Increment a counter metric."""
    _get_client().increment(metric, value=value, tags=_tags(extra_tags) or None)


def gauge(metric: str, value: float, **extra_tags) -> None:
    """Set a gauge metric."""
    _get_client().gauge(metric, value=value, tags=_tags(extra_tags) or None)


def timing(metric: str, value_ms: float, **extra_tags) -> None:
    """Record a timing metric in milliseconds."""
    _get_client().timing(metric, value=value_ms, tags=_tags(extra_tags) or None)
