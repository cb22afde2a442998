"""Durable destinations for audit entries."""

from __future__ import annotations

import abc
import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

from feedback_dedup.audit.entry import ComparisonLogEntry


class AuditSink(abc.ABC):
    """Receives every appended entry and every later user action."""

    @abc.abstractmethod
    def write_entry(self, entry: ComparisonLogEntry) -> None:
        """Persist a newly appended entry."""

    @abc.abstractmethod
    def write_user_action(self, entry: ComparisonLogEntry) -> None:
        """Persist the ``user_action`` just attached to ``entry``."""


class JsonlAuditSink(AuditSink):
    """Append-only JSON Lines file, one event per line.

    Comparison events carry the full entry; user-action events carry only
    the entry id and the action, so the file never rewrites earlier lines.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _append(self, event: Dict[str, Any]) -> None:
        enriched = {"ts": datetime.now(timezone.utc).isoformat(), **event}
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(enriched, ensure_ascii=False, default=str) + "\n")

    def write_entry(self, entry: ComparisonLogEntry) -> None:
        self._append({"event": "comparison", **entry.to_dict()})

    def write_user_action(self, entry: ComparisonLogEntry) -> None:
        self._append({
            "event": "user_action",
            "id": entry.id,
            "user_action": entry.to_dict()["user_action"],
        })
