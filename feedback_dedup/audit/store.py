"""Append-only, bounded store of comparison audit entries."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Iterable, List, Optional, Tuple, Union

from feedback_dedup.audit.entry import (
    ComparisonLogEntry,
    UserAction,
    UserActionRecord,
    now_ms,
)
from feedback_dedup.audit.sink import AuditSink, JsonlAuditSink
from feedback_dedup.utils.logger import log_debug, log_error, log_info


class AuditLogStore:
    """In-memory ring buffer of ``ComparisonLogEntry`` records.

    Entries are only ever appended, and annotated once with a user action.
    When ``max_entries`` is reached the oldest entry is evicted; attach a
    durable ``AuditSink`` to keep the full history.

    Args:
        max_entries: Retention limit, ``0`` for unbounded.
        sinks: Durable destinations notified of every append and annotation.
    """

    def __init__(self, max_entries: int = 10000, sinks: Optional[Iterable[AuditSink]] = None):
        self.max_entries = max_entries
        self.sinks: List[AuditSink] = list(sinks or [])
        self._entries: "OrderedDict[str, ComparisonLogEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self.evicted = 0

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: ComparisonLogEntry) -> None:
        with self._lock:
            self._entries[entry.id] = entry
            while self.max_entries and len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                self.evicted += 1

        log_info(
            f"[Duplicate Check] ID: {entry.id}, "
            f"Decision: {'Duplicate' if entry.is_duplicate else 'Not Duplicate'}, "
            f"Reason: {entry.final_decision.reason}"
        )
        for sink in self.sinks:
            try:
                sink.write_entry(entry)
            except OSError as e:
                log_error("Audit sink write failed", sink=type(sink).__name__, error=str(e))

    def get(self, log_id: str) -> Optional[ComparisonLogEntry]:
        return self._entries.get(log_id)

    def entries(self) -> List[ComparisonLogEntry]:
        """Snapshot of all retained entries, oldest first."""
        with self._lock:
            return list(self._entries.values())

    def record_user_action(
        self,
        log_id: str,
        action: Union[UserAction, str],
        timestamp: Optional[int] = None,
    ) -> Optional[ComparisonLogEntry]:
        """Attach ``action`` to the entry ``log_id``.

        Unknown (or already evicted) ids are ignored and ``None`` is returned.

        Raises:
            ValueError: if ``action`` is not a known ``UserAction``.
        """
        action = UserAction(action)
        with self._lock:
            entry = self._entries.get(log_id)
            if entry is None:
                log_debug("User action for unknown audit entry ignored", log_id=log_id, action=action.value)
                return None
            entry.user_action = UserActionRecord(
                action=action,
                timestamp=timestamp if timestamp is not None else now_ms(),
            )

        log_info("User action recorded", log_id=log_id, action=action.value)
        for sink in self.sinks:
            try:
                sink.write_user_action(entry)
            except OSError as e:
                log_error("Audit sink write failed", sink=type(sink).__name__, error=str(e))
        return entry

    def query(
        self,
        feedback_id: Optional[Union[int, str]] = None,
        time_range: Optional[Tuple[int, int]] = None,
        decision: Optional[bool] = None,
    ) -> List[ComparisonLogEntry]:
        """Filter retained entries; every given criterion must hold.

        Args:
            feedback_id: Id of the existing item the submission was compared with.
            time_range: Inclusive ``(start_ms, end_ms)`` window on the entry timestamp.
            decision: Keep only duplicate (``True``) or non-duplicate (``False``) verdicts.
        """
        results = []
        for entry in self.entries():
            if feedback_id is not None and entry.compared_with.id != feedback_id:
                continue
            if time_range is not None:
                start, end = time_range
                if not (start <= entry.timestamp <= end):
                    continue
            if decision is not None and entry.is_duplicate != decision:
                continue
            results.append(entry)
        return results

    def for_feedback(self, feedback_id: Union[int, str]) -> List[ComparisonLogEntry]:
        return self.query(feedback_id=feedback_id)

    def by_time_range(self, start_ms: int, end_ms: int) -> List[ComparisonLogEntry]:
        return self.query(time_range=(start_ms, end_ms))

    def by_decision(self, is_duplicate: bool) -> List[ComparisonLogEntry]:
        return self.query(decision=is_duplicate)


# Global audit store (lazy loading)
_store: Optional[AuditLogStore] = None


def _build_store() -> AuditLogStore:
    from feedback_dedup.config import get_config

    config = get_config()
    sinks: List[AuditSink] = []
    if config.audit_jsonl_path:
        sinks.append(JsonlAuditSink(config.audit_jsonl_path))
    return AuditLogStore(max_entries=config.audit_max_entries, sinks=sinks)


def get_audit_store() -> AuditLogStore:
    """Get the process-wide audit store."""
    global _store
    if _store is None:
        _store = _build_store()
    return _store


def reload_audit_store() -> AuditLogStore:
    """Discard the process-wide store and rebuild it from settings."""
    global _store
    _store = _build_store()
    return _store
