"""Audit trail of every duplicate-check comparison.

Entries are appended by the decision engine, annotated once when the
submitter acts on the verdict, and read back for calibration and review.
"""

from feedback_dedup.audit.entry import ComparisonLogEntry, UserAction
from feedback_dedup.audit.sink import AuditSink, JsonlAuditSink
from feedback_dedup.audit.store import AuditLogStore, get_audit_store, reload_audit_store

__all__ = [
    "AuditLogStore",
    "AuditSink",
    "ComparisonLogEntry",
    "JsonlAuditSink",
    "UserAction",
    "get_audit_store",
    "reload_audit_store",
]
