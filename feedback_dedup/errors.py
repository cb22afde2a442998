"""Exceptions raised at the edges of the duplicate-detection engine.

Similarity computation itself never raises for string input; only input
validation, policy updates and the candidate-pool boundary can fail.
"""

from typing import List, Optional


class DedupError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InputError(DedupError):
    """A submission is missing required text or carries an invalid field.

    Raised before any comparison runs, so no audit entry exists for it.
    """

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        self.fields = fields or []
        super().__init__(message)


class UpstreamFetchError(DedupError):
    """The active-item pool could not be retrieved.

    Callers must read this as "unable to determine duplicate status", never
    as "no duplicates found".
    """

    def __init__(self, message: str = "Failed to fetch active feedback", cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class ConfigInconsistency(DedupError):
    """A policy update was rejected because it would leave the policy invalid."""
