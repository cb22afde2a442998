"""Feedback records read by the engine and the submission schema it validates.

``FeedbackItem`` is owned by the external item store; the engine only reads
it.  Both camelCase (store JSON) and snake_case field names are accepted.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from feedback_dedup.errors import InputError

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000


class FeedbackCategory(str, Enum):
    GENERAL = "general"
    BUG = "bug"
    FEATURE = "feature"
    IMPROVEMENT = "improvement"


class FeedbackStatus(str, Enum):
    ACTIVE = "active"
    DUPLICATE = "duplicate"
    MERGED = "merged"
    ARCHIVED = "archived"
    UNDER_REVIEW = "under_review"
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    IMPLEMENTED = "implemented"
    DECLINED = "declined"


class _StoreModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        frozen=True,
    )


class SubmitterInfo(_StoreModel):
    """Who submitted an item, and when (epoch milliseconds)."""

    user_id: Optional[str] = None
    user_name: Optional[str] = None
    ip: Optional[str] = None
    timestamp: Optional[int] = None
    user_agent: Optional[str] = None


class FeedbackItem(_StoreModel):
    """An existing feedback record as returned by the active-item store."""

    id: Union[int, str]
    title: str
    description: str
    category: FeedbackCategory = FeedbackCategory.GENERAL
    status: FeedbackStatus = FeedbackStatus.ACTIVE
    upvotes: int = 0
    downvotes: int = 0
    duplicate_of: Optional[Union[int, str]] = None
    submitter_info: Optional[SubmitterInfo] = None

    @property
    def combined_text(self) -> str:
        return f"{self.title} {self.description}".lower()


class FeedbackSubmission(BaseModel):
    """A new submission about to be checked for duplicates."""

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    category: FeedbackCategory
    ip: Optional[str] = None
    user_id: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("title", "description")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @property
    def combined_text(self) -> str:
        return f"{self.title} {self.description}".lower()


def validate_submission(
    title: Optional[str],
    description: Optional[str],
    category: Union[str, FeedbackCategory, None],
    ip: Optional[str] = None,
    user_id: Optional[str] = None,
) -> FeedbackSubmission:
    """Build a ``FeedbackSubmission`` or raise ``InputError`` naming the bad fields."""
    try:
        return FeedbackSubmission(
            title=title,
            description=description,
            category=category,
            ip=ip or None,
            user_id=user_id or None,
        )
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise InputError(f"Invalid feedback submission: {', '.join(fields)}", fields=fields) from e
