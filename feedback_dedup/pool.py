"""The active-item pool collaborator.

The decision engine never talks to the item store directly.  It asks a
``CandidatePool`` for the currently active items and gets back a
``FetchResult`` that is either the items or the error that prevented
fetching them; the engine matches on it explicitly.
"""

from __future__ import annotations

import abc
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from feedback_dedup.models import FeedbackItem, FeedbackStatus
from feedback_dedup.utils.logger import log_debug, log_error

ItemLike = Union[FeedbackItem, Mapping[str, Any]]


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one pool fetch: ``items`` on success, ``error`` on failure."""

    items: List[FeedbackItem] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, items: Iterable[ItemLike]) -> "FetchResult":
        return cls(items=[_as_item(i) for i in items])

    @classmethod
    def failure(cls, error: BaseException) -> "FetchResult":
        return cls(error=error)


def _as_item(item: ItemLike) -> FeedbackItem:
    if isinstance(item, FeedbackItem):
        return item
    return FeedbackItem.model_validate(item)


def _active_only(items: Iterable[FeedbackItem]) -> List[FeedbackItem]:
    return [i for i in items if i.status == FeedbackStatus.ACTIVE.value]


class CandidatePool(abc.ABC):
    """Source of the items a new submission is compared against."""

    @abc.abstractmethod
    def fetch_active(self) -> FetchResult:
        """Return every item whose status is ``active``."""


class AsyncCandidatePool(abc.ABC):
    """Awaitable variant of ``CandidatePool``."""

    @abc.abstractmethod
    async def fetch_active(self) -> FetchResult:
        """Return every item whose status is ``active``."""


class InMemoryCandidatePool(CandidatePool):
    """Pool over a fixed list of items; non-active items are filtered out."""

    def __init__(self, items: Optional[Iterable[ItemLike]] = None):
        self.items: List[FeedbackItem] = [_as_item(i) for i in (items or [])]

    def add(self, item: ItemLike) -> FeedbackItem:
        parsed = _as_item(item)
        self.items.append(parsed)
        return parsed

    def fetch_active(self) -> FetchResult:
        return FetchResult(items=_active_only(self.items))


class CallableCandidatePool(CandidatePool):
    """Adapts a loader function from the item store.

    Whatever the loader raises is captured into a failed ``FetchResult``.
    """

    def __init__(self, loader: Callable[[], Iterable[ItemLike]]):
        self.loader = loader

    def fetch_active(self) -> FetchResult:
        try:
            items = [_as_item(i) for i in self.loader()]
        except Exception as e:
            log_error("Active feedback fetch failed", error=str(e), error_type=type(e).__name__)
            return FetchResult.failure(e)
        return FetchResult(items=_active_only(items))


class AsyncCallableCandidatePool(AsyncCandidatePool):
    """Adapts an async loader function from the item store."""

    def __init__(self, loader: Callable[[], Awaitable[Iterable[ItemLike]]]):
        self.loader = loader

    async def fetch_active(self) -> FetchResult:
        try:
            items = [_as_item(i) for i in await self.loader()]
        except Exception as e:
            log_error("Active feedback fetch failed", error=str(e), error_type=type(e).__name__)
            return FetchResult.failure(e)
        return FetchResult(items=_active_only(items))


class JsonFileCandidatePool(CandidatePool):
    """Reads a JSON array of feedback records (store export format)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def fetch_active(self) -> FetchResult:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError(f"{self.path} must contain a JSON array of feedback items")
            items = [_as_item(i) for i in data]
        except (OSError, ValueError, ValidationError) as e:
            log_error("Failed to load feedback pool", path=str(self.path), error=str(e))
            return FetchResult.failure(e)
        log_debug("Feedback pool loaded", path=str(self.path), count=len(items))
        return FetchResult(items=_active_only(items))
