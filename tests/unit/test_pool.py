"""Unit tests for feedback models and the candidate pools."""

import json

import pytest
from unittest.mock import Mock

from feedback_dedup.errors import InputError
from feedback_dedup.models import FeedbackItem, SubmitterInfo, validate_submission
from feedback_dedup.pool import (
    AsyncCallableCandidatePool,
    CallableCandidatePool,
    FetchResult,
    InMemoryCandidatePool,
    JsonFileCandidatePool,
)

pytestmark = pytest.mark.unit

STORE_RECORD = {
    "id": 42,
    "title": "Add dark mode",
    "description": "Please add a dark theme",
    "category": "feature",
    "status": "active",
    "upvotes": 3,
    "duplicateOf": None,
    "submitterInfo": {"userId": "u1", "ip": "203.0.113.7", "timestamp": 1_700_000_000_000},
}


class TestModels:
    def test_item_from_store_json(self):
        item = FeedbackItem.model_validate(STORE_RECORD)
        assert item.id == 42
        assert item.category == "feature"
        assert item.submitter_info == SubmitterInfo(user_id="u1", ip="203.0.113.7", timestamp=1_700_000_000_000)

    def test_item_defaults(self):
        item = FeedbackItem(id="abc", title="t", description="d")
        assert item.category == "general"
        assert item.status == "active"
        assert item.submitter_info is None

    def test_combined_text(self):
        item = FeedbackItem(id=1, title="Add Dark Mode", description="Please")
        assert item.combined_text == "add dark mode please"

    def test_valid_submission(self):
        sub = validate_submission("Add dark mode", "Please", "feature", ip="", user_id="u1")
        assert sub.category == "feature"
        assert sub.ip is None
        assert sub.user_id == "u1"

    def test_missing_fields(self):
        with pytest.raises(InputError) as exc_info:
            validate_submission(None, None, "general")
        assert exc_info.value.fields == ["description", "title"]

    def test_description_too_long(self):
        with pytest.raises(InputError) as exc_info:
            validate_submission("t", "x" * 2001, "bug")
        assert exc_info.value.fields == ["description"]


class TestFetchResult:
    def test_success(self):
        result = FetchResult.success([STORE_RECORD])
        assert result.ok is True
        assert result.items[0].id == 42

    def test_failure(self):
        err = RuntimeError("boom")
        result = FetchResult.failure(err)
        assert result.ok is False
        assert result.error is err
        assert result.items == []


class TestInMemoryPool:
    def test_only_active_items(self):
        pool = InMemoryCandidatePool([
            STORE_RECORD,
            {**STORE_RECORD, "id": 43, "status": "merged"},
        ])
        pool.add({**STORE_RECORD, "id": 44})
        assert [i.id for i in pool.fetch_active().items] == [42, 44]


class TestCallablePool:
    def test_loader_items(self):
        pool = CallableCandidatePool(Mock(return_value=[STORE_RECORD]))
        assert pool.fetch_active().items[0].title == "Add dark mode"

    def test_loader_error_captured(self):
        err = ConnectionError("store down")
        result = CallableCandidatePool(Mock(side_effect=err)).fetch_active()
        assert result.ok is False
        assert result.error is err

    def test_invalid_record_captured(self):
        result = CallableCandidatePool(Mock(return_value=[{"id": 1}])).fetch_active()
        assert result.ok is False

    @pytest.mark.asyncio
    async def test_async_loader(self):
        async def loader():
            return [STORE_RECORD, {**STORE_RECORD, "id": 2, "status": "archived"}]

        result = await AsyncCallableCandidatePool(loader).fetch_active()
        assert [i.id for i in result.items] == [42]


class TestJsonFilePool:
    def test_reads_array(self, tmp_path):
        path = tmp_path / "pool.json"
        path.write_text(json.dumps([STORE_RECORD]), encoding="utf-8")
        result = JsonFileCandidatePool(path).fetch_active()
        assert result.ok is True
        assert result.items[0].id == 42

    def test_missing_file(self, tmp_path):
        result = JsonFileCandidatePool(tmp_path / "nope.json").fetch_active()
        assert result.ok is False
        assert isinstance(result.error, OSError)

    def test_not_an_array(self, tmp_path):
        path = tmp_path / "pool.json"
        path.write_text(json.dumps(STORE_RECORD), encoding="utf-8")
        result = JsonFileCandidatePool(path).fetch_active()
        assert isinstance(result.error, ValueError)
