"""Tests for embedded collection helpers"""
import pytest
from datetime import datetime

from transactions_service.exceptions import ConflictError, NotFoundError
from transactions_service.schemas.transaction import ActivityEntry
from transactions_service.services.collections import (
    append_entry,
    find_and_mutate,
    increment_likes,
    remove_by_id,
)


def activity(activity_id: str, likes: int = 0) -> ActivityEntry:
    return ActivityEntry(
        id=activity_id,
        user="Alice",
        user_email="alice@example.com",
        message=f"message {activity_id}",
        timestamp=datetime(2024, 1, 1),
        likes=likes,
    )


class TestAppendEntry:

    def test_append_at_end(self):
        entries = [activity("a")]
        append_entry(entries, activity("b"))
        assert [e.id for e in entries] == ["a", "b"]

    def test_append_at_front(self):
        entries = [activity("a")]
        append_entry(entries, activity("b"), at_front=True)
        assert [e.id for e in entries] == ["b", "a"]

    def test_duplicate_id_rejected(self):
        entries = [activity("a")]
        with pytest.raises(ConflictError):
            append_entry(entries, activity("a"))
        assert len(entries) == 1


class TestRemoveById:

    def test_removes_only_target_and_keeps_order(self):
        entries = [activity("a"), activity("b"), activity("c")]

        removed = remove_by_id(entries, "b", "activity")

        assert removed.id == "b"
        assert [e.id for e in entries] == ["a", "c"]

    def test_missing_id_raises_not_found(self):
        entries = [activity("a")]

        with pytest.raises(NotFoundError) as exc_info:
            remove_by_id(entries, "zzz", "activity")

        assert exc_info.value.resource == "activity"
        assert exc_info.value.resource_id == "zzz"
        assert len(entries) == 1


class TestFindAndMutate:

    def test_mutates_only_target(self):
        entries = [activity("a", likes=1), activity("b", likes=5)]

        find_and_mutate(entries, "b", increment_likes, "activity")

        assert [e.likes for e in entries] == [1, 6]

    def test_missing_id_leaves_entries_untouched(self):
        entries = [activity("a", likes=1)]

        with pytest.raises(NotFoundError):
            find_and_mutate(entries, "b", increment_likes, "activity")

        assert entries[0].likes == 1
