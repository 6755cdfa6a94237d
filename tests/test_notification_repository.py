"""Tests for the notification store."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from notifier.domain.entities import Notification
from notifier.infrastructure.repositories import NotificationRepository
from notifier.infrastructure.repositories.notification_repository import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    decode_cursor,
    encode_cursor,
)

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_notification(user_id: str = "u1", **overrides) -> Notification:
    values = {
        "id": None,
        "user_id": user_id,
        "category": "system",
        "title": "Maintenance window",
        "body": "Tonight at 22:00",
        "metadata": {"window": "22:00"},
    }
    values.update(overrides)
    return Notification(**values)


def test_create_notification_is_idempotent_per_user(session):
    """Same dedupe key and user returns the first row without inserting again."""

    repository = NotificationRepository(session)

    first = repository.create_notification(make_notification(dedupe_key="k1"))
    second = repository.create_notification(make_notification(dedupe_key="k1", title="Other"))
    other_user = repository.create_notification(make_notification("u2", dedupe_key="k1"))

    assert first.inserted is True
    assert second.inserted is False
    assert second.id == first.id
    assert second.created_at == first.created_at
    assert other_user.inserted is True
    assert repository.count_for_user("u1") == 1
    assert repository.get(first.id).title == "Maintenance window"


def test_create_notification_returns_winner_after_unique_violation(session, monkeypatch):
    """A lost insert race reads back the row that won."""

    repository = NotificationRepository(session)
    winner = repository.create_notification(make_notification(dedupe_key="race"))

    # Simulate a concurrent writer: the pre-check misses, the insert collides.
    calls = {"count": 0}
    unpatched = NotificationRepository._get_by_dedupe_key

    def miss_first(self, dedupe_key, user_id):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return unpatched(self, dedupe_key, user_id)

    monkeypatch.setattr(NotificationRepository, "_get_by_dedupe_key", miss_first)

    result = repository.create_notification(make_notification(dedupe_key="race"))

    assert result.inserted is False
    assert result.id == winner.id
    assert repository.count_for_user("u1") == 1


def test_create_notification_propagates_other_database_errors(session, monkeypatch):
    repository = NotificationRepository(session)

    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(session, "commit", failing_commit)

    with pytest.raises(OperationalError):
        repository.create_notification(make_notification(dedupe_key="k1"))


def test_create_without_dedupe_key_reraises_integrity_errors(session, monkeypatch):
    repository = NotificationRepository(session)

    def failing_commit():
        raise IntegrityError("INSERT", {}, Exception("constraint"))

    monkeypatch.setattr(session, "commit", failing_commit)

    with pytest.raises(IntegrityError):
        repository.create_notification(make_notification())


def test_list_for_user_paginates_newest_first(session):
    """Cursor pagination walks every row exactly once in descending order."""

    repository = NotificationRepository(session)
    for index in range(5):
        repository.create_notification(
            make_notification(
                title=f"n{index}", created_at=BASE_TIME + timedelta(minutes=index)
            )
        )
    repository.create_notification(make_notification("u2", title="other user"))

    first = repository.list_for_user("u1", limit=2)
    second = repository.list_for_user("u1", limit=2, cursor=first.next_cursor)
    third = repository.list_for_user("u1", limit=2, cursor=second.next_cursor)

    assert [n.title for n in first.items] == ["n4", "n3"]
    assert [n.title for n in second.items] == ["n2", "n1"]
    assert [n.title for n in third.items] == ["n0"]
    assert first.has_more is True and second.has_more is True
    assert third.has_more is False
    assert third.next_cursor is None


def test_list_for_user_breaks_timestamp_ties_by_id(session):
    repository = NotificationRepository(session)
    for index in range(3):
        repository.create_notification(make_notification(title=f"n{index}", created_at=BASE_TIME))

    seen: list[str] = []
    cursor = None
    while True:
        page = repository.list_for_user("u1", limit=1, cursor=cursor)
        seen.extend(n.id for n in page.items)
        if not page.has_more:
            break
        cursor = page.next_cursor

    assert len(seen) == 3
    assert seen == sorted(seen, reverse=True)


def test_list_for_user_filters_by_category(session):
    repository = NotificationRepository(session)
    repository.create_notification(make_notification(category="payment", title="paid"))
    repository.create_notification(make_notification(category="system", title="maintenance"))

    assert [n.title for n in repository.list_for_user("u1", category="payment").items] == ["paid"]
    assert len(repository.list_for_user("u1", category="unknown").items) == 2


def test_list_for_user_limits(session):
    repository = NotificationRepository(session)
    for index in range(MAX_PAGE_SIZE + 5):
        repository.create_notification(
            make_notification(created_at=BASE_TIME + timedelta(seconds=index))
        )

    assert len(repository.list_for_user("u1").items) == DEFAULT_PAGE_SIZE
    assert len(repository.list_for_user("u1", limit=500).items) == MAX_PAGE_SIZE


def test_metadata_round_trips_as_json(session):
    repository = NotificationRepository(session)
    created = repository.create_notification(
        make_notification(metadata={"mentions": ["u2"], "nested": {"a": 1}})
    )

    assert repository.get(created.id).metadata == {"mentions": ["u2"], "nested": {"a": 1}}


def test_cursor_codec_rejects_garbage():
    cursor = encode_cursor(BASE_TIME, "abc")

    created_at, notification_id = decode_cursor(cursor)

    assert created_at == BASE_TIME
    assert notification_id == "abc"
    with pytest.raises(ValueError, match="Invalid cursor"):
        decode_cursor("not-a-cursor!")
