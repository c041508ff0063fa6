"""Tests for TaskStore — users and tasks."""

from datetime import datetime

import pytest

from todo_backend.tasks.store import TaskStore

# -- Users ---------------------------------------------------------------------


async def test_add_and_get_user(store: TaskStore) -> None:
    user = await store.add_user("ana", "ana@example.com", telegram_chat_id="123")
    fetched = await store.get_user(user.id)

    assert fetched is not None
    assert fetched.username == "ana"
    assert fetched.email == "ana@example.com"
    assert fetched.telegram_chat_id == "123"
    assert fetched.notifications_enabled is True
    assert fetched.has_email
    assert fetched.has_telegram


async def test_get_user_not_found(store: TaskStore) -> None:
    assert await store.get_user(999) is None


async def test_user_without_contacts(store: TaskStore) -> None:
    user = await store.add_user("bia")
    fetched = await store.get_user(user.id)
    assert fetched is not None
    assert not fetched.has_email
    assert not fetched.has_telegram


async def test_update_telegram_chat_id(store: TaskStore) -> None:
    user = await store.add_user("ana", "ana@example.com")

    assert await store.update_telegram_chat_id(user.id, "-100200") is True
    fetched = await store.get_user(user.id)
    assert fetched is not None
    assert fetched.telegram_chat_id == "-100200"

    assert await store.update_telegram_chat_id(user.id, None) is True
    fetched = await store.get_user(user.id)
    assert fetched is not None
    assert fetched.telegram_chat_id is None


async def test_update_notifications_enabled(store: TaskStore) -> None:
    user = await store.add_user("ana", "ana@example.com")

    assert await store.update_notifications_enabled(user.id, False) is True
    fetched = await store.get_user(user.id)
    assert fetched is not None
    assert fetched.notifications_enabled is False


async def test_update_nonexistent_user_returns_false(store: TaskStore) -> None:
    assert await store.update_notifications_enabled(42, False) is False
    assert await store.update_telegram_chat_id(42, "1") is False


# -- Tasks ---------------------------------------------------------------------


async def test_add_and_get_task(store: TaskStore) -> None:
    user = await store.add_user("ana", "ana@example.com")
    due = datetime(2025, 6, 10, 18, 0)
    task = await store.add_task(
        user.id,
        "Pay rent",
        task_type="casa",
        description="Transfer before noon",
        priority="alta",
        due_date=due,
    )

    fetched = await store.get_task(task.id)
    assert fetched is not None
    assert fetched.title == "Pay rent"
    assert fetched.description == "Transfer before noon"
    assert fetched.priority == "alta"
    assert fetched.due_date == due
    assert fetched.completed is False


async def test_add_task_defaults_priority(store: TaskStore) -> None:
    user = await store.add_user("ana")
    task = await store.add_task(user.id, "Walk")
    assert task.priority == "media"
    assert task.due_date is None


async def test_add_task_rejects_unknown_type(store: TaskStore) -> None:
    user = await store.add_user("ana")
    with pytest.raises(ValueError, match="task type"):
        await store.add_task(user.id, "x", task_type="hobby")


async def test_add_task_rejects_unknown_priority(store: TaskStore) -> None:
    user = await store.add_user("ana")
    with pytest.raises(ValueError, match="priority"):
        await store.add_task(user.id, "x", priority="critical")


async def test_set_completed(store: TaskStore) -> None:
    user = await store.add_user("ana")
    task = await store.add_task(user.id, "Walk", due_date=datetime(2025, 6, 10))

    assert await store.set_completed(task.id) is True
    fetched = await store.get_task(task.id)
    assert fetched is not None
    assert fetched.completed is True
    assert await store.set_completed(999) is False


# -- list_reminder_candidates --------------------------------------------------


async def test_reminder_candidates_exclude_completed_and_undated(store: TaskStore) -> None:
    user = await store.add_user("ana", "ana@example.com", telegram_chat_id="55")
    due = datetime(2025, 6, 10, 12, 0)
    keep = await store.add_task(user.id, "Open", due_date=due)
    await store.add_task(user.id, "Done", due_date=due, completed=True)
    await store.add_task(user.id, "Someday")

    candidates = await store.list_reminder_candidates()
    assert [t.id for t in candidates] == [keep.id]

    (task,) = candidates
    assert task.owner is not None
    assert task.owner.id == user.id
    assert task.owner.email == "ana@example.com"
    assert task.owner.telegram_chat_id == "55"
    assert task.owner.notifications_enabled is True


async def test_reminder_candidates_include_disabled_users(store: TaskStore) -> None:
    # The engine, not the query, decides what to do with disabled users.
    user = await store.add_user("ana", "ana@example.com", notifications_enabled=False)
    await store.add_task(user.id, "Open", due_date=datetime(2025, 6, 10))

    (task,) = await store.list_reminder_candidates()
    assert task.owner is not None
    assert task.owner.notifications_enabled is False


# -- list_upcoming_tasks -------------------------------------------------------


async def test_upcoming_tasks_ordered_and_limited(store: TaskStore) -> None:
    user = await store.add_user("ana")
    other = await store.add_user("bia")
    for day in (20, 5, 12, 1, 30, 2, 3, 4, 6, 7, 8, 9):
        await store.add_task(user.id, f"day {day}", due_date=datetime(2025, 6, day))
    await store.add_task(other.id, "not mine", due_date=datetime(2025, 5, 1))
    await store.add_task(user.id, "done", due_date=datetime(2025, 5, 1), completed=True)

    upcoming = await store.list_upcoming_tasks(user.id)
    assert len(upcoming) == 10
    assert [t.title for t in upcoming[:3]] == ["day 1", "day 2", "day 3"]
    assert all(t.user_id == user.id for t in upcoming)
