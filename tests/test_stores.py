# tests/test_stores.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from lifeos.push.push_models import Subscription, SubscriptionKeys
from lifeos.push.subscription_store import SubscriptionStore
from lifeos.tasks.task_models import Task
from lifeos.tasks.task_store import TaskStore


def test_find_candidates_filters_completed_notified_and_disabled(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "lifeos.sqlite3")

    keep = store.add_task(title="keep", date="2025-03-01", start_time="10:00", reminder_offset=5)
    keep_default = store.add_task(title="default", date="2025-03-01", start_time="11:00", reminder_offset=None)
    store.add_task(title="done", date="2025-03-01", start_time="10:00", completed=True)
    store.add_task(title="sent", date="2025-03-01", start_time="10:00", notified=True)
    store.add_task(title="off", date="2025-03-01", start_time="10:00", reminder_offset=-1)

    ids = {t.id for t in store.find_candidates()}
    assert ids == {keep, keep_default}
    assert store.get_task(keep_default).reminder_offset is None


def test_mark_notified_is_idempotent(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "lifeos.sqlite3")
    task_id = store.add_task(title="ping", date="2025-03-01", start_time="10:00")

    assert store.mark_notified(task_id) is True
    assert store.mark_notified(task_id) is False
    assert store.get_task(task_id).notified is True
    assert store.find_candidates() == []
    assert store.mark_notified("missing") is False


def test_schedule_edit_rearms_reminder(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "lifeos.sqlite3")
    task_id = store.add_task(title="ping", date="2025-03-01", start_time="10:00")
    store.mark_notified(task_id)

    store.update_task_fields(task_id, title="renamed")
    assert store.get_task(task_id).notified is True

    store.update_task_fields(task_id, start_time="11:30")
    task = store.get_task(task_id)
    assert task.notified is False
    assert task.start_time == "11:30"
    assert task.title == "renamed"


def test_offset_can_be_cleared_back_to_default(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "lifeos.sqlite3")
    task_id = store.add_task(title="ping", date="2025-03-01", start_time="10:00", reminder_offset=30)

    store.update_task_fields(task_id, reminder_offset=None)
    assert store.get_task(task_id).reminder_offset is None


def test_add_task_requires_title(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "lifeos.sqlite3")
    with pytest.raises(ValueError):
        store.add_task(title="  ", date="2025-03-01", start_time="10:00")


def test_replace_all_overwrites_everything(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "lifeos.sqlite3")
    store.add_task(title="old", date="2025-03-01", start_time="10:00")

    n = store.replace_all(
        [
            Task(id="a", title="A", date="2025-03-02", start_time="08:00", history=[{"d": "2025-03-01"}]),
            Task(id="b", title="B", date="2025-03-02", start_time="09:00", completed=True),
        ]
    )

    assert n == 2
    tasks = store.list_tasks()
    assert [t.id for t in tasks] == ["a", "b"]
    assert tasks[0].history == [{"d": "2025-03-01"}]


def test_replace_all_is_atomic_on_failure(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "lifeos.sqlite3")
    store.add_task(title="old", date="2025-03-01", start_time="10:00", task_id="old")

    dup = [Task(id="x", title="X", date="", start_time=""), Task(id="x", title="X2", date="", start_time="")]
    with pytest.raises(sqlite3.IntegrityError):
        store.replace_all(dup)

    assert [t.id for t in store.list_tasks()] == ["old"]


def test_subscription_upsert_list_delete(tmp_path: Path) -> None:
    store = SubscriptionStore(tmp_path / "lifeos.sqlite3")
    sub = Subscription(endpoint="https://push/a", keys=SubscriptionKeys(p256dh="k1", auth="a1"))

    store.upsert(sub)
    store.upsert(Subscription(endpoint="https://push/a", keys=SubscriptionKeys(p256dh="k2", auth="a2")))
    store.upsert(Subscription(endpoint="https://push/b", keys=SubscriptionKeys(p256dh="k", auth="a")))

    subs = {s.endpoint: s for s in store.list_all()}
    assert store.count() == 2
    assert subs["https://push/a"].keys == SubscriptionKeys(p256dh="k2", auth="a2")

    assert store.delete_by_endpoint("https://push/a") is True
    assert store.delete_by_endpoint("https://push/a") is False
    assert [s.endpoint for s in store.list_all()] == ["https://push/b"]


def test_task_and_subscription_stores_share_one_db(tmp_path: Path) -> None:
    db = tmp_path / "lifeos.sqlite3"
    tasks = TaskStore(db)
    subs = SubscriptionStore(db)

    tasks.add_task(title="t", date="2025-03-01", start_time="10:00")
    subs.upsert(Subscription(endpoint="https://push/a", keys=SubscriptionKeys(p256dh="", auth="")))

    assert tasks.count_tasks() == 1
    assert subs.count() == 1
