# tests/test_task_api.py

from __future__ import annotations

from datetime import datetime

import pytest

from lifeos.cli.bootstrap import create_initial_state, resolve_timezone
from lifeos.push.subscription_api import register_subscription, unregister_subscription, vapid_public_key
from lifeos.tasks.task_api import complete_task, create_task, sync_tasks
from lifeos.tasks.task_models import Task

from .fakes import FakePushTransport


def test_create_task_defaults(state) -> None:
    task_id = create_task(state, title="Stretch")
    task = state.task_store.get_task(task_id)

    assert task.date == datetime.now().strftime("%Y-%m-%d")
    assert task.start_time == "09:00"
    assert task.duration == 60
    assert task.category == "Work"
    assert task.reminder_offset == 5
    assert task.notified is False


def test_complete_task(state) -> None:
    task_id = create_task(state, title="Stretch", date="2025-03-01", start_time="10:00")

    assert complete_task(state, task_id) is True
    assert state.task_store.get_task(task_id).completed is True
    assert state.task_store.find_candidates() == []
    assert complete_task(state, "missing") is False


def test_sync_tasks_overwrites_with_client_list(state) -> None:
    create_task(state, title="Local only", date="2025-03-01", start_time="08:00")

    n = sync_tasks(
        state,
        [
            {"id": "a1", "title": "Gym", "date": "2025-03-02", "startTime": "18:00", "reminderOffset": 30, "goalId": "g1"},
            {"id": "a2", "title": "Read", "date": "2025-03-02", "startTime": "21:00", "reminderOffset": None},
            {"id": "a3", "title": "Nap", "date": "2025-03-02", "startTime": "14:00", "reminderOffset": -1},
        ],
    )

    assert n == 3
    tasks = {t.id: t for t in state.task_store.list_tasks()}
    assert set(tasks) == {"a1", "a2", "a3"}
    assert tasks["a1"].start_time == "18:00"
    assert tasks["a1"].goal_id == "g1"
    assert tasks["a2"].reminder_offset is None
    assert {t.id for t in state.task_store.find_candidates()} == {"a1", "a2"}


@pytest.mark.parametrize("payload", [{"id": "x"}, ["not-a-dict"], None])
def test_sync_tasks_rejects_bad_payload(state, payload) -> None:
    with pytest.raises(ValueError):
        sync_tasks(state, payload)


def test_task_dict_round_trip_keeps_camel_case() -> None:
    data = Task(id="t", title="T", date="2025-03-01", start_time="10:00", reminder_offset=0).to_dict()
    assert data["startTime"] == "10:00"
    assert data["reminderOffset"] == 0
    assert Task.from_dict(data).reminder_offset == 0


def test_register_and_unregister_subscription(state) -> None:
    sub = register_subscription(state, {"endpoint": "https://push/a", "keys": {"p256dh": "k1", "auth": "a1"}})
    register_subscription(state, {"endpoint": "https://push/a", "keys": {"p256dh": "k2", "auth": "a2"}})

    (stored,) = state.subscription_store.list_all()
    assert stored.endpoint == sub.endpoint
    assert stored.keys.p256dh == "k2"

    assert unregister_subscription(state, "https://push/a") is True
    assert unregister_subscription(state, "https://push/a") is False


@pytest.mark.parametrize("payload", [{}, {"endpoint": "  "}, "https://push/a"])
def test_register_subscription_requires_endpoint(state, payload) -> None:
    with pytest.raises(ValueError):
        register_subscription(state, payload)
    assert state.subscription_store.list_all() == []


def test_vapid_public_key(state) -> None:
    assert vapid_public_key(state) == "test-public-key"


def test_bootstrap_wires_state(settings) -> None:
    transport = FakePushTransport()
    state = create_initial_state(settings=settings, transport=transport)

    assert state.vapid_public_key == "test-public-key"
    assert state.scheduler.interval_seconds == 60.0
    assert state.scheduler.tz is not None
    assert state.scheduler_runner is None
    assert settings.db_path.exists()


def test_bootstrap_generates_keys_when_missing(settings) -> None:
    settings.vapid_public_key = None
    settings.vapid_private_key = None

    state = create_initial_state(settings=settings, transport=FakePushTransport())

    assert state.vapid_public_key


def test_resolve_timezone() -> None:
    assert resolve_timezone(None) is None
    assert resolve_timezone("") is None
    assert resolve_timezone("Not/AZone") is None
    assert resolve_timezone("UTC") is not None
