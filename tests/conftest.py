# tests/conftest.py

from __future__ import annotations

from datetime import timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from lifeos.core.state import AppState
from lifeos.push.dispatcher import NotificationDispatcher
from lifeos.push.subscription_store import SubscriptionStore
from lifeos.tasks.reminder_scheduler import ReminderScheduler
from lifeos.tasks.task_store import TaskStore

from .fakes import FakePushTransport


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Settings stand-in for AppState and create_initial_state().

    Mirrors the fields of lifeos.config.Settings without reading the
    environment; VAPID keys are fixed strings, the db lives in tmp_path.
    """
    return SimpleNamespace(
        app_name="lifeos-test",
        log_level="DEBUG",
        console_enabled=False,
        scheduler_enabled=False,
        reminder_interval_seconds=60.0,
        timezone="UTC",
        push_max_concurrency=4,
        push_ttl_seconds=60,
        push_timeout_seconds=1.0,
        vapid_public_key="test-public-key",
        vapid_private_key="test-private-key",
        vapid_subject="mailto:test@example.com",
        notification_title="LifeOS Reminder",
        notification_icon="/icon.png",
        data_dir=tmp_path,
        db_path=tmp_path / "lifeos.sqlite3",
    )


@pytest.fixture()
def task_store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.db_path)


@pytest.fixture()
def subscription_store(settings: SimpleNamespace) -> SubscriptionStore:
    return SubscriptionStore(settings.db_path)


@pytest.fixture()
def transport() -> FakePushTransport:
    return FakePushTransport()


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    task_store: TaskStore,
    subscription_store: SubscriptionStore,
    transport: FakePushTransport,
) -> AppState:
    """
    AppState wired with a fake push transport.

    NOTE: We keep real SQLite stores here because their correctness is part of
    what we want to test.
    """
    scheduler = ReminderScheduler(
        task_store,
        subscription_store,
        NotificationDispatcher(transport, max_concurrency=settings.push_max_concurrency),
        tz=timezone.utc,
    )
    return AppState(
        settings=settings,
        task_store=task_store,
        subscription_store=subscription_store,
        scheduler=scheduler,
        vapid_public_key=settings.vapid_public_key,
    )
