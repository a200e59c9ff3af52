# src/lifeos/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..push.subscription_store import SubscriptionStore
from ..tasks.reminder_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    task_store: TaskStore
    subscription_store: SubscriptionStore
    scheduler: ReminderScheduler

    vapid_public_key: str = ""

    # SchedulerBackgroundRunner once the CLI has started it (None in tests / when disabled).
    scheduler_runner: Any = None

    # Serializes console commands against each other (the stores do their own locking).
    lock: threading.Lock = field(default_factory=threading.Lock)
