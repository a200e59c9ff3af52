# src/lifeos/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..core.state import AppState
from .task_models import DEFAULT_REMINDER_OFFSET, Task

logger = logging.getLogger(__name__)

DEFAULT_START_TIME = "09:00"
DEFAULT_DURATION = 60
DEFAULT_CATEGORY = "Work"


def create_task(
    state: AppState,
    *,
    title: str,
    date: str | None = None,
    start_time: str | None = None,
    duration: int = DEFAULT_DURATION,
    category: str = DEFAULT_CATEGORY,
    reminder_offset: int | None = DEFAULT_REMINDER_OFFSET,
    goal_id: str | None = None,
) -> str:
    """
    Convenience helper: create a task with a reminder.

    Missing date means today, missing start time means 09:00.
    Uses state.task_store (already constructed in bootstrap).
    """
    if date is None:
        date = datetime.now().strftime("%Y-%m-%d")
    if start_time is None:
        start_time = DEFAULT_START_TIME

    task_id = state.task_store.add_task(
        title=title,
        date=date,
        start_time=start_time,
        duration=duration,
        category=category,
        goal_id=goal_id,
        reminder_offset=reminder_offset,
    )
    logger.info("Created task id=%s %s %s offset=%s", task_id, date, start_time, reminder_offset)
    return task_id


def complete_task(state: AppState, task_id: str) -> bool:
    task = state.task_store.get_task(task_id)
    if task is None:
        return False
    state.task_store.update_task_fields(task_id, completed=True)
    return True


def sync_tasks(state: AppState, items: list[dict[str, Any]]) -> int:
    """
    Full-overwrite sync from the client's task list (camelCase JSON objects).

    Raises ValueError if items is not a list of objects.
    """
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise ValueError("sync payload must be a list of task objects")

    tasks = [Task.from_dict(i) for i in items]
    return state.task_store.replace_all(tasks)
