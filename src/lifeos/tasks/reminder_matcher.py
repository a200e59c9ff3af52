# src/lifeos/tasks/reminder_matcher.py

"""
Reminder matcher.

Decides which candidate tasks are due "now" at minute granularity:

    trigger = start(date, start_time) - offset minutes

Both trigger and now are floored to the enclosing minute before comparing, so a
tick anywhere inside the trigger minute matches and polling jitter within the
minute does not matter. Everything here is pure.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime, timedelta, tzinfo

from .task_models import DEFAULT_REMINDER_OFFSET, Task

_DATE_TIME_FORMAT = "%Y-%m-%d %H:%M"


def minute_bucket(ts: float) -> int:
    """Floor an epoch timestamp (seconds) to the start of its minute."""
    return int(math.floor(ts / 60.0)) * 60


def to_timestamp(now: datetime | float) -> float:
    # Naive datetimes are local time, same as datetime.timestamp().
    if isinstance(now, datetime):
        return now.timestamp()
    return float(now)


def parse_start_instant(date: str, start_time: str, tz: tzinfo | None = None) -> datetime | None:
    """
    Parse "YYYY-MM-DD" + "HH:MM" into an aware datetime.

    Uses the server's local zone unless tz is given. Returns None when either
    part is missing or malformed.
    """
    if not date or not start_time:
        return None
    try:
        naive = datetime.strptime(f"{date.strip()} {start_time.strip()}", _DATE_TIME_FORMAT)
    except (TypeError, ValueError):
        return None
    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def resolve_offset(task: Task) -> int:
    if task.reminder_offset is None:
        return DEFAULT_REMINDER_OFFSET
    return int(task.reminder_offset)


def trigger_instant(task: Task, tz: tzinfo | None = None) -> datetime | None:
    start = parse_start_instant(task.date, task.start_time, tz)
    if start is None:
        return None
    return start - timedelta(minutes=resolve_offset(task))


def trigger_bucket(task: Task, tz: tzinfo | None = None) -> int | None:
    trigger = trigger_instant(task, tz)
    if trigger is None:
        return None
    return minute_bucket(trigger.timestamp())


def match_due(
    now: datetime | float,
    candidates: Iterable[Task],
    tz: tzinfo | None = None,
) -> list[Task]:
    """
    Return the candidates whose trigger falls in the same minute as now.

    Input order is preserved. Tasks that are not reminder candidates
    (completed, already notified, reminder disabled) and tasks with an
    unparseable schedule are never returned.
    """
    now_bucket = minute_bucket(to_timestamp(now))

    due: list[Task] = []
    for task in candidates:
        if not task.is_reminder_candidate():
            continue
        bucket = trigger_bucket(task, tz)
        if bucket is not None and bucket == now_bucket:
            due.append(task)
    return due
