# src/lifeos/tasks/task_models.py

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from typing import Any

REMINDER_DISABLED = -1
DEFAULT_REMINDER_OFFSET = 5

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _to_base36(n: int) -> str:
    if n <= 0:
        return "0"
    out = []
    while n:
        n, rem = divmod(n, 36)
        out.append(_ID_ALPHABET[rem])
    return "".join(reversed(out))


def generate_task_id() -> str:
    """Base-36 millisecond timestamp followed by 9 random base-36 chars."""
    stamp = _to_base36(int(time.time() * 1000))
    tail = "".join(random.choices(_ID_ALPHABET, k=9))
    return stamp + tail


def _optional_int(raw: Any) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


@dataclass(slots=True)
class Task:
    id: str
    title: str
    date: str
    start_time: str

    duration: int = 60
    category: str = ""
    goal_id: str | None = None

    # None means "not set" and resolves to DEFAULT_REMINDER_OFFSET.
    reminder_offset: int | None = DEFAULT_REMINDER_OFFSET
    completed: bool = False
    notified: bool = False

    history: list[Any] = field(default_factory=list)
    created_at: float = 0.0
    updated_at: float = 0.0

    def is_reminder_candidate(self) -> bool:
        """Incomplete, not yet notified, reminder not disabled."""
        return (
            not self.completed
            and not self.notified
            and self.reminder_offset != REMINDER_DISABLED
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """
        Build a Task from the client's JSON shape (camelCase keys).

        Unknown keys are ignored. Missing id gets a fresh one.
        """
        history = data.get("history")
        return cls(
            id=str(data.get("id") or generate_task_id()),
            title=str(data.get("title") or ""),
            date=str(data.get("date") or ""),
            start_time=str(data.get("startTime") or ""),
            duration=_optional_int(data.get("duration")) or 0,
            category=str(data.get("category") or ""),
            goal_id=data.get("goalId"),
            # Key present with null is kept as None (default offset), key absent too.
            reminder_offset=_optional_int(data.get("reminderOffset")),
            completed=bool(data.get("completed", False)),
            notified=bool(data.get("notified", False)),
            history=list(history) if isinstance(history, list) else [],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "startTime": self.start_time,
            "duration": self.duration,
            "category": self.category,
            "goalId": self.goal_id,
            "reminderOffset": self.reminder_offset,
            "completed": self.completed,
            "notified": self.notified,
            "history": list(self.history),
        }
