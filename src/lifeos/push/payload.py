# src/lifeos/push/payload.py

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ..tasks.reminder_matcher import resolve_offset
from ..tasks.task_models import Task

DEFAULT_TITLE = "LifeOS Reminder"
DEFAULT_ICON = "/icon.png"


@dataclass(frozen=True, slots=True)
class NotificationPayload:
    title: str
    body: str
    icon: str = DEFAULT_ICON

    def __post_init__(self) -> None:
        for name in ("title", "body", "icon"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"notification {name} must be a non-empty string")

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "body": self.body, "icon": self.icon}

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), ensure_ascii=False).encode("utf-8")


def describe_start(offset: int) -> str:
    if offset == 0:
        return "starts now"
    return f"starts in {offset} minutes"


def build_reminder_payload(
    task: Task,
    *,
    title: str = DEFAULT_TITLE,
    icon: str = DEFAULT_ICON,
) -> NotificationPayload:
    """Task "<title>" starts in N minutes (HH:MM)"""
    phrase = describe_start(resolve_offset(task))
    body = f'Task "{task.title}" {phrase} ({task.start_time})'
    return NotificationPayload(title=title, body=body, icon=icon)
