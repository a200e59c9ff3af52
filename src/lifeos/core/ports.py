# src/lifeos/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder core.

The scheduler and dispatcher depend on Protocols instead of concrete
implementations. This keeps storage and the push transport swappable and
lets tests run against in-memory fakes.
"""

from typing import TYPE_CHECKING, Any, Awaitable, Protocol

if TYPE_CHECKING:
    from ..push.push_models import DeliveryOutcome, Subscription
    from ..tasks.task_models import Task


class TaskRepo(Protocol):
    # Scheduler API
    def find_candidates(self) -> list[Task]: ...
    def mark_notified(self, task_id: str) -> bool: ...

    # Task creation / edits (outer API, console)
    def add_task(
            self,
            *,
            title: str,
            date: str,
            start_time: str,
            duration: int = 60,
            category: str = "",
            goal_id: str | None = None,
            reminder_offset: int | None = 5,
            completed: bool = False,
            notified: bool = False,
            history: list[Any] | None = None,
            task_id: str | None = None,
    ) -> str: ...

    def get_task(self, task_id: str) -> Task | None: ...
    def list_tasks(self, *, limit: int | None = None) -> list[Task]: ...
    def update_task_fields(self, task_id: str, **fields: Any) -> None: ...
    def replace_all(self, tasks: Any) -> int: ...


class SubscriptionRepo(Protocol):
    def list_all(self) -> list[Subscription]: ...
    def upsert(self, subscription: Subscription) -> None: ...
    def delete_by_endpoint(self, endpoint: str) -> bool: ...


class PushTransport(Protocol):
    """
    Delivers one encrypted payload to one subscription.

    Must report delivery problems as outcomes, not exceptions:
    Delivered | TransientFailure | PermanentFailure.
    """

    def send(self, subscription: Subscription, payload: bytes) -> Awaitable[DeliveryOutcome]: ...
