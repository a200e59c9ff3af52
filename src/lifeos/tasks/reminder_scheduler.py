# src/lifeos/tasks/reminder_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A small fixed-rate loop that, once per interval:
- loads notification candidates and all push subscriptions,
- picks the tasks whose reminder minute is the current minute,
- dispatches one payload per due task to every subscription,
- marks each attempted task notified and prunes dead endpoints.

Delivery is at-least-once: a task whose notified write fails may be sent again
on a later tick while it is still inside its trigger minute. A task whose
dispatch was attempted is marked notified even if every subscriber failed.
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from ..core.ports import SubscriptionRepo, TaskRepo
from ..push.dispatcher import NotificationDispatcher
from ..push.payload import DEFAULT_ICON, DEFAULT_TITLE, NotificationPayload, build_reminder_payload
from .reminder_matcher import match_due, to_timestamp

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TickReport:
    now: float
    candidates: int = 0
    subscriptions: int = 0
    due: list[str] = field(default_factory=list)
    notified: list[str] = field(default_factory=list)
    dead_endpoints: list[str] = field(default_factory=list)
    delivered: int = 0
    transient_failures: int = 0


class ReminderScheduler:
    def __init__(
        self,
        task_store: TaskRepo,
        subscription_store: SubscriptionRepo,
        dispatcher: NotificationDispatcher,
        *,
        interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
        tz: tzinfo | None = None,
        payload_title: str = DEFAULT_TITLE,
        payload_icon: str = DEFAULT_ICON,
    ) -> None:
        self._tasks = task_store
        self._subscriptions = subscription_store
        self._dispatcher = dispatcher
        self._interval = max(0.01, float(interval_seconds))
        self._clock = clock
        self._tz = tz
        # Fail at startup, not inside every tick.
        NotificationPayload(title=payload_title, body="-", icon=payload_icon)
        self._payload_title = payload_title
        self._payload_icon = payload_icon

        self._tick_lock = asyncio.Lock()
        self._runner: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def tz(self) -> tzinfo | None:
        return self._tz

    # ---- one tick ----

    async def run_once(self, now: datetime | float | None = None) -> TickReport | None:
        """
        Run one tick. Returns None if another tick is still in flight.

        now defaults to the injected clock and is captured once for the whole tick.
        """
        if self._tick_lock.locked():
            logger.warning("Reminder tick still running; skipping overlapping tick.")
            return None

        async with self._tick_lock:
            now_ts = self._clock() if now is None else to_timestamp(now)
            report = TickReport(now=now_ts)
            try:
                await self._tick(now_ts, report)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Reminder tick failed")
            return report

    async def _tick(self, now_ts: float, report: TickReport) -> None:
        # Loading
        try:
            subscriptions = self._subscriptions.list_all()
            report.subscriptions = len(subscriptions)
            if not subscriptions:
                logger.debug("No push subscriptions; nothing to do.")
                return
            candidates = self._tasks.find_candidates()
        except Exception:
            logger.exception("Reminder tick: store unavailable, skipping")
            return

        report.candidates = len(candidates)

        # Matching
        due = match_due(now_ts, candidates, self._tz)
        if not due:
            return

        report.due = [t.id for t in due]
        logger.info("Found %d tasks to notify.", len(due))

        dead: set[str] = set()

        # Dispatching + committing, task by task.
        for task in due:
            live = [s for s in subscriptions if s.endpoint not in dead]
            if not live:
                # Every endpoint died earlier in this tick: the attempt is over for this task too.
                logger.warning("No live subscriptions left; task %s counted as attempted", task.id)
                self._commit(task.id, report)
                continue

            try:
                payload = build_reminder_payload(
                    task, title=self._payload_title, icon=self._payload_icon
                ).to_bytes()
                result = await self._dispatcher.dispatch(payload, live)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Dispatch failed task_id=%s; leaving it un-notified", task.id)
                continue

            report.delivered += result.delivered
            report.transient_failures += len(result.transient)
            for ep in result.dead_endpoints:
                if ep not in dead:
                    dead.add(ep)
                    report.dead_endpoints.append(ep)

            logger.info(
                "Task %s dispatched (delivered=%d dead=%d transient=%d)",
                task.id,
                result.delivered,
                len(result.dead_endpoints),
                len(result.transient),
            )
            self._commit(task.id, report)

        for endpoint in report.dead_endpoints:
            try:
                self._subscriptions.delete_by_endpoint(endpoint)
                logger.info("Removed dead push subscription endpoint=%s", endpoint)
            except Exception:
                logger.exception("delete_by_endpoint failed endpoint=%s", endpoint)

    def _commit(self, task_id: str, report: TickReport) -> None:
        try:
            self._tasks.mark_notified(task_id)
            report.notified.append(task_id)
        except Exception:
            logger.exception("mark_notified failed task_id=%s; it may be sent again", task_id)

    # ---- loop lifecycle ----

    async def run_forever(self) -> None:
        """
        Tick at a fixed rate (not fixed delay), so slow ticks do not push later
        ticks past a minute boundary. If a tick overruns, the missed slots are
        skipped. To stop, cancel the task (or use stop()).
        """
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        while True:
            await self.run_once()

            next_at += self._interval
            now = loop.time()
            if next_at <= now:
                missed = int((now - next_at) // self._interval) + 1
                logger.warning("Reminder tick overran; skipping %d slot(s).", missed)
                next_at += missed * self._interval
            await asyncio.sleep(next_at - now)

    def start(self) -> asyncio.Task[None]:
        """Start the loop on the running event loop. Idempotent."""
        if self._runner is not None and not self._runner.done():
            return self._runner
        self._runner = asyncio.get_running_loop().create_task(
            self.run_forever(), name="reminder-scheduler"
        )
        logger.info("Reminder scheduler started (interval=%.1fs).", self._interval)
        return self._runner

    async def stop(self) -> None:
        runner = self._runner
        self._runner = None
        if runner is None:
            return
        runner.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await runner
        logger.info("Reminder scheduler stopped.")
