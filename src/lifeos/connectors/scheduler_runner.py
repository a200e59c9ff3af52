# src/lifeos/connectors/scheduler_runner.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..core.state import AppState
from ..tasks.reminder_scheduler import ReminderScheduler, TickReport

logger = logging.getLogger(__name__)


async def _run_scheduler(scheduler: ReminderScheduler, stop_event: asyncio.Event) -> None:
    scheduler.start()
    try:
        await stop_event.wait()
    finally:
        await scheduler.stop()


@dataclass
class SchedulerBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event
    scheduler: ReminderScheduler

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Failed to signal scheduler stop (loop closed).", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)

    def run_tick(self, timeout: float = 60.0) -> TickReport | None:
        """Run one tick on the scheduler's loop now, blocking the caller until it ends."""
        fut = asyncio.run_coroutine_threadsafe(self.scheduler.run_once(), self.loop)
        return fut.result(timeout=timeout)


def start_scheduler_in_background(state: AppState) -> SchedulerBackgroundRunner | None:
    """
    Start the reminder scheduler in a background thread with its own event loop,
    so the blocking console REPL can run in the main thread.
    """
    if not getattr(state.settings, "scheduler_enabled", True):
        logger.info("Reminder scheduler disabled, not starting.")
        return None

    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_run_scheduler(state.scheduler, stop_event))
        except Exception:
            logger.exception("Reminder scheduler thread crashed.")
        finally:
            with contextlib.suppress(Exception):
                loop.run_until_complete(loop.shutdown_default_executor())
            loop.close()

    t = threading.Thread(target=runner, name="reminder-scheduler", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Scheduler thread did not initialize properly.")
        return None

    logger.info("Reminder scheduler background thread started.")
    return SchedulerBackgroundRunner(thread=t, loop=loop, stop_event=stop_event, scheduler=state.scheduler)
