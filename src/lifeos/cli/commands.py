# src/lifeos/cli/commands.py

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..push.subscription_api import vapid_public_key
from ..tasks.reminder_matcher import resolve_offset, trigger_instant
from ..tasks.reminder_scheduler import TickReport
from ..tasks.task_api import complete_task, create_task
from ..tasks.task_models import REMINDER_DISABLED

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the operator console (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _describe_reminder(state: AppState, task) -> str:
    if task.reminder_offset == REMINDER_DISABLED:
        return "reminder off"
    trigger = trigger_instant(task, state.scheduler.tz)
    if trigger is None:
        return "bad schedule"
    flag = "sent" if task.notified else "pending"
    return f"remind {trigger.strftime('%Y-%m-%d %H:%M')} (-{resolve_offset(task)}m, {flag})"


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    runner = state.scheduler_runner
    if runner is None:
        running = "STOPPED"
    elif runner.thread.is_alive() and state.scheduler.running:
        running = "RUNNING"
    else:
        running = "DEAD (runner thread or loop exited)"
    tz_name = getattr(settings, "timezone", None) or "server local"
    return (
        "Status:\n"
        f"  Scheduler: {running} (every {state.scheduler.interval_seconds:.0f}s, tz: {tz_name})\n"
        f"  Tasks: {len(state.task_store.list_tasks())} "
        f"(candidates: {len(state.task_store.find_candidates())})\n"
        f"  Push subscriptions: {len(state.subscription_store.list_all())}"
    )


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks      -> reminder candidates only
    /tasks all  -> every task
    """
    show_all = bool(args) and args[0].lower() == "all"
    tasks = state.task_store.list_tasks() if show_all else state.task_store.find_candidates()
    if not tasks:
        return "No tasks." if show_all else "No pending reminders."

    lines = ["Tasks:" if show_all else "Pending reminders:"]
    for t in tasks:
        done = "x" if t.completed else " "
        lines.append(
            f"  [{done}] {t.id} {t.date} {t.start_time} {t.title} - {_describe_reminder(state, t)}"
        )
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add YYYY-MM-DD HH:MM OFFSET title..."""
    usage = "Usage: /add YYYY-MM-DD HH:MM OFFSET title (OFFSET in minutes, -1 = no reminder)"
    if len(args) < 4:
        return usage
    date, start_time, raw_offset = args[0], args[1], args[2]
    title = " ".join(args[3:])
    try:
        offset = int(raw_offset)
        datetime.strptime(f"{date} {start_time}", "%Y-%m-%d %H:%M")
    except ValueError:
        return usage

    task_id = create_task(
        state, title=title, date=date, start_time=start_time, reminder_offset=offset
    )
    return f"Task created: {task_id}"


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done TASK_ID"
    if complete_task(state, args[0]):
        return f"Task {args[0]} marked completed."
    return f"No task with id {args[0]}."


def cmd_subs(state: AppState, args: list[str]) -> str:
    subs = state.subscription_store.list_all()
    if not subs:
        return "No push subscriptions."
    lines = [f"Push subscriptions ({len(subs)}):"]
    for i, s in enumerate(subs, start=1):
        lines.append(f"  {i}. {s.endpoint}")
    return "\n".join(lines)


def cmd_vapid(state: AppState, args: list[str]) -> str:
    return f"VAPID public key: {vapid_public_key(state)}"


def _format_report(report: TickReport | None) -> str:
    if report is None:
        return "A tick is already running; try again in a moment."
    return (
        "Tick done:\n"
        f"  candidates={report.candidates} subscriptions={report.subscriptions}\n"
        f"  due={len(report.due)} notified={len(report.notified)}\n"
        f"  delivered={report.delivered} transient={report.transient_failures} "
        f"dead={len(report.dead_endpoints)}"
    )


def cmd_tick(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """Run one scheduler tick right now (on the scheduler's own loop when it is running)."""
    if emit:
        emit("[SCHED] Running one reminder tick...")

    runner = state.scheduler_runner
    if runner is not None:
        report = runner.run_tick()
    else:
        report = asyncio.run(state.scheduler.run_once())
    return _format_report(report)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show scheduler and store status.")
registry.register("tasks", cmd_tasks, help_text="List pending reminders: /tasks | /tasks all.")
registry.register("add", cmd_add, help_text="Add a task: /add YYYY-MM-DD HH:MM OFFSET title.")
registry.register("done", cmd_done, help_text="Mark a task completed: /done TASK_ID.")
registry.register("subs", cmd_subs, help_text="List push subscriptions.")
registry.register("vapid", cmd_vapid, help_text="Show the VAPID public key for clients.")
registry.register("tick", cmd_tick, help_text="Run one reminder tick now.")
