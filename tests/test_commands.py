# tests/test_commands.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from lifeos.cli.commands import CommandRegistry, registry
from lifeos.push.push_models import Subscription, SubscriptionKeys


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a", aliases=["aa"])
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x y") == "h2:x,y"
    assert reg.handle(state, "/AA") == "h2:"
    assert reg.handle(state, "/b", emit=notes.append) == "h3"
    assert called == {"h2": 2, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_help_lists_registered_commands(state) -> None:
    text = registry.handle(state, "/help") or ""
    for name in ("/status", "/tasks", "/add", "/done", "/subs", "/vapid", "/tick"):
        assert name in text


def test_add_then_list_and_complete(state) -> None:
    reply = registry.handle(state, "/add 2025-03-01 10:00 15 Team standup") or ""
    assert reply.startswith("Task created: ")
    task_id = reply.split(": ", 1)[1]

    task = state.task_store.get_task(task_id)
    assert task.title == "Team standup"
    assert task.reminder_offset == 15

    listing = registry.handle(state, "/tasks") or ""
    assert task_id in listing
    assert "remind 2025-03-01 09:45 (-15m, pending)" in listing

    assert "marked completed" in (registry.handle(state, f"/done {task_id}") or "")
    assert registry.handle(state, "/tasks") == "No pending reminders."
    assert task_id in (registry.handle(state, "/tasks all") or "")


def test_add_rejects_bad_input(state) -> None:
    assert (registry.handle(state, "/add 2025-03-01 10:00") or "").startswith("Usage")
    assert (registry.handle(state, "/add 2025-13-01 10:00 5 x") or "").startswith("Usage")
    assert (registry.handle(state, "/add 2025-03-01 10:00 soon x") or "").startswith("Usage")
    assert state.task_store.count_tasks() == 0


def test_disabled_reminder_is_shown_as_off(state) -> None:
    registry.handle(state, "/add 2025-03-01 10:00 -1 Quiet task")
    assert "reminder off" in (registry.handle(state, "/tasks all") or "")


def test_done_unknown_task(state) -> None:
    assert registry.handle(state, "/done nope") == "No task with id nope."


def test_subs_and_vapid(state) -> None:
    assert registry.handle(state, "/subs") == "No push subscriptions."
    state.subscription_store.upsert(Subscription("https://push/a", SubscriptionKeys("k", "a")))

    assert "1. https://push/a" in (registry.handle(state, "/subs") or "")
    assert registry.handle(state, "/vapid") == "VAPID public key: test-public-key"


def test_status_reports_stopped_scheduler(state) -> None:
    text = registry.handle(state, "/status") or ""
    assert "Scheduler: STOPPED" in text
    assert "Push subscriptions: 0" in text


def test_tick_without_background_runner(state) -> None:
    notes: list[str] = []
    text = registry.handle(state, "/tick", emit=notes.append) or ""

    assert text.startswith("Tick done:")
    assert "subscriptions=0" in text
    assert notes and "[SCHED]" in notes[0]


def _runner(alive: bool) -> SimpleNamespace:
    return SimpleNamespace(thread=SimpleNamespace(is_alive=lambda: alive))


def test_status_reports_dead_runner_thread(state) -> None:
    state.scheduler_runner = _runner(alive=False)
    assert "Scheduler: DEAD" in (registry.handle(state, "/status") or "")


def test_status_reports_dead_scheduler_loop(state) -> None:
    # Thread alive but the loop task is not (never started here).
    state.scheduler_runner = _runner(alive=True)
    assert not state.scheduler.running
    assert "Scheduler: DEAD" in (registry.handle(state, "/status") or "")


@pytest.mark.asyncio
async def test_status_reports_running_scheduler(state) -> None:
    state.scheduler_runner = _runner(alive=True)
    state.scheduler.start()
    try:
        assert "Scheduler: RUNNING" in (registry.handle(state, "/status") or "")
    finally:
        await state.scheduler.stop()
