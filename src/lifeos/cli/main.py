# src/lifeos/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the reminder scheduler in a background thread (optional),
- the operator console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..connectors.scheduler_runner import start_scheduler_in_background
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    # Stores use short-lived sqlite connections per call; close() is a no-op hook.
    for name in ("task_store", "subscription_store"):
        store = getattr(state, name, None)
        try:
            if store is not None and hasattr(store, "close"):
                store.close()
        except Exception:
            logger.debug("%s close failed.", name, exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/lifeos")
    log_file = setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s (log=%s)...", getattr(settings, "app_name", "lifeos"), log_file)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    logger.info(
        "db=%s tz=%s subscriptions=%d pending reminders=%d",
        settings.db_path,
        settings.timezone or "server local",
        state.subscription_store.count(),
        len(state.task_store.find_candidates()),
    )

    runner = start_scheduler_in_background(state)
    state.scheduler_runner = runner

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        elif runner is None:
            logger.warning("Console and scheduler are both disabled; nothing to run.")
        else:
            logger.info("Console disabled. Running the reminder scheduler only. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=10.0)

        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
