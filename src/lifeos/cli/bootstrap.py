# src/lifeos/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- resolves VAPID keys (configured or ephemeral),
- wires stores, the Web Push transport, the dispatcher and the scheduler into AppState.
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import get_settings
from ..core.ports import PushTransport
from ..core.state import AppState
from ..push.dispatcher import NotificationDispatcher
from ..push.subscription_store import SubscriptionStore
from ..push.webpush_transport import WebPushTransport, ensure_vapid_keys
from ..tasks.reminder_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def resolve_timezone(name: str | None) -> tzinfo | None:
    """None means the server's local zone."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; falling back to server local time.", name)
        return None


def create_initial_state(*, settings=None, transport: PushTransport | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the transport) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    keys = ensure_vapid_keys(settings.vapid_public_key, settings.vapid_private_key)
    if transport is None:
        transport = WebPushTransport(
            keys.private_key,
            settings.vapid_subject,
            ttl=settings.push_ttl_seconds,
            timeout=settings.push_timeout_seconds,
        )

    task_store = TaskStore(settings.db_path)
    subscription_store = SubscriptionStore(settings.db_path)
    dispatcher = NotificationDispatcher(transport, max_concurrency=settings.push_max_concurrency)

    scheduler = ReminderScheduler(
        task_store,
        subscription_store,
        dispatcher,
        interval_seconds=settings.reminder_interval_seconds,
        tz=resolve_timezone(settings.timezone),
        payload_title=settings.notification_title,
        payload_icon=settings.notification_icon,
    )

    return AppState(
        settings=settings,
        task_store=task_store,
        subscription_store=subscription_store,
        scheduler=scheduler,
        vapid_public_key=keys.public_key,
    )
