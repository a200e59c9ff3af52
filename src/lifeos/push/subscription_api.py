# src/lifeos/push/subscription_api.py

from __future__ import annotations

import logging
from typing import Any

from ..core.state import AppState
from .push_models import Subscription

logger = logging.getLogger(__name__)


def vapid_public_key(state: AppState) -> str:
    """Key the browser passes as applicationServerKey when subscribing."""
    return state.vapid_public_key


def register_subscription(state: AppState, data: dict[str, Any]) -> Subscription:
    """
    Upsert a browser subscription (PushSubscription.toJSON() shape).

    Re-registering the same endpoint refreshes its keys.
    Raises ValueError on a payload without an endpoint.
    """
    if not isinstance(data, dict):
        raise ValueError("subscription must be a JSON object")
    sub = Subscription.from_dict(data)
    state.subscription_store.upsert(sub)
    logger.info("Client subscribed/updated endpoint=%s", sub.endpoint)
    return sub


def unregister_subscription(state: AppState, endpoint: str) -> bool:
    removed = state.subscription_store.delete_by_endpoint(endpoint)
    if removed:
        logger.info("Client unsubscribed endpoint=%s", endpoint)
    return removed
