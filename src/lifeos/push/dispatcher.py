# src/lifeos/push/dispatcher.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from ..core.ports import PushTransport
from .push_models import DeliveryOutcome, DispatchResult, Subscription, TransientFailure

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Fan a payload out to every subscription and classify the outcomes.

    - sends concurrently, at most max_concurrency requests in flight
    - never retries inside one dispatch
    - never touches storage: dead endpoints are reported, the caller deletes them
    """

    def __init__(self, transport: PushTransport, *, max_concurrency: int = 16) -> None:
        self._transport = transport
        self._max_concurrency = max(1, int(max_concurrency))

    async def _send_one(
        self,
        sem: asyncio.Semaphore,
        subscription: Subscription,
        payload: bytes,
    ) -> DeliveryOutcome:
        async with sem:
            try:
                return await self._transport.send(subscription, payload)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.exception("Push transport crashed endpoint=%s", subscription.endpoint)
                return TransientFailure(endpoint=subscription.endpoint, reason=repr(exc))

    async def dispatch(self, payload: bytes, subscriptions: Iterable[Subscription]) -> DispatchResult:
        subs = list(subscriptions)
        result = DispatchResult()
        if not subs:
            return result

        sem = asyncio.Semaphore(self._max_concurrency)
        outcomes = await asyncio.gather(*(self._send_one(sem, s, payload) for s in subs))

        for outcome in outcomes:
            result.record(outcome)

        for failure in result.transient:
            logger.warning(
                "Push transient failure endpoint=%s status=%s: %s",
                failure.endpoint,
                failure.status_code,
                failure.reason,
            )

        logger.debug(
            "Dispatch done subs=%d delivered=%d dead=%d transient=%d",
            len(subs),
            result.delivered,
            len(result.dead_endpoints),
            len(result.transient),
        )
        return result
