# src/lifeos/push/push_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class SubscriptionKeys:
    p256dh: str
    auth: str


@dataclass(frozen=True, slots=True)
class Subscription:
    """
    A browser push channel, keyed by its endpoint URL.

    keys are opaque to the reminder core and only handed to the transport.
    """

    endpoint: str
    keys: SubscriptionKeys

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subscription:
        """Parse the browser's PushSubscription.toJSON() shape."""
        endpoint = str((data or {}).get("endpoint") or "").strip()
        if not endpoint:
            raise ValueError("subscription endpoint is required")
        raw_keys = data.get("keys") or {}
        if not isinstance(raw_keys, dict):
            raw_keys = {}
        return cls(
            endpoint=endpoint,
            keys=SubscriptionKeys(
                p256dh=str(raw_keys.get("p256dh") or ""),
                auth=str(raw_keys.get("auth") or ""),
            ),
        )

    def to_subscription_info(self) -> dict[str, Any]:
        """Shape expected by pywebpush.webpush(subscription_info=...)."""
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.keys.p256dh, "auth": self.keys.auth},
        }


@dataclass(frozen=True, slots=True)
class Delivered:
    endpoint: str


@dataclass(frozen=True, slots=True)
class TransientFailure:
    """Network error, 5xx, rejected payload... Subscription is kept."""

    endpoint: str
    reason: str
    status_code: int | None = None


@dataclass(frozen=True, slots=True)
class PermanentFailure:
    """The push service says the endpoint is gone (404/410)."""

    endpoint: str
    reason: str
    status_code: int | None = None


DeliveryOutcome = Union[Delivered, TransientFailure, PermanentFailure]


@dataclass(slots=True)
class DispatchResult:
    delivered: int = 0
    dead_endpoints: list[str] = field(default_factory=list)
    transient: list[TransientFailure] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.delivered + len(self.dead_endpoints) + len(self.transient)

    def record(self, outcome: DeliveryOutcome) -> None:
        if isinstance(outcome, Delivered):
            self.delivered += 1
        elif isinstance(outcome, PermanentFailure):
            if outcome.endpoint not in self.dead_endpoints:
                self.dead_endpoints.append(outcome.endpoint)
        else:
            self.transient.append(outcome)
