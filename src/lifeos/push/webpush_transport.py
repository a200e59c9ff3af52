# src/lifeos/push/webpush_transport.py

"""
Web Push transport (VAPID) on top of pywebpush.

pywebpush is blocking (requests), so every send runs in a worker thread.
The transport never raises for delivery problems: it classifies them into
Delivered / TransientFailure / PermanentFailure.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass

import requests
from cryptography.hazmat.primitives import serialization
from py_vapid import Vapid
from pywebpush import WebPushException, webpush

from .push_models import Delivered, DeliveryOutcome, PermanentFailure, Subscription, TransientFailure

logger = logging.getLogger(__name__)

# Push services answer 404/410 for subscriptions that will never come back.
GONE_STATUS_CODES = frozenset({404, 410})


def classify_status(status_code: int | None) -> str:
    if status_code in GONE_STATUS_CODES:
        return "permanent"
    return "transient"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


@dataclass(frozen=True, slots=True)
class VapidKeys:
    public_key: str
    private_key: str
    generated: bool = False


def generate_vapid_keys() -> VapidKeys:
    """
    New P-256 key pair, both halves base64url (no padding):
    - public: uncompressed point, what browsers pass as applicationServerKey
    - private: raw 32-byte scalar, accepted by pywebpush as vapid_private_key
    """
    vapid = Vapid()
    vapid.generate_keys()
    public_raw = vapid.public_key.public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.UncompressedPoint,
    )
    private_raw = vapid.private_key.private_numbers().private_value.to_bytes(32, "big")
    return VapidKeys(public_key=_b64url(public_raw), private_key=_b64url(private_raw), generated=True)


def ensure_vapid_keys(public_key: str | None, private_key: str | None) -> VapidKeys:
    """Use the configured pair, or generate an ephemeral one (lost on restart)."""
    if public_key and private_key:
        return VapidKeys(public_key=public_key.strip(), private_key=private_key.strip())

    keys = generate_vapid_keys()
    logger.warning(
        "VAPID keys not configured; generated an ephemeral pair. "
        "Clients must re-subscribe after every restart until these are saved to the environment."
    )
    logger.warning("LIFEOS_VAPID_PUBLIC_KEY=%s", keys.public_key)
    logger.warning("LIFEOS_VAPID_PRIVATE_KEY=%s", keys.private_key)
    return keys


class WebPushTransport:
    def __init__(
        self,
        vapid_private_key: str,
        vapid_subject: str,
        *,
        ttl: int = 3600,
        timeout: float = 10.0,
    ) -> None:
        if not vapid_private_key:
            raise ValueError("vapid_private_key is required")
        self._vapid_private_key = vapid_private_key
        self._vapid_subject = vapid_subject
        self._ttl = max(0, int(ttl))
        self._timeout = float(timeout)

    def _send_sync(self, subscription: Subscription, payload: bytes) -> DeliveryOutcome:
        endpoint = subscription.endpoint
        try:
            webpush(
                subscription_info=subscription.to_subscription_info(),
                data=payload,
                vapid_private_key=self._vapid_private_key,
                # webpush() adds aud/exp to the claims dict, so pass a fresh one.
                vapid_claims={"sub": self._vapid_subject},
                ttl=self._ttl,
                timeout=self._timeout,
            )
        except WebPushException as exc:
            response = getattr(exc, "response", None)
            status = response.status_code if response is not None else None
            if classify_status(status) == "permanent":
                logger.info("Push endpoint gone status=%s endpoint=%s", status, endpoint)
                return PermanentFailure(endpoint=endpoint, reason=str(exc), status_code=status)
            logger.warning("Push failed status=%s endpoint=%s: %s", status, endpoint, exc)
            return TransientFailure(endpoint=endpoint, reason=str(exc), status_code=status)
        except requests.RequestException as exc:
            logger.warning("Push network error endpoint=%s: %s", endpoint, exc)
            return TransientFailure(endpoint=endpoint, reason=str(exc))
        except ValueError as exc:
            # Malformed subscription keys or payload encoding problems.
            logger.warning("Push rejected locally endpoint=%s: %s", endpoint, exc)
            return TransientFailure(endpoint=endpoint, reason=str(exc))

        logger.debug("Push delivered endpoint=%s", endpoint)
        return Delivered(endpoint=endpoint)

    async def send(self, subscription: Subscription, payload: bytes) -> DeliveryOutcome:
        return await asyncio.to_thread(self._send_sync, subscription, payload)
