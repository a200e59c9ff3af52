# src/lifeos/push/subscription_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

from .push_models import Subscription, SubscriptionKeys

logger = logging.getLogger(__name__)


class SubscriptionStore:
    """
    SQLite registry of browser push subscriptions, keyed by endpoint.

    Upserts and deletes are single statements, so registrations coming from
    the API and dead-endpoint pruning from the scheduler never need an
    in-process lock.
    """

    def __init__(self, db_path: str | Path = "lifeos.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count()
        except sqlite3.Error:
            total = -1
        logger.info("SubscriptionStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        return

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS subscriptions (
                    endpoint TEXT PRIMARY KEY,
                    p256dh TEXT NOT NULL DEFAULT '',
                    auth TEXT NOT NULL DEFAULT '',
                    created_at REAL NOT NULL DEFAULT 0,
                    updated_at REAL NOT NULL DEFAULT 0
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_subscription(row: sqlite3.Row) -> Subscription:
        return Subscription(
            endpoint=str(row["endpoint"]),
            keys=SubscriptionKeys(p256dh=str(row["p256dh"] or ""), auth=str(row["auth"] or "")),
        )

    def count(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM subscriptions").fetchone()
            return int(n)
        finally:
            conn.close()

    def list_all(self) -> list[Subscription]:
        conn = self._get_conn()
        try:
            cur = conn.execute("SELECT * FROM subscriptions ORDER BY created_at ASC, rowid ASC")
            return [self._row_to_subscription(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def upsert(self, subscription: Subscription) -> None:
        if not subscription.endpoint:
            raise ValueError("endpoint is required")

        now = time.time()
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO subscriptions(endpoint, p256dh, auth, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(endpoint) DO UPDATE SET
                    p256dh = excluded.p256dh,
                    auth = excluded.auth,
                    updated_at = excluded.updated_at
                """,
                (
                    subscription.endpoint,
                    subscription.keys.p256dh,
                    subscription.keys.auth,
                    now,
                    now,
                ),
            )
            conn.commit()
            logger.debug("Subscription upserted endpoint=%s", subscription.endpoint)
        finally:
            conn.close()

    def delete_by_endpoint(self, endpoint: str) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM subscriptions WHERE endpoint = ?", (endpoint,))
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()
