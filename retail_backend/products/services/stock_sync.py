# products/services/stock_sync.py

"""
======================================================
PATH: products/services/stock_sync.py
======================================================
STOCK SYNC OUTBOX (BEST-EFFORT, POST-COMMIT)

Purpose:
- Hand on-hand changes to external channels WITHOUT coupling them to the
  business transaction that produced them.

Flow:
1) Business service calls schedule_stock_sync(changes) inside its atomic block.
2) Django runs the hand-off only after the outermost transaction commits
   (transaction.on_commit). A rollback discards it.
3) The hand-off writes StockSyncEvent rows (status=pending). Failure here is
   logged and swallowed (robust on_commit hook): the business transaction
   already succeeded.
4) dispatch_pending_stock_sync() (management command `dispatch_stock_sync`)
   claims due events (FOR UPDATE SKIP LOCKED) and publishes them with its
   own retry policy:
   - success -> sent
   - failure -> failed, attempt_count += 1, exponential next_attempt_at
   - attempt_count >= max_attempts -> dead
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Iterable

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.module_loading import import_string

from products.models import StockSyncEvent

logger = logging.getLogger(__name__)

MAX_BACKOFF_SECONDS = 300


@dataclass
class DispatchSummary:
    sent: int = 0
    failed: int = 0
    dead: int = 0

    @property
    def processed(self) -> int:
        return self.sent + self.failed + self.dead


def log_publisher(event: StockSyncEvent) -> None:
    """Default publisher: records the change in the application log."""
    logger.info(
        "Stock sync published",
        extra={
            "product_id": str(event.product_id),
            "sku": event.sku,
            "old_quantity": event.old_quantity,
            "new_quantity": event.new_quantity,
            "source": event.source,
        },
    )


def get_publisher() -> Callable[[StockSyncEvent], None]:
    path = getattr(settings, "STOCK_SYNC_PUBLISHER", "") or ""
    if not path:
        return log_publisher
    return import_string(path)


def next_attempt_at_for(attempt_count: int, event_id=None, *, now=None):
    delay_seconds = min(MAX_BACKOFF_SECONDS, 2 ** max(attempt_count - 1, 0))
    if event_id is not None:
        # Deterministic per-event jitter to avoid synchronized retry storms.
        digest = hashlib.sha1(f"{event_id}:{attempt_count}".encode("utf-8")).hexdigest()
        jitter_window = max(1, min(30, delay_seconds // 5 or 1))
        delay_seconds = min(
            MAX_BACKOFF_SECONDS,
            delay_seconds + (int(digest[:8], 16) % (jitter_window + 1)),
        )
    return (now or timezone.now()) + timedelta(seconds=delay_seconds)


def enqueue_stock_sync(changes: Iterable) -> int:
    """
    Persist one pending outbox row per change. Never raises.
    Returns the number of rows written.
    """
    rows = [
        StockSyncEvent(
            product_id=c.product_id,
            sku=c.sku,
            old_quantity=c.old_quantity,
            new_quantity=c.new_quantity,
            source=c.source,
        )
        for c in changes
    ]
    if not rows:
        return 0

    try:
        StockSyncEvent.objects.bulk_create(rows)
    except DatabaseError:
        logger.exception(
            "Stock sync enqueue failed",
            extra={"skus": [r.sku for r in rows]},
        )
        return 0

    return len(rows)


def schedule_stock_sync(changes: Iterable) -> None:
    """Register the outbox hand-off to run after the current transaction commits."""
    snapshot = list(changes)
    if not snapshot:
        return
    transaction.on_commit(lambda: enqueue_stock_sync(snapshot), robust=True)


def _due_events(*, now, max_attempts: int, limit: int):
    """Claim a batch of due events. Rows held by another dispatcher are skipped."""
    return (
        StockSyncEvent.objects.select_for_update(skip_locked=True)
        .filter(
            Q(status=StockSyncEvent.Status.PENDING)
            | Q(
                status=StockSyncEvent.Status.FAILED,
                attempt_count__lt=max_attempts,
            )
        )
        .filter(Q(next_attempt_at__isnull=True) | Q(next_attempt_at__lte=now))
        .order_by("created_at")[:limit]
    )


def _dispatch_one(event, *, publish, max_attempts: int, now, summary: DispatchSummary) -> None:
    try:
        publish(event)
    except Exception as exc:
        attempt = int(event.attempt_count or 0) + 1
        event.attempt_count = attempt
        event.last_error = str(exc)[:2000]

        if attempt >= max_attempts:
            event.status = StockSyncEvent.Status.DEAD
            event.next_attempt_at = None
            summary.dead += 1
            logger.error(
                "Stock sync event dead after max attempts",
                extra={"event_id": str(event.id), "sku": event.sku, "attempts": attempt},
            )
        else:
            event.status = StockSyncEvent.Status.FAILED
            event.next_attempt_at = next_attempt_at_for(attempt, event.id, now=now)
            summary.failed += 1
            logger.warning(
                "Stock sync publish failed",
                extra={"event_id": str(event.id), "sku": event.sku, "attempts": attempt},
            )

        event.save(update_fields=["attempt_count", "last_error", "status", "next_attempt_at"])
        return

    event.status = StockSyncEvent.Status.SENT
    event.sent_at = now
    event.next_attempt_at = None
    event.save(update_fields=["status", "sent_at", "next_attempt_at"])
    summary.sent += 1


def dispatch_pending_stock_sync(
    *,
    publisher: Callable[[StockSyncEvent], None] | None = None,
    limit: int | None = None,
    max_attempts: int | None = None,
    now=None,
) -> DispatchSummary:
    """
    Publish one batch of due events.

    The batch is claimed with SELECT ... FOR UPDATE SKIP LOCKED and held until
    every event in it is settled, so overlapping dispatchers never publish
    the same event twice.
    """
    publish = publisher or get_publisher()
    limit = int(limit or getattr(settings, "STOCK_SYNC_BATCH_SIZE", 100))
    max_attempts = int(max_attempts or getattr(settings, "STOCK_SYNC_MAX_ATTEMPTS", 5))
    now = now or timezone.now()

    summary = DispatchSummary()

    with transaction.atomic():
        batch = list(_due_events(now=now, max_attempts=max_attempts, limit=limit))
        for event in batch:
            _dispatch_one(
                event, publish=publish, max_attempts=max_attempts, now=now, summary=summary
            )

    return summary
