# products/tests/test_stock_sync.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.utils import timezone

from products.models import Product, StockSyncEvent
from products.services.inventory import StockChange
from products.services.stock_sync import (
    MAX_BACKOFF_SECONDS,
    _due_events,
    dispatch_pending_stock_sync,
    enqueue_stock_sync,
    next_attempt_at_for,
    schedule_stock_sync,
)


def _change(product, old, new, source=StockSyncEvent.Source.RETURN):
    return StockChange(
        product_id=product.id,
        sku=product.sku,
        old_quantity=old,
        new_quantity=new,
        source=source,
    )


class StockSyncOutboxTests(TestCase):
    """
    GUARANTEES:
    - Outbox rows are written only after commit
    - Enqueue failures never propagate
    - Dispatch retries with backoff and gives up after max attempts
    """

    def setUp(self):
        self.product = Product.objects.create(
            sku="SB-200",
            name="Soundbar 200W",
            selling_price=Decimal("249.99"),
            quantity_on_hand=5,
        )

    # -----------------------------
    # Enqueue
    # -----------------------------

    def test_schedule_writes_rows_only_on_commit(self):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            schedule_stock_sync([_change(self.product, 5, 6)])

        self.assertEqual(len(callbacks), 1)
        self.assertFalse(StockSyncEvent.objects.exists())

        callbacks[0]()

        event = StockSyncEvent.objects.get()
        self.assertEqual(event.status, StockSyncEvent.Status.PENDING)
        self.assertEqual(event.old_quantity, 5)
        self.assertEqual(event.new_quantity, 6)
        self.assertEqual(event.sku, "SB-200")

    def test_schedule_with_no_changes_registers_nothing(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            schedule_stock_sync([])

        self.assertEqual(callbacks, [])

    def test_enqueue_failure_is_logged_and_swallowed(self):
        with mock.patch.object(
            StockSyncEvent.objects, "bulk_create", side_effect=DatabaseError("boom")
        ):
            with self.assertLogs("products.services.stock_sync", level="ERROR"):
                written = enqueue_stock_sync([_change(self.product, 5, 4)])

        self.assertEqual(written, 0)

    def test_hand_off_is_registered_as_robust_hook(self):
        with mock.patch("products.services.stock_sync.transaction.on_commit") as on_commit:
            schedule_stock_sync([_change(self.product, 5, 6)])

        on_commit.assert_called_once()
        self.assertIs(on_commit.call_args.kwargs.get("robust"), True)

    # -----------------------------
    # Dispatch
    # -----------------------------

    def test_due_events_are_claimed_skipping_locked_rows(self):
        claim = _due_events(now=timezone.now(), max_attempts=5, limit=10)

        self.assertTrue(claim.query.select_for_update)
        self.assertTrue(claim.query.select_for_update_skip_locked)

    def test_sent_event_is_not_published_again(self):
        enqueue_stock_sync([_change(self.product, 5, 6)])
        published = []

        dispatch_pending_stock_sync(publisher=published.append)
        summary = dispatch_pending_stock_sync(publisher=published.append)

        self.assertEqual(summary.processed, 0)
        self.assertEqual(len(published), 1)

    def test_dispatch_marks_sent(self):
        enqueue_stock_sync([_change(self.product, 5, 6)])
        published = []

        summary = dispatch_pending_stock_sync(publisher=published.append)

        self.assertEqual(summary.sent, 1)
        self.assertEqual(summary.processed, 1)
        self.assertEqual(len(published), 1)

        event = StockSyncEvent.objects.get()
        self.assertEqual(event.status, StockSyncEvent.Status.SENT)
        self.assertIsNotNone(event.sent_at)

    def test_dispatch_failure_backs_off_then_dies(self):
        enqueue_stock_sync([_change(self.product, 5, 6)])
        now = timezone.now()

        def failing(event):
            raise RuntimeError("channel down")

        summary = dispatch_pending_stock_sync(publisher=failing, max_attempts=2, now=now)
        self.assertEqual(summary.failed, 1)

        event = StockSyncEvent.objects.get()
        self.assertEqual(event.status, StockSyncEvent.Status.FAILED)
        self.assertEqual(event.attempt_count, 1)
        self.assertEqual(event.last_error, "channel down")
        self.assertGreater(event.next_attempt_at, now)

        # Not due yet: nothing happens.
        summary = dispatch_pending_stock_sync(publisher=failing, max_attempts=2, now=now)
        self.assertEqual(summary.processed, 0)

        later = now + timedelta(seconds=MAX_BACKOFF_SECONDS + 1)
        summary = dispatch_pending_stock_sync(publisher=failing, max_attempts=2, now=later)
        self.assertEqual(summary.dead, 1)

        event.refresh_from_db()
        self.assertEqual(event.status, StockSyncEvent.Status.DEAD)
        self.assertEqual(event.attempt_count, 2)
        self.assertIsNone(event.next_attempt_at)

    def test_backoff_grows_and_is_capped(self):
        now = timezone.now()
        first = next_attempt_at_for(1, now=now) - now
        third = next_attempt_at_for(3, now=now) - now
        huge = next_attempt_at_for(50, "evt", now=now) - now

        self.assertEqual(first, timedelta(seconds=1))
        self.assertEqual(third, timedelta(seconds=4))
        self.assertLessEqual(huge, timedelta(seconds=MAX_BACKOFF_SECONDS))

    @override_settings(STOCK_SYNC_PUBLISHER="products.services.stock_sync.log_publisher")
    def test_dispatch_command_uses_configured_publisher(self):
        enqueue_stock_sync([_change(self.product, 5, 6)])

        out = StringIO()
        call_command("dispatch_stock_sync", "--limit", "10", stdout=out)

        self.assertIn("Processed 1 event(s).", out.getvalue())

        self.assertEqual(
            StockSyncEvent.objects.get().status, StockSyncEvent.Status.SENT
        )
