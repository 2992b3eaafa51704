# products/models/stock_sync_event.py

"""
STOCK SYNC OUTBOX

One row per on-hand change that external channels (marketplaces, web store)
must hear about. Rows are written only AFTER the business transaction that
mutated stock has committed, and are drained by
products.services.stock_sync.dispatch_pending_stock_sync().

Lifecycle:
  pending -> sent
  pending -> failed -> (retry) -> sent
  failed  -> dead   (attempt_count reached STOCK_SYNC_MAX_ATTEMPTS)
"""

import uuid

from django.db import models

from .product import Product


class StockSyncEvent(models.Model):
    class Source(models.TextChoices):
        RETURN = "RETURN", "Return"
        POS_SALE = "POS_SALE", "POS Sale"
        ADJUSTMENT = "ADJUSTMENT", "Adjustment"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        SENT = "sent", "Sent"
        FAILED = "failed", "Failed"
        DEAD = "dead", "Dead"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="stock_sync_events",
    )
    sku = models.CharField(max_length=128)

    old_quantity = models.IntegerField()
    new_quantity = models.IntegerField()

    source = models.CharField(max_length=16, choices=Source.choices)

    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    attempt_count = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, default="")
    next_attempt_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["status", "next_attempt_at"], name="stocksync_status_next_idx"),
            models.Index(fields=["product", "created_at"], name="stocksync_product_created_idx"),
        ]

    def __str__(self):
        return f"{self.sku} {self.old_quantity}->{self.new_quantity} | {self.status}"
