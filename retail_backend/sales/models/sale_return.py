# sales/models/sale_return.py

"""
======================================================
PATH: sales/models/sale_return.py
======================================================
SALE RETURN (RETURN RECORD)

Purpose:
- Header row for every take-back of previously sold units.
- For exchanges it carries the credit value (integer cents) and the
  bidirectional link to the new sale that consumed that credit.

Lifecycle:
- processing: written at the start of the exchange transaction
- completed:  set once the new sale is linked and settlement is recorded

Money:
- refund_subtotal_cents + refund_tax_cents == refund_total_cents (DB check)
- all values are integer cents and never negative
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from .sale import Sale

User = settings.AUTH_USER_MODEL


def generate_return_number() -> str:
    """RTN-YYYYMMDD-XXXXXX (6 random hex chars, upper case)."""
    return f"RTN-{timezone.now():%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


class SaleReturn(models.Model):
    STATUS_PROCESSING = "processing"
    STATUS_COMPLETED = "completed"

    STATUS_CHOICES = [
        (STATUS_PROCESSING, "Processing"),
        (STATUS_COMPLETED, "Completed"),
    ]

    TYPE_FULL = "full"
    TYPE_PARTIAL = "partial"

    TYPE_CHOICES = [
        (TYPE_FULL, "Full"),
        (TYPE_PARTIAL, "Partial"),
    ]

    REFUND_METHOD_EXCHANGE = "exchange"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    return_number = models.CharField(max_length=32, unique=True, blank=True)

    original_sale = models.ForeignKey(
        Sale,
        on_delete=models.PROTECT,
        related_name="returns",
    )

    exchange_sale = models.ForeignKey(
        Sale,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
        help_text="New sale funded by this return's credit",
    )

    return_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    status = models.CharField(
        max_length=16, choices=STATUS_CHOICES, default=STATUS_PROCESSING
    )

    is_exchange = models.BooleanField(default=False)
    refund_method = models.CharField(max_length=32, default=REFUND_METHOD_EXCHANGE)

    refund_subtotal_cents = models.BigIntegerField(default=0)
    refund_tax_cents = models.BigIntegerField(default=0)
    refund_total_cents = models.BigIntegerField(default=0)

    processed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sale_returns",
    )

    notes = models.TextField(blank=True, default="")

    idempotency_key = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="Client-supplied key; a repeat submission returns this record.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["original_sale", "created_at"], name="salereturn_orig_created_idx"),
            models.Index(fields=["status"], name="salereturn_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(refund_subtotal_cents__gte=0)
                & models.Q(refund_tax_cents__gte=0),
                name="sale_return_cents_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(
                    refund_total_cents=models.F("refund_subtotal_cents")
                    + models.F("refund_tax_cents")
                ),
                name="sale_return_total_is_subtotal_plus_tax",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self.return_number:
            self.return_number = generate_return_number()

        if self.status == self.STATUS_COMPLETED and not self.completed_at:
            self.completed_at = timezone.now()

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.return_number} | {self.status}"
