# store_credits/models/store_credit.py

"""
======================================================
PATH: store_credits/models/store_credit.py
======================================================
STORE CREDIT (REDEEMABLE BALANCE)

- code: unique redemption code handed to the customer
- amounts are integer cents
- original_amount_cents never changes after issue
- current_balance_cents only moves through StoreCreditTransaction rows
"""

import uuid

from django.conf import settings
from django.db import models


class StoreCredit(models.Model):
    SOURCE_RETURN = "return"
    SOURCE_MANUAL = "manual"

    SOURCE_CHOICES = [
        (SOURCE_RETURN, "Return"),
        (SOURCE_MANUAL, "Manual"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=32, unique=True)

    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="store_credits",
    )

    original_amount_cents = models.BigIntegerField()
    current_balance_cents = models.BigIntegerField()

    source_type = models.CharField(max_length=16, choices=SOURCE_CHOICES)
    source_id = models.CharField(max_length=64, blank=True, default="")

    issued_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="issued_store_credits",
    )

    notes = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["source_type", "source_id"], name="storecredit_source_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(original_amount_cents__gt=0),
                name="store_credit_original_amount_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(current_balance_cents__gte=0),
                name="store_credit_balance_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.code} | {self.current_balance_cents}c"
