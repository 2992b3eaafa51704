# store_credits/models/store_credit_transaction.py

import uuid

from django.conf import settings
from django.db import models

from .store_credit import StoreCredit


class StoreCreditTransaction(models.Model):
    """
    Append-only ledger of balance movements on a StoreCredit.
    balance_after is the credit's balance once this entry is applied.
    """

    class Type(models.TextChoices):
        ISSUE = "issue", "Issue"
        REDEEM = "redeem", "Redeem"
        ADJUST = "adjust", "Adjust"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store_credit = models.ForeignKey(
        StoreCredit,
        on_delete=models.PROTECT,
        related_name="transactions",
    )

    transaction_type = models.CharField(max_length=16, choices=Type.choices)
    amount_cents = models.BigIntegerField()
    balance_after = models.BigIntegerField()

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="store_credit_transactions",
    )

    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("StoreCreditTransaction records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("StoreCreditTransaction records cannot be deleted")

    def __str__(self):
        return f"{self.store_credit_id} | {self.transaction_type} {self.amount_cents}c"
