# sales/models/sale_return_item.py

"""
SALE RETURN ITEM (APPEND-ONLY)

One row per original line item taken back in a return.
Summed per sale_item, these rows are the source of truth for the
remaining returnable quantity on the original sale.
"""

from __future__ import annotations

import uuid
from django.db import models

from products.models import Product

from .return_reason_code import ReturnReasonCode
from .sale_item import SaleItem
from .sale_return import SaleReturn


class SaleReturnItem(models.Model):
    class Condition(models.TextChoices):
        RESELLABLE = "resellable", "Resellable"
        DAMAGED = "damaged", "Damaged"
        DEFECTIVE = "defective", "Defective"
        OPENED = "opened", "Opened"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale_return = models.ForeignKey(
        SaleReturn,
        on_delete=models.CASCADE,
        related_name="items",
    )

    sale_item = models.ForeignKey(
        SaleItem,
        on_delete=models.PROTECT,
        related_name="return_items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )

    quantity = models.PositiveIntegerField()

    # Per-unit price net of the line discount, at return time.
    unit_net_price = models.DecimalField(max_digits=14, decimal_places=4)
    line_credit_amount = models.DecimalField(max_digits=14, decimal_places=4)

    reason_code = models.ForeignKey(
        ReturnReasonCode,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="return_items",
    )
    reason_notes = models.TextField(blank=True, default="")

    condition = models.CharField(
        max_length=16,
        choices=Condition.choices,
        default=Condition.RESELLABLE,
    )

    class Meta:
        ordering = ["sale_return", "id"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("SaleReturnItem records are immutable")

        if int(self.quantity or 0) <= 0:
            raise ValueError("quantity must be greater than zero")

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("SaleReturnItem records cannot be deleted")

    def __str__(self):
        return f"Return | {self.sale_item_id} | qty={self.quantity}"
