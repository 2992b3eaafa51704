# sales/models/sale_item.py

"""
SALE ITEM (IMMUTABLE SNAPSHOT)

Represents an immutable snapshot of a sold line item.

Notes:
- SaleItem rows are append-only: name, SKU and price are captured at sale
  time so later catalog edits never rewrite history.
- discount_amount is the LINE discount (not per unit).
- line_total = unit_price * quantity - discount_amount
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from products.models import Product

from .sale import Sale


class SaleItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )

    product_name = models.CharField(max_length=255)
    product_sku = models.CharField(max_length=64, blank=True, default="")

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(max_digits=12, decimal_places=2)

    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Discount applied to the whole line.",
    )

    tax_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    line_total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    taxable = models.BooleanField(default=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["sale", "created_at"], name="saleitem_sale_created_idx"),
            models.Index(fields=["product", "created_at"], name="saleitem_product_created_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SaleItem records are immutable")

        self.line_total = Decimal(self.unit_price) * Decimal(
            int(self.quantity or 0)
        ) - Decimal(self.discount_amount or 0)

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
