# products/models/stock_movement.py

"""
INVENTORY AUDIT LEDGER

Immutable inventory ledger entry written alongside every on-hand mutation.

GUARANTEES:
- Append-only (no updates, no deletes)
- Movement direction validated against reason
- quantity_after records the post-mutation on-hand level
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    class Reason(models.TextChoices):
        EXCHANGE_RETURN = "EXCHANGE_RETURN", "Exchange Return"
        EXCHANGE_SALE = "EXCHANGE_SALE", "Exchange Sale"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"

    REASON_TO_MOVEMENT = {
        Reason.EXCHANGE_RETURN: MovementType.IN,
        Reason.EXCHANGE_SALE: MovementType.OUT,
        Reason.ADJUSTMENT: None,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=3, choices=MovementType.choices)
    reason = models.CharField(max_length=20, choices=Reason.choices)

    quantity = models.PositiveIntegerField()
    quantity_after = models.IntegerField()

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["reason"], name="stockmove_reason_idx"),
            models.Index(fields=["product", "created_at"], name="stockmove_product_created_idx"),
            models.Index(fields=["sale", "created_at"], name="stockmove_sale_created_idx"),
        ]

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        expected_type = self.REASON_TO_MOVEMENT.get(self.reason)
        if expected_type and self.movement_type != expected_type:
            raise ValidationError(
                f"{self.reason} requires movement_type={expected_type}"
            )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    @property
    def signed_quantity(self) -> int:
        q = int(self.quantity or 0)
        return q if self.movement_type == self.MovementType.IN else -q

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.reason} | {self.quantity}"
