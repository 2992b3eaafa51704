# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable catalog product.

    STOCK MODEL (IMPORTANT):
    - quantity_on_hand is the product's InventoryLevel.
    - It is mutated ONLY via products.services.inventory (atomic F() updates),
      never by read-modify-write in Python.
    - It may go negative: an exchange is allowed to hand over a unit the
      system has not counted in yet (back-office reconciles later).

    PRICING:
    - selling_price is the *current* price; historical prices live on SaleItem.
    - taxable=False exempts the product from sales tax on new sales.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)

    selling_price = models.DecimalField(max_digits=12, decimal_places=2)
    cost_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Current unit cost.",
    )

    taxable = models.BooleanField(default=True)

    quantity_on_hand = models.IntegerField(
        default=0,
        help_text="On-hand units (service-managed only).",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["sku"], name="product_sku_idx"),
            models.Index(fields=["name"], name="product_name_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.selling_price is None or Decimal(self.selling_price) < 0:
            raise ValidationError("selling_price cannot be negative")

        if self.cost_price is not None and Decimal(self.cost_price) < 0:
            raise ValidationError("cost_price cannot be negative")
