# sales/models/payment.py

"""
PAYMENT (SETTLEMENT ENTRY)

One row per money movement attached to a sale.

Direction:
- in:   money collected from the customer
- out:  money (or credit) handed back to the customer
- none: zero-value settlement (even exchange)

Card metadata is limited to brand, last four digits and processor
references. Full card numbers are never stored.
"""

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator, RegexValidator
from django.db import models

from .sale import Sale


class Payment(models.Model):
    class Direction(models.TextChoices):
        IN = "in", "Collected"
        OUT = "out", "Refunded"
        NONE = "none", "No money moved"

    class Method(models.TextChoices):
        CASH = "cash", "Cash"
        CREDIT = "credit", "Credit card"
        DEBIT = "debit", "Debit card"
        GIFT_CARD = "gift_card", "Gift card"
        STORE_CREDIT = "store_credit", "Store credit"
        ORIGINAL_PAYMENT = "original_payment", "Original payment method"

    STATUS_COMPLETED = "completed"
    STATUS_CHOICES = [(STATUS_COMPLETED, "Completed")]

    CARD_METHODS = (Method.CREDIT, Method.DEBIT)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="payments",
    )

    direction = models.CharField(max_length=8, choices=Direction.choices)
    method = models.CharField(max_length=32, choices=Method.choices)

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    status = models.CharField(
        max_length=16, choices=STATUS_CHOICES, default=STATUS_COMPLETED
    )

    # Card metadata
    card_brand = models.CharField(max_length=32, blank=True, default="")
    card_last_four = models.CharField(
        max_length=4,
        blank=True,
        default="",
        validators=[RegexValidator(r"^\d{4}$", "Last four must be 4 digits")],
    )
    authorization_code = models.CharField(max_length=64, blank=True, default="")
    processor_reference = models.CharField(max_length=128, blank=True, default="")

    # Cash metadata
    cash_tendered = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    change_given = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )

    store_credit = models.ForeignKey(
        "store_credits.StoreCredit",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gte=0),
                name="payment_amount_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.sale_id} | {self.direction} {self.method} {self.amount}"
