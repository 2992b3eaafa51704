# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from .customer import Customer
from .register_shift import RegisterShift

User = settings.AUTH_USER_MODEL


def generate_transaction_number() -> str:
    """TXN-YYYYMMDD-XXXXXXXX (8 random hex chars, upper case)."""
    return f"TXN-{timezone.now():%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


class Sale(models.Model):
    """
    Represents a POS transaction.

    GUARANTEES:
    - Immutable financial record (after completion)
    - Tax is stored per jurisdiction (HST / GST / PST)
    - Exchange sales carry is_exchange=True and a back-reference to the
      return record that funded them (exchange_return)
    """

    STATUS_DRAFT = "draft"
    STATUS_COMPLETED = "completed"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    transaction_number = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated receipt number (TXN-YYYYMMDD-XXXXXXXX)",
    )

    shift = models.ForeignKey(
        RegisterShift,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
    )

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Cashier / staff who processed the sale",
    )

    tax_region = models.CharField(max_length=8, default="ON")

    subtotal_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    hst_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    gst_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    pst_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_COMPLETED,
    )

    is_exchange = models.BooleanField(default=False)

    exchange_return = models.ForeignKey(
        "sales.SaleReturn",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
        help_text="Return record whose credit funded this exchange sale",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="sale_created_idx"),
            models.Index(fields=["status"], name="sale_status_idx"),
            models.Index(fields=["transaction_number"], name="sale_txn_number_idx"),
        ]

    _IMMUTABLE_FIELDS_AFTER_POST = (
        "customer_id",
        "user_id",
        "tax_region",
        "subtotal_amount",
        "discount_amount",
        "hst_amount",
        "gst_amount",
        "pst_amount",
        "total_amount",
        "is_exchange",
        "exchange_return_id",
        "created_at",
        "completed_at",
    )

    @property
    def tax_amount(self) -> Decimal:
        return (
            Decimal(self.hst_amount or 0)
            + Decimal(self.gst_amount or 0)
            + Decimal(self.pst_amount or 0)
        )

    def _validate_immutable(self, previous: "Sale"):
        if previous.status not in (self.STATUS_COMPLETED, self.STATUS_REFUNDED):
            return

        allowed_transition = (
            previous.status == self.STATUS_COMPLETED
            and self.status == self.STATUS_REFUNDED
        )
        if self.status != previous.status and not allowed_transition:
            raise ValueError(
                f"Sale is immutable once {previous.status}. "
                f"Status change {previous.status} -> {self.status} is not allowed."
            )

        for field in self._IMMUTABLE_FIELDS_AFTER_POST:
            if getattr(self, field) != getattr(previous, field):
                raise ValueError(
                    f"Sale is immutable once {previous.status}. "
                    f"Field '{field}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if not self.transaction_number:
            self.transaction_number = generate_transaction_number()

        if self.status == self.STATUS_COMPLETED and not self.completed_at:
            self.completed_at = timezone.now()

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.transaction_number} | {self.total_amount}"
