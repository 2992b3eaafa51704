"""
======================================================
PATH: sales/migrations/0001_initial.py
======================================================
MIGRATION: SALES + RETURNS + EXCHANGES

- Customer, RegisterShift, ReturnReasonCode
- Sale / SaleItem (original and exchange sales)
- SaleReturn / SaleReturnItem (return records, integer-cent totals)
- Payment (one settlement row per exchange); its store credit link is
  added in 0002 once store_credits exists
- Sale.exchange_return is added last (Sale <-> SaleReturn cycle)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


def _uuid_pk():
    return (
        "id",
        models.UUIDField(
            primary_key=True,
            default=uuid.uuid4,
            editable=False,
            serialize=False,
        ),
    )


def _money(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                _uuid_pk(),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(max_length=254, blank=True, default="")),
                ("phone", models.CharField(max_length=32, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="RegisterShift",
            fields=[
                _uuid_pk(),
                ("register_name", models.CharField(max_length=64)),
                (
                    "status",
                    models.CharField(
                        max_length=16,
                        choices=[("open", "Open"), ("closed", "Closed")],
                        default="open",
                    ),
                ),
                ("opened_at", models.DateTimeField(auto_now_add=True)),
                ("closed_at", models.DateTimeField(null=True, blank=True)),
                (
                    "opened_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="register_shifts",
                    ),
                ),
            ],
            options={"ordering": ["-opened_at"]},
        ),
        migrations.CreateModel(
            name="ReturnReasonCode",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("code", models.CharField(max_length=32, unique=True)),
                ("description", models.CharField(max_length=255)),
                ("requires_notes", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
            ],
            options={"ordering": ["sort_order", "code"]},
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                _uuid_pk(),
                (
                    "transaction_number",
                    models.CharField(
                        max_length=64,
                        unique=True,
                        blank=True,
                        help_text="System-generated receipt number (TXN-YYYYMMDD-XXXXXXXX)",
                    ),
                ),
                ("tax_region", models.CharField(max_length=8, default="ON")),
                ("subtotal_amount", _money(default=Decimal("0.00"))),
                ("discount_amount", _money(default=Decimal("0.00"))),
                ("hst_amount", _money(default=Decimal("0.00"))),
                ("gst_amount", _money(default=Decimal("0.00"))),
                ("pst_amount", _money(default=Decimal("0.00"))),
                ("total_amount", _money(default=Decimal("0.00"))),
                (
                    "status",
                    models.CharField(
                        max_length=32,
                        choices=[
                            ("draft", "Draft"),
                            ("completed", "Completed"),
                            ("refunded", "Refunded"),
                        ],
                        default="completed",
                    ),
                ),
                ("is_exchange", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(null=True, blank=True)),
                (
                    "shift",
                    models.ForeignKey(
                        to="sales.registershift",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        to="sales.customer",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        help_text="Cashier / staff who processed the sale",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["created_at"], name="sale_created_idx"),
                    models.Index(fields=["status"], name="sale_status_idx"),
                    models.Index(
                        fields=["transaction_number"], name="sale_txn_number_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                _uuid_pk(),
                ("product_name", models.CharField(max_length=255)),
                ("product_sku", models.CharField(max_length=64, blank=True, default="")),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", _money()),
                (
                    "discount_amount",
                    _money(
                        default=Decimal("0.00"),
                        help_text="Discount applied to the whole line.",
                    ),
                ),
                ("tax_amount", _money(default=Decimal("0.00"))),
                ("line_total", _money(editable=False)),
                ("taxable", models.BooleanField(default=True)),
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now, db_index=True
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        to="sales.sale",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["sale", "created_at"], name="saleitem_sale_created_idx"
                    ),
                    models.Index(
                        fields=["product", "created_at"],
                        name="saleitem_product_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleReturn",
            fields=[
                _uuid_pk(),
                ("return_number", models.CharField(max_length=32, unique=True, blank=True)),
                (
                    "return_type",
                    models.CharField(
                        max_length=16,
                        choices=[("full", "Full"), ("partial", "Partial")],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                        ],
                        default="processing",
                    ),
                ),
                ("is_exchange", models.BooleanField(default=False)),
                ("refund_method", models.CharField(max_length=32, default="exchange")),
                ("refund_subtotal_cents", models.BigIntegerField(default=0)),
                ("refund_tax_cents", models.BigIntegerField(default=0)),
                ("refund_total_cents", models.BigIntegerField(default=0)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "idempotency_key",
                    models.CharField(
                        max_length=64,
                        unique=True,
                        null=True,
                        blank=True,
                        help_text="Client-supplied key; a repeat submission returns this record.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(null=True, blank=True)),
                (
                    "original_sale",
                    models.ForeignKey(
                        to="sales.sale",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                    ),
                ),
                (
                    "exchange_sale",
                    models.ForeignKey(
                        to="sales.sale",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        help_text="New sale funded by this return's credit",
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sale_returns",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["original_sale", "created_at"],
                        name="salereturn_orig_created_idx",
                    ),
                    models.Index(fields=["status"], name="salereturn_status_idx"),
                ],
                "constraints": [
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
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleReturnItem",
            fields=[
                _uuid_pk(),
                ("quantity", models.PositiveIntegerField()),
                ("unit_net_price", models.DecimalField(max_digits=14, decimal_places=4)),
                (
                    "line_credit_amount",
                    models.DecimalField(max_digits=14, decimal_places=4),
                ),
                ("reason_notes", models.TextField(blank=True, default="")),
                (
                    "condition",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("resellable", "Resellable"),
                            ("damaged", "Damaged"),
                            ("defective", "Defective"),
                            ("opened", "Opened"),
                        ],
                        default="resellable",
                    ),
                ),
                (
                    "sale_return",
                    models.ForeignKey(
                        to="sales.salereturn",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                    ),
                ),
                (
                    "sale_item",
                    models.ForeignKey(
                        to="sales.saleitem",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="return_items",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                    ),
                ),
                (
                    "reason_code",
                    models.ForeignKey(
                        to="sales.returnreasoncode",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="return_items",
                    ),
                ),
            ],
            options={"ordering": ["sale_return", "id"]},
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                _uuid_pk(),
                (
                    "direction",
                    models.CharField(
                        max_length=8,
                        choices=[
                            ("in", "Collected"),
                            ("out", "Refunded"),
                            ("none", "No money moved"),
                        ],
                    ),
                ),
                (
                    "method",
                    models.CharField(
                        max_length=32,
                        choices=[
                            ("cash", "Cash"),
                            ("credit", "Credit card"),
                            ("debit", "Debit card"),
                            ("gift_card", "Gift card"),
                            ("store_credit", "Store credit"),
                            ("original_payment", "Original payment method"),
                        ],
                    ),
                ),
                (
                    "amount",
                    _money(
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00"))
                        ],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=16,
                        choices=[("completed", "Completed")],
                        default="completed",
                    ),
                ),
                ("card_brand", models.CharField(max_length=32, blank=True, default="")),
                (
                    "card_last_four",
                    models.CharField(
                        max_length=4,
                        blank=True,
                        default="",
                        validators=[
                            django.core.validators.RegexValidator(
                                "^\\d{4}$", "Last four must be 4 digits"
                            )
                        ],
                    ),
                ),
                (
                    "authorization_code",
                    models.CharField(max_length=64, blank=True, default=""),
                ),
                (
                    "processor_reference",
                    models.CharField(max_length=128, blank=True, default=""),
                ),
                ("cash_tendered", _money(null=True, blank=True)),
                ("change_given", _money(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "sale",
                    models.ForeignKey(
                        to="sales.sale",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gte=0),
                        name="payment_amount_non_negative",
                    ),
                ],
            },
        ),
        migrations.AddField(
            model_name="sale",
            name="exchange_return",
            field=models.ForeignKey(
                to="sales.salereturn",
                null=True,
                blank=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="+",
                help_text="Return record whose credit funded this exchange sale",
            ),
        ),
    ]
