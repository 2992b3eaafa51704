"""
======================================================
PATH: products/migrations/0001_initial.py
======================================================
MIGRATION: CATALOG + INVENTORY LEDGER + STOCK SYNC OUTBOX

- Product (quantity_on_hand is the on-hand level)
- StockMovement (append-only audit); its sale link is added in 0002
  once sales.Sale exists
- StockSyncEvent (post-commit outbox)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("sku", models.CharField(max_length=128, unique=True, db_index=True)),
                ("name", models.CharField(max_length=255, db_index=True)),
                ("selling_price", models.DecimalField(max_digits=12, decimal_places=2)),
                (
                    "cost_price",
                    models.DecimalField(
                        max_digits=12,
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Current unit cost.",
                    ),
                ),
                ("taxable", models.BooleanField(default=True)),
                (
                    "quantity_on_hand",
                    models.IntegerField(
                        default=0,
                        help_text="On-hand units (service-managed only).",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["sku"], name="product_sku_idx"),
                    models.Index(fields=["name"], name="product_name_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                (
                    "movement_type",
                    models.CharField(
                        max_length=3,
                        choices=[("IN", "Stock In"), ("OUT", "Stock Out")],
                    ),
                ),
                (
                    "reason",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("EXCHANGE_RETURN", "Exchange Return"),
                            ("EXCHANGE_SALE", "Exchange Sale"),
                            ("ADJUSTMENT", "Manual Adjustment"),
                        ],
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                ("quantity_after", models.IntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["reason"], name="stockmove_reason_idx"),
                    models.Index(
                        fields=["product", "created_at"],
                        name="stockmove_product_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockSyncEvent",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("sku", models.CharField(max_length=128)),
                ("old_quantity", models.IntegerField()),
                ("new_quantity", models.IntegerField()),
                (
                    "source",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("RETURN", "Return"),
                            ("POS_SALE", "POS Sale"),
                            ("ADJUSTMENT", "Adjustment"),
                        ],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("pending", "Pending"),
                            ("sent", "Sent"),
                            ("failed", "Failed"),
                            ("dead", "Dead"),
                        ],
                        default="pending",
                    ),
                ),
                ("attempt_count", models.PositiveIntegerField(default=0)),
                ("last_error", models.TextField(blank=True, default="")),
                ("next_attempt_at", models.DateTimeField(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("sent_at", models.DateTimeField(null=True, blank=True)),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_sync_events",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "next_attempt_at"],
                        name="stocksync_status_next_idx",
                    ),
                    models.Index(
                        fields=["product", "created_at"],
                        name="stocksync_product_created_idx",
                    ),
                ],
            },
        ),
    ]
