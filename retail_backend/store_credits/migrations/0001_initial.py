"""
======================================================
PATH: store_credits/migrations/0001_initial.py
======================================================
MIGRATION: STORE CREDIT + LEDGER

- StoreCredit (integer cents, unique redemption code)
- StoreCreditTransaction (append-only issue/redeem/adjust ledger)
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("sales", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="StoreCredit",
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
                ("code", models.CharField(max_length=32, unique=True)),
                ("original_amount_cents", models.BigIntegerField()),
                ("current_balance_cents", models.BigIntegerField()),
                (
                    "source_type",
                    models.CharField(
                        max_length=16,
                        choices=[("return", "Return"), ("manual", "Manual")],
                    ),
                ),
                ("source_id", models.CharField(max_length=64, blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "customer",
                    models.ForeignKey(
                        to="sales.customer",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="store_credits",
                    ),
                ),
                (
                    "issued_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="issued_store_credits",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["source_type", "source_id"],
                        name="storecredit_source_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(original_amount_cents__gt=0),
                        name="store_credit_original_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(current_balance_cents__gte=0),
                        name="store_credit_balance_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StoreCreditTransaction",
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
                    "transaction_type",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("issue", "Issue"),
                            ("redeem", "Redeem"),
                            ("adjust", "Adjust"),
                        ],
                    ),
                ),
                ("amount_cents", models.BigIntegerField()),
                ("balance_after", models.BigIntegerField()),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "store_credit",
                    models.ForeignKey(
                        to="store_credits.storecredit",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="store_credit_transactions",
                    ),
                ),
            ],
            options={"ordering": ["created_at"]},
        ),
    ]
