"""
======================================================
PATH: sales/migrations/0002_payment_store_credit.py
======================================================
MIGRATION: LINK Payment -> store_credits.StoreCredit

Split from 0001 because StoreCredit references sales.Customer.
"""

from __future__ import annotations

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    dependencies = [
        ("sales", "0001_initial"),
        ("store_credits", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="payment",
            name="store_credit",
            field=models.ForeignKey(
                to="store_credits.storecredit",
                null=True,
                blank=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="payments",
            ),
        ),
    ]
