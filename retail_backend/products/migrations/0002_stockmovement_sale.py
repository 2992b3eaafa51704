"""
======================================================
PATH: products/migrations/0002_stockmovement_sale.py
======================================================
MIGRATION: LINK StockMovement -> sales.Sale

Split from 0001 because sales.SaleItem references products.Product.
"""

from __future__ import annotations

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    dependencies = [
        ("products", "0001_initial"),
        ("sales", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="stockmovement",
            name="sale",
            field=models.ForeignKey(
                to="sales.sale",
                null=True,
                blank=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="stock_movements",
            ),
        ),
        migrations.AddIndex(
            model_name="stockmovement",
            index=models.Index(
                fields=["sale", "created_at"], name="stockmove_sale_created_idx"
            ),
        ),
    ]
