from rest_framework import serializers
from sales.models import SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product",
            "product_name",
            "product_sku",
            "quantity",
            "unit_price",
            "discount_amount",
            "tax_amount",
            "line_total",
            "taxable",
        ]
        read_only_fields = fields
