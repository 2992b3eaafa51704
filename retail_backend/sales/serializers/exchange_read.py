# sales/serializers/exchange_read.py

from rest_framework import serializers

from sales.models import Payment, ReturnReasonCode, SaleReturn, SaleReturnItem
from sales.services.exchange_valuation import to_cents
from store_credits.models import StoreCredit

from .sale_item import SaleItemSerializer


class ReturnReasonCodeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReturnReasonCode
        fields = ["code", "description", "requires_notes"]
        read_only_fields = fields


class SaleReturnItemReadSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="sale_item.product_name", read_only=True)
    reason_code = serializers.CharField(
        source="reason_code.code", read_only=True, default=None
    )

    class Meta:
        model = SaleReturnItem
        fields = [
            "id",
            "sale_item",
            "product",
            "product_name",
            "quantity",
            "unit_net_price",
            "line_credit_amount",
            "reason_code",
            "reason_notes",
            "condition",
        ]
        read_only_fields = fields


class StoreCreditSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = StoreCredit
        fields = ["id", "code", "original_amount_cents", "current_balance_cents"]
        read_only_fields = fields


class PaymentReadSerializer(serializers.ModelSerializer):
    amount_cents = serializers.SerializerMethodField()
    store_credit = StoreCreditSummarySerializer(read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "direction",
            "method",
            "amount",
            "amount_cents",
            "status",
            "card_brand",
            "card_last_four",
            "authorization_code",
            "processor_reference",
            "cash_tendered",
            "change_given",
            "store_credit",
        ]
        read_only_fields = fields

    def get_amount_cents(self, obj) -> int:
        return to_cents(obj.amount)


class ExchangeReadSerializer(serializers.ModelSerializer):
    """
    Read-only view of a completed exchange, built from persisted rows only
    (so an idempotent replay returns the same body as the first call).
    """

    original_sale_number = serializers.CharField(
        source="original_sale.transaction_number", read_only=True
    )
    exchange_sale_number = serializers.SerializerMethodField()
    return_subtotal_cents = serializers.IntegerField(
        source="refund_subtotal_cents", read_only=True
    )
    return_tax_cents = serializers.IntegerField(source="refund_tax_cents", read_only=True)
    return_credit_cents = serializers.IntegerField(
        source="refund_total_cents", read_only=True
    )
    new_total_cents = serializers.SerializerMethodField()
    difference_cents = serializers.SerializerMethodField()
    settlement = serializers.SerializerMethodField()
    return_items = SaleReturnItemReadSerializer(source="items", many=True, read_only=True)
    new_items = serializers.SerializerMethodField()

    class Meta:
        model = SaleReturn
        fields = [
            "id",
            "return_number",
            "status",
            "return_type",
            "is_exchange",
            "original_sale",
            "original_sale_number",
            "exchange_sale",
            "exchange_sale_number",
            "return_subtotal_cents",
            "return_tax_cents",
            "return_credit_cents",
            "new_total_cents",
            "difference_cents",
            "settlement",
            "return_items",
            "new_items",
            "notes",
            "processed_by",
            "created_at",
            "completed_at",
        ]
        read_only_fields = fields

    def get_exchange_sale_number(self, obj):
        return obj.exchange_sale.transaction_number if obj.exchange_sale else None

    def get_new_total_cents(self, obj):
        return to_cents(obj.exchange_sale.total_amount) if obj.exchange_sale else None

    def get_difference_cents(self, obj):
        new_total = self.get_new_total_cents(obj)
        if new_total is None:
            return None
        return new_total - int(obj.refund_total_cents)

    def get_settlement(self, obj):
        if not obj.exchange_sale:
            return None
        payment = obj.exchange_sale.payments.select_related("store_credit").first()
        return PaymentReadSerializer(payment).data if payment else None

    def get_new_items(self, obj):
        if not obj.exchange_sale:
            return []
        return SaleItemSerializer(obj.exchange_sale.items.all(), many=True).data


class ExchangePreviewSerializer(serializers.Serializer):
    """Serializes an ExchangePlan (nothing persisted)."""

    original_sale = serializers.UUIDField(source="original_sale.id")
    tax_region = serializers.CharField(source="new_valuation.region")
    return_type = serializers.CharField()

    return_subtotal_cents = serializers.IntegerField(source="return_valuation.subtotal_cents")
    return_tax_cents = serializers.IntegerField(source="return_valuation.tax_cents")
    return_credit_cents = serializers.IntegerField(source="return_valuation.total_cents")

    new_subtotal_cents = serializers.IntegerField(source="new_valuation.subtotal_cents")
    new_tax_cents = serializers.IntegerField(source="new_valuation.tax_cents")
    new_total_cents = serializers.IntegerField(source="new_valuation.total_cents")

    difference_cents = serializers.IntegerField(source="resolution.difference_cents")
    customer_owes = serializers.BooleanField(source="resolution.customer_owes")
    customer_refund = serializers.BooleanField(source="resolution.customer_refund")
    even_exchange = serializers.BooleanField(source="resolution.even_exchange")
    settlement_method = serializers.CharField(source="resolution.method", allow_null=True)

    return_items = serializers.SerializerMethodField()
    new_items = serializers.SerializerMethodField()

    def get_return_items(self, plan):
        return [
            {
                "sale_item_id": str(v.line.sale_item.id),
                "product_name": v.line.sale_item.product_name,
                "quantity": v.line.quantity,
                "unit_net_price": str(v.unit_net_price),
                "line_credit": str(v.line_credit),
            }
            for v in plan.return_valuation.lines
        ]

    def get_new_items(self, plan):
        return [
            {
                "product_id": str(v.line.product.id),
                "sku": v.line.product.sku,
                "name": v.line.product.name,
                "quantity": v.line.quantity,
                "unit_price": str(v.unit_price),
                "line_total": str(v.line_total),
                "tax_amount": str(v.tax_amount),
            }
            for v in plan.new_valuation.lines
        ]
