# sales/serializers/exchange_command.py

"""
Command serializers for the exchange endpoints.

They validate request SHAPE only (types, ranges, choices). Business rules
(remaining quantities, product existence, owed-difference payment) are
enforced by the exchange orchestrator against live data.
"""

from rest_framework import serializers

from sales.models import SaleReturnItem
from sales.services.difference_resolver import (
    DIFFERENCE_METHODS,
    OWED_PAYMENT_METHODS,
)


class ExchangeReturnLineSerializer(serializers.Serializer):
    sale_item_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    reason_code = serializers.CharField(max_length=32)
    reason_notes = serializers.CharField(required=False, allow_blank=True, default="")
    condition = serializers.ChoiceField(
        choices=SaleReturnItem.Condition.choices,
        required=False,
        default=SaleReturnItem.Condition.RESELLABLE,
    )


class ExchangePreviewReturnLineSerializer(ExchangeReturnLineSerializer):
    reason_code = serializers.CharField(
        max_length=32, required=False, allow_blank=True, default=""
    )


class ExchangeNewItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class PaymentDetailsSerializer(serializers.Serializer):
    card_brand = serializers.CharField(max_length=32, required=False, allow_blank=True)
    card_last_four = serializers.RegexField(
        r"^\d{4}$", required=False, allow_blank=True
    )
    authorization_code = serializers.CharField(
        max_length=64, required=False, allow_blank=True
    )
    processor_reference = serializers.CharField(
        max_length=128, required=False, allow_blank=True
    )
    cash_tendered = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )
    change_given = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )


class ExchangePreviewCommandSerializer(serializers.Serializer):
    original_sale_id = serializers.UUIDField()
    return_items = ExchangePreviewReturnLineSerializer(many=True, allow_empty=False)
    new_items = ExchangeNewItemSerializer(many=True, allow_empty=False)
    difference_method = serializers.ChoiceField(
        choices=list(DIFFERENCE_METHODS), required=False, allow_null=True
    )


class ExchangeCommandSerializer(serializers.Serializer):
    original_sale_id = serializers.UUIDField()
    return_items = ExchangeReturnLineSerializer(many=True, allow_empty=False)
    new_items = ExchangeNewItemSerializer(many=True, allow_empty=False)

    payment_method = serializers.ChoiceField(
        choices=list(OWED_PAYMENT_METHODS),
        required=False,
        allow_null=True,
        allow_blank=True,
    )
    payment_details = PaymentDetailsSerializer(required=False)
    difference_method = serializers.ChoiceField(
        choices=list(DIFFERENCE_METHODS), required=False, allow_null=True
    )

    shift_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    idempotency_key = serializers.CharField(
        max_length=64, required=False, allow_blank=True, allow_null=True
    )
