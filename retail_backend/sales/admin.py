# sales/admin.py

from django.contrib import admin

from sales.models import (
    Customer,
    Payment,
    RegisterShift,
    ReturnReasonCode,
    Sale,
    SaleItem,
    SaleReturn,
    SaleReturnItem,
)


# ======================================================
# SALE ADMIN
# ======================================================


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "product_name",
        "product_sku",
        "quantity",
        "unit_price",
        "discount_amount",
        "tax_amount",
        "line_total",
        "taxable",
    )

    def has_add_permission(self, request, obj=None):
        return False


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    can_delete = False
    readonly_fields = (
        "direction",
        "method",
        "amount",
        "status",
        "card_brand",
        "card_last_four",
        "store_credit",
        "created_at",
    )
    exclude = ("authorization_code", "processor_reference")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "transaction_number",
        "status",
        "is_exchange",
        "total_amount",
        "customer",
        "created_at",
    )
    readonly_fields = (
        "transaction_number",
        "exchange_return",
        "created_at",
        "completed_at",
    )
    search_fields = ("transaction_number",)
    list_filter = ("status", "is_exchange", "tax_region", "created_at")
    inlines = [SaleItemInline, PaymentInline]


# ======================================================
# RETURN ADMIN
# ======================================================


class SaleReturnItemInline(admin.TabularInline):
    model = SaleReturnItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "sale_item",
        "product",
        "quantity",
        "unit_net_price",
        "line_credit_amount",
        "reason_code",
        "reason_notes",
        "condition",
    )

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(SaleReturn)
class SaleReturnAdmin(admin.ModelAdmin):
    list_display = (
        "return_number",
        "status",
        "return_type",
        "original_sale",
        "exchange_sale",
        "refund_total_cents",
        "created_at",
    )
    readonly_fields = [f.name for f in SaleReturn._meta.fields]
    search_fields = ("return_number", "idempotency_key")
    list_filter = ("status", "return_type", "is_exchange")
    inlines = [SaleReturnItemInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ReturnReasonCode)
class ReturnReasonCodeAdmin(admin.ModelAdmin):
    list_display = ("code", "description", "requires_notes", "is_active", "sort_order")
    list_editable = ("requires_notes", "is_active", "sort_order")


admin.site.register(Customer)
admin.site.register(RegisterShift)
