# store_credits/admin.py

from django.contrib import admin

from store_credits.models import StoreCredit, StoreCreditTransaction


class StoreCreditTransactionInline(admin.TabularInline):
    model = StoreCreditTransaction
    extra = 0
    can_delete = False
    readonly_fields = (
        "transaction_type",
        "amount_cents",
        "balance_after",
        "performed_by",
        "notes",
        "created_at",
    )

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(StoreCredit)
class StoreCreditAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "customer",
        "original_amount_cents",
        "current_balance_cents",
        "source_type",
        "is_active",
        "created_at",
    )
    readonly_fields = (
        "code",
        "original_amount_cents",
        "current_balance_cents",
        "source_type",
        "source_id",
        "issued_by",
        "created_at",
    )
    search_fields = ("code", "source_id")
    list_filter = ("source_type", "is_active")
    inlines = [StoreCreditTransactionInline]

    def has_add_permission(self, request):
        return False
