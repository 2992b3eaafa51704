# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe inventory):

- quantity_on_hand is read-only here; it changes only through
  products.services.inventory so every change has a StockMovement.
- StockMovement rows are immutable (no add/change/delete).
- StockSyncEvent rows can be inspected and filtered by status; dead
  events are re-queued with the "requeue" action.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product, StockMovement, StockSyncEvent


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "selling_price", "taxable", "quantity_on_hand", "is_active")
    readonly_fields = ("quantity_on_hand", "created_at", "updated_at")
    search_fields = ("sku", "name")
    list_filter = ("taxable", "is_active")


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("product", "reason", "movement_type", "quantity", "quantity_after", "sale", "created_at")
    list_filter = ("reason", "movement_type")
    search_fields = ("product__sku", "product__name")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockSyncEvent)
class StockSyncEventAdmin(admin.ModelAdmin):
    list_display = ("sku", "source", "old_quantity", "new_quantity", "status", "attempt_count", "created_at")
    list_filter = ("status", "source")
    search_fields = ("sku",)
    readonly_fields = (
        "product",
        "sku",
        "old_quantity",
        "new_quantity",
        "source",
        "attempt_count",
        "last_error",
        "created_at",
        "sent_at",
    )
    actions = ["requeue"]

    @admin.action(description="Re-queue selected events")
    def requeue(self, request, queryset):
        updated = queryset.exclude(status=StockSyncEvent.Status.SENT).update(
            status=StockSyncEvent.Status.PENDING,
            attempt_count=0,
            next_attempt_at=None,
        )
        self.message_user(request, f"{updated} event(s) re-queued.")
