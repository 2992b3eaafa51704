# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
INVENTORY MUTATOR

Purpose:
- Restore on-hand stock for returned units.
- Deduct on-hand stock for newly sold units.
- Write an immutable StockMovement per mutation (audit trail).
- Report the post-mutation quantity so callers can notify external channels.

Rules:
- Quantities are integer units.
- The on-hand update is ONE atomic statement
  (UPDATE ... SET quantity_on_hand = quantity_on_hand + delta),
  never read-then-write, so concurrent exchanges on the same product
  cannot lose updates.
- Each (product, delta) pair is applied independently: a product that is
  both returned and re-sold gets two mutations, never a pre-netted one.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.db import transaction
from django.db.models import F

from products.models import Product, StockMovement, StockSyncEvent


class InventoryError(Exception):
    """Domain error for inventory mutation failures."""


class ProductNotFoundError(InventoryError):
    pass


@dataclass(frozen=True)
class StockChange:
    """Outcome of one on-hand mutation (feeds the stock-sync outbox)."""

    product_id: object
    sku: str
    old_quantity: int
    new_quantity: int
    source: str

    @property
    def delta(self) -> int:
        return self.new_quantity - self.old_quantity


def _to_positive_int(value, *, field_name: str) -> int:
    if isinstance(value, bool):
        raise InventoryError(f"{field_name} must be an integer")
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise InventoryError(f"{field_name} must be an integer")
    if v <= 0:
        raise InventoryError(f"{field_name} must be greater than zero")
    return v


@transaction.atomic
def _apply_delta(
    *,
    product_id,
    delta: int,
    reason: str,
    source: str,
    user=None,
    sale=None,
) -> StockChange:
    updated = Product.objects.filter(pk=product_id).update(
        quantity_on_hand=F("quantity_on_hand") + delta
    )
    if updated != 1:
        raise ProductNotFoundError(f"Product {product_id} not found")

    row = Product.objects.filter(pk=product_id).values("sku", "quantity_on_hand").get()
    new_qty = int(row["quantity_on_hand"])

    StockMovement.objects.create(
        product_id=product_id,
        movement_type=(
            StockMovement.MovementType.IN if delta > 0 else StockMovement.MovementType.OUT
        ),
        reason=reason,
        quantity=abs(delta),
        quantity_after=new_qty,
        performed_by=user,
        sale=sale,
    )

    return StockChange(
        product_id=product_id,
        sku=row["sku"],
        old_quantity=new_qty - delta,
        new_quantity=new_qty,
        source=source,
    )


def restock_returned_units(*, product_id, quantity, user=None, sale=None) -> StockChange:
    """
    Increment on-hand stock for returned units.
    `sale` is the sale the units were originally bought on.
    """
    qty = _to_positive_int(quantity, field_name="quantity")
    return _apply_delta(
        product_id=product_id,
        delta=qty,
        reason=StockMovement.Reason.EXCHANGE_RETURN,
        source=StockSyncEvent.Source.RETURN,
        user=user,
        sale=sale,
    )


def deduct_sold_units(*, product_id, quantity, user=None, sale=None) -> StockChange:
    """
    Decrement on-hand stock for newly sold units.
    `sale` is the new sale the units leave on.
    """
    qty = _to_positive_int(quantity, field_name="quantity")
    return _apply_delta(
        product_id=product_id,
        delta=-qty,
        reason=StockMovement.Reason.EXCHANGE_SALE,
        source=StockSyncEvent.Source.POS_SALE,
        user=user,
        sale=sale,
    )
