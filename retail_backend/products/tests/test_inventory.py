# products/tests/test_inventory.py

from __future__ import annotations

import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase

from products.models import Product, StockMovement, StockSyncEvent
from products.services.inventory import (
    InventoryError,
    ProductNotFoundError,
    deduct_sold_units,
    restock_returned_units,
)

User = get_user_model()


class InventoryMutatorTests(TestCase):
    """
    GUARANTEES:
    - On-hand moves by exactly the requested delta
    - Every mutation writes one immutable StockMovement
    - Post-mutation quantity is reported back
    """

    def setUp(self):
        self.user = User.objects.create_user(username="clerk", password="pass")
        self.product = Product.objects.create(
            sku="HDMI-2M",
            name="HDMI Cable 2m",
            selling_price=Decimal("19.99"),
            quantity_on_hand=10,
        )

    def test_restock_increments_and_records_movement(self):
        change = restock_returned_units(
            product_id=self.product.id, quantity=3, user=self.user
        )

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_on_hand, 13)
        self.assertEqual(change.old_quantity, 10)
        self.assertEqual(change.new_quantity, 13)
        self.assertEqual(change.delta, 3)
        self.assertEqual(change.sku, "HDMI-2M")
        self.assertEqual(change.source, StockSyncEvent.Source.RETURN)

        movement = StockMovement.objects.get(product=self.product)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.IN)
        self.assertEqual(movement.reason, StockMovement.Reason.EXCHANGE_RETURN)
        self.assertEqual(movement.quantity, 3)
        self.assertEqual(movement.quantity_after, 13)
        self.assertEqual(movement.signed_quantity, 3)
        self.assertEqual(movement.performed_by, self.user)

    def test_deduct_decrements_and_records_movement(self):
        change = deduct_sold_units(product_id=self.product.id, quantity=4)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_on_hand, 6)
        self.assertEqual(change.delta, -4)
        self.assertEqual(change.source, StockSyncEvent.Source.POS_SALE)

        movement = StockMovement.objects.get(product=self.product)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.OUT)
        self.assertEqual(movement.reason, StockMovement.Reason.EXCHANGE_SALE)
        self.assertEqual(movement.signed_quantity, -4)

    def test_deduct_may_take_on_hand_negative(self):
        deduct_sold_units(product_id=self.product.id, quantity=12)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_on_hand, -2)

    def test_same_product_both_directions_applies_two_mutations(self):
        restock_returned_units(product_id=self.product.id, quantity=1)
        deduct_sold_units(product_id=self.product.id, quantity=1)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_on_hand, 10)
        self.assertEqual(StockMovement.objects.filter(product=self.product).count(), 2)

    def test_rejects_non_positive_or_non_integer_quantity(self):
        for bad in (0, -1, "abc", None, True):
            with self.assertRaises(InventoryError):
                restock_returned_units(product_id=self.product.id, quantity=bad)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_on_hand, 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_unknown_product(self):
        with self.assertRaises(ProductNotFoundError):
            deduct_sold_units(product_id=uuid.uuid4(), quantity=1)

    def test_stock_movement_is_immutable(self):
        restock_returned_units(product_id=self.product.id, quantity=1)
        movement = StockMovement.objects.get(product=self.product)

        movement.quantity = 5
        with self.assertRaises(ValidationError):
            movement.save()

        with self.assertRaises(ValidationError):
            movement.delete()
