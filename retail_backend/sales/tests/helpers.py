# sales/tests/helpers.py

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase

from products.models import Product, StockMovement
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
from sales.services.exchange_orchestrator import process_exchange
from store_credits.models import StoreCredit, StoreCreditTransaction

User = get_user_model()


def make_completed_sale(
    *,
    product,
    quantity=2,
    unit_price="50.00",
    discount="0.00",
    hst="13.00",
    gst="0.00",
    pst="0.00",
    region="ON",
    customer=None,
    shift=None,
    user=None,
):
    subtotal = Decimal(unit_price) * quantity - Decimal(discount)
    tax = Decimal(hst) + Decimal(gst) + Decimal(pst)

    sale = Sale.objects.create(
        shift=shift,
        customer=customer,
        user=user,
        tax_region=region,
        subtotal_amount=subtotal,
        discount_amount=Decimal(discount),
        hst_amount=Decimal(hst),
        gst_amount=Decimal(gst),
        pst_amount=Decimal(pst),
        total_amount=subtotal + tax,
        status=Sale.STATUS_COMPLETED,
    )
    item = SaleItem.objects.create(
        sale=sale,
        product=product,
        product_name=product.name,
        product_sku=product.sku,
        quantity=quantity,
        unit_price=Decimal(unit_price),
        discount_amount=Decimal(discount),
        tax_amount=tax,
    )
    return sale, item


class ExchangeTestBase(TestCase):
    """
    Fixture shared by exchange tests:

    - original sale: 2 x $50.00 (ON, HST $13.00) -> subtotal $100, total $113
    - returned product: 10 on hand
    - replacement product: $50.00 taxable, 10 on hand
    """

    def setUp(self):
        self.user = User.objects.create_user(username="cashier", password="pass")
        self.customer = Customer.objects.create(name="Dana Smith", email="dana@example.com")
        self.shift = RegisterShift.objects.create(register_name="REG-1", opened_by=self.user)

        self.returned_product = Product.objects.create(
            sku="TSHIRT-M",
            name="T-Shirt Medium",
            selling_price=Decimal("50.00"),
            quantity_on_hand=10,
        )
        self.new_product = Product.objects.create(
            sku="TSHIRT-L",
            name="T-Shirt Large",
            selling_price=Decimal("50.00"),
            quantity_on_hand=10,
        )

        self.changed_mind = ReturnReasonCode.objects.create(
            code="CHANGED_MIND", description="Customer changed mind"
        )
        self.defective = ReturnReasonCode.objects.create(
            code="DEFECTIVE", description="Defective", requires_notes=True
        )

        self.sale, self.sale_item = make_completed_sale(
            product=self.returned_product,
            customer=self.customer,
            shift=self.shift,
            user=self.user,
        )

    # -----------------------------
    # Request builders
    # -----------------------------

    def return_line(self, quantity=1, **extra):
        line = {
            "sale_item_id": str(self.sale_item.id),
            "quantity": quantity,
            "reason_code": "CHANGED_MIND",
        }
        line.update(extra)
        return line

    def new_line(self, quantity=1, product=None):
        return {
            "product_id": str((product or self.new_product).id),
            "quantity": quantity,
        }

    def exchange(self, *, returns=1, new=1, **kwargs):
        kwargs.setdefault("original_sale_id", self.sale.id)
        kwargs.setdefault("return_items", [self.return_line(returns)])
        kwargs.setdefault("new_items", [self.new_line(new)])
        kwargs.setdefault("user", self.user)
        return process_exchange(**kwargs)

    # -----------------------------
    # Assertions
    # -----------------------------

    def snapshot(self) -> dict:
        return {
            "returns": SaleReturn.objects.count(),
            "return_items": SaleReturnItem.objects.count(),
            "sales": Sale.objects.count(),
            "sale_items": SaleItem.objects.count(),
            "payments": Payment.objects.count(),
            "store_credits": StoreCredit.objects.count(),
            "credit_transactions": StoreCreditTransaction.objects.count(),
            "movements": StockMovement.objects.count(),
            "stock": dict(Product.objects.values_list("sku", "quantity_on_hand")),
        }

    def on_hand(self, product) -> int:
        product.refresh_from_db()
        return product.quantity_on_hand
