# sales/tests/test_exchange_valuation.py

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from sales.services.difference_resolver import (
    OUTCOME_CUSTOMER_OWES,
    OUTCOME_CUSTOMER_REFUND,
    OUTCOME_EVEN,
    resolve_difference,
)
from sales.services.exchange_errors import ExchangeValidationError
from sales.services.exchange_valuation import (
    NewItemLine,
    ReturnLine,
    to_cents,
    value_new_sale,
    value_return,
)
from sales.services.tax_rates import TaxRateTable

TABLE = TaxRateTable(
    {
        "ON": {"hst": "0.13"},
        "BC": {"gst": "0.05", "pst": "0.07"},
        "QC": {"gst": "0.05", "pst": "0.09975"},
    },
    default_region="ON",
)


def _sale(subtotal, tax):
    return SimpleNamespace(subtotal_amount=Decimal(subtotal), tax_amount=Decimal(tax))


def _item(unit_price, quantity, discount="0.00"):
    return SimpleNamespace(
        unit_price=Decimal(unit_price),
        quantity=quantity,
        discount_amount=Decimal(discount),
    )


def _product(price, taxable=True):
    return SimpleNamespace(selling_price=Decimal(price), taxable=taxable)


class ReturnValuationTests(SimpleTestCase):
    def test_proportional_historical_tax(self):
        sale = _sale("100.00", "13.00")
        valuation = value_return(
            original_sale=sale, lines=[ReturnLine(sale_item=_item("50.00", 2), quantity=1)]
        )

        self.assertEqual(valuation.ratio, Decimal("0.5"))
        self.assertEqual(valuation.subtotal_cents, 5000)
        self.assertEqual(valuation.tax_cents, 650)
        self.assertEqual(valuation.total_cents, 5650)

    def test_line_discount_is_spread_per_unit(self):
        # 3 x $20 with $6 off the line -> $18 net per unit
        sale = _sale("54.00", "7.02")
        item = _item("20.00", 3, discount="6.00")

        valuation = value_return(
            original_sale=sale, lines=[ReturnLine(sale_item=item, quantity=2)]
        )

        self.assertEqual(valuation.lines[0].unit_net_price, Decimal("18.0000"))
        self.assertEqual(valuation.subtotal_cents, 3600)
        self.assertEqual(valuation.tax_cents, 468)

    def test_zero_subtotal_means_zero_ratio(self):
        sale = _sale("0.00", "0.00")
        valuation = value_return(
            original_sale=sale, lines=[ReturnLine(sale_item=_item("0.00", 1), quantity=1)]
        )

        self.assertEqual(valuation.ratio, Decimal("0"))
        self.assertEqual(valuation.total_cents, 0)

    def test_total_is_subtotal_plus_tax_in_cents(self):
        # 1/3 ratio produces repeating decimals on both parts
        sale = _sale("30.00", "3.90")
        valuation = value_return(
            original_sale=sale, lines=[ReturnLine(sale_item=_item("10.00", 3), quantity=1)]
        )

        self.assertEqual(valuation.subtotal_cents, 1000)
        self.assertEqual(valuation.tax_cents, 130)
        self.assertEqual(
            valuation.total_cents, valuation.subtotal_cents + valuation.tax_cents
        )

    def test_total_rounds_the_sum_not_the_parts(self):
        # 2 x $10 with $0.01 off the line: subtotal 9.995, tax 1.305
        sale = _sale("19.99", "2.61")
        item = _item("10.00", 2, discount="0.01")

        valuation = value_return(
            original_sale=sale, lines=[ReturnLine(sale_item=item, quantity=1)]
        )

        self.assertEqual(valuation.subtotal, Decimal("9.995"))
        self.assertEqual(valuation.tax, Decimal("1.305"))
        self.assertEqual(valuation.total_cents, 1130)
        self.assertEqual(valuation.subtotal_cents, 1000)
        self.assertEqual(valuation.tax_cents, 130)


class NewSaleValuationTests(SimpleTestCase):
    def test_hst_region(self):
        valuation = value_new_sale(
            lines=[NewItemLine(product=_product("50.00"), quantity=2)],
            region="ON",
            tax_table=TABLE,
        )

        self.assertEqual(valuation.subtotal, Decimal("100.00"))
        self.assertEqual(valuation.hst, Decimal("13.00"))
        self.assertEqual(valuation.total_cents, 11300)
        self.assertEqual(valuation.lines[0].tax_amount, Decimal("13.00"))

    def test_split_jurisdictions_round_independently(self):
        valuation = value_new_sale(
            lines=[NewItemLine(product=_product("19.99"), quantity=1)],
            region="QC",
            tax_table=TABLE,
        )

        self.assertEqual(valuation.gst, Decimal("1.00"))
        self.assertEqual(valuation.pst, Decimal("1.99"))
        self.assertEqual(valuation.tax_cents, 299)
        self.assertEqual(valuation.total_cents, 2298)

    def test_non_taxable_items_excluded_from_tax_base(self):
        valuation = value_new_sale(
            lines=[
                NewItemLine(product=_product("100.00"), quantity=1),
                NewItemLine(product=_product("129.00", taxable=False), quantity=1),
            ],
            region="BC",
            tax_table=TABLE,
        )

        self.assertEqual(valuation.subtotal, Decimal("229.00"))
        self.assertEqual(valuation.taxable_subtotal, Decimal("100.00"))
        self.assertEqual(valuation.gst, Decimal("5.00"))
        self.assertEqual(valuation.pst, Decimal("7.00"))
        self.assertEqual(valuation.lines[1].tax_amount, Decimal("0.00"))

    def test_unknown_region_falls_back_to_default(self):
        valuation = value_new_sale(
            lines=[NewItemLine(product=_product("10.00"), quantity=1)],
            region="ZZ",
            tax_table=TABLE,
        )

        self.assertEqual(valuation.region, "ON")
        self.assertEqual(valuation.hst, Decimal("1.30"))


class TaxRateTableTests(SimpleTestCase):
    def test_default_region_must_exist(self):
        with self.assertRaises(ImproperlyConfigured):
            TaxRateTable({"ON": {"hst": "0.13"}}, default_region="XX")

    def test_rejects_bad_rates(self):
        with self.assertRaises(ImproperlyConfigured):
            TaxRateTable({"ON": {"hst": "abc"}}, default_region="ON")
        with self.assertRaises(ImproperlyConfigured):
            TaxRateTable({"ON": {"hst": "-0.1"}}, default_region="ON")

    @override_settings(TAX_RATES={"AB": {"gst": "0.05"}}, DEFAULT_TAX_REGION="ab")
    def test_from_settings(self):
        table = TaxRateTable.from_settings()

        self.assertEqual(table.default_region, "AB")
        self.assertEqual(table.rates_for("on").combined, Decimal("0.05"))


class DifferenceResolverTests(SimpleTestCase):
    def test_three_exclusive_outcomes(self):
        owes = resolve_difference(
            return_total_cents=5650, new_total_cents=11300, payment_method="Debit"
        )
        refund = resolve_difference(return_total_cents=11300, new_total_cents=5650)
        even = resolve_difference(return_total_cents=5650, new_total_cents=5650)

        self.assertEqual(owes.outcome, OUTCOME_CUSTOMER_OWES)
        self.assertEqual(owes.method, "debit")
        self.assertEqual(owes.difference_cents, 5650)

        self.assertEqual(refund.outcome, OUTCOME_CUSTOMER_REFUND)
        self.assertEqual(refund.method, "store_credit")
        self.assertEqual(refund.difference_cents, -5650)
        self.assertEqual(refund.amount_cents, 5650)

        self.assertEqual(even.outcome, OUTCOME_EVEN)
        self.assertEqual(even.amount_cents, 0)

        for r in (owes, refund, even):
            flags = [r.customer_owes, r.customer_refund, r.even_exchange]
            self.assertEqual(flags.count(True), 1)

    def test_owed_difference_requires_payment_method(self):
        with self.assertRaises(ExchangeValidationError):
            resolve_difference(return_total_cents=0, new_total_cents=1)

    def test_preview_mode_skips_payment_method(self):
        r = resolve_difference(
            return_total_cents=0, new_total_cents=1, require_payment_method=False
        )

        self.assertTrue(r.customer_owes)
        self.assertIsNone(r.method)

    def test_unknown_methods_rejected(self):
        with self.assertRaises(ExchangeValidationError):
            resolve_difference(
                return_total_cents=0, new_total_cents=1, payment_method="bitcoin"
            )
        with self.assertRaises(ExchangeValidationError):
            resolve_difference(
                return_total_cents=2, new_total_cents=1, difference_method="voucher"
            )

    def test_to_cents_rounds_half_up(self):
        self.assertEqual(to_cents(Decimal("0.005")), 1)
        self.assertEqual(to_cents(Decimal("56.50")), 5650)
        self.assertEqual(to_cents(None), 0)
