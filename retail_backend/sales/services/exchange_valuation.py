# sales/services/exchange_valuation.py

"""
======================================================
PATH: sales/services/exchange_valuation.py
======================================================
EXCHANGE VALUATION (PURE)

Return side:
- unit_net   = unit_price - line_discount / line_quantity
- subtotal   = sum(unit_net * returned_qty)
- ratio      = subtotal / original.subtotal   (0 when original subtotal is 0)
- tax        = (original HST + GST + PST) * ratio
  The tax actually charged is credited back, never today's rate.

New-sale side:
- line_total = current selling_price * qty
- each jurisdiction: round(taxable_subtotal * rate, 2dp)
- tax = HST + GST + PST

Cents (ROUND_HALF_UP):
- return side: total_cents = round(subtotal + tax) and subtotal_cents =
  round(subtotal); tax_cents is the remainder, so two half-cent parts
  never add up to an extra cent of credit.
- new-sale side: every part is already whole cents, so
  total_cents = subtotal_cents + tax_cents.

Nothing here touches the database. Preview and execution share these
functions, which is what keeps their numbers identical.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP

from sales.models import SaleReturnItem

from .tax_rates import TaxRates, TaxRateTable

TWOPLACES = Decimal("0.01")
FOURPLACES = Decimal("0.0001")
ZERO = Decimal("0")


def money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def to_cents(v) -> int:
    if v is None or v == "":
        return 0
    return int((Decimal(str(v)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_money(cents: int) -> Decimal:
    return (Decimal(int(cents)) / Decimal(100)).quantize(TWOPLACES)


# --------------------------------------------------
# RESOLVED INPUT LINES
# --------------------------------------------------


@dataclass(frozen=True)
class ReturnLine:
    """An original sale line (live row) and how many units come back."""

    sale_item: object
    quantity: int
    reason_code: object = None
    reason_notes: str = ""
    condition: str = SaleReturnItem.Condition.RESELLABLE


@dataclass(frozen=True)
class NewItemLine:
    """A catalog product (live row) and how many units are bought."""

    product: object
    quantity: int


# --------------------------------------------------
# RETURN VALUATION
# --------------------------------------------------


@dataclass(frozen=True)
class ValuedReturnLine:
    line: ReturnLine
    unit_net_price: Decimal
    line_credit: Decimal


@dataclass(frozen=True)
class ReturnValuation:
    lines: tuple = field(default_factory=tuple)
    subtotal: Decimal = ZERO
    ratio: Decimal = ZERO
    tax: Decimal = ZERO

    @property
    def subtotal_cents(self) -> int:
        return to_cents(self.subtotal)

    @property
    def tax_cents(self) -> int:
        return self.total_cents - self.subtotal_cents

    @property
    def total_cents(self) -> int:
        return to_cents(self.subtotal + self.tax)

    @property
    def total_units(self) -> int:
        return sum(v.line.quantity for v in self.lines)


def unit_net_price(sale_item) -> Decimal:
    qty = int(sale_item.quantity or 0)
    discount = Decimal(sale_item.discount_amount or 0)
    per_unit_discount = (discount / qty) if qty > 0 else ZERO
    return max(Decimal(sale_item.unit_price) - per_unit_discount, ZERO)


def value_return(*, original_sale, lines) -> ReturnValuation:
    valued = []
    subtotal = ZERO

    for line in lines:
        unit_net = unit_net_price(line.sale_item)
        credit = unit_net * line.quantity
        subtotal += credit
        valued.append(
            ValuedReturnLine(
                line=line,
                unit_net_price=unit_net.quantize(FOURPLACES, rounding=ROUND_HALF_UP),
                line_credit=credit.quantize(FOURPLACES, rounding=ROUND_HALF_UP),
            )
        )

    original_subtotal = Decimal(original_sale.subtotal_amount or 0)
    ratio = (subtotal / original_subtotal) if original_subtotal > 0 else ZERO
    tax = Decimal(original_sale.tax_amount) * ratio

    return ReturnValuation(
        lines=tuple(valued),
        subtotal=subtotal,
        ratio=ratio,
        tax=max(tax, ZERO),
    )


# --------------------------------------------------
# NEW-SALE VALUATION
# --------------------------------------------------


@dataclass(frozen=True)
class ValuedNewLine:
    line: NewItemLine
    unit_price: Decimal
    line_total: Decimal
    tax_amount: Decimal


@dataclass(frozen=True)
class NewSaleValuation:
    region: str
    rates: TaxRates
    lines: tuple = field(default_factory=tuple)
    subtotal: Decimal = Decimal("0.00")
    taxable_subtotal: Decimal = Decimal("0.00")
    hst: Decimal = Decimal("0.00")
    gst: Decimal = Decimal("0.00")
    pst: Decimal = Decimal("0.00")

    @property
    def tax(self) -> Decimal:
        return self.hst + self.gst + self.pst

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.tax

    @property
    def subtotal_cents(self) -> int:
        return to_cents(self.subtotal)

    @property
    def tax_cents(self) -> int:
        return to_cents(self.tax)

    @property
    def total_cents(self) -> int:
        return self.subtotal_cents + self.tax_cents


def value_new_sale(*, lines, region: str | None, tax_table: TaxRateTable) -> NewSaleValuation:
    resolved_region = tax_table.resolve_region(region)
    rates = tax_table.rates_for(resolved_region)

    valued = []
    subtotal = Decimal("0.00")
    taxable_subtotal = Decimal("0.00")

    for line in lines:
        unit_price = money(line.product.selling_price)
        line_total = money(unit_price * line.quantity)
        taxable = bool(getattr(line.product, "taxable", True))

        subtotal += line_total
        if taxable:
            taxable_subtotal += line_total

        valued.append(
            ValuedNewLine(
                line=line,
                unit_price=unit_price,
                line_total=line_total,
                tax_amount=money(line_total * rates.combined) if taxable else Decimal("0.00"),
            )
        )

    return NewSaleValuation(
        region=resolved_region,
        rates=rates,
        lines=tuple(valued),
        subtotal=subtotal,
        taxable_subtotal=taxable_subtotal,
        hst=money(taxable_subtotal * rates.hst),
        gst=money(taxable_subtotal * rates.gst),
        pst=money(taxable_subtotal * rates.pst),
    )
