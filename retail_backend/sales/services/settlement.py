# sales/services/settlement.py

"""
======================================================
PATH: sales/services/settlement.py
======================================================
SETTLEMENT EXECUTOR

Runs inside the exchange transaction, after the new sale exists.
Exactly ONE Payment row is written against the new sale:

- customer owes -> direction=in,   method=payment method, instrument details
- refund        -> direction=out,  method=difference method
                   (store_credit also issues a StoreCredit + `issue` entry)
- even          -> direction=none, amount 0

Any failure propagates and rolls back the enclosing transaction.
"""

from __future__ import annotations

from dataclasses import dataclass

from sales.models import Payment
from store_credits.models import StoreCredit
from store_credits.services import issue_store_credit

from .difference_resolver import DifferenceResolution
from .exchange_errors import ExchangeValidationError
from .exchange_valuation import cents_to_money, money

CARD_DETAIL_FIELDS = (
    "card_brand",
    "card_last_four",
    "authorization_code",
    "processor_reference",
)


@dataclass(frozen=True)
class SettlementOutcome:
    payment: Payment
    store_credit: StoreCredit | None = None


def _instrument_details(method: str, details: dict | None) -> dict:
    details = details or {}
    out = {}

    if method in Payment.CARD_METHODS:
        for name in CARD_DETAIL_FIELDS:
            value = details.get(name)
            if value not in (None, ""):
                out[name] = str(value).strip()
        last_four = out.get("card_last_four", "")
        if last_four and not (len(last_four) == 4 and last_four.isdigit()):
            raise ExchangeValidationError("card_last_four must be exactly 4 digits")

    if method == Payment.Method.CASH:
        if details.get("cash_tendered") not in (None, ""):
            out["cash_tendered"] = money(details["cash_tendered"])
        if details.get("change_given") not in (None, ""):
            out["change_given"] = money(details["change_given"])

    return out


def execute_settlement(
    *,
    resolution: DifferenceResolution,
    new_sale,
    sale_return,
    user=None,
    payment_details: dict | None = None,
) -> SettlementOutcome:
    amount = cents_to_money(resolution.amount_cents)

    if resolution.customer_owes:
        payment = Payment.objects.create(
            sale=new_sale,
            direction=Payment.Direction.IN,
            method=resolution.method,
            amount=amount,
            **_instrument_details(resolution.method, payment_details),
        )
        return SettlementOutcome(payment=payment)

    if resolution.customer_refund:
        credit = None
        if resolution.method == Payment.Method.STORE_CREDIT:
            credit = issue_store_credit(
                amount_cents=resolution.amount_cents,
                source_type=StoreCredit.SOURCE_RETURN,
                source_id=sale_return.id,
                customer=new_sale.customer,
                user=user,
                notes=f"Exchange difference for {sale_return.return_number}",
            )
        payment = Payment.objects.create(
            sale=new_sale,
            direction=Payment.Direction.OUT,
            method=resolution.method,
            amount=amount,
            store_credit=credit,
        )
        return SettlementOutcome(payment=payment, store_credit=credit)

    payment = Payment.objects.create(
        sale=new_sale,
        direction=Payment.Direction.NONE,
        method=resolution.method,
        amount=amount,
    )
    return SettlementOutcome(payment=payment)
