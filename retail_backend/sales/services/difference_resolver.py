# sales/services/difference_resolver.py

"""
DIFFERENCE RESOLVER (PURE)

difference_cents = new_total_cents - return_total_cents

  > 0  customer owes      -> payment method is mandatory
  < 0  customer is owed   -> settled by difference method (default store credit)
  = 0  even exchange      -> zero-value settlement, no money moves

Exactly one outcome per call. No side effects.
"""

from __future__ import annotations

from dataclasses import dataclass

from sales.models import Payment

from .exchange_errors import ExchangeValidationError

OUTCOME_CUSTOMER_OWES = "customer_owes"
OUTCOME_CUSTOMER_REFUND = "customer_refund"
OUTCOME_EVEN = "even"

# Methods a customer can pay an owed difference with.
OWED_PAYMENT_METHODS = (
    Payment.Method.CASH,
    Payment.Method.CREDIT,
    Payment.Method.DEBIT,
    Payment.Method.GIFT_CARD,
)

# Methods the store can hand an owed difference back with.
DIFFERENCE_METHODS = (
    Payment.Method.ORIGINAL_PAYMENT,
    Payment.Method.STORE_CREDIT,
    Payment.Method.CASH,
)

DEFAULT_DIFFERENCE_METHOD = Payment.Method.STORE_CREDIT


@dataclass(frozen=True)
class DifferenceResolution:
    return_total_cents: int
    new_total_cents: int
    outcome: str
    method: str | None = None

    @property
    def difference_cents(self) -> int:
        return self.new_total_cents - self.return_total_cents

    @property
    def amount_cents(self) -> int:
        return abs(self.difference_cents)

    @property
    def customer_owes(self) -> bool:
        return self.outcome == OUTCOME_CUSTOMER_OWES

    @property
    def customer_refund(self) -> bool:
        return self.outcome == OUTCOME_CUSTOMER_REFUND

    @property
    def even_exchange(self) -> bool:
        return self.outcome == OUTCOME_EVEN


def _clean_method(value) -> str:
    return str(value or "").strip().lower()


def resolve_difference(
    *,
    return_total_cents: int,
    new_total_cents: int,
    payment_method: str | None = None,
    difference_method: str | None = None,
    require_payment_method: bool = True,
) -> DifferenceResolution:
    """
    Classify the net difference of an exchange.

    require_payment_method=False is used by the preview path, which never
    settles and therefore has no payment to validate.
    """
    difference = int(new_total_cents) - int(return_total_cents)

    if difference > 0:
        method = _clean_method(payment_method)
        if not method:
            if require_payment_method:
                raise ExchangeValidationError(
                    f"Customer owes {difference} cents: payment_method is required"
                )
            method = None
        elif method not in OWED_PAYMENT_METHODS:
            raise ExchangeValidationError(f"Unsupported payment_method '{method}'")
        return DifferenceResolution(
            return_total_cents=int(return_total_cents),
            new_total_cents=int(new_total_cents),
            outcome=OUTCOME_CUSTOMER_OWES,
            method=method,
        )

    if difference < 0:
        method = _clean_method(difference_method) or DEFAULT_DIFFERENCE_METHOD
        if method not in DIFFERENCE_METHODS:
            raise ExchangeValidationError(f"Unsupported difference_method '{method}'")
        return DifferenceResolution(
            return_total_cents=int(return_total_cents),
            new_total_cents=int(new_total_cents),
            outcome=OUTCOME_CUSTOMER_REFUND,
            method=method,
        )

    return DifferenceResolution(
        return_total_cents=int(return_total_cents),
        new_total_cents=int(new_total_cents),
        outcome=OUTCOME_EVEN,
        method=Payment.Method.CASH,
    )
