# store_credits/services/issuance.py

"""
======================================================
PATH: store_credits/services/issuance.py
======================================================
STORE CREDIT ISSUANCE

issue_store_credit():
- creates the StoreCredit (original == current balance)
- appends exactly one `issue` ledger entry (balance_after == amount)

Code uniqueness is checked before insert. A concurrent writer can still
take the same code between check and insert, so the insert runs in a
savepoint and a unique violation on `code` retries with a fresh code.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from store_credits.models import StoreCredit, StoreCreditTransaction

from .code_generator import StoreCreditCodeGenerator
from .exceptions import StoreCreditCodeExhaustedError, StoreCreditError

logger = logging.getLogger(__name__)


def _code_exists(code: str) -> bool:
    return StoreCredit.objects.filter(code=code).exists()


@transaction.atomic
def issue_store_credit(
    *,
    amount_cents: int,
    source_type: str = StoreCredit.SOURCE_RETURN,
    source_id="",
    customer=None,
    user=None,
    notes: str = "",
    generator: StoreCreditCodeGenerator | None = None,
) -> StoreCredit:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise StoreCreditError("amount_cents must be an integer")
    if amount_cents <= 0:
        raise StoreCreditError("amount_cents must be greater than zero")

    generator = generator or StoreCreditCodeGenerator.from_settings()

    credit = None
    for _ in range(generator.max_attempts):
        code = generator.generate_unique(exists=_code_exists)
        try:
            with transaction.atomic():
                credit = StoreCredit.objects.create(
                    code=code,
                    customer=customer,
                    original_amount_cents=amount_cents,
                    current_balance_cents=amount_cents,
                    source_type=source_type,
                    source_id=str(source_id or ""),
                    issued_by=user,
                    notes=notes or "",
                )
            break
        except IntegrityError:
            if not _code_exists(code):
                raise
            logger.warning("Store credit code collision on insert", extra={"code": code})

    if credit is None:
        raise StoreCreditCodeExhaustedError(
            f"No unique store credit code after {generator.max_attempts} inserts"
        )

    StoreCreditTransaction.objects.create(
        store_credit=credit,
        transaction_type=StoreCreditTransaction.Type.ISSUE,
        amount_cents=amount_cents,
        balance_after=credit.current_balance_cents,
        performed_by=user,
        notes=notes or "",
    )

    logger.info(
        "Store credit issued",
        extra={
            "store_credit_id": str(credit.id),
            "code": credit.code,
            "amount_cents": amount_cents,
            "source_type": source_type,
            "source_id": str(source_id or ""),
        },
    )
    return credit
