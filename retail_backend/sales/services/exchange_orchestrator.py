"""
======================================================
PATH: sales/services/exchange_orchestrator.py
======================================================
EXCHANGE ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- Take back units from a completed sale and ring up replacement items
  as ONE all-or-nothing unit of work.
- Settle the net difference exactly once (payment, refund or zero entry).
- Keep on-hand stock honest for both product sets.

Sequence (process_exchange, single DB transaction):
1) Lock + re-read the original sale and its lines (must be completed).
2) Validate return lines against live remaining quantities.
3) Re-read every new product (must exist and be active).
4) Value both sides (pure) and resolve the difference (pure).
5) SaleReturn(status=processing) + SaleReturnItem rows, restock returned units.
6) New Sale(is_exchange, exchange_return=SaleReturn) + SaleItem rows,
   deduct new units.
7) Settlement (exactly one Payment against the new sale).
8) Link SaleReturn.exchange_sale, SaleReturn -> completed.
9) On commit only: stock-sync outbox hand-off.

preview_exchange runs steps 1-4 without locks and without writing.

Failure semantics:
- Every error is raised before commit. The transaction rolls back and the
  store is exactly as it was (no stuck `processing` rows, no half-applied
  stock).
- Idempotency: a repeat submission with the same idempotency_key returns
  the already-committed exchange instead of creating a second one.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Sum

from products.models import Product
from products.services import (
    deduct_sold_units,
    restock_returned_units,
    schedule_stock_sync,
)
from products.services.inventory import InventoryError, ProductNotFoundError
from sales.models import (
    RegisterShift,
    ReturnReasonCode,
    Sale,
    SaleItem,
    SaleReturn,
    SaleReturnItem,
)
from store_credits.models import StoreCredit
from store_credits.services import StoreCreditCodeExhaustedError, StoreCreditError

from .difference_resolver import DifferenceResolution, resolve_difference
from .exchange_errors import (
    ExchangeConflictError,
    ExchangeError,
    ExchangeNotFoundError,
    ExchangePersistenceError,
    ExchangeValidationError,
)
from .exchange_valuation import (
    NewItemLine,
    NewSaleValuation,
    ReturnLine,
    ReturnValuation,
    value_new_sale,
    value_return,
)
from .settlement import execute_settlement
from .tax_rates import TaxRateTable

logger = logging.getLogger(__name__)

CONDITIONS = set(SaleReturnItem.Condition.values)
IDEMPOTENCY_KEY_MAX_LENGTH = 64


# --------------------------------------------------
# RESULT TYPES
# --------------------------------------------------


@dataclass(frozen=True)
class ExchangePlan:
    """Everything known about an exchange before anything is written."""

    original_sale: Sale
    return_type: str
    return_valuation: ReturnValuation
    new_valuation: NewSaleValuation
    resolution: DifferenceResolution

    @property
    def return_lines(self):
        return [v.line for v in self.return_valuation.lines]

    @property
    def new_lines(self):
        return [v.line for v in self.new_valuation.lines]


@dataclass(frozen=True)
class ExchangeResult:
    sale_return: SaleReturn
    new_sale: Sale
    payment: object = None
    store_credit: StoreCredit | None = None
    replayed: bool = False


# --------------------------------------------------
# INPUT NORMALIZATION
# --------------------------------------------------


def _as_uuid(value, *, label: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value or "").strip())
    except ValueError:
        raise ExchangeValidationError(f"{label} must be a valid UUID")


def _to_int_qty(value, *, label: str) -> int:
    if isinstance(value, bool):
        raise ExchangeValidationError(f"{label} must be a whole integer unit")

    if isinstance(value, int):
        qty = value
    elif isinstance(value, str) and value.strip().isdigit():
        qty = int(value.strip())
    else:
        raise ExchangeValidationError(f"{label} must be a whole integer unit")

    if qty <= 0:
        raise ExchangeValidationError(f"{label} must be an integer >= 1")
    return qty


def _normalize_return_items(items) -> list[dict]:
    """
    - list of {sale_item_id, quantity, reason_code?, reason_notes?, condition?}
    - duplicates by sale_item_id are aggregated (first line's reason wins)
    """
    if not isinstance(items, (list, tuple)) or not items:
        raise ExchangeValidationError("return_items must contain at least one line")

    agg: "OrderedDict[uuid.UUID, dict]" = OrderedDict()

    for line in items:
        if not isinstance(line, dict):
            raise ExchangeValidationError("return_items entries must be objects")

        sid = _as_uuid(line.get("sale_item_id"), label="sale_item_id")
        qty = _to_int_qty(line.get("quantity"), label="return quantity")

        condition = str(line.get("condition") or SaleReturnItem.Condition.RESELLABLE)
        condition = condition.strip().lower()
        if condition not in CONDITIONS:
            raise ExchangeValidationError(f"Invalid condition '{condition}'")

        if sid in agg:
            agg[sid]["quantity"] += qty
            continue

        agg[sid] = {
            "sale_item_id": sid,
            "quantity": qty,
            "reason_code": str(line.get("reason_code") or "").strip().upper(),
            "reason_notes": str(line.get("reason_notes") or "").strip(),
            "condition": condition,
        }

    return list(agg.values())


def _normalize_new_items(items) -> list[dict]:
    if not isinstance(items, (list, tuple)) or not items:
        raise ExchangeValidationError("new_items must contain at least one line")

    agg: "OrderedDict[uuid.UUID, int]" = OrderedDict()
    for line in items:
        if not isinstance(line, dict):
            raise ExchangeValidationError("new_items entries must be objects")
        pid = _as_uuid(line.get("product_id"), label="product_id")
        agg[pid] = agg.get(pid, 0) + _to_int_qty(
            line.get("quantity"), label="new item quantity"
        )

    return [{"product_id": pid, "quantity": qty} for pid, qty in agg.items()]


def _normalize_idempotency_key(value) -> str | None:
    key = str(value or "").strip()
    if not key:
        return None
    if len(key) > IDEMPOTENCY_KEY_MAX_LENGTH:
        raise ExchangeValidationError(
            f"idempotency_key cannot exceed {IDEMPOTENCY_KEY_MAX_LENGTH} characters"
        )
    return key


# --------------------------------------------------
# LIVE READS
# --------------------------------------------------


def _load_original_sale(sale_id, *, lock: bool) -> Sale:
    qs = Sale.objects.all()
    if lock:
        qs = qs.select_for_update()

    sale = qs.filter(pk=_as_uuid(sale_id, label="original_sale_id")).first()
    if sale is None:
        raise ExchangeNotFoundError(f"Original sale {sale_id} not found")

    if sale.status != Sale.STATUS_COMPLETED:
        raise ExchangeValidationError(
            f"Sale {sale.transaction_number} is {sale.status}; only completed sales can be exchanged"
        )
    return sale


def _returned_qty_by_item(sale_item_ids) -> dict:
    rows = (
        SaleReturnItem.objects.filter(sale_item_id__in=list(sale_item_ids))
        .values("sale_item_id")
        .annotate(total=Sum("quantity"))
    )
    return {r["sale_item_id"]: int(r["total"] or 0) for r in rows}


def _load_reason_codes(codes) -> dict:
    wanted = {c for c in codes if c}
    if not wanted:
        return {}
    found = {
        rc.code: rc
        for rc in ReturnReasonCode.objects.filter(code__in=wanted, is_active=True)
    }
    unknown = sorted(wanted - set(found))
    if unknown:
        raise ExchangeValidationError(f"Unknown return reason code(s): {', '.join(unknown)}")
    return found


def _resolve_return_lines(
    *, sale: Sale, normalized: list[dict], require_reason: bool
) -> tuple[list[ReturnLine], str]:
    sale_items = {si.id: si for si in SaleItem.objects.filter(sale=sale)}

    for line in normalized:
        if line["sale_item_id"] not in sale_items:
            raise ExchangeNotFoundError(
                f"Line item {line['sale_item_id']} not found on sale {sale.transaction_number}"
            )

    already = _returned_qty_by_item(sale_items.keys())
    reason_codes = _load_reason_codes(line["reason_code"] for line in normalized)

    lines = []
    for line in normalized:
        si = sale_items[line["sale_item_id"]]
        remaining = int(si.quantity) - already.get(si.id, 0)
        if line["quantity"] > remaining:
            raise ExchangeValidationError(
                f"Cannot return {line['quantity']} of {si.product_name}: "
                f"only {max(remaining, 0)} remaining"
            )

        reason = reason_codes.get(line["reason_code"])
        if reason is None and require_reason:
            raise ExchangeValidationError(
                f"reason_code is required for line item {si.id}"
            )
        if reason is not None and reason.requires_notes and not line["reason_notes"]:
            raise ExchangeValidationError(
                f"reason_notes are required for reason code {reason.code}"
            )

        lines.append(
            ReturnLine(
                sale_item=si,
                quantity=line["quantity"],
                reason_code=reason,
                reason_notes=line["reason_notes"],
                condition=line["condition"],
            )
        )

    sold_units = sum(int(si.quantity) for si in sale_items.values())
    returned_units = sum(already.values()) + sum(rl.quantity for rl in lines)
    return_type = (
        SaleReturn.TYPE_FULL if returned_units >= sold_units else SaleReturn.TYPE_PARTIAL
    )
    return lines, return_type


def _resolve_new_lines(normalized: list[dict]) -> list[NewItemLine]:
    products = {
        p.id: p
        for p in Product.objects.filter(pk__in=[line["product_id"] for line in normalized])
    }

    lines = []
    for line in normalized:
        product = products.get(line["product_id"])
        if product is None:
            raise ExchangeNotFoundError(f"Product {line['product_id']} not found")
        if not product.is_active:
            raise ExchangeValidationError(f"Product {product.sku} is not available for sale")
        lines.append(NewItemLine(product=product, quantity=line["quantity"]))
    return lines


def _resolve_shift(shift_id, *, default):
    if not shift_id:
        return default
    shift = RegisterShift.objects.filter(pk=_as_uuid(shift_id, label="shift_id")).first()
    if shift is None:
        raise ExchangeNotFoundError(f"Register shift {shift_id} not found")
    return shift


def _plan_exchange(
    *,
    original_sale_id,
    return_items,
    new_items,
    payment_method=None,
    difference_method=None,
    lock: bool,
    require_settlement_inputs: bool,
    tax_table: TaxRateTable | None = None,
) -> ExchangePlan:
    normalized_returns = _normalize_return_items(return_items)
    normalized_new = _normalize_new_items(new_items)

    sale = _load_original_sale(original_sale_id, lock=lock)
    return_lines, return_type = _resolve_return_lines(
        sale=sale,
        normalized=normalized_returns,
        require_reason=require_settlement_inputs,
    )
    new_lines = _resolve_new_lines(normalized_new)

    return_valuation = value_return(original_sale=sale, lines=return_lines)
    new_valuation = value_new_sale(
        lines=new_lines,
        region=sale.tax_region,
        tax_table=tax_table or TaxRateTable.from_settings(),
    )

    resolution = resolve_difference(
        return_total_cents=return_valuation.total_cents,
        new_total_cents=new_valuation.total_cents,
        payment_method=payment_method,
        difference_method=difference_method,
        require_payment_method=require_settlement_inputs,
    )

    return ExchangePlan(
        original_sale=sale,
        return_type=return_type,
        return_valuation=return_valuation,
        new_valuation=new_valuation,
        resolution=resolution,
    )


# --------------------------------------------------
# PUBLIC API
# --------------------------------------------------


def preview_exchange(
    *,
    original_sale_id,
    return_items,
    new_items,
    difference_method=None,
    tax_table: TaxRateTable | None = None,
) -> ExchangePlan:
    """Value an exchange without writing anything."""
    return _plan_exchange(
        original_sale_id=original_sale_id,
        return_items=return_items,
        new_items=new_items,
        difference_method=difference_method,
        lock=False,
        require_settlement_inputs=False,
        tax_table=tax_table,
    )


def find_exchange_by_idempotency_key(key) -> SaleReturn | None:
    key = _normalize_idempotency_key(key)
    if key is None:
        return None
    return (
        SaleReturn.objects.select_related("original_sale", "exchange_sale")
        .filter(idempotency_key=key)
        .first()
    )


def _replay(existing: SaleReturn, *, original_sale_id) -> ExchangeResult:
    if existing.original_sale_id != _as_uuid(original_sale_id, label="original_sale_id"):
        raise ExchangeConflictError(
            "idempotency_key was already used for an exchange on a different sale"
        )
    new_sale = existing.exchange_sale
    payment = new_sale.payments.select_related("store_credit").first() if new_sale else None
    return ExchangeResult(
        sale_return=existing,
        new_sale=new_sale,
        payment=payment,
        store_credit=getattr(payment, "store_credit", None),
        replayed=True,
    )


def _assert_within_returnable(return_lines: list[ReturnLine]):
    """Re-check ceilings after our own rows are in (catches concurrent returns)."""
    items = {rl.sale_item.id: rl.sale_item for rl in return_lines}
    totals = _returned_qty_by_item(items.keys())
    for item_id, si in items.items():
        if totals.get(item_id, 0) > int(si.quantity):
            raise ExchangeConflictError(
                f"Line item {item_id} was returned concurrently; resubmit the exchange"
            )


@transaction.atomic
def _execute_exchange(
    *,
    original_sale_id,
    return_items,
    new_items,
    user,
    payment_method,
    payment_details,
    difference_method,
    shift_id,
    notes,
    idempotency_key,
    tax_table,
) -> ExchangeResult:
    plan = _plan_exchange(
        original_sale_id=original_sale_id,
        return_items=return_items,
        new_items=new_items,
        payment_method=payment_method,
        difference_method=difference_method,
        lock=True,
        require_settlement_inputs=True,
        tax_table=tax_table,
    )
    original = plan.original_sale
    shift = _resolve_shift(shift_id, default=original.shift)
    rv = plan.return_valuation
    nv = plan.new_valuation
    changes = []

    # --------------------------------------------------
    # RETURN SIDE
    # --------------------------------------------------
    sale_return = SaleReturn.objects.create(
        original_sale=original,
        return_type=plan.return_type,
        status=SaleReturn.STATUS_PROCESSING,
        is_exchange=True,
        refund_method=SaleReturn.REFUND_METHOD_EXCHANGE,
        refund_subtotal_cents=rv.subtotal_cents,
        refund_tax_cents=rv.tax_cents,
        refund_total_cents=rv.total_cents,
        processed_by=user,
        notes=(notes or "").strip(),
        idempotency_key=idempotency_key,
    )

    for valued in rv.lines:
        line = valued.line
        SaleReturnItem.objects.create(
            sale_return=sale_return,
            sale_item=line.sale_item,
            product_id=line.sale_item.product_id,
            quantity=line.quantity,
            unit_net_price=valued.unit_net_price,
            line_credit_amount=valued.line_credit,
            reason_code=line.reason_code,
            reason_notes=line.reason_notes,
            condition=line.condition,
        )

        if line.sale_item.product_id is None:
            logger.warning(
                "Returned line has no catalog product; stock not restored",
                extra={"sale_item_id": str(line.sale_item.id)},
            )
            continue

        changes.append(
            restock_returned_units(
                product_id=line.sale_item.product_id,
                quantity=line.quantity,
                user=user,
                sale=original,
            )
        )

    _assert_within_returnable(plan.return_lines)

    # --------------------------------------------------
    # NEW-SALE SIDE
    # --------------------------------------------------
    new_sale = Sale.objects.create(
        shift=shift,
        customer=original.customer,
        user=user,
        tax_region=nv.region,
        subtotal_amount=nv.subtotal,
        hst_amount=nv.hst,
        gst_amount=nv.gst,
        pst_amount=nv.pst,
        total_amount=nv.total,
        status=Sale.STATUS_COMPLETED,
        is_exchange=True,
        exchange_return=sale_return,
    )

    for valued in nv.lines:
        product = valued.line.product
        SaleItem.objects.create(
            sale=new_sale,
            product=product,
            product_name=product.name,
            product_sku=product.sku,
            quantity=valued.line.quantity,
            unit_price=valued.unit_price,
            tax_amount=valued.tax_amount,
            taxable=product.taxable,
        )
        changes.append(
            deduct_sold_units(
                product_id=product.id,
                quantity=valued.line.quantity,
                user=user,
                sale=new_sale,
            )
        )

    # --------------------------------------------------
    # SETTLEMENT + LINK
    # --------------------------------------------------
    outcome = execute_settlement(
        resolution=plan.resolution,
        new_sale=new_sale,
        sale_return=sale_return,
        user=user,
        payment_details=payment_details,
    )

    sale_return.exchange_sale = new_sale
    sale_return.status = SaleReturn.STATUS_COMPLETED
    sale_return.save(update_fields=["exchange_sale", "status", "completed_at"])

    schedule_stock_sync(changes)

    logger.info(
        "Exchange completed",
        extra={
            "return_id": str(sale_return.id),
            "return_number": sale_return.return_number,
            "new_sale_id": str(new_sale.id),
            "original_sale_id": str(original.id),
            "return_total_cents": rv.total_cents,
            "new_total_cents": nv.total_cents,
            "difference_cents": plan.resolution.difference_cents,
            "outcome": plan.resolution.outcome,
        },
    )

    return ExchangeResult(
        sale_return=sale_return,
        new_sale=new_sale,
        payment=outcome.payment,
        store_credit=outcome.store_credit,
    )


def process_exchange(
    *,
    original_sale_id,
    return_items,
    new_items,
    user=None,
    payment_method: str | None = None,
    payment_details: dict | None = None,
    difference_method: str | None = None,
    shift_id=None,
    notes: str | None = None,
    idempotency_key: str | None = None,
    tax_table: TaxRateTable | None = None,
) -> ExchangeResult:
    """
    Execute an exchange atomically.

    Raises ExchangeValidationError / ExchangeNotFoundError /
    ExchangeConflictError / ExchangePersistenceError. Nothing is written
    when any of them is raised.
    """
    key = _normalize_idempotency_key(idempotency_key)
    logger.info(
        "Exchange requested",
        extra={"original_sale_id": str(original_sale_id), "idempotency_key": key},
    )
    if key is not None:
        existing = find_exchange_by_idempotency_key(key)
        if existing is not None:
            return _replay(existing, original_sale_id=original_sale_id)

    try:
        return _execute_exchange(
            original_sale_id=original_sale_id,
            return_items=return_items,
            new_items=new_items,
            user=user,
            payment_method=payment_method,
            payment_details=payment_details,
            difference_method=difference_method,
            shift_id=shift_id,
            notes=notes,
            idempotency_key=key,
            tax_table=tax_table,
        )
    except ExchangeError as exc:
        logger.warning(
            "Exchange rejected",
            extra={
                "original_sale_id": str(original_sale_id),
                "code": exc.code,
                "reason": str(exc),
            },
        )
        raise
    except IntegrityError as exc:
        if key is not None and SaleReturn.objects.filter(idempotency_key=key).exists():
            raise ExchangeConflictError(
                "An exchange with this idempotency_key was committed concurrently; "
                "resubmit to receive it"
            ) from exc
        logger.exception("Exchange rejected by database constraint")
        raise ExchangePersistenceError("Exchange could not be saved") from exc
    except DatabaseError as exc:
        logger.exception("Exchange persistence failed")
        raise ExchangePersistenceError("Exchange could not be saved") from exc
    except StoreCreditCodeExhaustedError as exc:
        raise ExchangeConflictError(str(exc)) from exc
    except ProductNotFoundError as exc:
        raise ExchangeConflictError(
            f"Stock update failed, product removed concurrently: {exc}"
        ) from exc
    except (InventoryError, StoreCreditError) as exc:
        raise ExchangeValidationError(str(exc)) from exc
