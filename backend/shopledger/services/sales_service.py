"""
Sales Service - point-of-sale checkout

WHY: A sale is priced, numbered, recorded and taken out of stock as one unit.
A sale that recorded the order but missed a decrement (or the reverse) would
make stock drift from its history.

FLOW:
1. Validate the cart and hold every product it touches
2. Price the lines, compute tax and total (half-up to the cent)
3. Reject short payment before anything is written
4. Draw the next invoice number (committed on its own, never reused)
5. Decrement stock line by line; any failure rolls the whole sale back
6. Persist the order and commit
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..errors import InsufficientPayment, InsufficientStock, InvalidInput, LedgerError, NotFound
from ..models import SalesOrder, SalesOrderLine, Product
from ..models.inventory import SOURCE_SALE
from ..records import SalesOrderRecord
from ..validation import coerce_int, require_non_negative_int, require_positive_int, require_text
from .ledger_store import LedgerStore

logger = logging.getLogger(__name__)


def compute_tax_cents(subtotal_cents: int, tax_rate_bps: int) -> int:
    """Tax on a subtotal, nearest-cent rounding (half-up)."""
    return (subtotal_cents * tax_rate_bps + 5_000) // 10_000


def _normalize_lines(lines: Sequence) -> list[tuple[int, int]]:
    if lines is not None and not isinstance(lines, (list, tuple)):
        raise InvalidInput("lines must be a list")
    if not lines:
        raise InvalidInput("Cannot process a sale with no lines")

    normalized = []
    for i, line in enumerate(lines):
        if isinstance(line, dict):
            product_id, quantity = line.get("product_id"), line.get("quantity")
        else:
            try:
                product_id, quantity = line
            except (TypeError, ValueError):
                raise InvalidInput(f"Line {i + 1} must be a (product_id, quantity) pair")
        normalized.append((
            coerce_int(product_id, f"lines[{i}].product_id"),
            require_positive_int(quantity, f"lines[{i}].quantity"),
        ))
    return normalized


def _price_lines(ledger: LedgerStore, lines: Iterable[tuple[int, int]]) -> list[SalesOrderLine]:
    priced = []
    for product_id, quantity in lines:
        product: Product = ledger.load_product(product_id, lock=True)
        if not product.is_active:
            raise InvalidInput(
                f"Product {product.code} is inactive",
                details={"product_id": product.id},
            )
        priced.append(SalesOrderLine(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price_cents=product.unit_price_cents,
            line_total_cents=product.unit_price_cents * quantity,
        ))
    return priced


def process_sale(
    ledger: LedgerStore,
    lines: Sequence,
    operator_id,
    amount_tendered_cents,
) -> SalesOrderRecord:
    """
    Check out a cart and return the recorded sales order.

    Args:
        ledger: Ledger handle (session + product locks + tax configuration)
        lines: (product_id, quantity) pairs or {"product_id", "quantity"} dicts
        operator_id: Cashier recording the sale
        amount_tendered_cents: Cash handed over, in cents

    Raises:
        InvalidInput: empty cart, non-positive quantity, inactive product
        NotFound: unknown product
        InsufficientPayment: tendered amount below the total (nothing written)
        InsufficientStock: a line exceeds stock (whole sale rolled back)
    """
    normalized = _normalize_lines(lines)
    operator_id = require_text(operator_id, "operator_id")
    amount_tendered_cents = require_non_negative_int(amount_tendered_cents, "amount_tendered_cents")

    with ledger.lock_products(pid for pid, _ in normalized):
        try:
            priced = _price_lines(ledger, normalized)

            subtotal = sum(line.line_total_cents for line in priced)
            tax = compute_tax_cents(subtotal, ledger.tax_rate_bps)
            total = subtotal + tax

            if amount_tendered_cents < total:
                raise InsufficientPayment(
                    "Amount tendered is less than the sale total",
                    details={
                        "total_cents": total,
                        "amount_tendered_cents": amount_tendered_cents,
                        "shortfall_cents": total - amount_tendered_cents,
                    },
                )
        except LedgerError:
            ledger.rollback()
            raise

        invoice_number = ledger.next_invoice_number()

        try:
            for line in priced:
                ledger.mutate_stock(
                    line.product_id,
                    -line.quantity,
                    source=SOURCE_SALE,
                    reference=invoice_number,
                )
        except InsufficientStock as exc:
            ledger.rollback()
            exc.details.setdefault("invoice_number", invoice_number)
            raise
        except Exception:
            ledger.rollback()
            raise

        order = SalesOrder(
            invoice_number=invoice_number,
            operator_id=operator_id,
            subtotal_cents=subtotal,
            tax_cents=tax,
            total_cents=total,
            amount_tendered_cents=amount_tendered_cents,
            change_cents=amount_tendered_cents - total,
            lines=priced,
        )
        ledger.session.add(order)
        try:
            ledger.commit()
        except Exception:
            ledger.rollback()
            raise

        record = order.to_record()

    logger.info(
        "sale %s recorded: %d line(s), total %d cents, operator %s",
        record.invoice_number, len(record.lines), record.total_cents, record.operator_id,
    )
    return record


def get_sales_order(ledger: LedgerStore, sales_order_id) -> SalesOrderRecord:
    sales_order_id = coerce_int(sales_order_id, "sales_order_id")
    order = ledger.session.query(SalesOrder).filter_by(id=sales_order_id).first()
    if order is None:
        raise NotFound(f"Sales order {sales_order_id} not found", details={"sales_order_id": sales_order_id})
    return order.to_record()
