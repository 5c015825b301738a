# Overview: Service-layer operations for purchase orders; encapsulates business logic.

"""
Purchase Order Service

LIFECYCLE:
1. PENDING: Created with lines, records intent only (no stock effect)
2. RECEIVED: Every line added to stock exactly once, received_at set
3. CANCELLED: Closed without stock effect

IDEMPOTENT:
- Receiving a RECEIVED order returns it unchanged (duplicate click / retry).
- Cancelling a CANCELLED order returns it unchanged.

DESIGN:
- Supplier is REQUIRED and its company name is snapshotted on the order.
- A product may appear on at most one line per order; a duplicate line is
  rejected rather than merged or dropped.
- Receiving holds the order row and every line product, applies all
  increments and flips the status in one commit. No partial receipt is ever
  visible.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..errors import InvalidInput, InvalidStateTransition, LedgerError, NotFound
from ..models import Product, PurchaseOrder, PurchaseOrderLine, Supplier
from ..models.inventory import SOURCE_RECEIPT
from ..models.purchasing import STATUS_CANCELLED, STATUS_PENDING, STATUS_RECEIVED
from ..records import PurchaseOrderRecord
from ..time_utils import utcnow
from ..validation import coerce_int, require_non_negative_int, require_positive_int, require_text
from .concurrency import lock_for_update
from .ledger_store import LedgerStore

logger = logging.getLogger(__name__)


def _normalize_lines(lines: Sequence) -> list[tuple[int, int, int]]:
    if lines is not None and not isinstance(lines, (list, tuple)):
        raise InvalidInput("lines must be a list")
    if not lines:
        raise InvalidInput("Cannot create a purchase order with no lines")

    normalized = []
    seen: set[int] = set()
    for i, line in enumerate(lines):
        if isinstance(line, dict):
            raw = (line.get("product_id"), line.get("quantity"), line.get("unit_cost_cents"))
        else:
            raw = tuple(line) if isinstance(line, (list, tuple)) else ()
        if len(raw) != 3:
            raise InvalidInput(f"Line {i + 1} must be a (product_id, quantity, unit_cost_cents) triple")

        product_id = coerce_int(raw[0], f"lines[{i}].product_id")
        quantity = require_positive_int(raw[1], f"lines[{i}].quantity")
        unit_cost = require_non_negative_int(raw[2], f"lines[{i}].unit_cost_cents")

        if product_id in seen:
            raise InvalidInput(
                f"Product {product_id} appears on more than one line",
                details={"product_id": product_id, "line": i + 1},
            )
        seen.add(product_id)
        normalized.append((product_id, quantity, unit_cost))
    return normalized


def _load_order(ledger: LedgerStore, po_id, *, lock: bool = False) -> PurchaseOrder:
    po_id = coerce_int(po_id, "po_id")
    query = ledger.session.query(PurchaseOrder).filter_by(id=po_id).populate_existing()
    if lock:
        query = lock_for_update(query)
    po = query.first()
    if po is None:
        raise NotFound(f"Purchase order {po_id} not found", details={"po_id": po_id})
    return po


def create_purchase_order(
    ledger: LedgerStore,
    supplier_id,
    lines: Sequence,
    creator_id,
) -> PurchaseOrderRecord:
    """
    Create a PENDING purchase order.

    Args:
        ledger: Ledger handle
        supplier_id: Supplier the order is raised against (REQUIRED)
        lines: (product_id, quantity, unit_cost_cents) triples or dicts
        creator_id: User creating the order

    Raises:
        NotFound: unknown supplier or product
        InvalidInput: empty lines, bad quantity/cost, duplicate product line
    """
    supplier_id = coerce_int(supplier_id, "supplier_id")
    normalized = _normalize_lines(lines)
    creator_id = require_text(creator_id, "creator_id")

    try:
        supplier = ledger.session.query(Supplier).filter_by(id=supplier_id).first()
        if supplier is None:
            raise NotFound(f"Supplier {supplier_id} not found", details={"supplier_id": supplier_id})

        po_lines = []
        for product_id, quantity, unit_cost in normalized:
            product = ledger.session.query(Product).filter_by(id=product_id).first()
            if product is None:
                raise NotFound(f"Product {product_id} not found", details={"product_id": product_id})
            po_lines.append(PurchaseOrderLine(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_cost_cents=unit_cost,
                line_total_cents=quantity * unit_cost,
            ))
        supplier_name = supplier.company_name
    except LedgerError:
        ledger.rollback()
        raise

    po_number = ledger.next_po_number()

    po = PurchaseOrder(
        po_number=po_number,
        supplier_id=supplier_id,
        supplier_name=supplier_name,
        status=STATUS_PENDING,
        created_by_id=creator_id,
        total_amount_cents=sum(line.line_total_cents for line in po_lines),
        lines=po_lines,
    )
    ledger.session.add(po)
    try:
        ledger.commit()
    except Exception:
        ledger.rollback()
        raise

    record = po.to_record()
    logger.info(
        "purchase order %s created for supplier %s: %d line(s), %d cents",
        record.po_number, record.supplier_id, len(record.lines), record.total_amount_cents,
    )
    return record


def get_purchase_order(ledger: LedgerStore, po_id) -> PurchaseOrderRecord:
    return _load_order(ledger, po_id).to_record()


def receive_purchase_order(ledger: LedgerStore, po_id) -> PurchaseOrderRecord:
    """
    Receive a purchase order into stock, exactly once.

    Returns:
        The RECEIVED order. An already RECEIVED order is returned unchanged.

    Raises:
        NotFound: unknown order
        InvalidStateTransition: order is CANCELLED
    """
    # Line products never change after creation; read them outside the locks
    product_ids = [line.product_id for line in _load_order(ledger, po_id).lines]

    with ledger.lock_products(product_ids):
        try:
            po = _load_order(ledger, po_id, lock=True)

            if po.status == STATUS_RECEIVED:
                return po.to_record()

            if po.status == STATUS_CANCELLED:
                raise InvalidStateTransition(
                    f"Cannot receive {po.status} purchase order {po.po_number}",
                    details={"po_id": po.id, "status": po.status},
                )

            for line in po.lines:
                ledger.mutate_stock(
                    line.product_id,
                    line.quantity,
                    source=SOURCE_RECEIPT,
                    reference=po.po_number,
                )

            po.status = STATUS_RECEIVED
            po.received_at = utcnow()
            ledger.commit()
        except Exception:
            ledger.rollback()
            raise

        record = po.to_record()

    logger.info("purchase order %s received: %d line(s)", record.po_number, len(record.lines))
    return record


def cancel_purchase_order(ledger: LedgerStore, po_id) -> PurchaseOrderRecord:
    """
    Cancel a PENDING purchase order. No stock effect.

    An already CANCELLED order is returned unchanged; a RECEIVED order raises
    InvalidStateTransition.
    """
    # Same locks as receive, so a cancel can never interleave with a receipt
    product_ids = [line.product_id for line in _load_order(ledger, po_id).lines]

    with ledger.lock_products(product_ids):
        try:
            po = _load_order(ledger, po_id, lock=True)

            if po.status == STATUS_CANCELLED:
                return po.to_record()

            if po.status == STATUS_RECEIVED:
                raise InvalidStateTransition(
                    f"Cannot cancel {po.status} purchase order {po.po_number}",
                    details={"po_id": po.id, "status": po.status},
                )

            po.status = STATUS_CANCELLED
            po.cancelled_at = utcnow()
            ledger.commit()
        except Exception:
            ledger.rollback()
            raise

        record = po.to_record()
    logger.info("purchase order %s cancelled", record.po_number)
    return record
