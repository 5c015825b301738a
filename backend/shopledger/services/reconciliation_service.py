# Overview: Recomputes stock from history and reports any drift.

from __future__ import annotations

from sqlalchemy import func

from ..models import (
    InventoryAdjustment,
    Product,
    PurchaseOrder,
    PurchaseOrderLine,
    SalesOrderLine,
)
from ..models.purchasing import STATUS_RECEIVED
from ..records import StockDiscrepancy
from .ledger_store import LedgerStore

"""
Reconciliation (authoritative formula)

    expected = initial_stock
               + SUM(inventory_adjustments.quantity_delta)
               - SUM(sales_order_lines.quantity)
               + SUM(purchase_order_lines.quantity WHERE order is RECEIVED)

Pending and cancelled purchase orders never count. The stock movement journal
is not an input: it is derived from the same mutations and would hide a bug
that skipped both.
"""


def _sum_by_product(query) -> dict[int, int]:
    return {product_id: int(total or 0) for product_id, total in query.all()}


def _history_totals(ledger: LedgerStore) -> tuple[dict[int, int], dict[int, int], dict[int, int]]:
    session = ledger.session

    adjusted = _sum_by_product(
        session.query(InventoryAdjustment.product_id, func.sum(InventoryAdjustment.quantity_delta))
        .group_by(InventoryAdjustment.product_id)
    )
    sold = _sum_by_product(
        session.query(SalesOrderLine.product_id, func.sum(SalesOrderLine.quantity))
        .group_by(SalesOrderLine.product_id)
    )
    received = _sum_by_product(
        session.query(PurchaseOrderLine.product_id, func.sum(PurchaseOrderLine.quantity))
        .join(PurchaseOrder, PurchaseOrder.id == PurchaseOrderLine.purchase_order_id)
        .filter(PurchaseOrder.status == STATUS_RECEIVED)
        .group_by(PurchaseOrderLine.product_id)
    )
    return adjusted, sold, received


def expected_stock(ledger: LedgerStore, product_id) -> int:
    """Stock the histories say a product should have right now."""
    product = ledger.load_product(product_id)
    adjusted, sold, received = _history_totals(ledger)
    return (
        product.initial_stock
        + adjusted.get(product.id, 0)
        - sold.get(product.id, 0)
        + received.get(product.id, 0)
    )


def verify_stock_invariant(ledger: LedgerStore) -> list[StockDiscrepancy]:
    """
    Compare every product's stock with its history.

    Returns an empty list when the ledger is consistent.
    """
    adjusted, sold, received = _history_totals(ledger)

    discrepancies = []
    for product in ledger.session.query(Product).order_by(Product.id.asc()).all():
        expected = (
            product.initial_stock
            + adjusted.get(product.id, 0)
            - sold.get(product.id, 0)
            + received.get(product.id, 0)
        )
        if product.stock != expected:
            discrepancies.append(StockDiscrepancy(
                product_id=product.id,
                product_code=product.code,
                recorded_stock=product.stock,
                expected_stock=expected,
            ))
    return discrepancies
