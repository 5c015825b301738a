# Overview: Read-only ledger queries for dashboards, reports and the HTTP layer.

from __future__ import annotations

from datetime import date

from sqlalchemy import func

from ..errors import InvalidInput
from ..models import (
    InventoryAdjustment,
    Product,
    PurchaseOrder,
    SalesOrder,
    SalesOrderLine,
    StockMovement,
)
from ..models.purchasing import PURCHASE_ORDER_STATUSES, STATUS_PENDING
from ..records import (
    DashboardStats,
    InventoryAdjustmentRecord,
    ProductRecord,
    ProductSales,
    PurchaseOrderRecord,
    SalesOrderRecord,
    StockMovementRecord,
)
from ..time_utils import day_bounds, utcnow
from ..validation import coerce_int
from .ledger_store import LedgerStore


def list_products(ledger: LedgerStore, active_only: bool = False) -> list[ProductRecord]:
    """All products with their current stock, ordered by name."""
    query = ledger.session.query(Product)
    if active_only:
        query = query.filter(Product.is_active.is_(True))
    rows = query.order_by(Product.name.asc(), Product.id.asc()).all()
    return [p.to_record() for p in rows]


def list_low_stock_products(ledger: LedgerStore) -> list[ProductRecord]:
    """Products at or below their reorder level, lowest stock first."""
    rows = (
        ledger.session.query(Product)
        .filter(Product.stock <= Product.reorder_level)
        .order_by(Product.stock.asc(), Product.name.asc())
        .all()
    )
    return [p.to_record() for p in rows]


def list_sales_orders(ledger: LedgerStore, limit: int | None = None) -> list[SalesOrderRecord]:
    """Sales orders, most recent first."""
    query = ledger.session.query(SalesOrder).order_by(SalesOrder.sold_at.desc(), SalesOrder.id.desc())
    if limit is not None:
        query = query.limit(coerce_int(limit, "limit"))
    return [o.to_record() for o in query.all()]


def list_purchase_orders(ledger: LedgerStore, status: str | None = None) -> list[PurchaseOrderRecord]:
    """Purchase orders, most recent first, optionally filtered by status."""
    query = ledger.session.query(PurchaseOrder)
    if status is not None:
        status = status.upper()
        if status not in PURCHASE_ORDER_STATUSES:
            raise InvalidInput(f"status must be one of: {', '.join(PURCHASE_ORDER_STATUSES)}")
        query = query.filter(PurchaseOrder.status == status)
    rows = query.order_by(PurchaseOrder.ordered_at.desc(), PurchaseOrder.id.desc()).all()
    return [po.to_record() for po in rows]


def list_adjustments(ledger: LedgerStore, product_id=None) -> list[InventoryAdjustmentRecord]:
    """Inventory adjustments, most recent first."""
    query = ledger.session.query(InventoryAdjustment)
    if product_id is not None:
        query = query.filter(InventoryAdjustment.product_id == coerce_int(product_id, "product_id"))
    rows = query.order_by(InventoryAdjustment.adjusted_at.desc(), InventoryAdjustment.id.desc()).all()
    return [a.to_record() for a in rows]


def list_stock_movements(ledger: LedgerStore, product_id, limit: int = 200) -> list[StockMovementRecord]:
    """Stock journal for one product, most recent first."""
    product = ledger.load_product(product_id)
    rows = (
        ledger.session.query(StockMovement)
        .filter(StockMovement.product_id == product.id)
        .order_by(StockMovement.occurred_at.desc(), StockMovement.id.desc())
        .limit(limit)
        .all()
    )
    return [m.to_record() for m in rows]


def units_sold_by_product(ledger: LedgerStore) -> list[ProductSales]:
    """
    Units sold per product, best sellers first.

    Grouped by the product name captured on each sale line, so a product sold
    under two names shows up twice.
    """
    units = func.sum(SalesOrderLine.quantity)
    rows = (
        ledger.session.query(SalesOrderLine.product_name, units.label("units_sold"))
        .group_by(SalesOrderLine.product_name)
        .order_by(units.desc(), SalesOrderLine.product_name.asc())
        .all()
    )
    return [ProductSales(product_name=row.product_name, units_sold=int(row.units_sold)) for row in rows]


def inventory_value_cents(ledger: LedgerStore) -> int:
    """Stock on hand valued at current selling prices."""
    value = ledger.session.query(
        func.coalesce(func.sum(Product.stock * Product.unit_price_cents), 0)
    ).scalar()
    return int(value or 0)


def total_revenue_cents(ledger: LedgerStore) -> int:
    """Sum of every recorded sale total, tax included."""
    value = ledger.session.query(func.coalesce(func.sum(SalesOrder.total_cents), 0)).scalar()
    return int(value or 0)


def dashboard_stats(ledger: LedgerStore, today: date | None = None) -> DashboardStats:
    """Headline numbers for the store dashboard (UTC calendar day)."""
    today = today or utcnow().date()
    start, end = day_bounds(today)

    sales_row = (
        ledger.session.query(
            func.count(SalesOrder.id).label("count"),
            func.coalesce(func.sum(SalesOrder.total_cents), 0).label("revenue"),
        )
        .filter(SalesOrder.sold_at >= start, SalesOrder.sold_at <= end)
        .one()
    )

    total_products = ledger.session.query(func.count(Product.id)).scalar() or 0
    low_stock = (
        ledger.session.query(func.count(Product.id))
        .filter(Product.stock <= Product.reorder_level)
        .scalar()
        or 0
    )
    pending = (
        ledger.session.query(func.count(PurchaseOrder.id))
        .filter(PurchaseOrder.status == STATUS_PENDING)
        .scalar()
        or 0
    )

    return DashboardStats(
        today_sales=int(sales_row.count or 0),
        revenue_cents=int(sales_row.revenue or 0),
        total_products=int(total_products),
        low_stock_count=int(low_stock),
        pending_purchase_orders=int(pending),
        inventory_value_cents=inventory_value_cents(ledger),
        total_revenue_cents=total_revenue_cents(ledger),
    )
