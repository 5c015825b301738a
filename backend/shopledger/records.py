# Overview: Immutable point-in-time snapshots returned by the ledger.

"""
Ledger records.

The ledger never hands out live ORM rows: every read accessor and every command
returns one of these frozen dataclasses, copied out of the session. Mutating a
record (or its line tuple) cannot reach ledger state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .time_utils import to_utc_z


@dataclass(frozen=True)
class CategoryRecord:
    id: int
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class SupplierRecord:
    id: int
    company_name: str
    contact_person: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    address: Optional[str]
    is_active: bool

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_name": self.company_name,
            "contact_person": self.contact_person,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class ProductRecord:
    id: int
    code: str
    name: str
    category_id: Optional[int]
    supplier_id: Optional[int]
    unit_price_cents: int
    stock: int
    initial_stock: int
    reorder_level: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.reorder_level

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "category_id": self.category_id,
            "supplier_id": self.supplier_id,
            "unit_price_cents": self.unit_price_cents,
            "stock": self.stock,
            "initial_stock": self.initial_stock,
            "reorder_level": self.reorder_level,
            "is_active": self.is_active,
            "is_low_stock": self.is_low_stock,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


@dataclass(frozen=True)
class SalesOrderLineRecord:
    product_id: int
    product_name: str
    quantity: int
    unit_price_cents: int
    line_total_cents: int

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }


@dataclass(frozen=True)
class SalesOrderRecord:
    id: int
    invoice_number: str
    sold_at: datetime
    operator_id: str
    subtotal_cents: int
    tax_cents: int
    total_cents: int
    amount_tendered_cents: int
    change_cents: int
    lines: tuple[SalesOrderLineRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "sold_at": to_utc_z(self.sold_at),
            "operator_id": self.operator_id,
            "subtotal_cents": self.subtotal_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
            "amount_tendered_cents": self.amount_tendered_cents,
            "change_cents": self.change_cents,
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass(frozen=True)
class PurchaseOrderLineRecord:
    product_id: int
    product_name: str
    quantity: int
    unit_cost_cents: int
    line_total_cents: int

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_cost_cents": self.unit_cost_cents,
            "line_total_cents": self.line_total_cents,
        }


@dataclass(frozen=True)
class PurchaseOrderRecord:
    id: int
    po_number: str
    supplier_id: int
    supplier_name: str
    status: str
    created_by_id: str
    ordered_at: datetime
    total_amount_cents: int
    received_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    lines: tuple[PurchaseOrderLineRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "po_number": self.po_number,
            "supplier_id": self.supplier_id,
            "supplier_name": self.supplier_name,
            "status": self.status,
            "created_by_id": self.created_by_id,
            "ordered_at": to_utc_z(self.ordered_at),
            "received_at": to_utc_z(self.received_at),
            "cancelled_at": to_utc_z(self.cancelled_at),
            "total_amount_cents": self.total_amount_cents,
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass(frozen=True)
class InventoryAdjustmentRecord:
    id: int
    product_id: int
    product_name: str
    quantity_delta: int
    reason: str
    operator_id: str
    adjusted_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity_delta": self.quantity_delta,
            "reason": self.reason,
            "operator_id": self.operator_id,
            "adjusted_at": to_utc_z(self.adjusted_at),
        }


@dataclass(frozen=True)
class StockMovementRecord:
    id: int
    product_id: int
    quantity_delta: int
    stock_after: int
    source: str
    reference: Optional[str]
    occurred_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "quantity_delta": self.quantity_delta,
            "stock_after": self.stock_after,
            "source": self.source,
            "reference": self.reference,
            "occurred_at": to_utc_z(self.occurred_at),
        }


@dataclass(frozen=True)
class ProductSales:
    product_name: str
    units_sold: int

    def to_dict(self) -> dict:
        return {"product": self.product_name, "sold": self.units_sold}


@dataclass(frozen=True)
class DashboardStats:
    today_sales: int
    revenue_cents: int
    total_products: int
    low_stock_count: int
    pending_purchase_orders: int
    inventory_value_cents: int
    total_revenue_cents: int

    def to_dict(self) -> dict:
        return {
            "today_sales": self.today_sales,
            "revenue_cents": self.revenue_cents,
            "total_products": self.total_products,
            "low_stock_count": self.low_stock_count,
            "pending_purchase_orders": self.pending_purchase_orders,
            "inventory_value_cents": self.inventory_value_cents,
            "total_revenue_cents": self.total_revenue_cents,
        }


@dataclass(frozen=True)
class StockDiscrepancy:
    product_id: int
    product_code: str
    recorded_stock: int
    expected_stock: int

    @property
    def drift(self) -> int:
        return self.recorded_stock - self.expected_stock

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_code": self.product_code,
            "recorded_stock": self.recorded_stock,
            "expected_stock": self.expected_stock,
            "drift": self.drift,
        }
