from __future__ import annotations

from ..extensions import db
from ..records import PurchaseOrderLineRecord, PurchaseOrderRecord
from ..time_utils import utcnow


# Purchase order statuses
STATUS_PENDING = "PENDING"
STATUS_RECEIVED = "RECEIVED"
STATUS_CANCELLED = "CANCELLED"

PURCHASE_ORDER_STATUSES = (STATUS_PENDING, STATUS_RECEIVED, STATUS_CANCELLED)


class PurchaseOrder(db.Model):
    """
    Purchase order raised against a supplier.

    LIFECYCLE:
    1. PENDING: created, no stock effect
    2. RECEIVED: every line added to stock exactly once, received_at set
    3. CANCELLED: closed without stock effect
    RECEIVED and CANCELLED are terminal.
    """
    __tablename__ = "purchase_orders"
    __table_args__ = (
        db.Index("ix_purchase_orders_status_ordered", "status", "ordered_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable PO number (e.g., "PO-2001")
    po_number = db.Column(db.String(64), nullable=False, unique=True)

    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=False, index=True)
    supplier_name = db.Column(db.String(255), nullable=False)

    status = db.Column(db.String(16), nullable=False, default=STATUS_PENDING, index=True)
    created_by_id = db.Column(db.String(64), nullable=False)

    total_amount_cents = db.Column(db.Integer, nullable=False)

    ordered_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    received_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    lines = db.relationship(
        "PurchaseOrderLine",
        backref="purchase_order",
        order_by="PurchaseOrderLine.id",
        lazy="selectin",
    )

    def to_record(self) -> PurchaseOrderRecord:
        return PurchaseOrderRecord(
            id=self.id,
            po_number=self.po_number,
            supplier_id=self.supplier_id,
            supplier_name=self.supplier_name,
            status=self.status,
            created_by_id=self.created_by_id,
            ordered_at=self.ordered_at,
            total_amount_cents=self.total_amount_cents,
            received_at=self.received_at,
            cancelled_at=self.cancelled_at,
            lines=tuple(line.to_record() for line in self.lines),
        )


class PurchaseOrderLine(db.Model):
    """Ordered product, quantity and unit cost; product name is a snapshot."""
    __tablename__ = "purchase_order_lines"
    __table_args__ = (
        db.UniqueConstraint("purchase_order_id", "product_id", name="uq_po_lines_po_product"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    purchase_order_id = db.Column(db.Integer, db.ForeignKey("purchase_orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_cost_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_record(self) -> PurchaseOrderLineRecord:
        return PurchaseOrderLineRecord(
            product_id=self.product_id,
            product_name=self.product_name,
            quantity=self.quantity,
            unit_cost_cents=self.unit_cost_cents,
            line_total_cents=self.line_total_cents,
        )
