from __future__ import annotations

from ..extensions import db
from ..records import SalesOrderLineRecord, SalesOrderRecord
from ..time_utils import utcnow


class SalesOrder(db.Model):
    """
    Completed point-of-sale transaction.

    IMMUTABLE: written once, in the same unit of work as its stock decrements,
    and never updated or deleted afterwards. All amounts in cents.
    """
    __tablename__ = "sales_orders"
    __table_args__ = (
        db.Index("ix_sales_orders_sold_at", "sold_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable invoice number (e.g., "INV-1001")
    invoice_number = db.Column(db.String(64), nullable=False, unique=True)

    sold_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    operator_id = db.Column(db.String(64), nullable=False)

    subtotal_cents = db.Column(db.Integer, nullable=False)
    tax_cents = db.Column(db.Integer, nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)
    amount_tendered_cents = db.Column(db.Integer, nullable=False)
    change_cents = db.Column(db.Integer, nullable=False)

    lines = db.relationship(
        "SalesOrderLine",
        backref="sales_order",
        order_by="SalesOrderLine.id",
        lazy="selectin",
    )

    def to_record(self) -> SalesOrderRecord:
        return SalesOrderRecord(
            id=self.id,
            invoice_number=self.invoice_number,
            sold_at=self.sold_at,
            operator_id=self.operator_id,
            subtotal_cents=self.subtotal_cents,
            tax_cents=self.tax_cents,
            total_cents=self.total_cents,
            amount_tendered_cents=self.amount_tendered_cents,
            change_cents=self.change_cents,
            lines=tuple(line.to_record() for line in self.lines),
        )


class SalesOrderLine(db.Model):
    """Sale line; product name and unit price are snapshots taken at checkout."""
    __tablename__ = "sales_order_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sales_order_id = db.Column(db.Integer, db.ForeignKey("sales_orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_record(self) -> SalesOrderLineRecord:
        return SalesOrderLineRecord(
            product_id=self.product_id,
            product_name=self.product_name,
            quantity=self.quantity,
            unit_price_cents=self.unit_price_cents,
            line_total_cents=self.line_total_cents,
        )
