from __future__ import annotations

from ..extensions import db
from ..records import InventoryAdjustmentRecord, StockMovementRecord
from ..time_utils import utcnow


# Stock movement sources, one per mutation path
SOURCE_SALE = "SALE"
SOURCE_RECEIPT = "RECEIPT"
SOURCE_ADJUSTMENT = "ADJUSTMENT"

MOVEMENT_SOURCES = (SOURCE_SALE, SOURCE_RECEIPT, SOURCE_ADJUSTMENT)


class InventoryAdjustment(db.Model):
    """Manual stock correction (found, damaged, ...). Append-only."""
    __tablename__ = "inventory_adjustments"
    __table_args__ = (
        db.Index("ix_inventory_adjustments_product_adjusted", "product_id", "adjusted_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    product_name = db.Column(db.String(255), nullable=False)

    quantity_delta = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(255), nullable=False)
    operator_id = db.Column(db.String(64), nullable=False)

    adjusted_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_record(self) -> InventoryAdjustmentRecord:
        return InventoryAdjustmentRecord(
            id=self.id,
            product_id=self.product_id,
            product_name=self.product_name,
            quantity_delta=self.quantity_delta,
            reason=self.reason,
            operator_id=self.operator_id,
            adjusted_at=self.adjusted_at,
        )


class StockMovement(db.Model):
    """
    Journal row written by every successful stock mutation.

    Written in the same unit of work as the stock change, so a rolled-back
    sale or receipt leaves no movement behind.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_product_occurred", "product_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)

    quantity_delta = db.Column(db.Integer, nullable=False)
    stock_after = db.Column(db.Integer, nullable=False)

    # SALE, RECEIPT, ADJUSTMENT
    source = db.Column(db.String(16), nullable=False, index=True)
    # Invoice number, PO number or adjustment reason
    reference = db.Column(db.String(255), nullable=True)

    occurred_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_record(self) -> StockMovementRecord:
        return StockMovementRecord(
            id=self.id,
            product_id=self.product_id,
            quantity_delta=self.quantity_delta,
            stock_after=self.stock_after,
            source=self.source,
            reference=self.reference,
            occurred_at=self.occurred_at,
        )
