from __future__ import annotations

from ..extensions import db
from ..records import CategoryRecord, ProductRecord, SupplierRecord
from ..time_utils import utcnow


class Category(db.Model):
    """Product grouping. Master data only; no stock side effects."""
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, unique=True)

    def to_record(self) -> CategoryRecord:
        return CategoryRecord(id=self.id, name=self.name)


class Supplier(db.Model):
    """Vendor that purchase orders are raised against."""
    __tablename__ = "suppliers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    company_name = db.Column(db.String(255), nullable=False)
    contact_person = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(512), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_record(self) -> SupplierRecord:
        return SupplierRecord(
            id=self.id,
            company_name=self.company_name,
            contact_person=self.contact_person,
            phone=self.phone,
            email=self.email,
            address=self.address,
            is_active=self.is_active,
        )


class Product(db.Model):
    """
    Product master data plus the canonical stock quantity.

    STOCK OWNERSHIP:
    - `stock` is written only by LedgerStore.mutate_stock (and once at creation).
    - `initial_stock` is the quantity given at creation and never changes; the
      reconciliation service recomputes stock from it and the three histories.
    - The CHECK constraint is a last line of defence; mutate_stock rejects
      negative results before they reach the database.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.CheckConstraint("unit_price_cents >= 0", name="ck_products_price_non_negative"),
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-entered SKU, unique across the store
    code = db.Column(db.String(64), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True, index=True)

    unit_price_cents = db.Column(db.Integer, nullable=False, default=0)

    stock = db.Column(db.Integer, nullable=False, default=0)
    initial_stock = db.Column(db.Integer, nullable=False, default=0)
    reorder_level = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    category = db.relationship("Category")
    supplier = db.relationship("Supplier")

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            id=self.id,
            code=self.code,
            name=self.name,
            category_id=self.category_id,
            supplier_id=self.supplier_id,
            unit_price_cents=self.unit_price_cents,
            stock=self.stock,
            initial_stock=self.initial_stock,
            reorder_level=self.reorder_level,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
