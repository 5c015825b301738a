# backend/shopledger/services/catalog_service.py
"""
Catalog Service - categories, suppliers, products

Master data the ledger references. Nothing here changes stock except the
initial quantity a product is created with.

STOCK IS NOT EDITABLE HERE:
- `stock` and `initial_stock` are rejected by update_product.
- Corrections go through adjustment_service so they leave an audit record.
"""
from __future__ import annotations

import logging

from ..errors import Conflict, InvalidInput, NotFound
from ..models import Category, Product, Supplier
from ..records import CategoryRecord, ProductRecord, SupplierRecord
from ..validation import (
    MAX_PRICE_CENTS,
    coerce_int,
    require_non_negative_int,
    require_text,
)
from .ledger_store import LedgerStore

logger = logging.getLogger(__name__)

PRODUCT_MUTABLE_FIELDS = {
    "code",
    "name",
    "category_id",
    "supplier_id",
    "unit_price_cents",
    "reorder_level",
    "is_active",
}
PRODUCT_LEDGER_FIELDS = {"stock", "initial_stock"}

SUPPLIER_MUTABLE_FIELDS = {"company_name", "contact_person", "phone", "email", "address", "is_active"}


def _commit(ledger: LedgerStore) -> None:
    try:
        ledger.commit()
    except Exception:
        ledger.rollback()
        raise


def _require_category(ledger: LedgerStore, category_id) -> int | None:
    if category_id is None:
        return None
    category_id = coerce_int(category_id, "category_id")
    if ledger.session.get(Category, category_id) is None:
        raise NotFound(f"Category {category_id} not found", details={"category_id": category_id})
    return category_id


def _require_supplier(ledger: LedgerStore, supplier_id) -> int | None:
    if supplier_id is None:
        return None
    supplier_id = coerce_int(supplier_id, "supplier_id")
    if ledger.session.get(Supplier, supplier_id) is None:
        raise NotFound(f"Supplier {supplier_id} not found", details={"supplier_id": supplier_id})
    return supplier_id


def _require_price(value) -> int:
    price = require_non_negative_int(value, "unit_price_cents")
    if price > MAX_PRICE_CENTS:
        raise InvalidInput(f"unit_price_cents cannot exceed {MAX_PRICE_CENTS}")
    return price


def _ensure_code_free(ledger: LedgerStore, code: str, *, exclude_id: int | None = None) -> None:
    query = ledger.session.query(Product).filter(Product.code == code)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first() is not None:
        raise Conflict(f"Product code {code} already exists", details={"code": code})


# =============================================================================
# Categories
# =============================================================================

def create_category(ledger: LedgerStore, name) -> CategoryRecord:
    name = require_text(name, "name")
    if ledger.session.query(Category).filter_by(name=name).first() is not None:
        raise Conflict(f"Category {name} already exists", details={"name": name})
    category = Category(name=name)
    ledger.session.add(category)
    _commit(ledger)
    return category.to_record()


def list_categories(ledger: LedgerStore) -> list[CategoryRecord]:
    rows = ledger.session.query(Category).order_by(Category.name.asc(), Category.id.asc()).all()
    return [c.to_record() for c in rows]


# =============================================================================
# Suppliers
# =============================================================================

def create_supplier(
    ledger: LedgerStore,
    company_name,
    contact_person: str | None = None,
    phone: str | None = None,
    email: str | None = None,
    address: str | None = None,
) -> SupplierRecord:
    supplier = Supplier(
        company_name=require_text(company_name, "company_name"),
        contact_person=contact_person,
        phone=phone,
        email=email,
        address=address,
        is_active=True,
    )
    ledger.session.add(supplier)
    _commit(ledger)
    logger.info("supplier %s created: %s", supplier.id, supplier.company_name)
    return supplier.to_record()


def update_supplier(ledger: LedgerStore, supplier_id, **fields) -> SupplierRecord:
    """
    Update supplier contact details.

    Purchase orders keep the company name they were created with.
    """
    unknown = set(fields) - SUPPLIER_MUTABLE_FIELDS
    if unknown:
        raise InvalidInput(f"Field not allowed: {', '.join(sorted(unknown))}")

    supplier_id = coerce_int(supplier_id, "supplier_id")
    supplier = ledger.session.get(Supplier, supplier_id)
    if supplier is None:
        raise NotFound(f"Supplier {supplier_id} not found", details={"supplier_id": supplier_id})

    if "company_name" in fields:
        fields["company_name"] = require_text(fields["company_name"], "company_name")
    for key, value in fields.items():
        setattr(supplier, key, value)

    _commit(ledger)
    return supplier.to_record()


def list_suppliers(ledger: LedgerStore) -> list[SupplierRecord]:
    rows = ledger.session.query(Supplier).order_by(Supplier.company_name.asc(), Supplier.id.asc()).all()
    return [s.to_record() for s in rows]


def get_supplier(ledger: LedgerStore, supplier_id) -> SupplierRecord:
    supplier_id = coerce_int(supplier_id, "supplier_id")
    supplier = ledger.session.get(Supplier, supplier_id)
    if supplier is None:
        raise NotFound(f"Supplier {supplier_id} not found", details={"supplier_id": supplier_id})
    return supplier.to_record()


# =============================================================================
# Products
# =============================================================================

def create_product(
    ledger: LedgerStore,
    code,
    name,
    unit_price_cents,
    initial_stock=0,
    reorder_level=0,
    category_id=None,
    supplier_id=None,
    is_active: bool = True,
) -> ProductRecord:
    """
    Create a product with its opening stock.

    The opening quantity is stored twice: as the live `stock` and as the
    immutable `initial_stock` the reconciliation starts from.
    """
    code = require_text(code, "code")
    name = require_text(name, "name")
    price = _require_price(unit_price_cents)
    opening = require_non_negative_int(initial_stock, "initial_stock")
    reorder = require_non_negative_int(reorder_level, "reorder_level")

    try:
        category_id = _require_category(ledger, category_id)
        supplier_id = _require_supplier(ledger, supplier_id)
        _ensure_code_free(ledger, code)
    except Exception:
        ledger.rollback()
        raise

    product = Product(
        code=code,
        name=name,
        category_id=category_id,
        supplier_id=supplier_id,
        unit_price_cents=price,
        stock=opening,
        initial_stock=opening,
        reorder_level=reorder,
        is_active=bool(is_active),
    )
    ledger.session.add(product)
    _commit(ledger)
    logger.info("product %s created: %s with opening stock %d", product.id, product.code, opening)
    return product.to_record()


def update_product(ledger: LedgerStore, product_id, **fields) -> ProductRecord:
    """
    Patch product master data.

    Renames do not touch history: sales, purchase orders and adjustments keep
    the product name they were recorded with.

    Raises:
        InvalidInput: attempt to write stock/initial_stock, unknown field, bad value
        NotFound: unknown product, category or supplier
        Conflict: code already used by another product
    """
    ledger_fields = PRODUCT_LEDGER_FIELDS & set(fields)
    if ledger_fields:
        raise InvalidInput(
            "Stock can only change through sales, receipts and adjustments",
            details={"fields": sorted(ledger_fields)},
        )
    unknown = set(fields) - PRODUCT_MUTABLE_FIELDS
    if unknown:
        raise InvalidInput(f"Field not allowed: {', '.join(sorted(unknown))}")

    patch = dict(fields)
    if "code" in patch:
        patch["code"] = require_text(patch["code"], "code")
    if "name" in patch:
        patch["name"] = require_text(patch["name"], "name")
    if "unit_price_cents" in patch:
        patch["unit_price_cents"] = _require_price(patch["unit_price_cents"])
    if "reorder_level" in patch:
        patch["reorder_level"] = require_non_negative_int(patch["reorder_level"], "reorder_level")
    if "is_active" in patch:
        patch["is_active"] = bool(patch["is_active"])

    product_id = coerce_int(product_id, "product_id")
    with ledger.lock_products([product_id]):
        try:
            product = ledger.load_product(product_id, lock=True)
            if "category_id" in patch:
                patch["category_id"] = _require_category(ledger, patch["category_id"])
            if "supplier_id" in patch:
                patch["supplier_id"] = _require_supplier(ledger, patch["supplier_id"])
            if "code" in patch:
                _ensure_code_free(ledger, patch["code"], exclude_id=product.id)

            for key, value in patch.items():
                setattr(product, key, value)
            ledger.commit()
        except Exception:
            ledger.rollback()
            raise

        return product.to_record()
