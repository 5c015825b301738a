# Overview: Flask API routes for product master data; parses input and returns JSON responses.

"""
Product Routes

Stock is read-only here: it changes only through sales, purchase order
receipts and inventory adjustments.
"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import LedgerError
from ..models import Product
from ..services import catalog_service, query_service
from ..services.ledger_store import get_ledger
from ..validation import ModelValidationPolicy, enforce_rules_product, validate_payload


products_bp = Blueprint("products", __name__, url_prefix="/api/products")

PRODUCT_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "code",
        "name",
        "category_id",
        "supplier_id",
        "unit_price_cents",
        "initial_stock",
        "reorder_level",
        "is_active",
    }),
    required_on_create=frozenset({"code", "name", "unit_price_cents"}),
    ledger_fields=frozenset({"stock"}),
)

PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset(catalog_service.PRODUCT_MUTABLE_FIELDS),
    ledger_fields=frozenset(catalog_service.PRODUCT_LEDGER_FIELDS),
)


@products_bp.get("")
def list_products_route():
    """
    List products with current stock.

    Query parameters:
    - active_only: Only active products (default: false)
    """
    active_only = request.args.get("active_only", "false").lower() == "true"
    products = query_service.list_products(get_ledger(), active_only=active_only)
    return jsonify({"items": [p.to_dict() for p in products], "count": len(products)})


@products_bp.get("/low-stock")
def list_low_stock_route():
    """Products at or below their reorder level."""
    products = query_service.list_low_stock_products(get_ledger())
    return jsonify({"items": [p.to_dict() for p in products], "count": len(products)})


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = get_ledger().get_product(product_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"product": product.to_dict()})


@products_bp.post("")
def create_product_route():
    """
    Create a product with its opening stock.

    Request body:
    {
        "code": "E001",              // required, unique
        "name": "Wireless Mouse",    // required
        "unit_price_cents": 25000,   // required
        "initial_stock": 50,
        "reorder_level": 10,
        "category_id": 1,
        "supplier_id": 1
    }
    """
    try:
        patch = validate_payload(
            model=Product,
            payload=request.get_json(silent=True),
            policy=PRODUCT_CREATE_POLICY,
            partial=False,
        )
        enforce_rules_product(patch)
        product = catalog_service.create_product(get_ledger(), **patch)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"product": product.to_dict()}), 201


@products_bp.patch("/<int:product_id>")
def update_product_route(product_id: int):
    """Update product master data (never stock)."""
    try:
        patch = validate_payload(
            model=Product,
            payload=request.get_json(silent=True),
            policy=PRODUCT_UPDATE_POLICY,
            partial=True,
        )
        enforce_rules_product(patch)
        product = catalog_service.update_product(get_ledger(), product_id, **patch)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"product": product.to_dict()})
