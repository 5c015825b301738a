# Overview: Flask API routes for suppliers and categories; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..errors import LedgerError
from ..models import Supplier, Category
from ..services import catalog_service
from ..services.ledger_store import get_ledger
from ..validation import ModelValidationPolicy, validate_payload


suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api")

SUPPLIER_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"company_name", "contact_person", "phone", "email", "address"}),
    required_on_create=frozenset({"company_name"}),
)

SUPPLIER_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset(catalog_service.SUPPLIER_MUTABLE_FIELDS),
)

CATEGORY_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name"}),
    required_on_create=frozenset({"name"}),
)


@suppliers_bp.get("/suppliers")
def list_suppliers_route():
    suppliers = catalog_service.list_suppliers(get_ledger())
    return jsonify({"items": [s.to_dict() for s in suppliers], "count": len(suppliers)})


@suppliers_bp.post("/suppliers")
def create_supplier_route():
    """
    Create a supplier.

    Request body:
    {
        "company_name": "Palawan Tech Solutions",  // required
        "contact_person": "...", "phone": "...", "email": "...", "address": "..."
    }
    """
    try:
        patch = validate_payload(
            model=Supplier,
            payload=request.get_json(silent=True),
            policy=SUPPLIER_CREATE_POLICY,
            partial=False,
        )
        supplier = catalog_service.create_supplier(get_ledger(), **patch)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create supplier")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"supplier": supplier.to_dict()}), 201


@suppliers_bp.patch("/suppliers/<int:supplier_id>")
def update_supplier_route(supplier_id: int):
    try:
        patch = validate_payload(
            model=Supplier,
            payload=request.get_json(silent=True),
            policy=SUPPLIER_UPDATE_POLICY,
            partial=True,
        )
        supplier = catalog_service.update_supplier(get_ledger(), supplier_id, **patch)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update supplier")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"supplier": supplier.to_dict()})


@suppliers_bp.get("/categories")
def list_categories_route():
    categories = catalog_service.list_categories(get_ledger())
    return jsonify({"items": [c.to_dict() for c in categories], "count": len(categories)})


@suppliers_bp.post("/categories")
def create_category_route():
    try:
        patch = validate_payload(
            model=Category,
            payload=request.get_json(silent=True),
            policy=CATEGORY_CREATE_POLICY,
            partial=False,
        )
        category = catalog_service.create_category(get_ledger(), patch["name"])
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create category")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"category": category.to_dict()}), 201
