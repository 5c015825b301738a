# backend/shopledger/routes/inventory.py
"""
Inventory routes.

Adjustments are posted immediately; a negative delta larger than the stock on
hand is refused with 409 and changes nothing.
"""
from flask import Blueprint, current_app, jsonify, request

from ..errors import LedgerError
from ..services import adjustment_service, query_service
from ..services.ledger_store import get_ledger
from ..validation import require_json_object


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/adjustments")
def list_adjustments_route():
    """
    List adjustments, most recent first.

    Query parameters:
    - product_id: Only this product's adjustments
    """
    try:
        adjustments = query_service.list_adjustments(get_ledger(), product_id=request.args.get("product_id"))
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"items": [a.to_dict() for a in adjustments], "count": len(adjustments)})


@inventory_bp.post("/adjustments")
def adjust_inventory_route():
    """
    Adjust inventory (found, damaged, recount corrections).

    Request body:
    {
        "product_id": 3,
        "quantity_delta": -5,
        "reason": "damaged",
        "operator_id": "u3"
    }
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        adjustment = adjustment_service.adjust_inventory(
            get_ledger(),
            data.get("product_id"),
            data.get("quantity_delta"),
            data.get("reason"),
            data.get("operator_id"),
        )
        product = get_ledger().get_product(adjustment.product_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to adjust inventory")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"adjustment": adjustment.to_dict(), "product": product.to_dict()}), 201


@inventory_bp.get("/<int:product_id>/movements")
def list_movements_route(product_id: int):
    """
    Stock journal for a product, most recent first.

    Query parameters:
    - limit: Maximum results (default: 200, max: 1000)
    """
    limit = request.args.get("limit", 200, type=int)
    limit = max(1, min(limit, 1000))
    try:
        movements = query_service.list_stock_movements(get_ledger(), product_id, limit=limit)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"items": [m.to_dict() for m in movements], "count": len(movements)})
