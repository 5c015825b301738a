# Overview: Flask API routes for purchase orders; parses input and returns JSON responses.

"""
Purchase Order Routes

LIFECYCLE: PENDING -> RECEIVED | CANCELLED
- POST /<id>/receive is safe to repeat: a RECEIVED order comes back unchanged.
- POST /<id>/cancel is safe to repeat on a CANCELLED order.
"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import LedgerError
from ..services import purchasing_service, query_service
from ..services.ledger_store import get_ledger
from ..validation import require_json_object


purchase_orders_bp = Blueprint("purchase_orders", __name__, url_prefix="/api/purchase-orders")


@purchase_orders_bp.get("")
def list_purchase_orders_route():
    """
    List purchase orders, most recent first.

    Query parameters:
    - status: PENDING, RECEIVED or CANCELLED
    """
    try:
        orders = query_service.list_purchase_orders(get_ledger(), status=request.args.get("status"))
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"items": [po.to_dict() for po in orders], "count": len(orders)})


@purchase_orders_bp.get("/<int:po_id>")
def get_purchase_order_route(po_id: int):
    try:
        po = purchasing_service.get_purchase_order(get_ledger(), po_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"purchase_order": po.to_dict()})


@purchase_orders_bp.post("")
def create_purchase_order_route():
    """
    Create a PENDING purchase order.

    Request body:
    {
        "supplier_id": 1,
        "creator_id": "u3",
        "lines": [{"product_id": 2, "quantity": 20, "unit_cost_cents": 90000}]
    }
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        po = purchasing_service.create_purchase_order(
            get_ledger(),
            data.get("supplier_id"),
            data.get("lines") or [],
            data.get("creator_id"),
        )
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create purchase order")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"purchase_order": po.to_dict()}), 201


@purchase_orders_bp.post("/<int:po_id>/receive")
def receive_purchase_order_route(po_id: int):
    try:
        po = purchasing_service.receive_purchase_order(get_ledger(), po_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to receive purchase order")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"purchase_order": po.to_dict()})


@purchase_orders_bp.post("/<int:po_id>/cancel")
def cancel_purchase_order_route(po_id: int):
    try:
        po = purchasing_service.cancel_purchase_order(get_ledger(), po_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to cancel purchase order")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"purchase_order": po.to_dict()})
