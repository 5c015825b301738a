# Overview: Flask API routes for point-of-sale checkout; parses input and returns JSON responses.

"""Sales API routes"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import LedgerError
from ..services import query_service, sales_service
from ..services.ledger_store import get_ledger
from ..validation import require_json_object


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
def list_sales_route():
    """
    List sales orders, most recent first.

    Query parameters:
    - limit: Maximum results (default: all)
    """
    limit = request.args.get("limit", type=int)
    if limit is not None and limit < 1:
        limit = 1
    orders = query_service.list_sales_orders(get_ledger(), limit=limit)
    return jsonify({"items": [o.to_dict() for o in orders], "count": len(orders)})


@sales_bp.get("/<int:sales_order_id>")
def get_sale_route(sales_order_id: int):
    try:
        order = sales_service.get_sales_order(get_ledger(), sales_order_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"sale": order.to_dict()})


@sales_bp.post("")
def process_sale_route():
    """
    Check out a cart.

    Request body:
    {
        "operator_id": "u2",
        "amount_tendered_cents": 60000,
        "lines": [{"product_id": 1, "quantity": 2}]
    }

    Errors: 400 invalid cart, 402 short payment, 404 unknown product,
    409 insufficient stock. Failed sales change nothing.
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        order = sales_service.process_sale(
            get_ledger(),
            data.get("lines") or [],
            data.get("operator_id"),
            data.get("amount_tendered_cents"),
        )
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to process sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"sale": order.to_dict()}), 201
