# Overview: Flask API routes for read-only ledger reports; returns JSON responses.

from flask import Blueprint, jsonify

from ..services import query_service, reconciliation_service
from ..services.ledger_store import get_ledger


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/units-sold")
def units_sold_route():
    """Units sold per product name, best sellers first."""
    rows = query_service.units_sold_by_product(get_ledger())
    return jsonify({"items": [r.to_dict() for r in rows], "count": len(rows)})


@reports_bp.get("/dashboard")
def dashboard_route():
    stats = query_service.dashboard_stats(get_ledger())
    return jsonify({"stats": stats.to_dict()})


@reports_bp.get("/reconciliation")
def reconciliation_route():
    """
    Stock vs. history check.

    Returns consistent=true and no items when every product's stock equals
    its opening stock plus adjustments, minus sales, plus receipts.
    """
    discrepancies = reconciliation_service.verify_stock_invariant(get_ledger())
    return jsonify({
        "consistent": not discrepancies,
        "items": [d.to_dict() for d in discrepancies],
        "count": len(discrepancies),
    })
