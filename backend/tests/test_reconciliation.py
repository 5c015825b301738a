# Overview: Pytest coverage for recomputing stock from history.

"""
Stock Reconciliation Tests

stock == initial_stock + adjustments - sold + received must hold after any
mix of successful and failed operations.
"""

import pytest
from sqlalchemy import update

from shopledger.errors import InsufficientPayment, InsufficientStock
from shopledger.models import Product
from shopledger.services import (
    adjustment_service,
    purchasing_service,
    reconciliation_service,
    sales_service,
)


def test_fresh_catalog_is_consistent(ledger, p1, p2, p3):
    assert reconciliation_service.verify_stock_invariant(ledger) == []


def test_mixed_operations_stay_consistent(ledger, supplier, p1, p2, p3):
    sales_service.process_sale(ledger, [(p1.id, 2), (p3.id, 10)], "u2", 10_000_000)
    with pytest.raises(InsufficientStock):
        sales_service.process_sale(ledger, [(p1.id, 1), (p2.id, 99)], "u2", 10_000_000)
    with pytest.raises(InsufficientPayment):
        sales_service.process_sale(ledger, [(p1.id, 1)], "u2", 1)

    received = purchasing_service.create_purchase_order(ledger, supplier.id, [(p2.id, 20, 90000)], "u3")
    purchasing_service.receive_purchase_order(ledger, received.id)
    purchasing_service.receive_purchase_order(ledger, received.id)

    pending = purchasing_service.create_purchase_order(ledger, supplier.id, [(p1.id, 5, 100)], "u3")
    cancelled = purchasing_service.create_purchase_order(ledger, supplier.id, [(p3.id, 7, 100)], "u3")
    purchasing_service.cancel_purchase_order(ledger, cancelled.id)

    adjustment_service.adjust_inventory(ledger, p3.id, -5, "damaged", "u3")
    with pytest.raises(InsufficientStock):
        adjustment_service.adjust_inventory(ledger, p3.id, -500, "recount", "u3")

    assert reconciliation_service.verify_stock_invariant(ledger) == []
    assert reconciliation_service.expected_stock(ledger, p1.id) == 48
    assert reconciliation_service.expected_stock(ledger, p2.id) == 25
    assert reconciliation_service.expected_stock(ledger, p3.id) == 85
    assert purchasing_service.get_purchase_order(ledger, pending.id).status == "PENDING"


def test_out_of_band_write_is_reported(ledger, p1, p2):
    ledger.session.execute(update(Product).where(Product.id == p1.id).values(stock=70))
    ledger.commit()

    discrepancies = reconciliation_service.verify_stock_invariant(ledger)
    assert len(discrepancies) == 1
    assert discrepancies[0].product_id == p1.id
    assert discrepancies[0].recorded_stock == 70
    assert discrepancies[0].expected_stock == 50
    assert discrepancies[0].drift == 20
