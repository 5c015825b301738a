# Overview: Pytest coverage for the purchase order lifecycle.

"""
Purchase Order Lifecycle Tests

PENDING -> RECEIVED adds stock exactly once; PENDING -> CANCELLED never
touches stock; every other transition is refused.
"""

import pytest

from shopledger.errors import InvalidInput, InvalidStateTransition, NotFound
from shopledger.models import StockMovement
from shopledger.models.purchasing import STATUS_CANCELLED, STATUS_PENDING, STATUS_RECEIVED
from shopledger.services import catalog_service, purchasing_service


@pytest.fixture
def pending_po(ledger, supplier, p2):
    return purchasing_service.create_purchase_order(ledger, supplier.id, [(p2.id, 20, 90000)], "u3")


class TestCreatePurchaseOrder:
    def test_create_records_intent_only(self, ledger, supplier, p2):
        po = purchasing_service.create_purchase_order(ledger, supplier.id, [(p2.id, 20, 90000)], "u3")

        assert po.po_number == "PO-2001"
        assert po.status == STATUS_PENDING
        assert po.total_amount_cents == 1800000
        assert po.supplier_name == "Palawan Tech Solutions"
        assert po.created_by_id == "u3"
        assert po.received_at is None
        assert po.lines[0].product_name == "Mechanical Keyboard"
        assert po.lines[0].line_total_cents == 1800000

        assert ledger.get_product(p2.id).stock == 5

    def test_total_is_sum_of_lines(self, ledger, supplier, p1, p2):
        po = purchasing_service.create_purchase_order(
            ledger,
            supplier.id,
            [{"product_id": p1.id, "quantity": 3, "unit_cost_cents": 1000},
             {"product_id": p2.id, "quantity": 2, "unit_cost_cents": 0}],
            "u3",
        )
        assert po.total_amount_cents == 3000

    def test_po_numbers_increase(self, ledger, supplier, p2):
        first = purchasing_service.create_purchase_order(ledger, supplier.id, [(p2.id, 1, 1)], "u3")
        second = purchasing_service.create_purchase_order(ledger, supplier.id, [(p2.id, 1, 1)], "u3")
        assert (first.po_number, second.po_number) == ("PO-2001", "PO-2002")

    def test_unknown_supplier(self, ledger, p2):
        with pytest.raises(NotFound):
            purchasing_service.create_purchase_order(ledger, 999999, [(p2.id, 1, 1)], "u3")

    def test_unknown_product(self, ledger, supplier):
        with pytest.raises(NotFound):
            purchasing_service.create_purchase_order(ledger, supplier.id, [(999999, 1, 1)], "u3")

    @pytest.mark.parametrize("lines", [3, "E002"])
    def test_lines_must_be_a_list(self, ledger, supplier, lines):
        with pytest.raises(InvalidInput):
            purchasing_service.create_purchase_order(ledger, supplier.id, lines, "u3")

    def test_empty_lines(self, ledger, supplier):
        with pytest.raises(InvalidInput):
            purchasing_service.create_purchase_order(ledger, supplier.id, [], "u3")

    @pytest.mark.parametrize("quantity,cost", [(0, 100), (-2, 100), (1, -1)])
    def test_bad_quantity_or_cost(self, ledger, supplier, p2, quantity, cost):
        with pytest.raises(InvalidInput):
            purchasing_service.create_purchase_order(ledger, supplier.id, [(p2.id, quantity, cost)], "u3")

    def test_duplicate_product_lines_rejected(self, ledger, supplier, p2):
        with pytest.raises(InvalidInput) as exc_info:
            purchasing_service.create_purchase_order(
                ledger, supplier.id, [(p2.id, 1, 100), (p2.id, 2, 100)], "u3"
            )
        assert exc_info.value.details["product_id"] == p2.id

    def test_supplier_name_is_a_snapshot(self, ledger, supplier, pending_po):
        catalog_service.update_supplier(ledger, supplier.id, company_name="PTS Holdings")
        po = purchasing_service.get_purchase_order(ledger, pending_po.id)
        assert po.supplier_name == "Palawan Tech Solutions"


class TestReceivePurchaseOrder:
    def test_receive_adds_stock(self, ledger, pending_po, p2):
        po = purchasing_service.receive_purchase_order(ledger, pending_po.id)

        assert po.status == STATUS_RECEIVED
        assert po.received_at is not None
        assert ledger.get_product(p2.id).stock == 25

    def test_receive_twice_adds_stock_once(self, ledger, pending_po, p2):
        first = purchasing_service.receive_purchase_order(ledger, pending_po.id)
        second = purchasing_service.receive_purchase_order(ledger, pending_po.id)

        assert second.status == STATUS_RECEIVED
        assert second.received_at == first.received_at
        assert ledger.get_product(p2.id).stock == 25
        assert ledger.session.query(StockMovement).filter_by(product_id=p2.id).count() == 1

    def test_receive_multi_line(self, ledger, supplier, p1, p2):
        po = purchasing_service.create_purchase_order(
            ledger, supplier.id, [(p1.id, 10, 100), (p2.id, 4, 100)], "u3"
        )
        purchasing_service.receive_purchase_order(ledger, po.id)

        assert ledger.get_product(p1.id).stock == 60
        assert ledger.get_product(p2.id).stock == 9

    def test_receive_cancelled_fails(self, ledger, pending_po, p2):
        purchasing_service.cancel_purchase_order(ledger, pending_po.id)

        with pytest.raises(InvalidStateTransition):
            purchasing_service.receive_purchase_order(ledger, pending_po.id)
        assert ledger.get_product(p2.id).stock == 5

    def test_receive_unknown(self, ledger):
        with pytest.raises(NotFound):
            purchasing_service.receive_purchase_order(ledger, 999999)


class TestCancelPurchaseOrder:
    def test_cancel_pending(self, ledger, pending_po, p2):
        po = purchasing_service.cancel_purchase_order(ledger, pending_po.id)

        assert po.status == STATUS_CANCELLED
        assert po.cancelled_at is not None
        assert ledger.get_product(p2.id).stock == 5

    def test_cancel_twice_is_a_no_op(self, ledger, pending_po):
        first = purchasing_service.cancel_purchase_order(ledger, pending_po.id)
        second = purchasing_service.cancel_purchase_order(ledger, pending_po.id)
        assert second.status == STATUS_CANCELLED
        assert second.cancelled_at == first.cancelled_at

    def test_cancel_received_fails(self, ledger, pending_po, p2):
        purchasing_service.receive_purchase_order(ledger, pending_po.id)

        with pytest.raises(InvalidStateTransition):
            purchasing_service.cancel_purchase_order(ledger, pending_po.id)

        assert purchasing_service.get_purchase_order(ledger, pending_po.id).status == STATUS_RECEIVED
        assert ledger.get_product(p2.id).stock == 25
