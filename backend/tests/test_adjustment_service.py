# Overview: Pytest coverage for manual inventory adjustments.

import pytest

from shopledger.errors import InsufficientStock, InvalidInput, NotFound
from shopledger.models import InventoryAdjustment, StockMovement
from shopledger.models.inventory import SOURCE_ADJUSTMENT
from shopledger.services import adjustment_service


class TestAdjustInventory:
    def test_negative_adjustment(self, ledger, p3):
        adjustment = adjustment_service.adjust_inventory(ledger, p3.id, -5, "damaged", "u3")

        assert adjustment.quantity_delta == -5
        assert adjustment.reason == "damaged"
        assert adjustment.operator_id == "u3"
        assert adjustment.product_name == "Organic Coffee Beans"
        assert ledger.get_product(p3.id).stock == 95

    def test_adjustment_below_zero_changes_nothing(self, ledger, p3):
        adjustment_service.adjust_inventory(ledger, p3.id, -5, "damaged", "u3")

        with pytest.raises(InsufficientStock):
            adjustment_service.adjust_inventory(ledger, p3.id, -500, "recount", "u3")

        assert ledger.get_product(p3.id).stock == 95
        assert ledger.session.query(InventoryAdjustment).filter_by(product_id=p3.id).count() == 1

    def test_positive_adjustment(self, ledger, p2):
        adjustment_service.adjust_inventory(ledger, p2.id, 3, "found in back room", "u3")
        assert ledger.get_product(p2.id).stock == 8

    def test_adjustment_journals_reason(self, ledger, p2):
        adjustment_service.adjust_inventory(ledger, p2.id, 2, "found", "u3")

        movement = ledger.session.query(StockMovement).filter_by(product_id=p2.id).one()
        assert movement.source == SOURCE_ADJUSTMENT
        assert movement.reference == "found"
        assert movement.stock_after == 7

    def test_zero_delta_rejected(self, ledger, p2):
        with pytest.raises(InvalidInput):
            adjustment_service.adjust_inventory(ledger, p2.id, 0, "nothing", "u3")

    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_reason_required(self, ledger, p2, reason):
        with pytest.raises(InvalidInput):
            adjustment_service.adjust_inventory(ledger, p2.id, 1, reason, "u3")
        assert ledger.get_product(p2.id).stock == 5

    def test_reason_too_long(self, ledger, p2):
        with pytest.raises(InvalidInput):
            adjustment_service.adjust_inventory(ledger, p2.id, 1, "x" * 256, "u3")

    def test_reason_is_trimmed(self, ledger, p2):
        adjustment = adjustment_service.adjust_inventory(ledger, p2.id, 1, "  recount  ", "u3")
        assert adjustment.reason == "recount"

    def test_unknown_product(self, ledger):
        with pytest.raises(NotFound):
            adjustment_service.adjust_inventory(ledger, 999999, 1, "found", "u3")

    def test_unknown_product_leaves_no_lock_behind(self, ledger):
        before = len(ledger.locks)
        for missing_id in (999997, 999998, 999999):
            with pytest.raises(NotFound):
                adjustment_service.adjust_inventory(ledger, missing_id, 1, "found", "u3")
        assert len(ledger.locks) == before
