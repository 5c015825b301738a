# Overview: Pytest coverage for point-of-sale checkout.

"""
Sales Checkout Tests

Covers pricing and tax, payment and stock preconditions, all-or-nothing
rollback of multi-line sales, and invoice numbering across failures.
"""

import pytest

from shopledger.errors import InsufficientPayment, InsufficientStock, InvalidInput, NotFound
from shopledger.models import SalesOrder, StockMovement
from shopledger.services import catalog_service, sales_service
from shopledger.services.concurrency import ProductLocks
from shopledger.services.ledger_store import LedgerStore


class TestTax:
    def test_twelve_percent(self):
        assert sales_service.compute_tax_cents(50000, 1200) == 6000

    def test_rounds_half_up_to_the_cent(self):
        # 15.00, 0.48 and 0.50 cents before rounding
        assert sales_service.compute_tax_cents(125, 1200) == 15
        assert sales_service.compute_tax_cents(4, 1200) == 0
        assert sales_service.compute_tax_cents(5, 1000) == 1

    def test_zero_rate(self):
        assert sales_service.compute_tax_cents(99999, 0) == 0


class TestProcessSale:
    def test_single_line_sale(self, ledger, p1):
        order = sales_service.process_sale(ledger, [(p1.id, 2)], "u2", 60000)

        assert order.invoice_number == "INV-1001"
        assert order.subtotal_cents == 50000
        assert order.tax_cents == 6000
        assert order.total_cents == 56000
        assert order.amount_tendered_cents == 60000
        assert order.change_cents == 4000
        assert order.operator_id == "u2"
        assert len(order.lines) == 1
        assert order.lines[0].product_name == "Wireless Mouse"
        assert order.lines[0].unit_price_cents == 25000
        assert order.lines[0].line_total_cents == 50000

        assert ledger.get_product(p1.id).stock == 48

    def test_exact_payment_gives_zero_change(self, ledger, p1):
        order = sales_service.process_sale(ledger, [(p1.id, 2)], "u2", 56000)
        assert order.change_cents == 0

    def test_dict_lines_accepted(self, ledger, p1, p3):
        order = sales_service.process_sale(
            ledger,
            [{"product_id": p1.id, "quantity": 1}, {"product_id": p3.id, "quantity": 2}],
            "u2",
            200000,
        )
        assert order.subtotal_cents == 25000 + 2 * 45000
        assert ledger.get_product(p1.id).stock == 49
        assert ledger.get_product(p3.id).stock == 98

    def test_sale_writes_one_movement_per_line(self, ledger, p1, p3):
        order = sales_service.process_sale(ledger, [(p1.id, 1), (p3.id, 4)], "u2", 500000)

        movements = ledger.session.query(StockMovement).order_by(StockMovement.id).all()
        assert [(m.product_id, m.quantity_delta) for m in movements] == [(p1.id, -1), (p3.id, -4)]
        assert all(m.reference == order.invoice_number for m in movements)

    def test_duplicate_lines_are_kept_separately(self, ledger, p1):
        order = sales_service.process_sale(ledger, [(p1.id, 1), (p1.id, 2)], "u2", 100000)

        assert [line.quantity for line in order.lines] == [1, 2]
        assert ledger.get_product(p1.id).stock == 47

    def test_duplicate_lines_checked_against_combined_stock(self, ledger, p2):
        with pytest.raises(InsufficientStock):
            sales_service.process_sale(ledger, [(p2.id, 3), (p2.id, 3)], "u2", 10_000_000)
        assert ledger.get_product(p2.id).stock == 5

    def test_insufficient_payment_changes_nothing(self, ledger, p1):
        with pytest.raises(InsufficientPayment) as exc_info:
            sales_service.process_sale(ledger, [(p1.id, 2)], "u2", 55999)

        assert exc_info.value.details["total_cents"] == 56000
        assert exc_info.value.details["shortfall_cents"] == 1
        assert ledger.get_product(p1.id).stock == 50
        assert ledger.session.query(SalesOrder).count() == 0
        assert ledger.session.query(StockMovement).count() == 0

    def test_insufficient_payment_does_not_consume_invoice_number(self, ledger, p1):
        with pytest.raises(InsufficientPayment):
            sales_service.process_sale(ledger, [(p1.id, 2)], "u2", 100)

        order = sales_service.process_sale(ledger, [(p1.id, 2)], "u2", 60000)
        assert order.invoice_number == "INV-1001"

    def test_multi_line_sale_rolls_back_entirely(self, ledger, p1, p2):
        with pytest.raises(InsufficientStock) as exc_info:
            sales_service.process_sale(ledger, [(p1.id, 2), (p2.id, 6)], "u2", 10_000_000)

        assert exc_info.value.details["product_id"] == p2.id
        assert ledger.get_product(p1.id).stock == 50
        assert ledger.get_product(p2.id).stock == 5
        assert ledger.session.query(SalesOrder).count() == 0
        assert ledger.session.query(StockMovement).count() == 0

    def test_failed_sale_burns_its_invoice_number(self, ledger, p1, p2):
        with pytest.raises(InsufficientStock) as exc_info:
            sales_service.process_sale(ledger, [(p2.id, 6)], "u2", 10_000_000)
        assert exc_info.value.details["invoice_number"] == "INV-1001"

        order = sales_service.process_sale(ledger, [(p1.id, 1)], "u2", 30000)
        assert order.invoice_number == "INV-1002"

    def test_invoice_numbers_increase(self, ledger, p1):
        first = sales_service.process_sale(ledger, [(p1.id, 1)], "u2", 30000)
        second = sales_service.process_sale(ledger, [(p1.id, 1)], "u2", 30000)
        assert (first.invoice_number, second.invoice_number) == ("INV-1001", "INV-1002")

    def test_empty_cart_rejected(self, ledger):
        with pytest.raises(InvalidInput):
            sales_service.process_sale(ledger, [], "u2", 1000)

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "abc"])
    def test_bad_quantity_rejected(self, ledger, p1, quantity):
        with pytest.raises(InvalidInput):
            sales_service.process_sale(ledger, [(p1.id, quantity)], "u2", 1_000_000)
        assert ledger.get_product(p1.id).stock == 50

    def test_unknown_product_rejected(self, ledger, p1):
        with pytest.raises(NotFound):
            sales_service.process_sale(ledger, [(p1.id, 1), (999999, 1)], "u2", 1_000_000)
        assert ledger.get_product(p1.id).stock == 50

    def test_unknown_products_leave_no_locks_behind(self, ledger, p1):
        sales_service.process_sale(ledger, [(p1.id, 1)], "u2", 1_000_000)
        before = len(ledger.locks)

        for missing_id in range(900001, 900011):
            with pytest.raises(NotFound):
                sales_service.process_sale(ledger, [(p1.id, 1), (missing_id, 1)], "u2", 1_000_000)

        assert len(ledger.locks) == before
        assert ledger.get_product(p1.id).stock == 49

    @pytest.mark.parametrize("lines", [5, "E001", {"product_id": 1, "quantity": 1}])
    def test_lines_must_be_a_list(self, ledger, p1, lines):
        with pytest.raises(InvalidInput):
            sales_service.process_sale(ledger, lines, "u2", 1_000_000)

    def test_inactive_product_rejected(self, ledger, p1):
        catalog_service.update_product(ledger, p1.id, is_active=False)
        with pytest.raises(InvalidInput):
            sales_service.process_sale(ledger, [(p1.id, 1)], "u2", 1_000_000)

    def test_operator_required(self, ledger, p1):
        with pytest.raises(InvalidInput):
            sales_service.process_sale(ledger, [(p1.id, 1)], "", 1_000_000)

    def test_configured_tax_rate_used(self, db_session, p1):
        ledger = LedgerStore(db_session, ProductLocks(), tax_rate_bps=0)
        order = sales_service.process_sale(ledger, [(p1.id, 1)], "u2", 25000)
        assert order.tax_cents == 0
        assert order.change_cents == 0

    def test_sale_keeps_name_and_price_after_product_edit(self, ledger, p1):
        order = sales_service.process_sale(ledger, [(p1.id, 1)], "u2", 30000)
        catalog_service.update_product(ledger, p1.id, name="Wireless Mouse v2", unit_price_cents=99900)

        stored = sales_service.get_sales_order(ledger, order.id)
        assert stored.lines[0].product_name == "Wireless Mouse"
        assert stored.lines[0].unit_price_cents == 25000

    def test_get_unknown_sales_order(self, ledger):
        with pytest.raises(NotFound):
            sales_service.get_sales_order(ledger, 999999)
