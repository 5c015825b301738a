# Overview: The ledger store; owns stock and the single stock-mutation primitive.

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from flask import current_app, g
from sqlalchemy import update

from ..errors import InsufficientStock, InvalidInput, NotFound
from ..extensions import db, LEDGER_EXTENSION_KEY
from ..models import Product, StockMovement
from ..models.inventory import MOVEMENT_SOURCES
from ..models.sequences import SEQUENCE_INVOICE, SEQUENCE_PURCHASE_ORDER
from ..records import ProductRecord
from ..time_utils import utcnow
from ..validation import coerce_int
from .concurrency import ProductLocks, lock_for_update
from .sequence_service import allocate_document_number

"""
Ledger Invariants (authoritative)

- Product.stock is the canonical quantity on hand. mutate_stock is the only
  code path that changes it after creation.
- For every product:
    stock == initial_stock + sum(adjustment deltas) - sum(sold quantities)
             + sum(received purchase order quantities)
- Stock never drops below zero after a successful operation. A rejected
  mutation leaves no trace (no stock change, no movement row).
- Every applied mutation appends one StockMovement in the same unit of work.
- At most one in-flight mutation per product id (ProductLocks); multi-line
  operations hold every product they touch for the whole operation.
- Callers get frozen records, never live ORM rows.
"""

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE_BPS = 1200
DEFAULT_INVOICE_NUMBER_BASE = 1000
DEFAULT_PO_NUMBER_BASE = 2000


class LedgerStore:
    """
    Explicit ledger handle injected into every command and query.

    Wraps one SQLAlchemy session (the unit of work) and a ProductLocks
    registry shared by everything that mutates stock in this process.
    """

    def __init__(
        self,
        session,
        locks: ProductLocks | None = None,
        *,
        tax_rate_bps: int = DEFAULT_TAX_RATE_BPS,
        invoice_number_base: int = DEFAULT_INVOICE_NUMBER_BASE,
        po_number_base: int = DEFAULT_PO_NUMBER_BASE,
    ):
        if tax_rate_bps < 0:
            raise InvalidInput("tax_rate_bps must be >= 0")
        self.session = session
        self.locks = locks if locks is not None else ProductLocks()
        self.tax_rate_bps = tax_rate_bps
        self.invoice_number_base = invoice_number_base
        self.po_number_base = po_number_base

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @contextmanager
    def lock_products(self, product_ids: Iterable[int]) -> Iterator[list[int]]:
        """
        Hold every listed product for the duration of a whole operation.

        Ids are checked against the catalog first; an unknown id raises
        NotFound before any lock is created for it.
        """
        ids = self._require_known(product_ids)
        with self.locks.hold(ids) as held:
            yield held

    def _require_known(self, product_ids: Iterable) -> list[int]:
        ids = sorted({coerce_int(pid, "product_id") for pid in product_ids})
        if not ids:
            return ids
        known = {pid for (pid,) in self.session.query(Product.id).filter(Product.id.in_(ids))}
        for product_id in ids:
            if product_id not in known:
                raise NotFound(f"Product {product_id} not found", details={"product_id": product_id})
        return ids

    # ------------------------------------------------------------------
    # Row access
    # ------------------------------------------------------------------

    def load_product(self, product_id, *, lock: bool = False) -> Product:
        """
        Fetch a product row, always re-reading its current values.

        populate_existing() refreshes a row already in the identity map, so a
        value read under the product lock is never a stale copy.
        """
        product_id = coerce_int(product_id, "product_id")
        query = self.session.query(Product).filter_by(id=product_id).populate_existing()
        if lock:
            query = lock_for_update(query)
        product = query.first()
        if product is None:
            raise NotFound(f"Product {product_id} not found", details={"product_id": product_id})
        return product

    def get_product(self, product_id) -> ProductRecord:
        return self.load_product(product_id).to_record()

    # ------------------------------------------------------------------
    # The stock mutation primitive
    # ------------------------------------------------------------------

    def mutate_stock(self, product_id, delta, *, source: str, reference: str | None = None) -> int:
        """
        Apply a signed delta to a product's stock and return the new value.

        Raises NotFound for an unknown product and InsufficientStock when a
        negative delta exceeds current stock; in both cases nothing changes.
        On success the new value is flushed before returning, so every later
        read in the unit of work sees it. Committing is the caller's job.

        The write is relative and guarded in SQL (stock = stock + delta, only
        while the result stays >= 0), so a writer outside this process's locks
        can neither be overwritten nor drive stock negative.
        """
        delta = coerce_int(delta, "delta")
        if source not in MOVEMENT_SOURCES:
            raise InvalidInput(f"Unknown stock movement source {source!r}")

        product_id = coerce_int(product_id, "product_id")
        with self.lock_products([product_id]):
            product = self.load_product(product_id, lock=True)
            current = product.stock
            if current + delta < 0:
                raise self._insufficient(product, delta, current)

            result = self.session.execute(
                update(Product)
                .where(Product.id == product.id, Product.stock + delta >= 0)
                .values(stock=Product.stock + delta, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                on_hand = self.session.query(Product.stock).filter_by(id=product.id).scalar()
                raise self._insufficient(product, delta, on_hand)

            self.session.refresh(product)
            new_stock = product.stock
            self.session.add(
                StockMovement(
                    product_id=product.id,
                    quantity_delta=delta,
                    stock_after=new_stock,
                    source=source,
                    reference=reference,
                )
            )
            self.session.flush()

        logger.debug("stock %s: %s%+d -> %s (%s %s)", product_id, current, delta, new_stock, source, reference)
        return new_stock

    @staticmethod
    def _insufficient(product: Product, delta: int, on_hand: int) -> InsufficientStock:
        return InsufficientStock(
            f"Insufficient stock for product {product.code}",
            details={
                "product_id": product.id,
                "product_code": product.code,
                "requested_quantity": -delta,
                "on_hand": on_hand,
            },
        )

    # ------------------------------------------------------------------
    # Document numbers
    # ------------------------------------------------------------------

    def next_invoice_number(self) -> str:
        return allocate_document_number(
            self.session,
            sequence=SEQUENCE_INVOICE,
            prefix="INV",
            base=self.invoice_number_base,
        )

    def next_po_number(self) -> str:
        return allocate_document_number(
            self.session,
            sequence=SEQUENCE_PURCHASE_ORDER,
            prefix="PO",
            base=self.po_number_base,
        )


def init_ledger(app) -> None:
    """Give the app one ProductLocks registry for its lifetime."""
    app.extensions[LEDGER_EXTENSION_KEY] = {"locks": ProductLocks()}


def get_ledger() -> LedgerStore:
    """
    Ledger bound to the current app context.

    The session is Flask-SQLAlchemy's scoped session; the locks are the app's
    registry, so every request in this process serializes on the same locks.
    """
    if "ledger" not in g:
        state = current_app.extensions[LEDGER_EXTENSION_KEY]
        g.ledger = LedgerStore(
            db.session,
            state["locks"],
            tax_rate_bps=current_app.config["SALES_TAX_RATE_BPS"],
            invoice_number_base=current_app.config["INVOICE_NUMBER_BASE"],
            po_number_base=current_app.config["PO_NUMBER_BASE"],
        )
    return g.ledger
