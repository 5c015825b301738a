# Overview: Manual inventory adjustments (found, damaged, recount corrections).

from __future__ import annotations

import logging

from ..errors import InvalidInput
from ..models import InventoryAdjustment
from ..models.inventory import SOURCE_ADJUSTMENT
from ..records import InventoryAdjustmentRecord
from ..validation import coerce_int, require_text
from .ledger_store import LedgerStore

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 255


def adjust_inventory(
    ledger: LedgerStore,
    product_id,
    delta,
    reason,
    operator_id,
) -> InventoryAdjustmentRecord:
    """
    Apply a signed stock correction and record why.

    A negative delta larger than the stock on hand raises InsufficientStock,
    the same failure a checkout would hit; stock and the adjustment history are
    left untouched.
    """
    product_id = coerce_int(product_id, "product_id")
    delta = coerce_int(delta, "delta")
    if delta == 0:
        raise InvalidInput("delta must be non-zero")
    reason = require_text(reason, "reason")
    if len(reason) > MAX_REASON_LENGTH:
        raise InvalidInput(f"reason exceeds max length {MAX_REASON_LENGTH}")
    operator_id = require_text(operator_id, "operator_id")

    with ledger.lock_products([product_id]):
        try:
            product = ledger.load_product(product_id, lock=True)
            new_stock = ledger.mutate_stock(
                product.id,
                delta,
                source=SOURCE_ADJUSTMENT,
                reference=reason,
            )

            adjustment = InventoryAdjustment(
                product_id=product.id,
                product_name=product.name,
                quantity_delta=delta,
                reason=reason,
                operator_id=operator_id,
            )
            ledger.session.add(adjustment)
            ledger.commit()
        except Exception:
            ledger.rollback()
            raise

        record = adjustment.to_record()

    logger.info(
        "inventory adjusted: product %s %+d -> %d (%s) by %s",
        record.product_id, record.quantity_delta, new_stock, record.reason, record.operator_id,
    )
    return record
