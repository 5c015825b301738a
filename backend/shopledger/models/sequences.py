from __future__ import annotations

from ..extensions import db


# Sequence names
SEQUENCE_INVOICE = "INVOICE"
SEQUENCE_PURCHASE_ORDER = "PURCHASE_ORDER"


class DocumentSequence(db.Model):
    """
    Next number to hand out for one document sequence.

    Incremented with an atomic UPDATE and committed on its own, so a number is
    never reused, not even after the operation that drew it fails.
    """
    __tablename__ = "document_sequences"

    sequence = db.Column(db.String(32), primary_key=True)
    next_number = db.Column(db.Integer, nullable=False)
