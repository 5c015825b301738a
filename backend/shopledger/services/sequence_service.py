# Overview: Document number allocation for invoices and purchase orders.

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..errors import InvalidInput
from ..models import DocumentSequence
from .concurrency import run_with_retry


def _bump(session, sequence: str) -> int | None:
    stmt = (
        update(DocumentSequence)
        .where(DocumentSequence.sequence == sequence)
        .values(next_number=DocumentSequence.next_number + 1)
    )
    result = session.execute(stmt)
    if not result.rowcount:
        return None
    session.flush()
    current = (
        session.query(DocumentSequence.next_number)
        .filter_by(sequence=sequence)
        .scalar()
    )
    return current - 1


def allocate_document_number(session, *, sequence: str, prefix: str, base: int) -> str:
    """
    Atomically allocate and commit the next number of a sequence.

    The first number handed out is base + 1. The increment is committed before
    returning, so callers that fail afterwards burn the number instead of
    handing it out twice.
    """
    if not sequence:
        raise InvalidInput("sequence is required")

    def _op() -> str:
        next_num = _bump(session, sequence)
        if next_num is None:
            seq = DocumentSequence(sequence=sequence, next_number=base + 2)
            session.add(seq)
            try:
                session.flush()
                next_num = base + 1
            except IntegrityError:
                # Another session created the row first
                session.rollback()
                next_num = _bump(session, sequence)
                if next_num is None:
                    raise
        session.commit()
        return f"{prefix}-{next_num}"

    return run_with_retry(_op, session=session)
