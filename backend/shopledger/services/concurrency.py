# Overview: Locking and retry helpers that serialize stock mutations.

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Iterable, Iterator

from sqlalchemy.exc import OperationalError


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, session, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on transient lock failures.

    Only OperationalError (database is locked, deadlock) is retried; ledger
    errors propagate on the first attempt.
    """
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError:
            session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))


class ProductLocks:
    """
    Per-product mutual exclusion for one process.

    At most one thread holds a given product id at a time; different ids never
    block each other. Locks are re-entrant so a multi-line operation holding
    its products can call the single-product mutation primitive.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[int, threading.RLock] = {}

    def _lock_for(self, product_id: int) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(product_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[product_id] = lock
            return lock

    @contextmanager
    def hold(self, product_ids: Iterable[int]) -> Iterator[list[int]]:
        """
        Hold every listed product for the duration of the block.

        Ids are deduplicated and acquired in ascending order so two operations
        over overlapping carts cannot deadlock.
        """
        ordered = sorted(set(product_ids))
        acquired: list[threading.RLock] = []
        try:
            for product_id in ordered:
                lock = self._lock_for(product_id)
                lock.acquire()
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
