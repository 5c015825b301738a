# Overview: Typed ledger failures shared by services, routes and the CLI.

"""
Ledger error hierarchy.

Every failure a ledger operation can report is a LedgerError subclass. Services
raise them after rolling back their unit of work; the HTTP layer maps them to a
status code with one error handler. Nothing inside the ledger catches and hides
them.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for typed ledger failures."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "kind": type(self).__name__,
            "details": self.details,
        }


class NotFound(LedgerError):
    """Unknown product, supplier, category or purchase order id."""
    status_code = 404


class InvalidInput(LedgerError):
    """Malformed command: empty lines, bad quantities, empty reason, ..."""
    status_code = 400


class Conflict(LedgerError):
    """Uniqueness violation on master data (duplicate product code, ...)."""
    status_code = 409


class InsufficientStock(LedgerError):
    """A decrement would drive a product's stock below zero."""
    status_code = 409


class InsufficientPayment(LedgerError):
    """Amount tendered is below the computed sale total."""
    status_code = 402


class InvalidStateTransition(LedgerError):
    """Purchase order is in a status that does not allow the transition."""
    status_code = 409
