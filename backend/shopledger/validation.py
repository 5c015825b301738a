from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import InvalidInput


# Maximum price: 9,999,999.99 (999,999,999 cents)
MAX_PRICE_CENTS = 999_999_999


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    What a JSON payload may carry for one model:
    - writable_fields: keys clients may send
    - required_on_create: keys a create must include
    - ledger_fields: stock columns, refused with their own error
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()
    ledger_fields: frozenset[str] = frozenset()


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer coercion shared by services and payload validation.

    Rejects bools, floats, decimal strings and scientific notation so a
    quantity of "1e3" or 2.5 never reaches the ledger.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise InvalidInput(f"{field} must be an integer")
        if "e" in stripped.lower():
            raise InvalidInput(f"{field} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise InvalidInput(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise InvalidInput(f"{field} must be an integer")
    if isinstance(value, float):
        raise InvalidInput(f"{field} must be an integer, not a decimal")
    raise InvalidInput(f"{field} must be an integer")


def require_positive_int(value: Any, field: str) -> int:
    number = coerce_int(value, field)
    if number <= 0:
        raise InvalidInput(f"{field} must be > 0", details={"field": field, "value": number})
    return number


def require_non_negative_int(value: Any, field: str) -> int:
    number = coerce_int(value, field)
    if number < 0:
        raise InvalidInput(f"{field} must be >= 0", details={"field": field, "value": number})
    return number


def require_text(value: Any, field: str) -> str:
    if value is None or not isinstance(value, (str, int)):
        raise InvalidInput(f"{field} is required")
    text = str(value).strip()
    if not text:
        raise InvalidInput(f"{field} cannot be blank")
    return text


def require_json_object(payload: Any) -> dict:
    """Request body as a dict. A missing body counts as an empty object."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidInput("Invalid JSON payload", details={"expected": "object"})
    return payload


def _clean_value(col, raw: Any):
    if raw is None:
        if not col.nullable:
            raise InvalidInput(f"{col.key} cannot be null")
        return None

    coltype = col.type
    if isinstance(coltype, Integer):
        return coerce_int(raw, col.key)

    if isinstance(coltype, Boolean):
        if not isinstance(raw, bool):
            raise InvalidInput(f"{col.key} must be a boolean")
        return raw

    if isinstance(coltype, (String, Text)):
        if not isinstance(raw, (str, int)) or isinstance(raw, bool):
            raise InvalidInput(f"{col.key} must be a string")
        text = str(raw).strip()
        if not text and not col.nullable:
            raise InvalidInput(f"{col.key} cannot be blank")
        length = getattr(coltype, "length", None)
        if length and len(text) > length:
            raise InvalidInput(f"{col.key} exceeds max length {length}")
        return text

    return raw


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: Any,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Clean a JSON body for a create (partial=False) or a patch (partial=True).

    Keys are checked against the policy before any value is read: stock
    columns first, then the allow-list, then required keys on create. Values
    are coerced by the model's column types. Returns only the keys sent.
    """
    data = require_json_object(payload)

    blocked = set(data) & set(policy.ledger_fields)
    if blocked:
        raise InvalidInput(
            "Stock can only change through sales, receipts and adjustments",
            details={"fields": sorted(blocked)},
        )

    columns = {c.key: c for c in model.__mapper__.columns}
    rejected = sorted(k for k in data if k not in policy.writable_fields or k not in columns)
    if rejected:
        raise InvalidInput(f"Field not allowed: {', '.join(rejected)}", details={"fields": rejected})

    if not partial:
        missing = sorted(set(policy.required_on_create) - set(data))
        if missing:
            raise InvalidInput(f"Missing required fields: {', '.join(missing)}", details={"fields": missing})

    return {key: _clean_value(columns[key], raw) for key, raw in data.items()}


def enforce_rules_product(patch: dict) -> None:
    """Product rules not captured by column metadata alone."""
    if patch.get("unit_price_cents") is not None:
        price = patch["unit_price_cents"]
        if price < 0:
            raise InvalidInput("unit_price_cents must be >= 0")
        if price > MAX_PRICE_CENTS:
            raise InvalidInput(f"unit_price_cents cannot exceed {MAX_PRICE_CENTS}")

    for field in ("initial_stock", "reorder_level"):
        if patch.get(field) is not None and patch[field] < 0:
            raise InvalidInput(f"{field} must be >= 0")
