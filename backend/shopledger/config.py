# backend/shopledger/config.py
from __future__ import annotations
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/shopledger.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///shopledger.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Sales tax in basis points (1200 = 12% VAT)
    SALES_TAX_RATE_BPS = _env_int("SALES_TAX_RATE_BPS", 1200)

    # Document numbers start at base + 1 (INV-1001, PO-2001)
    INVOICE_NUMBER_BASE = _env_int("INVOICE_NUMBER_BASE", 1000)
    PO_NUMBER_BASE = _env_int("PO_NUMBER_BASE", 2000)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
