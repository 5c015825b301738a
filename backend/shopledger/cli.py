# Overview: Flask CLI commands for schema bootstrap, demo data and ledger verification.

# backend/shopledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "shopledger:create_app" (PowerShell: $env:FLASK_APP="shopledger:create_app").
# - Use: python -m flask ledger <command> [options]
#
# - python -m flask ledger init-db
#   Create all tables that do not exist yet.
# - python -m flask ledger reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask ledger seed-demo
#   Load the demo catalog (3 categories, 2 suppliers, 5 products). Skipped if products exist.
# - python -m flask ledger verify
#   Recompute every product's stock from its history. Exit code 1 on drift.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Product
from .services import catalog_service, reconciliation_service
from .services.ledger_store import get_ledger


DEMO_CATEGORIES = ("Electronics", "Groceries", "Apparel")

DEMO_SUPPLIERS = (
    {
        "company_name": "Palawan Tech Solutions",
        "contact_person": "Marco Dela Serna",
        "phone": "0917 123 4567",
        "email": "marco@palawantech.ph",
        "address": "Unit 4, North Road, Brgy. San Pedro, Puerto Princesa City, Palawan",
    },
    {
        "company_name": "Puerto Princesa Trading",
        "contact_person": "Richo Baterzal",
        "phone": "0918 987 6543",
        "email": "richo@puertotrading.ph",
        "address": "Rizal Avenue, Brgy. San Miguel, Puerto Princesa City, Palawan",
    },
)

# (code, name, category, supplier, unit_price_cents, stock, reorder_level)
DEMO_PRODUCTS = (
    ("E001", "Wireless Mouse", "Electronics", "Palawan Tech Solutions", 25000, 50, 10),
    ("E002", "Mechanical Keyboard", "Electronics", "Palawan Tech Solutions", 185000, 5, 15),
    ("G001", "Organic Coffee Beans", "Groceries", "Puerto Princesa Trading", 45000, 100, 20),
    ("A001", "Cotton T-Shirt", "Apparel", "Puerto Princesa Trading", 35000, 30, 10),
    ("E003", "USB-C Cable", "Electronics", "Palawan Tech Solutions", 15000, 200, 50),
)


@click.group('ledger')
def ledger_group():
    """Inventory ledger bootstrap and verification commands."""


@ledger_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables (existing tables are left alone)."""
    db.create_all()
    click.echo("PASS Database tables created.")


@ledger_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask ledger seed-demo' for demo data.")


@ledger_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Load the demo catalog into an empty database."""
    if db.session.query(Product).first() is not None:
        click.echo("SKIP Products already exist; demo data not loaded.")
        return

    ledger = get_ledger()

    categories = {}
    for name in DEMO_CATEGORIES:
        categories[name] = catalog_service.create_category(ledger, name).id
    click.echo(f"PASS Categories: {', '.join(DEMO_CATEGORIES)}")

    suppliers = {}
    for data in DEMO_SUPPLIERS:
        suppliers[data["company_name"]] = catalog_service.create_supplier(ledger, **data).id
    click.echo(f"PASS Suppliers: {len(suppliers)}")

    for code, name, category, supplier, price, stock, reorder in DEMO_PRODUCTS:
        product = catalog_service.create_product(
            ledger,
            code=code,
            name=name,
            unit_price_cents=price,
            initial_stock=stock,
            reorder_level=reorder,
            category_id=categories[category],
            supplier_id=suppliers[supplier],
        )
        click.echo(f"  {product.code:<6} {product.name:<24} stock {product.stock}")

    click.echo(f"PASS Seeded {len(DEMO_PRODUCTS)} products.")


@ledger_group.command('verify')
@with_appcontext
def verify():
    """Recompute stock from history and report any drift."""
    discrepancies = reconciliation_service.verify_stock_invariant(get_ledger())
    if not discrepancies:
        click.echo("PASS Stock matches history for every product.")
        return

    click.echo(f"FAIL {len(discrepancies)} product(s) drifted from their history:")
    for d in discrepancies:
        click.echo(
            f"  {d.product_code}: recorded {d.recorded_stock}, expected {d.expected_stock} ({d.drift:+d})"
        )
    raise SystemExit(1)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(ledger_group)
