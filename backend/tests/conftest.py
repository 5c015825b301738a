"""
Pytest fixtures for shopledger backend tests.

Provides the application with an in-memory database, a per-test table wipe,
a ledger handle and small factories for the master data the ledger needs.
"""

import pytest

from shopledger import create_app
from shopledger.extensions import db
from shopledger.services import catalog_service
from shopledger.services.concurrency import ProductLocks
from shopledger.services.ledger_store import LedgerStore


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def ledger(db_session):
    """Ledger handle with default tax rate (12%) and number bases."""
    return LedgerStore(db_session, ProductLocks())


@pytest.fixture(scope='function')
def supplier(ledger):
    """Default supplier for purchase orders."""
    return catalog_service.create_supplier(
        ledger,
        "Palawan Tech Solutions",
        contact_person="Marco Dela Serna",
        phone="0917 123 4567",
    )


@pytest.fixture(scope='function')
def make_product(ledger):
    """Factory: make_product(code, stock, price=...) -> ProductRecord."""
    def _make(code, stock=0, unit_price_cents=1000, reorder_level=0, name=None, **kwargs):
        return catalog_service.create_product(
            ledger,
            code=code,
            name=name or f"Product {code}",
            unit_price_cents=unit_price_cents,
            initial_stock=stock,
            reorder_level=reorder_level,
            **kwargs,
        )
    return _make


@pytest.fixture(scope='function')
def p1(make_product):
    """Wireless Mouse: 250.00, 50 on hand."""
    return make_product("E001", stock=50, unit_price_cents=25000, reorder_level=10, name="Wireless Mouse")


@pytest.fixture(scope='function')
def p2(make_product):
    """Mechanical Keyboard: 1850.00, 5 on hand."""
    return make_product("E002", stock=5, unit_price_cents=185000, reorder_level=15, name="Mechanical Keyboard")


@pytest.fixture(scope='function')
def p3(make_product):
    """Organic Coffee Beans: 450.00, 100 on hand."""
    return make_product("G001", stock=100, unit_price_cents=45000, reorder_level=20, name="Organic Coffee Beans")
