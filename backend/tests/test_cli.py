# Overview: Pytest coverage for the ledger CLI commands.

from sqlalchemy import update

from shopledger.models import Category, Product, Supplier


def test_seed_demo_loads_catalog(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['ledger', 'seed-demo'])

    assert result.exit_code == 0, result.output
    assert db_session.query(Category).count() == 3
    assert db_session.query(Supplier).count() == 2
    assert db_session.query(Product).count() == 5

    keyboard = db_session.query(Product).filter_by(code='E002').one()
    assert keyboard.unit_price_cents == 185000
    assert keyboard.stock == 5
    assert keyboard.initial_stock == 5


def test_seed_demo_skips_populated_database(app, db_session):
    runner = app.test_cli_runner()
    runner.invoke(args=['ledger', 'seed-demo'])
    result = runner.invoke(args=['ledger', 'seed-demo'])

    assert result.exit_code == 0
    assert 'SKIP' in result.output
    assert db_session.query(Product).count() == 5


def test_verify_passes_on_consistent_ledger(app, db_session):
    runner = app.test_cli_runner()
    runner.invoke(args=['ledger', 'seed-demo'])

    result = runner.invoke(args=['ledger', 'verify'])
    assert result.exit_code == 0
    assert 'PASS' in result.output


def test_verify_fails_on_drift(app, db_session):
    runner = app.test_cli_runner()
    runner.invoke(args=['ledger', 'seed-demo'])
    db_session.execute(update(Product).where(Product.code == 'E001').values(stock=1))
    db_session.commit()

    result = runner.invoke(args=['ledger', 'verify'])
    assert result.exit_code == 1
    assert 'E001' in result.output
