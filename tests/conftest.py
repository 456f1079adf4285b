"""
Shared fixtures for the resale ledger tests.
"""

from datetime import date

import pytest

from config import Settings, reload_settings
from db_engine import init_db, reset_engine
from models import Transaction


def make_tx(id=None, purchase_price=None, purchase_date=None, sale_price=None,
            sale_date=None, sold_platform=None, vinted=None, ebay=None,
            net_profit=None, item_name=None, category=None) -> Transaction:
    """Build an unsaved ledger row."""
    return Transaction(
        id=id,
        item_name=item_name,
        category=category,
        purchase_price=purchase_price,
        purchase_date=purchase_date,
        sale_price=sale_price,
        sale_date=sale_date,
        sold_platform=sold_platform,
        vinted=vinted,
        ebay=ebay,
        net_profit=net_profit,
    )


class FakeStore:
    """In-memory stand-in for TransactionRepository / ExpenseRepository."""

    def __init__(self, rows=None, expenses=None):
        self.rows = list(rows or [])
        self.expenses = list(expenses or [])
        self.reads = 0

    def get_all(self):
        self.reads += 1
        return list(self.rows)

    def get_sold_between(self, start: date, end: date):
        self.reads += 1
        return [
            tx for tx in self.rows
            if tx.purchase_date is not None and tx.sale_date is not None
            and start <= tx.sale_date <= end
        ]

    def get_between(self, start: date, end: date):
        self.reads += 1
        return [
            e for e in self.expenses
            if e.purchase_date is not None and start <= e.purchase_date <= end
        ]


@pytest.fixture
def tx():
    return make_tx


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def ledger_db(tmp_path, monkeypatch):
    """Point the Ledger Store at a fresh SQLite file with all tables created."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'ledger.db'}")
    reload_settings()
    reset_engine()
    init_db()
    yield
    reset_engine()
    monkeypatch.delenv("DATABASE_URL")
    reload_settings()


@pytest.fixture
def corrupt_db(tmp_path, monkeypatch):
    """Point the Ledger Store at a file that exists but is not a SQLite database."""
    path = tmp_path / 'ledger.db'
    path.write_bytes(b"this is not sqlite" * 100)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{path}")
    reload_settings()
    reset_engine()
    yield path
    reset_engine()
    monkeypatch.delenv("DATABASE_URL")
    reload_settings()
