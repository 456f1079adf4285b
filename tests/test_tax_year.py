"""
Tests for the tax-year summary.
"""

from datetime import date

from conftest import make_tx
from models import Expense
from config import Settings
from services import tax_year
from services.tax_year import current_tax_year, tax_year_summary


def test_tax_year_before_start_belongs_to_previous_year():
    assert current_tax_year(date(2024, 2, 10), 4, 1) == (date(2023, 4, 1), date(2024, 3, 31))


def test_tax_year_on_start_day():
    assert current_tax_year(date(2024, 4, 1), 4, 1) == (date(2024, 4, 1), date(2025, 3, 31))


def test_tax_year_custom_start_day():
    assert current_tax_year(date(2024, 4, 5), 4, 6) == (date(2023, 4, 6), date(2024, 4, 5))


def test_explicit_start_does_not_load_settings(monkeypatch):
    def fail():
        raise AssertionError("settings should not be loaded")

    monkeypatch.setattr(tax_year, "get_settings", fail)

    assert current_tax_year(date(2024, 2, 10), 4, 1) == (date(2023, 4, 1), date(2024, 3, 31))


def test_missing_start_comes_from_settings(monkeypatch):
    monkeypatch.setattr(tax_year, "get_settings", lambda: Settings(tax_year_start_month=1, tax_year_start_day=1))

    assert current_tax_year(date(2024, 2, 10)) == (date(2024, 1, 1), date(2024, 12, 31))
    assert current_tax_year(date(2024, 2, 10), start_month=4) == (date(2023, 4, 1), date(2024, 3, 31))


def test_tax_year_summary():
    start, end = date(2024, 4, 1), date(2025, 3, 31)
    rows = [
        make_tx(purchase_date=date(2024, 5, 1), purchase_price=10.0,
                sale_date=date(2024, 6, 1), sale_price=35.5),
        make_tx(purchase_date=date(2024, 3, 1), purchase_price=99.0,
                sale_date=date(2024, 4, 2), sale_price=120.0),
        make_tx(purchase_date=date(2025, 1, 1), purchase_price=None),
    ]
    expenses = [
        Expense(item="Mailers", cost=4.5, purchase_date=date(2024, 7, 1)),
        Expense(item="Tape", cost=None, purchase_date=date(2024, 8, 1)),
        Expense(item="Old", cost=50.0, purchase_date=date(2024, 1, 1)),
    ]

    summary = tax_year_summary(rows, expenses, start, end)

    assert summary == {
        'taxYearStart': '2024-04-01',
        'taxYearEnd': '2025-03-31',
        'totalExpenses': 4.5,
        'totalStockCost': 10.0,
        'totalSales': 155.5,
        'netAmount': 141.0,
        'expenseCount': 2,
        'purchasedCount': 2,
        'soldCount': 2,
    }
