"""
Tax-year summary: sales against stock cost and other expenses for one
tax year (1 April to 31 March by default).
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from config import get_settings
from services.common import amount_or_zero, round_currency

logger = logging.getLogger(__name__)


def tax_year_bounds(start_year: int, start_month: int, start_day: int) -> Tuple[date, date]:
    """First and last day of the tax year starting in start_year."""
    start = date(start_year, start_month, start_day)
    end = date(start_year + 1, start_month, start_day) - timedelta(days=1)
    return start, end


def current_tax_year(today: Optional[date] = None,
                     start_month: Optional[int] = None,
                     start_day: Optional[int] = None) -> Tuple[date, date]:
    """
    Tax year containing today.

    Args:
        today: Reference date (default: today)
        start_month: Month the tax year starts (default: from settings)
        start_day: Day of month the tax year starts (default: from settings)

    Returns:
        (start, end) dates, both inclusive
    """
    today = today or date.today()
    if start_month is None or start_day is None:
        settings = get_settings()
        start_month = start_month or settings.tax_year_start_month
        start_day = start_day or settings.tax_year_start_day

    start_year = today.year if (today.month, today.day) >= (start_month, start_day) else today.year - 1
    return tax_year_bounds(start_year, start_month, start_day)


def tax_year_summary(transactions: List[Any], expenses: List[Any],
                     start: date, end: date) -> Dict[str, Any]:
    """
    Summarise a tax year.

    Stock cost counts items purchased in the period, sales count items sold
    in it, and expenses count expense records dated in it. Missing amounts
    count as 0.

    Returns:
        Payload dict; netAmount = totalSales - (totalExpenses + totalStockCost)
    """
    def within(value: Optional[date]) -> bool:
        return value is not None and start <= value <= end

    period_expenses = [e for e in expenses if within(e.purchase_date)]
    purchased = [tx for tx in transactions if within(tx.purchase_date)]
    sold = [tx for tx in transactions if within(tx.sale_date)]

    total_expenses = sum(amount_or_zero(e.cost) for e in period_expenses)
    total_stock_cost = sum(amount_or_zero(tx.purchase_price) for tx in purchased)
    total_sales = sum(amount_or_zero(tx.sale_price) for tx in sold)
    net_amount = total_sales - (total_expenses + total_stock_cost)

    logger.debug(f"Tax year {start} to {end}: {len(sold)} sold, {len(purchased)} purchased")
    return {
        'taxYearStart': start.isoformat(),
        'taxYearEnd': end.isoformat(),
        'totalExpenses': round_currency(total_expenses),
        'totalStockCost': round_currency(total_stock_cost),
        'totalSales': round_currency(total_sales),
        'netAmount': round_currency(net_amount),
        'expenseCount': len(period_expenses),
        'purchasedCount': len(purchased),
        'soldCount': len(sold),
    }
