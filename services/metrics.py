"""
Metric calculators for the ledger report.

Every calculator is a pure function over a list of transactions and an
optional year (None means the whole history). Summations treat absent
amounts as 0; averages and ratios exclude them, and every zero
denominator yields 0 rather than NaN.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import numpy as np

from services.bucketing import (
    year_view, purchase_date_of, sale_date_of, purchase_price_of, sale_price_of
)
from services.common import (
    to_amount, amount_or_zero, is_sold, is_unsold, is_listed, in_year, net_profit,
    profit_multiple, days_to_sell, category_label, safe_ratio
)

logger = logging.getLogger(__name__)


@dataclass
class SellThroughRate:
    total_listed: int
    total_sold: int

    @property
    def percentage(self) -> float:
        return safe_ratio(self.total_sold, self.total_listed) * 100


@dataclass
class AverageSellingPrice:
    total_sales: float
    sold_count: int

    @property
    def average(self) -> float:
        return safe_ratio(self.total_sales, self.sold_count)


@dataclass
class AverageProfitPerItem:
    net_profit: float
    sold_count: int

    @property
    def average(self) -> float:
        return safe_ratio(self.net_profit, self.sold_count)


@dataclass
class ScopeTotals:
    """Spend and sales for a scope: purchases dated in it, sales dated in it."""
    total_purchase: float
    total_sales: float

    @property
    def profit(self) -> float:
        return self.total_sales - self.total_purchase

    @property
    def roi_percentage(self) -> float:
        return safe_ratio(self.profit, self.total_purchase) * 100


@dataclass
class AgedStock:
    min_days: int
    count: int
    value: float


def sold_in(transactions: List[Any], year: Optional[int]) -> List[Any]:
    """Sold transactions whose sale date falls in the year (or ever, for None)."""
    return [tx for tx in transactions if is_sold(tx) and in_year(tx.sale_date, year)]


def listed_in(transactions: List[Any], year: Optional[int]) -> List[Any]:
    """Listed (bought, unsold) transactions purchased in the year (or ever, for None)."""
    return [tx for tx in transactions if is_listed(tx) and in_year(tx.purchase_date, year)]


# ==================== Scalar metrics ====================

def sell_through_rate(transactions: List[Any], year: Optional[int] = None) -> SellThroughRate:
    """
    Share of stock that has sold versus stock still listed.

    Args:
        transactions: Ledger rows
        year: Scope year; sold items are matched on sale date, listed items
              on purchase date. None means all years.

    Returns:
        SellThroughRate; percentage is 0 when nothing was listed or sold
    """
    sold = len(sold_in(transactions, year))
    active = len(listed_in(transactions, year))
    return SellThroughRate(total_listed=sold + active, total_sold=sold)


def average_selling_price(transactions: List[Any], year: Optional[int] = None) -> AverageSellingPrice:
    """Mean sale price over sold items with a sale price (absent prices excluded)."""
    prices = [to_amount(tx.sale_price) for tx in sold_in(transactions, year)]
    prices = [p for p in prices if p is not None]
    return AverageSellingPrice(total_sales=float(sum(prices)), sold_count=len(prices))


def average_profit_per_item(transactions: List[Any], year: Optional[int] = None) -> AverageProfitPerItem:
    """
    Net profit summed over sold items divided by the number of sold items.
    Items whose profit cannot be determined add 0 but still count.
    """
    sold = sold_in(transactions, year)
    total = sum(net_profit(tx) or 0.0 for tx in sold)
    return AverageProfitPerItem(net_profit=float(total), sold_count=len(sold))


def scope_totals(transactions: List[Any], year: Optional[int] = None) -> ScopeTotals:
    """
    Spend and sales for a year.

    The scope is a union: an item bought in one year and sold the next adds
    its cost to the first year's spend and its sale price to the second
    year's sales.
    """
    spend = sum(amount_or_zero(tx.purchase_price) for tx in transactions
                if in_year(tx.purchase_date, year))
    sales = sum(amount_or_zero(tx.sale_price) for tx in transactions
                if in_year(tx.sale_date, year))
    return ScopeTotals(total_purchase=float(spend), total_sales=float(sales))


def average_profit_multiple(transactions: List[Any], year: Optional[int] = None) -> float:
    """
    Mean of sale_price / purchase_price over sold items.

    Items with a zero, negative or missing purchase price (or no sale price)
    are left out of both the sum and the count. Returns 0 if none qualify.
    """
    multiples = [profit_multiple(tx) for tx in sold_in(transactions, year)]
    multiples = [m for m in multiples if m is not None]
    if not multiples:
        return 0.0
    return float(np.mean(multiples))


def average_days_to_sell(transactions: List[Any], year: Optional[int] = None) -> float:
    """Mean whole days from purchase to sale; 0 when no item has both dates."""
    days = [days_to_sell(tx) for tx in sold_in(transactions, year)]
    days = [d for d in days if d is not None]
    if not days:
        return 0.0
    return float(np.mean(days))


def active_listings_count(transactions: List[Any]) -> int:
    """Items bought and not yet sold, across the whole ledger."""
    return len(listed_in(transactions, None))


def unsold_inventory_value(transactions: List[Any]) -> float:
    """Purchase cost tied up in unsold stock, across the whole ledger."""
    return float(sum(amount_or_zero(tx.purchase_price) for tx in listed_in(transactions, None)))


def year_item_stats(transactions: List[Any], year: Optional[int] = None) -> Dict[str, int]:
    """Number of items purchased and number of items sold in the year."""
    purchased = sum(1 for tx in transactions if in_year(tx.purchase_date, year))
    return {'listed': purchased, 'sold': len(sold_in(transactions, year))}


def sales_by_category(transactions: List[Any], year: Optional[int] = None) -> List[Dict[str, Any]]:
    """Sales totals per category for items sold in the year, largest first."""
    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for tx in sold_in(transactions, year):
        label = category_label(tx)
        totals[label] += amount_or_zero(tx.sale_price)
        counts[label] += 1

    rows = [
        {'category': label, 'totalSales': totals[label], 'soldCount': counts[label]}
        for label in totals
    ]
    return sorted(rows, key=lambda r: (-r['totalSales'], r['category']))


def unsold_stock_by_category(transactions: List[Any]) -> List[Dict[str, Any]]:
    """Count and purchase value of unsold stock per category, largest value first."""
    values: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for tx in listed_in(transactions, None):
        label = category_label(tx)
        values[label] += amount_or_zero(tx.purchase_price)
        counts[label] += 1

    rows = [
        {'category': label, 'count': counts[label], 'value': values[label]}
        for label in values
    ]
    return sorted(rows, key=lambda r: (-r['value'], r['category']))


def sales_between(transactions: List[Any], start: date, end: date) -> float:
    """Sum of sale prices for sales dated in [start, end]."""
    return float(sum(
        amount_or_zero(tx.sale_price) for tx in transactions
        if tx.sale_date is not None and start <= tx.sale_date <= end
    ))


def current_month_sales(transactions: List[Any], today: date) -> float:
    """Sales in the calendar month containing today."""
    start = today.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return sales_between(transactions, start, next_month - timedelta(days=1))


def current_week_sales(transactions: List[Any], today: date) -> float:
    """Sales in the Monday-to-Sunday week containing today."""
    start = today - timedelta(days=today.weekday())
    return sales_between(transactions, start, start + timedelta(days=6))


def aged_inventory(transactions: List[Any], today: date, thresholds: List[int]) -> List[AgedStock]:
    """
    Unsold stock held for at least each threshold number of days.

    Args:
        transactions: Ledger rows
        today: Reference date
        thresholds: Minimum holding periods in days, e.g. [90, 180, 365]

    Returns:
        One AgedStock per threshold, in the given order
    """
    listed = listed_in(transactions, None)
    result = []
    for min_days in thresholds:
        aged = [tx for tx in listed if (today - tx.purchase_date).days >= min_days]
        result.append(AgedStock(
            min_days=min_days,
            count=len(aged),
            value=float(sum(amount_or_zero(tx.purchase_price) for tx in aged)),
        ))
    return result


def listing_backlog(transactions: List[Any]) -> Dict[str, int]:
    """Unsold items not yet flagged as listed on each platform."""
    unsold = [tx for tx in transactions if is_unsold(tx)]
    return {
        'vinted': sum(1 for tx in unsold if tx.vinted is not True),
        'ebay': sum(1 for tx in unsold if tx.ebay is not True),
    }


# ==================== Monthly (12-slot) metrics ====================

def monthly_profit(transactions: List[Any], year: Optional[int]) -> List[Dict[str, Any]]:
    """Sales by sale month, purchases by purchase month, and their difference."""
    sales = year_view(transactions, year, sale_date_of, sale_price_of)
    purchases = year_view(transactions, year, purchase_date_of, purchase_price_of)
    return [
        {
            'month': month,
            'totalSales': sales[month - 1],
            'totalPurchase': purchases[month - 1],
            'profit': sales[month - 1] - purchases[month - 1],
        }
        for month in range(1, 13)
    ]


def monthly_expenses(transactions: List[Any], year: Optional[int]) -> List[Dict[str, Any]]:
    """Stock purchase costs by purchase month."""
    expenses = year_view(transactions, year, purchase_date_of, purchase_price_of)
    return [{'month': month, 'expense': expenses[month - 1]} for month in range(1, 13)]


def _sold_sale_date(tx: Any) -> Optional[date]:
    return tx.sale_date if is_sold(tx) else None


def monthly_average_selling_price(transactions: List[Any], year: Optional[int]) -> List[Dict[str, Any]]:
    """Mean sale price of items sold each month; absent prices excluded."""
    averages = year_view(transactions, year, _sold_sale_date, sale_price_of, how="mean")
    return [{'month': month, 'average': averages[month - 1]} for month in range(1, 13)]


def monthly_average_profit_per_item(transactions: List[Any], year: Optional[int]) -> List[Dict[str, Any]]:
    """Net profit of items sold each month divided by the number sold that month."""
    profits = year_view(transactions, year, _sold_sale_date, net_profit, how="sum")
    counts = year_view(transactions, year, _sold_sale_date, net_profit, how="size")
    return [
        {'month': month, 'average': safe_ratio(profits[month - 1], counts[month - 1])}
        for month in range(1, 13)
    ]


def monthly_average_profit_multiple(transactions: List[Any], year: Optional[int]) -> List[Dict[str, Any]]:
    """Mean profit multiple of items sold each month; zero-cost items excluded."""
    averages = year_view(transactions, year, _sold_sale_date, profit_multiple, how="mean")
    return [{'month': month, 'average': averages[month - 1]} for month in range(1, 13)]
