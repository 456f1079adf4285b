"""
Time-bucketing engine.
Groups ledger transactions into (year, month) buckets using pandas.

Every monthly figure in the report goes through group_by_month(), so the
full-history timeline and the single-year views share one code path.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, List, Optional

import numpy as np
import pandas as pd

from services.common import to_amount

logger = logging.getLogger(__name__)

MONTHS = list(range(1, 13))

# Aggregations supported by group_by_month.
# "sum" treats absent values as 0, "mean" and "count" exclude them,
# "size" counts rows whatever their value.
AGGREGATIONS = ("sum", "mean", "count", "size")

DateSelector = Callable[[Any], Optional[date]]
ValueSelector = Callable[[Any], Any]


@dataclass
class MonthBucket:
    """Purchases, sales and profit for one calendar month."""
    year: int
    month: int
    total_purchase: float
    total_sales: float

    @property
    def profit(self) -> float:
        return self.total_sales - self.total_purchase

    @property
    def label(self) -> str:
        """ISO date of the first day of the month, e.g. '2024-02-01'."""
        return date(self.year, self.month, 1).isoformat()


def purchase_date_of(tx: Any) -> Optional[date]:
    return tx.purchase_date


def sale_date_of(tx: Any) -> Optional[date]:
    return tx.sale_date


def purchase_price_of(tx: Any) -> Any:
    return tx.purchase_price


def sale_price_of(tx: Any) -> Any:
    return tx.sale_price


def group_by_month(transactions: Iterable[Any],
                   date_selector: DateSelector,
                   value_selector: ValueSelector,
                   how: str = "sum") -> pd.Series:
    """
    Aggregate a value per calendar month of a chosen date.

    Args:
        transactions: Ledger rows (anything with the Transaction attributes)
        date_selector: Picks the date that decides the bucket; rows where it
                       returns None are skipped
        value_selector: Picks the value to aggregate
        how: One of "sum", "mean", "count", "size"

    Returns:
        Float Series indexed by a (year, month) MultiIndex, sorted
        chronologically. Only months containing at least one dated row appear.
    """
    if how not in AGGREGATIONS:
        raise ValueError(f"Unsupported aggregation '{how}', expected one of {AGGREGATIONS}")

    records = []
    for tx in transactions:
        bucket_date = date_selector(tx)
        if bucket_date is None:
            continue
        value = to_amount(value_selector(tx))
        records.append((bucket_date.year, bucket_date.month, np.nan if value is None else value))

    if not records:
        index = pd.MultiIndex.from_arrays([[], []], names=["year", "month"])
        return pd.Series([], index=index, dtype=float)

    df = pd.DataFrame.from_records(records, columns=["year", "month", "value"])
    df["value"] = df["value"].astype(float)
    grouped = df.groupby(["year", "month"])["value"]

    if how == "sum":
        result = grouped.sum(min_count=0)
    elif how == "mean":
        result = grouped.mean()
    elif how == "count":
        result = grouped.count()
    else:
        result = grouped.size()

    return result.astype(float).sort_index()


def profit_timeline(transactions: List[Any]) -> List[MonthBucket]:
    """
    Month-by-month purchases and sales over the full history.

    A full outer join of purchase sums (by purchase month) and sale sums
    (by sale month): a month with only purchases has total_sales = 0 and
    vice versa. Profit for such a month can be negative.

    Args:
        transactions: The whole ledger

    Returns:
        MonthBucket list in chronological order
    """
    purchases = group_by_month(transactions, purchase_date_of, purchase_price_of).rename("purchases")
    sales = group_by_month(transactions, sale_date_of, sale_price_of).rename("sales")

    joined = pd.concat([purchases, sales], axis=1, join="outer").fillna(0.0).sort_index()

    buckets = [
        MonthBucket(
            year=int(year),
            month=int(month),
            total_purchase=float(row["purchases"]),
            total_sales=float(row["sales"]),
        )
        for (year, month), row in joined.iterrows()
    ]
    logger.debug(f"Built profit timeline with {len(buckets)} months")
    return buckets


def year_view(transactions: List[Any],
              year: Optional[int],
              date_selector: DateSelector,
              value_selector: ValueSelector,
              how: str = "sum") -> List[float]:
    """
    Fixed 12-slot view of a monthly aggregate for one year.

    Args:
        transactions: Ledger rows
        year: Calendar year, or None to aggregate by month-of-year across
              every year (the "all" scope)
        date_selector: Date deciding the bucket
        value_selector: Value to aggregate
        how: Aggregation, see group_by_month()

    Returns:
        List of exactly 12 floats for January..December, 0.0 where empty
    """
    if year is not None:
        rows = [tx for tx in transactions if _year_of(date_selector(tx)) == year]
        series = group_by_month(rows, date_selector, value_selector, how)
    else:
        # Collapse every year onto its calendar month before aggregating
        series = group_by_month(
            transactions,
            lambda tx: _first_of_month_in_common_year(date_selector(tx)),
            value_selector,
            how,
        )

    if series.empty:
        return [0.0] * 12
    filled = series.droplevel("year").reindex(MONTHS).fillna(0.0)
    return [float(v) for v in filled.tolist()]


def available_years(transactions: Iterable[Any]) -> List[int]:
    """Distinct years present in either date column, most recent first."""
    years = set()
    for tx in transactions:
        for value in (tx.purchase_date, tx.sale_date):
            if value is not None:
                years.add(value.year)
    return sorted(years, reverse=True)


def _year_of(value: Optional[date]) -> Optional[int]:
    return value.year if value is not None else None


def _first_of_month_in_common_year(value: Optional[date]) -> Optional[date]:
    # Any fixed year works; only the month survives into the view
    if value is None:
        return None
    return date(2000, value.month, 1)
