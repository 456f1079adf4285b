"""
Reporting service for the resale ledger.
Reads one snapshot of the ledger and assembles the analytics payload:
profit timeline, 12-month views, scalar metrics and platform attribution.

All sums keep full precision internally; currency values are rounded to
2 decimal places only here, when the payload is assembled.
"""

import logging
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import Settings, get_settings
from repositories import TransactionRepository, ExpenseRepository
from services import metrics
from services.attribution import attribute_month, worklist_entry
from services.bucketing import profit_timeline, available_years
from services.common import round_currency, round_to
from services.tax_year import current_tax_year, tax_year_summary
from services.year_selection import parse_year_param, resolve_year, YearScope

logger = logging.getLogger(__name__)

Section = Tuple[str, Callable[[], Any], Callable[[], Any]]


def _zero_months(*keys: str) -> List[Dict[str, Any]]:
    return [dict({'month': month}, **{key: 0.0 for key in keys}) for month in range(1, 13)]


def _round_rows(rows: List[Dict[str, Any]], currency_keys: Tuple[str, ...]) -> List[Dict[str, Any]]:
    return [
        {key: (round_currency(value) if key in currency_keys else value) for key, value in row.items()}
        for row in rows
    ]


class ReportingService:
    """
    Builds reporting payloads from the Ledger Store.
    Stateless between calls; safe to share across threads.
    """

    def __init__(self,
                 transaction_store: Any = TransactionRepository,
                 expense_store: Any = ExpenseRepository,
                 settings: Optional[Settings] = None):
        """
        Initialize the reporting service.

        Args:
            transaction_store: Object exposing get_all() and get_sold_between()
            expense_store: Object exposing get_between()
            settings: Application settings (default: global settings)
        """
        self.transaction_store = transaction_store
        self.expense_store = expense_store
        self.settings = settings or get_settings()

    # ==================== Main report ====================

    def build_report(self, year: Any = None, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Build the full analytics report.

        Args:
            year: Requested year (int, numeric text, "all", or None for the
                  current year). Malformed values fall back to the current year.
            today: Reference date for "current" figures (default: today)

        Returns:
            JSON-serialisable report payload

        Raises:
            LedgerStoreUnavailable: If the ledger cannot be read
        """
        today = today or date.today()
        requested = parse_year_param(year, today)

        ledger = self.transaction_store.get_all()
        years = available_years(ledger)
        scope = resolve_year(requested, years)
        logger.info(
            f"Building report for {scope.payload_value} "
            f"(requested {requested}) over {len(ledger)} transactions"
        )

        payload: Dict[str, Any] = {
            'selectedYear': scope.payload_value,
            'availableYears': years,
        }
        errors: Dict[str, str] = {}

        for name, compute, fallback in self._report_sections(ledger, scope, today):
            if not self.settings.report_isolate_failures:
                payload[name] = compute()
                continue
            try:
                payload[name] = compute()
            except Exception as e:
                logger.exception(f"Report section '{name}' failed")
                payload[name] = fallback()
                errors[name] = str(e)

        if errors:
            payload['errors'] = errors
        return payload

    def _report_sections(self, ledger: List[Any], scope: YearScope, today: date) -> List[Section]:
        """Report sections as (payload key, compute, zero value) triples."""
        year = scope.year_filter
        thresholds = self.settings.aged_inventory_thresholds

        return [
            ('profitTimeline', lambda: self._timeline(ledger), list),
            ('monthlyProfit',
             lambda: _round_rows(metrics.monthly_profit(ledger, year), ('totalSales', 'totalPurchase', 'profit')),
             lambda: _zero_months('totalSales', 'totalPurchase', 'profit')),
            ('monthlyExpenses',
             lambda: _round_rows(metrics.monthly_expenses(ledger, year), ('expense',)),
             lambda: _zero_months('expense')),
            ('monthlyAverageSellingPrice',
             lambda: _round_rows(metrics.monthly_average_selling_price(ledger, year), ('average',)),
             lambda: _zero_months('average')),
            ('monthlyAverageProfitPerItem',
             lambda: _round_rows(metrics.monthly_average_profit_per_item(ledger, year), ('average',)),
             lambda: _zero_months('average')),
            ('monthlyAverageProfitMultiple',
             lambda: _round_rows(metrics.monthly_average_profit_multiple(ledger, year), ('average',)),
             lambda: _zero_months('average')),
            ('salesByCategory',
             lambda: _round_rows(metrics.sales_by_category(ledger, year), ('totalSales',)),
             list),
            ('unsoldStockByCategory',
             lambda: _round_rows(metrics.unsold_stock_by_category(ledger), ('value',)),
             list),
            ('sellThroughRate', lambda: self._sell_through(ledger, year),
             lambda: {'totalListed': 0, 'totalSold': 0, 'percentage': 0.0}),
            ('averageSellingPrice', lambda: self._average_selling_price(ledger, year),
             lambda: {'totalSales': 0.0, 'soldCount': 0, 'average': 0.0}),
            ('averageProfitPerItem', lambda: self._average_profit_per_item(ledger, year),
             lambda: {'netProfit': 0.0, 'soldCount': 0, 'average': 0.0}),
            ('roi', lambda: self._roi(ledger, year),
             lambda: {'profit': 0.0, 'totalSpend': 0.0, 'percentage': 0.0}),
            ('averageDaysToSell',
             lambda: {'days': round_to(metrics.average_days_to_sell(ledger, year), 1)},
             lambda: {'days': 0.0}),
            ('activeListingsCount',
             lambda: {'count': metrics.active_listings_count(ledger)},
             lambda: {'count': 0}),
            ('unsoldInventoryValue',
             lambda: {'value': round_currency(metrics.unsold_inventory_value(ledger))},
             lambda: {'value': 0.0}),
            ('yearSpecificTotals', lambda: self._year_totals(ledger, year),
             lambda: {'totalPurchase': 0.0, 'totalSales': 0.0, 'profit': 0.0}),
            ('allTimeAverageProfitMultiple',
             lambda: round_to(metrics.average_profit_multiple(ledger, None), 2),
             lambda: 0.0),
            ('yearItemsStats', lambda: metrics.year_item_stats(ledger, year),
             lambda: {'listed': 0, 'sold': 0}),
            ('currentMonthSales',
             lambda: round_currency(metrics.current_month_sales(ledger, today)),
             lambda: 0.0),
            ('currentWeekSales',
             lambda: round_currency(metrics.current_week_sales(ledger, today)),
             lambda: 0.0),
            ('agedInventory', lambda: self._aged_inventory(ledger, today, thresholds), list),
            ('listingBacklog', lambda: metrics.listing_backlog(ledger),
             lambda: {'vinted': 0, 'ebay': 0}),
        ]

    @staticmethod
    def _timeline(ledger: List[Any]) -> List[Dict[str, Any]]:
        return [
            {
                'year': bucket.year,
                'month': bucket.month,
                'label': bucket.label,
                'totalSales': round_currency(bucket.total_sales),
                'totalPurchase': round_currency(bucket.total_purchase),
                'profit': round_currency(bucket.profit),
            }
            for bucket in profit_timeline(ledger)
        ]

    @staticmethod
    def _sell_through(ledger: List[Any], year: Optional[int]) -> Dict[str, Any]:
        rate = metrics.sell_through_rate(ledger, year)
        return {
            'totalListed': rate.total_listed,
            'totalSold': rate.total_sold,
            'percentage': round_to(rate.percentage, 2),
        }

    @staticmethod
    def _average_selling_price(ledger: List[Any], year: Optional[int]) -> Dict[str, Any]:
        asp = metrics.average_selling_price(ledger, year)
        return {
            'totalSales': round_currency(asp.total_sales),
            'soldCount': asp.sold_count,
            'average': round_currency(asp.average),
        }

    @staticmethod
    def _average_profit_per_item(ledger: List[Any], year: Optional[int]) -> Dict[str, Any]:
        per_item = metrics.average_profit_per_item(ledger, year)
        return {
            'netProfit': round_currency(per_item.net_profit),
            'soldCount': per_item.sold_count,
            'average': round_currency(per_item.average),
        }

    @staticmethod
    def _roi(ledger: List[Any], year: Optional[int]) -> Dict[str, Any]:
        totals = metrics.scope_totals(ledger, year)
        return {
            'profit': round_currency(totals.profit),
            'totalSpend': round_currency(totals.total_purchase),
            'percentage': round_to(totals.roi_percentage, 2),
        }

    @staticmethod
    def _year_totals(ledger: List[Any], year: Optional[int]) -> Dict[str, Any]:
        totals = metrics.scope_totals(ledger, year)
        return {
            'totalPurchase': round_currency(totals.total_purchase),
            'totalSales': round_currency(totals.total_sales),
            'profit': round_currency(totals.profit),
        }

    @staticmethod
    def _aged_inventory(ledger: List[Any], today: date, thresholds: List[int]) -> List[Dict[str, Any]]:
        return [
            {'minDays': aged.min_days, 'count': aged.count, 'value': round_currency(aged.value)}
            for aged in metrics.aged_inventory(ledger, today, thresholds)
        ]

    # ==================== Platform report ====================

    def build_platform_report(self, year: int, month: int) -> Dict[str, Any]:
        """
        Build the Vinted / eBay attribution report for one month of sales.

        Args:
            year: Calendar year of the sales
            month: Calendar month of the sales (1-12)

        Returns:
            Payload with per-platform sums and the untagged / ambiguous worklists

        Raises:
            ValueError: If month is not 1-12
            LedgerStoreUnavailable: If the ledger cannot be read
        """
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {month}")

        start = date(year, month, 1)
        next_month = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        sold = self.transaction_store.get_sold_between(start, next_month - timedelta(days=1))

        result = attribute_month(sold, year, month)
        logger.info(
            f"Platform report {year}-{month:02d}: {len(sold)} sales, "
            f"{len(result.untagged)} untagged, {len(result.ambiguous)} ambiguous"
        )
        return {
            'year': year,
            'month': month,
            'vinted': result.vinted.to_dict(),
            'ebay': result.ebay.to_dict(),
            'untaggedItems': [worklist_entry(tx) for tx in result.untagged],
            'ambiguousItems': [worklist_entry(tx) for tx in result.ambiguous],
        }

    # ==================== Tax year ====================

    def build_tax_year_summary(self, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Summarise the tax year containing today.

        Raises:
            LedgerStoreUnavailable: If either ledger cannot be read
        """
        start, end = current_tax_year(
            today,
            self.settings.tax_year_start_month,
            self.settings.tax_year_start_day,
        )
        ledger = self.transaction_store.get_all()
        expenses = self.expense_store.get_between(start, end)
        return tax_year_summary(ledger, expenses, start, end)
