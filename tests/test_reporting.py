"""
Tests for the reporting service and the assembled payloads.
"""

from datetime import date

import pytest

from config import Settings
from conftest import FakeStore, make_tx
from models import Expense
from services import metrics
from services.reporting import ReportingService

TODAY = date(2024, 6, 12)

MONTHLY_KEYS = (
    'monthlyProfit',
    'monthlyExpenses',
    'monthlyAverageSellingPrice',
    'monthlyAverageProfitPerItem',
    'monthlyAverageProfitMultiple',
)

PAYLOAD_KEYS = {
    'selectedYear', 'availableYears', 'profitTimeline', *MONTHLY_KEYS,
    'salesByCategory', 'unsoldStockByCategory', 'sellThroughRate',
    'averageSellingPrice', 'averageProfitPerItem', 'roi', 'averageDaysToSell',
    'activeListingsCount', 'unsoldInventoryValue', 'yearSpecificTotals',
    'allTimeAverageProfitMultiple', 'yearItemsStats', 'currentMonthSales',
    'currentWeekSales', 'agedInventory', 'listingBacklog',
}


def service_for(rows, **settings_overrides):
    return ReportingService(FakeStore(rows), FakeStore(), settings=Settings(**settings_overrides))


def test_empty_ledger_reports_zeros():
    report = service_for([]).build_report(None, today=TODAY)

    assert set(report) == PAYLOAD_KEYS
    assert report['selectedYear'] == 2024
    assert report['availableYears'] == []
    assert report['profitTimeline'] == []
    assert report['sellThroughRate'] == {'totalListed': 0, 'totalSold': 0, 'percentage': 0.0}
    assert report['roi'] == {'profit': 0.0, 'totalSpend': 0.0, 'percentage': 0.0}
    assert report['averageDaysToSell'] == {'days': 0.0}
    assert report['allTimeAverageProfitMultiple'] == 0.0
    for key in MONTHLY_KEYS:
        assert [row['month'] for row in report[key]] == list(range(1, 13))


def test_scenario_single_ebay_sale_across_two_months():
    rows = [make_tx(id=1, purchase_date=date(2024, 1, 10), purchase_price=20.0,
                    sale_date=date(2024, 2, 15), sale_price=50.0, sold_platform="eBay")]
    service = service_for(rows)

    report = service.build_report(2024, today=TODAY)
    platform = service.build_platform_report(2024, 2)

    assert report['profitTimeline'] == [
        {'year': 2024, 'month': 1, 'label': '2024-01-01',
         'totalSales': 0.0, 'totalPurchase': 20.0, 'profit': -20.0},
        {'year': 2024, 'month': 2, 'label': '2024-02-01',
         'totalSales': 50.0, 'totalPurchase': 0.0, 'profit': 50.0},
    ]
    assert platform['ebay'] == {'purchases': 20.0, 'sales': 50.0, 'profit': 30.0}
    assert platform['vinted'] == {'purchases': 0.0, 'sales': 0.0, 'profit': 0.0}
    assert platform['untaggedItems'] == []
    assert report['roi'] == {'profit': 30.0, 'totalSpend': 20.0, 'percentage': 150.0}
    assert report['averageDaysToSell'] == {'days': 36.0}


def test_scenario_single_unsold_item():
    rows = [make_tx(id=1, purchase_date=date(2024, 3, 1), purchase_price=15.0)]

    report = service_for(rows).build_report(2024, today=TODAY)

    assert report['activeListingsCount'] == {'count': 1}
    assert report['unsoldInventoryValue'] == {'value': 15.0}
    assert report['averageDaysToSell'] == {'days': 0.0}
    assert report['allTimeAverageProfitMultiple'] == 0.0
    assert report['sellThroughRate'] == {'totalListed': 1, 'totalSold': 0, 'percentage': 0.0}


def test_scenario_zero_cost_sale_is_left_out_of_profit_multiple():
    rows = [
        make_tx(id=1, purchase_date=date(2024, 3, 1), purchase_price=0.0,
                sale_date=date(2024, 3, 2), sale_price=30.0),
        make_tx(id=2, purchase_date=date(2024, 3, 1), purchase_price=10.0,
                sale_date=date(2024, 3, 2), sale_price=25.0),
    ]

    report = service_for(rows).build_report(2024, today=TODAY)

    assert report['allTimeAverageProfitMultiple'] == 2.5
    assert report['monthlyAverageProfitMultiple'][2] == {'month': 3, 'average': 2.5}


def test_scenario_untagged_sale_appears_in_worklist():
    rows = [make_tx(id=9, item_name="Denim jacket", purchase_date=date(2024, 1, 1),
                    purchase_price=5.0, sale_date=date(2024, 2, 3), sale_price=25.0,
                    sold_platform=None, vinted=False, ebay=False)]

    platform = service_for(rows).build_platform_report(2024, 2)

    assert platform['vinted']['sales'] == 0.0
    assert platform['ebay']['sales'] == 0.0
    assert platform['untaggedItems'] == [{
        'id': 9,
        'itemName': 'Denim jacket',
        'category': None,
        'saleDate': '2024-02-03',
        'salePrice': 25.0,
        'soldPlatform': None,
        'vinted': False,
        'ebay': False,
    }]


def test_scenario_missing_year_matches_most_recent_year():
    rows = [
        make_tx(id=1, purchase_date=date(2023, 5, 1), purchase_price=10.0,
                sale_date=date(2024, 2, 1), sale_price=30.0),
        make_tx(id=2, purchase_date=date(2024, 4, 1), purchase_price=7.0),
    ]
    service = service_for(rows)

    fallback = service.build_report(2019, today=TODAY)
    direct = service.build_report(2024, today=TODAY)

    assert fallback['availableYears'] == [2024, 2023]
    assert fallback['selectedYear'] == 2024
    assert fallback == direct


def test_malformed_year_uses_current_year():
    rows = [make_tx(id=1, purchase_date=date(2024, 1, 1), purchase_price=1.0)]

    report = service_for(rows).build_report("not-a-year", today=TODAY)

    assert report['selectedYear'] == 2024


def test_all_scope_covers_whole_history():
    rows = [
        make_tx(id=1, purchase_date=date(2022, 1, 1), purchase_price=10.0,
                sale_date=date(2022, 3, 1), sale_price=20.0),
        make_tx(id=2, purchase_date=date(2024, 1, 1), purchase_price=5.0,
                sale_date=date(2024, 3, 1), sale_price=15.0),
    ]

    report = service_for(rows).build_report("all", today=TODAY)

    assert report['selectedYear'] == "all"
    assert report['yearSpecificTotals'] == {'totalPurchase': 15.0, 'totalSales': 35.0, 'profit': 20.0}
    assert report['monthlyProfit'][2]['totalSales'] == 35.0
    assert report['yearItemsStats'] == {'listed': 2, 'sold': 2}


def test_currency_is_rounded_only_at_assembly():
    rows = [
        make_tx(id=i, purchase_date=date(2024, 1, 1), purchase_price=0.1,
                sale_date=date(2024, 1, 2), sale_price=0.2)
        for i in range(3)
    ]

    report = service_for(rows).build_report(2024, today=TODAY)

    assert report['yearSpecificTotals'] == {'totalPurchase': 0.3, 'totalSales': 0.6, 'profit': 0.3}
    assert report['roi']['percentage'] == 100.0


def test_single_ledger_read_per_report():
    store = FakeStore([make_tx(id=1, purchase_date=date(2024, 1, 1))])
    ReportingService(store, FakeStore(), settings=Settings()).build_report(2024, today=TODAY)
    assert store.reads == 1


def test_failing_section_aborts_report_by_default(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("category lookup failed")

    monkeypatch.setattr(metrics, "sales_by_category", boom)

    with pytest.raises(RuntimeError):
        service_for([]).build_report(2024, today=TODAY)


def test_failing_section_is_isolated_when_enabled(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("category lookup failed")

    monkeypatch.setattr(metrics, "sales_by_category", boom)
    rows = [make_tx(id=1, purchase_date=date(2024, 1, 1), purchase_price=3.0)]

    report = service_for(rows, report_isolate_failures=True).build_report(2024, today=TODAY)

    assert report['salesByCategory'] == []
    assert report['errors'] == {'salesByCategory': 'category lookup failed'}
    assert report['unsoldInventoryValue'] == {'value': 3.0}


def test_platform_report_rejects_invalid_month():
    with pytest.raises(ValueError):
        service_for([]).build_platform_report(2024, 0)


def test_tax_year_summary_reads_both_ledgers():
    rows = [make_tx(id=1, purchase_date=date(2024, 5, 1), purchase_price=10.0,
                    sale_date=date(2024, 6, 1), sale_price=30.0)]
    expenses = [Expense(id=1, item="Labels", cost=2.0, purchase_date=date(2024, 5, 2))]
    service = ReportingService(FakeStore(rows), FakeStore(expenses=expenses), settings=Settings())

    summary = service.build_tax_year_summary(today=TODAY)

    assert summary['taxYearStart'] == '2024-04-01'
    assert summary['netAmount'] == 18.0
