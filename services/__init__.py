"""
Services package for the resale ledger.
Provides the analytics core separated from the data layer.
"""

from services.attribution import (
    PlatformTag,
    PlatformBucket,
    classify_platform,
    counts_as_vinted,
    counts_as_ebay,
    attribute_month
)
from services.bucketing import (
    MonthBucket,
    group_by_month,
    profit_timeline,
    year_view,
    available_years
)
from services.year_selection import (
    ALL_YEARS,
    YearScope,
    parse_year_param,
    resolve_year
)
from services.tax_year import current_tax_year, tax_year_summary
from services.reporting import ReportingService

__all__ = [
    # Attribution
    'PlatformTag',
    'PlatformBucket',
    'classify_platform',
    'counts_as_vinted',
    'counts_as_ebay',
    'attribute_month',
    # Bucketing
    'MonthBucket',
    'group_by_month',
    'profit_timeline',
    'year_view',
    'available_years',
    # Year selection
    'ALL_YEARS',
    'YearScope',
    'parse_year_param',
    'resolve_year',
    # Tax year
    'current_tax_year',
    'tax_year_summary',
    # Reporting
    'ReportingService',
]
