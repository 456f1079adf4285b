"""
Year selection for reports.
Turns the requested year (possibly missing, malformed or "all") into the
effective reporting scope, given the years that actually have data.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Union

logger = logging.getLogger(__name__)

ALL_YEARS = "all"


@dataclass(frozen=True)
class YearScope:
    """Effective reporting scope: one calendar year, or the whole history."""
    selected_year: Optional[int]
    is_all: bool = False

    @property
    def year_filter(self) -> Optional[int]:
        """Year to filter on; None disables year filtering."""
        return None if self.is_all else self.selected_year

    @property
    def payload_value(self) -> Union[int, str]:
        return ALL_YEARS if self.is_all else self.selected_year


def parse_year_param(raw: Any, today: Optional[date] = None) -> Union[int, str]:
    """
    Parse the requested year from user input.

    Args:
        raw: None, an int, "all", or text holding a year
        today: Reference date for the current-year default

    Returns:
        The requested year as int, or ALL_YEARS. Missing or malformed input
        falls back to the current calendar year.
    """
    current_year = (today or date.today()).year
    if raw is None:
        return current_year
    if isinstance(raw, bool):
        logger.warning(f"Malformed year parameter {raw!r}, using {current_year}")
        return current_year
    text = str(raw).strip()
    if not text:
        return current_year
    if text.lower() == ALL_YEARS:
        return ALL_YEARS
    try:
        year = int(text)
    except ValueError:
        logger.warning(f"Malformed year parameter {raw!r}, using {current_year}")
        return current_year
    if not 1 <= year <= 9999:
        logger.warning(f"Year parameter {raw!r} out of range, using {current_year}")
        return current_year
    return year


def resolve_year(requested: Union[int, str], available_years: List[int]) -> YearScope:
    """
    Choose the effective year for a report.

    - "all" disables year filtering.
    - No data at all: keep the requested year (the report shows zeros).
    - Requested year has data: use it.
    - Otherwise: fall back to the most recent year with data.
    """
    if requested == ALL_YEARS:
        return YearScope(selected_year=None, is_all=True)
    if not available_years or requested in available_years:
        return YearScope(selected_year=requested)

    fallback = max(available_years)
    logger.info(f"No ledger data for {requested}, reporting on {fallback} instead")
    return YearScope(selected_year=fallback)
