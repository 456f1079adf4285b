"""
Common per-item helpers shared by the analytics services.
Lifecycle predicates (sold / listed), effective net profit,
profit multiple, days to sell, and boundary rounding.
"""

import logging
import math
from datetime import date
from typing import Any, Optional

logger = logging.getLogger(__name__)

UNCATEGORISED = "Uncategorised"


def to_amount(value: Any) -> Optional[float]:
    """
    Coerce a stored money value to float.

    Args:
        value: Number, numeric string, or None

    Returns:
        Float value, or None when absent or not a finite number
    """
    if value is None or value == "":
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric amount: {value!r}")
        return None
    if not math.isfinite(amount):
        return None
    return amount


def amount_or_zero(value: Any) -> float:
    """Money value for summation contexts: absent counts as 0."""
    amount = to_amount(value)
    return amount if amount is not None else 0.0


def is_sold(tx: Any) -> bool:
    """A transaction is sold when both purchase and sale dates are present."""
    return tx.purchase_date is not None and tx.sale_date is not None


def is_unsold(tx: Any) -> bool:
    return tx.sale_date is None


def is_listed(tx: Any) -> bool:
    """A transaction is listed (active stock) when bought but not yet sold."""
    return tx.purchase_date is not None and tx.sale_date is None


def in_year(value: Optional[date], year: Optional[int]) -> bool:
    """
    Check whether a date falls in a calendar year.
    A year of None means "all years": any present date matches.
    """
    if value is None:
        return False
    return year is None or value.year == year


def net_profit(tx: Any) -> Optional[float]:
    """
    Effective net profit of a transaction.

    The stored net_profit is authoritative; otherwise it is derived as
    sale_price - purchase_price when both prices are present.

    Returns:
        Profit, or None when it cannot be determined
    """
    stored = to_amount(tx.net_profit)
    if stored is not None:
        return stored
    purchase = to_amount(tx.purchase_price)
    sale = to_amount(tx.sale_price)
    if purchase is None or sale is None:
        return None
    return sale - purchase


def profit_multiple(tx: Any) -> Optional[float]:
    """
    Sale price as a multiple of purchase price.
    Undefined (None) unless purchase_price > 0 and a sale price exists.
    """
    purchase = to_amount(tx.purchase_price)
    sale = to_amount(tx.sale_price)
    if purchase is None or purchase <= 0 or sale is None:
        return None
    return sale / purchase


def days_to_sell(tx: Any) -> Optional[int]:
    """Whole days between purchase and sale, clamped at 0; None unless both dates exist."""
    if tx.purchase_date is None or tx.sale_date is None:
        return None
    return max(0, (tx.sale_date - tx.purchase_date).days)


def category_label(tx: Any) -> str:
    category = (tx.category or "").strip()
    return category or UNCATEGORISED


def round_currency(value: Any) -> float:
    """
    Round a currency value to 2 decimal places for the report payload.
    None and NaN become 0.0.
    """
    return round_to(value, 2)


def round_to(value: Any, digits: int) -> float:
    """Round to the given number of digits, mapping None/NaN/inf to 0.0."""
    if value is None:
        return 0.0
    value = float(value)
    if not math.isfinite(value):
        return 0.0
    # Adding 0.0 turns -0.0 into 0.0
    return round(value, digits) + 0.0


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator
