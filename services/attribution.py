"""
Platform attribution for sold items.

A sold item's marketplace is described by three fields that are set
independently and sometimes disagree: the free-text sold_platform label and
the vinted / ebay booleans. classify_platform() turns them into a single
PlatformTag so the override rules can be audited in one place.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List

from services.common import amount_or_zero, is_sold, round_currency

logger = logging.getLogger(__name__)

VINTED_LABEL = "Vinted"
EBAY_LABEL = "eBay"


class PlatformTag(Enum):
    """Marketplace a sold item is attributed to."""
    VINTED = "vinted"
    EBAY = "ebay"
    UNTAGGED = "untagged"
    AMBIGUOUS = "ambiguous"  # satisfies both the Vinted and eBay rules


def counts_as_vinted(tx: Any) -> bool:
    """
    Vinted rule: labelled Vinted or flagged vinted, unless the item carries an
    explicit, unambiguous eBay tagging (label eBay, ebay flag set, vinted
    flag explicitly cleared).
    """
    claims_vinted = tx.sold_platform == VINTED_LABEL or tx.vinted is True
    explicit_ebay = tx.sold_platform == EBAY_LABEL and tx.ebay is True and tx.vinted is False
    return claims_vinted and not explicit_ebay


def counts_as_ebay(tx: Any) -> bool:
    """eBay rule, symmetric to counts_as_vinted()."""
    claims_ebay = tx.sold_platform == EBAY_LABEL or tx.ebay is True
    explicit_vinted = tx.sold_platform == VINTED_LABEL and tx.vinted is True and tx.ebay is False
    return claims_ebay and not explicit_vinted


def has_platform_label(tx: Any) -> bool:
    """True when sold_platform holds one of the known marketplace labels."""
    return tx.sold_platform in (VINTED_LABEL, EBAY_LABEL)


def classify_platform(tx: Any) -> PlatformTag:
    """
    Classify a sold transaction into one platform tag.

    Args:
        tx: Transaction-like object

    Returns:
        VINTED or EBAY when exactly one rule matches, AMBIGUOUS when both do,
        UNTAGGED when neither does (the label is then blank or unknown)
    """
    vinted = counts_as_vinted(tx)
    ebay = counts_as_ebay(tx)
    if vinted and ebay:
        return PlatformTag.AMBIGUOUS
    if vinted:
        return PlatformTag.VINTED
    if ebay:
        return PlatformTag.EBAY
    return PlatformTag.UNTAGGED


@dataclass
class PlatformBucket:
    """Purchases, sales and profit attributed to one platform in one month."""
    purchases: float = 0.0
    sales: float = 0.0
    profit: float = 0.0

    def add(self, tx: Any) -> None:
        purchase = amount_or_zero(tx.purchase_price)
        sale = amount_or_zero(tx.sale_price)
        self.purchases += purchase
        self.sales += sale
        self.profit += sale - purchase

    def to_dict(self) -> Dict[str, float]:
        return {
            'purchases': round_currency(self.purchases),
            'sales': round_currency(self.sales),
            'profit': round_currency(self.profit),
        }


@dataclass
class PlatformMonth:
    """Platform attribution result for one (year, month)."""
    year: int
    month: int
    vinted: PlatformBucket = field(default_factory=PlatformBucket)
    ebay: PlatformBucket = field(default_factory=PlatformBucket)
    untagged: List[Any] = field(default_factory=list)
    ambiguous: List[Any] = field(default_factory=list)


def attribute_month(transactions: Iterable[Any], year: int, month: int) -> PlatformMonth:
    """
    Attribute the sales of one month to Vinted, eBay or the untagged worklist.

    Only sold transactions whose sale date falls in the month are considered.
    Ambiguous items are added to both buckets and listed for review; untagged
    items are kept out of both buckets and listed for reconciliation. Items
    attributed by flag alone (blank or unknown label) stay in their bucket
    but are also listed as untagged so the label can be fixed.

    Args:
        transactions: Ledger rows (may include other months)
        year: Calendar year of the sale
        month: Calendar month of the sale (1-12)

    Returns:
        PlatformMonth with bucket sums and worklists
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")

    result = PlatformMonth(year=year, month=month)
    for tx in transactions:
        if not is_sold(tx) or tx.sale_date.year != year or tx.sale_date.month != month:
            continue

        tag = classify_platform(tx)
        if tag in (PlatformTag.VINTED, PlatformTag.AMBIGUOUS):
            result.vinted.add(tx)
        if tag in (PlatformTag.EBAY, PlatformTag.AMBIGUOUS):
            result.ebay.add(tx)
        if tag is PlatformTag.AMBIGUOUS:
            logger.warning(
                f"Transaction {tx.id} matches both Vinted and eBay "
                f"(sold_platform={tx.sold_platform!r}, vinted={tx.vinted}, ebay={tx.ebay})"
            )
            result.ambiguous.append(tx)
        elif tag is PlatformTag.UNTAGGED or not has_platform_label(tx):
            result.untagged.append(tx)

    return result


def worklist_entry(tx: Any) -> Dict[str, Any]:
    """Payload row describing a sold item that needs its platform fixed."""
    sale_date: date = tx.sale_date
    return {
        'id': tx.id,
        'itemName': tx.item_name,
        'category': tx.category,
        'saleDate': sale_date.isoformat() if sale_date else None,
        'salePrice': round_currency(tx.sale_price),
        'soldPlatform': tx.sold_platform,
        'vinted': tx.vinted,
        'ebay': tx.ebay,
    }
