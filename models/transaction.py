"""
Transaction model - one row of the resale ledger.
An item bought for resale and, once sold, the sale that closed it.
"""

from typing import Optional
from datetime import date
from sqlmodel import SQLModel, Field


class Transaction(SQLModel, table=True):
    """Represents an item bought for resale and its (optional) sale."""
    __tablename__ = "stock"

    id: Optional[int] = Field(default=None, primary_key=True)
    item_name: Optional[str] = Field(default=None, index=True)
    category: Optional[str] = Field(default=None)
    purchase_price: Optional[float] = Field(default=None, ge=0)
    purchase_date: Optional[date] = Field(default=None, index=True)
    sale_price: Optional[float] = Field(default=None, ge=0)
    sale_date: Optional[date] = Field(default=None, index=True)
    sold_platform: Optional[str] = Field(default=None)  # "Vinted", "eBay" or free text
    vinted: Optional[bool] = Field(default=None)  # sold on Vinted
    ebay: Optional[bool] = Field(default=None)  # sold on eBay
    net_profit: Optional[float] = Field(default=None)  # authoritative when set
