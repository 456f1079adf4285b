"""
Expense model - a business expense that is not stock (packaging, postage, fees).
"""

from typing import Optional
from datetime import date
from sqlmodel import SQLModel, Field


class Expense(SQLModel, table=True):
    """Represents a non-stock business expense."""
    __tablename__ = "expenses"

    id: Optional[int] = Field(default=None, primary_key=True)
    item: Optional[str] = Field(default=None)
    cost: Optional[float] = Field(default=None)
    purchase_date: Optional[date] = Field(default=None, index=True)
    receipt_name: Optional[str] = Field(default=None)
    purchase_location: Optional[str] = Field(default=None)
