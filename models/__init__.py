"""
Database models for the resale ledger.
All SQLModel table definitions are centralized here.
"""

from models.transaction import Transaction
from models.expense import Expense

__all__ = [
    'Transaction',
    'Expense',
]
