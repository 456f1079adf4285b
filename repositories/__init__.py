"""
Repositories package for the resale ledger.
Provides the Ledger Store's read capability to the analytics services.
"""

from repositories.transaction_repository import TransactionRepository
from repositories.expense_repository import ExpenseRepository

__all__ = [
    'TransactionRepository',
    'ExpenseRepository',
]
