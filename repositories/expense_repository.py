"""
Expense Repository - data access layer for the Expense model.
"""

from typing import Optional, List
from datetime import date
from sqlmodel import Session, select, col

from models import Expense
from repositories.transaction_repository import run_in_session


class ExpenseRepository:
    """Repository for Expense reads (and inserts used for seeding)."""

    @staticmethod
    def add(expense: Expense, session: Optional[Session] = None) -> Expense:
        """Add a new expense record."""
        def _add(sess: Session) -> Expense:
            sess.add(expense)
            sess.commit()
            sess.refresh(expense)
            return expense

        return run_in_session(_add, session)

    @staticmethod
    def get_all(session: Optional[Session] = None) -> List[Expense]:
        """Retrieve all expense records."""
        def _get_all(sess: Session) -> List[Expense]:
            return list(sess.exec(select(Expense).order_by(Expense.id)).all())

        return run_in_session(_get_all, session)

    @staticmethod
    def get_between(start: date, end: date, session: Optional[Session] = None) -> List[Expense]:
        """
        Retrieve expenses with a purchase date in [start, end].

        Args:
            start: First day of the range (inclusive)
            end: Last day of the range (inclusive)
            session: Optional existing session for transaction reuse

        Returns:
            List of Expense objects
        """
        def _get_between(sess: Session) -> List[Expense]:
            statement = select(Expense).where(
                col(Expense.purchase_date).between(start, end)
            ).order_by(Expense.purchase_date)
            return list(sess.exec(statement).all())

        return run_in_session(_get_between, session)
