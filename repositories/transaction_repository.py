"""
Transaction Repository - read access to the resale ledger.
Optimized with optional session parameter for transaction reuse.
Any database failure surfaces as LedgerStoreUnavailable.
"""

import logging
from typing import Callable, Optional, List, TypeVar
from datetime import date
from sqlalchemy.exc import DBAPIError
from sqlmodel import Session, select, or_, col

from db_engine import get_engine, LedgerStoreUnavailable
from models import Transaction

logger = logging.getLogger(__name__)

T = TypeVar('T')


def run_in_session(action: Callable[[Session], T], session: Optional[Session] = None) -> T:
    """
    Run a repository action in the given session, or in a fresh one.

    Args:
        action: Callable receiving the session
        session: Optional existing session for transaction reuse

    Returns:
        Whatever the action returns

    Raises:
        LedgerStoreUnavailable: If the database cannot be reached or read
    """
    try:
        if session is not None:
            return action(session)
        with Session(get_engine()) as new_session:
            return action(new_session)
    except DBAPIError as e:
        logger.error(f"Ledger store unavailable: {e}")
        raise LedgerStoreUnavailable(str(e)) from e


class TransactionRepository:
    """Repository for ledger Transaction reads (and inserts used for seeding)."""

    @staticmethod
    def add(transaction: Transaction, session: Optional[Session] = None) -> Transaction:
        """
        Add a new transaction to the ledger.

        Args:
            transaction: Unsaved Transaction object
            session: Optional existing session for transaction reuse

        Returns:
            Created Transaction object with its id assigned
        """
        def _add(sess: Session) -> Transaction:
            sess.add(transaction)
            sess.commit()
            sess.refresh(transaction)
            return transaction

        return run_in_session(_add, session)

    @staticmethod
    def get_all(session: Optional[Session] = None) -> List[Transaction]:
        """
        Retrieve every transaction in the ledger.

        Args:
            session: Optional existing session for transaction reuse

        Returns:
            List of all Transaction objects
        """
        def _get_all(sess: Session) -> List[Transaction]:
            statement = select(Transaction).order_by(Transaction.id)
            return list(sess.exec(statement).all())

        return run_in_session(_get_all, session)

    @staticmethod
    def get_by_id(transaction_id: int, session: Optional[Session] = None) -> Optional[Transaction]:
        """Retrieve a transaction by its ID."""
        return run_in_session(lambda sess: sess.get(Transaction, transaction_id), session)

    @staticmethod
    def get_by_year(year: int, session: Optional[Session] = None) -> List[Transaction]:
        """
        Retrieve transactions purchased OR sold during a calendar year.

        Args:
            year: Calendar year
            session: Optional existing session for transaction reuse

        Returns:
            List of Transaction objects touching that year
        """
        start, end = date(year, 1, 1), date(year, 12, 31)

        def _get_by_year(sess: Session) -> List[Transaction]:
            statement = select(Transaction).where(
                or_(
                    col(Transaction.purchase_date).between(start, end),
                    col(Transaction.sale_date).between(start, end)
                )
            ).order_by(Transaction.id)
            return list(sess.exec(statement).all())

        return run_in_session(_get_by_year, session)

    @staticmethod
    def get_sold_between(start: date, end: date, session: Optional[Session] = None) -> List[Transaction]:
        """
        Retrieve sold transactions whose sale date falls in [start, end].

        Only rows with a purchase date are returned, since a transaction
        counts as sold only when both dates are present.
        """
        def _get_sold(sess: Session) -> List[Transaction]:
            statement = select(Transaction).where(
                col(Transaction.purchase_date).is_not(None),
                col(Transaction.sale_date).between(start, end)
            ).order_by(Transaction.sale_date, Transaction.id)
            return list(sess.exec(statement).all())

        return run_in_session(_get_sold, session)
