from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from kasir.models.transaction import Transaction, TransactionDetail


class LedgerStore:
    """
    Append-only access to transactions and their details.

    Writes are flushed but never committed here.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert_transaction(self, total_amount: int) -> Transaction:
        """Insert a transaction header and return it with its generated id."""
        transaction = Transaction(total_amount=total_amount)
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def insert_details(self, transaction_id: int, details: list[TransactionDetail]) -> None:
        """Insert all detail rows for a transaction, keeping their order."""
        for detail in details:
            detail.transaction_id = transaction_id
        self.db.add_all(details)
        self.db.flush()

    def aggregate_revenue_and_count(self, start: datetime, end: datetime) -> tuple[int, int]:
        """
        Sum of totals and number of transactions created in [start, end].

        Returns:
            Tuple of (revenue, count), both zero when nothing matches
        """
        revenue, count = (
            self.db.query(
                func.coalesce(func.sum(Transaction.total_amount), 0),
                func.count(Transaction.id),
            )
            .filter(Transaction.created_at >= start, Transaction.created_at <= end)
            .one()
        )
        return int(revenue), int(count)

    def top_product_by_quantity(self, start: datetime, end: datetime) -> Optional[tuple[str, int]]:
        """
        Best-selling product name in [start, end] by summed quantity.

        Ties go to the lowest product id, then to the name.

        Returns:
            Tuple of (name, quantity) or None if nothing was sold
        """
        total_qty = func.sum(TransactionDetail.quantity).label("total_qty")
        row = (
            self.db.query(TransactionDetail.product_name, total_qty)
            .join(Transaction, TransactionDetail.transaction_id == Transaction.id)
            .filter(Transaction.created_at >= start, Transaction.created_at <= end)
            .group_by(TransactionDetail.product_name)
            .order_by(
                total_qty.desc(),
                func.min(TransactionDetail.product_id).asc(),
                TransactionDetail.product_name.asc(),
            )
            .first()
        )
        if row is None:
            return None
        return row[0], int(row[1])
