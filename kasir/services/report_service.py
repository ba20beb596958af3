from datetime import date, datetime, time
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional

from kasir.config import get_settings
from kasir.database import apply_timeouts
from kasir.exceptions import InvalidInputError, ReportUnavailableError
from kasir.schemas.report import BestSellingProduct, SalesReport
from kasir.stores.ledger import LedgerStore


def day_bounds(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """Expand calendar dates to [start 00:00:00, end 23:59:59.999999]."""
    return datetime.combine(start_date, time.min), datetime.combine(end_date, time.max)


class ReportService:
    """
    Read-only sales aggregation over the ledger.

    The two aggregates run as independent reads without locking. A checkout
    committing in between may be counted by one and not the other.
    """

    def __init__(self, db: Session, timeout_ms: Optional[int] = None):
        self.db = db
        self.ledger = LedgerStore(db)
        self.timeout_ms = timeout_ms if timeout_ms is not None else get_settings().STATEMENT_TIMEOUT_MS

    def get_report(self, start: datetime, end: datetime) -> SalesReport:
        """
        Compute revenue, transaction count and best seller in [start, end].

        Raises:
            InvalidInputError: If start is after end
            ReportUnavailableError: If an aggregate query fails
        """
        if start > end:
            raise InvalidInputError(f"start {start.isoformat()} is after end {end.isoformat()}")

        try:
            apply_timeouts(self.db, self.timeout_ms)
            revenue, count = self.ledger.aggregate_revenue_and_count(start, end)
            top = self.ledger.top_product_by_quantity(start, end)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ReportUnavailableError(f"report unavailable: {e}") from e

        if top is None:
            top_product = BestSellingProduct(name="-", total_sold=0)
        else:
            top_product = BestSellingProduct(name=top[0], total_sold=top[1])

        return SalesReport(
            total_revenue=revenue,
            total_transaction=count,
            top_product=top_product,
        )
