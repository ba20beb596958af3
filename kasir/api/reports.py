import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from kasir.database import get_db
from kasir.exceptions import InvalidInputError, ReportUnavailableError
from kasir.schemas.report import SalesReport
from kasir.services.report_service import ReportService, day_bounds

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/report", tags=["Reports"])


def _build_report(db: Session, start_date: date, end_date: date) -> SalesReport:
    start, end = day_bounds(start_date, end_date)
    try:
        return ReportService(db).get_report(start, end)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ReportUnavailableError as e:
        logger.error(f"Report {start_date}..{end_date} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Report is temporarily unavailable"
        )


@router.get(
    "/hari-ini",
    response_model=SalesReport,
    summary="Today's sales report",
    description="Revenue, transaction count and best seller for the current day."
)
def report_today(db: Session = Depends(get_db)):
    """Get today's report."""
    today = date.today()
    return _build_report(db, today, today)


@router.get(
    "",
    response_model=SalesReport,
    summary="Sales report for a date range",
    description="""
    Revenue, transaction count and best seller between two calendar days,
    both inclusive. Without both dates the report covers today.
    """
)
def report_range(
    start_date: Optional[date] = Query(None, description="First day (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Last day (YYYY-MM-DD)"),
    db: Session = Depends(get_db)
):
    """Get a report for a closed range of days."""
    if start_date is None or end_date is None:
        start_date = end_date = date.today()
    return _build_report(db, start_date, end_date)
