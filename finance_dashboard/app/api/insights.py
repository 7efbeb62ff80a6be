# finance_dashboard/app/api/insights.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
import logging

from finance_dashboard.app.db import get_db
from finance_dashboard.app.schemas import MONTH_PATTERN, Insight, CategoryOptions
from finance_dashboard.app import reports

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/insights", response_model=List[Insight])
def get_insights(month: Optional[str] = Query(None, pattern=MONTH_PATTERN), db: Session = Depends(get_db)):
    """
    Spending insight cards for one month (or for all expenses when no month is given):
    - Highest spending category
    - Average daily spending
    - Number of expense transactions
    - Most expensive transaction
    - Month-over-month change (only with a month)
    """
    try:
        return reports.generate_insights(db, month)
    except SQLAlchemyError:
        logger.exception("Error generating insights")
        raise HTTPException(status_code=500, detail="Failed to generate insights")


@router.get("/categories", response_model=CategoryOptions)
def category_options():
    """Predefined category labels offered for new transactions."""
    return {"expense": reports.EXPENSE_CATEGORIES, "income": reports.INCOME_CATEGORIES}
