# finance_dashboard/app/api/budgets.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import List, Optional
import logging

from finance_dashboard.app.db import get_db
from finance_dashboard.app.models.budget_model import Budget
from finance_dashboard.app.schemas import MONTH_PATTERN, BudgetCreate, BudgetOut, BudgetComparison
from finance_dashboard.app import reports

logger = logging.getLogger(__name__)

router = APIRouter()

DUPLICATE_BUDGET = "Budget already exists for this month and category"


@router.get("", response_model=List[BudgetOut])
def list_budgets(month: Optional[str] = Query(None, pattern=MONTH_PATTERN), db: Session = Depends(get_db)):
    """Budgets, newest month first and categories alphabetical within a month."""
    try:
        query = db.query(Budget)
        if month:
            query = query.filter(Budget.month == month)
        return query.order_by(Budget.month.desc(), Budget.category.asc()).all()
    except SQLAlchemyError:
        logger.exception("Error fetching budgets")
        raise HTTPException(status_code=500, detail="Failed to fetch budgets")


@router.post("", response_model=BudgetOut, status_code=201)
def add_budget(budget: BudgetCreate, db: Session = Depends(get_db)):
    try:
        existing = (
            db.query(Budget)
            .filter(Budget.month == budget.month, Budget.category == budget.category)
            .first()
        )
        if existing:
            raise HTTPException(status_code=409, detail=DUPLICATE_BUDGET)
        new_budget = Budget(month=budget.month, category=budget.category, amount=budget.amount)
        db.add(new_budget)
        db.commit()
        db.refresh(new_budget)
    except IntegrityError:
        # a concurrent insert got past the existence check
        db.rollback()
        raise HTTPException(status_code=409, detail=DUPLICATE_BUDGET)
    except SQLAlchemyError:
        logger.exception("Error creating budget")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create budget")
    logger.info("Created budget %s for %s / %s", new_budget.id, new_budget.month, new_budget.category)
    return new_budget


@router.get("/comparison", response_model=List[BudgetComparison])
def budget_comparison(month: Optional[str] = Query(None, pattern=MONTH_PATTERN), db: Session = Depends(get_db)):
    """
    Compare each budget of a month with the actual expenses of that month.
    """
    if not month:
        raise HTTPException(status_code=400, detail="Month parameter is required")
    try:
        return reports.budget_comparison(db, month)
    except SQLAlchemyError:
        logger.exception("Error fetching budget comparison")
        raise HTTPException(status_code=500, detail="Failed to fetch budget comparison")


@router.delete("/{budget_id}")
def delete_budget(budget_id: int, db: Session = Depends(get_db)):
    try:
        deleted = db.query(Budget).filter(Budget.id == budget_id).delete()
        if not deleted:
            raise HTTPException(status_code=404, detail="Budget not found")
        db.commit()
    except SQLAlchemyError:
        logger.exception("Error deleting budget")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete budget")
    logger.info("Deleted budget %s", budget_id)
    return {"message": "Budget deleted successfully"}
