# finance_dashboard/app/reports.py
"""
Reporting logic behind the dashboard charts.

Every report takes the database session as its first argument and is
recomputed from the current rows on each call:
- category_breakdown: totals and percentage share per category
- monthly_totals: income/expense per month over the trailing 12 months
- budget_comparison: a month's budgets against actual spend
- generate_insights: summary cards for one month (or all time)
- summarize: income, expenses and balance

Month filters are lexical: "2024-02" matches dates from "2024-02-01" to
"2024-02-31" compared as strings.
"""

import logging
import math
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func, case, desc
from sqlalchemy.orm import Session

from finance_dashboard.app.db import CURRENCY_SYMBOL
from finance_dashboard.app.models.transaction_model import Transaction
from finance_dashboard.app.models.budget_model import Budget

logger = logging.getLogger(__name__)

PALETTE = [
    "#3B82F6", "#EF4444", "#10B981", "#F59E0B", "#8B5CF6",
    "#EC4899", "#06B6D4", "#84CC16", "#F97316", "#6366F1",
    "#14B8A6", "#F43F5E",
]

UNCATEGORIZED = "Uncategorized"

# Daily average always divides by 30, whatever the month length
DAYS_PER_MONTH = 30

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

EXPENSE_CATEGORIES = [
    "Food & Dining", "Transportation", "Shopping", "Entertainment",
    "Healthcare", "Education", "Housing", "Utilities", "Insurance",
    "Travel", "Gifts", "Other",
]

INCOME_CATEGORIES = ["Salary", "Freelance", "Investment", "Business", "Gifts", "Other"]


# ============================================================================
# HELPERS
# ============================================================================

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def palette_color(index: int) -> str:
    return PALETTE[index % len(PALETTE)]


def month_bounds(month: str) -> Tuple[str, str]:
    """Lexical date range covering a "YYYY-MM" month."""
    return f"{month}-01", f"{month}-31"


def previous_month(month: str) -> str:
    """Calendar month before a "YYYY-MM" month, rolling the year back from January."""
    year, num = month.split("-")
    if num == "01":
        return f"{int(year) - 1}-12"
    return f"{year}-{int(num) - 1:02d}"


def window_start(today: date) -> date:
    """First day of the month eleven months before today's month."""
    index = today.year * 12 + (today.month - 1) - 11
    return date(index // 12, index % 12 + 1, 1)


def month_label(month: str) -> str:
    year, num = month.split("-")
    return f"{MONTH_NAMES[int(num) - 1]} {year}"


def format_money(amount: float, symbol: Optional[str] = None) -> str:
    symbol = CURRENCY_SYMBOL if symbol is None else symbol
    return f"{symbol}{amount:.2f}"


def _category_expr():
    return func.coalesce(Transaction.category, UNCATEGORIZED).label("category_name")


def _within(query, start: Optional[str], end: Optional[str]):
    if start is not None:
        query = query.filter(Transaction.date >= start)
    if end is not None:
        query = query.filter(Transaction.date <= end)
    return query


def _expense_total(db: Session, start: str, end: str) -> float:
    query = db.query(func.sum(Transaction.amount)).filter(Transaction.type == "expense")
    return float(_within(query, start, end).scalar() or 0)


# ============================================================================
# CATEGORY AGGREGATOR
# ============================================================================

def shape_category_shares(rows) -> List[dict]:
    """Add percentage share and palette color to (category, amount, count) rows."""
    grand_total = sum(float(amount or 0) for _, amount, _ in rows)
    shares = []
    for index, (category, amount, count) in enumerate(rows):
        amount = float(amount or 0)
        shares.append({
            "category": category,
            "amount": amount,
            "count": int(count),
            "percentage": round_half_up(amount / grand_total * 100) if grand_total > 0 else 0,
            "color": palette_color(index),
        })
    return shares


def category_breakdown(
    db: Session,
    type_: str = "expense",
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> List[dict]:
    """Per-category totals for one transaction type, largest first."""
    query = db.query(
        _category_expr(),
        func.sum(Transaction.amount).label("total"),
        func.count(Transaction.id).label("count"),
    ).filter(Transaction.type == type_)
    rows = (
        _within(query, start, end)
        .group_by("category_name")
        .order_by(desc("total"), "category_name")
        .all()
    )
    return shape_category_shares(rows)


# ============================================================================
# MONTHLY AGGREGATOR
# ============================================================================

def monthly_totals(db: Session, today: Optional[date] = None) -> List[dict]:
    """Income and expense per month for the 12 months ending with the current one.

    Months without transactions are left out, so the result can hold fewer
    than 12 rows.
    """
    today = today or date.today()
    start = window_start(today).isoformat()
    _, end = month_bounds(today.strftime("%Y-%m"))

    month_key = func.substr(Transaction.date, 1, 7).label("month")
    income = func.sum(case((Transaction.type == "income", Transaction.amount), else_=0)).label("income")
    expenses = func.sum(case((Transaction.type == "expense", Transaction.amount), else_=0)).label("expenses")

    rows = (
        _within(db.query(month_key, income, expenses), start, end)
        .group_by("month")
        .order_by("month")
        .all()
    )
    return [
        {"month": month_label(key), "income": float(inc or 0), "expenses": float(exp or 0)}
        for key, inc, exp in rows
    ]


# ============================================================================
# BUDGET COMPARATOR
# ============================================================================

def budget_comparison(db: Session, month: str) -> List[dict]:
    """Budgeted vs actual spend for every budget set in ``month``.

    Categories with spend but no budget are not part of the result.
    """
    budgets = db.query(Budget).filter(Budget.month == month).order_by(Budget.id).all()
    if not budgets:
        return []

    start, end = month_bounds(month)
    query = db.query(_category_expr(), func.sum(Transaction.amount)).filter(Transaction.type == "expense")
    actual_map = {
        cat: float(total or 0)
        for cat, total in _within(query, start, end).group_by("category_name").all()
    }

    comparison = []
    for index, budget in enumerate(budgets):
        actual = actual_map.get(budget.category, 0.0)
        comparison.append({
            "category": budget.category,
            "budget": budget.amount,
            "actual": actual,
            "remaining": budget.amount - actual,
            "percentage": round_half_up(actual / budget.amount * 100) if budget.amount > 0 else 0,
            "color": palette_color(index),
        })
    return comparison


# ============================================================================
# INSIGHT GENERATOR
# ============================================================================

def generate_insights(db: Session, month: Optional[str] = None, symbol: Optional[str] = None) -> List[dict]:
    """Summary cards over the expenses of ``month``, or of all time when no month is given."""
    query = db.query(Transaction).filter(Transaction.type == "expense")
    if month:
        query = _within(query, *month_bounds(month))
    expenses = query.order_by(Transaction.id).all()

    if not expenses:
        return []

    insights = []

    spending = {}
    for expense in expenses:
        category = expense.category or UNCATEGORIZED
        spending[category] = spending.get(category, 0) + expense.amount

    highest_category, highest_amount = "", 0
    for category, amount in spending.items():
        if amount > highest_amount:
            highest_category, highest_amount = category, amount

    if highest_category:
        insights.append({
            "type": "highest",
            "title": "Highest Spending Category",
            "description": f"You spent the most on {highest_category}",
            "value": format_money(highest_amount, symbol),
            "icon": "📈",
            "color": "#EF4444",
        })

    total_spending = sum(expense.amount for expense in expenses)
    insights.append({
        "type": "trend",
        "title": "Average Daily Spending",
        "description": "Your daily spending average",
        "value": format_money(total_spending / DAYS_PER_MONTH, symbol),
        "icon": "📊",
        "color": "#3B82F6",
    })

    insights.append({
        "type": "category",
        "title": "Total Transactions",
        "description": "Number of expense transactions",
        "value": str(len(expenses)),
        "icon": "🛒",
        "color": "#10B981",
    })

    most_expensive = expenses[0]
    for expense in expenses[1:]:
        if expense.amount > most_expensive.amount:
            most_expensive = expense
    insights.append({
        "type": "highest",
        "title": "Most Expensive Transaction",
        "description": most_expensive.description,
        "value": format_money(most_expensive.amount, symbol),
        "icon": "💸",
        "color": "#F59E0B",
    })

    if month:
        prev_total = _expense_total(db, *month_bounds(previous_month(month)))
        change = total_spending - prev_total
        change_percent = change / prev_total * 100 if prev_total > 0 else 0
        increased = change >= 0
        insights.append({
            "type": "trend",
            "title": "Month-over-Month Change",
            "description": "Spending increased" if increased else "Spending decreased",
            "value": f"{'+' if increased else ''}{change_percent:.1f}%",
            "icon": "📈" if increased else "📉",
            "color": "#EF4444" if increased else "#10B981",
        })

    logger.debug("Generated %d insights for month=%s", len(insights), month)
    return insights


# ============================================================================
# SUMMARY
# ============================================================================

def summarize(db: Session, month: Optional[str] = None) -> dict:
    income = func.sum(case((Transaction.type == "income", Transaction.amount), else_=0))
    expenses = func.sum(case((Transaction.type == "expense", Transaction.amount), else_=0))
    query = db.query(income, expenses, func.count(Transaction.id))
    if month:
        query = _within(query, *month_bounds(month))
    total_income, total_expenses, count = query.one()
    total_income = float(total_income or 0)
    total_expenses = float(total_expenses or 0)
    return {
        "income": total_income,
        "expenses": total_expenses,
        "balance": total_income - total_expenses,
        "count": int(count or 0),
    }
