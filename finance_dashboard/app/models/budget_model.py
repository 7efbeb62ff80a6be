from sqlalchemy import Column, Integer, String, Float, DateTime, UniqueConstraint
from finance_dashboard.app.db import Base
from finance_dashboard.app.models.transaction_model import _now


class Budget(Base):
    __tablename__ = "budgets"
    __table_args__ = (
        UniqueConstraint("month", "category", name="uq_budget_month_category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    month = Column(String(7), nullable=False, index=True)
    category = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_now)
    updated_at = Column(DateTime, nullable=False, default=_now, onupdate=_now)
