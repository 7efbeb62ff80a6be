# finance_dashboard/app/models/transaction_model.py
from sqlalchemy import Column, Integer, String, Float, DateTime
from finance_dashboard.app.db import Base
from datetime import datetime, timezone


def _now():
    return datetime.now(timezone.utc)


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Float, nullable=False)
    description = Column(String, nullable=False)
    # ISO "YYYY-MM-DD" kept as text, month filters compare it lexically
    date = Column(String(10), nullable=False, index=True)
    type = Column(String(10), nullable=False, index=True)
    category = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_now)
    updated_at = Column(DateTime, nullable=False, default=_now, onupdate=_now)
