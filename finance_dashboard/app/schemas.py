# finance_dashboard/app/schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

TransactionType = Literal["income", "expense"]


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Pydantic schema for incoming transaction objects (used for validation)
class TransactionIn(BaseModel):
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    description: str = Field(..., min_length=1)
    date: str = Field(..., pattern=DATE_PATTERN)
    type: TransactionType
    category: Optional[str] = None

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("description must not be blank")
        return value

    @field_validator("date")
    @classmethod
    def date_on_calendar(cls, value: str) -> str:
        try:
            datetime.strptime(value, "%Y-%m-%d")
        except ValueError:
            raise ValueError("date must be a real calendar date (YYYY-MM-DD)")
        return value

    @field_validator("category", mode="before")
    @classmethod
    def category_blank_is_missing(cls, value):
        return _blank_to_none(value)


class TransactionOut(TransactionIn):
    id: int
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    class Config:
        from_attributes = True


class BudgetCreate(BaseModel):
    month: str = Field(..., pattern=MONTH_PATTERN)
    category: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, allow_inf_nan=False)

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("category must not be blank")
        return value


class BudgetOut(BudgetCreate):
    id: int
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    class Config:
        from_attributes = True


class CategoryShare(BaseModel):
    category: str
    amount: float
    count: int
    percentage: int
    color: str


class MonthlyTotals(BaseModel):
    month: str
    income: float
    expenses: float


class BudgetComparison(BaseModel):
    category: str
    budget: float
    actual: float
    remaining: float
    percentage: int
    color: str


class Insight(BaseModel):
    type: Literal["highest", "trend", "category"]
    title: str
    description: str
    value: str
    icon: str
    color: str


class Summary(BaseModel):
    income: float
    expenses: float
    balance: float
    count: int


class CategoryOptions(BaseModel):
    expense: List[str]
    income: List[str]
