# finance_dashboard/app/api/transactions.py
from fastapi import APIRouter, Depends, UploadFile, File, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError
from typing import List, Optional
from io import StringIO
import csv
import logging
import pandas as pd

from finance_dashboard.app.db import get_db
from finance_dashboard.app.models.transaction_model import Transaction
from finance_dashboard.app.schemas import (
    MONTH_PATTERN,
    CategoryShare,
    MonthlyTotals,
    Summary,
    TransactionIn,
    TransactionOut,
    TransactionType,
)
from finance_dashboard.app import reports

logger = logging.getLogger(__name__)

router = APIRouter()

CSV_COLUMNS = ("amount", "description", "date", "type", "category")


def _store_failure(db: Session, action: str):
    logger.exception("Error %s", action)
    db.rollback()
    return HTTPException(status_code=500, detail=f"Failed to {action}")


@router.get("", response_model=List[TransactionOut])
def list_transactions(limit: Optional[int] = Query(None, ge=1), db: Session = Depends(get_db)):
    """All transactions, newest date first. ``limit`` keeps only the most recent ones."""
    try:
        query = db.query(Transaction).order_by(Transaction.date.desc(), Transaction.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()
    except SQLAlchemyError:
        raise _store_failure(db, "fetch transactions")


@router.post("", response_model=TransactionOut, status_code=201)
def create_transaction(payload: TransactionIn, db: Session = Depends(get_db)):
    try:
        txn = Transaction(**payload.model_dump())
        db.add(txn)
        db.commit()
        db.refresh(txn)
    except SQLAlchemyError:
        raise _store_failure(db, "create transaction")
    logger.info("Created transaction %s (%s %.2f)", txn.id, txn.type, txn.amount)
    return txn


@router.put("/{transaction_id}")
def update_transaction(transaction_id: int, payload: TransactionIn, db: Session = Depends(get_db)):
    """Replace every editable field of a transaction."""
    try:
        txn = db.query(Transaction).filter(Transaction.id == transaction_id).first()
        if txn is None:
            raise HTTPException(status_code=404, detail="Transaction not found")
        for field, value in payload.model_dump().items():
            setattr(txn, field, value)
        db.commit()
    except SQLAlchemyError:
        raise _store_failure(db, "update transaction")
    logger.info("Updated transaction %s", transaction_id)
    return {"success": True}


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: int, db: Session = Depends(get_db)):
    try:
        deleted = db.query(Transaction).filter(Transaction.id == transaction_id).delete()
        if not deleted:
            raise HTTPException(status_code=404, detail="Transaction not found")
        db.commit()
    except SQLAlchemyError:
        raise _store_failure(db, "delete transaction")
    logger.info("Deleted transaction %s", transaction_id)
    return {"success": True, "message": "Transaction deleted successfully"}


@router.get("/categories", response_model=List[CategoryShare])
def category_breakdown(
    type_: Optional[TransactionType] = Query(None, alias="type"),
    db: Session = Depends(get_db),
):
    try:
        return reports.category_breakdown(db, type_ or "expense")
    except SQLAlchemyError:
        raise _store_failure(db, "fetch category data")


@router.get("/categories/export")
def export_category_report(
    type_: Optional[TransactionType] = Query(None, alias="type"),
    db: Session = Depends(get_db),
):
    """
    Download the category breakdown (category, amount, count, percentage) as CSV
    """
    try:
        shares = reports.category_breakdown(db, type_ or "expense")
    except SQLAlchemyError:
        raise _store_failure(db, "export category data")

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(["Category", "Amount", "Count", "Percentage"])
    for share in shares:
        writer.writerow([share["category"], share["amount"], share["count"], f"{share['percentage']}%"])

    output.seek(0)
    return StreamingResponse(
        output,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={type_ or 'expense'}_categories.csv"},
    )


@router.get("/monthly", response_model=List[MonthlyTotals])
def monthly_data(db: Session = Depends(get_db)):
    try:
        return reports.monthly_totals(db)
    except SQLAlchemyError:
        raise _store_failure(db, "fetch monthly data")


@router.get("/summary", response_model=Summary)
def summary(month: Optional[str] = Query(None, pattern=MONTH_PATTERN), db: Session = Depends(get_db)):
    try:
        return reports.summarize(db, month)
    except SQLAlchemyError:
        raise _store_failure(db, "fetch summary")


@router.post("/upload-csv", status_code=201)
def upload_transactions_csv(file: UploadFile = File(...), db: Session = Depends(get_db)):
    """
    Upload a CSV with columns: amount, description, date, type, (optional) category
    Every row is validated first; nothing is saved if one row is invalid.
    """
    try:
        df = pd.read_csv(file.file, dtype=str, keep_default_na=False)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Unable to read CSV: {e}")

    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = {"amount", "description", "date", "type"} - set(df.columns)
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"CSV is missing columns: {', '.join(sorted(missing))}",
        )

    validated: List[TransactionIn] = []
    for line, row in enumerate(df.to_dict(orient="records"), start=2):
        values = {col: row[col].strip() for col in CSV_COLUMNS if col in row}
        try:
            validated.append(TransactionIn(**values))
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(p) for p in error["loc"])
            raise HTTPException(status_code=400, detail=f"Invalid row on line {line}: {field}: {error['msg']}")

    try:
        db.add_all([Transaction(**item.model_dump()) for item in validated])
        db.commit()
    except SQLAlchemyError:
        raise _store_failure(db, "import transactions")

    logger.info("Imported %d transactions from %s", len(validated), file.filename)
    return {"message": f"{len(validated)} transactions imported.", "imported": len(validated)}
