"""Tests for the /transactions routes."""

from datetime import date

import pytest

from finance_dashboard.app.models.transaction_model import Transaction


def _payload(**overrides):
    body = {
        "amount": 100,
        "description": "Groceries",
        "date": "2024-01-05",
        "type": "expense",
        "category": "Food",
    }
    body.update(overrides)
    return body


class TestCreateTransaction:
    """Tests for POST /transactions."""

    def test_created(self, client):
        resp = client.post("/transactions", json=_payload())

        assert resp.status_code == 201
        data = resp.json()
        assert data["id"] > 0
        assert data["amount"] == 100
        assert data["category"] == "Food"
        assert "createdAt" in data and "updatedAt" in data

    def test_amount_as_string_is_parsed(self, client):
        resp = client.post("/transactions", json=_payload(amount="12.50"))

        assert resp.status_code == 201
        assert resp.json()["amount"] == 12.5

    def test_category_is_optional(self, client):
        resp = client.post("/transactions", json=_payload(category=None))

        assert resp.status_code == 201
        assert resp.json()["category"] is None

    def test_blank_category_is_missing(self, client):
        resp = client.post("/transactions", json=_payload(category="  "))

        assert resp.json()["category"] is None

    def test_missing_field(self, client, db):
        body = _payload()
        del body["description"]

        resp = client.post("/transactions", json=body)

        assert resp.status_code == 400
        assert "description" in resp.json()["detail"]
        assert db.query(Transaction).count() == 0

    def test_bad_type(self, client):
        resp = client.post("/transactions", json=_payload(type="transfer"))

        assert resp.status_code == 400

    def test_non_positive_amount(self, client):
        assert client.post("/transactions", json=_payload(amount=0)).status_code == 400
        assert client.post("/transactions", json=_payload(amount=-5)).status_code == 400

    def test_bad_date(self, client):
        resp = client.post("/transactions", json=_payload(date="05/01/2024"))

        assert resp.status_code == 400

    @pytest.mark.parametrize("value", ["2024-13-01", "2024-00-10", "2024-02-30", "2023-02-29"])
    def test_date_not_on_calendar(self, client, db, value):
        resp = client.post("/transactions", json=_payload(date=value))

        assert resp.status_code == 400
        assert "date" in resp.json()["detail"]
        assert db.query(Transaction).count() == 0

    def test_leap_day(self, client):
        assert client.post("/transactions", json=_payload(date="2024-02-29")).status_code == 201

    def test_infinite_amount(self, client, db):
        body = '{"amount": 1e309, "description": "Huge", "date": "2024-01-05", "type": "expense"}'

        resp = client.post("/transactions", content=body, headers={"Content-Type": "application/json"})

        assert resp.status_code == 400
        assert db.query(Transaction).count() == 0

    def test_monthly_still_works_after_rejected_date(self, client):
        client.post("/transactions", json=_payload(date="2024-13-01"))

        assert client.get("/transactions/monthly").status_code == 200


class TestListTransactions:
    """Tests for GET /transactions."""

    def test_sorted_by_date_descending(self, client, add_transaction):
        add_transaction(1, "2024-01-02")
        add_transaction(2, "2024-03-01")
        add_transaction(3, "2024-02-15")

        resp = client.get("/transactions")

        assert resp.status_code == 200
        assert [t["date"] for t in resp.json()] == ["2024-03-01", "2024-02-15", "2024-01-02"]

    def test_limit(self, client, add_transaction):
        add_transaction(1, "2024-01-02")
        add_transaction(2, "2024-03-01")

        resp = client.get("/transactions", params={"limit": 1})

        assert [t["date"] for t in resp.json()] == ["2024-03-01"]


class TestUpdateTransaction:
    """Tests for PUT /transactions/{id}."""

    def test_replaces_all_fields(self, client, db, add_transaction):
        txn = add_transaction(10, "2024-01-02", category="Food")

        resp = client.put(
            f"/transactions/{txn.id}",
            json=_payload(amount=75, description="Salary", date="2024-02-01", type="income", category=None),
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        db.expire_all()
        updated = db.get(Transaction, txn.id)
        assert updated.amount == 75
        assert updated.type == "income"
        assert updated.category is None
        assert updated.date == "2024-02-01"

    def test_unknown_id(self, client):
        resp = client.put("/transactions/9999", json=_payload())

        assert resp.status_code == 404

    def test_validation(self, client, add_transaction):
        txn = add_transaction(10, "2024-01-02")

        resp = client.put(f"/transactions/{txn.id}", json=_payload(type="other"))

        assert resp.status_code == 400


class TestDeleteTransaction:
    """Tests for DELETE /transactions/{id}."""

    def test_deleted(self, client, db, add_transaction):
        txn = add_transaction(10, "2024-01-02")

        resp = client.delete(f"/transactions/{txn.id}")

        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert db.query(Transaction).count() == 0

    def test_unknown_id_leaves_store_unchanged(self, client, db, add_transaction):
        add_transaction(10, "2024-01-02")

        resp = client.delete("/transactions/9999")

        assert resp.status_code == 404
        assert db.query(Transaction).count() == 1


class TestReportsRoutes:
    """Tests for the report routes under /transactions."""

    def test_categories_default_to_expense(self, client, add_transaction):
        add_transaction(100, "2024-01-05", category="Food")
        add_transaction(50, "2024-01-10", category="Food")
        add_transaction(200, "2024-01-01", type="income", category="Salary")

        resp = client.get("/transactions/categories")

        assert resp.status_code == 200
        assert resp.json() == [
            {"category": "Food", "amount": 150, "count": 2, "percentage": 100, "color": "#3B82F6"}
        ]

    def test_categories_income(self, client, add_transaction):
        add_transaction(200, "2024-01-01", type="income", category="Salary")

        resp = client.get("/transactions/categories", params={"type": "income"})

        assert resp.json()[0]["category"] == "Salary"

    def test_categories_bad_type(self, client):
        resp = client.get("/transactions/categories", params={"type": "transfer"})

        assert resp.status_code == 400

    def test_category_export(self, client, add_transaction):
        add_transaction(30, "2024-01-05", category="Food")
        add_transaction(10, "2024-01-05", category="Fuel")

        resp = client.get("/transactions/categories/export")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        lines = resp.text.strip().splitlines()
        assert lines[0] == "Category,Amount,Count,Percentage"
        assert lines[1] == "Food,30.0,1,75%"
        assert lines[2] == "Fuel,10.0,1,25%"

    def test_monthly(self, client, add_transaction):
        this_month = date.today().strftime("%Y-%m")
        add_transaction(40, f"{this_month}-01")
        add_transaction(90, f"{this_month}-01", type="income")
        add_transaction(10, "1999-01-01")

        resp = client.get("/transactions/monthly")

        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 1
        assert data[0]["expenses"] == 40
        assert data[0]["income"] == 90

    def test_summary(self, client, add_transaction):
        add_transaction(200, "2024-01-01", type="income")
        add_transaction(50, "2024-01-02")

        resp = client.get("/transactions/summary", params={"month": "2024-01"})

        assert resp.json() == {"income": 200, "expenses": 50, "balance": 150, "count": 2}

    def test_summary_bad_month(self, client):
        assert client.get("/transactions/summary", params={"month": "2024-13"}).status_code == 400


class TestUploadCsv:
    """Tests for POST /transactions/upload-csv."""

    def _upload(self, client, text):
        return client.post(
            "/transactions/upload-csv",
            files={"file": ("transactions.csv", text.encode("utf-8"), "text/csv")},
        )

    def test_imports_rows(self, client, db):
        text = (
            "amount,description,date,type,category\n"
            "12.50,Coffee,2024-01-03,expense,Food & Dining\n"
            "1000,Salary,2024-01-01,income,\n"
        )

        resp = self._upload(client, text)

        assert resp.status_code == 201
        assert resp.json()["imported"] == 2
        rows = db.query(Transaction).order_by(Transaction.id).all()
        assert rows[0].category == "Food & Dining"
        assert rows[1].category is None

    def test_category_column_is_optional(self, client):
        resp = self._upload(client, "Amount,Description,Date,Type\n5,Bus,2024-01-03,expense\n")

        assert resp.status_code == 201

    def test_missing_columns(self, client):
        resp = self._upload(client, "amount,description\n5,Bus\n")

        assert resp.status_code == 400
        assert "date" in resp.json()["detail"]

    def test_invalid_row_saves_nothing(self, client, db):
        text = (
            "amount,description,date,type\n"
            "5,Bus,2024-01-03,expense\n"
            "-1,Refund,2024-01-04,expense\n"
        )

        resp = self._upload(client, text)

        assert resp.status_code == 400
        assert "line 3" in resp.json()["detail"]
        assert db.query(Transaction).count() == 0

    def test_empty_file(self, client):
        assert self._upload(client, "").status_code == 400

    @pytest.mark.parametrize("value", ["2024-13-01", "2024-02-30"])
    def test_date_not_on_calendar_saves_nothing(self, client, db, value):
        text = (
            "amount,description,date,type\n"
            "5,Bus,2024-01-03,expense\n"
            f"7,Taxi,{value},expense\n"
        )

        resp = self._upload(client, text)

        assert resp.status_code == 400
        assert "line 3: date" in resp.json()["detail"]
        assert db.query(Transaction).count() == 0
