import pytest
from tests.conftest import (
    ACCOUNTANT_ID,
    ADMIN_ID,
    CLIENT_ID,
    OTHER_CLIENT_ID,
    headers_for,
)


def create_transaction(client, headers, **overrides):
    payload = {
        "amount": 250.0,
        "type": "expense",
        "date": "2024-03-15",
        "category": "supplies",
        "description": "Flour",
    }
    payload.update(overrides)
    response = client.post("/api/transactions", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateTransaction:
    """Recording transactions"""

    def test_create_transaction(self, client, client_headers, business):
        data = create_transaction(client, client_headers)
        assert data["business_id"] == business.id
        assert data["created_by"] == CLIENT_ID
        assert data["amount"] == 250.0
        assert data["status"] == "pending"
        assert data["approved_by"] is None

    def test_accountant_records_transaction(self, client, accountant_headers):
        data = create_transaction(client, accountant_headers, type="income")
        assert data["created_by"] == ACCOUNTANT_ID

    def test_requires_business_header(self, client, users):
        response = client.post(
            "/api/transactions",
            json={"amount": 10, "type": "income", "date": "2024-01-01"},
            headers=headers_for(CLIENT_ID),
        )
        assert response.status_code == 400
        assert "X-Business-Id" in response.json()["detail"]

    def test_foreign_business_forbidden(self, client, business, other_business):
        """Selecting someone else's business grants nothing"""
        response = client.post(
            "/api/transactions",
            json={"amount": 10, "type": "income", "date": "2024-01-01"},
            headers=headers_for(CLIENT_ID, other_business.id),
        )
        assert response.status_code == 403

    def test_negative_amount_rejected(self, client, client_headers):
        response = client.post(
            "/api/transactions",
            json={"amount": -5, "type": "expense", "date": "2024-01-01"},
            headers=client_headers,
        )
        assert response.status_code == 422

    def test_invalid_type_rejected(self, client, client_headers):
        response = client.post(
            "/api/transactions",
            json={"amount": 5, "type": "transfer", "date": "2024-01-01"},
            headers=client_headers,
        )
        assert response.status_code == 422

    def test_anonymous_must_log_in(self, client, business):
        response = client.post(
            "/api/transactions",
            json={"amount": 5, "type": "expense", "date": "2024-01-01"},
            headers={"X-Business-Id": str(business.id)},
        )
        assert response.status_code == 401


class TestListTransactions:
    """Listing and filtering"""

    def test_filters(self, client, client_headers):
        create_transaction(client, client_headers, date="2024-01-05", type="income", category="sales")
        create_transaction(client, client_headers, date="2024-02-05", category="rent")
        create_transaction(client, client_headers, date="2024-03-05", category="supplies")

        response = client.get("/api/transactions", headers=client_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        # Newest first
        assert [t["date"] for t in data["transactions"]] == ["2024-03-05", "2024-02-05", "2024-01-05"]

        response = client.get(
            "/api/transactions",
            params={"start_date": "2024-02-01", "end_date": "2024-02-28"},
            headers=client_headers,
        )
        assert response.json()["total"] == 1
        assert response.json()["transactions"][0]["category"] == "rent"

        response = client.get("/api/transactions", params={"type": "income"}, headers=client_headers)
        assert response.json()["total"] == 1

    def test_pagination(self, client, client_headers):
        for day in range(1, 6):
            create_transaction(client, client_headers, date=f"2024-01-0{day}")

        response = client.get(
            "/api/transactions", params={"limit": 2, "offset": 2}, headers=client_headers
        )
        data = response.json()
        assert data["total"] == 5
        assert [t["date"] for t in data["transactions"]] == ["2024-01-03", "2024-01-02"]

    def test_other_business_isolated(self, client, client_headers, other_client_headers):
        create_transaction(client, client_headers)

        response = client.get("/api/transactions", headers=other_client_headers)
        assert response.status_code == 200
        assert response.json()["total"] == 0


class TestTransactionRecord:
    """Get, update and delete a single transaction"""

    def test_get_transaction(self, client, client_headers):
        txn = create_transaction(client, client_headers)
        response = client.get(f"/api/transactions/{txn['id']}", headers=client_headers)
        assert response.status_code == 200
        assert response.json()["description"] == "Flour"

    def test_outsider_cannot_read(self, client, client_headers, other_client_headers):
        txn = create_transaction(client, client_headers)
        response = client.get(f"/api/transactions/{txn['id']}", headers=other_client_headers)
        assert response.status_code == 403

    def test_missing_transaction(self, client, client_headers):
        response = client.get("/api/transactions/999", headers=client_headers)
        assert response.status_code == 404

    def test_update_transaction(self, client, client_headers):
        txn = create_transaction(client, client_headers)
        response = client.patch(
            f"/api/transactions/{txn['id']}",
            json={"description": "Flour and sugar"},
            headers=client_headers,
        )
        assert response.status_code == 200
        assert response.json()["description"] == "Flour and sugar"
        assert response.json()["amount"] == 250.0

    def test_editing_approved_amount_resets_review(self, client, client_headers, accountant_headers):
        txn = create_transaction(client, client_headers)
        client.post(
            f"/api/transactions/{txn['id']}/review",
            json={"status": "approved"},
            headers=accountant_headers,
        )

        response = client.patch(
            f"/api/transactions/{txn['id']}", json={"amount": 300}, headers=client_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "pending"
        assert response.json()["approved_by"] is None

    def test_delete_transaction(self, client, client_headers):
        txn = create_transaction(client, client_headers)
        response = client.delete(f"/api/transactions/{txn['id']}", headers=client_headers)
        assert response.status_code == 204

        response = client.get(f"/api/transactions/{txn['id']}", headers=client_headers)
        assert response.status_code == 404

    def test_outsider_cannot_delete(self, client, client_headers, other_client_headers):
        txn = create_transaction(client, client_headers)
        response = client.delete(f"/api/transactions/{txn['id']}", headers=other_client_headers)
        assert response.status_code == 403


class TestReview:
    """Approving and rejecting"""

    def test_accountant_approves(self, client, client_headers, accountant_headers):
        txn = create_transaction(client, client_headers)
        response = client.post(
            f"/api/transactions/{txn['id']}/review",
            json={"status": "approved"},
            headers=accountant_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["approved_by"] == ACCOUNTANT_ID

    def test_client_cannot_approve(self, client, client_headers):
        txn = create_transaction(client, client_headers)
        response = client.post(
            f"/api/transactions/{txn['id']}/review",
            json={"status": "approved"},
            headers=client_headers,
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "You don't have permission to approve transaction"

    def test_admin_rejects(self, client, client_headers):
        txn = create_transaction(client, client_headers)
        response = client.post(
            f"/api/transactions/{txn['id']}/review",
            json={"status": "rejected"},
            headers=headers_for(ADMIN_ID),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "rejected"

    def test_unassigned_accountant_cannot_approve(self, client, db_session, other_client_headers, users):
        txn = create_transaction(client, other_client_headers)
        response = client.post(
            f"/api/transactions/{txn['id']}/review",
            json={"status": "approved"},
            headers=headers_for(ACCOUNTANT_ID),
        )
        assert response.status_code == 403

    def test_pending_is_not_a_review(self, client, client_headers, accountant_headers):
        txn = create_transaction(client, client_headers)
        response = client.post(
            f"/api/transactions/{txn['id']}/review",
            json={"status": "pending"},
            headers=accountant_headers,
        )
        assert response.status_code == 400


class TestExport:
    """CSV export (data_export feature)"""

    def test_export_csv(self, client, client_headers):
        create_transaction(client, client_headers, date="2024-01-05", type="income", category="sales", amount=99.5)

        response = client.get("/api/transactions/export", headers=client_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0] == "id,date,type,category,description,status,amount"
        assert "2024-01-05,income,sales" in lines[1]
        assert lines[1].endswith(",99.5")

    def test_free_plan_needs_upgrade(self, client, other_client_headers):
        response = client.get("/api/transactions/export", headers=other_client_headers)
        assert response.status_code == 402
        data = response.json()
        assert data["feature"] == "data_export"
        assert data["current_tier"] == "free"
