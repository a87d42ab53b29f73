import pytest
from bookkeeping.models.business import Business
from bookkeeping.models.business_member import BusinessMember
from bookkeeping.models.role import BusinessRole
from tests.conftest import (
    ACCOUNTANT_ID,
    ADMIN_ID,
    CLIENT_ID,
    OTHER_CLIENT_ID,
    headers_for,
)


class TestBusinessCreation:
    """Creating businesses"""

    def test_client_creates_business(self, client, users, db_session):
        """Creator becomes the owner member"""
        response = client.post(
            "/api/businesses",
            json={"name": "Corner Shop", "business_type": "retail"},
            headers=headers_for(CLIENT_ID),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Corner Shop"
        assert data["owner_id"] == CLIENT_ID
        assert data["status"] == "active"

        membership = (
            db_session.query(BusinessMember)
            .filter(BusinessMember.business_id == data["id"])
            .one()
        )
        assert membership.user_id == CLIENT_ID
        assert membership.role == BusinessRole.OWNER

    def test_accountant_cannot_create_business(self, client, users):
        response = client.post(
            "/api/businesses", json={"name": "Nope"}, headers=headers_for(ACCOUNTANT_ID)
        )
        assert response.status_code == 403

    def test_anonymous_must_log_in(self, client):
        response = client.post("/api/businesses", json={"name": "Nope"})
        assert response.status_code == 401

    def test_empty_name_rejected(self, client, users):
        response = client.post(
            "/api/businesses", json={"name": ""}, headers=headers_for(CLIENT_ID)
        )
        assert response.status_code == 422


class TestBusinessAccess:
    """Reading and changing businesses"""

    def test_list_only_own_businesses(self, client, business, other_business):
        response = client.get("/api/businesses", headers=headers_for(CLIENT_ID))
        assert response.status_code == 200
        data = response.json()
        assert [b["id"] for b in data] == [business.id]
        assert data[0]["role"] == "owner"

    def test_accountant_lists_assigned_business(self, client, business, other_business):
        response = client.get("/api/businesses", headers=headers_for(ACCOUNTANT_ID))
        assert response.status_code == 200
        data = response.json()
        assert [b["id"] for b in data] == [business.id]
        assert data[0]["role"] == "member"

    def test_admin_lists_all(self, client, business, other_business):
        response = client.get("/api/businesses", headers=headers_for(ADMIN_ID))
        assert response.status_code == 200
        assert {b["id"] for b in response.json()} == {business.id, other_business.id}

    def test_get_business_as_member(self, client, business):
        response = client.get(f"/api/businesses/{business.id}", headers=headers_for(ACCOUNTANT_ID))
        assert response.status_code == 200
        assert response.json()["subscription_tier"] == "basic"

    def test_get_foreign_business_forbidden(self, client, business, other_business):
        response = client.get(
            f"/api/businesses/{other_business.id}", headers=headers_for(CLIENT_ID)
        )
        assert response.status_code == 403

    def test_get_missing_business(self, client, users):
        response = client.get("/api/businesses/999", headers=headers_for(CLIENT_ID))
        assert response.status_code == 404

    def test_owner_updates_business(self, client, business):
        response = client.patch(
            f"/api/businesses/{business.id}",
            json={"name": "Alice's Bakery & Cafe", "status": "inactive"},
            headers=headers_for(CLIENT_ID),
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Alice's Bakery & Cafe"
        assert response.json()["status"] == "inactive"

    def test_invalid_status_rejected(self, client, business):
        response = client.patch(
            f"/api/businesses/{business.id}",
            json={"status": "closed"},
            headers=headers_for(CLIENT_ID),
        )
        assert response.status_code == 422

    def test_owner_cannot_delete_business(self, client, business):
        response = client.delete(f"/api/businesses/{business.id}", headers=headers_for(CLIENT_ID))
        assert response.status_code == 403

    def test_admin_deletes_business(self, client, business, db_session):
        response = client.delete(f"/api/businesses/{business.id}", headers=headers_for(ADMIN_ID))
        assert response.status_code == 204
        db_session.expire_all()
        assert db_session.query(Business).filter(Business.id == business.id).first() is None


class TestSubscription:
    """Plan changes"""

    def test_owner_cannot_change_plan(self, client, business):
        response = client.put(
            f"/api/businesses/{business.id}/subscription",
            json={"subscription_tier": "enterprise"},
            headers=headers_for(CLIENT_ID),
        )
        assert response.status_code == 403

    def test_admin_changes_plan(self, client, business):
        response = client.put(
            f"/api/businesses/{business.id}/subscription",
            json={"subscription_tier": "premium"},
            headers=headers_for(ADMIN_ID),
        )
        assert response.status_code == 200
        assert response.json()["subscription_tier"] == "premium"

    def test_unknown_plan_rejected(self, client, business):
        response = client.put(
            f"/api/businesses/{business.id}/subscription",
            json={"subscription_tier": "platinum"},
            headers=headers_for(ADMIN_ID),
        )
        assert response.status_code == 422


class TestMembers:
    """Member management"""

    def test_list_members(self, client, business):
        response = client.get(
            f"/api/businesses/{business.id}/members", headers=headers_for(CLIENT_ID)
        )
        assert response.status_code == 200
        roles = {m["user_id"]: m["role"] for m in response.json()}
        assert roles == {CLIENT_ID: "owner", ACCOUNTANT_ID: "member"}

    def test_owner_adds_member(self, client, business):
        response = client.post(
            f"/api/businesses/{business.id}/members",
            json={"user_id": OTHER_CLIENT_ID},
            headers=headers_for(CLIENT_ID),
        )
        assert response.status_code == 201
        assert response.json()["role"] == "member"
        assert response.json()["email"] == f"{OTHER_CLIENT_ID}@example.com"

    def test_member_cannot_add_member(self, client, business):
        """Membership alone does not allow managing members"""
        response = client.post(
            f"/api/businesses/{business.id}/members",
            json={"user_id": OTHER_CLIENT_ID},
            headers=headers_for(ACCOUNTANT_ID),
        )
        assert response.status_code == 403

    def test_cannot_add_second_owner(self, client, business):
        response = client.post(
            f"/api/businesses/{business.id}/members",
            json={"user_id": OTHER_CLIENT_ID, "role": "owner"},
            headers=headers_for(CLIENT_ID),
        )
        assert response.status_code == 400

    def test_cannot_add_existing_member(self, client, business):
        response = client.post(
            f"/api/businesses/{business.id}/members",
            json={"user_id": ACCOUNTANT_ID},
            headers=headers_for(CLIENT_ID),
        )
        assert response.status_code == 400

    def test_add_unknown_user(self, client, business):
        response = client.post(
            f"/api/businesses/{business.id}/members",
            json={"user_id": "nobody"},
            headers=headers_for(CLIENT_ID),
        )
        assert response.status_code == 404

    def test_owner_removes_member(self, client, business):
        response = client.delete(
            f"/api/businesses/{business.id}/members/{ACCOUNTANT_ID}",
            headers=headers_for(CLIENT_ID),
        )
        assert response.status_code == 200
        assert response.json()["removed_user_id"] == ACCOUNTANT_ID

        response = client.get(f"/api/businesses/{business.id}", headers=headers_for(ACCOUNTANT_ID))
        assert response.status_code == 403

    def test_cannot_remove_owner(self, client, business):
        response = client.delete(
            f"/api/businesses/{business.id}/members/{CLIENT_ID}",
            headers=headers_for(ADMIN_ID),
        )
        assert response.status_code == 400


class TestSummary:
    """Business summary"""

    def test_summary_totals(self, client, client_headers, business):
        client.post(
            "/api/transactions",
            json={"amount": 500, "type": "income", "date": "2024-01-10", "category": "sales"},
            headers=client_headers,
        )
        client.post(
            "/api/transactions",
            json={"amount": 120.5, "type": "expense", "date": "2024-01-12", "category": "rent"},
            headers=client_headers,
        )

        response = client.get(f"/api/businesses/{business.id}/summary", headers=client_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total_income"] == 500
        assert data["total_expenses"] == 120.5
        assert data["net_income"] == 379.5
        assert data["transaction_count"] == 2
        assert data["pending_transactions"] == 2
        assert data["member_count"] == 2
