from bookkeeping.models.user import User
from tests.conftest import ACCOUNTANT_ID, ADMIN_ID, CLIENT_ID, OTHER_CLIENT_ID, headers_for


class TestProfile:
    """Own profile"""

    def test_get_me(self, client, users):
        response = client.get("/api/users/me", headers=headers_for(CLIENT_ID))
        assert response.status_code == 200
        assert response.json()["id"] == CLIENT_ID
        assert response.json()["role"] == "client"

    def test_update_me(self, client, users):
        response = client.patch(
            "/api/users/me", json={"full_name": "Alice Baker"}, headers=headers_for(CLIENT_ID)
        )
        assert response.status_code == 200
        assert response.json()["full_name"] == "Alice Baker"

    def test_role_not_changed_through_profile(self, client, users):
        response = client.patch(
            "/api/users/me", json={"role": "admin"}, headers=headers_for(CLIENT_ID)
        )
        assert response.status_code == 200
        assert response.json()["role"] == "client"

    def test_anonymous_must_log_in(self, client):
        assert client.get("/api/users/me").status_code == 401


class TestUserAdministration:
    """Admin-only user management"""

    def test_admin_lists_users(self, client, users):
        response = client.get("/api/users", headers=headers_for(ADMIN_ID))
        assert response.status_code == 200
        assert response.json()["total"] == 4

        response = client.get("/api/users", params={"role": "accountant"}, headers=headers_for(ADMIN_ID))
        assert [u["id"] for u in response.json()["users"]] == [ACCOUNTANT_ID]

    def test_non_admin_cannot_list(self, client, users):
        assert client.get("/api/users", headers=headers_for(CLIENT_ID)).status_code == 403
        assert client.get("/api/users", headers=headers_for(ACCOUNTANT_ID)).status_code == 403

    def test_read_other_user(self, client, users):
        assert client.get(f"/api/users/{CLIENT_ID}", headers=headers_for(OTHER_CLIENT_ID)).status_code == 403
        assert client.get(f"/api/users/{CLIENT_ID}", headers=headers_for(ADMIN_ID)).status_code == 200
        assert client.get(f"/api/users/{CLIENT_ID}", headers=headers_for(CLIENT_ID)).status_code == 200

    def test_admin_changes_role(self, client, users, db_session):
        response = client.put(
            f"/api/users/{CLIENT_ID}/role", json={"role": "accountant"}, headers=headers_for(ADMIN_ID)
        )
        assert response.status_code == 200
        assert response.json()["role"] == "accountant"

        # The new role takes effect on the next request
        response = client.post(
            "/api/businesses", json={"name": "Side Gig"}, headers=headers_for(CLIENT_ID)
        )
        assert response.status_code == 403

    def test_user_cannot_change_own_role(self, client, users):
        response = client.put(
            f"/api/users/{CLIENT_ID}/role", json={"role": "admin"}, headers=headers_for(CLIENT_ID)
        )
        assert response.status_code == 403

    def test_admin_cannot_demote_self(self, client, users):
        response = client.put(
            f"/api/users/{ADMIN_ID}/role", json={"role": "client"}, headers=headers_for(ADMIN_ID)
        )
        assert response.status_code == 400

    def test_unknown_role_rejected(self, client, users):
        response = client.put(
            f"/api/users/{CLIENT_ID}/role", json={"role": "superuser"}, headers=headers_for(ADMIN_ID)
        )
        assert response.status_code == 422

    def test_deactivate_and_reactivate(self, client, users):
        response = client.put(
            f"/api/users/{OTHER_CLIENT_ID}/status", json={"is_active": False}, headers=headers_for(ADMIN_ID)
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert client.get("/api/users/me", headers=headers_for(OTHER_CLIENT_ID)).status_code == 403

        client.put(
            f"/api/users/{OTHER_CLIENT_ID}/status", json={"is_active": True}, headers=headers_for(ADMIN_ID)
        )
        assert client.get("/api/users/me", headers=headers_for(OTHER_CLIENT_ID)).status_code == 200

    def test_admin_cannot_deactivate_self(self, client, users):
        response = client.put(
            f"/api/users/{ADMIN_ID}/status", json={"is_active": False}, headers=headers_for(ADMIN_ID)
        )
        assert response.status_code == 400

    def test_missing_user(self, client, users):
        response = client.get("/api/users/nobody", headers=headers_for(ADMIN_ID))
        assert response.status_code == 404


class TestAdminOverview:
    """Platform overview"""

    def test_overview(self, client, client_headers, business, other_business):
        client.post(
            "/api/transactions",
            json={"amount": 1000, "type": "income", "date": "2024-01-01"},
            headers=client_headers,
        )
        client.post(
            "/api/transactions",
            json={"amount": 400, "type": "expense", "date": "2024-01-02"},
            headers=client_headers,
        )

        response = client.get("/api/admin/overview", headers=headers_for(ADMIN_ID))
        assert response.status_code == 200
        data = response.json()
        assert data["users_by_role"] == {"client": 2, "accountant": 1, "admin": 1}
        assert data["businesses_by_status"] == {"active": 2}
        assert data["total_income"] == 1000
        assert data["total_expenses"] == 400
        assert data["net_income"] == 600
        assert data["pending_transactions"] == 2

    def test_overview_admin_only(self, client, business):
        assert client.get("/api/admin/overview", headers=headers_for(ACCOUNTANT_ID)).status_code == 403
        assert client.get("/api/admin/overview").status_code == 401
