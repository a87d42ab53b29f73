import pytest
from tests.conftest import ACCOUNTANT_ID, CLIENT_ID, OTHER_CLIENT_ID, headers_for


def create_task(client, headers, **overrides):
    payload = {"title": "Reconcile March", "priority": "high", "due_date": "2024-04-05"}
    payload.update(overrides)
    return client.post("/api/tasks", json=payload, headers=headers)


class TestTasks:
    """Bookkeeping tasks"""

    def test_accountant_creates_task(self, client, accountant_headers, business):
        response = create_task(client, accountant_headers, assigned_to=ACCOUNTANT_ID)
        assert response.status_code == 201
        data = response.json()
        assert data["business_id"] == business.id
        assert data["created_by"] == ACCOUNTANT_ID
        assert data["status"] == "todo"

    def test_client_cannot_create_task(self, client, client_headers):
        response = create_task(client, client_headers)
        assert response.status_code == 403

    def test_assignee_must_be_member(self, client, accountant_headers):
        response = create_task(client, accountant_headers, assigned_to=OTHER_CLIENT_ID)
        assert response.status_code == 400

    def test_accountant_sees_assigned_tasks(self, client, accountant_headers, client_headers):
        create_task(client, accountant_headers, title="Mine", assigned_to=ACCOUNTANT_ID)
        create_task(client, accountant_headers, title="Client's", assigned_to=CLIENT_ID)

        response = client.get("/api/tasks", headers=accountant_headers)
        assert [t["title"] for t in response.json()] == ["Mine"]

        response = client.get("/api/tasks", headers=client_headers)
        assert {t["title"] for t in response.json()} == {"Mine", "Client's"}

    def test_client_updates_status(self, client, accountant_headers, client_headers):
        task = create_task(client, accountant_headers, assigned_to=CLIENT_ID).json()
        response = client.patch(
            f"/api/tasks/{task['id']}", json={"status": "done"}, headers=client_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "done"

    def test_outsider_cannot_read(self, client, accountant_headers, other_client_headers):
        task = create_task(client, accountant_headers).json()
        response = client.get(f"/api/tasks/{task['id']}", headers=other_client_headers)
        assert response.status_code == 403

    def test_client_cannot_delete(self, client, accountant_headers, client_headers):
        task = create_task(client, accountant_headers).json()
        response = client.delete(f"/api/tasks/{task['id']}", headers=client_headers)
        assert response.status_code == 403

    def test_accountant_deletes(self, client, accountant_headers):
        task = create_task(client, accountant_headers).json()
        assert client.delete(f"/api/tasks/{task['id']}", headers=accountant_headers).status_code == 204
        assert client.get(f"/api/tasks/{task['id']}", headers=accountant_headers).status_code == 404

    def test_soonest_due_first(self, client, accountant_headers, client_headers):
        create_task(client, accountant_headers, title="Later", due_date="2024-06-01")
        create_task(client, accountant_headers, title="Sooner", due_date="2024-05-01")
        create_task(client, accountant_headers, title="Whenever", due_date=None)

        response = client.get("/api/tasks", headers=client_headers)
        assert [t["title"] for t in response.json()] == ["Sooner", "Later", "Whenever"]
