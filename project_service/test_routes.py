"""
HTTP tests for /api/v1/project/* through FastAPI's TestClient.

Tokens are minted with the configured signing key; the store points at a
temporary database and the task service is replaced with an in-memory double.

Run: pytest project_service/test_routes.py -v
"""

from datetime import datetime, timedelta

import jwt
import pytest
from fastapi.testclient import TestClient

from conftest import StaleLookupStore
from project_service.config import ALGORITHM, AUTH_CLIENT_ID, SECRET_KEY
from project_service.dependencies import get_project_store, get_task_client
from project_service.main import app

client = TestClient(app)

PROJECT_BODY = {
    "project_code": "PRJ-1",
    "project_name": "Project One",
    "start_date": "2026-01-01",
    "end_date": "2026-06-30",
    "project_detail": "Initial scope",
}


def make_token(username, *roles, expires_in=timedelta(minutes=5)):
    payload = {
        "sub": f"id-{username}",
        "preferred_username": username,
        "resource_access": {AUTH_CLIENT_ID: {"roles": list(roles)}},
        "exp": datetime.utcnow() + expires_in,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def auth(username, *roles):
    return {"Authorization": f"Bearer {make_token(username, *roles)}"}


ALICE = ("alice", "Manager")
BOB = ("bob", "Manager")
ROOT = ("root", "Admin")
EVE = ("eve", "Employee")


@pytest.fixture(autouse=True)
def wire_dependencies(store, task_client):
    app.dependency_overrides[get_project_store] = lambda: store
    app.dependency_overrides[get_task_client] = lambda: task_client
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def created_project():
    resp = client.post("/api/v1/project/create", json=PROJECT_BODY, headers=auth(*ALICE))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestAuthentication:

    def test_missing_token_rejected(self):
        resp = client.get("/api/v1/project/read/all/manager")
        # HTTPBearer answers 403 on older FastAPI releases, 401 on newer ones
        assert resp.status_code in (401, 403)

    def test_expired_token(self):
        token = make_token("alice", "Manager", expires_in=timedelta(minutes=-5))
        resp = client.get("/api/v1/project/read/all/manager", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token expired"

    def test_token_signed_with_other_key(self):
        token = jwt.encode({"preferred_username": "alice"}, "another-signing-key-0123456789abcdef", algorithm="HS256")
        resp = client.get("/api/v1/project/read/all/manager", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_wrong_role_rejected(self):
        resp = client.get("/api/v1/project/read/all/admin", headers=auth(*ALICE))
        assert resp.status_code == 403

    def test_employee_cannot_create(self):
        resp = client.post("/api/v1/project/create", json=PROJECT_BODY, headers=auth(*EVE))
        assert resp.status_code == 403


class TestCreate:

    def test_create_returns_wrapper(self, created_project):
        assert created_project["project_code"] == "PRJ-1"
        assert created_project["assigned_manager"] == "alice"
        assert created_project["project_status"] == "Open"

    def test_create_envelope(self):
        resp = client.post("/api/v1/project/create", json=PROJECT_BODY, headers=auth(*ALICE))
        body = resp.json()
        assert body["success"] is True
        assert body["code"] == 201
        assert body["message"] == "Project is successfully created."

    def test_duplicate_code_conflict(self, created_project):
        resp = client.post("/api/v1/project/create", json=PROJECT_BODY, headers=auth(*BOB))

        assert resp.status_code == 409
        body = resp.json()
        assert body["success"] is False
        assert body["http_status"] == 409
        assert body["message"] == "Project already exists."

    def test_duplicate_insert_past_stale_check_conflicts(self, db_path):
        app.dependency_overrides[get_project_store] = lambda: StaleLookupStore(db_path)
        first = client.post("/api/v1/project/create", json=PROJECT_BODY, headers=auth(*ALICE))
        assert first.status_code == 201, first.text

        resp = client.post("/api/v1/project/create", json=PROJECT_BODY, headers=auth(*BOB))

        assert resp.status_code == 409
        assert resp.json()["message"] == "Project already exists."

    def test_validation_errors(self):
        resp = client.post(
            "/api/v1/project/create",
            json={**PROJECT_BODY, "project_name": "   ", "start_date": None},
            headers=auth(*ALICE),
        )

        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        fields = {v["field"] for v in body["validation_errors"]}
        assert {"project_name", "start_date"} <= fields
        assert body["error_count"] == len(body["validation_errors"])


class TestReads:

    def test_read_own_project(self, created_project):
        resp = client.get("/api/v1/project/read/PRJ-1", headers=auth(*ALICE))
        assert resp.status_code == 200
        assert resp.json()["data"]["id"] == created_project["id"]

    def test_read_other_managers_project(self, created_project):
        resp = client.get("/api/v1/project/read/PRJ-1", headers=auth(*BOB))
        assert resp.status_code == 403
        assert resp.json()["success"] is False

    def test_read_missing_project(self):
        resp = client.get("/api/v1/project/read/NOPE", headers=auth(*ALICE))
        assert resp.status_code == 404

    def test_read_manager(self, created_project):
        resp = client.get("/api/v1/project/read/manager/PRJ-1", headers=auth(*ROOT))
        assert resp.status_code == 200
        assert resp.json()["data"] == "alice"

    def test_admin_read_all(self, created_project):
        resp = client.get("/api/v1/project/read/all/admin", headers=auth(*ROOT))
        assert resp.status_code == 200
        assert [p["project_code"] for p in resp.json()["data"]] == ["PRJ-1"]

    def test_manager_read_all_scoped(self, created_project):
        resp = client.get("/api/v1/project/read/all/manager", headers=auth(*BOB))
        assert resp.status_code == 200
        assert resp.json()["data"] == []

    def test_read_all_with_details(self, created_project, task_client):
        task_client.counts = {"PRJ-1": (2, 3)}

        resp = client.get("/api/v1/project/read/all/details", headers=auth(*ALICE))

        assert resp.status_code == 200
        project = resp.json()["data"][0]
        assert project["completed_task_count"] == 2
        assert project["non_completed_task_count"] == 3

    def test_read_all_with_details_task_failure(self, created_project, task_client):
        task_client.failing_count_codes = {"PRJ-1"}

        resp = client.get("/api/v1/project/read/all/details", headers=auth(*ALICE))

        assert resp.status_code == 502
        assert "data" not in resp.json()

    def test_count_non_completed(self, created_project):
        resp = client.get("/api/v1/project/count/manager/alice", headers=auth(*ROOT))
        assert resp.status_code == 200
        assert resp.json()["data"] == 1

    def test_check(self, created_project):
        resp = client.get("/api/v1/project/check/PRJ-1", headers=auth(*ALICE))
        assert resp.status_code == 200
        assert resp.json()["data"] is True


class TestMutations:

    def test_update_keeps_protected_fields(self, created_project):
        resp = client.put(
            "/api/v1/project/update/PRJ-1",
            json={**PROJECT_BODY, "project_code": "OTHER", "project_name": "Renamed",
                  "assigned_manager": "bob", "project_status": "Completed"},
            headers=auth(*ALICE),
        )

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["project_code"] == "PRJ-1"
        assert data["project_name"] == "Renamed"
        assert data["assigned_manager"] == "alice"
        assert data["project_status"] == "Open"

    def test_complete_then_check_conflicts(self, created_project):
        resp = client.put("/api/v1/project/complete/PRJ-1", headers=auth(*ALICE))
        assert resp.status_code == 200
        assert resp.json()["data"]["project_status"] == "Completed"

        resp = client.get("/api/v1/project/check/PRJ-1", headers=auth(*ALICE))
        assert resp.status_code == 409

    def test_complete_task_failure(self, created_project, task_client, store):
        task_client.complete_succeeds = False

        resp = client.put("/api/v1/project/complete/PRJ-1", headers=auth(*ALICE))

        assert resp.status_code == 502
        assert store.find_by_code("PRJ-1").project_status.value == "Completed"

    def test_delete(self, created_project, task_client):
        resp = client.delete("/api/v1/project/delete/PRJ-1", headers=auth(*ALICE))

        assert resp.status_code == 200
        assert resp.json()["message"] == "Project is successfully deleted."
        kind, _, code = task_client.calls[-1]
        assert (kind, code) == ("delete", "PRJ-1")
        assert client.get("/api/v1/project/read/PRJ-1", headers=auth(*ALICE)).status_code == 404

    def test_delete_task_failure(self, created_project, task_client):
        task_client.delete_succeeds = False

        resp = client.delete("/api/v1/project/delete/PRJ-1", headers=auth(*ALICE))

        assert resp.status_code == 502
        assert client.get("/api/v1/project/read/PRJ-1", headers=auth(*ALICE)).status_code == 200

    def test_caller_token_forwarded_to_task_service(self, created_project, task_client):
        headers = auth(*ALICE)

        client.put("/api/v1/project/complete/PRJ-1", headers=headers)

        token = headers["Authorization"].split(" ", 1)[1]
        assert task_client.calls == [("complete", token, "PRJ-1")]


def test_health():
    assert client.get("/health").json() == {"status": "ok"}
