import pytest
from fastapi.testclient import TestClient

from agency_api.app.core.config import settings
from agency_api.app.core.db import init_db
from agency_api.app.main import app

PASSWORD = "secret-pass"


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "agency-test.db"))
    init_db()
    yield


@pytest.fixture
def client(database):
    with TestClient(app) as test_client:
        yield test_client


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client: TestClient, email: str, password: str = PASSWORD) -> str:
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


class Account:
    def __init__(self, user: dict, token: str):
        self.id = user["id"]
        self.user = user
        self.token = token
        self.headers = bearer(token)
        self.current_user = {"user_id": user["id"], "role": user["role"], "email": user["email"]}


@pytest.fixture
def admin(client) -> Account:
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "admin@example.com", "password": PASSWORD, "name": "Admin"},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return Account(body["user"], body["token"])


@pytest.fixture
def make_employee(client, admin):
    def _make(email: str, **extra) -> Account:
        payload = {"email": email, "password": PASSWORD, "name": email.split("@")[0], **extra}
        response = client.post("/api/v1/employees/", json=payload, headers=admin.headers)
        assert response.status_code == 201, response.text
        return Account(response.json(), login(client, email))

    return _make


@pytest.fixture
def make_client(client, admin):
    def _make(email: str, **extra) -> Account:
        payload = {"email": email, "password": PASSWORD, "name": email.split("@")[0], **extra}
        response = client.post("/api/v1/clients/", json=payload, headers=admin.headers)
        assert response.status_code == 201, response.text
        return Account(response.json(), login(client, email))

    return _make


@pytest.fixture
def make_project(client, admin):
    def _make(client_id: str, name: str = "Website", employee_ids=None, **extra) -> dict:
        payload = {"name": name, "client_id": client_id, "employee_ids": employee_ids or [], **extra}
        response = client.post("/api/v1/projects/", json=payload, headers=admin.headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
