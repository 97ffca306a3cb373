from conftest import PASSWORD, bearer, login


def test_first_registered_user_becomes_admin(client):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "boss@example.com", "password": PASSWORD, "name": "Boss", "role": "client"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["id"] == "USER01"
    assert body["user"]["role"] == "admin"
    assert body["token_type"] == "bearer"
    assert "password" not in body["user"]


def test_later_registrations_are_clients_only(client, admin):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "c@example.com", "password": PASSWORD, "name": "C"},
    )
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "client"
    assert response.json()["user"]["id"] == "USER02"

    response = client.post(
        "/api/v1/auth/register",
        json={"email": "e@example.com", "password": PASSWORD, "name": "E", "role": "employee"},
    )
    assert response.status_code == 403
    assert response.json()["kind"] == "forbidden"


def test_duplicate_email_conflicts(client, admin):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "admin@example.com", "password": PASSWORD, "name": "Again"},
    )
    assert response.status_code == 409
    assert response.json()["kind"] == "conflict"


def test_login_failures_are_unauthorized(client, admin):
    response = client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": "wrong"})
    assert response.status_code == 401
    response = client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
    assert response.status_code == 401


def test_missing_required_field_is_a_validation_error(client, admin):
    response = client.post("/api/v1/auth/register", json={"email": "x@example.com", "password": PASSWORD})
    assert response.status_code == 400
    assert response.json()["kind"] == "validation"


def test_patch_applies_zero_and_false(client, admin, make_employee):
    employee = make_employee("emp@example.com", salary=1000)
    client.patch(f"/api/v1/users/{employee.id}", json={"hide": True}, headers=admin.headers)

    response = client.patch(
        f"/api/v1/users/{employee.id}",
        json={"salary": 0, "hide": False},
        headers=admin.headers,
    )
    assert response.status_code == 200
    assert response.json()["salary"] == 0
    assert response.json()["hide"] is False


def test_null_and_omitted_fields_are_left_unchanged(client, admin, make_employee):
    employee = make_employee("emp@example.com", department="Design", salary=500)
    response = client.patch(
        f"/api/v1/users/{employee.id}",
        json={"department": None, "phone": "123"},
        headers=admin.headers,
    )
    body = response.json()
    assert body["department"] == "Design"
    assert body["salary"] == 500
    assert body["phone"] == "123"


def test_employee_profile_rules(client, make_employee, make_client):
    employee = make_employee("emp@example.com")
    other = make_client("cli@example.com")

    response = client.put(f"/api/v1/users/{employee.id}", json={"name": "Renamed"}, headers=employee.headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"

    response = client.put(f"/api/v1/users/{employee.id}", json={"salary": 9999}, headers=employee.headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "employees cannot modify role, department, or salary"

    response = client.get(f"/api/v1/users/{other.id}", headers=employee.headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "employees can only view their own profile"


def test_client_cannot_change_company(client, make_client):
    customer = make_client("cli@example.com", company="Acme")
    response = client.put(f"/api/v1/clients/{customer.id}", json={"company": "Other"}, headers=customer.headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "clients cannot modify role or company"

    response = client.put(f"/api/v1/clients/{customer.id}", json={"address": "2 Side St"}, headers=customer.headers)
    assert response.status_code == 200
    assert response.json()["address"] == "2 Side St"


def test_password_change_takes_effect(client, make_client):
    customer = make_client("cli@example.com")
    response = client.patch(
        f"/api/v1/users/{customer.id}", json={"password": "new-pass"}, headers=customer.headers
    )
    assert response.status_code == 200
    assert login(client, "cli@example.com", "new-pass")


def test_admin_cannot_delete_self_and_deleted_users_lose_access(client, admin, make_client):
    response = client.delete(f"/api/v1/users/{admin.id}", headers=admin.headers)
    assert response.status_code == 400

    customer = make_client("cli@example.com")
    response = client.delete(f"/api/v1/users/{customer.id}", headers=admin.headers)
    assert response.status_code == 204

    response = client.get(f"/api/v1/users/{customer.id}", headers=customer.headers)
    assert response.status_code == 401


def test_inactive_user_is_rejected(client, admin, make_client):
    customer = make_client("cli@example.com")
    client.patch(f"/api/v1/users/{customer.id}", json={"status": "inactive"}, headers=admin.headers)

    assert client.get(f"/api/v1/users/{customer.id}", headers=customer.headers).status_code == 401
    response = client.post("/api/v1/auth/login", json={"email": "cli@example.com", "password": PASSWORD})
    assert response.status_code == 401


def test_requests_without_valid_token(client, admin):
    assert client.get("/api/v1/users/").status_code == 401
    assert client.get("/api/v1/users/", headers=bearer("not.a.token")).status_code == 401


def test_list_users_is_admin_only_and_paginated(client, admin, make_employee, make_client):
    make_employee("emp1@example.com")
    make_employee("emp2@example.com")
    customer = make_client("cli@example.com", company="Widgets Inc")

    response = client.get("/api/v1/users/", params={"page_size": 2}, headers=admin.headers)
    body = response.json()
    assert body["meta"] == {"page": 1, "page_size": 2, "total": 4, "total_pages": 2}
    assert len(body["data"]) == 2

    response = client.get("/api/v1/users/", params={"role": "employee"}, headers=admin.headers)
    assert response.json()["meta"]["total"] == 2

    response = client.get("/api/v1/users/", params={"search": "widgets"}, headers=admin.headers)
    assert [user["id"] for user in response.json()["data"]] == [customer.id]

    assert client.get("/api/v1/users/", headers=customer.headers).status_code == 403


def test_page_size_bounds(client, admin):
    assert client.get("/api/v1/users/", params={"page_size": 0}, headers=admin.headers).status_code == 400
    assert client.get("/api/v1/users/", params={"page_size": 101}, headers=admin.headers).status_code == 400
    assert client.get("/api/v1/users/", params={"page": 0}, headers=admin.headers).status_code == 400


def test_employee_endpoint_hides_non_employees(client, admin, make_client):
    customer = make_client("cli@example.com")
    response = client.get(f"/api/v1/employees/{customer.id}", headers=admin.headers)
    assert response.status_code == 404


def test_dashboard_stats_by_role(client, admin, make_employee, make_client, make_project):
    employee = make_employee("emp@example.com")
    customer = make_client("cli@example.com")
    make_project(customer.id, employee_ids=[employee.id])
    make_project(customer.id, name="Second", status="active")

    stats = client.get("/api/v1/users/dashboard/stats", headers=admin.headers).json()
    assert stats["users_by_role"] == {"admin": 1, "employee": 1, "client": 1}
    assert stats["projects_by_status"] == {"pending": 1, "active": 1}

    stats = client.get("/api/v1/users/dashboard/stats", headers=employee.headers).json()
    assert stats == {"projects_by_status": {"pending": 1}}

    stats = client.get("/api/v1/users/dashboard/stats", headers=customer.headers).json()
    assert stats["projects_by_status"] == {"pending": 1, "active": 1}
    assert stats["service_requests_by_status"] == {}


def test_malformed_email_and_short_password_are_rejected(client, admin):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "not-an-email", "password": PASSWORD, "name": "Bad"},
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "validation"

    response = client.post(
        "/api/v1/auth/register",
        json={"email": "short@example.com", "password": "abcde", "name": "Short"},
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "validation"

    response = client.post(
        "/api/v1/employees/",
        json={"email": "emp@", "password": PASSWORD, "name": "Emp"},
        headers=admin.headers,
    )
    assert response.status_code == 400

    response = client.patch(f"/api/v1/users/{admin.id}", json={"password": "abcde"}, headers=admin.headers)
    assert response.status_code == 400
    login(client, "admin@example.com")
