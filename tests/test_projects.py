from agency_api.app.schemas.project import ProjectRead
from agency_api.app.services.project_service import ProjectService


def test_create_project_assigns_sequential_ids(client, admin, make_client):
    customer = make_client("cli@example.com")
    first = client.post(
        "/api/v1/projects/", json={"name": "Site", "client_id": customer.id}, headers=admin.headers
    ).json()
    second = client.post(
        "/api/v1/projects/", json={"name": "App", "client_id": customer.id}, headers=admin.headers
    ).json()
    assert (first["id"], second["id"]) == ("PROJECT01", "PROJECT02")
    assert first["status"] == "pending"
    assert first["progress"] == 0
    assert first["employee_ids"] == []


def test_create_project_validates_client_and_employees(client, admin, make_employee, make_client):
    employee = make_employee("emp@example.com")
    customer = make_client("cli@example.com")

    response = client.post(
        "/api/v1/projects/", json={"name": "Site", "client_id": employee.id}, headers=admin.headers
    )
    assert response.status_code == 400

    response = client.post(
        "/api/v1/projects/",
        json={"name": "Site", "client_id": customer.id, "employee_ids": [customer.id]},
        headers=admin.headers,
    )
    assert response.status_code == 400

    response = client.post(
        "/api/v1/projects/",
        json={"name": "Site", "client_id": customer.id, "status": "rejected"},
        headers=admin.headers,
    )
    assert response.status_code == 400

    response = client.post("/api/v1/projects/", json={"name": "", "client_id": customer.id}, headers=admin.headers)
    assert response.status_code == 400

    # Failed creations do not consume ids.
    project = client.post(
        "/api/v1/projects/", json={"name": "Site", "client_id": customer.id}, headers=admin.headers
    ).json()
    assert project["id"] == "PROJECT01"


def test_only_admin_creates_projects(client, make_client):
    customer = make_client("cli@example.com")
    response = client.post(
        "/api/v1/projects/", json={"name": "Mine", "client_id": customer.id}, headers=customer.headers
    )
    assert response.status_code == 403


def test_employee_assignment_controls_access(client, admin, make_employee, make_client, make_project):
    employee = make_employee("emp@example.com")
    customer = make_client("cli@example.com")
    project = make_project(customer.id)

    response = client.put(f"/api/v1/projects/{project['id']}", json={"progress": 50}, headers=employee.headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "employee not assigned to this project"

    response = client.post(
        f"/api/v1/projects/{project['id']}/assign",
        json={"employee_ids": [employee.id]},
        headers=admin.headers,
    )
    assert response.status_code == 200
    assert response.json()["employee_ids"] == [employee.id]

    response = client.put(f"/api/v1/projects/{project['id']}", json={"progress": 50}, headers=employee.headers)
    assert response.status_code == 200
    assert response.json()["progress"] == 50

    response = client.put(f"/api/v1/projects/{project['id']}", json={"name": "New"}, headers=employee.headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "employees can only update project status and progress"


def test_assignment_replaces_and_deduplicates(client, admin, make_employee, make_client, make_project):
    first = make_employee("one@example.com")
    second = make_employee("two@example.com")
    customer = make_client("cli@example.com")
    project = make_project(customer.id, employee_ids=[first.id])

    response = client.post(
        f"/api/v1/projects/{project['id']}/assign",
        json={"employee_ids": [second.id, first.id, second.id]},
        headers=admin.headers,
    )
    assert response.json()["employee_ids"] == [second.id, first.id]

    response = client.post(
        f"/api/v1/projects/{project['id']}/assign", json={"employee_ids": [first.id]}, headers=first.headers
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "only admins can assign employees to projects"


def test_client_project_rules(client, make_client, make_project):
    customer = make_client("cli@example.com")
    project = make_project(customer.id)

    response = client.put(f"/api/v1/projects/{project['id']}", json={"status": "completed"}, headers=customer.headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "clients cannot update project status"

    response = client.put(f"/api/v1/projects/{project['id']}", json={"name": "Renamed"}, headers=customer.headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "clients cannot rename projects"

    response = client.put(
        f"/api/v1/projects/{project['id']}", json={"description": "More detail"}, headers=customer.headers
    )
    assert response.status_code == 200
    assert response.json()["description"] == "More detail"


def test_progress_endpoint_and_bounds(client, admin, make_client, make_project):
    customer = make_client("cli@example.com")
    project = make_project(customer.id)

    response = client.patch(f"/api/v1/projects/{project['id']}/progress", json={"progress": 0}, headers=admin.headers)
    assert response.status_code == 200
    assert response.json()["progress"] == 0

    response = client.patch(
        f"/api/v1/projects/{project['id']}/progress", json={"progress": 101}, headers=admin.headers
    )
    assert response.status_code == 400


def test_client_listing_is_scoped_before_pagination(client, admin, make_client, make_project):
    mine = make_client("mine@example.com")
    theirs = make_client("theirs@example.com")
    for index in range(3):
        make_project(theirs.id, name=f"Other {index}")
    for index in range(12):
        make_project(mine.id, name=f"Mine {index}")

    response = client.get("/api/v1/projects/", params={"page": 2, "page_size": 10}, headers=mine.headers)
    body = response.json()
    assert body["meta"] == {"page": 2, "page_size": 10, "total": 12, "total_pages": 2}
    assert len(body["data"]) == 2
    assert all(project["client_id"] == mine.id for project in body["data"])

    # Non-admins cannot widen their scope with client_id.
    response = client.get("/api/v1/projects/", params={"client_id": theirs.id}, headers=mine.headers)
    assert response.json()["meta"]["total"] == 12

    response = client.get("/api/v1/projects/", params={"client_id": theirs.id}, headers=admin.headers)
    assert response.json()["meta"]["total"] == 3


def test_employee_listing_and_search(client, admin, make_employee, make_client, make_project):
    employee = make_employee("emp@example.com")
    customer = make_client("cli@example.com")
    make_project(customer.id, name="Logo design", employee_ids=[employee.id])
    make_project(customer.id, name="Logo print")
    make_project(customer.id, name="Website", employee_ids=[employee.id], status="active")

    response = client.get("/api/v1/projects/", headers=employee.headers)
    assert response.json()["meta"]["total"] == 2

    response = client.get("/api/v1/projects/", params={"search": "logo"}, headers=employee.headers)
    assert [project["name"] for project in response.json()["data"]] == ["Logo design"]

    response = client.get("/api/v1/projects/", params={"status": "active"}, headers=admin.headers)
    assert [project["name"] for project in response.json()["data"]] == ["Website"]

    response = client.get("/api/v1/projects/", params={"search": "PROJECT02"}, headers=admin.headers)
    assert [project["name"] for project in response.json()["data"]] == ["Logo print"]


def test_empty_listing_has_zero_pages(client, make_client):
    customer = make_client("cli@example.com")
    body = client.get("/api/v1/projects/", headers=customer.headers).json()
    assert body == {"data": [], "meta": {"page": 1, "page_size": 10, "total": 0, "total_pages": 0}}


def test_missing_project_is_not_found(client, admin):
    response = client.get("/api/v1/projects/PROJECT99", headers=admin.headers)
    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


def test_delete_project_removes_messages(client, admin, make_client, make_project):
    customer = make_client("cli@example.com")
    project = make_project(customer.id)
    message = client.post(
        "/api/v1/messages/", json={"project_id": project["id"], "content": "hello"}, headers=customer.headers
    ).json()

    assert client.delete(f"/api/v1/projects/{project['id']}", headers=customer.headers).status_code == 403
    assert client.delete(f"/api/v1/projects/{project['id']}", headers=admin.headers).status_code == 204
    assert client.get(f"/api/v1/messages/{message['id']}", headers=admin.headers).status_code == 404


def test_update_checks_the_stored_assignment(client, admin, make_employee, make_client, make_project, monkeypatch):
    employee = make_employee("emp@example.com")
    customer = make_client("cli@example.com")
    project = make_project(customer.id, employee_ids=[employee.id])
    stale = ProjectRead.model_validate(project)
    client.post(f"/api/v1/projects/{project['id']}/assign", json={"employee_ids": []}, headers=admin.headers)

    async def stale_snapshot(cls, project_id):
        return stale

    monkeypatch.setattr(ProjectService, "fetch_project", classmethod(stale_snapshot))

    response = client.put(f"/api/v1/projects/{project['id']}", json={"progress": 80}, headers=employee.headers)
    assert response.status_code == 403
    response = client.patch(
        f"/api/v1/projects/{project['id']}/progress", json={"progress": 80}, headers=employee.headers
    )
    assert response.status_code == 403

    stored = client.get("/api/v1/projects/", headers=admin.headers).json()["data"][0]
    assert stored["progress"] == 0
    assert stored["employee_ids"] == []
