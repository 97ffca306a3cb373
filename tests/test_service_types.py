def test_catalog_is_public_and_admin_managed(client, admin, make_client):
    customer = make_client("cli@example.com")

    response = client.post("/api/v1/service-types/", json={"name": "Web"}, headers=customer.headers)
    assert response.status_code == 403

    web = client.post(
        "/api/v1/service-types/", json={"name": "Web", "description": "Sites"}, headers=admin.headers
    ).json()
    assert web["status"] == "active"
    assert len(web["id"]) == 32
    client.post("/api/v1/service-types/", json={"name": "Print", "status": "inactive"}, headers=admin.headers)

    listing = client.get("/api/v1/service-types/").json()
    assert [item["name"] for item in listing] == ["Print", "Web"]
    listing = client.get("/api/v1/service-types/", params={"status": "active"}).json()
    assert [item["name"] for item in listing] == ["Web"]

    assert client.get(f"/api/v1/service-types/{web['id']}", headers=customer.headers).json()["description"] == "Sites"
    assert client.get(f"/api/v1/service-types/{web['id']}").status_code == 401


def test_update_and_delete(client, admin):
    created = client.post("/api/v1/service-types/", json={"name": "SEO"}, headers=admin.headers).json()

    response = client.put(
        f"/api/v1/service-types/{created['id']}", json={"status": "inactive"}, headers=admin.headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "inactive"
    assert response.json()["name"] == "SEO"

    assert client.delete(f"/api/v1/service-types/{created['id']}", headers=admin.headers).status_code == 204
    assert client.get(f"/api/v1/service-types/{created['id']}", headers=admin.headers).status_code == 404
    assert client.put("/api/v1/service-types/missing", json={"name": "x"}, headers=admin.headers).status_code == 404
