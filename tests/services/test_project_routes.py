"""Project Routes — REST lifecycle over the test database.

Tests cover:
    - POST /projects requires a bearer token and returns the created project
    - GET /projects lists the live registry; GET /projects/{id} falls back to the store
    - save / finish / delete transitions and their status codes
    - visibility requires a grant and a finished project
    - permission grant and revoke
"""

from pixelcanvas.main import app


async def _create(client, auth_header, name: str = "foo", user_id: int = 1) -> dict:
    res = await client.post(
        "/api/v1/projects",
        json={"name": name, "x": 4, "y": 3, "timer": "unlimited"},
        headers=auth_header(user_id, "ada"),
    )
    assert res.status_code == 201
    return res.json()


async def test_create_requires_token(client):
    res = await client.post("/api/v1/projects", json={"name": "foo"})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_FAILED"
    assert res.headers["www-authenticate"] == "Bearer"


async def test_create_returns_project_with_grid(client, auth_header):
    body = await _create(client, auth_header)
    assert body["name"] == "foo"
    assert body["owner_id"] == 1
    assert body["finished_at"] is None
    assert len(body["grid"]) == 3
    assert len(body["grid"][0]) == 4


async def test_create_rejects_blank_name(client, auth_header):
    res = await client.post(
        "/api/v1/projects", json={"name": "   "}, headers=auth_header(1),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_list_projects_reads_registry(client, auth_header):
    first = await _create(client, auth_header, "first")
    second = await _create(client, auth_header, "second")
    res = await client.get("/api/v1/projects")
    assert [p["id"] for p in res.json()["projects"]] == [first["id"], second["id"]]


async def test_get_missing_project_is_404(client):
    res = await client.get("/api/v1/projects/999")
    assert res.status_code == 404


async def test_save_persists_live_grid_over_http(client, auth_header):
    project = await _create(client, auth_header)
    app.state.registry.find_by_id(project["id"]).grid[0][0] = "#000"

    res = await client.post(f"/api/v1/projects/{project['id']}/save")

    assert res.status_code == 200
    stored = await app.state.project_store.load_project_by_id(project["id"])
    assert stored.grid[0][0] == "#000"


async def test_finish_then_get_reads_from_store(client, auth_header):
    project = await _create(client, auth_header)

    res = await client.post(f"/api/v1/projects/{project['id']}/finish")
    assert res.status_code == 200
    assert res.json()["is_finished"] is True

    listed = await client.get("/api/v1/projects")
    assert listed.json()["projects"] == []
    fetched = await client.get(f"/api/v1/projects/{project['id']}")
    assert fetched.json()["is_finished"] is True


async def test_finish_unknown_project_is_404(client):
    res = await client.post("/api/v1/projects/123/finish")
    assert res.status_code == 404


async def test_delete_active_project(client, auth_header):
    project = await _create(client, auth_header)
    res = await client.delete(f"/api/v1/projects/{project['id']}")
    assert res.status_code == 204
    assert (await client.get(f"/api/v1/projects/{project['id']}")).status_code == 404


async def test_delete_finished_project_conflicts(client, auth_header):
    project = await _create(client, auth_header)
    await client.post(f"/api/v1/projects/{project['id']}/finish")
    res = await client.delete(f"/api/v1/projects/{project['id']}")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "INVALID_TRANSITION"


async def test_visibility_requires_grant(client, auth_header):
    project = await _create(client, auth_header, user_id=1)
    await client.post(f"/api/v1/projects/{project['id']}/finish")
    res = await client.put(
        f"/api/v1/projects/{project['id']}/visibility",
        json={"is_public": True}, headers=auth_header(2),
    )
    assert res.status_code == 403


async def test_visibility_requires_finished(client, auth_header):
    project = await _create(client, auth_header)
    res = await client.put(
        f"/api/v1/projects/{project['id']}/visibility",
        json={"is_public": True}, headers=auth_header(1),
    )
    assert res.status_code == 409


async def test_publish_finished_project(client, auth_header):
    project = await _create(client, auth_header)
    await client.post(f"/api/v1/projects/{project['id']}/finish")
    res = await client.put(
        f"/api/v1/projects/{project['id']}/visibility",
        json={"is_public": True}, headers=auth_header(1),
    )
    assert res.status_code == 200
    assert res.json()["is_public"] is True


async def test_grant_and_revoke_permission(client, auth_header):
    project = await _create(client, auth_header)
    pid = project["id"]

    res = await client.post(
        f"/api/v1/projects/{pid}/permissions", json={"user_id": 2}, headers=auth_header(1),
    )
    assert res.status_code == 201
    assert await app.state.project_store.has_permission(pid, 2)

    res = await client.delete(f"/api/v1/projects/{pid}/permissions/2", headers=auth_header(2))
    assert res.status_code == 204
    res = await client.delete(f"/api/v1/projects/{pid}/permissions/2", headers=auth_header(1))
    assert res.status_code == 404


async def test_timed_project_reports_countdown(client, auth_header):
    res = await client.post(
        "/api/v1/projects",
        json={"name": "quick", "x": 2, "y": 2, "timer": "5min"},
        headers=auth_header(1),
    )
    assert 0 < res.json()["seconds_remaining"] <= 300

    listed = await client.get("/api/v1/projects")
    assert listed.json()["projects"][0]["seconds_remaining"] > 0
