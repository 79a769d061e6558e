import pytest


@pytest.fixture
async def alice(register_user):
    return await register_user("Alice", "alice@acme.io")


@pytest.fixture
async def bob(register_user):
    return await register_user("Bob", "bob@acme.io")


async def _create_project(client, headers, title="Sprint 1"):
    response = await client.post("/api/projects/", json={"title": title}, headers=headers)
    assert response.status_code == 201
    return response.json()["project"]


async def _create_task(client, headers, project_id, title="Design"):
    response = await client.post(
        "/api/tasks/", json={"title": title, "projectId": project_id}, headers=headers
    )
    assert response.status_code == 201
    return response.json()["task"]


async def test_sprint_scenario_stats(client, alice):
    _, headers = alice
    project = await _create_project(client, headers)
    task = await _create_task(client, headers, project["id"])

    toggle = await client.patch(f"/api/tasks/{task['id']}/toggle", headers=headers)
    assert toggle.status_code == 200
    assert toggle.json()["message"] == "Task completed successfully"
    assert toggle.json()["task"]["completed"] is True
    assert toggle.json()["task"]["completedAt"] is not None

    response = await client.get(f"/api/projects/{project['id']}/stats", headers=headers)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "stats": {
            "totalTasks": 1,
            "completedTasks": 1,
            "inProgressTasks": 0,
            "progress": 100,
            "tasksByStatus": {"completed": 1},
        },
    }


async def test_project_response_shape(client, alice):
    user, headers = alice

    project = await _create_project(client, headers)

    assert project["title"] == "Sprint 1"
    assert project["color"] == "bg-blue-100"
    assert project["status"] == "active"
    assert project["tasksCount"] == 0
    assert project["completedTasksCount"] == 0
    assert project["progress"] == 0
    assert project["owner"] == {"id": str(user.id), "name": "Alice", "email": "alice@acme.io"}
    assert project["collaborators"] == []


async def test_list_projects_newest_first(client, alice):
    _, headers = alice
    first = await _create_project(client, headers, "First")
    second = await _create_project(client, headers, "Second")

    response = await client.get("/api/projects/", headers=headers)

    assert response.status_code == 200
    assert [p["id"] for p in response.json()["projects"]] == [second["id"], first["id"]]


async def test_missing_token_is_rejected(client):
    response = await client.get("/api/projects/")

    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "message": "Not authenticated",
        "error": "UNAUTHORIZED",
    }


async def test_invalid_token_is_rejected(client):
    response = await client.get(
        "/api/projects/", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "UNAUTHORIZED"


async def test_disabled_user_is_forbidden(client, register_user):
    _, headers = await register_user("Mallory", "mallory@acme.io", is_active=False)

    response = await client.get("/api/auth/me", headers=headers)

    assert response.status_code == 403
    assert response.json()["success"] is False


async def test_me_returns_current_user(client, alice):
    user, headers = alice

    response = await client.get("/api/auth/me", headers=headers)

    assert response.status_code == 200
    assert response.json()["user"]["id"] == str(user.id)


async def test_invalid_body_returns_validation_envelope(client, alice):
    _, headers = alice

    response = await client.post("/api/projects/", json={"color": "bg-blue-100"}, headers=headers)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "VALIDATION_ERROR"
    assert "title" in body["message"]


async def test_other_users_project_is_not_found(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    project = await _create_project(client, alice_headers)

    response = await client.get(f"/api/projects/{project['id']}", headers=bob_headers)

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": "Project not found",
        "error": "NOT_FOUND",
    }


async def test_collaborator_flow(client, alice, bob):
    _, alice_headers = alice
    bob_user, bob_headers = bob
    project = await _create_project(client, alice_headers)
    task = await _create_task(client, alice_headers, project["id"])

    added = await client.post(
        f"/api/projects/{project['id']}/collaborators",
        json={"userEmail": "bob@acme.io", "role": "viewer"},
        headers=alice_headers,
    )
    assert added.status_code == 200
    [collaborator] = added.json()["project"]["collaborators"]
    assert collaborator["role"] == "viewer"
    assert collaborator["user"]["id"] == str(bob_user.id)

    assert (await client.get(f"/api/projects/{project['id']}", headers=bob_headers)).status_code == 200
    listed = await client.get(f"/api/tasks/project/{project['id']}", headers=bob_headers)
    assert [t["id"] for t in listed.json()["tasks"]] == [task["id"]]

    single = await client.get(f"/api/tasks/{task['id']}", headers=bob_headers)
    assert single.status_code == 403
    assert single.json()["error"] == "FORBIDDEN"

    update = await client.put(
        f"/api/projects/{project['id']}", json={"title": "Hijacked"}, headers=bob_headers
    )
    assert update.status_code == 404

    removed = await client.delete(
        f"/api/projects/{project['id']}/collaborators/{bob_user.id}", headers=alice_headers
    )
    assert removed.status_code == 200
    assert removed.json()["project"]["collaborators"] == []
    assert (await client.get(f"/api/projects/{project['id']}", headers=bob_headers)).status_code == 404


async def test_unknown_collaborator_email(client, alice):
    _, headers = alice
    project = await _create_project(client, headers)

    response = await client.post(
        f"/api/projects/{project['id']}/collaborators",
        json={"userEmail": "ghost@acme.io"},
        headers=headers,
    )

    assert response.status_code == 404
    assert response.json()["message"] == "User not found with this email"


async def test_reorder_route_and_listing(client, alice):
    _, headers = alice
    project = await _create_project(client, headers)
    t1 = await _create_task(client, headers, project["id"], "t1")
    t2 = await _create_task(client, headers, project["id"], "t2")
    t3 = await _create_task(client, headers, project["id"], "t3")

    response = await client.patch(
        "/api/tasks/reorder",
        json={"taskIds": [t3["id"], t1["id"], t2["id"]], "projectId": project["id"]},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["success"] is True

    listed = await client.get(f"/api/tasks/project/{project['id']}", headers=headers)
    assert [(t["id"], t["order"]) for t in listed.json()["tasks"]] == [
        (t3["id"], 0),
        (t1["id"], 1),
        (t2["id"], 2),
    ]


async def test_update_and_delete_task(client, alice):
    _, headers = alice
    project = await _create_project(client, headers)
    task = await _create_task(client, headers, project["id"])

    updated = await client.put(
        f"/api/tasks/{task['id']}",
        json={"status": "in_progress", "tags": [" ui ", "ui"]},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["task"]["status"] == "in_progress"
    assert updated.json()["task"]["tags"] == ["ui"]

    deleted = await client.delete(f"/api/tasks/{task['id']}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True, "message": "Task deleted successfully"}

    missing = await client.get(f"/api/tasks/{task['id']}", headers=headers)
    assert missing.status_code == 404

    refreshed = await client.get(f"/api/projects/{project['id']}", headers=headers)
    assert refreshed.json()["project"]["tasksCount"] == 0


async def test_activity_feed_pagination(client, alice):
    _, headers = alice
    project = await _create_project(client, headers)
    task = await _create_task(client, headers, project["id"])
    await client.patch(f"/api/tasks/{task['id']}/toggle", headers=headers)

    response = await client.get("/api/tasks/activity/feed?limit=2", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"] == {
        "currentPage": 1,
        "limit": 2,
        "totalItems": 3,
        "totalPages": 2,
    }
    latest = body["activities"][0]
    assert latest["type"] == "task_completed"
    assert latest["taskId"] == task["id"]
    assert latest["projectName"] == "Sprint 1"
    assert latest["task"] == "Design"


async def test_project_activity_endpoint(client, alice):
    _, headers = alice
    project = await _create_project(client, headers)
    await client.put(
        f"/api/projects/{project['id']}", json={"priority": "high"}, headers=headers
    )

    response = await client.get(
        f"/api/projects/{project['id']}/activity?page=abc", headers=headers
    )

    body = response.json()
    assert body["pagination"]["currentPage"] == 1
    assert body["pagination"]["limit"] == 20
    assert [a["type"] for a in body["activities"]] == ["project_updated", "project_created"]
    assert body["activities"][0]["metadata"] == {"changes": ["priority"]}


async def test_delete_project(client, alice):
    _, headers = alice
    project = await _create_project(client, headers)
    await _create_task(client, headers, project["id"])

    response = await client.delete(f"/api/projects/{project['id']}", headers=headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Project deleted successfully"
    assert (await client.get(f"/api/projects/{project['id']}", headers=headers)).status_code == 404


async def test_request_id_is_echoed(client):
    response = await client.get("/api/health", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["status"] == "healthy"
    assert response.json()["environment"] == "test"


async def test_readiness_checks_database(client):
    response = await client.get("/api/health/ready")

    assert response.status_code == 200
    assert response.json()["checks"] == {"database": "healthy"}


async def test_activity_feed_page_far_past_the_end(client, alice):
    _, headers = alice
    await _create_project(client, headers)

    response = await client.get(
        "/api/tasks/activity/feed?page=99999999999999999999", headers=headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["activities"] == []
    assert body["pagination"]["totalItems"] == 1
    assert body["pagination"]["currentPage"] == (2**63 - 1) // 20


async def test_unknown_assignee_is_rejected(client, alice):
    _, headers = alice
    project = await _create_project(client, headers)

    response = await client.post(
        "/api/tasks/",
        json={
            "title": "Design",
            "projectId": project["id"],
            "assignedTo": "00000000-0000-4000-8000-000000000000",
        },
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Assigned user not found",
        "error": "VALIDATION_ERROR",
    }
