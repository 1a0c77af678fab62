import json

import pytest


async def create_project(client, headers, **overrides):
    body = {"name": "Website Relaunch", "description": "<b>New</b> site", "priority": "high",
            "tags": ["web", "web", " design "]}
    body.update(overrides)
    response = await client.post("/projects/", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_project_makes_creator_owner(client, signup, connect):
    alice, headers = await signup("alice")
    ws = connect(alice)

    project = await create_project(client, headers)

    assert project["manager_id"] == alice
    assert project["status"] == "active"
    assert project["description"] == "New site"
    assert project["tags"] == ["web", "design"]

    members = (await client.get(f"/projects/{project['project_id']}/members", headers=headers)).json()
    assert [(m["user_id"], m["role"]) for m in members] == [(alice, "owner")]

    (frame,) = [json.loads(t) for t in ws.sent]
    assert frame["type"] == "project_created"
    assert frame["projectId"] == project["project_id"]


@pytest.mark.asyncio
async def test_project_access_requires_membership(client, signup):
    _, alice_headers = await signup("alice")
    _, bob_headers = await signup("bob")
    project = await create_project(client, alice_headers)

    response = await client.get(f"/projects/{project['project_id']}", headers=bob_headers)
    assert response.status_code == 403

    response = await client.get("/projects/9999", headers=bob_headers)
    assert response.status_code == 404

    assert (await client.get("/projects/", headers=bob_headers)).json() == []


@pytest.mark.asyncio
async def test_requests_without_token_are_rejected(client):
    response = await client.get("/projects/")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_broadcasts_to_members_only(client, signup, connect):
    alice, alice_headers = await signup("alice")
    bob, _ = await signup("bob")
    carol, _ = await signup("carol")
    project = await create_project(client, alice_headers)
    pid = project["project_id"]

    response = await client.post(f"/projects/{pid}/members", json={"user_id": bob}, headers=alice_headers)
    assert response.status_code == 201

    bob_ws, carol_ws = connect(bob), connect(carol)
    response = await client.patch(f"/projects/{pid}", json={"name": "Relaunch v2"}, headers=alice_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Relaunch v2"

    (frame,) = [json.loads(t) for t in bob_ws.sent]
    assert frame["type"] == "project_updated"
    assert frame["data"]["name"] == "Relaunch v2"
    assert carol_ws.sent == []


@pytest.mark.asyncio
async def test_new_manager_is_added_and_toasted(client, signup, connect):
    _, alice_headers = await signup("alice")
    bob, _ = await signup("bob")
    project = await create_project(client, alice_headers)
    pid = project["project_id"]
    bob_ws = connect(bob)

    response = await client.patch(f"/projects/{pid}", json={"manager_id": bob}, headers=alice_headers)
    assert response.status_code == 200
    assert response.json()["manager_id"] == bob

    members = (await client.get(f"/projects/{pid}/members", headers=alice_headers)).json()
    assert {m["user_id"]: m["role"] for m in members}[bob] == "manager"

    types = [json.loads(t)["type"] for t in bob_ws.sent]
    assert types == ["project_updated", "notification"]
    toast = json.loads(bob_ws.sent[1])["notification"]
    assert toast["title"] == "Project Manager Assigned"


@pytest.mark.asyncio
async def test_member_management_rules(client, signup, connect):
    alice, alice_headers = await signup("alice")
    bob, bob_headers = await signup("bob")
    carol, _ = await signup("carol")
    pid = (await create_project(client, alice_headers))["project_id"]
    bob_ws = connect(bob)

    response = await client.post(f"/projects/{pid}/members", json={"user_id": bob}, headers=alice_headers)
    assert response.status_code == 201
    assert response.json()["user"]["username"] == "bob"
    assert json.loads(bob_ws.sent[0])["type"] == "project_member_added"

    response = await client.post(f"/projects/{pid}/members", json={"user_id": bob}, headers=alice_headers)
    assert response.status_code == 400

    # Plain members cannot manage membership
    response = await client.post(f"/projects/{pid}/members", json={"user_id": carol}, headers=bob_headers)
    assert response.status_code == 403

    response = await client.post(f"/projects/{pid}/members", json={"user_id": 9999}, headers=alice_headers)
    assert response.status_code == 404

    response = await client.delete(f"/projects/{pid}/members/{alice}", headers=alice_headers)
    assert response.status_code == 400

    response = await client.delete(f"/projects/{pid}/members/{bob}", headers=alice_headers)
    assert response.status_code == 204
    # The removed user is told even though no longer a member
    assert json.loads(bob_ws.sent[-1])["type"] == "project_member_removed"

    response = await client.delete(f"/projects/{pid}/members/{bob}", headers=alice_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_only_owner_can_delete(client, signup, connect):
    _, alice_headers = await signup("alice")
    bob, bob_headers = await signup("bob")
    pid = (await create_project(client, alice_headers))["project_id"]
    await client.post(f"/projects/{pid}/members", json={"user_id": bob, "role": "manager"}, headers=alice_headers)
    await client.post("/tasks/", json={"title": "Draft copy", "project_id": pid}, headers=alice_headers)

    response = await client.delete(f"/projects/{pid}", headers=bob_headers)
    assert response.status_code == 403

    bob_ws = connect(bob)
    response = await client.delete(f"/projects/{pid}", headers=alice_headers)
    assert response.status_code == 204

    (frame,) = [json.loads(t) for t in bob_ws.sent]
    assert frame == {"type": "project_deleted", "data": {"project_id": pid}, "projectId": pid}
    assert (await client.get(f"/projects/{pid}", headers=alice_headers)).status_code == 404
    assert (await client.get("/tasks/", headers=alice_headers)).json() == []


@pytest.mark.asyncio
async def test_deadlines_only_include_dated_projects(client, signup):
    _, headers = await signup("alice")
    await create_project(client, headers, name="Undated")
    dated = await create_project(client, headers, name="Dated", deadline="2030-01-01T00:00:00")

    deadlines = (await client.get("/projects/deadlines", headers=headers)).json()
    assert [d["project_id"] for d in deadlines] == [dated["project_id"]]


@pytest.mark.asyncio
async def test_null_for_required_fields_keeps_current_values(client, signup):
    _, headers = await signup("alice")
    project = await create_project(client, headers, name="Keep Me")

    response = await client.patch(f"/projects/{project['project_id']}",
                                  json={"name": None, "status": None, "priority": None, "description": "Edited"},
                                  headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Keep Me"
    assert body["status"] == "active"
    assert body["priority"] == "high"
    assert body["description"] == "Edited"
