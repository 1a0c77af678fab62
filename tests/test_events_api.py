import json

import pytest


def event_body(**overrides):
    body = {"title": "Sprint review", "start": "2030-03-01T10:00:00", "end": "2030-03-01T11:00:00",
            "color": "violet", "location": "Room 4"}
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_personal_event_is_private_and_pushed_to_creator(client, signup, connect):
    alice, alice_headers = await signup("alice")
    bob, bob_headers = await signup("bob")
    alice_ws, bob_ws = connect(alice), connect(bob)

    response = await client.post("/events/", json=event_body(), headers=alice_headers)
    assert response.status_code == 201
    event = response.json()
    assert event["created_by_id"] == alice
    assert event["project_id"] is None

    (frame,) = [json.loads(t) for t in alice_ws.sent]
    assert frame["type"] == "event_created"
    assert frame["eventId"] == event["event_id"]
    assert "projectId" not in frame
    assert bob_ws.sent == []

    assert (await client.get(f"/events/{event['event_id']}", headers=bob_headers)).status_code == 403
    assert (await client.get("/events/", headers=bob_headers)).json() == []


@pytest.mark.asyncio
async def test_project_event_visible_to_members(client, signup, connect):
    _, alice_headers = await signup("alice")
    bob, bob_headers = await signup("bob")
    pid = (await client.post("/projects/", json={"name": "Ops"}, headers=alice_headers)).json()["project_id"]
    await client.post(f"/projects/{pid}/members", json={"user_id": bob}, headers=alice_headers)
    bob_ws = connect(bob)

    event = (await client.post("/events/", json=event_body(project_id=pid), headers=alice_headers)).json()

    assert json.loads(bob_ws.sent[0])["projectId"] == pid
    listed = (await client.get("/events/", headers=bob_headers)).json()
    assert [e["event_id"] for e in listed] == [event["event_id"]]

    # Members may edit project events
    response = await client.patch(f"/events/{event['event_id']}", json={"title": "Retro"}, headers=bob_headers)
    assert response.status_code == 200
    assert response.json()["title"] == "Retro"


@pytest.mark.asyncio
async def test_event_in_foreign_project_is_forbidden(client, signup):
    _, alice_headers = await signup("alice")
    _, eve_headers = await signup("eve")
    pid = (await client.post("/projects/", json={"name": "Ops"}, headers=alice_headers)).json()["project_id"]

    response = await client.post("/events/", json=event_body(project_id=pid), headers=eve_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_task_link_must_match_project(client, signup):
    _, headers = await signup("alice")
    first = (await client.post("/projects/", json={"name": "One"}, headers=headers)).json()["project_id"]
    second = (await client.post("/projects/", json={"name": "Two"}, headers=headers)).json()["project_id"]
    task = (await client.post("/tasks/", json={"title": "Linked", "project_id": first}, headers=headers)).json()

    response = await client.post("/events/", json=event_body(project_id=second, task_id=task["task_id"]),
                                 headers=headers)
    assert response.status_code == 400

    response = await client.post("/events/", json=event_body(project_id=first, task_id=task["task_id"]),
                                 headers=headers)
    assert response.status_code == 201

    response = await client.post("/events/", json=event_body(task_id=31337), headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_end_before_start_is_rejected(client, signup):
    _, headers = await signup("alice")

    response = await client.post("/events/", json=event_body(end="2030-03-01T09:00:00"), headers=headers)
    assert response.status_code == 422

    event = (await client.post("/events/", json=event_body(), headers=headers)).json()
    response = await client.patch(f"/events/{event['event_id']}", json={"end": "2030-02-28T10:00:00"},
                                  headers=headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_range_query(client, signup):
    _, headers = await signup("alice")
    await client.post("/events/", json=event_body(title="March"), headers=headers)
    await client.post("/events/", json=event_body(title="June", start="2030-06-01T10:00:00",
                                                  end="2030-06-01T11:00:00"), headers=headers)

    response = await client.get("/events/range", params={"start": "2030-02-01T00:00:00",
                                                         "end": "2030-04-01T00:00:00"}, headers=headers)
    assert response.status_code == 200
    assert [e["title"] for e in response.json()] == ["March"]

    response = await client.get("/events/range", params={"start": "2030-04-01T00:00:00",
                                                         "end": "2030-02-01T00:00:00"}, headers=headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_notifies_project_members(client, signup, connect):
    alice, alice_headers = await signup("alice")
    bob, _ = await signup("bob")
    pid = (await client.post("/projects/", json={"name": "Ops"}, headers=alice_headers)).json()["project_id"]
    await client.post(f"/projects/{pid}/members", json={"user_id": bob}, headers=alice_headers)
    event = (await client.post("/events/", json=event_body(project_id=pid), headers=alice_headers)).json()
    bob_ws = connect(bob)

    response = await client.delete(f"/events/{event['event_id']}", headers=alice_headers)
    assert response.status_code == 204

    (frame,) = [json.loads(t) for t in bob_ws.sent]
    assert frame["type"] == "event_deleted"
    assert frame["projectId"] == pid
    assert frame["data"] == {"event_id": event["event_id"], "project_id": pid}
    assert (await client.get(f"/events/{event['event_id']}", headers=alice_headers)).status_code == 404


@pytest.mark.asyncio
async def test_unknown_project_is_not_found(client, signup):
    _, headers = await signup("alice")

    response = await client.post("/events/", json=event_body(project_id=9999), headers=headers)
    assert response.status_code == 404

    event = (await client.post("/events/", json=event_body(), headers=headers)).json()
    response = await client.patch(f"/events/{event['event_id']}", json={"project_id": 9999}, headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_moving_event_tells_old_and_new_project(client, signup, connect):
    _, alice_headers = await signup("alice")
    bob, _ = await signup("bob")
    carol, _ = await signup("carol")
    first = (await client.post("/projects/", json={"name": "Old"}, headers=alice_headers)).json()["project_id"]
    second = (await client.post("/projects/", json={"name": "New"}, headers=alice_headers)).json()["project_id"]
    await client.post(f"/projects/{first}/members", json={"user_id": bob}, headers=alice_headers)
    await client.post(f"/projects/{second}/members", json={"user_id": carol}, headers=alice_headers)
    event = (await client.post("/events/", json=event_body(project_id=first), headers=alice_headers)).json()
    bob_ws, carol_ws = connect(bob), connect(carol)

    response = await client.patch(f"/events/{event['event_id']}", json={"project_id": second},
                                  headers=alice_headers)
    assert response.status_code == 200

    (old_frame,) = [json.loads(t) for t in bob_ws.sent]
    (new_frame,) = [json.loads(t) for t in carol_ws.sent]
    assert old_frame["type"] == new_frame["type"] == "event_updated"
    assert old_frame["projectId"] == second
