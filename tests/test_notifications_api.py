import pytest


async def assign_task(client, owner_headers, assignee_id, title="Prepare slides"):
    pid = (await client.post("/projects/", json={"name": "Conference"}, headers=owner_headers)).json()["project_id"]
    response = await client.post("/tasks/", json={"title": title, "project_id": pid, "assignee_id": assignee_id},
                                 headers=owner_headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_offline_assignee_finds_notification_later(client, signup, registry):
    _, bob_headers = await signup("bob")
    alice, alice_headers = await signup("alice")
    _, carol_headers = await signup("carol")
    assert alice not in registry

    await assign_task(client, bob_headers, alice)

    assert (await client.get("/notifications/", headers=carol_headers)).json() == []
    unread = (await client.get("/notifications/unread", headers=alice_headers)).json()
    assert unread["count"] == 1
    assert unread["notifications"][0]["read"] is False
    assert unread["notifications"][0]["user_id"] == alice


@pytest.mark.asyncio
async def test_mark_read_is_idempotent(client, signup):
    _, owner_headers = await signup("owner")
    alice, alice_headers = await signup("alice")
    await assign_task(client, owner_headers, alice)
    (row,) = (await client.get("/notifications/", headers=alice_headers)).json()

    first = await client.put(f"/notifications/{row['notification_id']}/read", headers=alice_headers)
    second = await client.put(f"/notifications/{row['notification_id']}/read", headers=alice_headers)

    assert first.status_code == second.status_code == 200
    assert first.json()["read"] is True and second.json()["read"] is True
    assert (await client.get("/notifications/unread", headers=alice_headers)).json()["count"] == 0


@pytest.mark.asyncio
async def test_cannot_mark_someone_elses_notification(client, signup):
    _, owner_headers = await signup("owner")
    alice, alice_headers = await signup("alice")
    await assign_task(client, owner_headers, alice)
    (row,) = (await client.get("/notifications/", headers=alice_headers)).json()

    response = await client.put(f"/notifications/{row['notification_id']}/read", headers=owner_headers)
    assert response.status_code == 404

    response = await client.put("/notifications/999/read", headers=alice_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_mark_all_read(client, signup):
    _, owner_headers = await signup("owner")
    alice, alice_headers = await signup("alice")
    await assign_task(client, owner_headers, alice, title="One")
    await assign_task(client, owner_headers, alice, title="Two")

    listed = (await client.get("/notifications/", headers=alice_headers)).json()
    assert len(listed) == 2

    response = await client.put("/notifications/read-all", headers=alice_headers)
    assert response.json() == {"updated": 2}
    assert (await client.get("/notifications/unread", headers=alice_headers)).json() == {
        "count": 0, "notifications": []
    }
    response = await client.put("/notifications/read-all", headers=alice_headers)
    assert response.json() == {"updated": 0}
