from we_plan_it_api.app.core.db import get_db


def _create(client, user, **body):
    payload = {"title": "Event", "startDate": "2026-05-01T09:00:00Z"}
    payload.update(body)
    resp = client.post("/api/events", json=payload, headers=user["headers"])
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_event_routes_reject_missing_token_before_touching_the_store(app, client):
    calls = []

    def spy_db():
        calls.append(True)
        yield None

    app.dependency_overrides[get_db] = spy_db
    try:
        responses = [
            client.get("/api/events"),
            client.post("/api/events", json={"title": "x", "startDate": "2026-05-01T09:00:00Z"}),
            client.get("/api/events/some-id"),
            client.put("/api/events/some-id", json={"title": "y"}),
            client.delete("/api/events/some-id"),
            client.post("/api/events/some-id/attendees", json={"userId": "u"}),
            client.get("/api/tasks/event/some-id"),
        ]
    finally:
        app.dependency_overrides.clear()

    assert [r.status_code for r in responses] == [401] * len(responses)
    assert all(r.json() == {"message": "No token provided"} for r in responses)
    assert calls == []


def test_create_event_sets_owner_and_defaults(client, alice, event):
    assert event["title"] == "Team offsite"
    assert event["location"] == "Lisbon"
    assert event["ownerId"] == alice["user"]["id"]
    assert event["owner"] == {"id": alice["user"]["id"], "name": "Alice Owner", "avatar": None}
    assert event["isPublic"] is False
    assert event["description"] is None
    assert event["endDate"] is None


def test_create_event_requires_title_and_start_date(client, alice):
    for body in ({"title": "No date"}, {"startDate": "2026-05-01T09:00:00Z"}):
        resp = client.post("/api/events", json=body, headers=alice["headers"])
        assert resp.status_code == 400
        assert resp.json() == {"message": "Title and start date are required"}


def test_create_event_rejects_unparsable_date(client, alice):
    resp = client.post(
        "/api/events", json={"title": "Bad", "startDate": "next tuesday"}, headers=alice["headers"]
    )

    assert resp.status_code == 400
    assert "startDate" in resp.json()["message"]


def test_list_events_includes_owned_and_attended_sorted_by_start(client, alice, bob):
    late = _create(client, alice, title="Late", startDate="2026-09-01T09:00:00Z")
    early = _create(client, alice, title="Early", startDate="2026-02-01T09:00:00Z")
    bobs = _create(client, bob, title="Bob's party", startDate="2026-06-01T20:00:00Z")
    _create(client, bob, title="Bob only", startDate="2026-03-01T20:00:00Z")

    joined = client.post(
        f"/api/events/{bobs['id']}/attendees", json={"userId": alice["user"]["id"]}, headers=bob["headers"]
    )
    assert joined.status_code == 201, joined.text

    resp = client.get("/api/events", headers=alice["headers"])

    assert resp.status_code == 200
    events = resp.json()
    assert [e["id"] for e in events] == [early["id"], bobs["id"], late["id"]]
    party = events[1]
    assert party["owner"]["name"] == "Bob Guest"
    assert [a["user"]["id"] for a in party["attendees"]] == [alice["user"]["id"]]
    assert party["categories"] == []
    assert party["_count"] == {"tasks": 0}


def test_list_events_counts_tasks(client, alice, event):
    for title in ("a", "b"):
        client.post("/api/tasks", json={"title": title, "eventId": event["id"]}, headers=alice["headers"])

    events = client.get("/api/events", headers=alice["headers"]).json()

    assert events[0]["_count"] == {"tasks": 2}


def test_get_event_detail(client, alice, bob, event):
    client.post("/api/tasks", json={"title": "Later", "eventId": event["id"], "dueDate": "2026-04-20T00:00:00Z"},
                headers=alice["headers"])
    client.post("/api/tasks", json={"title": "Sooner", "eventId": event["id"], "dueDate": "2026-04-01T00:00:00Z",
                                    "assigneeId": bob["user"]["id"]}, headers=alice["headers"])

    resp = client.get(f"/api/events/{event['id']}", headers=bob["headers"])

    assert resp.status_code == 200, resp.text
    detail = resp.json()
    assert detail["owner"]["email"] == alice["user"]["email"]
    assert [t["title"] for t in detail["tasks"]] == ["Sooner", "Later"]
    assert detail["tasks"][0]["assignee"]["id"] == bob["user"]["id"]
    assert detail["attendees"] == []


def test_get_missing_event(client, alice):
    resp = client.get("/api/events/does-not-exist", headers=alice["headers"])

    assert resp.status_code == 404
    assert resp.json() == {"message": "Event not found"}


def test_owner_updates_only_given_fields(client, alice, event):
    resp = client.put(
        f"/api/events/{event['id']}",
        json={"description": "Two days by the sea", "isPublic": True},
        headers=alice["headers"],
    )

    assert resp.status_code == 200, resp.text
    updated = resp.json()
    assert updated["description"] == "Two days by the sea"
    assert updated["isPublic"] is True
    assert updated["title"] == event["title"]
    assert updated["location"] == event["location"]
    assert updated["startDate"] == event["startDate"]
    assert updated["attendees"] == []


def test_explicit_null_leaves_required_fields_unchanged(client, alice, event):
    resp = client.put(
        f"/api/events/{event['id']}",
        json={"title": None, "startDate": None, "location": None},
        headers=alice["headers"],
    )

    assert resp.status_code == 200, resp.text
    updated = resp.json()
    assert updated["title"] == event["title"]
    assert updated["startDate"] == event["startDate"]
    assert updated["location"] is None


def test_non_owner_cannot_update_event(client, bob, event, db):
    resp = client.put(f"/api/events/{event['id']}", json={"title": "Hijacked"}, headers=bob["headers"])

    assert resp.status_code == 403
    assert resp.json() == {"message": "Not authorized to update this event"}
    title = db.execute("SELECT title FROM events WHERE id = ?", (event["id"],)).fetchone()["title"]
    assert title == "Team offsite"


def test_non_owner_cannot_delete_event(client, bob, event, db):
    resp = client.delete(f"/api/events/{event['id']}", headers=bob["headers"])

    assert resp.status_code == 403
    assert resp.json() == {"message": "Not authorized to delete this event"}
    assert db.execute("SELECT id FROM events WHERE id = ?", (event["id"],)).fetchone() is not None


def test_update_and_delete_missing_event(client, alice):
    assert client.put("/api/events/nope", json={"title": "x"}, headers=alice["headers"]).status_code == 404
    assert client.delete("/api/events/nope", headers=alice["headers"]).status_code == 404


def test_owner_deletes_event_with_tasks_and_attendees(client, alice, bob, event, db):
    client.post("/api/tasks", json={"title": "Pack", "eventId": event["id"]}, headers=alice["headers"])
    client.post(f"/api/events/{event['id']}/attendees", json={"userId": bob["user"]["id"]}, headers=alice["headers"])

    resp = client.delete(f"/api/events/{event['id']}", headers=alice["headers"])

    assert resp.status_code == 200
    assert resp.json() == {"message": "Event deleted successfully"}
    assert client.get(f"/api/events/{event['id']}", headers=alice["headers"]).status_code == 404
    assert db.execute("SELECT COUNT(*) AS n FROM tasks").fetchone()["n"] == 0
    assert db.execute("SELECT COUNT(*) AS n FROM event_attendees").fetchone()["n"] == 0


def test_add_attendee_defaults_to_pending(client, alice, bob, event):
    resp = client.post(
        f"/api/events/{event['id']}/attendees", json={"userId": bob["user"]["id"]}, headers=alice["headers"]
    )

    assert resp.status_code == 201, resp.text
    attendee = resp.json()
    assert attendee["status"] == "PENDING"
    assert attendee["eventId"] == event["id"]
    assert attendee["user"] == {"id": bob["user"]["id"], "name": "Bob Guest", "avatar": None}


def test_add_attendee_with_status(client, alice, bob, event):
    resp = client.post(
        f"/api/events/{event['id']}/attendees",
        json={"userId": bob["user"]["id"], "status": "ACCEPTED"},
        headers=alice["headers"],
    )

    assert resp.status_code == 201
    assert resp.json()["status"] == "ACCEPTED"


def test_add_attendee_errors(client, alice, bob, event):
    url = f"/api/events/{event['id']}/attendees"

    missing = client.post(url, json={}, headers=alice["headers"])
    unknown_user = client.post(url, json={"userId": "ghost"}, headers=alice["headers"])
    unknown_event = client.post(
        "/api/events/nope/attendees", json={"userId": bob["user"]["id"]}, headers=alice["headers"]
    )
    client.post(url, json={"userId": bob["user"]["id"]}, headers=alice["headers"])
    duplicate = client.post(url, json={"userId": bob["user"]["id"]}, headers=alice["headers"])
    bad_status = client.post(url, json={"userId": bob["user"]["id"], "status": "SURE"}, headers=alice["headers"])

    assert (missing.status_code, missing.json()) == (400, {"message": "User ID is required"})
    assert (unknown_user.status_code, unknown_user.json()) == (404, {"message": "User not found"})
    assert (unknown_event.status_code, unknown_event.json()) == (404, {"message": "Event not found"})
    assert duplicate.status_code == 400
    assert duplicate.json() == {"message": "User is already an attendee of this event"}
    assert bad_status.status_code == 400
