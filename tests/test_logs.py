from conftest import PASSWORD


def test_logs_record_auth_events(client, admin, citizen, headers_for):
    client.post("/api/auth/login", json={"username": "citizen", "password": PASSWORD})
    client.post("/api/auth/login", json={"username": "citizen", "password": "nope-nope"})

    resp = client.get("/api/logs", params={"action": "LOGIN"}, headers=headers_for(admin))
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    # Newest first
    assert [row["status"] for row in body["items"]] == ["FAIL", "SUCCESS"]
    assert body["items"][0]["userId"] == citizen.id

    failures = client.get("/api/logs", params={"status": "FAIL"}, headers=headers_for(admin)).json()
    assert failures["total"] == 1


def test_logs_filter_by_user_and_resource(client, admin, citizen, headers_for):
    client.put(f"/api/users/{citizen.id}", json={"isBlocked": True, "blockReason": "spam"},
               headers=headers_for(admin))

    by_user = client.get("/api/logs", params={"user_id": admin.id}, headers=headers_for(admin)).json()
    assert [row["action"] for row in by_user["items"]] == ["USER_UPDATE"]

    by_resource = client.get("/api/logs", params={"resource": "users"}, headers=headers_for(admin)).json()
    assert by_resource["total"] == 1


def test_logs_bad_date_is_400(client, admin, headers_for):
    resp = client.get("/api/logs", params={"date_from": "yesterday"}, headers=headers_for(admin))
    assert resp.status_code == 400


def test_logs_date_range(client, admin, headers_for):
    client.post("/api/auth/register", json={"username": "newbie", "password": "hunter22"})

    future = client.get("/api/logs", params={"date_from": "2999-01-01"}, headers=headers_for(admin)).json()
    assert future["total"] == 0
    everything = client.get("/api/logs", params={"date_from": "2000-01-01", "date_to": "2999-12-31"},
                            headers=headers_for(admin)).json()
    assert everything["total"] == 1


def test_logs_are_admin_only(client, citizen, headers_for):
    assert client.get("/api/logs", headers=headers_for(citizen)).status_code == 403
    assert client.get("/api/logs").status_code == 401


def test_logs_track_affected_record(client, admin, volunteer, headers_for):
    report_id = client.post("/api/reports", json={"description": "Fire at depot", "location": {"lat": 1, "lng": 2}},
                            headers=headers_for(admin)).json()["id"]
    client.put(f"/api/reports/{report_id}/assign", json={"assignedTo": volunteer.id}, headers=headers_for(admin))
    client.delete(f"/api/reports/{report_id}", headers=headers_for(admin))

    rows = client.get("/api/logs", params={"resource": "reports", "resource_id": report_id},
                      headers=headers_for(admin)).json()["items"]
    assert [row["action"] for row in rows] == ["REPORT_DELETE", "REPORT_ASSIGN"]
    assert rows[0]["resourceId"] == report_id
    assert rows[0]["meta"] == {"type": "Other", "status": "Assigned"}
    assert rows[1]["meta"] == {"assigned_to": volunteer.id, "status": "Assigned"}
