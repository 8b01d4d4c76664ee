from conftest import PASSWORD


def test_register_public_user_is_approved_and_gets_token(client):
    resp = client.post("/api/auth/register", json={"username": "maria", "password": "hunter22"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["username"] == "maria"
    assert body["role"] == "Public"
    assert body["isApproved"] is True
    assert body["isBlocked"] is False
    assert body["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "maria"


def test_register_volunteer_starts_unapproved(client):
    resp = client.post("/api/auth/register", json={"username": "helper", "password": "hunter22", "role": "Volunteer"})
    assert resp.status_code == 201
    assert resp.json()["isApproved"] is False

    login = client.post("/api/auth/login", json={"username": "helper", "password": "hunter22"})
    assert login.status_code == 403
    assert "pending approval" in login.json()["message"]


def test_register_duplicate_username(client, citizen):
    resp = client.post("/api/auth/register", json={"username": "citizen", "password": "hunter22"})
    assert resp.status_code == 400


def test_register_as_admin_is_refused(client):
    resp = client.post("/api/auth/register", json={"username": "sneaky", "password": "hunter22", "role": "Admin"})
    assert resp.status_code == 400


def test_register_validation_errors_are_400(client):
    resp = client.post("/api/auth/register", json={"username": "ab", "password": "x"})
    assert resp.status_code == 400
    assert "username" in resp.json()["message"]


def test_login_success(client, citizen):
    resp = client.post("/api/auth/login", json={"username": "citizen", "password": PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == citizen.id
    assert body["message"] == "Logged in successfully"
    assert body["token"]


def test_login_wrong_password(client, citizen):
    resp = client.post("/api/auth/login", json={"username": "citizen", "password": "wrong-one"})
    assert resp.status_code == 401


def test_login_unknown_user(client):
    resp = client.post("/api/auth/login", json={"username": "nobody", "password": PASSWORD})
    assert resp.status_code == 401


def test_blocked_user_cannot_log_in_even_with_correct_password(client, make_user):
    make_user("troll", blocked=True, block_reason="Spam reports")

    for password in (PASSWORD, "wrong-one"):
        resp = client.post("/api/auth/login", json={"username": "troll", "password": password})
        assert resp.status_code == 403
        body = resp.json()
        assert body["isBlocked"] is True
        assert body["blockReason"] == "Spam reports"
        assert "Spam reports" in body["message"]


def test_blocked_user_token_is_refused(client, make_user, headers_for):
    user = make_user("troll", blocked=True, block_reason="Abuse")
    resp = client.get("/api/auth/me", headers=headers_for(user))
    assert resp.status_code == 403
    assert resp.json()["isBlocked"] is True


def test_missing_and_invalid_tokens_are_401(client):
    assert client.get("/api/auth/me").status_code == 401
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert "message" in resp.json()


def test_error_body_carries_stack_outside_production(client):
    resp = client.get("/api/auth/me")
    body = resp.json()
    assert body["message"] == "Not authorized, no token"
    assert "stack" in body
    assert "isBlocked" not in body


def test_unknown_route_uses_error_body(client):
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Not Found"


def test_approve_volunteer(client, admin, make_user, headers_for):
    pending = make_user("helper", role="Volunteer", approved=False)

    resp = client.put(f"/api/auth/approve/{pending.id}", headers=headers_for(admin))
    assert resp.status_code == 200
    assert resp.json()["user"]["isApproved"] is True

    again = client.put(f"/api/auth/approve/{pending.id}", headers=headers_for(admin))
    assert again.status_code == 400

    login = client.post("/api/auth/login", json={"username": "helper", "password": PASSWORD})
    assert login.status_code == 200


def test_approve_rules(client, admin, citizen, headers_for):
    assert client.put(f"/api/auth/approve/{citizen.id}", headers=headers_for(admin)).status_code == 400
    assert client.put("/api/auth/approve/999", headers=headers_for(admin)).status_code == 404
    assert client.put(f"/api/auth/approve/{citizen.id}", headers=headers_for(citizen)).status_code == 403


def test_reject_deletes_pending_user(client, admin, make_user, headers_for):
    pending = make_user("org", role="NGO", approved=False)
    pending_id = pending.id

    resp = client.delete(f"/api/auth/reject/{pending_id}", headers=headers_for(admin))
    assert resp.status_code == 200

    assert client.get(f"/api/users/{pending_id}", headers=headers_for(admin)).status_code == 404


def test_reject_refuses_admins_and_self(client, admin, make_user, headers_for):
    other_admin = make_user("root2", role="Admin")
    assert client.delete(f"/api/auth/reject/{admin.id}", headers=headers_for(admin)).status_code == 403
    assert client.delete(f"/api/auth/reject/{other_admin.id}", headers=headers_for(admin)).status_code == 403


def test_production_error_body_has_no_stack(client, monkeypatch):
    from config import settings

    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    body = client.get("/api/auth/me").json()
    assert body == {"message": "Not authorized, no token"}
