import pytest

from conftest import PASSWORD
from create_admin import create_admin, main
from utils.hashing import verify_password


def test_create_admin_creates_approved_admin(db):
    user = create_admin(db, "root", "rootpass")
    assert user.id is not None
    assert user.role == "Admin"
    assert user.is_approved is True
    assert verify_password("rootpass", user.password_hash)


def test_create_admin_promotes_existing_user(db, make_user):
    existing = make_user("veteran", role="Volunteer", approved=False, blocked=True, block_reason="old")
    user = create_admin(db, "veteran", PASSWORD)
    assert user.id == existing.id
    assert user.role == "Admin"
    assert user.is_blocked is False
    assert user.block_reason == ""


def test_admin_can_log_in(client, db):
    create_admin(db, "root", "rootpass")
    resp = client.post("/api/auth/login", json={"username": "root", "password": "rootpass"})
    assert resp.status_code == 200
    assert resp.json()["role"] == "Admin"


def test_cli_rejects_short_password():
    with pytest.raises(SystemExit):
        main(["root", "123"])
