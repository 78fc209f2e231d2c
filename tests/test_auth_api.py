"""Registration, login, token renewal and account status endpoints"""

from homecare_api.constants import AuthStatus, Role
from homecare_api.models import Auth
from homecare_api.security_utils import legacy_hash
from homecare_api.services.token_service import current_millis, token_service

from .conftest import DEFAULT_PASSWORD, create_account


def test_register_creates_unverified_caregiver(client, db):
    response = client.post("/auth/register", json={"username": "New.Nurse@Maxmila.test", "password": "pw"})

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["code"] == 201
    assert body["data"]["username"] == "new.nurse@maxmila.test"

    auth = db.query(Auth).filter(Auth.id == body["data"]["id"]).one()
    assert auth.role == Role.CAREGIVER
    assert auth.status == AuthStatus.NOT_VERIFIED
    assert auth.password_hash != "pw"
    assert auth.user.firstname == "TBD"
    assert auth.user.email == "new.nurse@maxmila.test"


def test_register_duplicate_username(client, caregiver):
    response = client.post("/auth/register", json={"username": caregiver.username, "password": "pw"})

    assert response.status_code == 409
    assert response.json() == {"status": "error", "code": 409, "message": "The email is already registered"}


def test_register_requires_email_username(client):
    response = client.post("/auth/register", json={"username": "nurse", "password": "pw"})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid email format"


def test_register_missing_password(client):
    response = client.post("/auth/register", json={"username": "a@b.co"})
    assert response.status_code == 400
    assert response.json()["message"] == "password is required"


def test_register_without_body(client):
    response = client.post("/auth/register")
    assert response.status_code == 400
    assert response.json()["message"] == "Request body is required"


def test_login_returns_stored_token(client, db):
    account = create_account(db, "login@maxmila.test", logged_in=False)

    response = client.post("/auth/login", json={"username": "LOGIN@maxmila.test", "password": DEFAULT_PASSWORD})

    assert response.status_code == 200
    token = response.json()["data"]["token"]
    decoded = token_service.decode_token(token)
    assert decoded["id"] == account.id
    assert decoded["username"] == "login@maxmila.test"
    assert decoded["expiration"] > current_millis()

    auth = db.query(Auth).filter(Auth.id == account.id).one()
    assert auth.token == token
    assert auth.expiration == decoded["expiration"]


def test_login_wrong_password(client, caregiver):
    response = client.post("/auth/login", json={"username": caregiver.username, "password": "nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials."


def test_login_unknown_user(client):
    response = client.post("/auth/login", json={"username": "ghost@maxmila.test", "password": "pw"})
    assert response.status_code == 401


def test_login_inactive_account(client, db):
    create_account(db, "pending@maxmila.test", status=AuthStatus.NOT_VERIFIED, logged_in=False)
    response = client.post("/auth/login", json={"username": "pending@maxmila.test", "password": DEFAULT_PASSWORD})
    assert response.status_code == 403
    assert response.json()["message"] == "Account is not activated."


# ============================================================================
# Token checks
# ============================================================================


def test_missing_token(client):
    response = client.get("/accounts")
    assert response.status_code == 401
    assert response.json()["message"] == "Authorization header is required"


def test_malformed_token(client):
    response = client.get("/accounts", headers={"Authorization": "Bearer !!!"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token format"


def test_expired_token(client, manager):
    token = token_service.create_token(manager.id, manager.username, int(Role.MANAGER), current_millis() - 1000)
    response = client.get("/accounts", headers={"Authorization": token})
    assert response.status_code == 401
    assert response.json()["message"] == "Token expired, please login again"


def test_forged_token_is_rejected(client, caregiver):
    """A well-formed token that was never issued does not authenticate"""
    forged = token_service.create_token(caregiver.id, caregiver.username, int(Role.ADMINISTRATOR),
                                        token_service.generate_expiration())
    response = client.get("/accounts", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token authorization"


def test_raw_token_header_is_accepted(client, manager):
    response = client.get("/accounts", headers={"Authorization": manager.token})
    assert response.status_code == 200


def test_renew_token_invalidates_previous(client, caregiver):
    response = client.put("/auth/renew/token", headers=caregiver.headers)
    assert response.status_code == 200
    new_token = response.json()["data"]["token"]
    assert new_token != caregiver.token

    old = client.get(f"/account/{caregiver.id}", headers=caregiver.headers)
    assert old.status_code == 401

    fresh = client.get(f"/account/{caregiver.id}", headers={"Authorization": f"Bearer {new_token}"})
    assert fresh.status_code == 200


# ============================================================================
# Password, role and status
# ============================================================================


def test_change_own_password_ends_session(client, caregiver):
    response = client.put("/auth/change/password", json={"username": caregiver.username, "password": "n3w"},
                          headers=caregiver.headers)
    assert response.status_code == 202
    assert response.json()["data"]["message"] == "Password changed successfully"

    assert client.get(f"/account/{caregiver.id}", headers=caregiver.headers).status_code == 401
    assert client.post("/auth/login", json={"username": caregiver.username, "password": DEFAULT_PASSWORD}).status_code == 401
    assert client.post("/auth/login", json={"username": caregiver.username, "password": "n3w"}).status_code == 200


def test_change_password_requires_token(client, admin):
    response = client.put("/auth/change/password", json={"username": admin.username, "password": "pwned"})
    assert response.status_code == 401
    assert client.post("/auth/login", json={"username": admin.username, "password": "pwned"}).status_code == 401


def test_caregiver_cannot_change_other_password(client, caregiver, other_caregiver):
    response = client.put("/auth/change/password", json={"username": other_caregiver.username, "password": "x"},
                          headers=caregiver.headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Unauthorized user role"


def test_manager_changes_caregiver_password(client, manager, caregiver):
    response = client.put("/auth/change/password", json={"username": caregiver.username, "password": "n3w"},
                          headers=manager.headers)
    assert response.status_code == 202
    assert client.post("/auth/login", json={"username": caregiver.username, "password": "n3w"}).status_code == 200


def test_only_admin_changes_admin_password(client, db, admin, manager):
    body = {"username": admin.username, "password": "n3w"}
    assert client.put("/auth/change/password", json=body, headers=manager.headers).status_code == 403

    other_admin = create_account(db, "root@maxmila.test", role=Role.ADMINISTRATOR)
    assert client.put("/auth/change/password", json=body, headers=other_admin.headers).status_code == 202


def test_change_password_unknown_user(client, manager):
    response = client.put("/auth/change/password", json={"username": "ghost@maxmila.test", "password": "x"},
                          headers=manager.headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Email not found"


def test_login_upgrades_legacy_password_hash(client, db):
    account = create_account(db, "legacy@maxmila.test", logged_in=False)
    auth = db.query(Auth).filter(Auth.id == account.id).one()
    auth.password_hash = legacy_hash(account.username, DEFAULT_PASSWORD)
    db.commit()

    response = client.post("/auth/login", json={"username": account.username, "password": DEFAULT_PASSWORD})

    assert response.status_code == 200
    db.refresh(auth)
    assert auth.password_hash.startswith("$2b$")
    assert client.post("/auth/login", json={"username": account.username, "password": DEFAULT_PASSWORD}).status_code == 200



def test_manager_changes_role(client, db, manager, caregiver):
    response = client.put(
        "/auth/change/role",
        json={"username": caregiver.username, "role": int(Role.MANAGER)},
        headers=manager.headers,
    )
    assert response.status_code == 202
    assert db.query(Auth).filter(Auth.id == caregiver.id).one().role == Role.MANAGER


def test_manager_cannot_grant_admin(client, manager, caregiver):
    response = client.put(
        "/auth/change/role",
        json={"username": caregiver.username, "role": int(Role.ADMINISTRATOR)},
        headers=manager.headers,
    )
    assert response.status_code == 403


def test_admin_grants_admin(client, admin, caregiver):
    response = client.put(
        "/auth/change/role",
        json={"username": caregiver.username, "role": int(Role.ADMINISTRATOR)},
        headers=admin.headers,
    )
    assert response.status_code == 202


def test_change_role_invalid_value(client, manager, caregiver):
    response = client.put(
        "/auth/change/role", json={"username": caregiver.username, "role": 9}, headers=manager.headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid role"


def test_caregiver_cannot_change_role(client, caregiver, other_caregiver):
    response = client.put(
        "/auth/change/role",
        json={"username": other_caregiver.username, "role": int(Role.MANAGER)},
        headers=caregiver.headers,
    )
    assert response.status_code == 403
    assert response.json()["message"] == "Unauthorized user role"


def test_activate_then_login(client, db, manager):
    create_account(db, "fresh@maxmila.test", status=AuthStatus.NOT_VERIFIED, logged_in=False)

    response = client.put("/auth/activate/account", json={"username": "fresh@maxmila.test"}, headers=manager.headers)
    assert response.status_code == 202
    assert response.json()["data"]["message"] == "User activated successfully"

    login = client.post("/auth/login", json={"username": "fresh@maxmila.test", "password": DEFAULT_PASSWORD})
    assert login.status_code == 200


def test_inactivate_ends_session(client, db, manager, caregiver):
    response = client.put("/auth/inactivate/account", json={"username": caregiver.username}, headers=manager.headers)
    assert response.status_code == 202

    auth = db.query(Auth).filter(Auth.id == caregiver.id).one()
    assert auth.status == AuthStatus.INACTIVE
    assert auth.token is None
    assert client.get(f"/account/{caregiver.id}", headers=caregiver.headers).status_code == 401


def test_archive_and_delete_account(client, db, manager, caregiver):
    assert client.put("/auth/archive/account", json={"username": caregiver.username},
                      headers=manager.headers).status_code == 202
    assert db.query(Auth).filter(Auth.id == caregiver.id).one().status == AuthStatus.ARCHIVED

    response = client.put("/auth/delete/account", json={"username": caregiver.username}, headers=manager.headers)
    assert response.status_code == 202
    assert response.json()["data"]["message"] == "User deleted successfully."
    assert db.query(Auth).filter(Auth.id == caregiver.id).one().status == AuthStatus.SOFT_DELETED


def test_manager_cannot_change_admin_status(client, admin, manager):
    response = client.put("/auth/inactivate/account", json={"username": admin.username}, headers=manager.headers)
    assert response.status_code == 403
