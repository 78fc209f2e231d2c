"""Account listings and user profile updates"""

from homecare_api.constants import AuthStatus, PersonType
from homecare_api.models import User

from .conftest import create_account


def test_manager_lists_accounts_by_name(client, manager, caregiver, other_caregiver):
    response = client.get("/accounts", headers=manager.headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["count"] == 3
    assert [a["lastname"] for a in data["accounts"]] == ["Care", "Manager", "Other"]
    account = data["accounts"][0]
    assert account["username"] == caregiver.username
    assert account["role_name"] == "Caregiver"
    assert account["status_name"] == "Active"


def test_caregiver_cannot_list_accounts(client, caregiver):
    response = client.get("/accounts", headers=caregiver.headers)
    assert response.status_code == 403


def test_account_is_visible_to_self_and_managers(client, manager, caregiver, other_caregiver):
    assert client.get(f"/account/{caregiver.id}", headers=caregiver.headers).status_code == 200
    assert client.get(f"/account/{caregiver.id}", headers=manager.headers).status_code == 200
    assert client.get(f"/account/{caregiver.id}", headers=other_caregiver.headers).status_code == 403


def test_account_not_found(client, manager):
    response = client.get("/account/999", headers=manager.headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Account not found"


def test_user_profile_includes_addresses(client, caregiver):
    client.post(
        "/address",
        json={
            "person_id": caregiver.id,
            "person_type": int(PersonType.USER),
            "type": "Apartment",
            "address": "5 Ocean Dr",
            "city": "Miami Beach",
            "county": "Miami-Dade",
            "state": "FL",
            "zipcode": "33139",
        },
        headers=caregiver.headers,
    )

    response = client.get(f"/user/{caregiver.id}", headers=caregiver.headers)

    assert response.status_code == 200
    user = response.json()["data"]
    assert user["firstname"] == "Carla"
    assert [a["city"] for a in user["addresses"]] == ["Miami Beach"]


def test_update_user_reports_changes(client, caregiver):
    response = client.put(
        f"/user/{caregiver.id}",
        json={"phone": "305-555-0199", "firstname": "Carla", "email": "CARLA@maxmila.test"},
        headers=caregiver.headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["message"] == "User updated successfully"
    # Unchanged values are left out of the report
    assert data["updates"] == {"phone": {"from": None, "to": "305-555-0199"}}
    assert data["user"]["phone"] == "305-555-0199"


def test_ssn_is_encrypted_and_masked(client, db, caregiver):
    response = client.put(f"/user/{caregiver.id}", json={"ssn": "123-45-6789"}, headers=caregiver.headers)

    data = response.json()["data"]
    assert data["updates"]["ssn"] == {"from": None, "to": "*****6789"}
    assert data["user"]["ssn"] == "123456789"

    stored = db.query(User).filter(User.id == caregiver.id).one().ssn
    assert stored and "123456789" not in stored

    profile = client.get(f"/user/{caregiver.id}", headers=caregiver.headers).json()["data"]
    assert profile["ssn"] == "123456789"


def test_invalid_ssn(client, caregiver):
    response = client.put(f"/user/{caregiver.id}", json={"ssn": "12-34"}, headers=caregiver.headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid SSN format"


def test_invalid_email(client, caregiver):
    response = client.put(f"/user/{caregiver.id}", json={"email": "nope"}, headers=caregiver.headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid email format"


def test_manager_updates_other_user(client, manager, caregiver):
    response = client.put(f"/user/{caregiver.id}", json={"languages": "English,Spanish"}, headers=manager.headers)
    assert response.status_code == 200
    assert response.json()["data"]["user"]["languages"] == "English,Spanish"


def test_caregiver_cannot_update_other_user(client, caregiver, other_caregiver):
    response = client.put(f"/user/{other_caregiver.id}", json={"phone": "1"}, headers=caregiver.headers)
    assert response.status_code == 403


def test_archived_and_deleted_accounts_hidden_from_listing(client, db, manager):
    create_account(db, "arch@maxmila.test", status=AuthStatus.ARCHIVED, lastname="Archived", logged_in=False)
    create_account(db, "gone@maxmila.test", status=AuthStatus.SOFT_DELETED, lastname="Gone", logged_in=False)
    create_account(db, "new@maxmila.test", status=AuthStatus.NOT_VERIFIED, lastname="Newcomer", logged_in=False)

    response = client.get("/accounts", headers=manager.headers)
    assert [a["username"] for a in response.json()["data"]["accounts"]] == [
        "manager@maxmila.test",
        "new@maxmila.test",
    ]

    archived = client.get("/accounts", params={"status": int(AuthStatus.ARCHIVED)}, headers=manager.headers)
    assert [a["username"] for a in archived.json()["data"]["accounts"]] == ["arch@maxmila.test"]
    deleted = client.get("/accounts", params={"status": int(AuthStatus.SOFT_DELETED)}, headers=manager.headers)
    assert [a["status_name"] for a in deleted.json()["data"]["accounts"]] == ["Deleted"]


def test_update_user_rejects_null_required_fields(client, db, caregiver):
    for field in ("email", "firstname", "lastname"):
        response = client.put(f"/user/{caregiver.id}", json={field: None}, headers=caregiver.headers)
        assert response.status_code == 400
        assert response.json()["message"] == f"{field} is required"

    assert db.get(User, caregiver.id).email == caregiver.username
