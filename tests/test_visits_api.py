"""Visit scheduling, listings and the check-in/check-out lifecycle"""

from datetime import datetime, timedelta, timezone

import pytest

from homecare_api.constants import PatientStatus, Progress, VisitStatus
from homecare_api.models import Visit

from .conftest import create_patient, create_visit

START = "2030-01-15T09:00:00"
END = "2030-01-15T11:30:00"


def schedule(client, account, patient_id, **overrides):
    body = {"patient_id": patient_id, "start_time": START, "end_time": END}
    body.update(overrides)
    return client.post("/visit", json=body, headers=account.headers)


def test_caregiver_schedules_own_visit(client, caregiver, patient):
    response = schedule(client, caregiver, patient.id, note="First visit")

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["progress"] == Progress.SCHEDULED
    assert data["duration_minutes"] == 150
    visit = data["visit"]
    assert visit["user_id"] == caregiver.id
    assert visit["scheduled_by"] == caregiver.id
    assert visit["progress_description"] == "Scheduled"
    assert visit["status"] == VisitStatus.ACTIVE
    assert visit["note"] == "First visit"


def test_end_before_start_is_rejected(client, caregiver, patient):
    response = schedule(client, caregiver, patient.id, end_time="2030-01-15T08:59:00")
    assert response.status_code == 400
    assert response.json()["message"] == "End time cannot be before start time"


def test_zero_length_visit_is_allowed(client, caregiver, patient):
    response = schedule(client, caregiver, patient.id, end_time=START)
    assert response.status_code == 201
    assert response.json()["data"]["duration_minutes"] == 0


def test_aware_times_are_stored_as_utc(client, caregiver, patient):
    response = schedule(
        client, caregiver, patient.id, start_time="2030-01-15T09:00:00-05:00", end_time="2030-01-15T10:00:00-05:00"
    )
    assert response.json()["data"]["visit"]["start_time"] == "2030-01-15T14:00:00"


def test_cannot_schedule_for_inactive_patient(client, db, caregiver):
    archived = create_patient(db, status=PatientStatus.ARCHIVED)
    response = schedule(client, caregiver, archived.id)
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot create visit for inactive patient"


def test_cannot_schedule_for_missing_patient(client, caregiver):
    assert schedule(client, caregiver, 404).status_code == 404


def test_caregiver_cannot_schedule_for_others(client, caregiver, other_caregiver, patient):
    response = schedule(client, caregiver, patient.id, user_id=other_caregiver.id)
    assert response.status_code == 403


def test_manager_schedules_for_caregiver(client, manager, caregiver, patient):
    response = schedule(client, manager, patient.id, user_id=caregiver.id)
    visit = response.json()["data"]["visit"]
    assert visit["user_id"] == caregiver.id
    assert visit["scheduled_by"] == manager.id


def test_manager_sets_initial_progress(client, manager, caregiver, patient):
    response = schedule(client, manager, patient.id, user_id=caregiver.id, progress=int(Progress.COMPLETED))

    visit = response.json()["data"]["visit"]
    assert visit["progress"] == Progress.COMPLETED
    assert visit["checkout_by"] == manager.id
    assert visit["checkout_at"] is not None


def test_caregiver_cannot_set_initial_progress(client, caregiver, patient):
    response = schedule(client, caregiver, patient.id, progress=int(Progress.PAID))
    assert response.status_code == 403


# ============================================================================
# Lifecycle
# ============================================================================


def test_full_lifecycle(client, manager, caregiver, patient):
    visit_id = schedule(client, caregiver, patient.id).json()["data"]["visit_id"]

    checkin = client.put(f"/visit/{visit_id}/checkin", headers=caregiver.headers)
    assert checkin.status_code == 200
    assert checkin.json()["data"]["progress"] == Progress.IN_PROGRESS
    assert checkin.json()["data"]["progress_description"] == "In Progress"

    checkout = client.put(f"/visit/{visit_id}/checkout", json={"note": "All good"}, headers=caregiver.headers)
    assert checkout.status_code == 200
    assert checkout.json()["data"]["progress"] == Progress.COMPLETED

    cancel = client.put(f"/visit/{visit_id}/cancel", headers=caregiver.headers)
    assert cancel.status_code == 400
    assert cancel.json()["message"] == "Cannot cancel a completed or paid visit"

    approve = client.put(f"/visit/{visit_id}/approve", headers=manager.headers)
    assert approve.status_code == 200
    assert approve.json()["data"]["progress"] == Progress.PAID

    visit = client.get(f"/visit/{visit_id}", headers=caregiver.headers).json()["data"]
    assert visit["note"] == "All good"
    assert visit["checkin_by"] == caregiver.id
    assert visit["checkout_by"] == caregiver.id
    assert visit["approved_by"] == manager.id
    assert visit["checkin_at"] and visit["checkout_at"] and visit["approved_at"]
    assert visit["user"]["id"] == caregiver.id
    assert visit["patient"]["id"] == patient.id


def test_check_in_twice(client, db, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)
    assert client.put(f"/visit/{visit.id}/checkin", headers=caregiver.headers).status_code == 200

    again = client.put(f"/visit/{visit.id}/checkin", headers=caregiver.headers)
    assert again.status_code == 400
    assert again.json()["message"] == "Can only check in to scheduled visits"


def test_check_out_requires_check_in(client, db, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)
    response = client.put(f"/visit/{visit.id}/checkout", headers=caregiver.headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Can only check out from in-progress visits"


def test_cancel_scheduled_visit_is_terminal(client, db, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)

    response = client.put(f"/visit/{visit.id}/cancel", json={"note": "Patient in hospital"}, headers=caregiver.headers)
    assert response.status_code == 200
    assert response.json()["data"]["progress"] == Progress.CANCELED

    db.refresh(visit)
    assert visit.canceled_by == caregiver.id
    assert visit.note == "Patient in hospital"

    assert client.put(f"/visit/{visit.id}/checkin", headers=caregiver.headers).status_code == 400
    again = client.put(f"/visit/{visit.id}/cancel", headers=caregiver.headers)
    assert again.json()["message"] == "Visit is already canceled"


def test_only_the_assigned_caregiver_checks_in(client, db, caregiver, other_caregiver, manager, patient):
    visit = create_visit(db, caregiver.id, patient.id)

    response = client.put(f"/visit/{visit.id}/checkin", headers=other_caregiver.headers)
    assert response.status_code == 403
    assert response.json()["message"] == "You can only check in to your own visits"

    # Managers use the progress override instead
    assert client.put(f"/visit/{visit.id}/checkin", headers=manager.headers).status_code == 403


def test_only_managers_approve(client, db, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id, progress=int(Progress.COMPLETED))
    assert client.put(f"/visit/{visit.id}/approve", headers=caregiver.headers).status_code == 403


def test_inactive_visit_cannot_progress(client, db, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id, status=int(VisitStatus.SOFT_DELETED))
    response = client.put(f"/visit/{visit.id}/checkin", headers=caregiver.headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot change progress of an inactive visit"


def test_progress_override(client, db, manager, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)

    response = client.put(f"/visit/{visit.id}/progress", json={"progress": int(Progress.IN_PROGRESS)},
                          headers=manager.headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["old_progress"] == Progress.SCHEDULED
    assert data["new_progress"] == Progress.IN_PROGRESS
    db.refresh(visit)
    assert visit.checkin_by == manager.id


def test_progress_override_cannot_skip_steps(client, db, manager, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)
    response = client.put(f"/visit/{visit.id}/progress", json={"progress": int(Progress.PAID)},
                          headers=manager.headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot change visit progress from Scheduled to Paid"


def test_progress_override_rejects_unknown_value(client, db, manager, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)
    response = client.put(f"/visit/{visit.id}/progress", json={"progress": 8}, headers=manager.headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid progress value"


def test_concurrent_transition_conflicts(client, db, caregiver, patient, monkeypatch):
    """A transition whose conditional write matches no row reports a conflict"""
    from homecare_api.domain.visits.repository import VisitRepository

    visit = create_visit(db, caregiver.id, patient.id)
    monkeypatch.setattr(VisitRepository, "transition_visit", staticmethod(lambda *args: False))

    response = client.put(f"/visit/{visit.id}/checkin", headers=caregiver.headers)

    assert response.status_code == 409
    assert response.json()["message"] == "Visit was modified by another request, please retry"


def test_stale_expected_progress_updates_nothing(db, caregiver, patient):
    from homecare_api.domain.visits.repository import VisitRepository

    visit = create_visit(db, caregiver.id, patient.id, progress=int(Progress.IN_PROGRESS))
    written = VisitRepository.transition_visit(
        db, visit.id, int(Progress.SCHEDULED), {"progress": int(Progress.IN_PROGRESS)}
    )
    assert written is False


# ============================================================================
# Editing and deletion
# ============================================================================


def test_update_visit_times(client, db, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)

    response = client.put(f"/visit/{visit.id}", json={"end_time": "2030-01-15T12:00:00", "note": "Longer"},
                          headers=caregiver.headers)

    assert response.status_code == 200
    assert response.json()["data"]["duration_minutes"] == 180


def test_update_visit_end_before_start(client, db, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)
    response = client.put(f"/visit/{visit.id}", json={"end_time": "2030-01-15T08:00:00"}, headers=caregiver.headers)
    assert response.status_code == 400
    assert response.json()["message"] == "End time cannot be before start time"


def test_caregiver_cannot_reassign_visit(client, db, caregiver, other_caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)
    response = client.put(f"/visit/{visit.id}", json={"user_id": other_caregiver.id}, headers=caregiver.headers)
    assert response.status_code == 403


def test_only_managers_change_visit_status(client, db, caregiver, manager, patient):
    visit = create_visit(db, caregiver.id, patient.id, status=int(VisitStatus.SOFT_DELETED))

    restore = {"status": int(VisitStatus.ACTIVE)}
    response = client.put(f"/visit/{visit.id}", json=restore, headers=caregiver.headers)
    assert response.status_code == 403
    db.refresh(visit)
    assert visit.status == VisitStatus.SOFT_DELETED

    unchanged = client.put(f"/visit/{visit.id}", json={"status": int(VisitStatus.SOFT_DELETED), "note": "Same"},
                           headers=caregiver.headers)
    assert unchanged.status_code == 200

    assert client.put(f"/visit/{visit.id}", json=restore, headers=manager.headers).status_code == 200
    db.refresh(visit)
    assert visit.status == VisitStatus.ACTIVE


def test_other_caregiver_cannot_read_visit(client, db, caregiver, other_caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)
    assert client.get(f"/visit/{visit.id}", headers=other_caregiver.headers).status_code == 403


def test_delete_visit_is_soft(client, db, caregiver, patient):
    visit = create_visit(db, caregiver.id, patient.id)

    response = client.delete(f"/visit/{visit.id}", headers=caregiver.headers)
    assert response.status_code == 200

    db.refresh(visit)
    assert visit.status == VisitStatus.SOFT_DELETED
    assert client.delete(f"/visit/{visit.id}", headers=caregiver.headers).status_code == 400
    assert client.get("/visits", headers=caregiver.headers).json()["data"]["count"] == 0


def test_visit_not_found(client, caregiver):
    response = client.get("/visit/12345", headers=caregiver.headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Visit not found"


# ============================================================================
# Listings
# ============================================================================


@pytest.fixture
def week_of_visits(db, caregiver, other_caregiver, patient):
    base = datetime(2030, 3, 1, 9, 0)
    return [
        create_visit(db, caregiver.id, patient.id, start_time=base),
        create_visit(db, caregiver.id, patient.id, start_time=base + timedelta(days=2)),
        create_visit(db, other_caregiver.id, patient.id, start_time=base + timedelta(days=1)),
    ]


def test_caregiver_sees_only_own_visits(client, caregiver, week_of_visits):
    response = client.get("/visits", headers=caregiver.headers)

    data = response.json()["data"]
    assert data["count"] == 2
    # Latest start first
    assert [v["start_time"] for v in data["visits"]] == ["2030-03-03T09:00:00", "2030-03-01T09:00:00"]


def test_caregiver_cannot_list_other_users_visits(client, caregiver, other_caregiver, week_of_visits):
    assert client.get("/visits", params={"user_id": other_caregiver.id}, headers=caregiver.headers).status_code == 403
    assert client.get(f"/visits/user/{other_caregiver.id}", headers=caregiver.headers).status_code == 403


def test_manager_filters_by_date_range(client, manager, week_of_visits):
    response = client.get("/visits", params={"start_date": "2030-03-01", "end_date": "2030-03-02"},
                          headers=manager.headers)
    assert response.json()["data"]["count"] == 2


def test_date_range_must_be_ordered(client, manager):
    response = client.get("/visits", params={"start_date": "2030-03-02", "end_date": "2030-03-01"},
                          headers=manager.headers)
    assert response.status_code == 400


def test_filter_by_progress(client, db, manager, caregiver, patient):
    create_visit(db, caregiver.id, patient.id)
    create_visit(db, caregiver.id, patient.id, progress=int(Progress.CANCELED))

    response = client.get("/visits", params={"progress": int(Progress.CANCELED)}, headers=manager.headers)
    assert response.json()["data"]["count"] == 1


def test_user_and_patient_visits(client, manager, caregiver, patient, week_of_visits):
    assert client.get(f"/visits/user/{caregiver.id}", headers=caregiver.headers).json()["data"]["count"] == 2
    assert client.get(f"/visits/patient/{patient.id}", headers=manager.headers).json()["data"]["count"] == 3
    assert client.get(f"/visits/patient/{patient.id}", headers=caregiver.headers).status_code == 403


def test_today_visits(client, db, caregiver, patient):
    now = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
    create_visit(db, caregiver.id, patient.id, start_time=now)
    create_visit(db, caregiver.id, patient.id, start_time=now + timedelta(days=3))

    response = client.get("/visits/today", headers=caregiver.headers)

    assert response.json()["data"]["count"] == 1


def test_empty_listing(client, caregiver):
    response = client.get("/visits", headers=caregiver.headers)
    assert response.status_code == 200
    assert response.json()["data"] == {"count": 0, "visits": []}


def test_visit_row_persisted(db, client, caregiver, patient):
    schedule(client, caregiver, patient.id)
    assert db.query(Visit).count() == 1
