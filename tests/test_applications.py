from datetime import datetime, timedelta, timezone

from app.services.application_service import TRANSITIONS, can_transition
from tests.helpers import apply, post_internship, set_status


def test_transition_table():
    assert can_transition("pending", "reviewing")
    assert can_transition("reviewing", "accepted")
    assert can_transition("reviewing", "rejected")
    assert not can_transition("pending", "accepted")
    assert not can_transition("accepted", "rejected")
    assert TRANSITIONS["rejected"] == set()


def test_new_application_is_pending_with_resume_copied(application):
    assert application["status"] == "pending"
    assert application["version"] == 1
    assert application["resume_url"] == "https://files.example.com/alice.pdf"
    assert application["company_name"] == "Acme Corp"


def test_missing_resume_blocks_apply_and_writes_nothing(client, student_without_resume, internship, company):
    response = apply(client, student_without_resume, internship["id"])
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["error"] == "missing_resume"
    assert detail["action_url"] == "/profile"

    assert client.get("/api/applications", headers=company["headers"]).json() == []
    assert client.get("/api/notifications", headers=company["headers"]).json() == []


def test_duplicate_application_is_rejected(client, student, internship, application):
    response = apply(client, student, internship["id"])
    assert response.status_code == 409
    assert response.json()["detail"]["application_id"] == application["id"]


def test_closed_internship_does_not_accept_applications(client, company, student):
    closed = post_internship(client, company, status="closed")
    response = apply(client, student, closed["id"])
    assert response.status_code == 400


def test_only_students_apply(client, company, internship):
    response = apply(client, company, internship["id"])
    assert response.status_code == 403


def test_company_is_notified_of_new_application(client, company, application):
    notifications = client.get("/api/notifications", headers=company["headers"]).json()
    assert len(notifications) == 1
    assert notifications[0]["type"] == "application"
    assert notifications[0]["related_id"] == application["id"]
    assert "Alice Student" in notifications[0]["content"]


def test_full_lifecycle_notifies_student_on_decision(client, company, student, application):
    response = set_status(client, company, application["id"], "reviewing")
    assert response.status_code == 200
    assert response.json()["version"] == 2
    assert client.get("/api/notifications", headers=student["headers"]).json() == []

    response = set_status(client, company, application["id"], "accepted")
    assert response.status_code == 200
    assert response.json()["status"] == "accepted"

    notifications = client.get("/api/notifications", headers=student["headers"]).json()
    assert [n["type"] for n in notifications] == ["status_change"]
    assert "accepted" in notifications[0]["content"]


def test_invalid_transitions_are_conflicts(client, company, application):
    response = set_status(client, company, application["id"], "accepted")
    assert response.status_code == 409
    assert response.json()["detail"]["current_status"] == "pending"

    set_status(client, company, application["id"], "reviewing")
    set_status(client, company, application["id"], "rejected")
    response = set_status(client, company, application["id"], "reviewing")
    assert response.status_code == 409


def test_stale_version_is_rejected(client, company, admin, application):
    assert set_status(client, company, application["id"], "reviewing", expected_version=1).status_code == 200

    # Second reviewer still holds version 1
    response = set_status(client, admin, application["id"], "reviewing", expected_version=1)
    assert response.status_code == 409

    response = set_status(client, admin, application["id"], "accepted", expected_version=1)
    assert response.status_code == 409
    assert response.json()["detail"]["current_version"] == 2

    assert set_status(client, admin, application["id"], "accepted", expected_version=2).status_code == 200


def test_other_company_cannot_touch_application(client, other_company, application):
    assert set_status(client, other_company, application["id"], "reviewing").status_code == 404
    assert client.get(f"/api/applications/{application['id']}", headers=other_company["headers"]).status_code == 404


def test_students_cannot_change_status(client, student, application):
    assert set_status(client, student, application["id"], "reviewing").status_code == 403


def test_list_visibility(client, company, other_company, student, admin, application):
    assert len(client.get("/api/applications", headers=student["headers"]).json()) == 1
    assert len(client.get("/api/applications", headers=company["headers"]).json()) == 1
    assert client.get("/api/applications", headers=other_company["headers"]).json() == []
    assert len(client.get("/api/applications", headers=admin["headers"]).json()) == 1

    response = client.get("/api/applications", params={"status": "accepted"}, headers=admin["headers"])
    assert response.json() == []


def test_admin_delete_requires_confirmation_and_notifies(client, admin, student, application):
    url = f"/api/applications/{application['id']}"
    response = client.delete(url, headers=admin["headers"])
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "confirm"

    response = client.delete(url, params={"confirm": "true"}, headers=admin["headers"])
    assert response.status_code == 200
    assert client.get(url, headers=admin["headers"]).status_code == 404

    notifications = client.get("/api/notifications", headers=student["headers"]).json()
    assert notifications[0]["title"] == "Application removed"


def _interview_payload(application_id: str, **overrides) -> dict:
    start = datetime(2030, 1, 10, 9, 0, tzinfo=timezone.utc)
    payload = {
        "application_id": application_id,
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=1)).isoformat(),
        "meeting_type": "video",
        "meeting_link": "https://meet.example.com/abc",
    }
    payload.update(overrides)
    return payload


def test_scheduling_interview_moves_pending_to_reviewing(client, company, student, application):
    response = client.post("/api/interviews", json=_interview_payload(application["id"]), headers=company["headers"])
    assert response.status_code == 201, response.text
    interview = response.json()
    assert interview["status"] == "scheduled"
    assert interview["student_id"] == student["id"]

    updated = client.get(f"/api/applications/{application['id']}", headers=company["headers"]).json()
    assert updated["status"] == "reviewing"

    notifications = client.get("/api/notifications", headers=student["headers"]).json()
    assert notifications[0]["type"] == "interview_scheduled"
    assert notifications[0]["related_id"] == interview["id"]

    assert len(client.get("/api/interviews", headers=student["headers"]).json()) == 1


def test_interview_does_not_reopen_decided_application(client, company, application):
    set_status(client, company, application["id"], "reviewing")
    set_status(client, company, application["id"], "accepted")
    client.post("/api/interviews", json=_interview_payload(application["id"]), headers=company["headers"])

    updated = client.get(f"/api/applications/{application['id']}", headers=company["headers"]).json()
    assert updated["status"] == "accepted"


def test_interview_must_end_after_start(client, company, application):
    payload = _interview_payload(application["id"])
    payload["end_time"] = payload["start_time"]
    response = client.post("/api/interviews", json=payload, headers=company["headers"])
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "end_time"


def test_interview_times_without_offset_are_utc(client, company, application):
    payload = _interview_payload(
        application["id"], start_time="2030-01-01T10:00:00Z", end_time="2030-01-01T11:00:00"
    )
    response = client.post("/api/interviews", json=payload, headers=company["headers"])
    assert response.status_code == 201, response.text

    payload = _interview_payload(
        application["id"], start_time="2030-01-01T10:00:00+02:00", end_time="2030-01-01T08:00:00"
    )
    response = client.post("/api/interviews", json=payload, headers=company["headers"])
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "end_time"


def test_interview_status_update(client, company, student, application):
    interview = client.post(
        "/api/interviews", json=_interview_payload(application["id"]), headers=company["headers"]
    ).json()
    response = client.patch(
        f"/api/interviews/{interview['id']}/status", json={"status": "completed"}, headers=company["headers"]
    )
    assert response.status_code == 200
    assert response.json()["status"] == "completed"

    response = client.patch(
        f"/api/interviews/{interview['id']}/status", json={"status": "cancelled"}, headers=student["headers"]
    )
    assert response.status_code == 403
