"""End-to-end flows across students, companies and admins."""

from tests.helpers import apply, set_status


def test_apply_without_resume_shows_guidance_and_creates_nothing(client, student_without_resume, internship, admin):
    detail = client.get(f"/api/internships/{internship['id']}", headers=student_without_resume["headers"])
    assert detail.status_code == 200

    response = apply(client, student_without_resume, internship["id"])
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "missing_resume"
    assert client.get("/api/admin/analytics", headers=admin["headers"]).json()["total_applications"] == 0


def test_application_unlocks_messaging_for_that_company_only(client, company, other_company, student, internship):
    assert apply(client, student, internship["id"]).status_code == 201

    def allowed(sender):
        response = client.get(f"/api/messages/can-message/{student['id']}", headers=sender["headers"])
        return response.json()["allowed"]

    assert allowed(company) is True
    assert allowed(other_company) is False


def test_acceptance_reaches_student_feed(client, company, student, application):
    set_status(client, company, application["id"], "reviewing")
    assert client.get("/api/notifications/unread-count", headers=student["headers"]).json() == {"unread": 0}

    set_status(client, company, application["id"], "accepted")
    feed = client.get("/api/notifications", headers=student["headers"]).json()
    assert feed[0]["type"] == "status_change"
    assert feed[0]["related_id"] == application["id"]
    assert client.get("/api/notifications/unread-count", headers=student["headers"]).json() == {"unread": 1}


def test_company_deletion_cascades(client, admin, company, student, internship, application):
    client.delete(f"/api/admin/profiles/{company['id']}", params={"confirm": "true"}, headers=admin["headers"])

    assert client.get(f"/api/internships/{internship['id']}", headers=admin["headers"]).status_code == 404
    assert client.get(f"/api/applications/{application['id']}", headers=admin["headers"]).status_code == 404
    assert client.get("/api/admin/stats", headers=admin["headers"]).json()["total_companies"] == 0
