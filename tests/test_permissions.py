import pytest

from app.schemas.schemas import AdminProfile, CompanyProfile, StudentProfile
from app.services.permissions import can_message, can_view_profile
from tests.helpers import post_internship, register

STUDENT = StudentProfile(id="s1", email="s1@example.com")
COMPANY = CompanyProfile(id="c1", email="c1@example.com", company_name="Acme")
ADMIN = AdminProfile(id="a1", email="a1@example.com")


@pytest.mark.parametrize("sender, recipient, applied, expected", [
    (ADMIN, STUDENT, False, True),
    (ADMIN, COMPANY, False, True),
    (STUDENT, ADMIN, False, True),
    (COMPANY, ADMIN, False, True),
    (COMPANY, STUDENT, True, True),
    (COMPANY, STUDENT, False, False),
    (STUDENT, COMPANY, True, True),
    (STUDENT, COMPANY, False, False),
    (STUDENT, StudentProfile(id="s2", email="s2@example.com"), True, False),
    (COMPANY, CompanyProfile(id="c2", email="c2@example.com"), True, False),
])
def test_can_message_rules(sender, recipient, applied, expected):
    assert can_message(sender, recipient, applied) is expected


def test_admin_can_view_everyone_and_students_are_private():
    other = StudentProfile(id="s2", email="s2@example.com")
    assert can_view_profile(ADMIN, STUDENT)
    assert can_view_profile(STUDENT, COMPANY)
    assert can_view_profile(STUDENT, STUDENT)
    assert not can_view_profile(STUDENT, other)


def test_company_cannot_message_student_before_application(client, company, student):
    response = client.get(f"/api/messages/can-message/{student['id']}", headers=company["headers"])
    assert response.status_code == 200
    body = response.json()
    assert body["allowed"] is False
    assert "applied to your internships" in body["reason"]

    response = client.post(
        "/api/messages",
        json={"recipient_id": student["id"], "message_text": "Hello"},
        headers=company["headers"]
    )
    assert response.status_code == 403
    assert response.json()["detail"]["error"] == "permission_denied"


def test_application_opens_messaging_both_ways(client, company, student, application):
    for sender, recipient in ((company, student), (student, company)):
        response = client.get(f"/api/messages/can-message/{recipient['id']}", headers=sender["headers"])
        assert response.json() == {"allowed": True, "reason": None}


def test_application_to_one_company_does_not_open_another(client, company, other_company, student, application):
    response = client.post(
        "/api/messages",
        json={"recipient_id": other_company["id"], "message_text": "Hi there"},
        headers=student["headers"]
    )
    assert response.status_code == 403
    assert "Apply to an internship first" in response.json()["detail"]["message"]


def test_internship_context_narrows_the_relationship(client, company, student, application):
    second = post_internship(client, company, title="Data Intern")
    response = client.get(
        f"/api/messages/can-message/{student['id']}",
        params={"internship_id": second["id"]},
        headers=company["headers"]
    )
    assert response.json()["allowed"] is False


def test_anyone_can_message_admin_and_admin_anyone(client, admin, student, company):
    for sender, recipient in ((student, admin), (company, admin), (admin, student), (admin, company)):
        response = client.post(
            "/api/messages",
            json={"recipient_id": recipient["id"], "message_text": "Ping"},
            headers=sender["headers"]
        )
        assert response.status_code == 201, response.text


def test_cannot_message_yourself(client, student, company):
    for user in (student, company):
        response = client.get(f"/api/messages/can-message/{user['id']}", headers=user["headers"])
        assert response.json() == {"allowed": False, "reason": "You cannot message yourself"}


def test_admin_may_message_any_recipient_including_self(client, admin):
    response = client.get(f"/api/messages/can-message/{admin['id']}", headers=admin["headers"])
    assert response.json() == {"allowed": True, "reason": None}


def test_unknown_recipient_is_not_found(client, student):
    response = client.get("/api/messages/can-message/nope", headers=student["headers"])
    assert response.status_code == 404


def test_recipients_follow_the_rules(client, admin, company, student, other_company, application):
    response = client.get("/api/messages/recipients", headers=student["headers"])
    ids = {p["id"] for p in response.json()}
    assert ids == {admin["id"], company["id"]}

    response = client.get("/api/messages/recipients", headers=company["headers"])
    assert {p["id"] for p in response.json()} == {admin["id"], student["id"]}


def test_company_sees_applicant_profile_only(client, company, other_company, student, application):
    assert client.get(f"/api/profiles/{student['id']}", headers=company["headers"]).status_code == 200
    assert client.get(f"/api/profiles/{student['id']}", headers=other_company["headers"]).status_code == 404


def test_students_cannot_see_each_other(client, student):
    other = register(client, "carol@example.com")
    assert client.get(f"/api/profiles/{other['id']}", headers=student["headers"]).status_code == 404
