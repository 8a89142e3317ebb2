from tests.helpers import apply, post_internship


def test_company_creates_and_lists(client, company, student):
    created = post_internship(client, company, is_remote=True, skills=["Python", "Docker"])
    assert created["company_name"] == "Acme Corp"
    assert created["skills"] == ["Python", "Docker"]

    listed = client.get("/api/internships", headers=student["headers"]).json()
    assert [i["id"] for i in listed] == [created["id"]]


def test_students_cannot_post(client, student):
    response = client.post(
        "/api/internships",
        json={"title": "Fake", "description": "x", "location": "x", "duration": "1 month"},
        headers=student["headers"]
    )
    assert response.status_code == 403


def test_list_filters(client, company):
    post_internship(client, company, title="Frontend Intern", location="Paris", skills=["React"])
    post_internship(client, company, title="Data Intern", type="part-time", is_remote=True, skills=["SQL"])
    post_internship(client, company, title="Hidden Draft", status="draft")

    def titles(**params):
        return sorted(i["title"] for i in client.get("/api/internships", params=params).json())

    assert titles() == ["Data Intern", "Frontend Intern"]
    assert titles(search="front") == ["Frontend Intern"]
    assert titles(location="paris") == ["Frontend Intern"]
    assert titles(type="part-time") == ["Data Intern"]
    assert titles(remote_only="true") == ["Data Intern"]
    assert titles(skill="sql") == ["Data Intern"]


def test_drafts_visible_to_owner_only(client, company, other_company):
    draft = post_internship(client, company, status="draft")
    url = f"/api/internships/{draft['id']}"
    assert client.get(url, headers=company["headers"]).status_code == 200
    assert client.get(url, headers=other_company["headers"]).status_code == 404

    mine = client.get("/api/internships/mine", headers=company["headers"]).json()
    assert [i["id"] for i in mine] == [draft["id"]]


def test_update_by_owner_only(client, company, other_company, internship):
    url = f"/api/internships/{internship['id']}"
    response = client.put(url, json={"title": "Senior Backend Intern", "skills": ["Go"]}, headers=company["headers"])
    assert response.status_code == 200
    assert response.json()["title"] == "Senior Backend Intern"
    assert response.json()["skills"] == ["Go"]

    response = client.put(url, json={"title": "Hijacked"}, headers=other_company["headers"])
    assert response.status_code == 404


def test_delete_cascades_to_applications_and_bookmarks(client, company, student, internship):
    apply(client, student, internship["id"])
    client.post("/api/bookmarks/toggle", json={"internship_id": internship["id"]}, headers=student["headers"])

    url = f"/api/internships/{internship['id']}"
    assert client.delete(url, headers=company["headers"]).status_code == 400
    assert client.delete(url, params={"confirm": "true"}, headers=company["headers"]).status_code == 200

    assert client.get(url, headers=company["headers"]).status_code == 404
    assert client.get("/api/applications", headers=student["headers"]).json() == []
    assert client.get("/api/bookmarks", headers=student["headers"]).json() == []


def test_bookmark_toggle_twice_restores_state(client, student, internship):
    body = {"internship_id": internship["id"]}
    first = client.post("/api/bookmarks/toggle", json=body, headers=student["headers"]).json()
    assert first == {"internship_id": internship["id"], "bookmarked": True}

    saved = client.get("/api/bookmarks", headers=student["headers"]).json()
    assert saved[0]["internship"]["title"] == "Backend Intern"

    second = client.post("/api/bookmarks/toggle", json=body, headers=student["headers"]).json()
    assert second["bookmarked"] is False
    assert client.get("/api/bookmarks", headers=student["headers"]).json() == []


def test_bookmark_unknown_internship(client, student):
    response = client.post("/api/bookmarks/toggle", json={"internship_id": "missing"}, headers=student["headers"])
    assert response.status_code == 404


def test_remove_bookmark(client, student, internship):
    client.post("/api/bookmarks/toggle", json={"internship_id": internship["id"]}, headers=student["headers"])
    url = f"/api/bookmarks/{internship['id']}"
    assert client.delete(url, headers=student["headers"]).status_code == 200
    assert client.delete(url, headers=student["headers"]).status_code == 404


def test_companies_cannot_bookmark(client, company, internship):
    response = client.post("/api/bookmarks/toggle", json={"internship_id": internship["id"]}, headers=company["headers"])
    assert response.status_code == 403


def test_cannot_bookmark_unpublished_postings(client, company, student):
    for status in ("draft", "closed"):
        posting = post_internship(client, company, status=status)
        assert client.get(f"/api/internships/{posting['id']}", headers=student["headers"]).status_code == 404
        response = client.post(
            "/api/bookmarks/toggle", json={"internship_id": posting["id"]}, headers=student["headers"]
        )
        assert response.status_code == 404
    assert client.get("/api/bookmarks", headers=student["headers"]).json() == []


def test_bookmark_hides_details_once_posting_closes(client, company, student, internship):
    client.post("/api/bookmarks/toggle", json={"internship_id": internship["id"]}, headers=student["headers"])
    client.put(f"/api/internships/{internship['id']}", json={"status": "closed"}, headers=company["headers"])

    saved = client.get("/api/bookmarks", headers=student["headers"]).json()
    assert saved[0]["internship_id"] == internship["id"]
    assert saved[0]["internship"] is None

    # Un-saving still works after the posting closed
    response = client.post(
        "/api/bookmarks/toggle", json={"internship_id": internship["id"]}, headers=student["headers"]
    )
    assert response.json()["bookmarked"] is False
