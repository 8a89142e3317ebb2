PASSWORD = "secret123"


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client, email: str, password: str = PASSWORD) -> dict:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    body = response.json()
    return {"id": body["user_id"], "email": email, "headers": auth_headers(body["access_token"])}


def register(client, email: str, role: str = "student", **extra) -> dict:
    payload = {
        "email": email,
        "password": PASSWORD,
        "confirm_password": PASSWORD,
        "role": role,
        "full_name": extra.pop("full_name", email.split("@")[0].title()),
    }
    if role == "company":
        payload["company_name"] = extra.pop("company_name", "Acme Corp")
    payload.update(extra)
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return login(client, email)


def post_internship(client, company, **overrides) -> dict:
    payload = {
        "title": "Backend Intern",
        "description": "Build APIs",
        "requirements": "Python",
        "location": "Berlin",
        "type": "full-time",
        "duration": "3 months",
        "skills": ["Python", "SQL"],
    }
    payload.update(overrides)
    response = client.post("/api/internships", json=payload, headers=company["headers"])
    assert response.status_code == 201, response.text
    return response.json()


def apply(client, student, internship_id: str):
    return client.post(
        "/api/applications",
        json={"internship_id": internship_id, "cover_letter": "Hire me"},
        headers=student["headers"]
    )


def set_status(client, user, application_id: str, status: str, expected_version=None):
    body = {"status": status}
    if expected_version is not None:
        body["expected_version"] = expected_version
    return client.patch(f"/api/applications/{application_id}/status", json=body, headers=user["headers"])
