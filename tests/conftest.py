import os
import tempfile

# Settings are read once at import time, so the environment is set up first
_db_dir = tempfile.mkdtemp(prefix="internmatch-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["REQUIRE_EMAIL_VERIFICATION"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.db.postgres import engine
from app.db.schema import drop_schema, init_schema
from app.main import app
from app.services.admin_service import create_admin_account
from tests.helpers import PASSWORD, apply, login, post_internship, register


@pytest.fixture(autouse=True)
def fresh_schema():
    drop_schema(engine)
    init_schema(engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def require_verification():
    settings = get_settings()
    settings.require_email_verification = True
    yield
    settings.require_email_verification = False


@pytest.fixture
def student(client):
    user = register(client, "alice@example.com", full_name="Alice Student")
    response = client.put(
        "/api/profiles/me",
        json={"resume_url": "https://files.example.com/alice.pdf"},
        headers=user["headers"]
    )
    assert response.status_code == 200, response.text
    return user


@pytest.fixture
def student_without_resume(client):
    return register(client, "bob@example.com", full_name="Bob Student")


@pytest.fixture
def company(client):
    return register(client, "hr@acme.example.com", role="company", company_name="Acme Corp")


@pytest.fixture
def other_company(client):
    return register(client, "jobs@globex.example.com", role="company", company_name="Globex")


@pytest.fixture
def admin(client):
    create_admin_account("admin@example.com", PASSWORD, "Site Admin")
    return login(client, "admin@example.com")


@pytest.fixture
def internship(client, company):
    return post_internship(client, company)


@pytest.fixture
def application(client, student, internship):
    response = apply(client, student, internship["id"])
    assert response.status_code == 201, response.text
    return response.json()
