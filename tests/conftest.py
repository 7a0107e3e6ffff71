"""Test configuration and fixtures."""

from datetime import date, timedelta

import pytest

from app import create_app
from portal.models import db

ADMIN_EMAIL = "admin@portal-test.org"
ADMIN_PASSWORD = "admin-secret"

ELIGIBLE_PROFILE = {
    "roll_number": "FA21-BSE-001",
    "department": "Software Engineering",
    "semester": 6,
    "cgpa": 3.2,
    "attendance": 88,
    "backlogs": 0,
    "phone_number": "0300-1234567",
    "code_of_conduct": True,
}


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def in_days(days):
    return (date.today() + timedelta(days=days)).isoformat()


def job_payload(**overrides):
    payload = {
        "title": "Backend Intern",
        "location": "Lahore",
        "work_type": "Hybrid",
        "duration": "3 Months",
        "salary": "25000",
        "start_date": in_days(40),
        "end_date": in_days(130),
        "description": "Build and maintain internal REST services.",
        "requirements": ["Python", "SQL"],
        "technology_stack": ["Flask", "PostgreSQL"],
        "application_limit": 5,
        "application_deadline": in_days(30),
    }
    payload.update(overrides)
    return payload


def register(client, role, name=None, email=None, password="secret123"):
    response = client.post("/api/auth/register", json={
        "name": name or f"{role.title()} User",
        "email": email or f"{role}@portal-test.org",
        "password": password,
        "role": role,
    })
    assert response.status_code == 201, response.get_json()
    data = response.get_json()["data"]
    return {"id": data["user"]["id"], "token": data["token"], "headers": auth(data["token"])}


# ===== APP =====

@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setenv("ADMIN_PASSWORD", ADMIN_PASSWORD)
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "UPLOAD_FOLDER": str(tmp_path / "upload"),
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


# ===== USERS =====

@pytest.fixture
def admin(client):
    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    data = response.get_json()["data"]
    return {"id": data["user"]["id"], "token": data["token"], "headers": auth(data["token"])}


@pytest.fixture
def company(client):
    return register(client, "company", name="Acme Labs")


@pytest.fixture
def supervisor(client):
    return register(client, "supervisor", name="Dr. Sana Malik")


@pytest.fixture
def student(client):
    user = register(client, "student", name="Ali Raza")
    response = client.put("/api/students/profile", json=ELIGIBLE_PROFILE, headers=user["headers"])
    assert response.status_code == 200, response.get_json()
    return user


# ===== WORKFLOW =====

@pytest.fixture
def job(client, company):
    response = client.post("/api/jobs", json=job_payload(), headers=company["headers"])
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


@pytest.fixture
def application(client, student, supervisor, job):
    response = client.post("/api/applications", json={
        "job_id": job["id"],
        "supervisor_id": supervisor["id"],
        "cover_letter": "I would love to join the backend team.",
    }, headers=student["headers"])
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


@pytest.fixture
def approved_application(client, supervisor, application):
    response = client.put(
        f"/api/applications/{application['id']}/supervisor-review",
        json={"status": "approved", "comments": "Good fit"},
        headers=supervisor["headers"],
    )
    assert response.status_code == 200, response.get_json()
    return response.get_json()["data"]


@pytest.fixture
def hired_application(client, company, approved_application):
    response = client.patch(
        f"/api/applications/{approved_application['id']}/status",
        json={"status": "hired"},
        headers=company["headers"],
    )
    assert response.status_code == 200, response.get_json()
    return response.get_json()["data"]
