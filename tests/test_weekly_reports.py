import io
import os

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from conftest import in_days, register


@pytest.fixture
def event(client, supervisor, hired_application):
    response = client.post("/api/weekly-reports/events", json={
        "week_number": 1,
        "due_date": in_days(5),
        "instructions": "Summarise your onboarding week.",
    }, headers=supervisor["headers"])
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


def submit(client, student, event_id, **extra):
    payload = {
        "tasks_completed": "Set up the development environment and fixed two bugs.",
        "reflections": "Learned the team's review process.",
    }
    payload.update(extra)
    return client.post(f"/api/weekly-reports/events/{event_id}/submit", json=payload, headers=student["headers"])


def test_create_event(client, student, event):
    assert event["title"] == "Weekly Report - Week 1"
    assert event["status"] == "active"
    assert event["week_start_date"] == in_days(-2)

    note = client.get("/api/notifications", headers=student["headers"]).get_json()["data"][0]
    assert note["type"] == "weekly_report_assigned"


def test_event_message_counts_notified_students(client, supervisor, hired_application):
    response = client.post("/api/weekly-reports/events", json={"week_number": 2, "due_date": in_days(12)},
                           headers=supervisor["headers"])
    assert response.get_json()["message"] == "Weekly report event created successfully. 1 students notified."


def test_duplicate_week_conflicts(client, supervisor, event):
    response = client.post("/api/weekly-reports/events", json={"week_number": 1, "due_date": in_days(9)},
                           headers=supervisor["headers"])
    assert response.status_code == 409
    assert response.get_json()["message"] == "Weekly report event for Week 1 already exists"


@pytest.mark.parametrize("week", [0, 13])
def test_week_number_range(client, supervisor, week):
    response = client.post("/api/weekly-reports/events", json={"week_number": week, "due_date": in_days(5)},
                           headers=supervisor["headers"])
    assert response.status_code == 400


def test_submit_report(client, supervisor, student, event):
    response = submit(client, student, event["id"], challenges_faced="Slow CI builds")
    assert response.status_code == 201
    report = response.get_json()["data"]
    assert report["week_number"] == 1
    assert report["company_name"] == "Acme Labs"
    assert report["challenges_faced"] == "Slow CI builds"
    assert report["supporting_files"] == []

    note = client.get("/api/notifications", headers=supervisor["headers"]).get_json()["data"][0]
    assert note["type"] == "weekly_report_submitted"

    events = client.get("/api/weekly-reports/events", headers=student["headers"]).get_json()["data"]
    assert events[0]["submission"]["id"] == report["id"]

    events = client.get("/api/weekly-reports/events", headers=supervisor["headers"]).get_json()["data"]
    assert events[0]["submission_count"] == 1


def test_submit_with_supporting_file(client, student, event):
    response = client.post(
        f"/api/weekly-reports/events/{event['id']}/submit",
        data={
            "tasks_completed": "Wrote API tests.",
            "reflections": "Testing first pays off.",
            "supporting_files": (io.BytesIO(b"meeting notes"), "notes.txt"),
        },
        content_type="multipart/form-data",
        headers=student["headers"],
    )
    assert response.status_code == 201, response.get_json()
    (stored,) = response.get_json()["data"]["supporting_files"]
    assert stored["original_name"] == "notes.txt"
    assert stored["filename"].endswith("_notes.txt")

    download = client.get(stored["url"], headers=student["headers"])
    assert download.status_code == 200
    assert download.data == b"meeting notes"
    assert client.get(stored["url"]).status_code == 401


def test_submit_rejects_unsupported_file(client, student, event):
    response = client.post(
        f"/api/weekly-reports/events/{event['id']}/submit",
        data={
            "tasks_completed": "Wrote API tests.",
            "reflections": "Testing first pays off.",
            "supporting_files": (io.BytesIO(b"MZ"), "tool.exe"),
        },
        content_type="multipart/form-data",
        headers=student["headers"],
    )
    assert response.status_code == 400


def test_failed_commit_removes_stored_files(app, client, student, event, monkeypatch):
    def fail(self):
        raise SQLAlchemyError("database unavailable")

    monkeypatch.setattr(Session, "commit", fail)
    response = client.post(
        f"/api/weekly-reports/events/{event['id']}/submit",
        data={
            "tasks_completed": "Wrote API tests.",
            "reflections": "Testing first pays off.",
            "supporting_files": (io.BytesIO(b"meeting notes"), "notes.txt"),
        },
        content_type="multipart/form-data",
        headers=student["headers"],
    )
    assert response.status_code == 500
    assert os.listdir(app.config["UPLOAD_FOLDER"]) == []


def test_submit_requires_summary_and_reflections(client, student, event):
    response = client.post(f"/api/weekly-reports/events/{event['id']}/submit", json={},
                           headers=student["headers"])
    assert response.status_code == 400
    assert len(response.get_json()["errors"]) == 2


def test_cannot_submit_twice(client, student, event):
    submit(client, student, event["id"])
    response = submit(client, student, event["id"])
    assert response.status_code == 409
    assert response.get_json()["message"] == "You have already submitted a report for this event"


def test_cannot_submit_after_due_date(client, supervisor, student, hired_application):
    event = client.post("/api/weekly-reports/events", json={"week_number": 3, "due_date": in_days(-1)},
                        headers=supervisor["headers"]).get_json()["data"]
    response = submit(client, student, event["id"])
    assert response.status_code == 400
    assert response.get_json()["message"] == "The due date for this report has passed"


def test_only_own_supervisors_events(client, student, hired_application):
    other = register(client, "supervisor", email="other-sup@portal-test.org")
    event = client.post("/api/weekly-reports/events", json={"week_number": 1, "due_date": in_days(5)},
                        headers=other["headers"]).get_json()["data"]
    response = submit(client, student, event["id"])
    assert response.status_code == 403


def test_student_without_approved_application(client, supervisor, student, application):
    event = client.post("/api/weekly-reports/events", json={"week_number": 1, "due_date": in_days(5)},
                        headers=supervisor["headers"]).get_json()["data"]
    assert submit(client, student, event["id"]).status_code == 404
    assert client.get("/api/weekly-reports/events", headers=student["headers"]).status_code == 404


def test_feedback(client, supervisor, student, event):
    report = submit(client, student, event["id"]).get_json()["data"]
    response = client.patch(f"/api/weekly-reports/{report['id']}/feedback", json={
        "feedback": "Solid first week.",
        "status": "approved",
        "rating": 5,
    }, headers=supervisor["headers"])
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["status"] == "approved"
    assert data["rating"] == 5
    assert data["supervisor_feedback"] == "Solid first week."
    assert data["reviewed_at"] is not None

    reports = client.get("/api/weekly-reports/student", headers=student["headers"]).get_json()["data"]
    assert reports[0]["status"] == "approved"
    note = client.get("/api/notifications", headers=student["headers"]).get_json()["data"][0]
    assert note["type"] == "weekly_report_reviewed"


def test_feedback_defaults_and_validation(client, supervisor, student, event):
    report = submit(client, student, event["id"]).get_json()["data"]
    url = f"/api/weekly-reports/{report['id']}/feedback"

    assert client.patch(url, json={"feedback": "Ok", "rating": 6}, headers=supervisor["headers"]).status_code == 400
    assert client.patch(url, json={"status": "approved"}, headers=supervisor["headers"]).status_code == 400

    data = client.patch(url, json={"feedback": "Ok"}, headers=supervisor["headers"]).get_json()["data"]
    assert data["status"] == "reviewed"


def test_report_visibility(client, supervisor, student, event):
    report = submit(client, student, event["id"]).get_json()["data"]
    assert client.get(f"/api/weekly-reports/{report['id']}", headers=supervisor["headers"]).status_code == 200
    stranger = register(client, "supervisor", email="stranger@portal-test.org")
    assert client.get(f"/api/weekly-reports/{report['id']}", headers=stranger["headers"]).status_code == 403
    assert client.patch(f"/api/weekly-reports/{report['id']}/feedback", json={"feedback": "Hi"},
                        headers=stranger["headers"]).status_code == 403
