import io

import pytest

from conftest import in_days, register
from portal.models import InternshipReport

SECTIONS = {section: f"Content for {section.replace('_', ' ')}." for section in InternshipReport.SECTIONS}


# ===== JOINING REPORTS =====

def test_joining_eligibility(client, student, approved_application):
    data = client.get("/api/joining-reports/eligibility", headers=student["headers"]).get_json()["data"]
    assert data == {"canCreate": False, "hasHiredApplication": False, "hasExistingReport": False}


def test_create_joining_report(client, supervisor, student, hired_application):
    eligibility = client.get("/api/joining-reports/eligibility", headers=student["headers"]).get_json()["data"]
    assert eligibility["canCreate"] is True

    response = client.post("/api/joining-reports", json={
        "student_thoughts": "Excited to start working with the platform team.",
        "acknowledgment": True,
    }, headers=student["headers"])
    assert response.status_code == 201
    report = response.get_json()["data"]
    assert report["company_name"] == "Acme Labs"
    assert report["position"] == "Backend Intern"
    assert report["department"] == "Software Engineering"
    assert report["roll_number"] == "FA21-BSE-001"
    assert report["supervisor_name"] == "Dr. Sana Malik"
    assert report["internship_start"] == in_days(40)
    assert report["status"] == "submitted"

    eligibility = client.get("/api/joining-reports/eligibility", headers=student["headers"]).get_json()["data"]
    assert eligibility == {"canCreate": False, "hasHiredApplication": True, "hasExistingReport": True}

    again = client.post("/api/joining-reports", json={
        "student_thoughts": "Second try", "acknowledgment": True,
    }, headers=student["headers"])
    assert again.status_code == 400
    assert again.get_json()["message"] == "Joining report already submitted"

    listed = client.get("/api/joining-reports/supervisor", headers=supervisor["headers"]).get_json()["data"]
    assert [r["id"] for r in listed] == [report["id"]]


def test_joining_report_requires_acknowledgment(client, student, hired_application):
    response = client.post("/api/joining-reports", json={
        "student_thoughts": "Ready", "acknowledgment": False,
    }, headers=student["headers"])
    assert response.status_code == 400
    assert "acknowledgment: Acknowledgment is required" in response.get_json()["errors"]


def test_joining_report_requires_hire(client, student, approved_application):
    response = client.post("/api/joining-reports", json={
        "student_thoughts": "Ready", "acknowledgment": True,
    }, headers=student["headers"])
    assert response.status_code == 400
    assert response.get_json()["message"] == "You must be hired by a company to create a joining report"


def test_verify_joining_report(client, supervisor, student, hired_application):
    report = client.post("/api/joining-reports", json={
        "student_thoughts": "Ready", "acknowledgment": True,
    }, headers=student["headers"]).get_json()["data"]

    other = register(client, "supervisor", email="other-sup@portal-test.org")
    assert client.patch(f"/api/joining-reports/{report['id']}/verify", headers=other["headers"]).status_code == 404

    response = client.patch(f"/api/joining-reports/{report['id']}/verify", headers=supervisor["headers"])
    assert response.get_json()["data"]["status"] == "verified"

    own = client.get("/api/joining-reports/student", headers=student["headers"]).get_json()["data"]
    assert own["status"] == "verified"
    assert own["verified_at"] is not None


def test_student_without_joining_report(client, student):
    assert client.get("/api/joining-reports/student", headers=student["headers"]).get_json()["data"] is None


# ===== INTERNSHIP REPORTS =====

@pytest.fixture
def internship_report(client, student, hired_application):
    response = client.post("/api/internship-reports", json=SECTIONS, headers=student["headers"])
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


def test_submit_internship_report(client, supervisor, internship_report):
    assert internship_report["executive_summary"] == "Content for executive summary."
    assert internship_report["status"] == "submitted"
    assert internship_report["grade"] is None

    note = client.get("/api/notifications", headers=supervisor["headers"]).get_json()["data"][0]
    assert note["type"] == "internship_report_submitted"


def test_internship_report_with_appendix(client, student, hired_application):
    data = dict(SECTIONS, appendices=(io.BytesIO(b"%PDF-1.4"), "architecture.pdf"))
    response = client.post("/api/internship-reports", data=data, content_type="multipart/form-data",
                           headers=student["headers"])
    assert response.status_code == 201, response.get_json()
    (appendix,) = response.get_json()["data"]["appendices"]
    assert appendix["original_name"] == "architecture.pdf"


def test_internship_report_requires_every_section(client, student, hired_application):
    payload = dict(SECTIONS)
    del payload["reflection_and_conclusion"]
    response = client.post("/api/internship-reports", json=payload, headers=student["headers"])
    assert response.status_code == 400
    assert response.get_json()["errors"] == ["reflection_and_conclusion: This field is required."]


def test_internship_report_only_once(client, student, internship_report):
    response = client.post("/api/internship-reports", json=SECTIONS, headers=student["headers"])
    assert response.status_code == 409


def test_internship_report_requires_hire(client, student, approved_application):
    response = client.post("/api/internship-reports", json=SECTIONS, headers=student["headers"])
    assert response.status_code == 400


def test_internship_feedback(client, supervisor, student, internship_report):
    url = f"/api/internship-reports/{internship_report['id']}/feedback"
    assert client.patch(url, json={"feedback": "Great", "grade": "E"}, headers=supervisor["headers"]).status_code == 400

    response = client.patch(url, json={"feedback": "Thorough report.", "grade": "A+", "status": "approved"},
                            headers=supervisor["headers"])
    data = response.get_json()["data"]
    assert data["grade"] == "A+"
    assert data["status"] == "approved"
    assert data["supervisor_feedback"] == "Thorough report."

    own = client.get("/api/internship-reports/student", headers=student["headers"]).get_json()["data"]
    assert own["grade"] == "A+"
    note = client.get("/api/notifications", headers=student["headers"]).get_json()["data"][0]
    assert note["type"] == "internship_report_reviewed"


def test_internship_report_visibility(client, supervisor, internship_report):
    listed = client.get("/api/internship-reports/supervisor", headers=supervisor["headers"]).get_json()["data"]
    assert [r["id"] for r in listed] == [internship_report["id"]]

    stranger = register(client, "student", email="stranger@portal-test.org")
    url = f"/api/internship-reports/{internship_report['id']}"
    assert client.get(url, headers=stranger["headers"]).status_code == 403
