import pytest

from conftest import in_days, job_payload, register
from portal.grading import CRITERIA

SCORES = {
    "platform_activity": 9,
    "completion_of_internship": 8,
    "earnings_achieved": 7,
    "skill_development": 9,
    "client_rating": 8,
    "professionalism": 10,
}


@pytest.fixture
def evaluation(client, supervisor, student, hired_application):
    response = client.post(
        "/api/supervisor-evaluations",
        json={"student_id": student["id"], **SCORES},
        headers=supervisor["headers"],
    )
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


def test_submit_evaluation_computes_grade(evaluation, hired_application):
    assert evaluation["total_marks"] == 51
    assert evaluation["grade"] == "A"
    assert evaluation["status"] == "submitted"
    assert evaluation["student_registration"] == "FA21-BSE-001"
    assert evaluation["position"] == "Backend Intern"
    assert evaluation["internship_duration"] == "3 Months"
    assert evaluation["final_result_sent"] is False


def test_internship_dates_come_from_offer_letter(client, company, supervisor, student, hired_application):
    client.post("/api/offer-letters/send", json={
        "student_id": student["id"],
        "job_id": hired_application["job"]["id"],
        "supervisor_id": supervisor["id"],
        "content": "Offer",
        "start_date": "2026-02-01",
        "end_date": "2026-05-01",
        "student_name": "Ali Raza",
        "student_email": "student@portal-test.org",
        "job_title": "Backend Intern",
    }, headers=company["headers"])

    response = client.post(
        "/api/supervisor-evaluations",
        json={"student_id": student["id"], **SCORES},
        headers=supervisor["headers"],
    )
    data = response.get_json()["data"]
    assert data["internship_start_date"] == "2026-02-01"
    assert data["internship_end_date"] == "2026-05-01"


def test_dates_fall_back_to_job(evaluation):
    assert evaluation["internship_start_date"] == in_days(40)
    assert evaluation["internship_end_date"] == in_days(130)


def test_offer_letter_for_another_job_is_ignored(client, supervisor, student, hired_application):
    rival = register(client, "company", name="Rival Inc", email="rival@portal-test.org")
    other_job = client.post("/api/jobs", json=job_payload(title="Data Intern"), headers=rival["headers"]).get_json()["data"]
    response = client.post("/api/offer-letters/send", json={
        "student_id": student["id"],
        "job_id": other_job["id"],
        "supervisor_id": supervisor["id"],
        "content": "Offer",
        "start_date": "2026-02-01",
        "end_date": "2026-05-01",
        "student_name": "Ali Raza",
        "student_email": "student@portal-test.org",
        "job_title": "Data Intern",
    }, headers=rival["headers"])
    assert response.status_code == 201, response.get_json()

    response = client.post(
        "/api/supervisor-evaluations",
        json={"student_id": student["id"], **SCORES},
        headers=supervisor["headers"],
    )
    data = response.get_json()["data"]
    assert data["internship_start_date"] == in_days(40)
    assert data["internship_end_date"] == in_days(130)



def test_duplicate_evaluation_conflicts(client, supervisor, student, evaluation):
    response = client.post(
        "/api/supervisor-evaluations",
        json={"student_id": student["id"], **SCORES},
        headers=supervisor["headers"],
    )
    assert response.status_code == 409


def test_evaluation_requires_hired_student(client, supervisor, student, approved_application):
    response = client.post(
        "/api/supervisor-evaluations",
        json={"student_id": student["id"], **SCORES},
        headers=supervisor["headers"],
    )
    assert response.status_code == 400
    assert response.get_json()["message"] == "Student is not hired under your supervision"


@pytest.mark.parametrize("score", [0, 11, None, "missing"])
def test_scores_must_be_between_1_and_10(client, supervisor, student, hired_application, score):
    payload = {"student_id": student["id"], **SCORES}
    if score == "missing":
        del payload["professionalism"]
    else:
        payload["professionalism"] = score
    response = client.post("/api/supervisor-evaluations", json=payload, headers=supervisor["headers"])
    assert response.status_code == 400
    assert "professionalism: All grades must be between 1 and 10" in response.get_json()["errors"]


def test_lowest_scores_get_f(client, supervisor, student, hired_application):
    payload = {"student_id": student["id"], **dict.fromkeys(CRITERIA, 1)}
    data = client.post("/api/supervisor-evaluations", json=payload, headers=supervisor["headers"]).get_json()["data"]
    assert data["total_marks"] == 6
    assert data["grade"] == "F"


def test_listings(client, admin, supervisor, evaluation):
    own = client.get("/api/supervisor-evaluations", headers=supervisor["headers"]).get_json()["data"]
    assert [e["id"] for e in own] == [evaluation["id"]]

    everything = client.get("/api/supervisor-evaluations/all", headers=admin["headers"]).get_json()["data"]
    assert [e["id"] for e in everything] == [evaluation["id"]]

    assert client.get("/api/supervisor-evaluations/all", headers=supervisor["headers"]).status_code == 403


def test_status_update(client, supervisor, evaluation):
    url = f"/api/supervisor-evaluations/{evaluation['id']}/status"
    response = client.patch(url, json={"status": "finalized"}, headers=supervisor["headers"])
    assert response.get_json()["data"]["status"] == "finalized"

    other = register(client, "supervisor", email="other-sup@portal-test.org")
    assert client.patch(url, json={"status": "reviewed"}, headers=other["headers"]).status_code == 403


def test_final_result_is_hidden_until_sent(client, admin, student, evaluation):
    assert client.get("/api/supervisor-evaluations/student", headers=student["headers"]).get_json()["data"] == []
    assert client.get(f"/api/supervisor-evaluations/{evaluation['id']}", headers=student["headers"]).status_code == 403

    response = client.patch(
        f"/api/supervisor-evaluations/{evaluation['id']}/final-result", headers=admin["headers"],
    )
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["final_result_sent"] is True
    assert data["final_result_sent_at"] is not None

    results = client.get("/api/supervisor-evaluations/student", headers=student["headers"]).get_json()["data"]
    assert [r["grade"] for r in results] == ["A"]

    note = client.get("/api/notifications", headers=student["headers"]).get_json()["data"][0]
    assert note["type"] == "evaluation_result"

    again = client.patch(f"/api/supervisor-evaluations/{evaluation['id']}/final-result", headers=admin["headers"])
    assert again.status_code == 409
