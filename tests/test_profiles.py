from conftest import register


def test_company_profile_update(client, company):
    response = client.put("/api/companies/profile", json={
        "industry": "Software",
        "website": "https://acme-labs.example.com",
        "address": "12 Main Boulevard, Lahore",
        "about": "We build logistics software.",
    }, headers=company["headers"])
    assert response.status_code == 200
    profile = response.get_json()["data"]["profile"]
    assert profile["industry"] == "Software"
    assert profile["company_name"] == "Acme Labs"

    profile = client.get("/api/companies/profile", headers=company["headers"]).get_json()["data"]["profile"]
    assert profile["address"] == "12 Main Boulevard, Lahore"


def test_company_name_change_shows_on_jobs(client, company, job):
    client.put("/api/companies/profile", json={"company_name": "Acme Robotics"}, headers=company["headers"])
    data = client.get(f"/api/jobs/{job['id']}", headers=company["headers"]).get_json()["data"]
    assert data["company"]["name"] == "Acme Robotics"


def test_company_website_must_be_a_url(client, company):
    response = client.put("/api/companies/profile", json={"website": "not a url"}, headers=company["headers"])
    assert response.status_code == 400
    assert response.get_json()["errors"][0].startswith("website:")


def test_company_profile_is_company_only(client, student):
    assert client.get("/api/companies/profile", headers=student["headers"]).status_code == 403


def test_supervisor_profile_update_shows_in_directory(client, supervisor, student):
    response = client.put("/api/supervisors/profile", json={
        "department": "Computer Science",
        "designation": "Assistant Professor",
        "max_students": 3,
        "expertise": ["Databases", "Distributed Systems"],
        "office": "Block C, Room 14",
    }, headers=supervisor["headers"])
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["current_students"] == 0
    assert data["profile"]["expertise"] == ["Databases", "Distributed Systems"]
    assert data["profile"]["office_hours"] == "Mon-Fri, 9AM-5PM"

    (entry,) = client.get("/api/supervisors", headers=student["headers"]).get_json()["data"]
    assert entry["profile"]["department"] == "Computer Science"
    assert entry["profile"]["designation"] == "Assistant Professor"
    assert entry["profile"]["max_students"] == 3


def test_supervisor_limit_cannot_drop_below_current_students(client, company, supervisor, hired_application):
    second = register(client, "student", name="Hina Tariq", email="hina@portal-test.org")
    application = client.post("/api/applications", json={
        "job_id": hired_application["job"]["id"],
        "supervisor_id": supervisor["id"],
        "cover_letter": "Keen to join as well.",
    }, headers=second["headers"]).get_json()["data"]
    client.put(f"/api/applications/{application['id']}/supervisor-review",
               json={"status": "approved"}, headers=supervisor["headers"])
    client.patch(f"/api/applications/{application['id']}/status", json={"status": "hired"}, headers=company["headers"])

    response = client.put("/api/supervisors/profile", json={"max_students": 1}, headers=supervisor["headers"])
    assert response.status_code == 400
    assert response.get_json()["message"].startswith("Cannot set student limit to 1. You currently have 2")

    response = client.put("/api/supervisors/profile", json={"max_students": 2}, headers=supervisor["headers"])
    assert response.status_code == 200
    assert response.get_json()["data"]["current_students"] == 2


def test_supervisor_limit_range(client, supervisor):
    response = client.put("/api/supervisors/profile", json={"max_students": 0}, headers=supervisor["headers"])
    assert response.status_code == 400
    assert "max_students: Number must be between 1 and 50." in response.get_json()["errors"]
