import io

from conftest import register


def test_profile_update_keeps_unsent_fields(client, student):
    response = client.put("/api/students/profile", json={"phone_number": "0311-7654321"}, headers=student["headers"])
    profile = response.get_json()["data"]["profile"]
    assert profile["phone_number"] == "0311-7654321"
    assert profile["roll_number"] == "FA21-BSE-001"
    assert profile["cgpa"] == 3.2


def test_profile_ranges_are_validated(client, student):
    response = client.put("/api/students/profile", json={"cgpa": 4.5, "semester": 9}, headers=student["headers"])
    assert response.status_code == 400
    fields = {error.split(":")[0] for error in response.get_json()["errors"]}
    assert fields == {"cgpa", "semester"}


def test_null_profile_fields_are_ignored(client, student):
    response = client.put(
        "/api/students/profile", json={"semester": None, "cgpa": None, "phone_number": "0311-7654321"},
        headers=student["headers"],
    )
    assert response.status_code == 200
    profile = response.get_json()["data"]["profile"]
    assert profile["semester"] == 6
    assert profile["cgpa"] == 3.2
    assert profile["phone_number"] == "0311-7654321"


def test_profile_is_student_only(client):
    company = register(client, "company")
    assert client.get("/api/students/profile", headers=company["headers"]).status_code == 403


def test_upload_cv(client, student):
    response = client.post(
        "/api/students/cv",
        data={"cv": (io.BytesIO(b"%PDF-1.4 cv"), "Ali Raza CV.pdf")},
        content_type="multipart/form-data",
        headers=student["headers"],
    )
    assert response.status_code == 200, response.get_json()
    stored = response.get_json()["data"]["cv"]
    assert stored.endswith("_Ali_Raza_CV.pdf")

    profile = client.get("/api/students/profile", headers=student["headers"]).get_json()["data"]["profile"]
    assert profile["cv"] == stored
    assert client.get(f"/upload/{stored}", headers=student["headers"]).data == b"%PDF-1.4 cv"


def test_upload_cv_rejects_other_types(client, student):
    response = client.post(
        "/api/students/cv",
        data={"cv": (io.BytesIO(b"hello"), "cv.txt")},
        content_type="multipart/form-data",
        headers=student["headers"],
    )
    assert response.status_code == 400
