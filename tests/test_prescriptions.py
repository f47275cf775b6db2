import pytest

MEDICATIONS = [{"name": "Atorvastatin", "dosage": "20mg", "frequency": "once daily"}]

@pytest.fixture
def prescription(client, doctor, appointment):
    response = client.post(
        "/api/v1/prescriptions",
        json={
            "patient_id": appointment["patient_id"],
            "appointment_id": appointment["id"],
            "medications": MEDICATIONS,
            "instructions": "Take with evening meal",
        },
        headers=doctor["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()

class TestPrescriptions:

    def test_create_prescription(self, client, prescription):
        assert prescription["medications"] == MEDICATIONS
        assert prescription["is_active"] is True
        assert prescription["issue_date"]

    def test_patient_notified(self, client, patient, prescription):
        response = client.get("/api/v1/notifications", headers=patient["headers"])
        assert any(n["title"] == "New Prescription" for n in response.json())

    def test_requires_medications(self, client, doctor, appointment):
        response = client.post(
            "/api/v1/prescriptions",
            json={"patient_id": appointment["patient_id"], "medications": []},
            headers=doctor["headers"]
        )
        assert response.status_code == 422

    def test_patient_cannot_prescribe(self, client, patient):
        response = client.post(
            "/api/v1/prescriptions",
            json={"patient_id": patient["profile"]["id"], "medications": MEDICATIONS},
            headers=patient["headers"]
        )
        assert response.status_code == 403

    def test_unknown_patient(self, client, doctor):
        response = client.post(
            "/api/v1/prescriptions",
            json={"patient_id": 9999, "medications": MEDICATIONS},
            headers=doctor["headers"]
        )
        assert response.status_code == 404

    def test_patient_lists_own(self, client, patient, prescription):
        response = client.get("/api/v1/prescriptions", headers=patient["headers"])
        assert [p["id"] for p in response.json()] == [prescription["id"]]

    def test_update_prescription(self, client, doctor, prescription):
        response = client.patch(
            f"/api/v1/prescriptions/{prescription['id']}",
            json={"instructions": "Take before bed"},
            headers=doctor["headers"]
        )
        assert response.status_code == 200
        assert response.json()["instructions"] == "Take before bed"
        assert response.json()["medications"] == MEDICATIONS

    def test_other_doctor_cannot_update(self, client, create_doctor, prescription):
        other = create_doctor("other-doc@example.com", license_number="LIC-2002")

        response = client.patch(
            f"/api/v1/prescriptions/{prescription['id']}",
            json={"instructions": "Double the dose"},
            headers=other["headers"]
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "You can only update your own prescriptions"

    def test_deactivate_prescription(self, client, doctor, prescription):
        response = client.delete(
            f"/api/v1/prescriptions/{prescription['id']}", headers=doctor["headers"]
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        response = client.get("/api/v1/prescriptions", headers=doctor["headers"])
        assert len(response.json()) == 1

    def test_missing_prescription(self, client, doctor):
        response = client.delete("/api/v1/prescriptions/9999", headers=doctor["headers"])
        assert response.status_code == 404
