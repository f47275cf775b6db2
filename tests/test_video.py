import pytest
from jose import jwt

from medibook.core.config import settings

@pytest.fixture
def twilio_credentials(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC" + "a" * 32)
    monkeypatch.setattr(settings, "TWILIO_API_KEY", "SK" + "b" * 32)
    monkeypatch.setattr(settings, "TWILIO_API_SECRET", "video-secret")

class TestVideoToken:

    def test_issue_token(self, client, patient, appointment, twilio_credentials):
        response = client.post(
            "/api/v1/video/token",
            json={"appointment_id": appointment["id"]},
            headers=patient["headers"]
        )
        assert response.status_code == 200

        data = response.json()
        assert data["room_name"] == f"appointment-{appointment['id']}"
        assert data["identity"] == f"user-{patient['user']['id']}"

        claims = jwt.get_unverified_claims(data["token"])
        assert claims["grants"]["identity"] == data["identity"]
        assert claims["grants"]["video"]["room"] == data["room_name"]

    def test_doctor_joins_same_room(self, client, doctor, appointment, twilio_credentials):
        response = client.post(
            "/api/v1/video/token",
            json={"appointment_id": appointment["id"]},
            headers=doctor["headers"]
        )
        assert response.status_code == 200
        assert response.json()["room_name"] == f"appointment-{appointment['id']}"

    def test_not_participant(self, client, create_patient, appointment, twilio_credentials):
        other = create_patient("other@example.com")

        response = client.post(
            "/api/v1/video/token", json={"appointment_id": appointment["id"]}, headers=other["headers"]
        )
        assert response.status_code == 403

    def test_missing_appointment(self, client, patient, twilio_credentials):
        response = client.post(
            "/api/v1/video/token", json={"appointment_id": 9999}, headers=patient["headers"]
        )
        assert response.status_code == 404

    def test_in_person_appointment(self, client, patient, open_slots, book, twilio_credentials):
        appointment = book(patient["headers"], time_slot="10:00", consultation_type="in_person").json()

        response = client.post(
            "/api/v1/video/token", json={"appointment_id": appointment["id"]}, headers=patient["headers"]
        )
        assert response.status_code == 400

    def test_cancelled_appointment(self, client, patient, appointment, twilio_credentials):
        client.patch(
            f"/api/v1/appointments/{appointment['id']}/status",
            json={"status": "cancelled"},
            headers=patient["headers"]
        )

        response = client.post(
            "/api/v1/video/token", json={"appointment_id": appointment["id"]}, headers=patient["headers"]
        )
        assert response.status_code == 400

    def test_missing_credentials(self, client, patient, appointment, monkeypatch):
        monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", None)

        response = client.post(
            "/api/v1/video/token", json={"appointment_id": appointment["id"]}, headers=patient["headers"]
        )
        assert response.status_code == 503

    def test_malformed_account_sid(self, client, patient, appointment, twilio_credentials, monkeypatch):
        monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "XX" + "a" * 32)

        response = client.post(
            "/api/v1/video/token", json={"appointment_id": appointment["id"]}, headers=patient["headers"]
        )
        assert response.status_code == 503
        assert "AC" in response.json()["detail"]
