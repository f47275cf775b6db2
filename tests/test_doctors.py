class TestDoctorSearch:

    def test_list_doctors(self, client, doctor):
        response = client.get("/api/v1/doctors")
        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "public, max-age=3600"

        data = response.json()
        assert data["pagination"] == {"total": 1, "page": 1, "limit": 10, "total_pages": 1}
        assert data["doctors"][0]["full_name"] == "Gregory House"
        assert data["doctors"][0]["consultation_fee"] == 150.0

    def test_filter_by_specialty(self, client, create_doctor):
        create_doctor()
        create_doctor("derm@example.com", license_number="LIC-2002", specialization="Dermatology")

        response = client.get("/api/v1/doctors", params={"specialty": "dermatology"})
        doctors = response.json()["doctors"]
        assert [d["specialization"] for d in doctors] == ["Dermatology"]

    def test_filter_by_location(self, client, create_doctor):
        create_doctor()
        create_doctor("far@example.com", license_number="LIC-2002", office_address="9 Harbour Road, Shelbyville")

        response = client.get("/api/v1/doctors", params={"location": "shelby"})
        doctors = response.json()["doctors"]
        assert len(doctors) == 1
        assert "Shelbyville" in doctors[0]["office_address"]

    def test_pagination(self, client, create_doctor):
        for i in range(3):
            create_doctor(f"doc{i}@example.com", license_number=f"LIC-{i}", last_name=f"Doctor{i}")

        response = client.get("/api/v1/doctors", params={"page": 2, "limit": 2})
        data = response.json()
        assert data["pagination"]["total"] == 3
        assert data["pagination"]["total_pages"] == 2
        assert [d["last_name"] for d in data["doctors"]] == ["Doctor2"]

    def test_unavailable_doctor_hidden(self, client, doctor):
        client.put("/api/v1/doctors/me", json={"is_available": False}, headers=doctor["headers"])

        response = client.get("/api/v1/doctors")
        assert response.json()["doctors"] == []

    def test_get_doctor(self, client, doctor):
        response = client.get(f"/api/v1/doctors/{doctor['profile']['id']}")
        assert response.status_code == 200
        assert response.json()["license_number"] == "LIC-1001"

    def test_get_missing_doctor(self, client):
        response = client.get("/api/v1/doctors/9999")
        assert response.status_code == 404

class TestDoctorPortal:

    def test_update_profile(self, client, doctor):
        response = client.put(
            "/api/v1/doctors/me",
            json={"bio": "Diagnostician", "consultation_fee": "200.50"},
            headers=doctor["headers"]
        )
        assert response.status_code == 200
        assert response.json()["bio"] == "Diagnostician"
        assert response.json()["consultation_fee"] == 200.5

    def test_patient_cannot_use_doctor_portal(self, client, patient):
        response = client.get("/api/v1/doctors/me", headers=patient["headers"])
        assert response.status_code == 403

    def test_dashboard(self, client, doctor, appointment):
        client.post(
            "/api/v1/prescriptions",
            json={
                "patient_id": appointment["patient_id"],
                "medications": [{"name": "Aspirin", "dosage": "81mg", "frequency": "daily"}],
            },
            headers=doctor["headers"]
        )

        response = client.get("/api/v1/doctors/me/dashboard", headers=doctor["headers"])
        assert response.status_code == 200
        assert response.json() == {
            "today_appointments": 0,
            "upcoming_appointments": 1,
            "completed_appointments": 0,
            "total_patients": 1,
            "active_prescriptions": 1,
        }

    def test_my_patients(self, client, doctor, patient, appointment):
        response = client.get("/api/v1/doctors/me/patients", headers=doctor["headers"])
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [patient["profile"]["id"]]

class TestDoctorProfileNulls:

    def test_null_fields_are_ignored(self, client, doctor):
        response = client.put(
            "/api/v1/doctors/me",
            json={"first_name": None, "is_available": None, "bio": "Diagnostician"},
            headers=doctor["headers"]
        )
        assert response.status_code == 200
        assert response.json()["first_name"] == "Gregory"
        assert response.json()["is_available"] is True
        assert response.json()["bio"] == "Diagnostician"

class TestLocationWildcards:

    def test_wildcards_match_literally(self, client, doctor):
        for location in ("%", "_"):
            response = client.get("/api/v1/doctors", params={"location": location})
            assert response.json()["doctors"] == []

        response = client.get("/api/v1/doctors", params={"location": "main street"})
        assert len(response.json()["doctors"]) == 1
