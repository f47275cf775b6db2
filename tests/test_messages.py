class TestMessages:

    def _send(self, client, sender, receiver, content="Hello", **extra):
        return client.post(
            "/api/v1/messages",
            json={"receiver_id": receiver["user"]["id"], "content": content, **extra},
            headers=sender["headers"]
        )

    def test_send_and_list_conversation(self, client, patient, doctor):
        assert self._send(client, patient, doctor, "Is fasting required?").status_code == 201
        assert self._send(client, doctor, patient, "Yes, for 12 hours.").status_code == 201

        response = client.get(
            "/api/v1/messages",
            params={"other_user_id": doctor["user"]["id"]},
            headers=patient["headers"]
        )
        assert response.status_code == 200
        assert [m["content"] for m in response.json()] == ["Is fasting required?", "Yes, for 12 hours."]

    def test_list_requires_filter(self, client, patient):
        response = client.get("/api/v1/messages", headers=patient["headers"])
        assert response.status_code == 400

    def test_cannot_message_self(self, client, patient):
        response = self._send(client, patient, patient)
        assert response.status_code == 400

    def test_unknown_receiver(self, client, patient):
        response = client.post(
            "/api/v1/messages",
            json={"receiver_id": 9999, "content": "Hi"},
            headers=patient["headers"]
        )
        assert response.status_code == 404

    def test_receiver_marks_read(self, client, patient, doctor):
        message_id = self._send(client, patient, doctor).json()["id"]

        response = client.patch(
            f"/api/v1/messages/{message_id}", json={"read": True}, headers=doctor["headers"]
        )
        assert response.status_code == 200
        assert response.json()["read"] is True

    def test_sender_cannot_mark_read(self, client, patient, doctor):
        message_id = self._send(client, patient, doctor).json()["id"]

        response = client.patch(
            f"/api/v1/messages/{message_id}", json={"read": True}, headers=patient["headers"]
        )
        assert response.status_code == 403

    def test_only_sender_deletes(self, client, patient, doctor):
        message_id = self._send(client, patient, doctor).json()["id"]

        response = client.delete(f"/api/v1/messages/{message_id}", headers=doctor["headers"])
        assert response.status_code == 403

        response = client.delete(f"/api/v1/messages/{message_id}", headers=patient["headers"])
        assert response.status_code == 200

    def test_appointment_thread(self, client, patient, doctor, appointment, create_patient):
        self._send(client, patient, doctor, "About my visit", appointment_id=appointment["id"])

        response = client.get(
            "/api/v1/messages",
            params={"appointment_id": appointment["id"]},
            headers=doctor["headers"]
        )
        assert [m["content"] for m in response.json()] == ["About my visit"]

        other = create_patient("other@example.com")
        response = client.get(
            "/api/v1/messages",
            params={"appointment_id": appointment["id"]},
            headers=other["headers"]
        )
        assert response.status_code == 403

    def test_contacts_with_unread_counts(self, client, patient, doctor, appointment):
        self._send(client, patient, doctor, "First")
        self._send(client, patient, doctor, "Second")

        response = client.get("/api/v1/messages/contacts", headers=doctor["headers"])
        assert response.status_code == 200
        assert response.json() == [{
            "user_id": patient["user"]["id"],
            "full_name": "Paula Smith",
            "role": "patient",
            "unread_count": 2,
        }]

        response = client.get("/api/v1/messages/contacts", headers=patient["headers"])
        assert response.json()[0]["unread_count"] == 0
        assert response.json()[0]["full_name"] == "Gregory House"
