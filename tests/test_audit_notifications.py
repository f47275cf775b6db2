class TestAuditLog:

    def test_client_logs_action(self, client, patient, admin_headers):
        response = client.post(
            "/api/v1/audit/log",
            json={"resource_type": "appointment", "resource_id": "42", "action": "view"},
            headers=patient["headers"]
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}

        response = client.get(
            "/api/v1/audit/logs", params={"user_id": patient["user"]["id"]}, headers=admin_headers
        )
        assert response.status_code == 200
        logs = response.json()
        assert len(logs) == 1
        assert logs[0]["resource_type"] == "appointment"
        assert logs[0]["resource_id"] == "42"

    def test_log_requires_authentication(self, client):
        response = client.post(
            "/api/v1/audit/log",
            json={"resource_type": "appointment", "resource_id": "42", "action": "view"}
        )
        assert response.status_code in (401, 403)

    def test_only_admin_reads_logs(self, client, doctor):
        response = client.get("/api/v1/audit/logs", headers=doctor["headers"])
        assert response.status_code == 403

class TestNotifications:

    def test_mark_read(self, client, doctor, appointment):
        notifications = client.get("/api/v1/notifications", headers=doctor["headers"]).json()
        assert len(notifications) == 1
        assert notifications[0]["is_read"] is False
        assert notifications[0]["related_id"] == appointment["id"]

        response = client.patch(
            f"/api/v1/notifications/{notifications[0]['id']}/read", headers=doctor["headers"]
        )
        assert response.status_code == 200
        assert response.json()["is_read"] is True

        response = client.get(
            "/api/v1/notifications", params={"unread_only": True}, headers=doctor["headers"]
        )
        assert response.json() == []

    def test_cannot_read_others_notification(self, client, patient, doctor, appointment):
        notification_id = client.get("/api/v1/notifications", headers=doctor["headers"]).json()[0]["id"]

        response = client.patch(
            f"/api/v1/notifications/{notification_id}/read", headers=patient["headers"]
        )
        assert response.status_code == 404
