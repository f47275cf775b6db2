class TestApplication:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers

    def test_api_info(self, client):
        response = client.get("/api/v1/info")
        assert response.status_code == 200
        assert response.json()["name"] == "MediBook"
        assert response.json()["endpoints"]["appointments"] == "/api/v1/appointments"

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nowhere")
        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"
        assert response.json()["path"] == "/api/v1/nowhere"
