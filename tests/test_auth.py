import pytest
from datetime import datetime, timedelta

from medibook.models.user import User

test_user_data = {
    "email": "test@example.com",
    "password": "TestPassword123",
    "role": "patient",
    "first_name": "Test",
    "last_name": "User"
}

test_login_data = {
    "email": "test@example.com",
    "password": "TestPassword123"
}

def _login_headers(client, login_data=test_login_data):
    login_response = client.post("/api/v1/auth/login", json=login_data)
    token = login_response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}

class TestRegistration:

    def test_register_patient(self, client):
        response = client.post("/api/v1/auth/register", json=test_user_data)
        assert response.status_code == 200

        data = response.json()
        assert data["email"] == test_user_data["email"]
        assert data["role"] == "patient"
        assert data["full_name"] == "Test User"
        assert "password" not in data
        assert "password_hash" not in data

    def test_register_creates_patient_profile(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)
        headers = _login_headers(client)

        response = client.get("/api/v1/patients/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["first_name"] == "Test"

    def test_register_doctor(self, client):
        doctor_data = {
            **test_user_data,
            "email": "doc@example.com",
            "role": "doctor",
            "specialization": "Dermatology",
            "license_number": "DERM-42",
        }
        response = client.post("/api/v1/auth/register", json=doctor_data)
        assert response.status_code == 200
        assert response.json()["role"] == "doctor"

    def test_register_doctor_requires_license(self, client):
        doctor_data = {**test_user_data, "role": "doctor", "specialization": "Dermatology"}
        response = client.post("/api/v1/auth/register", json=doctor_data)
        assert response.status_code == 422

    def test_register_duplicate_license(self, client):
        doctor_data = {
            **test_user_data,
            "role": "doctor",
            "specialization": "Dermatology",
            "license_number": "DERM-42",
        }
        client.post("/api/v1/auth/register", json=doctor_data)

        response = client.post(
            "/api/v1/auth/register",
            json={**doctor_data, "email": "other@example.com"}
        )
        assert response.status_code == 400
        assert "License number" in response.json()["detail"]

    def test_register_admin_rejected(self, client):
        response = client.post("/api/v1/auth/register", json={**test_user_data, "role": "admin"})
        assert response.status_code == 422

    def test_register_duplicate_email(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post("/api/v1/auth/register", json=test_user_data)
        assert response.status_code == 400
        assert "already registered" in response.json()["detail"]

    @pytest.mark.parametrize("password", ["weak", "allletters", "12345678"])
    def test_register_invalid_password(self, client, password):
        invalid_data = {**test_user_data, "password": password}

        response = client.post("/api/v1/auth/register", json=invalid_data)
        assert response.status_code == 422

    def test_register_rate_limited(self, client):
        for i in range(10):
            response = client.post(
                "/api/v1/auth/register",
                json={**test_user_data, "email": f"user{i}@example.com"}
            )
            assert response.status_code == 200

        response = client.post(
            "/api/v1/auth/register",
            json={**test_user_data, "email": "one-too-many@example.com"}
        )
        assert response.status_code == 429

class TestAuthentication:

    def test_login_success(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post("/api/v1/auth/login", json=test_login_data)
        assert response.status_code == 200

        data = response.json()
        assert "access_token" in data
        assert "refresh_token" in data
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == test_user_data["email"]

    def test_login_invalid_credentials(self, client):
        invalid_login = {
            "email": "nonexistent@example.com",
            "password": "wrongpassword"
        }

        response = client.post("/api/v1/auth/login", json=invalid_login)
        assert response.status_code == 401

    def test_login_wrong_password(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)

        wrong_login = {**test_login_data, "password": "wrongpassword"}

        response = client.post("/api/v1/auth/login", json=wrong_login)
        assert response.status_code == 401

    def test_account_locked_after_failed_logins(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)
        wrong_login = {**test_login_data, "password": "wrongpassword"}

        for _ in range(5):
            assert client.post("/api/v1/auth/login", json=wrong_login).status_code == 401

        response = client.post("/api/v1/auth/login", json=test_login_data)
        assert response.status_code == 423

    def test_expired_lockout_starts_fresh_count(self, client, db_session):
        client.post("/api/v1/auth/register", json=test_user_data)
        wrong_login = {**test_login_data, "password": "wrongpassword"}

        for _ in range(5):
            client.post("/api/v1/auth/login", json=wrong_login)

        user = db_session.query(User).filter(User.email == test_user_data["email"]).first()
        user.locked_until = datetime.utcnow() - timedelta(minutes=1)
        db_session.commit()

        # One more mistake after the lockout expired does not lock again
        assert client.post("/api/v1/auth/login", json=wrong_login).status_code == 401

        response = client.post("/api/v1/auth/login", json=test_login_data)
        assert response.status_code == 200

    def test_get_current_user(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)
        headers = _login_headers(client)

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["email"] == test_user_data["email"]

    def test_get_current_user_invalid_token(self, client):
        headers = {"Authorization": "Bearer invalid_token"}

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 401

    def test_refresh_token_rejected_as_access_token(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)
        refresh_token = client.post("/api/v1/auth/login", json=test_login_data).json()["refresh_token"]

        response = client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {refresh_token}"}
        )
        assert response.status_code == 401

    def test_refresh_token(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)
        refresh_token = client.post("/api/v1/auth/login", json=test_login_data).json()["refresh_token"]

        response = client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": refresh_token}
        )
        assert response.status_code == 200

        data = response.json()
        assert "access_token" in data
        assert data["refresh_token"] != refresh_token

    def test_refresh_token_single_use(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)
        refresh_token = client.post("/api/v1/auth/login", json=test_login_data).json()["refresh_token"]

        client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        response = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        assert response.status_code == 401

    def test_refresh_invalid_token(self, client):
        response = client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": "invalid_token"}
        )
        assert response.status_code == 401

    def test_logout(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)
        refresh_token = client.post("/api/v1/auth/login", json=test_login_data).json()["refresh_token"]

        response = client.post(
            "/api/v1/auth/logout",
            json={"refresh_token": refresh_token}
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Successfully logged out"

        response = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        assert response.status_code == 401

    def test_verify_token(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)
        headers = _login_headers(client)

        response = client.post("/api/v1/auth/verify-token", headers=headers)
        assert response.status_code == 200

        data = response.json()
        assert data["valid"] is True
        assert data["role"] == "patient"
        assert isinstance(data["user_id"], int)

class TestPasswords:

    def test_change_password(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)
        headers = _login_headers(client)

        password_data = {
            "current_password": "TestPassword123",
            "new_password": "NewPassword123"
        }

        response = client.post("/api/v1/auth/change-password", json=password_data, headers=headers)
        assert response.status_code == 200

        response = client.post(
            "/api/v1/auth/login",
            json={"email": test_user_data["email"], "password": "NewPassword123"}
        )
        assert response.status_code == 200

    def test_change_password_wrong_current(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)
        headers = _login_headers(client)

        password_data = {
            "current_password": "WrongPassword",
            "new_password": "NewPassword123"
        }

        response = client.post("/api/v1/auth/change-password", json=password_data, headers=headers)
        assert response.status_code == 400

    def test_forgot_password_unknown_email(self, client):
        response = client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})
        assert response.status_code == 200

    def test_reset_password(self, client, db_session):
        client.post("/api/v1/auth/register", json=test_user_data)
        client.post("/api/v1/auth/forgot-password", json={"email": test_user_data["email"]})

        user = db_session.query(User).filter(User.email == test_user_data["email"]).first()
        assert user.password_reset_token

        response = client.post(
            "/api/v1/auth/reset-password",
            json={"token": user.password_reset_token, "new_password": "ResetPassword123"}
        )
        assert response.status_code == 200

        response = client.post(
            "/api/v1/auth/login",
            json={"email": test_user_data["email"], "password": "ResetPassword123"}
        )
        assert response.status_code == 200

    def test_reset_password_invalid_token(self, client):
        response = client.post(
            "/api/v1/auth/reset-password",
            json={"token": "bogus", "new_password": "ResetPassword123"}
        )
        assert response.status_code == 400

class TestOAuth:

    def test_oauth_login_url(self, client, fake_redis):
        response = client.get("/api/v1/auth/oauth/google/login")
        assert response.status_code == 200
        assert response.json()["auth_url"].startswith("https://accounts.google.com/")
        assert len(fake_redis.keys("oauth_state:*")) == 1

    def test_oauth_unsupported_provider(self, client):
        response = client.get("/api/v1/auth/oauth/github/login")
        assert response.status_code == 400

    def test_oauth_callback_invalid_state(self, client):
        response = client.post(
            "/api/v1/auth/oauth/callback",
            json={"code": "abc", "state": "unknown"}
        )
        assert response.status_code == 400

class TestAdminUsers:

    def test_list_users_requires_admin(self, client, patient):
        response = client.get("/api/v1/auth/users", headers=patient["headers"])
        assert response.status_code == 403

    def test_list_users(self, client, patient, admin_headers):
        response = client.get("/api/v1/auth/users", headers=admin_headers)
        assert response.status_code == 200
        emails = [user["email"] for user in response.json()]
        assert "patient@example.com" in emails

    def test_deactivate_user(self, client, patient, admin_headers):
        user_id = patient["user"]["id"]

        response = client.patch(
            f"/api/v1/auth/users/{user_id}/status",
            params={"is_active": False},
            headers=admin_headers
        )
        assert response.status_code == 200

        response = client.get("/api/v1/auth/me", headers=patient["headers"])
        assert response.status_code == 401
