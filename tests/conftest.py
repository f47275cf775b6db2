import os

# Must be set before the application is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

from datetime import date, timedelta

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from medibook.main import app
from medibook.core.database import get_db, get_redis, Base
from medibook.core.security import get_password_hash, UserRole
from medibook.models.user import User
from medibook.services.schedule_service import day_of_week

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

PATIENT_DATA = {
    "email": "patient@example.com",
    "password": "PatientPass123",
    "role": "patient",
    "first_name": "Paula",
    "last_name": "Smith",
    "date_of_birth": "1990-04-12",
}

DOCTOR_DATA = {
    "email": "doctor@example.com",
    "password": "DoctorPass123",
    "role": "doctor",
    "first_name": "Gregory",
    "last_name": "House",
    "specialization": "Cardiology",
    "license_number": "LIC-1001",
    "consultation_fee": 150,
    "office_address": "12 Main Street, Springfield",
}

@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def fake_redis():
    redis_client = fakeredis.FakeRedis(decode_responses=True)
    app.dependency_overrides[get_redis] = lambda: redis_client
    yield redis_client
    app.dependency_overrides.pop(get_redis, None)

@pytest.fixture
def client(test_db, fake_redis):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

@pytest.fixture
def db_session(test_db):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

def _login(client, email, password):
    response = client.post(
        "/api/v1/auth/login", json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    body = response.json()
    return {"Authorization": f"Bearer {body['access_token']}"}, body["user"]

@pytest.fixture
def create_patient(client):
    """Register a patient and return its headers, user and profile."""
    def _create(email=PATIENT_DATA["email"], **overrides):
        data = {**PATIENT_DATA, "email": email, **overrides}
        response = client.post("/api/v1/auth/register", json=data)
        assert response.status_code == 200, response.text

        headers, user = _login(client, email, data["password"])
        profile = client.get("/api/v1/patients/me", headers=headers).json()
        return {"headers": headers, "user": user, "profile": profile}

    return _create

@pytest.fixture
def create_doctor(client):
    """Register a doctor and return its headers, user and profile."""
    def _create(email=DOCTOR_DATA["email"], license_number=DOCTOR_DATA["license_number"], **overrides):
        data = {**DOCTOR_DATA, "email": email, "license_number": license_number, **overrides}
        response = client.post("/api/v1/auth/register", json=data)
        assert response.status_code == 200, response.text

        headers, user = _login(client, email, data["password"])
        profile = client.get("/api/v1/doctors/me", headers=headers).json()
        return {"headers": headers, "user": user, "profile": profile}

    return _create

@pytest.fixture
def patient(create_patient):
    return create_patient()

@pytest.fixture
def doctor(create_doctor):
    return create_doctor()

@pytest.fixture
def admin_headers(client, db_session):
    admin = User(
        email="admin@example.com",
        password_hash=get_password_hash("AdminPass123"),
        role=UserRole.ADMIN,
        is_active=True,
        is_verified=True,
    )
    db_session.add(admin)
    db_session.commit()

    headers, _ = _login(client, "admin@example.com", "AdminPass123")
    return headers

@pytest.fixture
def booking_date():
    return date.today() + timedelta(days=7)

@pytest.fixture
def open_slots(client, doctor, booking_date):
    """09:00, 10:00 and 11:00 on the weekday of ``booking_date``."""
    response = client.post(
        "/api/v1/time-slots/recurring",
        json={
            "day_of_week": day_of_week(booking_date),
            "start_time": "09:00",
            "end_time": "12:00",
            "interval_minutes": 60,
        },
        headers=doctor["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()

@pytest.fixture
def book(client, doctor, booking_date):
    def _book(patient_headers, time_slot="09:00", consultation_type="video", on_date=None):
        return client.post(
            "/api/v1/appointments",
            json={
                "doctor_id": doctor["profile"]["id"],
                "appointment_date": (on_date or booking_date).isoformat(),
                "time_slot": time_slot,
                "consultation_type": consultation_type,
                "reason": "Chest pain after exercise",
            },
            headers=patient_headers,
        )

    return _book

@pytest.fixture
def appointment(patient, open_slots, book):
    response = book(patient["headers"])
    assert response.status_code == 201, response.text
    return response.json()
