import os

# Set testing environment before the application is imported
os.environ["TESTING"] = "1"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./test_clinic.db")

from datetime import date

import pytest
from fastapi.testclient import TestClient

from clinic.main import app
from clinic.core.database import Base, SessionLocal, engine, get_redis
from clinic.core.security import TokenAuthority
from clinic.repositories import UserRepository
from clinic.schemas.auth import PatientRegister
from clinic.schemas.doctor import DoctorCreate
from clinic.services.auth_service import AuthService
from clinic.services.doctor_service import DoctorService


class FakeRedis:
    """In-memory stand-in for the few Redis commands the rate limiter uses."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, seconds, value):
        self.data[key] = str(value)
        return True

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])

    def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0


# A Friday
BOOKING_DATE = date(2025, 1, 10)


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_redis():
    redis_client = FakeRedis()
    app.dependency_overrides[get_redis] = lambda: redis_client
    yield redis_client
    app.dependency_overrides.pop(get_redis, None)


@pytest.fixture
def client(test_db, fake_redis):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def authority(db):
    return TokenAuthority(UserRepository(db))


@pytest.fixture
def make_doctor(db):
    counter = {"n": 0}

    def _make_doctor(name="Dr. Alice Smith", specialty="Cardiology",
                     available_times=None, weekly_availability=None, email=None):
        counter["n"] += 1
        data = DoctorCreate(
            name=name,
            specialty=specialty,
            email=email or f"doctor{counter['n']}@clinic.com",
            password="doctorpass",
            available_times=available_times or ["09:00 AM", "10:00 AM"],
            weekly_availability=weekly_availability,
        )
        return DoctorService(db).create_doctor(data)

    return _make_doctor


@pytest.fixture
def make_patient(db):
    counter = {"n": 0}

    def _make_patient(name="Pat Jones"):
        counter["n"] += 1
        data = PatientRegister(
            name=name,
            email=f"patient{counter['n']}@clinic.com",
            password="patientpass",
            phone=f"555000{counter['n']:04d}",
        )
        return AuthService(db).register_patient(data)

    return _make_patient


@pytest.fixture
def make_admin(db):
    def _make_admin(username="root", password="adminpass"):
        return AuthService(db).create_admin(username, password, f"{username}@clinic.com")

    return _make_admin
