"""
Fixtures: an app on a fresh in-memory store, logged-in API sessions per
account, and a rules engine with seeded users for direct async tests.
"""
import os

os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SESSION_HTTPS_ONLY"] = "false"
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from main import app
from database.MemoryDB import MemoryDatabase
from helpers.PasswordHashingStrategy import PasswordHashingStrategy
from models.models import StudentActor, OrganizationActor
from services.RulesEngine import RulesEngine

STUDENT_PASSWORD = "student-pass"
ORG_PASSWORD = "org-pass-1"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def client():
    """Create a test client backed by a fresh in-memory store"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register an account; returns (client logged in as it, user json).
    Every returned client shares the same app and store and is closed on
    teardown."""
    sessions = []

    def _register(username, role="student", password=None):
        session = TestClient(app)
        sessions.append(session)
        payload = {
            "username": username,
            "password": password or (STUDENT_PASSWORD if role == "student" else ORG_PASSWORD),
            "fullName": f"{username.title()} Fullname",
            "email": f"{username}@example.edu",
            "role": role,
        }
        if role == "student":
            payload["studentId"] = f"SV-{username}"
        else:
            payload["orgName"] = f"{username.title()} Club"
        response = session.post("/api/register", json=payload)
        assert response.status_code == 201, response.text
        return session, response.json()

    yield _register

    for session in sessions:
        session.close()


@pytest.fixture
def activity_payload():
    def _payload(**overrides):
        start = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
        data = {
            "title": "Campus clean-up",
            "description": "Collect litter around the dormitories",
            "location": "Dormitory B",
            "startDate": start.isoformat(),
            "endDate": (start + timedelta(hours=4)).isoformat(),
            "points": 10,
            "status": "open",
        }
        data.update(overrides)
        return data
    return _payload


# Direct rules-engine fixtures

@pytest.fixture
def db():
    return MemoryDatabase()


@pytest.fixture
def engine(db):
    # a cheap scrypt cost keeps the account tests fast
    return RulesEngine(db, hasher=PasswordHashingStrategy(n=2 ** 4))


def _add_user(db, username, role):
    data = {
        "username": username,
        "password": "x",
        "fullName": username.title(),
        "email": f"{username}@example.edu",
        "role": role,
        "studentId": f"SV-{username}" if role == "student" else None,
        "orgName": f"{username.title()} Club" if role == "organization" else None,
    }
    return db.add("users", data)


@pytest.fixture
def student(db):
    user = _add_user(db, "an", "student")
    return StudentActor(id=user["id"], studentId=user["studentId"])


@pytest.fixture
def other_student(db):
    user = _add_user(db, "binh", "student")
    return StudentActor(id=user["id"], studentId=user["studentId"])


@pytest.fixture
def org(db):
    user = _add_user(db, "youth-union", "organization")
    return OrganizationActor(id=user["id"], orgName=user["orgName"])


@pytest.fixture
def other_org(db):
    user = _add_user(db, "sports-club", "organization")
    return OrganizationActor(id=user["id"], orgName=user["orgName"])


@pytest.fixture
def make_activity(db, org):
    def _make(owner=None, **overrides):
        start = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
        data = {
            "title": "Blood donation day",
            "description": "Volunteer at the donation tent",
            "location": "Hall A",
            "startDate": start,
            "endDate": start + timedelta(hours=6),
            "points": 15,
            "maxParticipants": None,
            "status": "open",
            "createdById": (owner or org).id,
            "createdAt": datetime.now(timezone.utc),
        }
        data.update(overrides)
        return db.add("activities", data)
    return _make
