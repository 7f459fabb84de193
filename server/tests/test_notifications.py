from datetime import datetime, timedelta, timezone

import pytest

from models.models import Activity, Registration, Complaint
from services import NotificationDispatcher as templates
from services.NotificationDispatcher import NotificationDispatcher

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)

ACTIVITY = Activity(
    id=3, title="Hiến máu nhân đạo", description="Blood drive", location="Hall A",
    startDate=NOW, endDate=NOW + timedelta(hours=5), points=15, status="open",
    createdById=40, createdAt=NOW,
)
REGISTRATION = Registration(id=8, userId=12, activityId=3, status="pending", createdAt=NOW)
COMPLAINT = Complaint(id=5, userId=12, activityId=3, description="Missing points", createdAt=NOW)


def test_registration_created_goes_to_owner():
    payload = templates.registration_created(ACTIVITY, REGISTRATION)
    assert payload == {
        "userId": 40,
        "title": "New Registration",
        "message": 'A student has registered for "Hiến máu nhân đạo"',
        "type": "registration",
        "referenceId": 8,
    }


@pytest.mark.parametrize("status,fragment", [
    ("approved", "has been approved"),
    ("rejected", "has been rejected"),
    ("completed", "awarded 15 points"),
])
def test_registration_updates_go_to_registrant(status, fragment):
    payload = templates.registration_updated(ACTIVITY, REGISTRATION, status)
    assert payload["userId"] == 12
    assert payload["type"] == "registration"
    assert payload["referenceId"] == 8
    assert fragment in payload["message"]


def test_completion_prefers_awarded_points():
    payload = templates.registration_updated(ACTIVITY, REGISTRATION, "completed", 7)
    assert payload["message"] == 'You have been awarded 7 points for "Hiến máu nhân đạo"'


def test_back_to_pending_sends_nothing():
    assert templates.registration_updated(ACTIVITY, REGISTRATION, "pending") is None


def test_complaint_templates():
    created = templates.complaint_created(ACTIVITY, COMPLAINT)
    assert created["userId"] == 40
    assert created["type"] == "complaint"

    answered = templates.complaint_updated(ACTIVITY, COMPLAINT, "rejected")
    assert answered["userId"] == 12
    assert answered["message"] == 'Your complaint about "Hiến máu nhân đạo" has been rejected'


@pytest.mark.anyio
async def test_emit_writes_unread_notification(db):
    notification = await NotificationDispatcher(db).emit(templates.complaint_created(ACTIVITY, COMPLAINT))
    assert notification.isRead is False
    assert notification.userId == 40
    assert [n.id for n in await db.get_notifications(40)] == [notification.id]


@pytest.mark.anyio
async def test_emit_swallows_storage_failure(db, monkeypatch):
    async def broken(data):
        raise RuntimeError("write failed")

    monkeypatch.setattr(db, "create_notification", broken)
    assert await NotificationDispatcher(db).emit(templates.complaint_created(ACTIVITY, COMPLAINT)) is None


@pytest.mark.anyio
async def test_emit_without_payload(db):
    assert await NotificationDispatcher(db).emit(None) is None
    assert db.collections.get("notifications", {}) == {}
