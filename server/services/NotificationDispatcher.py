"""
Turns a completed state transition into at most one notification.

The payload builders are pure; `NotificationDispatcher.emit` performs the
write. Nothing here deduplicates: a repeated transition produces another
notification.
"""
import logging
from typing import Any, Dict, Optional

from models.models import Activity, Registration, Complaint, Notification

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]


def registration_created(activity: Activity, registration: Registration) -> Payload:
    return {
        "userId": activity.createdById,
        "title": "New Registration",
        "message": f'A student has registered for "{activity.title}"',
        "type": "registration",
        "referenceId": registration.id,
    }


def registration_updated(activity: Activity, registration: Registration, new_status: str,
                         points_awarded: Optional[int] = None) -> Optional[Payload]:
    if new_status == "approved":
        message = f'Your registration for "{activity.title}" has been approved'
    elif new_status == "rejected":
        message = f'Your registration for "{activity.title}" has been rejected'
    elif new_status == "completed":
        points = points_awarded or activity.points
        message = f'You have been awarded {points} points for "{activity.title}"'
    else:
        return None

    return {
        "userId": registration.userId,
        "title": "Registration Update",
        "message": message,
        "type": "registration",
        "referenceId": registration.id,
    }


def complaint_created(activity: Activity, complaint: Complaint) -> Payload:
    return {
        "userId": activity.createdById,
        "title": "New Complaint",
        "message": f'A student has filed a complaint about "{activity.title}"',
        "type": "complaint",
        "referenceId": complaint.id,
    }


def complaint_updated(activity: Activity, complaint: Complaint, new_status: str) -> Payload:
    return {
        "userId": complaint.userId,
        "title": "Complaint Response",
        "message": f'Your complaint about "{activity.title}" has been {new_status}',
        "type": "complaint",
        "referenceId": complaint.id,
    }


class NotificationDispatcher:
    def __init__(self, db):
        self.db = db

    async def emit(self, payload: Optional[Payload]) -> Optional[Notification]:
        """Best-effort write: a failure is logged and never propagates,
        so the primary mutation that triggered it stays applied."""
        if payload is None:
            return None
        try:
            notification = await self.db.create_notification({**payload, "isRead": False})
        except Exception:
            logger.exception("Failed to create %s notification for user %s",
                             payload["type"], payload["userId"])
            return None
        logger.debug("Notification %s sent to user %s", notification.id, notification.userId)
        return notification
