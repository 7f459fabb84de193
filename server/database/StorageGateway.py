"""
Persistence contract consumed by the rules engine.

Implementations take plain dicts for writes, return domain models for
reads, and must enforce uniqueness of users.username and of
registrations.(userId, activityId); the rules engine's duplicate check
alone cannot stop two concurrent registrations from both passing.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Request

from models.models import (
    User, Activity, Registration, Complaint, Notification,
    ActivityFilter, RegistrationFilter, ComplaintFilter,
)


class DuplicateEntry(Exception):
    """A write violated a uniqueness constraint."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_db(request: Request):
    """Dependency to get the storage gateway from app state"""
    return request.app.state.db


class StorageGateway(ABC):

    # Users
    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    async def create_user(self, data: Dict[str, Any]) -> User: ...

    @abstractmethod
    async def update_user(self, user_id: int, patch: Dict[str, Any]) -> Optional[User]: ...

    # Activities
    @abstractmethod
    async def get_activities(self, filters: Optional[ActivityFilter] = None) -> List[Activity]: ...

    @abstractmethod
    async def get_activity(self, activity_id: int) -> Optional[Activity]: ...

    @abstractmethod
    async def create_activity(self, data: Dict[str, Any]) -> Activity: ...

    @abstractmethod
    async def update_activity(self, activity_id: int, patch: Dict[str, Any]) -> Optional[Activity]: ...

    @abstractmethod
    async def delete_activity(self, activity_id: int) -> bool: ...

    # Registrations
    @abstractmethod
    async def get_registrations(self, filters: Optional[RegistrationFilter] = None) -> List[Registration]: ...

    @abstractmethod
    async def get_registration(self, registration_id: int) -> Optional[Registration]: ...

    @abstractmethod
    async def create_registration(self, data: Dict[str, Any]) -> Registration: ...

    @abstractmethod
    async def update_registration(self, registration_id: int, patch: Dict[str, Any]) -> Optional[Registration]:
        """Apply patch and stamp updatedAt with the current time."""

    @abstractmethod
    async def delete_registration(self, registration_id: int) -> bool: ...

    # Complaints
    @abstractmethod
    async def get_complaints(self, filters: Optional[ComplaintFilter] = None) -> List[Complaint]: ...

    @abstractmethod
    async def get_complaint(self, complaint_id: int) -> Optional[Complaint]: ...

    @abstractmethod
    async def create_complaint(self, data: Dict[str, Any]) -> Complaint: ...

    @abstractmethod
    async def update_complaint(self, complaint_id: int, patch: Dict[str, Any]) -> Optional[Complaint]:
        """Apply patch and stamp updatedAt with the current time."""

    # Notifications
    @abstractmethod
    async def get_notifications(self, user_id: int) -> List[Notification]: ...

    @abstractmethod
    async def create_notification(self, data: Dict[str, Any]) -> Notification: ...

    @abstractmethod
    async def mark_notification_as_read(self, notification_id: int) -> Optional[Notification]: ...
