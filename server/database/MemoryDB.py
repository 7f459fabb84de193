import copy
import itertools
import logging
from typing import Any, Dict, List, Optional

from models.models import (
    User, Activity, Registration, Complaint, Notification,
    ActivityFilter, RegistrationFilter, ComplaintFilter,
)
from .StorageGateway import StorageGateway, DuplicateEntry, utcnow

logger = logging.getLogger(__name__)

# collection -> fields that must be unique together
UNIQUE_KEYS = {
    "users": [("username",)],
    "registrations": [("userId", "activityId")],
}


class MemoryDatabase(StorageGateway):
    """In-process storage gateway with the same ordering and uniqueness
    rules as the MongoDB one. Nothing survives a restart."""

    def __init__(self):
        self.collections: Dict[str, Dict[int, Dict[str, Any]]] = {}
        self._counters: Dict[str, itertools.count] = {}

    def connect(self):
        logger.info("Using in-memory storage; data is not persisted")

    async def check_connection(self) -> bool:
        return True

    async def ensure_indexes(self):
        return None

    def _collection(self, name: str) -> Dict[int, Dict[str, Any]]:
        return self.collections.setdefault(name, {})

    def _check_unique(self, name: str, document: Dict[str, Any]):
        for fields in UNIQUE_KEYS.get(name, []):
            key = tuple(document.get(f) for f in fields)
            for other in self._collection(name).values():
                if other["id"] != document["id"] and tuple(other.get(f) for f in fields) == key:
                    raise DuplicateEntry(f"duplicate {name} entry for {dict(zip(fields, key))}")

    def add(self, name: str, data: Dict[str, Any]) -> Dict[str, Any]:
        counter = self._counters.setdefault(name, itertools.count(1))
        document = copy.deepcopy(data)
        document["id"] = next(counter)
        self._check_unique(name, document)
        self._collection(name)[document["id"]] = document
        return copy.deepcopy(document)

    def find_many(self, name: str, predicate=None) -> List[Dict[str, Any]]:
        documents = [d for d in self._collection(name).values() if predicate is None or predicate(d)]
        documents.sort(key=lambda d: (d["createdAt"], d["id"]), reverse=True)
        return copy.deepcopy(documents)

    def find_one(self, name: str, document_id: int) -> Optional[Dict[str, Any]]:
        document = self._collection(name).get(document_id)
        return copy.deepcopy(document) if document else None

    def update(self, name: str, document_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        current = self._collection(name).get(document_id)
        if current is None:
            return None
        updated = {**current, **copy.deepcopy(changes)}
        self._check_unique(name, updated)
        self._collection(name)[document_id] = updated
        return copy.deepcopy(updated)

    def delete(self, name: str, document_id: int) -> bool:
        return self._collection(name).pop(document_id, None) is not None

    @staticmethod
    def _filtered(filters):
        if filters is None:
            return None
        query = filters.to_query()
        return lambda doc: all(doc.get(k) == v for k, v in query.items())

    # Users

    async def get_user(self, user_id: int) -> Optional[User]:
        doc = self.find_one("users", user_id)
        return User(**doc) if doc else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        for doc in self._collection("users").values():
            if doc["username"] == username:
                return User(**doc)
        return None

    async def create_user(self, data: Dict[str, Any]) -> User:
        return User(**self.add("users", data))

    async def update_user(self, user_id: int, patch: Dict[str, Any]) -> Optional[User]:
        doc = self.update("users", user_id, patch)
        return User(**doc) if doc else None

    # Activities

    async def get_activities(self, filters: Optional[ActivityFilter] = None) -> List[Activity]:
        return [Activity(**doc) for doc in self.find_many("activities", self._filtered(filters))]

    async def get_activity(self, activity_id: int) -> Optional[Activity]:
        doc = self.find_one("activities", activity_id)
        return Activity(**doc) if doc else None

    async def create_activity(self, data: Dict[str, Any]) -> Activity:
        return Activity(**self.add("activities", {**data, "createdAt": utcnow()}))

    async def update_activity(self, activity_id: int, patch: Dict[str, Any]) -> Optional[Activity]:
        doc = self.update("activities", activity_id, patch)
        return Activity(**doc) if doc else None

    async def delete_activity(self, activity_id: int) -> bool:
        return self.delete("activities", activity_id)

    # Registrations

    async def get_registrations(self, filters: Optional[RegistrationFilter] = None) -> List[Registration]:
        return [Registration(**doc) for doc in self.find_many("registrations", self._filtered(filters))]

    async def get_registration(self, registration_id: int) -> Optional[Registration]:
        doc = self.find_one("registrations", registration_id)
        return Registration(**doc) if doc else None

    async def create_registration(self, data: Dict[str, Any]) -> Registration:
        return Registration(**self.add("registrations", {**data, "createdAt": utcnow(), "updatedAt": None}))

    async def update_registration(self, registration_id: int, patch: Dict[str, Any]) -> Optional[Registration]:
        doc = self.update("registrations", registration_id, {**patch, "updatedAt": utcnow()})
        return Registration(**doc) if doc else None

    async def delete_registration(self, registration_id: int) -> bool:
        return self.delete("registrations", registration_id)

    # Complaints

    async def get_complaints(self, filters: Optional[ComplaintFilter] = None) -> List[Complaint]:
        return [Complaint(**doc) for doc in self.find_many("complaints", self._filtered(filters))]

    async def get_complaint(self, complaint_id: int) -> Optional[Complaint]:
        doc = self.find_one("complaints", complaint_id)
        return Complaint(**doc) if doc else None

    async def create_complaint(self, data: Dict[str, Any]) -> Complaint:
        return Complaint(**self.add("complaints", {**data, "createdAt": utcnow(), "updatedAt": None}))

    async def update_complaint(self, complaint_id: int, patch: Dict[str, Any]) -> Optional[Complaint]:
        doc = self.update("complaints", complaint_id, {**patch, "updatedAt": utcnow()})
        return Complaint(**doc) if doc else None

    # Notifications

    async def get_notifications(self, user_id: int) -> List[Notification]:
        docs = self.find_many("notifications", lambda doc: doc["userId"] == user_id)
        return [Notification(**doc) for doc in docs]

    async def create_notification(self, data: Dict[str, Any]) -> Notification:
        return Notification(**self.add("notifications", {"isRead": False, **data, "createdAt": utcnow()}))

    async def mark_notification_as_read(self, notification_id: int) -> Optional[Notification]:
        doc = self.update("notifications", notification_id, {"isRead": True})
        return Notification(**doc) if doc else None
