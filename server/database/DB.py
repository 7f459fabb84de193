import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ReturnDocument, ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from config.config import MONGODB_URI, DATABASE_NAME
from models.models import (
    User, Activity, Registration, Complaint, Notification,
    ActivityFilter, RegistrationFilter, ComplaintFilter,
)
from .StorageGateway import StorageGateway, DuplicateEntry, utcnow

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("createdAt", DESCENDING), ("id", DESCENDING)]


class Database(StorageGateway):
    """MongoDB-backed storage gateway. Documents keep an integer `id`
    allocated from the `counters` collection; Mongo's `_id` never leaves
    this class."""

    def __init__(self, uri: str = MONGODB_URI, database_name: str = DATABASE_NAME):
        self.MONGO_URI = uri
        self.database_name = database_name
        self.client = None
        self.db = None

    def connect(self):
        self.client = AsyncIOMotorClient(self.MONGO_URI, tz_aware=True)
        self.db = self.client[self.database_name]
        logger.info("Connected to MongoDB database %s", self.database_name)

    async def check_connection(self) -> bool:
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning("MongoDB ping failed: %s; continuing, connection may still recover", e)
            return False

    async def ensure_indexes(self):
        await self.db.users.create_index("username", unique=True)
        await self.db.users.create_index("id", unique=True)
        await self.db.activities.create_index("id", unique=True)
        await self.db.activities.create_index([("createdById", ASCENDING), ("createdAt", DESCENDING)])
        await self.db.registrations.create_index("id", unique=True)
        await self.db.registrations.create_index(
            [("userId", ASCENDING), ("activityId", ASCENDING)], unique=True
        )
        await self.db.complaints.create_index("id", unique=True)
        await self.db.complaints.create_index("activityId")
        await self.db.notifications.create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])

    async def _next_id(self, collection_name: str) -> int:
        counter = await self.db.counters.find_one_and_update(
            {"_id": collection_name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]

    async def add(self, collection_name, data):
        document = dict(data)
        document["id"] = await self._next_id(collection_name)
        try:
            await self.db[collection_name].insert_one(document)
        except DuplicateKeyError as e:
            raise DuplicateEntry(str(e)) from e
        document.pop("_id", None)
        return document

    async def find_many(self, collection_name, query=None, sort=None):
        cursor = self.db[collection_name].find(query or {}, {"_id": 0})
        if sort:
            cursor = cursor.sort(sort)
        return [doc async for doc in cursor]

    async def find_one(self, collection_name, query):
        return await self.db[collection_name].find_one(query, {"_id": 0})

    async def update(self, collection_name, query, changes):
        try:
            return await self.db[collection_name].find_one_and_update(
                query,
                {"$set": changes},
                projection={"_id": 0},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise DuplicateEntry(str(e)) from e

    async def delete(self, collection_name, query) -> bool:
        result = await self.db[collection_name].delete_one(query)
        return result.deleted_count > 0

    # Users

    async def get_user(self, user_id: int) -> Optional[User]:
        doc = await self.find_one("users", {"id": user_id})
        return User(**doc) if doc else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        doc = await self.find_one("users", {"username": username})
        return User(**doc) if doc else None

    async def create_user(self, data: Dict[str, Any]) -> User:
        return User(**await self.add("users", data))

    async def update_user(self, user_id: int, patch: Dict[str, Any]) -> Optional[User]:
        doc = await self.update("users", {"id": user_id}, patch)
        return User(**doc) if doc else None

    # Activities

    async def get_activities(self, filters: Optional[ActivityFilter] = None) -> List[Activity]:
        query = filters.to_query() if filters else {}
        return [Activity(**doc) for doc in await self.find_many("activities", query, NEWEST_FIRST)]

    async def get_activity(self, activity_id: int) -> Optional[Activity]:
        doc = await self.find_one("activities", {"id": activity_id})
        return Activity(**doc) if doc else None

    async def create_activity(self, data: Dict[str, Any]) -> Activity:
        return Activity(**await self.add("activities", {**data, "createdAt": utcnow()}))

    async def update_activity(self, activity_id: int, patch: Dict[str, Any]) -> Optional[Activity]:
        doc = await self.update("activities", {"id": activity_id}, patch)
        return Activity(**doc) if doc else None

    async def delete_activity(self, activity_id: int) -> bool:
        return await self.delete("activities", {"id": activity_id})

    # Registrations

    async def get_registrations(self, filters: Optional[RegistrationFilter] = None) -> List[Registration]:
        query = filters.to_query() if filters else {}
        return [Registration(**doc) for doc in await self.find_many("registrations", query, NEWEST_FIRST)]

    async def get_registration(self, registration_id: int) -> Optional[Registration]:
        doc = await self.find_one("registrations", {"id": registration_id})
        return Registration(**doc) if doc else None

    async def create_registration(self, data: Dict[str, Any]) -> Registration:
        doc = await self.add("registrations", {**data, "createdAt": utcnow(), "updatedAt": None})
        return Registration(**doc)

    async def update_registration(self, registration_id: int, patch: Dict[str, Any]) -> Optional[Registration]:
        doc = await self.update("registrations", {"id": registration_id}, {**patch, "updatedAt": utcnow()})
        return Registration(**doc) if doc else None

    async def delete_registration(self, registration_id: int) -> bool:
        return await self.delete("registrations", {"id": registration_id})

    # Complaints

    async def get_complaints(self, filters: Optional[ComplaintFilter] = None) -> List[Complaint]:
        query = filters.to_query() if filters else {}
        return [Complaint(**doc) for doc in await self.find_many("complaints", query, NEWEST_FIRST)]

    async def get_complaint(self, complaint_id: int) -> Optional[Complaint]:
        doc = await self.find_one("complaints", {"id": complaint_id})
        return Complaint(**doc) if doc else None

    async def create_complaint(self, data: Dict[str, Any]) -> Complaint:
        doc = await self.add("complaints", {**data, "createdAt": utcnow(), "updatedAt": None})
        return Complaint(**doc)

    async def update_complaint(self, complaint_id: int, patch: Dict[str, Any]) -> Optional[Complaint]:
        doc = await self.update("complaints", {"id": complaint_id}, {**patch, "updatedAt": utcnow()})
        return Complaint(**doc) if doc else None

    # Notifications

    async def get_notifications(self, user_id: int) -> List[Notification]:
        docs = await self.find_many("notifications", {"userId": user_id}, NEWEST_FIRST)
        return [Notification(**doc) for doc in docs]

    async def create_notification(self, data: Dict[str, Any]) -> Notification:
        doc = await self.add("notifications", {"isRead": False, **data, "createdAt": utcnow()})
        return Notification(**doc)

    async def mark_notification_as_read(self, notification_id: int) -> Optional[Notification]:
        doc = await self.update("notifications", {"id": notification_id}, {"isRead": True})
        return Notification(**doc) if doc else None
