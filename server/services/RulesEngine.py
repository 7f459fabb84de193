"""
Authorization, state and capacity checks applied before every mutation.

The engine is stateless: each call receives the acting user explicitly and
talks to whatever storage gateway it was built with. Each mutation performs
one entity write followed by at most one best-effort notification write.
"""
import logging
from typing import List, Optional

from helpers.PasswordHashingStrategy import PasswordHashingStrategy
from database.StorageGateway import StorageGateway, DuplicateEntry
from models.models import (
    User, Activity, Registration, Complaint, Notification,
    Actor, StudentActor, OrganizationActor,
    ActivityFilter, RegistrationFilter, ComplaintFilter,
)
from models.requests import (
    UserRegister, ProfileUpdate, PasswordChange,
    ActivityCreate, ActivityUpdate,
    RegistrationCreate, RegistrationUpdate,
    ComplaintCreate, ComplaintUpdate,
)
from . import NotificationDispatcher as templates
from .NotificationDispatcher import NotificationDispatcher
from .PointsAggregator import PointsAggregator, PointsSummary
from .exceptions import NotFound, Forbidden, ValidationError, Conflict, InvalidState, CapacityExceeded

logger = logging.getLogger(__name__)


class RulesEngine:
    def __init__(self, db: StorageGateway, hasher: Optional[PasswordHashingStrategy] = None,
                 require_registration_for_complaint: bool = False):
        self.db = db
        self.hasher = hasher or PasswordHashingStrategy()
        self.require_registration_for_complaint = require_registration_for_complaint
        self.notifications = NotificationDispatcher(db)
        self.points = PointsAggregator(db)

    # Guards

    @staticmethod
    def _as_organization(actor: Actor, action: str) -> OrganizationActor:
        if not isinstance(actor, OrganizationActor):
            logger.warning("User %s (%s) refused: %s", actor.id, actor.role, action)
            raise Forbidden(f"Only organizations can {action}")
        return actor

    @staticmethod
    def _as_student(actor: Actor, action: str) -> StudentActor:
        if not isinstance(actor, StudentActor):
            logger.warning("User %s (%s) refused: %s", actor.id, actor.role, action)
            raise Forbidden(f"Only students can {action}")
        return actor

    async def _get_activity(self, activity_id: int) -> Activity:
        activity = await self.db.get_activity(activity_id)
        if activity is None:
            raise NotFound("Activity not found")
        return activity

    async def _owned_parent_activity(self, actor: OrganizationActor, activity_id: int, action: str) -> Activity:
        """Parent activity of a registration or complaint; a missing parent
        is reported the same way as someone else's."""
        activity = await self.db.get_activity(activity_id)
        if activity is None or activity.createdById != actor.id:
            logger.warning("Organization %s refused: %s on activity %s", actor.id, action, activity_id)
            raise Forbidden(f"Unauthorized: You can only {action} for your own activities")
        return activity

    # Accounts

    async def register_user(self, data: UserRegister) -> User:
        if await self.db.get_user_by_username(data.username):
            raise Conflict("Username already exists")

        user = {
            "username": data.username,
            "password": self.hasher.hash(data.password),
            "fullName": data.fullName,
            "email": data.email,
            "role": data.role,
            "studentId": data.studentId if data.role == "student" else None,
            "orgName": data.orgName if data.role == "organization" else None,
        }
        try:
            created = await self.db.create_user(user)
        except DuplicateEntry:
            raise Conflict("Username already exists")
        logger.info("Registered %s %s (id=%s)", created.role, created.username, created.id)
        return created

    async def authenticate(self, username: str, password: str) -> Optional[User]:
        user = await self.db.get_user_by_username(username)
        if user is None or not self.hasher.verify(password, user.password):
            return None
        return user

    async def update_profile(self, actor: Actor, data: ProfileUpdate) -> User:
        patch = {"fullName": data.fullName, "email": data.email}
        if isinstance(actor, StudentActor):
            if data.orgName:
                raise ValidationError("Students cannot set orgName")
            if data.studentId:
                patch["studentId"] = data.studentId
        else:
            if data.studentId:
                raise ValidationError("Organizations cannot set studentId")
            if data.orgName:
                patch["orgName"] = data.orgName

        user = await self.db.update_user(actor.id, patch)
        if user is None:
            raise NotFound("User not found")
        return user

    async def change_password(self, actor: Actor, data: PasswordChange) -> None:
        user = await self.db.get_user(actor.id)
        if user is None:
            raise NotFound("User not found")
        if not self.hasher.verify(data.currentPassword, user.password):
            raise ValidationError("Current password is incorrect")
        await self.db.update_user(actor.id, {"password": self.hasher.hash(data.newPassword)})
        logger.info("User %s changed password", actor.id)

    # Activities

    async def list_activities(self, filters: Optional[ActivityFilter] = None) -> List[Activity]:
        return await self.db.get_activities(filters)

    async def get_activity(self, activity_id: int) -> Activity:
        return await self._get_activity(activity_id)

    async def create_activity(self, actor: Actor, data: ActivityCreate) -> Activity:
        org = self._as_organization(actor, "create activities")
        activity = await self.db.create_activity({**data.model_dump(), "createdById": org.id})
        logger.info("Organization %s created activity %s", org.id, activity.id)
        return activity

    async def _owned_activity(self, actor: Actor, activity_id: int, action: str) -> Activity:
        org = self._as_organization(actor, f"{action} activities")
        activity = await self._get_activity(activity_id)
        if activity.createdById != org.id:
            logger.warning("Organization %s refused: %s activity %s", org.id, action, activity_id)
            raise Forbidden(f"Unauthorized: You can only {action} your own activities")
        return activity

    async def update_activity(self, actor: Actor, activity_id: int, data: ActivityUpdate) -> Activity:
        activity = await self._owned_activity(actor, activity_id, "update")

        patch = data.model_dump(exclude_none=True)
        start = patch.get("startDate", activity.startDate)
        end = patch.get("endDate", activity.endDate)
        if end <= start:
            raise ValidationError("End date must be after start date")

        updated = await self.db.update_activity(activity_id, patch)
        if updated is None:
            raise NotFound("Activity not found")
        logger.info("Organization %s updated activity %s", actor.id, activity_id)
        return updated

    async def delete_activity(self, actor: Actor, activity_id: int) -> None:
        await self._owned_activity(actor, activity_id, "delete")
        if not await self.db.delete_activity(activity_id):
            raise NotFound("Activity not found")
        logger.info("Organization %s deleted activity %s", actor.id, activity_id)

    # Registrations

    async def list_registrations(self, actor: Actor, activity_id: Optional[int] = None) -> List[Registration]:
        if isinstance(actor, StudentActor):
            return await self.db.get_registrations(RegistrationFilter(userId=actor.id))

        if activity_id is not None:
            await self._owned_parent_activity(actor, activity_id, "view registrations")
            return await self.db.get_registrations(RegistrationFilter(activityId=activity_id))

        registrations = []
        for activity in await self.db.get_activities(ActivityFilter(createdById=actor.id)):
            registrations.extend(await self.db.get_registrations(RegistrationFilter(activityId=activity.id)))
        return registrations

    async def create_registration(self, actor: Actor, data: RegistrationCreate) -> Registration:
        student = self._as_student(actor, "register for activities")
        activity = await self._get_activity(data.activityId)

        existing = await self.db.get_registrations(
            RegistrationFilter(userId=student.id, activityId=activity.id)
        )
        if existing:
            raise Conflict("You have already registered for this activity")

        if activity.status != "open":
            raise InvalidState("This activity is not open for registration")

        if activity.maxParticipants:
            current = await self.db.get_registrations(RegistrationFilter(activityId=activity.id))
            if len(current) >= activity.maxParticipants:
                raise CapacityExceeded("This activity is already full")

        try:
            registration = await self.db.create_registration({
                "userId": student.id,
                "activityId": activity.id,
                "status": "pending",
                "pointsAwarded": None,
            })
        except DuplicateEntry:
            raise Conflict("You have already registered for this activity")

        logger.info("Student %s registered for activity %s", student.id, activity.id)
        await self.notifications.emit(templates.registration_created(activity, registration))
        return registration

    async def update_registration(self, actor: Actor, registration_id: int,
                                  data: RegistrationUpdate) -> Registration:
        org = self._as_organization(actor, "update registrations")
        registration = await self.db.get_registration(registration_id)
        if registration is None:
            raise NotFound("Registration not found")
        activity = await self._owned_parent_activity(org, registration.activityId, "update registrations")

        patch = {"status": data.status}
        if data.pointsAwarded is not None:
            if data.status != "completed":
                raise ValidationError("pointsAwarded can only be set when completing a registration")
            if registration.pointsAwarded is not None and registration.pointsAwarded != data.pointsAwarded:
                raise InvalidState("Points have already been awarded for this registration")
            patch["pointsAwarded"] = data.pointsAwarded

        updated = await self.db.update_registration(registration_id, patch)
        if updated is None:
            raise NotFound("Registration not found")

        logger.info("Registration %s: %s -> %s by organization %s",
                    registration_id, registration.status, data.status, org.id)

        if await self.db.get_user(registration.userId) is not None:
            await self.notifications.emit(
                templates.registration_updated(activity, registration, data.status, data.pointsAwarded)
            )
        return updated

    # Complaints

    async def list_complaints(self, actor: Actor) -> List[Complaint]:
        if isinstance(actor, StudentActor):
            return await self.db.get_complaints(ComplaintFilter(userId=actor.id))

        complaints = []
        for activity in await self.db.get_activities(ActivityFilter(createdById=actor.id)):
            complaints.extend(await self.db.get_complaints(ComplaintFilter(activityId=activity.id)))
        return complaints

    async def create_complaint(self, actor: Actor, data: ComplaintCreate) -> Complaint:
        student = self._as_student(actor, "file complaints")
        activity = await self._get_activity(data.activityId)

        if self.require_registration_for_complaint:
            held = await self.db.get_registrations(
                RegistrationFilter(userId=student.id, activityId=activity.id)
            )
            if not held:
                raise InvalidState("You can only file complaints about activities you registered for")

        complaint = await self.db.create_complaint({
            "userId": student.id,
            "activityId": activity.id,
            "description": data.description,
            "status": "pending",
            "response": None,
        })

        logger.info("Student %s filed complaint %s on activity %s", student.id, complaint.id, activity.id)
        await self.notifications.emit(templates.complaint_created(activity, complaint))
        return complaint

    async def update_complaint(self, actor: Actor, complaint_id: int, data: ComplaintUpdate) -> Complaint:
        org = self._as_organization(actor, "respond to complaints")
        complaint = await self.db.get_complaint(complaint_id)
        if complaint is None:
            raise NotFound("Complaint not found")
        activity = await self._owned_parent_activity(org, complaint.activityId, "respond to complaints")

        if not data.response.strip():
            raise ValidationError("A response is required")

        updated = await self.db.update_complaint(complaint_id, {"status": data.status, "response": data.response})
        if updated is None:
            raise NotFound("Complaint not found")

        logger.info("Complaint %s: %s -> %s by organization %s",
                    complaint_id, complaint.status, data.status, org.id)
        await self.notifications.emit(templates.complaint_updated(activity, complaint, data.status))
        return updated

    # Notifications

    async def list_notifications(self, actor: Actor) -> List[Notification]:
        return await self.db.get_notifications(actor.id)

    async def mark_notification_read(self, actor: Actor, notification_id: int) -> Notification:
        own = await self.db.get_notifications(actor.id)
        if not any(n.id == notification_id for n in own):
            raise NotFound("Notification not found")
        notification = await self.db.mark_notification_as_read(notification_id)
        if notification is None:
            raise NotFound("Notification not found")
        return notification

    # Points

    async def points_summary(self, actor: Actor) -> PointsSummary:
        student = self._as_student(actor, "view a points summary")
        return await self.points.summary_for(student.id)
