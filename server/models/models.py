from typing import Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime, timezone

Role = Literal["student", "organization"]
ActivityStatus = Literal["draft", "open", "closed", "completed"]
RegistrationStatus = Literal["pending", "approved", "rejected", "completed"]
ComplaintStatus = Literal["pending", "resolved", "rejected"]
NotificationType = Literal["activity", "registration", "complaint", "system"]


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Dates without a timezone are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class User(BaseModel):
    id: int
    username: str
    password: str
    fullName: str
    email: str
    role: Role = "student"
    studentId: Optional[str] = None
    orgName: Optional[str] = None

    @model_validator(mode="after")
    def check_role_fields(self):
        if self.role == "student" and not self.studentId:
            raise ValueError("studentId is required for students")
        if self.role == "organization" and not self.orgName:
            raise ValueError("orgName is required for organizations")
        return self

    def public(self) -> Dict[str, Any]:
        """JSON-ready view without the credential hash."""
        return self.model_dump(mode="json", exclude={"password"})


class Activity(BaseModel):
    id: int
    title: str
    description: str
    location: str
    startDate: datetime
    endDate: datetime
    points: int = Field(gt=0)
    maxParticipants: Optional[int] = Field(default=None, gt=0)
    status: ActivityStatus = "draft"
    createdById: int
    createdAt: datetime

    @field_validator("startDate", "endDate", "createdAt")
    @classmethod
    def normalize_dates(cls, value):
        return as_utc(value)

    @model_validator(mode="after")
    def check_dates(self):
        if self.endDate <= self.startDate:
            raise ValueError("endDate must be after startDate")
        return self


class Registration(BaseModel):
    id: int
    userId: int
    activityId: int
    status: RegistrationStatus = "pending"
    pointsAwarded: Optional[int] = None
    createdAt: datetime
    updatedAt: Optional[datetime] = None


class Complaint(BaseModel):
    id: int
    userId: int
    activityId: int
    description: str
    status: ComplaintStatus = "pending"
    response: Optional[str] = None
    createdAt: datetime
    updatedAt: Optional[datetime] = None


class Notification(BaseModel):
    id: int
    userId: int
    title: str
    message: str
    type: NotificationType
    referenceId: Optional[int] = None
    isRead: bool = False
    createdAt: datetime


# Actors: who is performing an operation. The rules engine dispatches on
# the concrete class rather than comparing role strings.

class StudentActor(BaseModel):
    role: Literal["student"] = "student"
    id: int
    studentId: str


class OrganizationActor(BaseModel):
    role: Literal["organization"] = "organization"
    id: int
    orgName: str


Actor = Union[StudentActor, OrganizationActor]


def actor_from_user(user: User) -> Actor:
    if user.role == "organization":
        return OrganizationActor(id=user.id, orgName=user.orgName)
    return StudentActor(id=user.id, studentId=user.studentId)


# Query filters. Every set field is an exact-equality condition.

class _Filter(BaseModel):
    def to_query(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)



class ActivityFilter(_Filter):
    createdById: Optional[int] = None
    status: Optional[ActivityStatus] = None


class RegistrationFilter(_Filter):
    userId: Optional[int] = None
    activityId: Optional[int] = None
    status: Optional[RegistrationStatus] = None


class ComplaintFilter(_Filter):
    userId: Optional[int] = None
    activityId: Optional[int] = None
    status: Optional[ComplaintStatus] = None
