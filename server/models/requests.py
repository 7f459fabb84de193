"""Request bodies accepted by the API and the rules engine."""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from datetime import datetime

from .models import Role, ActivityStatus, RegistrationStatus, ComplaintStatus, as_utc


class UserRegister(BaseModel):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    fullName: str = Field(min_length=3)
    email: EmailStr
    role: Role
    studentId: Optional[str] = None
    orgName: Optional[str] = None

    @model_validator(mode="after")
    def check_role_fields(self):
        if self.role == "student" and not self.studentId:
            raise ValueError("studentId is required for students")
        if self.role == "organization" and not self.orgName:
            raise ValueError("orgName is required for organizations")
        return self


class LoginRequest(BaseModel):
    username: str
    password: str


class ProfileUpdate(BaseModel):
    fullName: str = Field(min_length=3)
    email: EmailStr
    studentId: Optional[str] = None
    orgName: Optional[str] = None


class PasswordChange(BaseModel):
    currentPassword: str = Field(min_length=6)
    newPassword: str = Field(min_length=6)
    confirmPassword: str = Field(min_length=6)

    @model_validator(mode="after")
    def check_confirmation(self):
        if self.newPassword != self.confirmPassword:
            raise ValueError("confirmPassword does not match newPassword")
        return self


class ActivityCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1)
    startDate: datetime
    endDate: datetime
    points: int = Field(gt=0)
    maxParticipants: Optional[int] = Field(default=None, gt=0)
    status: ActivityStatus = "draft"

    @field_validator("startDate", "endDate")
    @classmethod
    def normalize_dates(cls, value):
        return as_utc(value)

    @model_validator(mode="after")
    def check_dates(self):
        if self.endDate <= self.startDate:
            raise ValueError("End date must be after start date")
        return self


class ActivityUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    points: Optional[int] = Field(default=None, gt=0)
    maxParticipants: Optional[int] = Field(default=None, gt=0)
    status: Optional[ActivityStatus] = None

    @field_validator("startDate", "endDate")
    @classmethod
    def normalize_dates(cls, value):
        return as_utc(value)


class RegistrationCreate(BaseModel):
    activityId: int


class RegistrationUpdate(BaseModel):
    status: RegistrationStatus
    pointsAwarded: Optional[int] = Field(default=None, ge=0)


class ComplaintCreate(BaseModel):
    activityId: int
    description: str = Field(min_length=10)


class ComplaintUpdate(BaseModel):
    status: ComplaintStatus
    response: str = Field(min_length=1)
