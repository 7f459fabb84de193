from .models import (
    User, Activity, Registration, Complaint, Notification,
    StudentActor, OrganizationActor, Actor, actor_from_user,
    ActivityFilter, RegistrationFilter, ComplaintFilter,
)

__all__ = [
    'User',
    'Activity',
    'Registration',
    'Complaint',
    'Notification',
    'StudentActor',
    'OrganizationActor',
    'Actor',
    'actor_from_user',
    'ActivityFilter',
    'RegistrationFilter',
    'ComplaintFilter',
]
