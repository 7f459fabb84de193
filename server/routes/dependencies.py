"""
Session, role and rules-engine dependencies injected into the routers.
"""
from fastapi import Request, HTTPException, Depends

from config.config import REQUIRE_REGISTRATION_FOR_COMPLAINT
from database.StorageGateway import get_db
from helpers.PasswordHashingStrategy import PasswordHashingStrategy
from models.models import User, Actor, actor_from_user
from services.RulesEngine import RulesEngine

_password_strategy = PasswordHashingStrategy()


def get_rules_engine(db = Depends(get_db)) -> RulesEngine:
    """Dependency to build a rules engine over the app's storage gateway."""
    return RulesEngine(
        db,
        hasher=_password_strategy,
        require_registration_for_complaint=REQUIRE_REGISTRATION_FOR_COMPLAINT,
    )


async def get_current_user(request: Request, db = Depends(get_db)) -> User:
    """
    Dependency to get the currently authenticated user from session.
    The session only holds the user id; the record is reloaded so role
    and profile changes apply immediately.
    Raises HTTPException if user is not authenticated.
    """
    user_id = request.session.get('user_id')
    if user_id is None:
        raise HTTPException(status_code=401, detail="User not authenticated")
    user = await db.get_user(user_id)
    if user is None:
        request.session.clear()
        raise HTTPException(status_code=401, detail="User not authenticated")
    return user


async def get_actor(user: User = Depends(get_current_user)) -> Actor:
    return actor_from_user(user)


async def require_student(actor: Actor = Depends(get_actor)) -> Actor:
    """
    Dependency to require student role.
    Raises HTTPException if user is not a student.
    """
    if actor.role != "student":
        raise HTTPException(status_code=403, detail="Student access required")
    return actor


async def require_organization(actor: Actor = Depends(get_actor)) -> Actor:
    """
    Dependency to require organization role.
    Raises HTTPException if user is not an organization.
    """
    if actor.role != "organization":
        raise HTTPException(status_code=403, detail="Organization access required")
    return actor
