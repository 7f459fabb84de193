from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from models.models import Registration
from models.requests import RegistrationCreate, RegistrationUpdate
from services.RulesEngine import RulesEngine
from .dependencies import get_actor, require_student, require_organization, get_rules_engine

router = APIRouter()


@router.get('', response_model=List[Registration])
async def get_registrations(
    activityId: Optional[int] = Query(None),
    actor = Depends(get_actor),
    rules: RulesEngine = Depends(get_rules_engine),
):
    """Students get their own registrations; organizations get those of their activities"""
    return await rules.list_registrations(actor, activityId)


@router.post('', response_model=Registration, status_code=201)
async def create_registration(payload: RegistrationCreate, student = Depends(require_student), rules: RulesEngine = Depends(get_rules_engine)):
    """Register for an open activity (Student only)"""
    return await rules.create_registration(student, payload)


@router.put('/{registration_id}', response_model=Registration)
async def update_registration(registration_id: int, payload: RegistrationUpdate, org = Depends(require_organization), rules: RulesEngine = Depends(get_rules_engine)):
    """Approve, reject or complete a registration (owning organization only)"""
    return await rules.update_registration(org, registration_id, payload)
