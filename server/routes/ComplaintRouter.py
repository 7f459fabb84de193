from fastapi import APIRouter, Depends
from typing import List

from models.models import Complaint
from models.requests import ComplaintCreate, ComplaintUpdate
from services.RulesEngine import RulesEngine
from .dependencies import get_actor, require_student, require_organization, get_rules_engine

router = APIRouter()


@router.get('', response_model=List[Complaint])
async def get_complaints(actor = Depends(get_actor), rules: RulesEngine = Depends(get_rules_engine)):
    return await rules.list_complaints(actor)


@router.post('', response_model=Complaint, status_code=201)
async def create_complaint(payload: ComplaintCreate, student = Depends(require_student), rules: RulesEngine = Depends(get_rules_engine)):
    """File a complaint about an activity (Student only)"""
    return await rules.create_complaint(student, payload)


@router.put('/{complaint_id}', response_model=Complaint)
async def respond_to_complaint(complaint_id: int, payload: ComplaintUpdate, org = Depends(require_organization), rules: RulesEngine = Depends(get_rules_engine)):
    """Resolve or reject a complaint with a response (owning organization only)"""
    return await rules.update_complaint(org, complaint_id, payload)
