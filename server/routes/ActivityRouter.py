from fastapi import APIRouter, Depends, Query, Response
from typing import List, Optional

from models.models import Activity, ActivityFilter, ActivityStatus
from models.requests import ActivityCreate, ActivityUpdate
from services.RulesEngine import RulesEngine
from .dependencies import require_organization, get_rules_engine

router = APIRouter()


@router.get('', response_model=List[Activity])
async def get_activities(
    status: Optional[ActivityStatus] = Query(None),
    createdById: Optional[int] = Query(None),
    rules: RulesEngine = Depends(get_rules_engine),
):
    """List activities, newest first, optionally filtered by status or owner"""
    return await rules.list_activities(ActivityFilter(status=status, createdById=createdById))


@router.get('/{activity_id}', response_model=Activity)
async def get_activity(activity_id: int, rules: RulesEngine = Depends(get_rules_engine)):
    return await rules.get_activity(activity_id)


@router.post('', response_model=Activity, status_code=201)
async def create_activity(payload: ActivityCreate, org = Depends(require_organization), rules: RulesEngine = Depends(get_rules_engine)):
    """Create a new activity (Organization only)"""
    return await rules.create_activity(org, payload)


@router.put('/{activity_id}', response_model=Activity)
async def update_activity(activity_id: int, payload: ActivityUpdate, org = Depends(require_organization), rules: RulesEngine = Depends(get_rules_engine)):
    """Update an activity (owning organization only)"""
    return await rules.update_activity(org, activity_id, payload)


@router.delete('/{activity_id}', status_code=204)
async def delete_activity(activity_id: int, org = Depends(require_organization), rules: RulesEngine = Depends(get_rules_engine)):
    """Delete an activity (owning organization only)"""
    await rules.delete_activity(org, activity_id)
    return Response(status_code=204)
