from fastapi import APIRouter, Depends
from typing import List

from models.models import Notification
from services.RulesEngine import RulesEngine
from .dependencies import get_actor, get_rules_engine

router = APIRouter()


@router.get('', response_model=List[Notification])
async def get_notifications(actor = Depends(get_actor), rules: RulesEngine = Depends(get_rules_engine)):
    return await rules.list_notifications(actor)


@router.put('/{notification_id}/read', response_model=Notification)
async def mark_as_read(notification_id: int, actor = Depends(get_actor), rules: RulesEngine = Depends(get_rules_engine)):
    return await rules.mark_notification_read(actor, notification_id)
