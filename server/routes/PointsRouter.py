from fastapi import APIRouter, Depends

from services.PointsAggregator import PointsSummary
from services.RulesEngine import RulesEngine
from .dependencies import require_student, get_rules_engine

router = APIRouter()


@router.get('/summary', response_model=PointsSummary)
async def points_summary(student = Depends(require_student), rules: RulesEngine = Depends(get_rules_engine)):
    """Total points, monthly breakdown and rank for the logged-in student"""
    return await rules.points_summary(student)
