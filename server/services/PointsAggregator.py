from datetime import timezone
from typing import Dict, List

from pydantic import BaseModel

from models.models import Registration, RegistrationFilter

# (minimum total, rank), checked top-down
RANK_THRESHOLDS = [
    (90, "Xuất sắc"),
    (80, "Tốt"),
    (65, "Khá"),
    (50, "Trung bình"),
]
LOWEST_RANK = "Yếu"


class MonthlyPoints(BaseModel):
    month: str
    points: int


class PointsSummary(BaseModel):
    totalPoints: int
    rank: str
    monthlyPoints: List[MonthlyPoints]
    completedActivities: int


def rank_for(total_points: int) -> str:
    for minimum, rank in RANK_THRESHOLDS:
        if total_points >= minimum:
            return rank
    return LOWEST_RANK


def month_of(registration: Registration) -> str:
    updated_at = registration.updatedAt
    if updated_at.tzinfo is not None:
        updated_at = updated_at.astimezone(timezone.utc)
    return updated_at.strftime("%Y-%m")


def summarize(completed: List[Registration]) -> PointsSummary:
    """Aggregate completed registrations.

    A null pointsAwarded adds nothing anywhere but still counts as a
    completed activity. A null updatedAt keeps the points in the total but
    out of the monthly buckets.
    """
    total = 0
    buckets: Dict[str, int] = {}

    for registration in completed:
        if not registration.pointsAwarded:
            continue
        total += registration.pointsAwarded
        if registration.updatedAt is not None:
            month = month_of(registration)
            buckets[month] = buckets.get(month, 0) + registration.pointsAwarded

    return PointsSummary(
        totalPoints=total,
        rank=rank_for(total),
        monthlyPoints=[MonthlyPoints(month=m, points=p) for m, p in sorted(buckets.items())],
        completedActivities=len(completed),
    )


class PointsAggregator:
    def __init__(self, db):
        self.db = db

    async def summary_for(self, student_id: int) -> PointsSummary:
        completed = await self.db.get_registrations(
            RegistrationFilter(userId=student_id, status="completed")
        )
        return summarize(completed)
