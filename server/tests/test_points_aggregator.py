from datetime import datetime, timezone, timedelta

import pytest

from models.models import Registration
from services.PointsAggregator import summarize, rank_for, month_of

CREATED = datetime(2023, 12, 1, tzinfo=timezone.utc)


def completed(reg_id, points, updated_at):
    return Registration(
        id=reg_id, userId=1, activityId=reg_id, status="completed",
        pointsAwarded=points, createdAt=CREATED, updatedAt=updated_at,
    )


def test_totals_and_monthly_buckets():
    registrations = [
        completed(1, 10, datetime(2024, 1, 5, tzinfo=timezone.utc)),
        completed(2, 20, datetime(2024, 1, 28, tzinfo=timezone.utc)),
        completed(3, 5, datetime(2024, 2, 2, tzinfo=timezone.utc)),
    ]

    summary = summarize(registrations)

    assert summary.totalPoints == 35
    assert [(m.month, m.points) for m in summary.monthlyPoints] == [("2024-01", 30), ("2024-02", 5)]
    assert summary.rank == "Yếu"
    assert summary.completedActivities == 3


def test_months_sorted_ascending_regardless_of_input_order():
    registrations = [
        completed(1, 7, datetime(2024, 11, 1, tzinfo=timezone.utc)),
        completed(2, 3, datetime(2023, 9, 1, tzinfo=timezone.utc)),
        completed(3, 4, datetime(2024, 2, 1, tzinfo=timezone.utc)),
    ]
    months = [m.month for m in summarize(registrations).monthlyPoints]
    assert months == ["2023-09", "2024-02", "2024-11"]


def test_null_points_counted_as_activity_only():
    registrations = [
        completed(1, None, datetime(2024, 3, 1, tzinfo=timezone.utc)),
        completed(2, 8, datetime(2024, 3, 2, tzinfo=timezone.utc)),
    ]

    summary = summarize(registrations)

    assert summary.totalPoints == 8
    assert [(m.month, m.points) for m in summary.monthlyPoints] == [("2024-03", 8)]
    assert summary.completedActivities == 2


def test_null_updated_at_counts_toward_total_but_not_months():
    registrations = [
        completed(1, 40, None),
        completed(2, 15, datetime(2024, 4, 9, tzinfo=timezone.utc)),
    ]

    summary = summarize(registrations)

    assert summary.totalPoints == 55
    assert [(m.month, m.points) for m in summary.monthlyPoints] == [("2024-04", 15)]
    assert summary.rank == "Trung bình"


def test_month_uses_utc():
    # 00:30 on Feb 1st at UTC+7 is still January in UTC
    ict = timezone(timedelta(hours=7))
    registration = completed(1, 5, datetime(2024, 2, 1, 0, 30, tzinfo=ict))
    assert month_of(registration) == "2024-01"


def test_empty_summary():
    summary = summarize([])
    assert summary.totalPoints == 0
    assert summary.monthlyPoints == []
    assert summary.completedActivities == 0
    assert summary.rank == "Yếu"


@pytest.mark.parametrize("total,rank", [
    (100, "Xuất sắc"),
    (90, "Xuất sắc"),
    (89, "Tốt"),
    (80, "Tốt"),
    (79, "Khá"),
    (65, "Khá"),
    (64, "Trung bình"),
    (50, "Trung bình"),
    (49, "Yếu"),
    (0, "Yếu"),
])
def test_rank_thresholds(total, rank):
    assert rank_for(total) == rank


@pytest.mark.anyio
async def test_summary_only_reads_completed_registrations(engine, db, student, other_student):
    def add(user, status, points, updated_at):
        db.add("registrations", {
            "userId": user.id, "activityId": len(db.collections.get("registrations", {})) + 1,
            "status": status, "pointsAwarded": points, "createdAt": CREATED, "updatedAt": updated_at,
        })

    may = datetime(2024, 5, 20, tzinfo=timezone.utc)
    add(student, "completed", 30, may)
    add(student, "completed", 35, may)
    add(student, "approved", None, may)
    add(other_student, "completed", 50, may)

    summary = await engine.points_summary(student)

    assert summary.totalPoints == 65
    assert summary.rank == "Khá"
    assert summary.completedActivities == 2
    assert [(m.month, m.points) for m in summary.monthlyPoints] == [("2024-05", 65)]
