"""
Heuristic scoring for a child's week.

Reduces conflicts, overload and free-time variance into a single
0-100 balance score, and assembles the summary metadata.
"""

import statistics
from datetime import date as date_type
from typing import List

from models import AgeGroup, Conflict, ScheduleMetadata, WeeklySchedule

from .config import BalanceWeights, SchedulingRules


def free_time_std(schedule: WeeklySchedule) -> float:
    """Population standard deviation of free minutes per day."""
    per_day = [day.free_minutes for day in schedule.days.values()]
    if len(per_day) < 2:
        return 0.0
    return statistics.pstdev(per_day)


def count_overloaded_days(schedule: WeeklySchedule, rules: SchedulingRules) -> int:
    return sum(1 for day in schedule.days.values() if day.activity_count > rules.max_activities_per_day)


class BalanceScorer:
    """
    score = base - per_conflict*conflicts - per_overloaded_day*overloaded
            + bonus if the free time is spread evenly, clamped to [0, 100].
    """

    def __init__(self, weights: BalanceWeights):
        self.weights = weights

    def score(self, schedule: WeeklySchedule, conflicts: List[Conflict], rules: SchedulingRules) -> int:
        w = self.weights
        score = w.base
        score -= w.per_conflict * len(conflicts)
        score -= w.per_overloaded_day * count_overloaded_days(schedule, rules)
        if free_time_std(schedule) < w.even_free_time_max_std:
            score += w.even_free_time_bonus

        # Clamp result
        return int(max(0, min(100, score)))


def build_metadata(
    schedule: WeeklySchedule,
    conflicts: List[Conflict],
    suggestion_count: int,
    age_group: AgeGroup,
    rules: SchedulingRules,
    balance_score: int,
    reference_date: date_type
) -> ScheduleMetadata:
    days = list(schedule.days.values())
    total_activities = sum(day.activity_count for day in days)
    total_free = sum(day.free_minutes for day in days)

    return ScheduleMetadata(
        age_group=age_group,
        total_activities=total_activities,
        average_activities_per_day=round(total_activities / len(days), 1) if days else 0.0,
        total_free_time_hours=round(total_free / 60, 1),
        busy_days=sum(1 for day in days if day.activity_count >= rules.max_activities_per_day),
        overloaded_days=count_overloaded_days(schedule, rules),
        conflict_count=len(conflicts),
        suggestion_count=suggestion_count,
        balance_score=balance_score,
        generated_at=reference_date
    )
