"""
Family coordination data models.

Outputs of the multi-child fan-in step: shared activities, carpools,
protected family time, sibling parallel play and ranked recommendations.
"""

from typing import Any, Dict, List, Optional
from datetime import date as date_type

from pydantic import Field

from .child import ActivitySchedule, Location, RecordModel
from .schedule import Diagnostic, ScheduleResult, Severity


class ChildRef(RecordModel):
    id: str
    name: str = ""
    age: int


class TimeWindow(RecordModel):
    day: Optional[str] = None
    start_time: str
    end_time: str
    duration: Optional[int] = None


class Feasibility(RecordModel):
    score: float = Field(ge=0, le=1)
    factors: List[str] = Field(default_factory=list)


class SharedActivityBenefits(RecordModel):
    transportation_saving: int = Field(description="Minutes per week")
    social_benefit: bool = True
    cost_saving: float = Field(description="Fractional cost reduction")


class SharedActivity(RecordModel):
    """Same activity, same place, same day, for two or more age-compatible children."""
    type: str = "shared_activity"
    activity: str
    day: str
    location: Optional[Location] = None
    time_slot: TimeWindow
    children: List[ChildRef]
    benefits: SharedActivityBenefits
    feasibility: Feasibility


class CarpoolSavings(RecordModel):
    time_minutes: float = 0.0
    cost_reduction: float = 0.0
    stress_reduction: float = 0.0


class CarpoolOption(RecordModel):
    child_id: str
    child_name: str = ""
    activity: str
    location: Location
    schedule: ActivitySchedule
    carpool_score: float = Field(ge=0, le=1)
    estimated_savings: CarpoolSavings
    recommended_partners: List[str] = Field(default_factory=list)


class FamilyTimeSlot(RecordModel):
    """A window where every child in the family is free at once."""
    day: str
    start_time: str
    end_time: str
    duration: int
    available_children: List[str]
    type: str = Field(description="morning_routine, weekend_activity, dinner_time, evening_bonding, flexible")
    priority: float
    suggestions: List[str] = Field(default_factory=list)


class ParallelActivity(RecordModel):
    age_group: str
    activity: str
    children: List[ChildRef]
    time_slot: TimeWindow
    benefits: Dict[str, bool] = Field(default_factory=dict)
    requirements: List[str] = Field(default_factory=list)


class Recommendation(RecordModel):
    type: str = Field(description="transportation, balance, family_time, diversity")
    priority: Severity
    title: str
    description: str
    action: str
    data: Dict[str, Any] = Field(default_factory=dict)
    estimated_benefit: str = ""


class FamilyMetadata(RecordModel):
    family_size: int
    total_weekly_activities: int
    average_child_balance_score: int
    coordination_opportunities: int
    carpool_potential: int
    family_time_slots: int
    optimization_date: date_type


class FamilyOptimizationResult(RecordModel):
    """
    Built fresh per optimization call. References, but does not own,
    the per-child results it was computed from.
    """
    individual_schedules: Dict[str, ScheduleResult]
    coordinated_activities: List[SharedActivity] = Field(default_factory=list)
    carpool_options: List[CarpoolOption] = Field(default_factory=list)
    family_time_slots: List[FamilyTimeSlot] = Field(default_factory=list)
    parallel_activities: List[ParallelActivity] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    optimization_score: int = Field(ge=0, le=100)
    metadata: FamilyMetadata
    diagnostics: List[Diagnostic] = Field(default_factory=list)
