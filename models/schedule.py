"""
Schedule data models for the Family Schedule Engine.

This module defines the 'Output' of the per-child engine:
Events placed on a day, the derived free time, and the descriptive
records (conflicts, suggestions, diagnostics) produced alongside them.
"""

import bisect
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional
from datetime import date as date_type

from pydantic import Field, computed_field, model_validator

from .child import Location, Contact, RecordModel, Responsibility


class EventType(str, Enum):
    SCHOOL = "school"
    ROUTINE = "routine"
    MEAL = "meal"
    ACTIVITY = "activity"


class Priority(IntEnum):
    """Lower value = harder commitment."""
    ESSENTIAL = 1   # School, meals, sleep
    HIGH = 2        # Medical appointments, mandatory activities
    MEDIUM = 3      # Regular activities, sports
    LOW = 4         # Optional activities, playdates
    FLEXIBLE = 5    # Can be moved easily


class AgeGroup(str, Enum):
    INFANT = "infant"
    TODDLER = "toddler"
    PRESCHOOL = "preschool"
    SCHOOL = "school"


def format_minutes(minutes: int) -> str:
    """Render minutes after midnight as HH:MM (hours may pass 24)."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class EventMetadata(RecordModel):
    category: Optional[str] = None
    routine_kind: Optional[str] = Field(default=None, description="wake_up, breakfast, nap, ...")
    is_routine: bool = False
    is_school: bool = False
    is_recurring: bool = False
    travel_time: Optional[int] = None
    equipment: List[str] = Field(default_factory=list)
    preparation: List[str] = Field(default_factory=list)
    contact: Optional[Contact] = None


class Event(RecordModel):
    """
    A single timed entry on a child's day.
    Times are stored as minutes after midnight; HH:MM strings are derived.
    """
    id: str
    title: str
    type: EventType
    start_minute: int = Field(ge=0)
    end_minute: int
    priority: Priority = Priority.MEDIUM
    is_fixed: bool = Field(default=False, description="School/routine/meal events cannot be moved")
    child_id: Optional[str] = None
    responsibility: Optional[Responsibility] = None
    location: Optional[Location] = None
    metadata: EventMetadata = Field(default_factory=EventMetadata)

    @model_validator(mode='after')
    def validate_interval(self):
        if self.start_minute >= self.end_minute:
            raise ValueError("Event end must be strictly after start")
        return self

    @computed_field
    @property
    def start_time(self) -> str:
        return format_minutes(self.start_minute)

    @computed_field
    @property
    def end_time(self) -> str:
        return format_minutes(self.end_minute)

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute

    @property
    def counts_as_activity(self) -> bool:
        """School blocks and extracurriculars count toward the daily load."""
        return self.type in (EventType.SCHOOL, EventType.ACTIVITY)


class FreeTimeSlot(RecordModel):
    start_minute: int
    end_minute: int

    @computed_field
    @property
    def start_time(self) -> str:
        return format_minutes(self.start_minute)

    @computed_field
    @property
    def end_time(self) -> str:
        return format_minutes(self.end_minute)

    @computed_field
    @property
    def duration(self) -> int:
        return self.end_minute - self.start_minute


class DaySchedule(RecordModel):
    """
    One weekday of a child's week.
    'events' stays sorted by start minute after every insertion.
    """
    date: date_type
    events: List[Event] = Field(default_factory=list)
    free_time_slots: List[FreeTimeSlot] = Field(default_factory=list)
    activity_count: int = 0
    total_activity_minutes: int = 0

    def add_event(self, event: Event) -> None:
        bisect.insort(self.events, event, key=lambda e: e.start_minute)
        if event.counts_as_activity:
            self.activity_count += 1
            self.total_activity_minutes += event.duration_minutes

    @property
    def free_minutes(self) -> int:
        return sum(slot.duration for slot in self.free_time_slots)


class WeeklySchedule(RecordModel):
    """Monday-aligned week for exactly one child."""
    child_id: str
    week_start: date_type
    days: Dict[str, DaySchedule]

    def __getitem__(self, day: str) -> DaySchedule:
        return self.days[day]

    def all_events(self) -> List[Event]:
        return [event for day in self.days.values() for event in day.events]


class Occurrence(RecordModel):
    """One projected date of a recurring activity."""
    date: date_type
    start_time: str
    duration_minutes: int
    location: Optional[Location] = None


class ConflictType(str, Enum):
    OVERLAP = "overlap"
    OVERLOAD = "overload"
    DURATION = "duration"
    NAP_PROTECTION = "nap_protection"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Conflict(RecordModel):
    """Descriptive only: produced by the validator, never acted upon."""
    type: ConflictType
    severity: Severity
    day: str
    events: List[Event] = Field(default_factory=list)
    message: str
    suggestion: str = ""


class SuggestionType(str, Enum):
    FREE_PLAY = "free_play"
    OUTDOOR_TIME = "outdoor_time"
    BALANCE = "balance"


class Suggestion(RecordModel):
    type: SuggestionType
    priority: Severity = Severity.MEDIUM
    day: Optional[str] = None
    time_slot: Optional[FreeTimeSlot] = None
    message: str
    suggestion: str = ""


class Diagnostic(RecordModel):
    """A skipped or malformed record, returned to the caller instead of only logged."""
    level: str = "warning"
    code: str
    message: str
    child_id: Optional[str] = None
    day: Optional[str] = None
    record_id: Optional[str] = None


class ReviewIssue(RecordModel):
    type: str
    message: str
    severity: Severity
    suggestion: str = ""


class RoutineReview(RecordModel):
    is_valid: bool
    errors: List[ReviewIssue] = Field(default_factory=list)
    warnings: List[ReviewIssue] = Field(default_factory=list)
    summary: Dict[str, Any] = Field(default_factory=dict)


class ScheduleMetadata(RecordModel):
    age_group: AgeGroup
    total_activities: int
    average_activities_per_day: float
    total_free_time_hours: float
    busy_days: int = Field(description="Days at the age-group maximum")
    overloaded_days: int = Field(description="Days above the age-group maximum")
    conflict_count: int
    suggestion_count: int
    balance_score: int = Field(ge=0, le=100)
    generated_at: date_type = Field(description="The caller-supplied reference date")


class ScheduleResult(RecordModel):
    """Everything produced for one child in one generation call."""
    child_id: str
    schedule: WeeklySchedule
    conflicts: List[Conflict] = Field(default_factory=list)
    suggestions: List[Suggestion] = Field(default_factory=list)
    metadata: ScheduleMetadata
    routine_review: Optional[RoutineReview] = None
    diagnostics: List[Diagnostic] = Field(default_factory=list)
