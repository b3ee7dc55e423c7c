"""
Child profile data models for the Family Schedule Engine.

This module defines the 'Input' side of the engine:
1. Daily routines (wake-up, meals, naps, bedtime)
2. Fixed school blocks per weekday
3. Recurring weekly activities and their recurrence rules
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel


WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
RECURRENCE_KINDS = ("weekly", "biweekly", "monthly")


class RecordModel(BaseModel):
    """Accepts document-store camelCase keys as well as snake_case names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Responsibility(str, Enum):
    """Who is accountable for an event occurrence."""
    PARENT = "parent"
    AU_PAIR = "au_pair"
    SHARED = "shared"
    AWARE = "aware"


class Nap(RecordModel):
    start_time: Optional[str] = Field(default=None, description="HH:MM")
    duration_minutes: int = Field(default=90, description="Configured nap length")


class MealTimes(RecordModel):
    breakfast: Optional[str] = None
    lunch: List[str] = Field(default_factory=list, description="One or more lunch times")
    dinner: Optional[str] = None
    snacks: List[str] = Field(default_factory=list)


class DailyRoutine(RecordModel):
    """The repeating shape of a child's day."""
    wake_up_time: Optional[str] = None
    meal_times: MealTimes = Field(default_factory=MealTimes)
    nap_times: List[Nap] = Field(default_factory=list)
    bedtime: Optional[str] = None

    # Keys: wake_up, breakfast, lunch, dinner, snack, nap, bedtime
    responsibilities: Dict[str, Responsibility] = Field(default_factory=dict)


class SchoolBlock(RecordModel):
    """A fixed block of school or daycare time."""
    start_time: str
    end_time: str
    type: str = Field(default="School", description="e.g. School, Kindergarten, Daycare")
    travel_time: Optional[int] = Field(default=None, ge=0, description="Minutes, defaults to 15")
    responsibility: Optional[Responsibility] = None


class Location(RecordModel):
    name: str = ""
    address: str = ""
    travel_time: Optional[int] = Field(default=None, ge=0, description="One-way travel minutes")
    type: Optional[str] = Field(default=None, description="indoor / outdoor")


class Contact(RecordModel):
    name: str = ""
    phone: str = ""
    email: str = ""
    role: str = ""


class ActivitySchedule(RecordModel):
    days: List[str] = Field(default_factory=list)
    start_time: Optional[str] = None
    duration_minutes: int = 60


# --- Recurrence rules (discriminated on 'kind') ---

class WeeklyRecurrence(RecordModel):
    kind: Literal["weekly"] = "weekly"
    days: List[str] = Field(default_factory=list)


class BiweeklyRecurrence(RecordModel):
    kind: Literal["biweekly"] = "biweekly"
    days: List[str] = Field(default_factory=list)
    start_date: Optional[date] = Field(default=None, description="Anchor week for the parity check")


class MonthlyRecurrence(RecordModel):
    kind: Literal["monthly"] = "monthly"
    month_type: str = Field(default="same_date", description="same_date or same_weekday")
    start_date: Optional[date] = None


class UnsupportedRecurrence(RecordModel):
    """A rule kind the engine does not evaluate (e.g. 'custom'). It never occurs."""
    kind: Literal["unsupported"] = "unsupported"
    requested: Optional[str] = Field(default=None, description="The kind as supplied")


Recurrence = Annotated[
    Union[WeeklyRecurrence, BiweeklyRecurrence, MonthlyRecurrence, UnsupportedRecurrence],
    Field(discriminator="kind"),
]


class WeeklyActivity(RecordModel):
    """
    A recurring extracurricular commitment (sports, lessons, clubs).
    Without an explicit recurrence it repeats weekly on schedule.days.
    """
    id: Optional[str] = None
    name: str = ""
    category: Optional[str] = Field(default=None, description="physical, creative, outdoor, ...")
    location: Optional[Location] = None
    schedule: Optional[ActivitySchedule] = None
    recurrence: Optional[Recurrence] = None
    start_date: Optional[date] = Field(default=None, description="Anchor used when the rule has none")
    equipment: List[str] = Field(default_factory=list)
    preparation: List[str] = Field(default_factory=list)
    contact: Optional[Contact] = None
    responsibility: Responsibility = Responsibility.AU_PAIR

    @model_validator(mode="before")
    @classmethod
    def normalise_recurrence(cls, data: Any) -> Any:
        """
        Stored rules may carry their tag as 'type' instead of 'kind'.
        Unknown tags become an UnsupportedRecurrence instead of failing the record.
        """
        if not isinstance(data, dict) or not isinstance(data.get("recurrence"), dict):
            return data

        rule = dict(data["recurrence"])
        kind = rule.get("kind", rule.get("type"))
        if kind in RECURRENCE_KINDS:
            rule["kind"] = kind
        else:
            rule = {"kind": "unsupported", "requested": None if kind is None else str(kind)}
        return {**data, "recurrence": rule}

    @property
    def key(self) -> str:
        return self.id or self.name


class RejectedRecord(RecordModel):
    """An activity entry that failed validation and was left out of its profile."""
    index: int
    record_id: Optional[str] = None
    name: Optional[str] = None
    error: str


class ChildProfile(RecordModel):
    """
    Read-only view of one child as supplied by the document store.
    """
    id: str = Field(description="Unique identifier for the child")
    name: str = Field(default="", description="Display name")
    date_of_birth: Optional[date] = Field(default=None, description="Drives age-group rules")

    daily_routine: Optional[DailyRoutine] = None
    school_schedule: Dict[str, List[SchoolBlock]] = Field(
        default_factory=dict,
        description="Weekday name -> school blocks"
    )
    weekly_activities: List[WeeklyActivity] = Field(default_factory=list)
    rejected_activities: List[RejectedRecord] = Field(
        default_factory=list,
        exclude=True,
        description="Activity entries dropped during validation, reported by the engine"
    )

    @model_validator(mode="before")
    @classmethod
    def screen_activities(cls, data: Any) -> Any:
        """Validate activities one by one so a single bad entry does not reject the child."""
        if not isinstance(data, dict):
            return data
        key = "weeklyActivities" if "weeklyActivities" in data else "weekly_activities"
        raw = data.get(key)
        if not isinstance(raw, list):
            return data

        kept: List[WeeklyActivity] = []
        rejected: List[RejectedRecord] = []
        for i, item in enumerate(raw):
            try:
                kept.append(WeeklyActivity.model_validate(item))
            except ValidationError as e:
                fields = item if isinstance(item, dict) else {}
                first = e.errors()[0]
                location = ".".join(str(part) for part in first["loc"])
                rejected.append(RejectedRecord(
                    index=i,
                    record_id=fields.get("id") if isinstance(fields.get("id"), str) else None,
                    name=fields.get("name") if isinstance(fields.get("name"), str) else None,
                    error=f"{location}: {first['msg']}" if location else first["msg"]
                ))

        return {**data, key: kept, "rejected_activities": rejected}

    @field_validator("school_schedule", mode="before")
    @classmethod
    def lowercase_school_days(cls, value: Any) -> Any:
        """Weekday keys are matched in lowercase, like activity days."""
        if not isinstance(value, dict):
            return value
        merged: Dict[Any, list] = {}
        for day, blocks in value.items():
            key = day.strip().lower() if isinstance(day, str) else day
            if not isinstance(blocks, list):
                merged[key] = blocks
                continue
            existing = merged.setdefault(key, [])
            if isinstance(existing, list):
                existing.extend(blocks)
        return merged

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "child_emma",
                "name": "Emma",
                "dateOfBirth": "2019-04-12",
                "dailyRoutine": {
                    "wakeUpTime": "07:00",
                    "mealTimes": {"breakfast": "07:30", "lunch": ["12:00"], "dinner": "18:00"},
                    "napTimes": [{"startTime": "13:00", "durationMinutes": 60}],
                    "bedtime": "19:30",
                    "responsibilities": {"nap": "au_pair", "dinner": "parent"}
                },
                "schoolSchedule": {"monday": [{"startTime": "09:00", "endTime": "15:00", "type": "School"}]},
                "weeklyActivities": [{
                    "id": "act_soccer",
                    "name": "Soccer",
                    "category": "physical",
                    "location": {"name": "City Park", "travelTime": 25, "type": "outdoor"},
                    "schedule": {"days": ["tuesday", "thursday"], "startTime": "16:00", "durationMinutes": 60}
                }]
            }
        }
    )
