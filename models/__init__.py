"""
Data models package for the Family Schedule Engine.

This package exports the three layers of the data architecture:
1. Input (ChildProfile, DailyRoutine, WeeklyActivity, Recurrence rules)
2. Per-child Output (Event, DaySchedule, WeeklySchedule, Conflict, Suggestion)
3. Family Output (FamilyOptimizationResult and its parts)
"""

from .child import (
    WEEKDAYS,
    ChildProfile,
    DailyRoutine,
    MealTimes,
    Nap,
    SchoolBlock,
    WeeklyActivity,
    ActivitySchedule,
    Location,
    Contact,
    Responsibility,
    Recurrence,
    WeeklyRecurrence,
    BiweeklyRecurrence,
    MonthlyRecurrence,
    UnsupportedRecurrence,
    RejectedRecord,
)

from .schedule import (
    AgeGroup,
    Event,
    EventType,
    EventMetadata,
    Priority,
    FreeTimeSlot,
    DaySchedule,
    WeeklySchedule,
    Occurrence,
    Conflict,
    ConflictType,
    Severity,
    Suggestion,
    SuggestionType,
    Diagnostic,
    ReviewIssue,
    RoutineReview,
    ScheduleMetadata,
    ScheduleResult,
    format_minutes,
)

from .family import (
    ChildRef,
    TimeWindow,
    SharedActivity,
    CarpoolOption,
    FamilyTimeSlot,
    ParallelActivity,
    Recommendation,
    FamilyMetadata,
    FamilyOptimizationResult,
)

__all__ = [
    # --- Input Models ---
    "WEEKDAYS",
    "ChildProfile",
    "DailyRoutine",
    "MealTimes",
    "Nap",
    "SchoolBlock",
    "WeeklyActivity",
    "ActivitySchedule",
    "Location",
    "Contact",
    "Responsibility",
    "Recurrence",
    "WeeklyRecurrence",
    "BiweeklyRecurrence",
    "MonthlyRecurrence",
    "UnsupportedRecurrence",
    "RejectedRecord",

    # --- Per-child Output Models ---
    "AgeGroup",
    "Event",
    "EventType",
    "EventMetadata",
    "Priority",
    "FreeTimeSlot",
    "DaySchedule",
    "WeeklySchedule",
    "Occurrence",
    "Conflict",
    "ConflictType",
    "Severity",
    "Suggestion",
    "SuggestionType",
    "Diagnostic",
    "ReviewIssue",
    "RoutineReview",
    "ScheduleMetadata",
    "ScheduleResult",
    "format_minutes",

    # --- Family Output Models ---
    "ChildRef",
    "TimeWindow",
    "SharedActivity",
    "CarpoolOption",
    "FamilyTimeSlot",
    "ParallelActivity",
    "Recommendation",
    "FamilyMetadata",
    "FamilyOptimizationResult",
]
