"""
Scheduling engine package.

Per-child generation (builders, recurrence, constraints, suggestions,
scoring, engine) and the multi-child coordination layer (family).
"""

from .config import SchedulerConfig, SchedulingRules, load_config
from .engine import WeeklyScheduleGenerator, generate_weekly_schedule
from .family import FamilyCoordinator, coordinate_family, optimize_family
from .recurrence import describe_recurrence, expand_recurring_activities, next_occurrences, occurs_on
from .routine_checks import review_activity, review_routine
from .state import BuildLog

__all__ = [
    "SchedulerConfig",
    "SchedulingRules",
    "load_config",
    "WeeklyScheduleGenerator",
    "generate_weekly_schedule",
    "FamilyCoordinator",
    "coordinate_family",
    "optimize_family",
    "describe_recurrence",
    "expand_recurring_activities",
    "next_occurrences",
    "occurs_on",
    "review_activity",
    "review_routine",
    "BuildLog",
]
