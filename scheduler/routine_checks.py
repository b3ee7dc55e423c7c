"""
Routine and activity review.

Sanity checks on the input records themselves, independent of any
generated week: enough sleep for the age, sensible meal spacing,
nap placement. Errors make a routine invalid; warnings are advice.
"""

import logging
from typing import Dict, List, Optional, Tuple

from models import AgeGroup, DailyRoutine, ReviewIssue, RoutineReview, Severity, WeeklyActivity

from .timeutils import parse_time

logger = logging.getLogger(__name__)

MIN_SLEEP_HOURS: Dict[AgeGroup, int] = {
    AgeGroup.INFANT: 14,
    AgeGroup.TODDLER: 12,
    AgeGroup.PRESCHOOL: 11,
    AgeGroup.SCHOOL: 9,
}
MEAL_SPACING_MIN_HOURS = 2
MEAL_SPACING_MAX_HOURS = 4
MAX_BREAKFAST_DELAY_HOURS = 2
SHORT_NAP_MINUTES = 30
LONG_NAP_MINUTES = 180
NAP_TO_BEDTIME_MIN_HOURS = 3
TODDLER_LATEST_BEDTIME_HOUR = 21
LONG_ACTIVITY_MINUTES = 240

MINUTES_PER_DAY = 24 * 60


def _minutes(value: Optional[str]) -> Optional[int]:
    """Parsed minutes, or None when the entry is missing or malformed."""
    try:
        return parse_time(value)
    except ValueError:
        return None


def sleep_minutes(routine: DailyRoutine) -> int:
    """Night sleep from bedtime to wake-up, wrapping past midnight."""
    bedtime = _minutes(routine.bedtime)
    wake_up = _minutes(routine.wake_up_time)
    if bedtime is None or wake_up is None:
        return 0
    if bedtime > wake_up:
        return MINUTES_PER_DAY - bedtime + wake_up
    return wake_up - bedtime


class RoutineReviewer:
    """Collects errors and warnings for one routine."""

    def __init__(self, routine: DailyRoutine, age_group: AgeGroup):
        self.routine = routine
        self.age_group = age_group
        self.errors: List[ReviewIssue] = []
        self.warnings: List[ReviewIssue] = []

    def _warn(self, type_: str, message: str, severity: Severity, suggestion: str = "") -> None:
        self.warnings.append(ReviewIssue(type=type_, message=message, severity=severity, suggestion=suggestion))

    def _error(self, type_: str, message: str, suggestion: str = "") -> None:
        self.errors.append(ReviewIssue(type=type_, message=message, severity=Severity.HIGH, suggestion=suggestion))

    def check_sleep(self) -> None:
        hours = sleep_minutes(self.routine) / 60
        minimum = MIN_SLEEP_HOURS[self.age_group]
        if hours < minimum:
            self._warn(
                "sleep_duration",
                f"Sleep duration ({hours:.1f} hours) is less than recommended {minimum} hours for {self.age_group.value}",
                Severity.MEDIUM,
                f"Adjust bedtime or wake time to allow at least {minimum} hours of sleep"
            )

        bedtime = _minutes(self.routine.bedtime)
        if self.age_group == AgeGroup.TODDLER and bedtime is not None and bedtime // 60 > TODDLER_LATEST_BEDTIME_HOUR:
            self._warn("late_bedtime", "Bedtime seems late for a toddler", Severity.LOW,
                       "An earlier bedtime usually means better sleep")

    def check_meals(self) -> None:
        meal_times = self.routine.meal_times
        meals: List[Tuple[str, int]] = []

        for name, value in [("breakfast", meal_times.breakfast), ("dinner", meal_times.dinner)]:
            minute = _minutes(value)
            if minute is not None:
                meals.append((name, minute))
        for i, value in enumerate(meal_times.lunch):
            minute = _minutes(value)
            if minute is not None:
                meals.append(("lunch" if i == 0 else f"lunch {i + 1}", minute))

        meals.sort(key=lambda m: m[1])

        for (prev_name, prev_min), (name, minute) in zip(meals, meals[1:]):
            gap_hours = (minute - prev_min) / 60
            if gap_hours < MEAL_SPACING_MIN_HOURS:
                self._error(
                    "meal_spacing",
                    f"{prev_name} and {name} are too close together ({gap_hours:.1f} hours)",
                    f"Meals should be at least {MEAL_SPACING_MIN_HOURS} hours apart"
                )
            if gap_hours > MEAL_SPACING_MAX_HOURS:
                self._warn(
                    "meal_spacing",
                    f"Long gap between {prev_name} and {name} ({gap_hours:.1f} hours)",
                    Severity.LOW,
                    "Consider adding a snack between meals"
                )

        wake_up = _minutes(self.routine.wake_up_time)
        breakfast = _minutes(meal_times.breakfast)
        if wake_up is not None and breakfast is not None:
            delay_hours = (breakfast - wake_up) / 60
            if delay_hours > MAX_BREAKFAST_DELAY_HOURS:
                self._warn("breakfast_timing",
                           f"Long gap between wake up and breakfast ({delay_hours:.1f} hours)",
                           Severity.LOW, "Consider an earlier breakfast time")

    def check_naps(self) -> None:
        naps = self.routine.nap_times
        if not naps:
            if self.age_group in (AgeGroup.INFANT, AgeGroup.TODDLER):
                self._warn("missing_naps", f"{self.age_group.value}s typically need regular naps",
                           Severity.MEDIUM, "Consider adding nap times to the routine")
            return

        bedtime = _minutes(self.routine.bedtime)
        for i, nap in enumerate(naps, start=1):
            if nap.duration_minutes < SHORT_NAP_MINUTES:
                self._warn("short_nap", f"Nap {i} is very short ({nap.duration_minutes} minutes)",
                           Severity.LOW, "Most children need at least 30-45 minutes for a restorative nap")
            if nap.duration_minutes > LONG_NAP_MINUTES:
                self._warn("long_nap", f"Nap {i} is very long ({nap.duration_minutes} minutes)",
                           Severity.MEDIUM, "Very long naps can interfere with night sleep")

            start = _minutes(nap.start_time)
            if bedtime is not None and start is not None:
                hours_to_bed = (bedtime - (start + nap.duration_minutes)) / 60
                if hours_to_bed < NAP_TO_BEDTIME_MIN_HOURS:
                    self._warn("nap_bedtime_proximity", f"Nap {i} ends too close to bedtime",
                               Severity.MEDIUM, "Naps should end at least 3 hours before bedtime")

        for i, (current, following) in enumerate(zip(naps, naps[1:]), start=1):
            current_start = _minutes(current.start_time)
            next_start = _minutes(following.start_time)
            if current_start is None or next_start is None:
                continue
            if current_start + current.duration_minutes > next_start:
                self._error("overlapping_naps", f"Nap {i} overlaps with nap {i + 1}",
                            "Adjust nap times to prevent overlaps")

    def review(self) -> RoutineReview:
        self.check_sleep()
        self.check_meals()
        self.check_naps()

        return RoutineReview(
            is_valid=not self.errors,
            errors=self.errors,
            warnings=self.warnings,
            summary={
                "sleepHours": round(sleep_minutes(self.routine) / 60, 1),
                "totalNaps": len(self.routine.nap_times),
            }
        )


def review_routine(routine: Optional[DailyRoutine], age_group: AgeGroup) -> RoutineReview:
    if routine is None:
        return RoutineReview(
            is_valid=False,
            errors=[ReviewIssue(type="missing_routine", message="No routine data provided", severity=Severity.HIGH)]
        )
    return RoutineReviewer(routine, age_group).review()


def review_activity(activity: WeeklyActivity) -> RoutineReview:
    """Checks one activity record for the fields the expander needs."""
    errors: List[ReviewIssue] = []
    warnings: List[ReviewIssue] = []
    schedule = activity.schedule

    if not activity.name.strip():
        errors.append(ReviewIssue(type="missing_name", message="Activity name is required", severity=Severity.HIGH))

    if schedule is None or not schedule.days:
        errors.append(ReviewIssue(type="missing_days", message="At least one day must be selected",
                                  severity=Severity.HIGH))

    if schedule is None or not schedule.start_time:
        errors.append(ReviewIssue(type="missing_time", message="Start time is required", severity=Severity.HIGH))

    if schedule is not None:
        if schedule.duration_minutes <= 0:
            errors.append(ReviewIssue(type="invalid_duration", message="Activity duration must be greater than 0",
                                      severity=Severity.HIGH))
        elif schedule.duration_minutes > LONG_ACTIVITY_MINUTES:
            warnings.append(ReviewIssue(
                type="long_activity",
                message="Activity duration is very long (over 4 hours)",
                severity=Severity.MEDIUM,
                suggestion="Consider breaking long activities into smaller segments"
            ))

    if errors:
        logger.debug(f"Activity {activity.key!r} has {len(errors)} error(s)")

    return RoutineReview(is_valid=not errors, errors=errors, warnings=warnings)
