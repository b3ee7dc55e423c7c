"""
Time, date and interval helpers shared by every engine stage.

All times of day are handled as integer minutes after midnight.
Nothing here reads the wall clock: callers pass the reference date.
"""

import math
from datetime import date as date_type, timedelta
from typing import List, Optional, Tuple

from models import WEEKDAYS, AgeGroup

Interval = Tuple[int, int]

DAYS_PER_MONTH = 30.44
DAYS_PER_YEAR = 365.25
DEFAULT_AGE_YEARS = 5


def parse_time(value: Optional[str]) -> int:
    """
    Convert 'HH:MM' to minutes after midnight.
    Raises ValueError for anything else, so one bad entry can be skipped by the caller.
    """
    if not isinstance(value, str) or ":" not in value:
        raise ValueError(f"Invalid time string: {value!r}")
    hours_str, minutes_str = value.strip().split(":", 1)
    hours, minutes = int(hours_str), int(minutes_str)
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def weekday_name(day: date_type) -> str:
    return WEEKDAYS[day.weekday()]


def monday_of(day: date_type) -> date_type:
    return day - timedelta(days=day.weekday())


def week_dates(week_start: date_type) -> List[Tuple[str, date_type]]:
    """(weekday name, date) pairs for the Monday-aligned week containing week_start."""
    monday = monday_of(week_start)
    return [(name, monday + timedelta(days=i)) for i, name in enumerate(WEEKDAYS)]


# --- Age ---

def age_in_months(date_of_birth: date_type, reference_date: date_type) -> float:
    return (reference_date - date_of_birth).days / DAYS_PER_MONTH


def age_in_years(date_of_birth: Optional[date_type], reference_date: date_type) -> int:
    if date_of_birth is None:
        return DEFAULT_AGE_YEARS
    return math.floor((reference_date - date_of_birth).days / DAYS_PER_YEAR)


def age_group_for(date_of_birth: Optional[date_type], reference_date: date_type) -> AgeGroup:
    """Rule-table bucket. Missing date of birth is assumed preschool."""
    if date_of_birth is None:
        return AgeGroup.PRESCHOOL
    months = age_in_months(date_of_birth, reference_date)
    if months < 18:
        return AgeGroup.INFANT
    if months < 36:
        return AgeGroup.TODDLER
    if months < 72:
        return AgeGroup.PRESCHOOL
    return AgeGroup.SCHOOL


def age_bracket(age_years: int) -> AgeGroup:
    """Coarser whole-year bucketing used when grouping siblings."""
    if age_years < 2:
        return AgeGroup.INFANT
    if age_years < 4:
        return AgeGroup.TODDLER
    if age_years < 6:
        return AgeGroup.PRESCHOOL
    return AgeGroup.SCHOOL


# --- Intervals ---

def merge_intervals(intervals: List[Interval]) -> List[Interval]:
    merged: List[Interval] = []
    for start, end in sorted(intervals):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def complement_intervals(busy: List[Interval], window: Interval) -> List[Interval]:
    """Gaps inside 'window' not covered by any busy interval."""
    win_start, win_end = window
    clipped = [
        (max(start, win_start), min(end, win_end))
        for start, end in busy
        if start < win_end and end > win_start
    ]
    gaps: List[Interval] = []
    cursor = win_start
    for start, end in merge_intervals(clipped):
        if start > cursor:
            gaps.append((cursor, start))
        cursor = max(cursor, end)
    if cursor < win_end:
        gaps.append((cursor, win_end))
    return gaps


def intersect_intervals(a: List[Interval], b: List[Interval]) -> List[Interval]:
    """Two-pointer intersection of two sorted, non-overlapping interval lists."""
    result: List[Interval] = []
    i = j = 0
    while i < len(a) and j < len(b):
        start = max(a[i][0], b[j][0])
        end = min(a[i][1], b[j][1])
        if start < end:
            result.append((start, end))
        if a[i][1] < b[j][1]:
            i += 1
        else:
            j += 1
    return result
