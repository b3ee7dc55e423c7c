"""
Family Coordination Logic.

Fans in the per-child weekly schedules and looks for ways to make the
family's week easier as a whole:
1. Shared activities (siblings doing the same thing, same place, same day)
2. Carpool candidates
3. Protected family time (everyone free at once)
4. Parallel activities for siblings of a similar age
5. Ranked recommendations and an overall optimization score
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import date as date_type
from typing import Dict, List, Optional, Tuple

from models import (
    ChildProfile,
    ChildRef,
    CarpoolOption,
    EventType,
    FamilyMetadata,
    FamilyOptimizationResult,
    FamilyTimeSlot,
    ParallelActivity,
    Recommendation,
    ScheduleResult,
    Severity,
    SharedActivity,
    TimeWindow,
    WEEKDAYS,
    format_minutes,
)
from models.family import CarpoolSavings, Feasibility, SharedActivityBenefits
from .config import SchedulerConfig
from .engine import generate_weekly_schedule
from .state import BuildLog
from .timeutils import Interval, age_bracket, age_in_years, intersect_intervals, monday_of

logger = logging.getLogger(__name__)

# --- Shared activities ---
MAX_SHARED_AGE_RANGE = 3
MAX_SHARED_START_SPREAD = 30
TRANSPORT_SAVING_PER_CHILD = 15
COST_SAVING_PER_EXTRA_CHILD = 0.15
SHARED_FEASIBILITY = 0.8

# --- Carpools ---
CARPOOL_BASE_SCORE = 0.5
CARPOOL_LONG_TRAVEL_MINUTES = 20
CARPOOL_THRESHOLD = 0.7

# --- Family time ---
MIN_FAMILY_TIME_MINUTES = 60
MIN_FAMILY_TIME_SLOTS = 3
WEEKEND = ("saturday", "sunday")

PARALLEL_SEARCH_ORDER = ["saturday", "sunday"] + WEEKDAYS[:5]

# Age-bracket catalog: (name, minutes needed, requirements)
PARALLEL_CATALOG: Dict[str, List[Tuple[str, int, List[str]]]] = {
    "infant": [
        ("Sensory play", 30, ["Supervision"]),
        ("Reading time", 20, ["Quiet space"]),
    ],
    "toddler": [
        ("Building blocks", 45, ["Play area"]),
        ("Music and movement", 30, ["Open space"]),
    ],
    "preschool": [
        ("Arts and crafts", 60, ["Art supplies"]),
        ("Educational games", 45, ["Learning materials"]),
    ],
    "school": [
        ("Board games", 60, ["Table space"]),
        ("Science experiments", 90, ["Materials", "Supervision"]),
    ],
}

REFERENCE_CATEGORIES = ["physical", "creative", "social", "educational", "outdoor"]
PRIORITY_RANK = {Severity.HIGH: 3, Severity.MEDIUM: 2, Severity.LOW: 1}


def categorize_family_time(start_minute: int) -> str:
    hour = start_minute // 60
    if 7 <= hour <= 9:
        return "morning_routine"
    if 10 <= hour <= 16:
        return "weekend_activity"
    if 17 <= hour <= 18:
        return "dinner_time"
    if 19 <= hour <= 21:
        return "evening_bonding"
    return "flexible"


def family_time_priority(duration: int, day: str, start_minute: int) -> float:
    priority = duration / 60
    if day in WEEKEND:
        priority += 2
    if 17 <= start_minute // 60 < 20:
        priority += 1
    return priority


def family_time_ideas(duration: int, ages: List[int]) -> List[str]:
    ideas = []
    if duration >= 120:
        ideas.extend(["Family outing", "Board games", "Cooking together"])
    if duration >= 60:
        ideas.extend(["Story time", "Arts and crafts", "Outdoor play"])
    if ages and min(ages) >= 5:
        ideas.extend(["Family bike ride", "Movie night", "Educational games"])
    return ideas


def carpool_score(travel_time: Optional[int], day_count: int) -> float:
    score = CARPOOL_BASE_SCORE
    if travel_time is not None and travel_time > CARPOOL_LONG_TRAVEL_MINUTES:
        score += 0.2
    if day_count > 2:
        score += 0.1
    return round(min(1.0, score), 2)


class FamilyCoordinator:
    """
    Cross-child coordination over already-generated weekly schedules.
    Every call computes a fresh result; nothing accumulates on the instance.
    """

    def __init__(self, reference_date: date_type, config: Optional[SchedulerConfig] = None):
        self.reference_date = reference_date
        self.config = config or SchedulerConfig()

    def coordinate(
        self,
        children: List[ChildProfile],
        results: Dict[str, ScheduleResult],
        log: Optional[BuildLog] = None
    ) -> FamilyOptimizationResult:
        if not children:
            raise ValueError("Family coordination needs at least one child")
        log = log or BuildLog()

        # Children whose schedule failed to build are left out
        scheduled = [c for c in children if c.id in results]
        ages = {c.id: age_in_years(c.date_of_birth, self.reference_date) for c in scheduled}

        logger.info(f"Coordinating {len(scheduled)} of {len(children)} children")

        # 1. Shared activities
        shared = self.find_shared_activities(scheduled, results, ages)

        # 2. Carpools
        carpools = self.find_carpool_options(scheduled)

        # 3. Family time
        family_slots = self.reserve_family_time(scheduled, results, ages)

        # 4. Sibling parallel activities
        parallel = self.find_parallel_activities(scheduled, results, ages)

        # 5. Recommendations and score
        recommendations = self.build_recommendations(results, carpools, family_slots)
        score = self.optimization_score(results, shared, family_slots)

        logger.info(f"Family optimization: {len(shared)} shared, {len(carpools)} carpool, "
                    f"{len(family_slots)} family-time slots, score {score}")

        balance_scores = [r.metadata.balance_score for r in results.values()]
        metadata = FamilyMetadata(
            family_size=len(children),
            total_weekly_activities=sum(r.metadata.total_activities for r in results.values()),
            average_child_balance_score=round(sum(balance_scores) / len(children)) if balance_scores else 0,
            coordination_opportunities=len(shared),
            carpool_potential=len(carpools),
            family_time_slots=len(family_slots),
            optimization_date=self.reference_date
        )

        diagnostics = list(log.diagnostics)
        for result in results.values():
            diagnostics.extend(result.diagnostics)

        return FamilyOptimizationResult(
            individual_schedules=results,
            coordinated_activities=shared,
            carpool_options=carpools,
            family_time_slots=family_slots,
            parallel_activities=parallel,
            recommendations=recommendations,
            optimization_score=score,
            metadata=metadata,
            diagnostics=diagnostics
        )

    # --- Shared activities ---

    def find_shared_activities(
        self,
        children: List[ChildProfile],
        results: Dict[str, ScheduleResult],
        ages: Dict[str, int]
    ) -> List[SharedActivity]:
        """
        Group activity events by (title, location, weekday). A group qualifies
        with 2+ distinct children, ages within 3 years and starts within 30 minutes.
        """
        groups = defaultdict(list)
        for child in children:
            for day_name, day in results[child.id].schedule.days.items():
                for event in day.events:
                    if event.type != EventType.ACTIVITY:
                        continue
                    location_name = event.location.name if event.location and event.location.name else "unknown"
                    groups[(event.title, location_name, day_name)].append((child, event))

        opportunities = []
        for (title, _, day_name), members in groups.items():
            child_ids = {child.id for child, _ in members}
            if len(child_ids) < 2:
                continue

            member_ages = [ages[child_id] for child_id in child_ids]
            if max(member_ages) - min(member_ages) > MAX_SHARED_AGE_RANGE:
                continue

            starts = [event.start_minute for _, event in members]
            if max(starts) - min(starts) > MAX_SHARED_START_SPREAD:
                continue

            refs: Dict[str, ChildRef] = {}
            for child, _ in members:
                refs.setdefault(child.id, ChildRef(id=child.id, name=child.name, age=ages[child.id]))

            first = members[0][1]
            count = len(refs)
            opportunities.append(SharedActivity(
                activity=title,
                day=day_name,
                location=first.location,
                time_slot=TimeWindow(day=day_name, start_time=first.start_time, end_time=first.end_time),
                children=list(refs.values()),
                benefits=SharedActivityBenefits(
                    transportation_saving=TRANSPORT_SAVING_PER_CHILD * count,
                    social_benefit=True,
                    cost_saving=round(COST_SAVING_PER_EXTRA_CHILD * (count - 1), 2)
                ),
                feasibility=Feasibility(
                    score=SHARED_FEASIBILITY,
                    factors=["Age compatibility", "Schedule alignment", "Location proximity"]
                )
            ))
        return opportunities

    # --- Carpools ---

    def find_carpool_options(self, children: List[ChildProfile]) -> List[CarpoolOption]:
        options = []
        for child in children:
            for activity in child.weekly_activities:
                if activity.location is None or activity.schedule is None:
                    continue

                travel = activity.location.travel_time
                score = carpool_score(travel, len(activity.schedule.days))
                if score <= CARPOOL_THRESHOLD:
                    continue

                long_trip = travel is not None and travel > CARPOOL_LONG_TRAVEL_MINUTES
                options.append(CarpoolOption(
                    child_id=child.id,
                    child_name=child.name,
                    activity=activity.name,
                    location=activity.location,
                    schedule=activity.schedule,
                    carpool_score=score,
                    estimated_savings=CarpoolSavings(
                        time_minutes=travel * 0.5 if long_trip else 0.0,
                        cost_reduction=0.25 if long_trip else 0.0,
                        stress_reduction=0.5 if len(activity.schedule.days) > 2 else 0.3
                    )
                ))
        return options

    # --- Family time ---

    @staticmethod
    def _common_free_time(
        children: List[ChildProfile],
        results: Dict[str, ScheduleResult],
        day_name: str
    ) -> List[Interval]:
        """Intervals where every child is free at once."""
        common: Optional[List[Interval]] = None
        for child in children:
            slots = [(s.start_minute, s.end_minute) for s in results[child.id].schedule[day_name].free_time_slots]
            common = slots if common is None else intersect_intervals(common, slots)
            if not common:
                return []
        return common or []

    def reserve_family_time(
        self,
        children: List[ChildProfile],
        results: Dict[str, ScheduleResult],
        ages: Dict[str, int]
    ) -> List[FamilyTimeSlot]:
        if not children:
            return []

        child_ids = [c.id for c in children]
        age_list = list(ages.values())
        slots = []

        for day_name in WEEKDAYS:
            for start, end in self._common_free_time(children, results, day_name):
                duration = end - start
                if duration < MIN_FAMILY_TIME_MINUTES:
                    continue
                slots.append(FamilyTimeSlot(
                    day=day_name,
                    start_time=format_minutes(start),
                    end_time=format_minutes(end),
                    duration=duration,
                    available_children=child_ids,
                    type=categorize_family_time(start),
                    priority=family_time_priority(duration, day_name, start),
                    suggestions=family_time_ideas(duration, age_list)
                ))

        return sorted(slots, key=lambda s: s.priority, reverse=True)

    # --- Parallel activities ---

    def find_parallel_activities(
        self,
        children: List[ChildProfile],
        results: Dict[str, ScheduleResult],
        ages: Dict[str, int]
    ) -> List[ParallelActivity]:
        brackets = defaultdict(list)
        for child in children:
            brackets[age_bracket(ages[child.id]).value].append(child)

        opportunities = []
        for bracket, members in brackets.items():
            if len(members) < 2:
                continue

            for name, minutes, requirements in PARALLEL_CATALOG[bracket]:
                window = self._first_common_window(members, results, minutes)
                if window is None:
                    logger.debug(f"No common {minutes}-minute window for {name} ({bracket})")
                    continue

                opportunities.append(ParallelActivity(
                    age_group=bracket,
                    activity=name,
                    children=[ChildRef(id=c.id, name=c.name, age=ages[c.id]) for c in members],
                    time_slot=window,
                    benefits={
                        "socialDevelopment": True,
                        "parentSupervisionEfficiency": True,
                        "siblingBonding": True,
                    },
                    requirements=requirements
                ))
        return opportunities

    def _first_common_window(
        self,
        children: List[ChildProfile],
        results: Dict[str, ScheduleResult],
        minutes: int
    ) -> Optional[TimeWindow]:
        """Weekend first, then weekdays: the first common gap long enough."""
        for day_name in PARALLEL_SEARCH_ORDER:
            for start, end in self._common_free_time(children, results, day_name):
                if end - start >= minutes:
                    return TimeWindow(
                        day=day_name,
                        start_time=format_minutes(start),
                        end_time=format_minutes(start + minutes),
                        duration=minutes
                    )
        return None

    # --- Recommendations ---

    def build_recommendations(
        self,
        results: Dict[str, ScheduleResult],
        carpools: List[CarpoolOption],
        family_slots: List[FamilyTimeSlot]
    ) -> List[Recommendation]:
        recommendations = []

        if carpools:
            minutes = sum(option.estimated_savings.time_minutes for option in carpools)
            recommendations.append(Recommendation(
                type="transportation",
                priority=Severity.HIGH,
                title="Carpool Opportunities Available",
                description=f"{len(carpools)} carpool opportunities could save {minutes:g} minutes per week",
                action="setup_carpools",
                data={"options": len(carpools), "minutesSaved": minutes},
                estimated_benefit="time_saving"
            ))

        overloaded = sum(r.metadata.overloaded_days for r in results.values())
        if overloaded > 0:
            recommendations.append(Recommendation(
                type="balance",
                priority=Severity.MEDIUM,
                title="Schedule Rebalancing Suggested",
                description=f"{overloaded} days have too many activities. Consider redistributing.",
                action="rebalance_schedule",
                data={
                    "overloadedDays": overloaded,
                    "totalConflicts": sum(len(r.conflicts) for r in results.values()),
                },
                estimated_benefit="stress_reduction"
            ))

        if len(family_slots) < MIN_FAMILY_TIME_SLOTS:
            recommendations.append(Recommendation(
                type="family_time",
                priority=Severity.HIGH,
                title="Insufficient Family Time",
                description="Schedule lacks adequate family bonding opportunities",
                action="protect_family_time",
                data={"currentSlots": len(family_slots), "recommended": 5},
                estimated_benefit="family_bonding"
            ))

        present = {
            event.metadata.category
            for r in results.values()
            for event in r.schedule.all_events()
            if event.metadata.category
        }
        missing = [c for c in REFERENCE_CATEGORIES if c not in present]
        if missing:
            recommendations.append(Recommendation(
                type="diversity",
                priority=Severity.MEDIUM,
                title="Activity Diversity Enhancement",
                description=", ".join(f"Add {c} activities" for c in missing),
                action="improve_diversity",
                data={"currentCategories": sorted(present), "missingCategories": missing},
                estimated_benefit="child_development"
            ))

        # sorted() is stable, so equal ranks keep insertion order
        return sorted(recommendations, key=lambda r: PRIORITY_RANK[r.priority], reverse=True)

    def optimization_score(
        self,
        results: Dict[str, ScheduleResult],
        shared: List[SharedActivity],
        family_slots: List[FamilyTimeSlot]
    ) -> int:
        w = self.config.optimization
        score = w.base
        score -= w.per_conflict * sum(len(r.conflicts) for r in results.values())
        score -= w.per_overloaded_day * sum(r.metadata.overloaded_days for r in results.values())
        score += w.per_shared_activity * len(shared)
        score += w.per_family_time_slot * len(family_slots)
        return int(max(0, min(100, score)))


def coordinate_family(
    children: List[ChildProfile],
    results: Dict[str, ScheduleResult],
    reference_date: date_type,
    config: Optional[SchedulerConfig] = None
) -> FamilyOptimizationResult:
    return FamilyCoordinator(reference_date, config).coordinate(children, results)


def optimize_family(
    children: List[ChildProfile],
    week_start: date_type,
    reference_date: Optional[date_type] = None,
    config: Optional[SchedulerConfig] = None,
    max_workers: Optional[int] = None
) -> FamilyOptimizationResult:
    """
    Build every child's week concurrently, then coordinate.
    A child whose build fails is recorded as a diagnostic and left out.
    """
    if not children:
        raise ValueError("Family optimization needs at least one child")

    week_start = monday_of(week_start)
    reference_date = reference_date or week_start
    config = config or SchedulerConfig()
    log = BuildLog()

    results: Dict[str, ScheduleResult] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            (child, executor.submit(generate_weekly_schedule, child, week_start, reference_date, config))
            for child in children
        ]
        for child, future in futures:
            try:
                results[child.id] = future.result()
            except Exception as e:
                logger.exception(f"Schedule build failed for {child.id}")
                log.record_skip("schedule_failed", str(e), level="error", child_id=child.id, record_id=child.id)

    return FamilyCoordinator(reference_date, config).coordinate(children, results, log)
