"""
Tunable rules and weights for the scheduling engine.

The age-group rule table and every scoring constant live here so that
callers can adjust them without touching the algorithms.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_validator

from models import AgeGroup

from .timeutils import parse_time

logger = logging.getLogger(__name__)


class SchedulingRules(BaseModel):
    """Per-age-group limits used by the conflict validator."""
    max_activities_per_day: int = Field(ge=1)
    nap_time_protection: int = Field(ge=0, description="Buffer minutes around each nap")
    max_activity_duration: int = Field(ge=1, description="Minutes")


DEFAULT_RULES: Dict[AgeGroup, SchedulingRules] = {
    AgeGroup.INFANT: SchedulingRules(
        max_activities_per_day=1, nap_time_protection=45, max_activity_duration=30
    ),
    AgeGroup.TODDLER: SchedulingRules(
        max_activities_per_day=2, nap_time_protection=30, max_activity_duration=60
    ),
    AgeGroup.PRESCHOOL: SchedulingRules(
        max_activities_per_day=3, nap_time_protection=15, max_activity_duration=90
    ),
    AgeGroup.SCHOOL: SchedulingRules(
        max_activities_per_day=4, nap_time_protection=0, max_activity_duration=120
    ),
}


class BalanceWeights(BaseModel):
    base: int = 100
    per_conflict: int = 10
    per_overloaded_day: int = 15
    even_free_time_bonus: int = 10
    even_free_time_max_std: float = Field(default=60.0, description="Minutes")


class OptimizationWeights(BaseModel):
    base: int = 100
    per_conflict: int = 5
    per_overloaded_day: int = 10
    per_shared_activity: int = 5
    per_family_time_slot: int = 3


class SuggestionThresholds(BaseModel):
    free_play_min_minutes: int = 60
    outdoor_min_free_minutes: int = 30
    max_weekly_activities: int = 20
    min_weekly_free_minutes: int = 300


class SchedulerConfig(BaseModel):
    """Top-level engine configuration. Defaults reproduce the reference behaviour."""
    rules: Dict[AgeGroup, SchedulingRules] = Field(default_factory=lambda: dict(DEFAULT_RULES))
    day_window_start: str = "07:00"
    day_window_end: str = "20:00"
    min_free_slot_minutes: int = Field(default=15, ge=1)

    balance: BalanceWeights = Field(default_factory=BalanceWeights)
    optimization: OptimizationWeights = Field(default_factory=OptimizationWeights)
    thresholds: SuggestionThresholds = Field(default_factory=SuggestionThresholds)

    @model_validator(mode='after')
    def fill_missing_rules(self):
        """A partial rule table only overrides the groups it names."""
        for group, default in DEFAULT_RULES.items():
            self.rules.setdefault(group, default)
        return self

    @model_validator(mode='after')
    def validate_day_window(self):
        if parse_time(self.day_window_end) <= parse_time(self.day_window_start):
            raise ValueError("Day window end must be after start")
        return self

    def rules_for(self, group: AgeGroup) -> SchedulingRules:
        return self.rules[group]

    @property
    def day_window(self) -> Tuple[int, int]:
        return parse_time(self.day_window_start), parse_time(self.day_window_end)


def load_config(path: Optional[Union[str, Path]] = None) -> SchedulerConfig:
    """
    Load a JSON config file. Missing keys fall back to defaults; no path returns the defaults.
    """
    if path is None:
        return SchedulerConfig()

    with open(path, 'r') as f:
        data = json.load(f)

    cfg = SchedulerConfig.model_validate(data)
    logger.info(f"Loaded scheduler config from {path}")
    return cfg
