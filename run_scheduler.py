"""
Main Execution Script for the Family Schedule Engine.

Reads a family document (children with routines, school blocks and
weekly activities), builds every child's week, coordinates the family,
prints a report and exports the result as camelCase JSON.
"""

import argparse
import json
import logging
from datetime import date
from typing import List, Optional

from pydantic import ValidationError

from models import ChildProfile, FamilyOptimizationResult
from scheduler.config import load_config
from scheduler.family import optimize_family
from scheduler.state import BuildLog

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")

DEFAULT_OUTPUT = "family_schedule.json"


def load_children(filename: str, log: BuildLog) -> List[ChildProfile]:
    """
    Load child records from a family JSON document.
    Accepts either {"children": [...]} or a bare list. Invalid records
    are skipped with a diagnostic so one bad child does not sink the family.
    """
    with open(filename, 'r') as f:
        data = json.load(f)

    records = data.get("children", []) if isinstance(data, dict) else data
    logger.info(f"📂 Loading {len(records)} child records from {filename}...")

    children = []
    for i, item in enumerate(records):
        try:
            children.append(ChildProfile.model_validate(item))
        except ValidationError as e:
            record_id = item.get("id") if isinstance(item, dict) else None
            log.record_skip(
                "invalid_record",
                f"Child record {i} skipped: {e.error_count()} validation error(s)",
                record_id=record_id or str(i),
                child_id=record_id
            )

    logger.info(f"✅ Loaded {len(children)} children.")
    return children


def export_result(result: FamilyOptimizationResult, filename: str) -> None:
    logger.info(f"💾 Exporting family schedule to {filename}...")
    with open(filename, 'w') as f:
        json.dump(result.model_dump(by_alias=True, mode='json'), f, indent=2)
    logger.info("✅ Family schedule exported.")


def print_report(result: FamilyOptimizationResult) -> None:
    print("\n" + "=" * 50)
    print("📊 FAMILY SCHEDULE REPORT")
    print("=" * 50)
    print(f"Optimization score:   {result.optimization_score}")
    print(f"Weekly activities:    {result.metadata.total_weekly_activities}")
    print(f"Shared activities:    {len(result.coordinated_activities)}")
    print(f"Carpool options:      {len(result.carpool_options)}")
    print(f"Family-time slots:    {len(result.family_time_slots)}")

    for child_id, child_result in result.individual_schedules.items():
        meta = child_result.metadata
        print(f"\n👤 {child_id} ({meta.age_group.value}): balance {meta.balance_score}, "
              f"{meta.conflict_count} conflicts, {meta.total_free_time_hours}h free")
        for conflict in child_result.conflicts:
            print(f"   ⚠️ [{conflict.severity.value}] {conflict.day}: {conflict.message}")

    if result.recommendations:
        print("\n💡 RECOMMENDATIONS")
        for rec in result.recommendations:
            print(f"   [{rec.priority.value}] {rec.title}: {rec.description}")

    if result.diagnostics:
        print(f"\n🔍 {len(result.diagnostics)} record(s) skipped")
        for d in result.diagnostics:
            print(f"   ❌ {d.code}: {d.message}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build and coordinate a family's weekly schedule.")
    parser.add_argument("--family", required=True, help="Family JSON document")
    parser.add_argument("--week-start", type=date.fromisoformat, default=None,
                        help="Any date in the target week (YYYY-MM-DD); defaults to the reference date")
    parser.add_argument("--reference-date", type=date.fromisoformat, default=None,
                        help="Date used for ages (YYYY-MM-DD); defaults to today")
    parser.add_argument("--config", default=None, help="Optional scheduler config JSON")
    parser.add_argument("--out", default=DEFAULT_OUTPUT, help="Where to write the result JSON")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logger.info("🚀 Starting Family Schedule Engine...")

    # The only wall-clock read: the engine itself takes explicit dates
    reference_date = args.reference_date or date.today()
    week_start = args.week_start or reference_date

    log = BuildLog()
    children = load_children(args.family, log)
    if not children:
        logger.error("❌ No valid children found. Exiting.")
        return 1

    config = load_config(args.config)
    result = optimize_family(children, week_start, reference_date, config)
    if log.diagnostics:
        result.diagnostics = log.diagnostics + result.diagnostics

    print_report(result)
    export_result(result, args.out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
