#!/usr/bin/env python3
"""
PaceLine - Command Line Entry Point

Builds a race-day pacing plan from a GPX course:
- Course profile (distance, elevation, terrain composition)
- Segment targets between checkpoints
- Checkpoint arrivals with cutoff status
- Power and nutrition targets when an FTP is given

Usage:
    paceline profile --gpx course.gpx
    paceline plan --gpx course.gpx --goal 10:30 --checkpoint "Aid 1@35@11:30"
    paceline plan --gpx course.gpx --goal 10:30 --ftp 250 --weight 72 --export out/
"""

import argparse
import sys
from pathlib import Path
from typing import List

from paceline.config.config import get_config
from paceline.config.logging_config import get_logger, log_error, setup_logging
from paceline.exceptions import PacingError, ValidationError
from paceline.models import AthleteProfile, Checkpoint, CourseProfile, Discipline, EffortPreset
from paceline.performance.nutrition import compute_nutrition
from paceline.performance.power_estimator import compute_target_power, estimate_terrain_times
from paceline.processing.checkpoint_analyzer import compute_arrivals, cutoffs_from_checkpoints
from paceline.processing.course_processor import CourseProcessor
from paceline.processing.plan_export import export_plan_csv, segments_to_dataframe
from paceline.processing.segment_generator import apply_effort_preset, calculate_required_speed, generate_segments
from paceline.utils.time_utils import format_duration, parse_duration
from paceline.utils.units import UnitConverter

logger = get_logger(__name__)

STATUS_ICONS = {"safe": "✅", "caution": "⚠️", "danger": "❌"}


def print_banner():
    """Print application banner."""
    print("\n" + "=" * 60)
    print("  PaceLine Race Planner")
    print("=" * 60)


def parse_checkpoint(value: str) -> Checkpoint:
    """Parse a "Name@mile[@cutoff]" checkpoint argument."""
    parts = value.split("@")
    if len(parts) not in (2, 3) or not parts[0].strip():
        raise ValidationError(f"Checkpoint must look like 'Name@mile[@cutoff]' (got '{value}')")
    try:
        mile = float(parts[1])
    except ValueError:
        raise ValidationError(f"Invalid checkpoint mile '{parts[1]}'") from None
    cutoff = parts[2].strip() if len(parts) == 3 else None
    return Checkpoint(name=parts[0].strip(), mile=mile, cutoff_time=cutoff or None)


def read_course(path: str) -> bytes:
    file_path = Path(path)
    suffix = file_path.suffix.lstrip(".").lower()
    if suffix not in get_config().app.supported_file_types:
        raise ValidationError(f"Unsupported file type '.{suffix}'")
    return file_path.read_bytes()


def print_course_profile(profile: CourseProfile, metric: bool = False):
    """Print course statistics."""
    print("\n🗺️  COURSE PROFILE")
    print("-" * 40)
    print(f"Distance: {UnitConverter.format_distance(profile.total_distance_miles, metric)}")
    print(f"Elevation Gain: {UnitConverter.format_elevation(profile.elevation_gain_ft, metric)}")
    print(f"Elevation Loss: {UnitConverter.format_elevation(profile.elevation_loss_ft, metric)}")
    print(f"High / Low: {UnitConverter.format_elevation(profile.elevation_high_ft, metric)} / "
          f"{UnitConverter.format_elevation(profile.elevation_low_ft, metric)}")
    terrain = profile.terrain_composition
    print(f"Terrain: {terrain.climbing_pct}% climbing, {terrain.flat_pct}% flat, {terrain.descent_pct}% descending")
    print(f"Avg Climb / Descent Grade: {profile.avg_climb_grade}% / {profile.avg_descent_grade}%")
    print(f"Track Points: {profile.point_count:,}")


def print_power_targets(targets, athlete: AthleteProfile, profile: CourseProfile):
    print(f"\n⚡ POWER TARGETS ({targets.discipline}, adjusted FTP {targets.altitude_adjusted_ftp:.0f}W)")
    print("-" * 40)
    for effort, power in targets.efforts.items():
        times = estimate_terrain_times(profile, athlete, effort, targets.discipline,
                                       position=get_config().performance.default_position)
        print(f"{effort.title():8} NP {power.altitude_adjusted_np:4.0f}W | climb {power.climbing_np:4.0f}W | "
              f"flat {power.flat_np:4.0f}W | race-day {power.race_day_np:4.0f}W | "
              f"est. {format_duration(times.total_minutes)}")


def run_profile(args) -> int:
    processor = CourseProcessor()
    result = processor.compute_course_profile(read_course(args.gpx))
    if not result.is_ok:
        print(f"\n❌ Could not read course: {result.error}")
        return 1

    print_course_profile(result.value, args.metric)
    return 0


def run_plan(args) -> int:
    config = get_config()
    processor = CourseProcessor()
    raw = read_course(args.gpx)

    result = processor.compute_course_profile(raw)
    if not result.is_ok:
        print(f"\n❌ Could not read course: {result.error}")
        return 1
    profile = result.value
    elevation_profile = processor.build_elevation_profile(processor.parse_gpx_file(raw))
    print_course_profile(profile, args.metric)

    checkpoints: List[Checkpoint] = [parse_checkpoint(c) for c in args.checkpoint or []]
    goal_minutes = parse_duration(args.goal)
    segments = generate_segments(checkpoints, profile.total_distance_miles, goal_minutes, elevation_profile)
    if args.preset:
        segments = apply_effort_preset(segments, args.preset, elevation_profile)

    print(f"\n📋 SEGMENT PLAN (goal {format_duration(goal_minutes)})")
    print("-" * 40)
    print(segments_to_dataframe(segments).to_string(index=False))
    average_mph = calculate_required_speed(profile.total_distance_miles, goal_minutes)
    print(f"Average speed required: {UnitConverter.format_speed(average_mph, args.metric)}")

    arrivals = compute_arrivals(segments, args.start or config.pacing.default_start_time,
                                cutoffs_from_checkpoints(checkpoints))
    print("\n🏁 CHECKPOINT ARRIVALS")
    print("-" * 40)
    for arrival in arrivals:
        line = f"Mile {arrival.mile:6.1f}  {arrival.name:20} {arrival.arrival_time:>9}"
        if arrival.cutoff_status is not None:
            status = arrival.cutoff_status.value
            line += f"  cutoff {arrival.cutoff_time} ({arrival.cutoff_margin:+d} min) {STATUS_ICONS[status]} {status}"
        print(line)

    if args.ftp:
        performance = config.performance
        athlete = AthleteProfile(
            ftp_watts=args.ftp,
            weight_kg=args.weight,
            gear_weight_kg=performance.default_gear_weight_kg,
            altitude_adjustment_factor=args.altitude_adjustment,
        )
        targets = compute_target_power(athlete.ftp_watts, athlete.altitude_adjustment_factor,
                                       athlete.intensity_factors, args.discipline)
        print_power_targets(targets, athlete, profile)

        nutrition = compute_nutrition(targets["tempo"].altitude_adjusted_np, goal_minutes / 60)
        print("\n🍌 NUTRITION (tempo effort)")
        print("-" * 40)
        print(f"Calories: {nutrition.total_calories:,} kcal")
        print(f"Carbohydrate: {nutrition.total_cho:,} g (minimum {nutrition.min_cho_per_hour} g/hr)")
        print(f"Fluid: {nutrition.total_hydration:,} ml")
        print(f"Sodium: {nutrition.total_sodium:,} mg")

    if args.export:
        written = export_plan_csv(segments, args.export, arrivals)
        print(f"\n💾 Exported: {', '.join(str(p) for p in written)}")

    return 0


def build_parser() -> argparse.ArgumentParser:
    config = get_config()
    parser = argparse.ArgumentParser(prog="paceline", description="PaceLine race pacing planner")
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--metric', action='store_true', help='Show distances and elevations in metric units')
    subparsers = parser.add_subparsers(dest='command', required=True)

    profile_parser = subparsers.add_parser('profile', help='Show course profile')
    profile_parser.add_argument('--gpx', required=True, help='GPX course file')

    plan_parser = subparsers.add_parser('plan', help='Build a pacing plan')
    plan_parser.add_argument('--gpx', required=True, help='GPX course file')
    plan_parser.add_argument('--goal', required=True, help='Goal finish time (HH:MM or HH:MM:SS)')
    plan_parser.add_argument('--start', help='Start time (HH:MM)')
    plan_parser.add_argument('--checkpoint', action='append',
                             help='Checkpoint as "Name@mile[@cutoff]" (repeatable)')
    plan_parser.add_argument('--preset', choices=[p.value for p in EffortPreset],
                             help='Effort preset')
    plan_parser.add_argument('--ftp', type=float, help='Functional threshold power (W)')
    plan_parser.add_argument('--weight', type=float, default=75.0, help='Rider weight (kg)')
    plan_parser.add_argument('--altitude-adjustment', type=float,
                             default=config.performance.default_altitude_adjustment,
                             help='Fractional FTP reduction at altitude')
    plan_parser.add_argument('--discipline', default=config.performance.default_discipline,
                             choices=[d.value for d in Discipline], help='Race discipline')
    plan_parser.add_argument('--export', help='Directory to write CSV plan files')
    return parser


def main(argv=None) -> int:
    """Main function."""
    args = build_parser().parse_args(argv)

    config = get_config()
    setup_logging("DEBUG" if args.verbose else config.app.log_level, config.app.log_to_file)

    print_banner()

    try:
        if args.command == 'profile':
            return run_profile(args)
        return run_plan(args)
    except (PacingError, OSError) as e:
        print(f"\n❌ Error: {e}")
        log_error(logger, e, f"paceline {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
