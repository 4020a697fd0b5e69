"""
Segment generation for race pacing plans.

Partitions a course at its checkpoints and allocates the goal time to each
segment in proportion to difficulty-weighted distance. Generated segments
are plain values; caller edits are applied afterwards as overrides.
"""

from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence

from ..config.logging_config import get_logger, log_function_entry, log_function_exit
from ..exceptions import ValidationError
from ..models import (
    Checkpoint,
    EffortLevel,
    ElevationPoint,
    Segment,
    SegmentElevation,
    SegmentOverride,
)
from ..utils.units import UnitConverter, round_half_up

logger = get_logger(__name__)

# Difficulty model
CLIMB_PENALTY_PER_PCT = 0.20
DESCENT_BONUS_PER_PCT = 0.08
MIN_DESCENT_FACTOR = 0.7
MIN_DIFFICULTY = 0.7
MAX_DIFFICULTY = 3.0

# Mean sampled gradient (%) at which a segment counts as climbing for presets
PRESET_CLIMB_GRADIENT = 2.0

EFFORT_PRESETS: Dict[str, Dict[str, EffortLevel]] = {
    "conservative": {"default": EffortLevel.SAFE, "climb": EffortLevel.SAFE},
    "tempo": {"default": EffortLevel.TEMPO, "climb": EffortLevel.TEMPO},
    "aggressive": {"default": EffortLevel.TEMPO, "climb": EffortLevel.PUSHING},
}


def calculate_segment_time(distance_miles: float, avg_speed_mph: float) -> float:
    """Minutes to cover distance_miles at avg_speed_mph (0 for a non-positive speed)."""
    if avg_speed_mph <= 0:
        return 0
    return (distance_miles / avg_speed_mph) * 60


def calculate_required_speed(distance_miles: float, time_minutes: float) -> float:
    """Average mph needed to cover distance_miles in time_minutes (0 for a non-positive time)."""
    if time_minutes <= 0:
        return 0
    return (distance_miles / time_minutes) * 60


def calculate_terrain_difficulty(distance_miles: float, elevation_gain_ft: float,
                                 elevation_loss_ft: float) -> float:
    """
    Time multiplier for a stretch of course from its elevation gain and loss.

    1.0 is flat; climbing adds 20% per 1% of average climb gradient, descending
    saves 8% per 1% of average descent gradient (never more than 30%). The
    climb and descent effects are weighted by their share of total elevation
    change, and the result is clamped to [0.7, 3.0].
    """
    if distance_miles <= 0:
        return 1.0

    distance_ft = UnitConverter.miles_to_feet(distance_miles)
    avg_climb_gradient = elevation_gain_ft / distance_ft * 100
    avg_descent_gradient = elevation_loss_ft / distance_ft * 100

    climb_penalty = 1.0
    if avg_climb_gradient > 0:
        climb_penalty = 1 + avg_climb_gradient * CLIMB_PENALTY_PER_PCT

    descent_bonus = 1.0
    if avg_descent_gradient > 0:
        descent_bonus = max(MIN_DESCENT_FACTOR, 1 - avg_descent_gradient * DESCENT_BONUS_PER_PCT)

    total_change = elevation_gain_ft + elevation_loss_ft + 1
    climb_ratio = elevation_gain_ft / total_change
    descent_ratio = elevation_loss_ft / total_change

    difficulty = (climb_penalty * climb_ratio
                  + descent_bonus * descent_ratio
                  + 1.0 * (1 - climb_ratio - descent_ratio))

    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, difficulty))


def calculate_terrain_adjusted_time(distance_miles: float, base_speed_mph: float,
                                    elevation_gain_ft: float, elevation_loss_ft: float) -> float:
    """Flat-speed segment time scaled by the terrain difficulty multiplier."""
    base_time = calculate_segment_time(distance_miles, base_speed_mph)
    return base_time * calculate_terrain_difficulty(distance_miles, elevation_gain_ft, elevation_loss_ft)


def extract_segment_elevation(elevation_profile: Sequence[ElevationPoint],
                              start_mile: float, end_mile: float) -> SegmentElevation:
    """
    Elevation gain, loss and average gradient for the profile between two miles.

    Uses every sample with start_mile <= mile <= end_mile. Fewer than two
    samples yield zeros.
    """
    segment_points = [p for p in elevation_profile if start_mile <= p.mile <= end_mile]
    if len(segment_points) < 2:
        return SegmentElevation()

    gain = 0.0
    loss = 0.0
    for prev, curr in zip(segment_points, segment_points[1:]):
        diff = curr.elevation_ft - prev.elevation_ft
        if diff > 0:
            gain += diff
        else:
            loss += abs(diff)

    net_change = segment_points[-1].elevation_ft - segment_points[0].elevation_ft
    distance_ft = UnitConverter.miles_to_feet(end_mile - start_mile)
    avg_gradient = net_change / distance_ft * 100 if distance_ft > 0 else 0

    return SegmentElevation(
        elevation_gain=int(round_half_up(gain)),
        elevation_loss=int(round_half_up(loss)),
        avg_gradient=round_half_up(avg_gradient, 1),
    )


def _segment_bounds(checkpoints: Sequence[Checkpoint], total_distance: float):
    bounds = []
    last_mile = 0.0
    last_name = "Start"

    for checkpoint in sorted(checkpoints, key=lambda c: c.mile):
        bounds.append((last_mile, checkpoint.mile, last_name, checkpoint.name))
        last_mile = checkpoint.mile
        last_name = checkpoint.name

    if last_mile < total_distance:
        bounds.append((last_mile, total_distance, last_name, "Finish"))

    return bounds


def _validate_inputs(checkpoints: Sequence[Checkpoint], total_distance: float, goal_time_minutes: float):
    if total_distance < 0:
        raise ValidationError(f"Total distance must not be negative (got {total_distance})")
    if goal_time_minutes < 0:
        raise ValidationError(f"Goal time must not be negative (got {goal_time_minutes})")
    for checkpoint in checkpoints:
        if checkpoint.mile < 0 or checkpoint.mile > total_distance:
            raise ValidationError(
                f"Checkpoint '{checkpoint.name}' at mile {checkpoint.mile} is outside the course "
                f"[0, {total_distance}]"
            )


def generate_segments(checkpoints: Sequence[Checkpoint], total_distance: float, goal_time_minutes: float,
                      elevation_profile: Optional[Sequence[ElevationPoint]] = None) -> List[Segment]:
    """
    Generate contiguous pacing segments with terrain-adjusted target times.

    Args:
        checkpoints: Named mile markers, in any order
        total_distance: Course length in miles
        goal_time_minutes: Finish time to distribute across segments
        elevation_profile: Optional elevation-by-mile samples

    Returns:
        Segments covering [0, total_distance]. Each target time is rounded
        independently, so their sum may differ slightly from the goal time.
    """
    log_function_entry(logger, "generate_segments", checkpoints=len(checkpoints),
                       total_distance=total_distance, goal_time_minutes=goal_time_minutes)
    _validate_inputs(checkpoints, total_distance, goal_time_minutes)

    raw_segments = []
    for start_mile, end_mile, start_name, end_name in _segment_bounds(checkpoints, total_distance):
        if elevation_profile:
            elevation = extract_segment_elevation(elevation_profile, start_mile, end_mile)
        else:
            elevation = SegmentElevation()
        distance = end_mile - start_mile
        difficulty = calculate_terrain_difficulty(distance, elevation.elevation_gain, elevation.elevation_loss)
        raw_segments.append((start_mile, end_mile, start_name, end_name, distance, elevation, difficulty))

    if not raw_segments:
        logger.warning("No segments generated: course has zero length and no checkpoints")
        return []

    weighted_total = sum(distance * difficulty for *_, distance, _, difficulty in raw_segments)
    if weighted_total <= 0:
        logger.debug("Zero weighted distance, splitting goal time uniformly")

    segments = []
    for start_mile, end_mile, start_name, end_name, distance, elevation, difficulty in raw_segments:
        if weighted_total > 0:
            time_share = distance * difficulty / weighted_total
        else:
            time_share = 1 / len(raw_segments)

        segments.append(Segment(
            start_mile=start_mile,
            end_mile=end_mile,
            start_name=start_name,
            end_name=end_name,
            target_time_minutes=int(round_half_up(goal_time_minutes * time_share)),
            effort_level=EffortLevel.TEMPO,
            elevation_gain=elevation.elevation_gain,
            elevation_loss=elevation.elevation_loss,
            avg_gradient=elevation.avg_gradient,
        ))

    logger.info(f"Generated {len(segments)} segments over {total_distance} miles")
    log_function_exit(logger, "generate_segments", segments)
    return segments


def calculate_total_time(segments: Sequence[Segment]) -> float:
    """Sum of segment target times in minutes."""
    return sum(seg.target_time_minutes for seg in segments)


def apply_segment_overrides(segments: Sequence[Segment],
                            overrides: Mapping[int, SegmentOverride]) -> List[Segment]:
    """
    Apply caller edits (target time and/or effort level) to generated segments.

    Overrides are keyed by segment index. The input segments are left untouched.
    """
    for index, override in overrides.items():
        if not 0 <= index < len(segments):
            raise ValidationError(f"No segment at index {index}")
        if override.target_time_minutes is not None and override.target_time_minutes < 0:
            raise ValidationError(f"Segment {index} target time must not be negative")

    updated = []
    for index, segment in enumerate(segments):
        override = overrides.get(index)
        if override is None:
            updated.append(segment)
            continue

        changes = {}
        if override.target_time_minutes is not None:
            changes["target_time_minutes"] = override.target_time_minutes
        if override.effort_level is not None:
            changes["effort_level"] = EffortLevel(override.effort_level)
        updated.append(replace(segment, **changes))

    logger.debug(f"Applied {len(overrides)} segment overrides")
    return updated


def apply_effort_preset(segments: Sequence[Segment], preset: str,
                        elevation_profile: Sequence[ElevationPoint]) -> List[Segment]:
    """
    Assign effort levels from a preset: climbing segments get the preset's
    climb effort, all others its default effort.
    """
    preset = getattr(preset, "value", preset)
    if preset not in EFFORT_PRESETS:
        raise ValidationError(f"Unknown effort preset '{preset}'")
    config = EFFORT_PRESETS[preset]

    updated = []
    for segment in segments:
        gradients = [p.gradient for p in elevation_profile
                     if segment.start_mile <= p.mile <= segment.end_mile]
        avg_gradient = sum(gradients) / len(gradients) if gradients else 0
        effort = config["climb"] if avg_gradient >= PRESET_CLIMB_GRADIENT else config["default"]
        updated.append(replace(segment, effort_level=effort))

    return updated


__all__ = [
    "apply_effort_preset",
    "apply_segment_overrides",
    "calculate_required_speed",
    "calculate_segment_time",
    "calculate_terrain_adjusted_time",
    "calculate_terrain_difficulty",
    "calculate_total_time",
    "extract_segment_elevation",
    "generate_segments",
]
