"""
PaceLine - race-day pacing engine for endurance cycling.

Turns a GPX course, an athlete profile and a goal time into segment
targets, checkpoint arrivals with cutoff status, and power and
nutrition targets.
"""

from .exceptions import Err, Ok, ParseError, PacingError, Result, ValidationError
from .models import (
    AthleteProfile,
    Checkpoint,
    CheckpointArrival,
    CheckpointType,
    CourseProfile,
    CutoffStatus,
    Discipline,
    EffortLevel,
    EffortPreset,
    ElevationPoint,
    IntensityFactors,
    NutritionPlan,
    PowerTargets,
    Segment,
    SegmentOverride,
    TerrainComposition,
    TrackPoint,
)
from .processing.course_processor import compute_course_profile, elevation_profile_from_gpx
from .processing.segment_generator import apply_effort_preset, apply_segment_overrides, generate_segments
from .processing.checkpoint_analyzer import compute_arrivals
from .performance.power_estimator import compute_target_power, estimate_speed
from .performance.nutrition import compute_nutrition

__version__ = "1.0.0"

__all__ = [
    'compute_course_profile', 'elevation_profile_from_gpx', 'estimate_speed', 'compute_target_power',
    'generate_segments', 'apply_segment_overrides', 'apply_effort_preset', 'compute_arrivals',
    'compute_nutrition',
    'Ok', 'Err', 'Result', 'PacingError', 'ParseError', 'ValidationError',
    'AthleteProfile', 'Checkpoint', 'CheckpointArrival', 'CheckpointType', 'CourseProfile',
    'CutoffStatus', 'Discipline', 'EffortLevel', 'EffortPreset', 'ElevationPoint',
    'IntensityFactors', 'NutritionPlan', 'PowerTargets', 'Segment', 'SegmentOverride',
    'TerrainComposition', 'TrackPoint',
]
