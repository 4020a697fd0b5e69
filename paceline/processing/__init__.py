"""Course parsing, segment generation, checkpoint analysis and export."""

from .course_processor import CourseProcessor, compute_course_profile, elevation_profile_from_gpx
from .segment_generator import generate_segments, apply_segment_overrides, apply_effort_preset
from .checkpoint_analyzer import compute_arrivals, cutoffs_from_checkpoints, get_cutoff_status
from .plan_export import segments_to_dataframe, arrivals_to_dataframe, export_plan_csv

__all__ = ['CourseProcessor', 'compute_course_profile', 'elevation_profile_from_gpx',
           'generate_segments', 'apply_segment_overrides', 'apply_effort_preset',
           'compute_arrivals', 'cutoffs_from_checkpoints', 'get_cutoff_status',
           'segments_to_dataframe', 'arrivals_to_dataframe', 'export_plan_csv']
