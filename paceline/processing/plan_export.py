"""
Tabular export of a pacing plan.
"""

from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd

from ..config.logging_config import get_logger
from ..models import CheckpointArrival, Segment
from ..utils.time_utils import format_duration
from .segment_generator import calculate_required_speed

logger = get_logger(__name__)

SEGMENT_COLUMNS = [
    "segment", "from", "to", "start_mile", "end_mile", "distance_miles",
    "target_time_minutes", "target_time", "pace_mph", "effort_level",
    "elevation_gain_ft", "elevation_loss_ft", "avg_gradient_pct",
]

ARRIVAL_COLUMNS = [
    "checkpoint", "mile", "elapsed_minutes", "elapsed", "arrival_time",
    "cutoff_time", "cutoff_margin_minutes", "cutoff_status", "day",
]


def segments_to_dataframe(segments: Sequence[Segment]) -> pd.DataFrame:
    """One row per segment, with formatted duration and required pace."""
    rows = []
    for index, seg in enumerate(segments, start=1):
        distance = seg.distance_miles
        rows.append({
            "segment": index,
            "from": seg.start_name,
            "to": seg.end_name,
            "start_mile": seg.start_mile,
            "end_mile": seg.end_mile,
            "distance_miles": round(distance, 1),
            "target_time_minutes": seg.target_time_minutes,
            "target_time": format_duration(seg.target_time_minutes),
            "pace_mph": round(calculate_required_speed(distance, seg.target_time_minutes), 1),
            "effort_level": getattr(seg.effort_level, "value", seg.effort_level),
            "elevation_gain_ft": seg.elevation_gain,
            "elevation_loss_ft": seg.elevation_loss,
            "avg_gradient_pct": seg.avg_gradient,
        })
    return pd.DataFrame(rows, columns=SEGMENT_COLUMNS)


def arrivals_to_dataframe(arrivals: Sequence[CheckpointArrival]) -> pd.DataFrame:
    """One row per checkpoint arrival; cutoff columns are empty where no cutoff applies."""
    rows = []
    for arrival in arrivals:
        status = arrival.cutoff_status
        rows.append({
            "checkpoint": arrival.name,
            "mile": arrival.mile,
            "elapsed_minutes": arrival.elapsed_minutes,
            "elapsed": format_duration(arrival.elapsed_minutes),
            "arrival_time": arrival.arrival_time,
            "cutoff_time": arrival.cutoff_time,
            "cutoff_margin_minutes": arrival.cutoff_margin,
            "cutoff_status": status.value if status is not None else None,
            "day": arrival.day + 1,
        })
    return pd.DataFrame(rows, columns=ARRIVAL_COLUMNS)


def export_plan_csv(segments: Sequence[Segment], output_dir: Union[str, Path],
                    arrivals: Optional[Sequence[CheckpointArrival]] = None,
                    prefix: str = "pacing_plan") -> Sequence[Path]:
    """
    Write the segment table (and arrival table when given) as CSV files.

    Returns:
        Paths of the files written
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    segments_path = output_dir / f"{prefix}_segments.csv"
    segments_to_dataframe(segments).to_csv(segments_path, index=False)
    written.append(segments_path)

    if arrivals is not None:
        arrivals_path = output_dir / f"{prefix}_arrivals.csv"
        arrivals_to_dataframe(arrivals).to_csv(arrivals_path, index=False)
        written.append(arrivals_path)

    logger.info(f"Exported pacing plan to {output_dir} ({len(written)} files)")
    return written
