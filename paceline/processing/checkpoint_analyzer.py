"""
Checkpoint arrival and cutoff analysis.

Walks the segment list accumulating elapsed time, converts each boundary
to a wall-clock arrival and grades it against that checkpoint's cutoff.
"""

from typing import Dict, List, Mapping, Optional, Sequence

from ..config.config import get_config
from ..config.logging_config import get_logger
from ..models import Checkpoint, CheckpointArrival, CutoffStatus, Segment
from ..utils.time_utils import (
    MINUTES_PER_DAY,
    calculate_arrival_time,
    calculate_cutoff_margin,
    format_cutoff_time,
)

logger = get_logger(__name__)


def get_cutoff_status(margin_minutes: float, safe_margin: Optional[int] = None,
                      caution_margin: Optional[int] = None) -> CutoffStatus:
    """Grade a cutoff margin: >= 60 min safe, >= 30 caution, otherwise danger."""
    pacing = get_config().pacing
    if safe_margin is None:
        safe_margin = pacing.safe_margin_minutes
    if caution_margin is None:
        caution_margin = pacing.caution_margin_minutes

    if margin_minutes >= safe_margin:
        return CutoffStatus.SAFE
    if margin_minutes >= caution_margin:
        return CutoffStatus.CAUTION
    return CutoffStatus.DANGER


def cutoffs_from_checkpoints(checkpoints: Sequence[Checkpoint]) -> Dict[str, str]:
    """Map checkpoint name to cutoff time for the checkpoints that have one."""
    return {cp.name: cp.cutoff_time for cp in checkpoints if cp.cutoff_time}


def _arrival(name: str, mile: float, elapsed: float, start_time: str,
             cutoff: Optional[str]) -> CheckpointArrival:
    arrival_time = calculate_arrival_time(start_time, elapsed)
    day = int(elapsed // MINUTES_PER_DAY)

    if not cutoff:
        return CheckpointArrival(name=name, mile=mile, elapsed_minutes=elapsed,
                                 arrival_time=arrival_time, day=day)

    cutoff_display = format_cutoff_time(cutoff)
    margin = calculate_cutoff_margin(arrival_time, cutoff_display)
    if day > 0:
        logger.warning(f"Arrival at {name} is on day {day + 1}; cutoff compared as same-day time")

    return CheckpointArrival(
        name=name,
        mile=mile,
        elapsed_minutes=elapsed,
        arrival_time=arrival_time,
        cutoff_time=cutoff_display,
        cutoff_margin=margin,
        cutoff_status=get_cutoff_status(margin),
        day=day,
    )


def compute_arrivals(segments: Sequence[Segment], start_time: Optional[str] = None,
                     cutoffs: Optional[Mapping[str, str]] = None) -> List[CheckpointArrival]:
    """
    Compute the arrival at the start and at every segment boundary.

    Args:
        segments: Ordered, contiguous segments
        start_time: Start wall-clock time ("HH:MM"); defaults to the configured start
        cutoffs: Optional checkpoint name -> cutoff time (24-hour or 12-hour)

    Returns:
        One arrival for the start (elapsed 0) followed by one per segment end.
    """
    if start_time is None:
        start_time = get_config().pacing.default_start_time
    cutoffs = cutoffs or {}

    if not segments:
        return []

    start_name = segments[0].start_name or "Start"
    arrivals = [_arrival(start_name, segments[0].start_mile, 0, start_time, cutoffs.get(start_name))]

    elapsed = 0
    for segment in segments:
        elapsed += segment.target_time_minutes
        arrivals.append(_arrival(segment.end_name, segment.end_mile, elapsed, start_time,
                                 cutoffs.get(segment.end_name)))

    danger = [a.name for a in arrivals if a.cutoff_status == CutoffStatus.DANGER]
    if danger:
        logger.info(f"Cutoff danger at: {', '.join(danger)}")
    logger.debug(f"Computed {len(arrivals)} arrivals from start {start_time}")
    return arrivals
