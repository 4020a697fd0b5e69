"""
Course processing module for PaceLine.
Handles GPX parsing and the single-pass course profile computation:
distance, noise-filtered elevation gain/loss and terrain composition.
"""

import re
from typing import List, Optional, Sequence, Union

import gpxpy
import gpxpy.gpx
import numpy as np

from ..config.config import get_config
from ..config.logging_config import get_logger, log_function_entry, log_function_exit, log_execution_time
from ..exceptions import Err, Ok, ParseError, Result, ValidationError
from ..models import CourseProfile, ElevationPoint, TerrainComposition, TrackPoint
from ..utils.geo import calculate_gradient, haversine_distance, validate_coordinates
from ..utils.units import UnitConverter, round_half_up

logger = get_logger(__name__)

# Elevation changes within this band (feet) are treated as GPS noise
ELEVATION_NOISE_THRESHOLD_FT = 15

# Grade thresholds (%) for terrain classification
CLIMBING_GRADE_PCT = 2.0
DESCENT_GRADE_PCT = -2.0

# Elevation profile sampling
PROFILE_SAMPLE_INTERVAL_MILES = 0.1
ELEVATION_DROPOUT_FT = 500

_ELE_ELEMENT = re.compile(r"<ele>(.*?)</ele>", re.DOTALL)


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def drop_malformed_elevations(gpx_content: str) -> str:
    """Remove <ele> elements whose text is not a number, leaving the point without elevation."""
    dropped = 0

    def _clean(match):
        nonlocal dropped
        if _is_number(match.group(1)):
            return match.group(0)
        dropped += 1
        return ""

    cleaned = _ELE_ELEMENT.sub(_clean, gpx_content)
    if dropped:
        logger.warning(f"Ignored {dropped} malformed elevation values")
    return cleaned


class _ElevationAccumulator:
    """Thresholded gain/loss against a reference that only moves on a counted change."""

    def __init__(self, first_elevation_ft: float):
        self.reference_ft = first_elevation_ft
        self.gain_ft = 0.0
        self.loss_ft = 0.0
        self.high_ft = first_elevation_ft
        self.low_ft = first_elevation_ft

    def add(self, elevation_ft: float) -> None:
        self.high_ft = max(self.high_ft, elevation_ft)
        self.low_ft = min(self.low_ft, elevation_ft)

        diff = elevation_ft - self.reference_ft
        if diff > ELEVATION_NOISE_THRESHOLD_FT:
            self.gain_ft += diff
            self.reference_ft = elevation_ft
        elif diff < -ELEVATION_NOISE_THRESHOLD_FT:
            self.loss_ft += abs(diff)
            self.reference_ft = elevation_ft


class _TerrainAccumulator:
    """Per-class distance and grade sums for consecutive point pairs."""

    def __init__(self):
        self.climbing_m = 0.0
        self.flat_m = 0.0
        self.descent_m = 0.0
        self.climb_grade_sum = 0.0
        self.climb_count = 0
        self.descent_grade_sum = 0.0
        self.descent_count = 0

    def add(self, distance_m: float, elevation_change_m: float) -> None:
        if distance_m <= 0:
            return

        grade = calculate_gradient(distance_m, elevation_change_m)
        if grade >= CLIMBING_GRADE_PCT:
            self.climbing_m += distance_m
            self.climb_grade_sum += grade
            self.climb_count += 1
        elif grade <= DESCENT_GRADE_PCT:
            self.descent_m += distance_m
            self.descent_grade_sum += grade
            self.descent_count += 1
        else:
            self.flat_m += distance_m

    def composition(self) -> TerrainComposition:
        total = self.climbing_m + self.flat_m + self.descent_m
        if total <= 0:
            return TerrainComposition()
        return TerrainComposition(
            climbing_pct=int(round_half_up(self.climbing_m / total * 100)),
            flat_pct=int(round_half_up(self.flat_m / total * 100)),
            descent_pct=int(round_half_up(self.descent_m / total * 100)),
        )

    def avg_climb_grade(self) -> float:
        if self.climb_count == 0:
            return 0.0
        return round_half_up(self.climb_grade_sum / self.climb_count, 1)

    def avg_descent_grade(self) -> float:
        if self.descent_count == 0:
            return 0.0
        return round_half_up(self.descent_grade_sum / self.descent_count, 1)


class CourseProcessor:
    """Turns raw track documents into course profiles."""

    def __init__(self, max_document_bytes: Optional[int] = None):
        """Initialize the course processor.

        Args:
            max_document_bytes: Upper bound on raw document size; defaults to
                the configured maximum file size.
        """
        if max_document_bytes is None:
            max_document_bytes = get_config().app.max_file_size_bytes
        self.max_document_bytes = max_document_bytes
        logger.debug(f"CourseProcessor initialized (max document: {max_document_bytes} bytes)")

    def parse_gpx_file(self, gpx_content: Union[str, bytes]) -> List[TrackPoint]:
        """Parse GPX content into an ordered list of track points.

        Track points from every track segment are returned in document
        order; a document without track points falls back to its route
        points. Missing or malformed elevations read as 0 m and are flagged
        with has_elevation=False; timestamps are ignored.

        Raises:
            ParseError: the document is not valid GPX or holds no points
            ValidationError: oversized document or out-of-range coordinates
        """
        log_function_entry(logger, "parse_gpx_file")

        if isinstance(gpx_content, bytes):
            if len(gpx_content) > self.max_document_bytes:
                raise ValidationError(f"Track document exceeds {self.max_document_bytes} bytes")
            gpx_content = gpx_content.decode("utf-8", errors="replace")
        elif len(gpx_content.encode("utf-8")) > self.max_document_bytes:
            raise ValidationError(f"Track document exceeds {self.max_document_bytes} bytes")

        gpx_content = drop_malformed_elevations(gpx_content)

        try:
            gpx = gpxpy.parse(gpx_content)
        except (gpxpy.gpx.GPXException, ValueError, TypeError) as e:
            logger.warning(f"GPX document rejected by parser: {e}")
            raise ParseError(f"Invalid GPX document: {e}") from e

        raw_points = [
            point
            for track in gpx.tracks
            for segment in track.segments
            for point in segment.points
        ]
        if not raw_points:
            raw_points = [point for route in gpx.routes for point in route.points]

        if not raw_points:
            raise ParseError("No usable track data: document contains no track points")

        points = []
        for point in raw_points:
            validate_coordinates(point.latitude, point.longitude)
            has_elevation = point.elevation is not None
            points.append(TrackPoint(
                lat=point.latitude,
                lon=point.longitude,
                elevation_m=point.elevation if has_elevation else 0.0,
                has_elevation=has_elevation,
            ))

        logger.info(f"Parsed {len(points)} track points")
        log_function_exit(logger, "parse_gpx_file", points)
        return points

    def calculate_course_profile(self, points: Sequence[TrackPoint]) -> CourseProfile:
        """Aggregate distance, elevation and terrain stats in a single pass.

        Gain and loss only count once a change exceeds the noise threshold
        relative to the last counted elevation, so slow sustained climbs are
        still summed while sub-threshold oscillation is rejected.
        """
        if not points:
            raise ParseError("No usable track data: empty point sequence")

        first = points[0]
        elevation = _ElevationAccumulator(UnitConverter.meters_to_feet(first.elevation_m))
        terrain = _TerrainAccumulator()
        total_distance_miles = 0.0

        for prev, curr in zip(points, points[1:]):
            distance_km = haversine_distance(prev.lat, prev.lon, curr.lat, curr.lon)
            total_distance_miles += UnitConverter.km_to_miles(distance_km)

            elevation.add(UnitConverter.meters_to_feet(curr.elevation_m))
            terrain.add(distance_km * 1000, curr.elevation_m - prev.elevation_m)

        profile = CourseProfile(
            total_distance_miles=round_half_up(total_distance_miles, 1),
            elevation_gain_ft=int(round_half_up(elevation.gain_ft)),
            elevation_loss_ft=int(round_half_up(elevation.loss_ft)),
            elevation_high_ft=int(round_half_up(elevation.high_ft)),
            elevation_low_ft=int(round_half_up(elevation.low_ft)),
            terrain_composition=terrain.composition(),
            avg_climb_grade=terrain.avg_climb_grade(),
            avg_descent_grade=terrain.avg_descent_grade(),
            point_count=len(points),
        )

        logger.debug(
            f"Course profile: {profile.total_distance_miles} mi, "
            f"+{profile.elevation_gain_ft}/-{profile.elevation_loss_ft} ft"
        )
        return profile

    @log_execution_time()
    def compute_course_profile(self, raw_track_text: Union[str, bytes]) -> Result:
        """Parse a raw track document and compute its course profile.

        Returns:
            Ok(CourseProfile), or Err(ParseError | ValidationError). Callers
            must keep any previously stored profile on Err.
        """
        try:
            points = self.parse_gpx_file(raw_track_text)
            return Ok(self.calculate_course_profile(points))
        except (ParseError, ValidationError) as e:
            logger.warning(f"Course profile not computed: {e}")
            return Err(e)

    def build_elevation_profile(self, points: Sequence[TrackPoint],
                                sample_interval_miles: float = PROFILE_SAMPLE_INTERVAL_MILES) -> List[ElevationPoint]:
        """Sample an elevation-by-mile profile from track points.

        A sample is taken for the first point with an elevation and then
        whenever the course has advanced at least sample_interval_miles past
        the last sample. Points without an elevation, and jumps of more than
        500 ft from the last valid elevation, carry the last valid elevation.
        Leading points without an elevation are skipped.
        """
        first_valid = next((i for i, p in enumerate(points) if p.has_elevation), None)
        if first_valid is None:
            return []
        # The hop from the last skipped point to the first valid one still counts
        track = points[max(first_valid - 1, 0):]

        step_miles = [0.0] + [
            UnitConverter.km_to_miles(haversine_distance(prev.lat, prev.lon, curr.lat, curr.lon))
            for prev, curr in zip(track, track[1:])
        ]
        cumulative_miles = np.cumsum(step_miles)

        samples: List[ElevationPoint] = []
        last_valid_ft = None
        last_sampled_ft = None
        last_sampled_mile = 0.0

        for point, mile in zip(track, cumulative_miles):
            mile = float(mile)
            if not point.has_elevation:
                if last_valid_ft is None:
                    continue
                elevation_ft = last_valid_ft
            else:
                elevation_ft = UnitConverter.meters_to_feet(point.elevation_m)
                if last_valid_ft is not None and abs(elevation_ft - last_valid_ft) > ELEVATION_DROPOUT_FT:
                    elevation_ft = last_valid_ft
                else:
                    last_valid_ft = elevation_ft

            if samples and mile - last_sampled_mile < sample_interval_miles:
                continue

            gradient = 0.0
            if last_sampled_ft is not None and mile > last_sampled_mile:
                gradient = (elevation_ft - last_sampled_ft) / UnitConverter.miles_to_feet(mile - last_sampled_mile) * 100

            samples.append(ElevationPoint(
                mile=round_half_up(mile, 1),
                elevation_ft=round_half_up(elevation_ft),
                lat=point.lat,
                lon=point.lon,
                gradient=round_half_up(gradient, 1),
            ))
            last_sampled_ft = elevation_ft
            last_sampled_mile = mile

        logger.debug(f"Elevation profile sampled {len(samples)} of {len(points)} points")
        return samples


def compute_course_profile(raw_track_text: Union[str, bytes]) -> Result:
    """Compute a CourseProfile from a raw GPX document (Ok) or report why not (Err)."""
    return CourseProcessor().compute_course_profile(raw_track_text)


def elevation_profile_from_gpx(raw_track_text: Union[str, bytes]) -> List[ElevationPoint]:
    """Parse a raw GPX document and sample its elevation-by-mile profile."""
    processor = CourseProcessor()
    return processor.build_elevation_profile(processor.parse_gpx_file(raw_track_text))
