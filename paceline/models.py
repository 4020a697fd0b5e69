"""
Value objects shared across the PaceLine engine.

All types are frozen dataclasses: profiles, segments and arrivals are
derived values that are recomputed rather than patched in place.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class EffortLevel(str, Enum):
    SAFE = "safe"
    TEMPO = "tempo"
    PUSHING = "pushing"


class CheckpointType(str, Enum):
    AID_STATION = "aid_station"
    CHECKPOINT = "checkpoint"


class CutoffStatus(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"


class Discipline(str, Enum):
    ROAD = "road"
    GRAVEL = "gravel"
    XC_MTB = "xc_mtb"
    ULTRA_MTB = "ultra_mtb"


class EffortPreset(str, Enum):
    CONSERVATIVE = "conservative"
    TEMPO = "tempo"
    AGGRESSIVE = "aggressive"


@dataclass(frozen=True)
class TrackPoint:
    """A parsed waypoint. Missing or malformed elevations read as 0 m with has_elevation False."""
    lat: float
    lon: float
    elevation_m: float = 0.0
    time: Optional[str] = None
    has_elevation: bool = True


@dataclass(frozen=True)
class TerrainComposition:
    climbing_pct: int = 0
    flat_pct: int = 0
    descent_pct: int = 0


@dataclass(frozen=True)
class CourseProfile:
    total_distance_miles: float
    elevation_gain_ft: int
    elevation_loss_ft: int
    elevation_high_ft: int
    elevation_low_ft: int
    terrain_composition: TerrainComposition
    avg_climb_grade: float
    avg_descent_grade: float
    point_count: int = 0


@dataclass(frozen=True)
class ElevationPoint:
    """A sample of the elevation-by-mile profile."""
    mile: float
    elevation_ft: float
    lat: Optional[float] = None
    lon: Optional[float] = None
    gradient: float = 0.0


@dataclass(frozen=True)
class IntensityFactors:
    safe: float = 0.67
    tempo: float = 0.70
    pushing: float = 0.73

    def as_dict(self) -> Dict[str, float]:
        return {"safe": self.safe, "tempo": self.tempo, "pushing": self.pushing}


@dataclass(frozen=True)
class AthleteProfile:
    ftp_watts: float
    weight_kg: float
    gear_weight_kg: float = 9.0
    altitude_adjustment_factor: float = 0.20
    intensity_factors: IntensityFactors = field(default_factory=IntensityFactors)

    @property
    def system_weight_kg(self) -> float:
        return self.weight_kg + self.gear_weight_kg


@dataclass(frozen=True)
class Checkpoint:
    name: str
    mile: float
    cutoff_time: Optional[str] = None
    type: CheckpointType = CheckpointType.AID_STATION


@dataclass(frozen=True)
class SegmentElevation:
    elevation_gain: int = 0
    elevation_loss: int = 0
    avg_gradient: float = 0.0


@dataclass(frozen=True)
class Segment:
    start_mile: float
    end_mile: float
    start_name: str
    end_name: str
    target_time_minutes: int
    effort_level: EffortLevel = EffortLevel.TEMPO
    elevation_gain: int = 0
    elevation_loss: int = 0
    avg_gradient: float = 0.0

    @property
    def distance_miles(self) -> float:
        return self.end_mile - self.start_mile


@dataclass(frozen=True)
class SegmentOverride:
    """Caller edit applied to a generated segment."""
    target_time_minutes: Optional[int] = None
    effort_level: Optional[EffortLevel] = None


@dataclass(frozen=True)
class CheckpointArrival:
    name: str
    mile: float
    elapsed_minutes: float
    arrival_time: str
    cutoff_time: Optional[str] = None
    cutoff_margin: Optional[int] = None
    cutoff_status: Optional[CutoffStatus] = None
    day: int = 0


@dataclass(frozen=True)
class EffortPower:
    """Power targets for one effort level, in watts."""
    sea_level_np: float
    altitude_adjusted_np: float
    climbing_np: float
    flat_np: float
    race_day_np: float
    estimated_avg_power: float


@dataclass(frozen=True)
class PowerTargets:
    ftp_watts: float
    altitude_adjusted_ftp: float
    discipline: str
    discipline_multiplier: float
    variability_index: float
    efforts: Dict[str, EffortPower]

    def __getitem__(self, effort: str) -> EffortPower:
        return self.efforts[effort]


@dataclass(frozen=True)
class TerrainTimes:
    climbing_minutes: float
    flat_minutes: float
    descent_minutes: float

    @property
    def total_minutes(self) -> float:
        return self.climbing_minutes + self.flat_minutes + self.descent_minutes


@dataclass(frozen=True)
class NutritionPlan:
    total_calories: int
    total_cho: int
    total_hydration: int
    total_sodium: int
    min_cho_per_hour: int
