"""
Calibration tables for the power and speed model.

The values are empirically tuned and must stay exactly as listed for
output parity. Tables are read-only mappings held by a frozen
dataclass; pass a modified copy (``dataclasses.replace``) to any
physics function to swap them without touching global state.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from ..exceptions import ValidationError


def _frozen(table: dict) -> Mapping[str, float]:
    return MappingProxyType(dict(table))


# Intensity factors (fraction of FTP) by effort level
INTENSITY_FACTORS = _frozen({
    "safe": 0.67,
    "tempo": 0.70,
    "pushing": 0.73,
})

# Power multipliers relative to race target NP
TERRAIN_MULTIPLIERS = _frozen({
    "climb": 1.20,
    "flat": 0.90,
    "descent": 0.40,
})

# Drafting, hike-a-bike and conservation pacing not captured by physics
DISCIPLINE_MULTIPLIERS = _frozen({
    "road": 0.90,
    "gravel": 0.97,
    "xc_mtb": 0.96,
    "ultra_mtb": 0.94,
})

# NP / average power, keyed by discipline or surface
VARIABILITY_INDEX = _frozen({
    "road": 1.04,
    "pavement": 1.05,
    "gravel": 1.08,
    "dirt": 1.10,
    "doubletrack": 1.12,
    "singletrack": 1.15,
    "mtb": 1.18,
    "xc_mtb": 1.18,
    "ultra_mtb": 1.18,
})

# Rolling resistance coefficient (Crr) by surface
ROLLING_RESISTANCE = _frozen({
    "road": 0.004,
    "pavement": 0.004,
    "gravel": 0.010,
    "dirt": 0.012,
    "doubletrack": 0.014,
    "singletrack": 0.018,
    "mtb": 0.015,
})

# Effective drag area (CdA, m^2) by riding position
DRAG_AREA = _frozen({
    "drops": 0.32,
    "hoods": 0.38,
    "gravel": 0.42,
    "mtb": 0.50,
})


@dataclass(frozen=True)
class CalibrationTables:
    intensity_factors: Mapping[str, float] = field(default_factory=lambda: INTENSITY_FACTORS)
    terrain_multipliers: Mapping[str, float] = field(default_factory=lambda: TERRAIN_MULTIPLIERS)
    discipline_multipliers: Mapping[str, float] = field(default_factory=lambda: DISCIPLINE_MULTIPLIERS)
    variability_index: Mapping[str, float] = field(default_factory=lambda: VARIABILITY_INDEX)
    rolling_resistance: Mapping[str, float] = field(default_factory=lambda: ROLLING_RESISTANCE)
    drag_area: Mapping[str, float] = field(default_factory=lambda: DRAG_AREA)
    gravity: float = 9.81
    air_density: float = 1.225
    solver_iterations: int = 10
    solver_initial_velocity: float = 5.0

    def discipline_multiplier(self, discipline: str) -> float:
        return _lookup(self.discipline_multipliers, discipline, "discipline")

    def variability(self, key: str) -> float:
        return _lookup(self.variability_index, key, "discipline or surface")

    def crr(self, surface: str) -> float:
        return _lookup(self.rolling_resistance, surface, "surface")

    def cda(self, position: str) -> float:
        return _lookup(self.drag_area, position, "riding position")


def _lookup(table: Mapping[str, float], key: str, label: str) -> float:
    key = getattr(key, "value", key)
    try:
        return table[key]
    except KeyError:
        raise ValidationError(
            f"Unknown {label} '{key}' (expected one of: {', '.join(sorted(table))})"
        ) from None


DEFAULT_CALIBRATION = CalibrationTables()
