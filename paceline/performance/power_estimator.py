"""
Physics-based speed and power targets.

Forward model: rider power -> steady-state speed on a given grade.
Target model: FTP -> normalized power targets per effort level, terrain
and discipline. All constants come from a CalibrationTables instance.
"""

import math
from typing import Dict, Mapping, Optional, Tuple, Union

from ..config.calibration import CalibrationTables, DEFAULT_CALIBRATION
from ..config.logging_config import get_logger, log_function_entry
from ..exceptions import ValidationError
from ..models import (
    AthleteProfile,
    CourseProfile,
    EffortLevel,
    EffortPower,
    IntensityFactors,
    PowerTargets,
    TerrainTimes,
)
from ..utils.units import UnitConverter

logger = get_logger(__name__)

# Rolling-resistance surface assumed for a discipline when none is given
DISCIPLINE_SURFACES = {"road": "road", "gravel": "gravel", "xc_mtb": "mtb", "ultra_mtb": "mtb"}


def estimate_speed(power_watts: float, weight_kg: float, grade_pct: float = 0,
                   crr: float = 0.005, cda: float = 0.4,
                   calibration: CalibrationTables = DEFAULT_CALIBRATION) -> float:
    """
    Estimate steady-state speed for a power output on a constant grade.

    Fixed-point iteration on v = P / F(v) from the calibrated initial guess,
    for a fixed number of iterations with no convergence check. An iteration
    whose total resisting force is not positive keeps the previous velocity.

    Args:
        power_watts: Power at the pedals
        weight_kg: Total system mass (rider + bike + gear)
        grade_pct: Grade in percent, positive uphill
        crr: Rolling resistance coefficient
        cda: Drag area in m^2

    Returns:
        Speed in m/s
    """
    g = calibration.gravity
    theta = math.atan(grade_pct / 100)

    # Grade-dependent forces are constant across iterations
    rolling_force = crr * weight_kg * g * math.cos(theta)
    gradient_force = weight_kg * g * math.sin(theta)

    velocity = calibration.solver_initial_velocity
    for _ in range(calibration.solver_iterations):
        drag_force = 0.5 * calibration.air_density * cda * velocity * velocity
        total_force = rolling_force + gradient_force + drag_force
        if total_force > 0:
            velocity = power_watts / total_force

    return velocity


def estimate_speed_mph(power_watts: float, weight_kg: float, grade_pct: float = 0,
                       crr: float = 0.005, cda: float = 0.4,
                       calibration: CalibrationTables = DEFAULT_CALIBRATION) -> float:
    """estimate_speed converted to mph."""
    return UnitConverter.mps_to_mph(estimate_speed(power_watts, weight_kg, grade_pct, crr, cda, calibration))


def calculate_altitude_adjusted_ftp(ftp: float, altitude_adjustment_factor: float = 0.20) -> float:
    """FTP reduced by the altitude adjustment fraction."""
    if not 0 <= altitude_adjustment_factor < 1:
        raise ValidationError(
            f"Altitude adjustment must be in [0, 1) (got {altitude_adjustment_factor})"
        )
    return ftp * (1 - altitude_adjustment_factor)


def _intensity_table(intensity_factors: Union[IntensityFactors, Mapping[str, float], None],
                     calibration: CalibrationTables) -> Mapping[str, float]:
    if intensity_factors is None:
        return calibration.intensity_factors
    if isinstance(intensity_factors, IntensityFactors):
        return intensity_factors.as_dict()
    return intensity_factors


def calculate_target_np(adjusted_ftp: float, effort_level: str,
                        intensity_factors: Union[IntensityFactors, Mapping[str, float], None] = None,
                        calibration: CalibrationTables = DEFAULT_CALIBRATION) -> float:
    """Target normalized power for an effort level."""
    table = _intensity_table(intensity_factors, calibration)
    effort = getattr(effort_level, "value", effort_level)
    if effort not in table:
        raise ValidationError(f"Unknown effort level '{effort}'")
    return adjusted_ftp * table[effort]


def calculate_terrain_power(target_np: float, terrain: str,
                            calibration: CalibrationTables = DEFAULT_CALIBRATION) -> float:
    """Scale a target NP for terrain ("climb", "flat" or "descent")."""
    if terrain not in calibration.terrain_multipliers:
        raise ValidationError(f"Unknown terrain '{terrain}'")
    return target_np * calibration.terrain_multipliers[terrain]


def calculate_climb_power(target_np: float, calibration: CalibrationTables = DEFAULT_CALIBRATION) -> float:
    return calculate_terrain_power(target_np, "climb", calibration)


def calculate_flat_power(target_np: float, calibration: CalibrationTables = DEFAULT_CALIBRATION) -> float:
    return calculate_terrain_power(target_np, "flat", calibration)


def calculate_power_range(ftp: float, altitude_adjustment_factor: float, effort_level: str,
                          calibration: CalibrationTables = DEFAULT_CALIBRATION) -> Tuple[int, int]:
    """(low, high) watts for an effort: the flat target and the climbing target."""
    adjusted_ftp = calculate_altitude_adjusted_ftp(ftp, altitude_adjustment_factor)
    target_np = calculate_target_np(adjusted_ftp, effort_level, calibration=calibration)
    return (
        round(calculate_flat_power(target_np, calibration)),
        round(calculate_climb_power(target_np, calibration)),
    )


def compute_target_power(ftp_watts: float, altitude_adjustment_factor: float = 0.20,
                         intensity_factors: Union[IntensityFactors, Mapping[str, float], None] = None,
                         discipline: str = "gravel",
                         calibration: CalibrationTables = DEFAULT_CALIBRATION) -> PowerTargets:
    """
    Compute power targets for every effort level.

    Sea-level, altitude-adjusted, climbing and flat NP are pure FTP math.
    The discipline multiplier (drafting, hike-a-bike, conservation pacing)
    is applied only to race_day_np, and the variability index converts that
    to an estimated average power.
    """
    log_function_entry(logger, "compute_target_power", ftp_watts=ftp_watts, discipline=discipline)
    if ftp_watts < 0:
        raise ValidationError(f"FTP must not be negative (got {ftp_watts})")

    discipline = getattr(discipline, "value", discipline)
    discipline_multiplier = calibration.discipline_multiplier(discipline)
    variability_index = calibration.variability(discipline)
    adjusted_ftp = calculate_altitude_adjusted_ftp(ftp_watts, altitude_adjustment_factor)
    table = _intensity_table(intensity_factors, calibration)

    efforts: Dict[str, EffortPower] = {}
    for effort in EffortLevel:
        sea_level_np = calculate_target_np(ftp_watts, effort, table)
        altitude_np = calculate_target_np(adjusted_ftp, effort, table)
        race_day_np = altitude_np * discipline_multiplier

        efforts[effort.value] = EffortPower(
            sea_level_np=sea_level_np,
            altitude_adjusted_np=altitude_np,
            climbing_np=calculate_climb_power(altitude_np, calibration),
            flat_np=calculate_flat_power(altitude_np, calibration),
            race_day_np=race_day_np,
            estimated_avg_power=race_day_np / variability_index,
        )

    logger.debug(f"Power targets for FTP {ftp_watts}W: adjusted FTP {adjusted_ftp:.0f}W ({discipline})")
    return PowerTargets(
        ftp_watts=ftp_watts,
        altitude_adjusted_ftp=adjusted_ftp,
        discipline=discipline,
        discipline_multiplier=discipline_multiplier,
        variability_index=variability_index,
        efforts=efforts,
    )


def _minutes_for(distance_miles: float, speed_mps: float) -> float:
    speed_mph = UnitConverter.mps_to_mph(speed_mps)
    if distance_miles <= 0 or speed_mph <= 0:
        return 0.0
    return distance_miles / speed_mph * 60


def estimate_terrain_times(profile: CourseProfile, athlete: AthleteProfile, effort_level: str = "tempo",
                           discipline: str = "gravel", surface: Optional[str] = None,
                           position: str = "hoods",
                           calibration: CalibrationTables = DEFAULT_CALIBRATION) -> TerrainTimes:
    """
    Physics estimate of riding time per terrain class for a course.

    The course distance is split by terrain composition; each class is
    ridden at its terrain power (divided by the variability index) on that
    class's average grade.
    """
    discipline = getattr(discipline, "value", discipline)
    surface = surface or DISCIPLINE_SURFACES.get(discipline, discipline)
    crr = calibration.crr(surface)
    cda = calibration.cda(position)
    vi = calibration.variability(discipline)
    mass = athlete.system_weight_kg

    targets = compute_target_power(athlete.ftp_watts, athlete.altitude_adjustment_factor,
                                   athlete.intensity_factors, discipline, calibration)
    power = targets[getattr(effort_level, "value", effort_level)]

    composition = profile.terrain_composition
    climbing_miles = profile.total_distance_miles * composition.climbing_pct / 100
    flat_miles = profile.total_distance_miles * composition.flat_pct / 100
    descent_miles = profile.total_distance_miles * composition.descent_pct / 100

    climb_speed = estimate_speed(power.climbing_np / vi, mass, profile.avg_climb_grade, crr, cda, calibration)
    flat_speed = estimate_speed(power.flat_np / vi, mass, 0, crr, cda, calibration)
    descent_power = calculate_terrain_power(power.altitude_adjusted_np, "descent", calibration) / vi
    descent_speed = estimate_speed(descent_power, mass, profile.avg_descent_grade, crr, cda, calibration)

    times = TerrainTimes(
        climbing_minutes=_minutes_for(climbing_miles, climb_speed),
        flat_minutes=_minutes_for(flat_miles, flat_speed),
        descent_minutes=_minutes_for(descent_miles, descent_speed),
    )
    logger.debug(f"Terrain time estimate ({effort_level}): {times.total_minutes:.0f} min")
    return times
