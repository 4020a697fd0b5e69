"""
Race nutrition calculations.

Two layers:
- Energy model: target NP and duration -> calories, minimum carbohydrate
  and totals for caller-chosen per-hour rates (compute_nutrition).
- Sports-science targets: carbohydrate, fluid and sodium ranges from race
  duration, altitude, weather and athlete traits
  (calculate_race_nutrition_plan), plus in-race intake checks.

kJ of work is taken as kcal burned (efficiency cancels the unit factor)
and 20% of burned calories is the minimum carbohydrate replacement.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config.config import get_config
from ..config.logging_config import get_logger
from ..exceptions import ValidationError
from ..models import NutritionPlan
from ..utils.units import round_half_up

logger = get_logger(__name__)

KCAL_PER_GRAM_CHO = 4
MIN_CHO_CALORIE_FRACTION = 0.20

# Carbohydrate ranges (g/hr) by race duration
CARB_RANGES = {
    "under_1_hour": (0, 0),
    "one_to_two_hours": (30, 60),
    "two_to_three_hours": (60, 90),
    "over_three_hours": (80, 120),
}

GUT_TRAINING_MAX_CARBS = {
    "beginner": 80,
    "intermediate": 100,
    "advanced": 120,
}

# Altitude (ft) thresholds and carbohydrate multipliers
MODERATE_ALTITUDE_FT = 8000
HIGH_ALTITUDE_FT = 10000
MODERATE_ALTITUDE_CARB_MULTIPLIER = 1.125
HIGH_ALTITUDE_CARB_MULTIPLIER = 1.175

# Fluid ranges (ml/hr) by temperature band, upper bound exclusive (°F)
FLUID_RANGES = [
    (50, (400, 600)),
    (70, (500, 750)),
    (85, (750, 1000)),
    (None, (1000, 1500)),
]
WARM_TEMPERATURE_F = 70
HOT_TEMPERATURE_F = 85

HUMIDITY_THRESHOLD = 70
HUMIDITY_FLUID_MULTIPLIER = 1.20

LIGHT_ATHLETE_KG = 65
HEAVY_ATHLETE_KG = 85

SODIUM_RANGES = {
    "light": (300, 500),
    "average": (500, 700),
    "heavy": (700, 1000),
}
SODIUM_HEAT_ADD_MG = 250
SODIUM_HUMIDITY_ADD_MG = 150

# Buffer over carbohydrate calories for protein and fat
CALORIE_BUFFER = 1.1


def calculate_energy_kj(target_np: float, race_time_seconds: float) -> float:
    """Mechanical work in kJ at target_np for race_time_seconds."""
    return target_np * race_time_seconds / 1000


def calculate_calories_burned(energy_kj: float) -> int:
    return int(round_half_up(energy_kj))


def calculate_min_cho_per_hour(calories_per_hour: float) -> int:
    """Grams of carbohydrate per hour covering 20% of hourly calories."""
    return int(round_half_up(calories_per_hour * MIN_CHO_CALORIE_FRACTION / KCAL_PER_GRAM_CHO))


def compute_nutrition(target_np: float, race_time_hours: float,
                      cho_per_hour: Optional[float] = None,
                      hydration_ml_per_hour: Optional[float] = None,
                      sodium_mg_per_hour: Optional[float] = None) -> NutritionPlan:
    """
    Race totals for calories, carbohydrate, fluid and sodium.

    Totals are per-hour rate x hours, independent of the advisory minimum
    carbohydrate rate. Unset rates fall back to the configured defaults.
    """
    if race_time_hours < 0:
        raise ValidationError(f"Race time must not be negative (got {race_time_hours})")
    if target_np < 0:
        raise ValidationError(f"Target power must not be negative (got {target_np})")

    defaults = get_config().nutrition
    if cho_per_hour is None:
        cho_per_hour = defaults.default_cho_per_hour
    if hydration_ml_per_hour is None:
        hydration_ml_per_hour = defaults.default_hydration_ml_per_hour
    if sodium_mg_per_hour is None:
        sodium_mg_per_hour = defaults.default_sodium_mg_per_hour

    total_calories = calculate_calories_burned(calculate_energy_kj(target_np, race_time_hours * 3600))
    calories_per_hour = total_calories / race_time_hours if race_time_hours > 0 else 0

    plan = NutritionPlan(
        total_calories=total_calories,
        total_cho=int(round_half_up(cho_per_hour * race_time_hours)),
        total_hydration=int(round_half_up(hydration_ml_per_hour * race_time_hours)),
        total_sodium=int(round_half_up(sodium_mg_per_hour * race_time_hours)),
        min_cho_per_hour=calculate_min_cho_per_hour(calories_per_hour),
    )
    logger.debug(f"Nutrition: {plan.total_calories} kcal over {race_time_hours:.1f}h")
    return plan


@dataclass
class NutritionInputs:
    """Race and athlete parameters for sports-science nutrition targets."""
    race_duration_hours: float
    elevation_gain_ft: float
    max_elevation_ft: float
    temperature_f: float
    humidity: float
    athlete_weight_kg: float
    sweat_rate: str = "average"
    gut_training_level: str = "intermediate"
    known_sweat_rate_ml_per_hour: Optional[float] = None


@dataclass
class IntakeRange:
    min: int
    max: int
    target: int


@dataclass
class HourlyTargets:
    carbs: IntakeRange
    fluid: IntakeRange
    sodium: IntakeRange
    calories_target: int


@dataclass
class RaceNutritionPlan:
    hourly_targets: HourlyTargets
    total_targets: Dict[str, int]
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    factors: Dict[str, object] = field(default_factory=dict)


@dataclass
class HourlyValidation:
    carbs_status: str
    carbs_percent: int
    fluid_status: str
    fluid_percent: int
    sodium_status: str
    sodium_percent: int
    warnings: List[str] = field(default_factory=list)


def _round(value: float) -> int:
    return int(round_half_up(value))


def get_carb_range_for_duration(duration_hours: float):
    if duration_hours < 1:
        return CARB_RANGES["under_1_hour"]
    if duration_hours < 2:
        return CARB_RANGES["one_to_two_hours"]
    if duration_hours < 3:
        return CARB_RANGES["two_to_three_hours"]
    return CARB_RANGES["over_three_hours"]


def get_altitude_multiplier(max_elevation_ft: float) -> float:
    if max_elevation_ft >= HIGH_ALTITUDE_FT:
        return HIGH_ALTITUDE_CARB_MULTIPLIER
    if max_elevation_ft >= MODERATE_ALTITUDE_FT:
        return MODERATE_ALTITUDE_CARB_MULTIPLIER
    return 1.0


def calculate_carb_targets(duration_hours: float, max_elevation_ft: float,
                           gut_training_level: str = "intermediate") -> IntakeRange:
    """Carbohydrate g/hr: duration range scaled for altitude, capped by gut training."""
    if gut_training_level not in GUT_TRAINING_MAX_CARBS:
        raise ValidationError(f"Unknown gut training level '{gut_training_level}'")

    base_min, base_max = get_carb_range_for_duration(duration_hours)
    multiplier = get_altitude_multiplier(max_elevation_ft)

    adjusted_min = _round(base_min * multiplier)
    capped_max = min(_round(base_max * multiplier), GUT_TRAINING_MAX_CARBS[gut_training_level])
    return IntakeRange(adjusted_min, capped_max, _round((adjusted_min + capped_max) / 2))


def get_fluid_range_for_temperature(temperature_f: float):
    for upper, fluid_range in FLUID_RANGES:
        if upper is None or temperature_f < upper:
            return fluid_range
    return FLUID_RANGES[-1][1]


def get_weight_fluid_factor(weight_kg: float) -> float:
    if weight_kg < LIGHT_ATHLETE_KG:
        return 0.9
    if weight_kg > HEAVY_ATHLETE_KG:
        return 1.1
    return 1.0


def calculate_fluid_targets(temperature_f: float, humidity: float, athlete_weight_kg: float,
                            known_sweat_rate_ml_per_hour: Optional[float] = None) -> IntakeRange:
    """Fluid ml/hr: 80-120% of a tested sweat rate, else from weather and body weight."""
    if known_sweat_rate_ml_per_hour and known_sweat_rate_ml_per_hour > 0:
        return IntakeRange(
            _round(known_sweat_rate_ml_per_hour * 0.8),
            _round(known_sweat_rate_ml_per_hour * 1.2),
            _round(known_sweat_rate_ml_per_hour),
        )

    base_min, base_max = get_fluid_range_for_temperature(temperature_f)
    factor = get_weight_fluid_factor(athlete_weight_kg)
    if humidity > HUMIDITY_THRESHOLD:
        factor *= HUMIDITY_FLUID_MULTIPLIER

    adjusted_min = _round(base_min * factor)
    adjusted_max = _round(base_max * factor)
    return IntakeRange(adjusted_min, adjusted_max, _round((adjusted_min + adjusted_max) / 2))


def calculate_sodium_targets(sweat_rate: str, temperature_f: float, humidity: float) -> IntakeRange:
    """Sodium mg/hr by sweat rate, raised in heat and high humidity."""
    if sweat_rate not in SODIUM_RANGES:
        raise ValidationError(f"Unknown sweat rate '{sweat_rate}'")

    low, high = SODIUM_RANGES[sweat_rate]
    if temperature_f >= HOT_TEMPERATURE_F:
        low += SODIUM_HEAT_ADD_MG
        high += SODIUM_HEAT_ADD_MG
    if humidity > HUMIDITY_THRESHOLD:
        low += SODIUM_HUMIDITY_ADD_MG
        high += SODIUM_HUMIDITY_ADD_MG

    return IntakeRange(low, high, _round((low + high) / 2))


def calculate_calorie_target(carbs_grams: float) -> int:
    return _round(carbs_grams * KCAL_PER_GRAM_CHO * CALORIE_BUFFER)


def get_duration_category(duration_hours: float) -> str:
    if duration_hours < 1:
        return "short"
    if duration_hours < 2:
        return "moderate"
    if duration_hours < 4:
        return "endurance"
    if duration_hours < 8:
        return "ultra"
    return "extreme ultra"


def generate_warnings(inputs: NutritionInputs) -> List[str]:
    warnings = []

    if inputs.max_elevation_ft >= HIGH_ALTITUDE_FT:
        warnings.append(
            f"High altitude ({inputs.max_elevation_ft:,.0f} ft) increases carbohydrate needs by 15-20%. "
            "Consider packing extra gels."
        )
    elif inputs.max_elevation_ft >= MODERATE_ALTITUDE_FT:
        warnings.append(
            f"Moderate altitude ({inputs.max_elevation_ft:,.0f} ft) increases carbohydrate needs by 10-15%."
        )

    if inputs.temperature_f >= HOT_TEMPERATURE_F:
        warnings.append(
            f"Hot conditions ({inputs.temperature_f:g}°F) significantly increase fluid and sodium needs. "
            "Start hydrating early and drink before you're thirsty."
        )

    if inputs.humidity > HUMIDITY_THRESHOLD:
        warnings.append(
            f"High humidity ({inputs.humidity:g}%) impairs sweat evaporation. "
            "Increase fluid intake and consider ice/cooling strategies."
        )

    if inputs.temperature_f >= WARM_TEMPERATURE_F and inputs.humidity > HUMIDITY_THRESHOLD:
        warnings.append("Heat + humidity combination creates high heat stress. Monitor for heat illness symptoms.")

    if inputs.race_duration_hours >= 8:
        warnings.append(
            "Ultra-distance event: Consider solid foods alongside gels to prevent taste fatigue. "
            "Practice your nutrition plan in training."
        )

    if inputs.gut_training_level == "beginner" and inputs.race_duration_hours >= 3:
        warnings.append(
            "For races over 3 hours, gut training helps you absorb more carbs. "
            "Practice with 80-100g/hour in training to build tolerance."
        )

    return warnings


def generate_recommendations(inputs: NutritionInputs, hourly: HourlyTargets) -> List[str]:
    recommendations = []

    if hourly.carbs.target >= 60:
        recommendations.append(
            "At 60g+/hour carbs, use products with glucose + fructose (1:0.8 or 2:1 ratio) "
            "to maximize absorption."
        )

    if inputs.sweat_rate == "heavy" or hourly.sodium.target >= 700:
        recommendations.append("Consider electrolyte supplements in addition to food.")

    recommendations.append("Set a timer to eat every 20-30 minutes rather than waiting until you feel hungry.")
    recommendations.append("Front-load nutrition in the first 2-3 hours while intensity is lower and gut is fresh.")

    if inputs.temperature_f >= WARM_TEMPERATURE_F:
        recommendations.append("In warm conditions, drink 500ml in the hour before the start.")

    return recommendations


def calculate_race_nutrition_plan(inputs: NutritionInputs) -> RaceNutritionPlan:
    """
    Build hourly intake ranges, race totals, warnings and recommendations.

    Hourly targets are the middle of each range; totals are target x hours.
    """
    if inputs.race_duration_hours < 0:
        raise ValidationError(f"Race duration must not be negative (got {inputs.race_duration_hours})")

    carbs = calculate_carb_targets(inputs.race_duration_hours, inputs.max_elevation_ft, inputs.gut_training_level)
    fluid = calculate_fluid_targets(inputs.temperature_f, inputs.humidity, inputs.athlete_weight_kg,
                                    inputs.known_sweat_rate_ml_per_hour)
    sodium = calculate_sodium_targets(inputs.sweat_rate, inputs.temperature_f, inputs.humidity)
    hourly = HourlyTargets(carbs=carbs, fluid=fluid, sodium=sodium,
                           calories_target=calculate_calorie_target(carbs.target))

    hours = inputs.race_duration_hours
    total_targets = {
        "carbs": _round(carbs.target * hours),
        "calories": _round(hourly.calories_target * hours),
        "sodium": _round(sodium.target * hours),
        "fluid": _round(fluid.target * hours),
    }

    factors = {
        "altitude_multiplier": get_altitude_multiplier(inputs.max_elevation_ft),
        "temperature_multiplier": 1.3 if inputs.temperature_f >= HOT_TEMPERATURE_F else 1.0,
        "humidity_multiplier": HUMIDITY_FLUID_MULTIPLIER if inputs.humidity > HUMIDITY_THRESHOLD else 1.0,
        "duration_category": get_duration_category(hours),
    }

    logger.info(
        f"Nutrition plan ({factors['duration_category']}): {carbs.target}g carbs, "
        f"{fluid.target}ml fluid, {sodium.target}mg sodium per hour"
    )
    return RaceNutritionPlan(
        hourly_targets=hourly,
        total_targets=total_targets,
        warnings=generate_warnings(inputs),
        recommendations=generate_recommendations(inputs, hourly),
        factors=factors,
    )


def _intake_status(actual: float, target: IntakeRange) -> str:
    if actual < target.min * 0.8:
        return "below"
    if actual > target.max * 1.2:
        return "above"
    return "on-target"


def _percent_of(actual: float, target: float) -> int:
    if target <= 0:
        return 0
    return _round(actual / target * 100)


def validate_hourly_intake(carbs: float, fluid: float, sodium: float, targets: HourlyTargets,
                           has_optimal_carb_ratio: bool = True) -> HourlyValidation:
    """Compare one hour's actual intake against the hourly targets (20% tolerance)."""
    carbs_status = _intake_status(carbs, targets.carbs)
    fluid_status = _intake_status(fluid, targets.fluid)
    sodium_status = _intake_status(sodium, targets.sodium)

    warnings = []
    if carbs_status == "below":
        warnings.append("Carb intake below target - consider adding a gel or chews")
    if carbs > 60 and not has_optimal_carb_ratio:
        warnings.append("High carb intake without glucose:fructose mix may cause GI issues")
    if sodium_status == "below":
        warnings.append("No sodium this hour - add electrolytes")
    if fluid_status == "below":
        warnings.append("Fluid intake below target")

    return HourlyValidation(
        carbs_status=carbs_status,
        carbs_percent=_percent_of(carbs, targets.carbs.target),
        fluid_status=fluid_status,
        fluid_percent=_percent_of(fluid, targets.fluid.target),
        sodium_status=sodium_status,
        sodium_percent=_percent_of(sodium, targets.sodium.target),
        warnings=warnings,
    )


def is_caffeine_late(hour_number: int, total_hours: float) -> bool:
    """Caffeine after hour 8 or in the final 4 hours may disturb post-race sleep."""
    return hour_number >= 8 or hour_number > total_hours - 4
