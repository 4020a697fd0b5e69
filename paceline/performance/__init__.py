"""Power, speed and nutrition models."""

from .power_estimator import compute_target_power, estimate_speed, estimate_terrain_times
from .nutrition import compute_nutrition, calculate_race_nutrition_plan, NutritionInputs

__all__ = ['compute_target_power', 'estimate_speed', 'estimate_terrain_times',
           'compute_nutrition', 'calculate_race_nutrition_plan', 'NutritionInputs']
