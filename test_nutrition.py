#!/usr/bin/env python3
"""
Test script for race energy totals and sports-science nutrition targets.
"""

import os
import sys

import pytest

# Add the project root to the path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from paceline.config.config import get_config
from paceline.exceptions import ValidationError
from paceline.performance.nutrition import (
    NutritionInputs,
    calculate_calorie_target,
    calculate_carb_targets,
    calculate_energy_kj,
    calculate_fluid_targets,
    calculate_min_cho_per_hour,
    calculate_race_nutrition_plan,
    calculate_sodium_targets,
    compute_nutrition,
    get_duration_category,
    is_caffeine_late,
    validate_hourly_intake,
)


def test_energy_model():
    print("Testing energy model...")

    assert calculate_energy_kj(200, 3600) == 720
    assert calculate_min_cho_per_hour(720) == 36

    plan = compute_nutrition(200, 5, 90, 750, 500)
    assert plan.total_calories == 3600
    assert plan.min_cho_per_hour == 36
    assert plan.total_cho == 450
    assert plan.total_hydration == 3750
    assert plan.total_sodium == 2500

    print(f"✅ {plan.total_calories} kcal, minimum {plan.min_cho_per_hour} g/hr carbohydrate")


def test_totals_are_linear_in_duration():
    print("Testing duration linearity...")

    for hours in (1, 2.5, 7.25, 10, 16.4):
        plan = compute_nutrition(180, hours, 80, 600, 700)
        assert plan.total_cho == round(80 * hours)
        assert plan.total_hydration == round(600 * hours)
        assert plan.total_sodium == round(700 * hours)

    print("✅ Totals scale with race time")


def test_minimum_is_advisory():
    """The minimum carbohydrate rate does not change the caller's totals."""
    plan = compute_nutrition(300, 4, 20, 500, 500)
    assert plan.min_cho_per_hour == 54
    assert plan.total_cho == 80


def test_zero_duration():
    plan = compute_nutrition(200, 0, 90, 750, 500)
    assert plan.total_calories == 0
    assert plan.min_cho_per_hour == 0
    assert plan.total_cho == 0

    with pytest.raises(ValidationError):
        compute_nutrition(200, -1)


def test_configured_default_rates():
    defaults = get_config().nutrition
    plan = compute_nutrition(200, 2)
    assert plan.total_cho == defaults.default_cho_per_hour * 2
    assert plan.total_hydration == defaults.default_hydration_ml_per_hour * 2
    assert plan.total_sodium == defaults.default_sodium_mg_per_hour * 2


def test_carb_targets():
    assert calculate_carb_targets(0.5, 0).max == 0
    short = calculate_carb_targets(1.5, 0)
    assert (short.min, short.max, short.target) == (30, 60, 45)

    altitude = calculate_carb_targets(6, 9000, "intermediate")
    assert (altitude.min, altitude.max, altitude.target) == (90, 100, 95)

    high = calculate_carb_targets(6, 11000, "advanced")
    assert (high.min, high.max) == (94, 120)

    with pytest.raises(ValidationError):
        calculate_carb_targets(6, 0, "elite")


def test_fluid_targets():
    assert calculate_fluid_targets(45, 40, 70).target == 500
    assert calculate_fluid_targets(75, 50, 70).target == 875

    humid_light = calculate_fluid_targets(60, 80, 60)
    assert (humid_light.min, humid_light.max) == (540, 810)

    tested = calculate_fluid_targets(95, 90, 90, known_sweat_rate_ml_per_hour=1000)
    assert (tested.min, tested.max, tested.target) == (800, 1200, 1000)


def test_sodium_targets():
    average = calculate_sodium_targets("average", 65, 40)
    assert (average.min, average.max, average.target) == (500, 700, 600)

    hot_humid = calculate_sodium_targets("heavy", 90, 80)
    assert (hot_humid.min, hot_humid.max, hot_humid.target) == (1100, 1400, 1250)

    with pytest.raises(ValidationError):
        calculate_sodium_targets("extreme", 70, 50)


def test_race_nutrition_plan():
    print("Testing race nutrition plan...")

    inputs = NutritionInputs(
        race_duration_hours=6,
        elevation_gain_ft=8000,
        max_elevation_ft=9000,
        temperature_f=75,
        humidity=50,
        athlete_weight_kg=70,
    )
    plan = calculate_race_nutrition_plan(inputs)

    assert plan.hourly_targets.carbs.target == 95
    assert plan.hourly_targets.fluid.target == 875
    assert plan.hourly_targets.sodium.target == 600
    assert plan.hourly_targets.calories_target == 418
    assert calculate_calorie_target(95) == 418
    assert plan.total_targets == {"carbs": 570, "calories": 2508, "sodium": 3600, "fluid": 5250}
    assert plan.factors["altitude_multiplier"] == 1.125
    assert plan.factors["duration_category"] == "ultra"
    assert any("Moderate altitude" in w for w in plan.warnings)
    assert any("glucose + fructose" in r for r in plan.recommendations)
    assert any("500ml" in r for r in plan.recommendations)

    print(f"✅ {plan.hourly_targets.carbs.target} g/hr carbs, {len(plan.warnings)} warnings")


def test_duration_category():
    assert get_duration_category(0.5) == "short"
    assert get_duration_category(1.5) == "moderate"
    assert get_duration_category(3) == "endurance"
    assert get_duration_category(6) == "ultra"
    assert get_duration_category(12) == "extreme ultra"


def test_validate_hourly_intake():
    inputs = NutritionInputs(
        race_duration_hours=6,
        elevation_gain_ft=3000,
        max_elevation_ft=4000,
        temperature_f=75,
        humidity=50,
        athlete_weight_kg=70,
    )
    targets = calculate_race_nutrition_plan(inputs).hourly_targets

    on_target = validate_hourly_intake(90, 850, 600, targets)
    assert on_target.carbs_status == "on-target"
    assert on_target.fluid_status == "on-target"
    assert on_target.sodium_status == "on-target"
    assert on_target.warnings == []

    low = validate_hourly_intake(30, 200, 0, targets, has_optimal_carb_ratio=False)
    assert low.carbs_status == "below"
    assert low.fluid_status == "below"
    assert low.sodium_status == "below"
    assert low.sodium_percent == 0
    assert len(low.warnings) == 3

    high = validate_hourly_intake(200, 850, 600, targets, has_optimal_carb_ratio=False)
    assert high.carbs_status == "above"
    assert "High carb intake without glucose:fructose mix may cause GI issues" in high.warnings


def test_caffeine_timing():
    assert is_caffeine_late(8, 12)
    assert is_caffeine_late(7, 10)
    assert not is_caffeine_late(2, 10)


def main():
    """Run nutrition tests."""
    print("=== Nutrition Test ===\n")

    tests = [
        test_energy_model,
        test_totals_are_linear_in_duration,
        test_minimum_is_advisory,
        test_zero_duration,
        test_configured_default_rates,
        test_carb_targets,
        test_fluid_targets,
        test_sodium_targets,
        test_race_nutrition_plan,
        test_duration_category,
        test_validate_hourly_intake,
        test_caffeine_timing,
    ]

    try:
        for test in tests:
            test()
        print("\n🎉 All nutrition tests passed!")
        return True
    except Exception as e:
        print(f"\n❌ Test failed: {e}")
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
