#!/usr/bin/env python3
"""
Test script for terrain difficulty, segment generation, overrides and presets.
"""

import os
import sys

import pytest

# Add the project root to the path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from paceline.exceptions import ValidationError
from paceline.models import Checkpoint, EffortLevel, EffortPreset, ElevationPoint, SegmentOverride
from paceline.processing.segment_generator import (
    apply_effort_preset,
    apply_segment_overrides,
    calculate_required_speed,
    calculate_segment_time,
    calculate_terrain_adjusted_time,
    calculate_terrain_difficulty,
    calculate_total_time,
    extract_segment_elevation,
    generate_segments,
)


def test_terrain_difficulty_flat_and_degenerate():
    print("Testing terrain difficulty guards...")

    for distance in (0.1, 1, 25, 100):
        assert calculate_terrain_difficulty(distance, 0, 0) == 1.0
    assert calculate_terrain_difficulty(0, 500, 500) == 1.0
    assert calculate_terrain_difficulty(-3, 500, 0) == 1.0

    print("✅ Flat and zero-distance segments have difficulty 1.0")


def test_terrain_difficulty_values():
    print("Testing terrain difficulty values...")

    # 1% average climb: penalty 1.2 weighted by 52.8 / 53.8
    assert calculate_terrain_difficulty(1, 52.8, 0) == pytest.approx(1.19628, abs=1e-4)
    # Descent bonus never drops below 0.7
    assert calculate_terrain_difficulty(1, 0, 10000) == pytest.approx(0.70003, abs=1e-4)
    # Clamped at 3.0
    assert calculate_terrain_difficulty(1, 10000, 0) == 3.0

    print("✅ Climb penalty, descent bonus and clamp applied")


def test_terrain_difficulty_bounds():
    print("Testing terrain difficulty bounds...")

    for distance in (0.5, 2, 10, 50):
        for gain in (0, 10, 250, 1000, 5000, 50000):
            for loss in (0, 10, 250, 1000, 5000, 50000):
                difficulty = calculate_terrain_difficulty(distance, gain, loss)
                assert 0.7 <= difficulty <= 3.0

    print("✅ Difficulty always within [0.7, 3.0]")


def test_proportional_allocation():
    """Checkpoints at 20 and 50 of 100 miles split 600 minutes by distance."""
    print("Testing proportional time allocation...")

    checkpoints = [Checkpoint("Aid 1", 20), Checkpoint("Aid 2", 50)]
    segments = generate_segments(checkpoints, 100, 600)

    assert len(segments) == 3
    assert [(s.start_mile, s.end_mile) for s in segments] == [(0, 20), (20, 50), (50, 100)]
    assert [s.target_time_minutes for s in segments] == [120, 180, 300]
    assert calculate_total_time(segments) == 600
    assert [(s.start_name, s.end_name) for s in segments] == [
        ("Start", "Aid 1"), ("Aid 1", "Aid 2"), ("Aid 2", "Finish")
    ]
    assert all(s.effort_level == EffortLevel.TEMPO for s in segments)
    assert all(s.elevation_gain == 0 and s.elevation_loss == 0 for s in segments)

    print("✅ Segments 120 / 180 / 300 minutes")


def test_segments_are_contiguous():
    print("Testing segment contiguity...")

    checkpoints = [Checkpoint("C", 77.7), Checkpoint("A", 12.5), Checkpoint("B", 40.2)]
    segments = generate_segments(checkpoints, 103.4, 480)

    assert segments[0].start_mile == 0
    assert segments[-1].end_mile == 103.4
    for current, following in zip(segments, segments[1:]):
        assert current.end_mile == following.start_mile
        assert current.end_name == following.start_name
    assert [s.end_name for s in segments] == ["A", "B", "C", "Finish"]

    print("✅ Unsorted checkpoints produce gapless segments")


def test_checkpoint_at_finish_has_no_extra_segment():
    segments = generate_segments([Checkpoint("Aid", 40), Checkpoint("Finish Line", 80)], 80, 300)

    assert len(segments) == 2
    assert segments[-1].end_name == "Finish Line"
    assert segments[-1].end_mile == 80


def test_no_checkpoints():
    segments = generate_segments([], 62.5, 245)

    assert len(segments) == 1
    assert segments[0].start_name == "Start"
    assert segments[0].end_name == "Finish"
    assert segments[0].target_time_minutes == 245


def test_zero_weighted_distance_splits_uniformly():
    print("Testing zero-distance course...")

    segments = generate_segments([Checkpoint("Start Line", 0)], 0, 60)

    assert len(segments) == 1
    assert segments[0].target_time_minutes == 60

    print("✅ Uniform split when no segment has distance")


def test_invalid_inputs_rejected():
    with pytest.raises(ValidationError):
        generate_segments([], 100, -10)
    with pytest.raises(ValidationError):
        generate_segments([], -1, 60)
    with pytest.raises(ValidationError):
        generate_segments([Checkpoint("Past the end", 120)], 100, 600)


def build_profile():
    """Flat for 50 miles, then a steady climb to mile 100."""
    points = []
    for mile in range(0, 51, 10):
        points.append(ElevationPoint(mile=float(mile), elevation_ft=1000.0, gradient=0.0))
    for mile in range(60, 101, 10):
        elevation = 1000.0 + (mile - 50) * 158.4
        points.append(ElevationPoint(mile=float(mile), elevation_ft=elevation, gradient=3.0))
    return points


def test_extract_segment_elevation():
    print("Testing segment elevation extraction...")

    profile = [
        ElevationPoint(mile=0.0, elevation_ft=100),
        ElevationPoint(mile=0.25, elevation_ft=150),
        ElevationPoint(mile=0.5, elevation_ft=120),
        ElevationPoint(mile=1.0, elevation_ft=200),
        ElevationPoint(mile=2.0, elevation_ft=5000),
    ]
    elevation = extract_segment_elevation(profile, 0, 1)

    assert elevation.elevation_gain == 130
    assert elevation.elevation_loss == 30
    assert elevation.avg_gradient == 1.9

    empty = extract_segment_elevation(profile, 1.2, 1.8)
    assert empty.elevation_gain == 0
    assert empty.elevation_loss == 0
    assert empty.avg_gradient == 0

    print("✅ Gain 130 ft, loss 30 ft, gradient 1.9%")


def test_elevation_shifts_time_to_climbs():
    print("Testing terrain-weighted allocation...")

    profile = build_profile()
    segments = generate_segments([Checkpoint("Base of climb", 50)], 100, 600, profile)

    flat, climb = segments
    assert flat.elevation_gain == 0
    assert climb.elevation_gain == 7920
    assert climb.avg_gradient == 3.0
    assert climb.target_time_minutes > flat.target_time_minutes
    assert abs(calculate_total_time(segments) - 600) <= len(segments)

    print(f"✅ Flat {flat.target_time_minutes} min, climb {climb.target_time_minutes} min")


def test_segment_overrides():
    print("Testing segment overrides...")

    segments = generate_segments([Checkpoint("Aid 1", 20), Checkpoint("Aid 2", 50)], 100, 600)
    overrides = {
        1: SegmentOverride(target_time_minutes=200, effort_level=EffortLevel.PUSHING),
        2: SegmentOverride(effort_level="safe"),
    }
    updated = apply_segment_overrides(segments, overrides)

    assert [s.target_time_minutes for s in updated] == [120, 200, 300]
    assert [s.effort_level for s in updated] == [EffortLevel.TEMPO, EffortLevel.PUSHING, EffortLevel.SAFE]
    # Input segments are untouched
    assert segments[1].target_time_minutes == 180
    assert segments[2].effort_level == EffortLevel.TEMPO

    with pytest.raises(ValidationError):
        apply_segment_overrides(segments, {3: SegmentOverride(target_time_minutes=10)})
    with pytest.raises(ValidationError):
        apply_segment_overrides(segments, {0: SegmentOverride(target_time_minutes=-5)})

    print("✅ Overrides applied as a separate step")


def test_effort_presets():
    print("Testing effort presets...")

    profile = build_profile()
    segments = generate_segments([Checkpoint("Base of climb", 50)], 100, 600, profile)

    aggressive = apply_effort_preset(segments, "aggressive", profile)
    assert [s.effort_level for s in aggressive] == [EffortLevel.TEMPO, EffortLevel.PUSHING]

    conservative = apply_effort_preset(segments, EffortPreset.CONSERVATIVE, profile)
    assert [s.effort_level for s in conservative] == [EffortLevel.SAFE, EffortLevel.SAFE]

    tempo = apply_effort_preset(segments, "tempo", profile)
    assert [s.effort_level for s in tempo] == [EffortLevel.TEMPO, EffortLevel.TEMPO]

    with pytest.raises(ValidationError):
        apply_effort_preset(segments, "all-out", profile)

    print("✅ Presets assign climb and default efforts")


def test_speed_and_time_helpers():
    assert calculate_segment_time(15, 15) == 60
    assert calculate_segment_time(15, 0) == 0
    assert calculate_required_speed(30, 120) == 15
    assert calculate_required_speed(30, 0) == 0
    assert calculate_terrain_adjusted_time(10, 10, 0, 0) == 60
    assert calculate_terrain_adjusted_time(10, 10, 2000, 0) > 60


def main():
    """Run segment tests."""
    print("=== Segment Generation Test ===\n")

    tests = [
        test_terrain_difficulty_flat_and_degenerate,
        test_terrain_difficulty_values,
        test_terrain_difficulty_bounds,
        test_proportional_allocation,
        test_segments_are_contiguous,
        test_checkpoint_at_finish_has_no_extra_segment,
        test_no_checkpoints,
        test_zero_weighted_distance_splits_uniformly,
        test_invalid_inputs_rejected,
        test_extract_segment_elevation,
        test_elevation_shifts_time_to_climbs,
        test_segment_overrides,
        test_effort_presets,
        test_speed_and_time_helpers,
    ]

    try:
        for test in tests:
            test()
        print("\n🎉 All segment tests passed!")
        return True
    except Exception as e:
        print(f"\n❌ Test failed: {e}")
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
