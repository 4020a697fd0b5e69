#!/usr/bin/env python3
"""
Test script for time helpers, checkpoint arrivals and cutoff status.
"""

import os
import sys

import pytest

# Add the project root to the path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from paceline.exceptions import ValidationError
from paceline.models import Checkpoint, CutoffStatus, Segment
from paceline.processing.checkpoint_analyzer import (
    compute_arrivals,
    cutoffs_from_checkpoints,
    get_cutoff_status,
)
from paceline.processing.segment_generator import generate_segments
from paceline.utils.time_utils import (
    calculate_arrival_time,
    calculate_cutoff_margin,
    format_cutoff_time,
    format_duration,
    parse_duration,
    parse_time_to_minutes,
)


def test_duration_round_trip():
    print("Testing duration formatting...")

    assert format_duration(parse_duration("01:30:00")) == "01:30:00"
    assert format_duration(parse_duration("10:05:30")) == "10:05:30"
    assert parse_duration("1:30") == 90
    assert parse_duration("90") == 0
    assert format_duration(0) == "00:00:00"
    assert format_duration(59.999) == "01:00:00"

    with pytest.raises(ValidationError):
        parse_duration("1:xx:00")
    with pytest.raises(ValidationError):
        parse_duration("-1:00")

    print("✅ Durations round-trip")


def test_clock_parsing():
    assert parse_time_to_minutes("06:00") == 360
    assert parse_time_to_minutes("6:00 AM") == 360
    assert parse_time_to_minutes("12:00 AM") == 0
    assert parse_time_to_minutes("12:30 PM") == 750
    assert parse_time_to_minutes("11:59 pm") == 1439
    assert format_cutoff_time("14:30") == "2:30 PM"
    assert format_cutoff_time("00:15") == "12:15 AM"

    for bad in ("25:00", "13:00 PM", "7:75", "noon", ""):
        with pytest.raises(ValidationError):
            parse_time_to_minutes(bad)


def test_arrival_time():
    assert calculate_arrival_time("06:00", 0) == "6:00 AM"
    assert calculate_arrival_time("06:00", 390) == "12:30 PM"
    assert calculate_arrival_time("22:00", 180) == "1:00 AM"


def test_cutoff_margin_and_status():
    print("Testing cutoff margin and status...")

    assert calculate_cutoff_margin("10:45 AM", "12:00 PM") == 75
    assert calculate_cutoff_margin("12:10 PM", "12:00 PM") == -10
    assert get_cutoff_status(75) == CutoffStatus.SAFE
    assert get_cutoff_status(60) == CutoffStatus.SAFE
    assert get_cutoff_status(45) == CutoffStatus.CAUTION
    assert get_cutoff_status(30) == CutoffStatus.CAUTION
    assert get_cutoff_status(10) == CutoffStatus.DANGER
    assert get_cutoff_status(-20) == CutoffStatus.DANGER
    assert get_cutoff_status(75) == "safe"

    print("✅ Margin 75 min is safe")


def test_compute_arrivals():
    print("Testing checkpoint arrivals...")

    checkpoints = [
        Checkpoint("Aid 1", 20, cutoff_time="8:45 AM"),
        Checkpoint("Aid 2", 50, cutoff_time="12:00"),
        Checkpoint("Finish", 100, cutoff_time="15:50"),
    ]
    segments = generate_segments(checkpoints, 100, 600)
    arrivals = compute_arrivals(segments, "06:00", cutoffs_from_checkpoints(checkpoints))

    assert [a.name for a in arrivals] == ["Start", "Aid 1", "Aid 2", "Finish"]
    assert [a.elapsed_minutes for a in arrivals] == [0, 120, 300, 600]
    assert [a.arrival_time for a in arrivals] == ["6:00 AM", "8:00 AM", "11:00 AM", "4:00 PM"]

    start, aid1, aid2, finish = arrivals
    assert start.cutoff_status is None
    assert aid1.cutoff_margin == 45 and aid1.cutoff_status == CutoffStatus.CAUTION
    assert aid2.cutoff_time == "12:00 PM"
    assert aid2.cutoff_margin == 60 and aid2.cutoff_status == CutoffStatus.SAFE
    assert finish.cutoff_margin == -10 and finish.cutoff_status == CutoffStatus.DANGER

    print("✅ Arrivals graded caution / safe / danger")


def test_arrivals_without_cutoffs():
    segments = [
        Segment(0, 30, "Start", "Aid", 150),
        Segment(30, 60, "Aid", "Finish", 1400),
    ]
    arrivals = compute_arrivals(segments, "07:30")

    assert len(arrivals) == 3
    assert all(a.cutoff_time is None and a.cutoff_margin is None for a in arrivals)
    assert arrivals[1].arrival_time == "10:00 AM"
    assert arrivals[2].elapsed_minutes == 1550
    assert arrivals[2].arrival_time == "9:20 AM"
    assert arrivals[2].day == 1

    assert compute_arrivals([], "06:00") == []


def test_cutoffs_from_checkpoints():
    checkpoints = [Checkpoint("A", 10, "9:00 AM"), Checkpoint("B", 20), Checkpoint("C", 30, "13:00")]
    assert cutoffs_from_checkpoints(checkpoints) == {"A": "9:00 AM", "C": "13:00"}


def main():
    """Run checkpoint tests."""
    print("=== Checkpoint Arrival Test ===\n")

    tests = [
        test_duration_round_trip,
        test_clock_parsing,
        test_arrival_time,
        test_cutoff_margin_and_status,
        test_compute_arrivals,
        test_arrivals_without_cutoffs,
        test_cutoffs_from_checkpoints,
    ]

    try:
        for test in tests:
            test()
        print("\n🎉 All checkpoint tests passed!")
        return True
    except Exception as e:
        print(f"\n❌ Test failed: {e}")
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
