import math

import pytest

from display import (FEET_PER_METER, clamp_focus_distance, describe_in_focus_range,
                     feet_to_meters, format_distance, format_footprint, format_gsd,
                     format_storage, gsd_quality, is_effectively_infinite, meters_to_feet,
                     parse_distance_input)
from optics import CoverageFootprint, DOFResult


@pytest.mark.parametrize("meters", [0.1, 1.0, 3.7, 42.123456, 1e6])
def test_meters_feet_round_trip(meters):
    assert feet_to_meters(meters_to_feet(meters)) == pytest.approx(meters, abs=1e-9)


def test_meters_to_feet():
    assert meters_to_feet(1) == FEET_PER_METER


@pytest.mark.parametrize("distance, focus, expected", [
    (math.inf, None, True),
    (math.inf, 5, True),
    (80, 5, True),       # > 15x focus
    (70, 5, False),
    (1500, 200, True),   # > 1000 m
    (900, 200, False),
    (5000, None, False),
])
def test_is_effectively_infinite(distance, focus, expected):
    assert is_effectively_infinite(distance, focus) is expected


def test_format_distance():
    assert format_distance(5) == "5.0m"
    assert format_distance(5, "ft") == "16.4ft"
    assert format_distance(1.23456, digits=2) == "1.23m"
    assert format_distance(math.inf) == "∞"
    assert format_distance(80, focus_distance_m=5) == "∞"


def test_describe_in_focus_range():
    finite = DOFResult(2.4, 1.0919, 11.88, 10.7881, 2)
    assert describe_in_focus_range(finite) == "From 1.09m to 11.88m"
    infinite = DOFResult(2.4, 1.6, math.inf, math.inf, 5)
    assert describe_in_focus_range(infinite) == "From 1.60m to infinity"


def test_format_footprint():
    assert format_footprint(CoverageFootprint(7.2, 4.8)) == "7.2 × 4.8m"
    assert format_footprint(CoverageFootprint(1, 2), "ft") == "3.3 × 6.6ft"


def test_format_gsd_switches_to_cm():
    assert format_gsd(1.2) == "1.20 mm/pixel (±0.06)"
    assert format_gsd(30) == "3.00 cm/pixel (±0.15)"
    assert format_gsd(1.2, with_margin=False) == "1.20 mm/pixel"
    assert format_gsd(None) == "N/A"


@pytest.mark.parametrize("gsd, expected", [(1.0, "high"), (5.0, "good"), (12.0, "low"), (None, None)])
def test_gsd_quality(gsd, expected):
    assert gsd_quality(gsd) == expected


def test_format_storage():
    assert format_storage(512.4) == "512 MB"
    assert format_storage(1024) == "1024 MB"
    assert format_storage(2048) == "2.0 GB"


@pytest.mark.parametrize("text, expected", [
    ("5", (5.0, None)),
    ("5m", (5.0, "m")),
    ("5 m", (5.0, "m")),
    ("10ft", (10.0, "ft")),
    (" 2.5 FT ", (2.5, "ft")),
    (7, (7.0, None)),
])
def test_parse_distance_input(text, expected):
    assert parse_distance_input(text) == expected


def test_parse_distance_input_garbage():
    with pytest.raises(ValueError):
        parse_distance_input("far away")


def test_clamp_focus_distance():
    assert clamp_focus_distance(0.01) == 0.1
    assert clamp_focus_distance(500) == 100
    assert clamp_focus_distance(10, "ft") == pytest.approx(10 / FEET_PER_METER)
    assert clamp_focus_distance(1000, "ft") == pytest.approx(100)
