# display.py
"""
Presentation rules shared by every caller of the engine: unit conversion,
the "effectively infinite" distance policy and the GSD / storage strings.
Distances are stored in meters everywhere; feet only appear here.
"""
import math
import re

from optics import gsd_error_margin

FEET_PER_METER = 3.28084

# Heuristic, not optics: a limit this many times past the focus distance,
# or beyond ABSOLUTE_INFINITY_M, reads as infinity.
INFINITY_DISPLAY_THRESHOLD = 15
ABSOLUTE_INFINITY_M = 1000

INFINITY_SYMBOL = "∞"

MIN_FOCUS_M = 0.1
MAX_FOCUS_M = 100.0

_METERS_RE = re.compile(r"^([\d.]+)\s*m$")
_FEET_RE = re.compile(r"^([\d.]+)\s*ft$")


def meters_to_feet(meters):
    return meters * FEET_PER_METER


def feet_to_meters(feet):
    return feet / FEET_PER_METER


def is_effectively_infinite(distance_m, focus_distance_m=None):
    """
    True for real infinity, and for finite distances past
    15x the reference focus distance or past 1000 m.
    The finite rule only applies when a reference focus distance is given.
    """
    if distance_m is None:
        return False
    if math.isinf(distance_m):
        return True
    if focus_distance_m:
        return (distance_m > INFINITY_DISPLAY_THRESHOLD * focus_distance_m
                or distance_m > ABSOLUTE_INFINITY_M)
    return False


def format_distance(meters, unit="m", digits=1, focus_distance_m=None):
    if is_effectively_infinite(meters, focus_distance_m):
        return INFINITY_SYMBOL
    if unit == "ft":
        return f"{meters_to_feet(meters):.{digits}f}ft"
    return f"{meters:.{digits}f}m"


def describe_in_focus_range(dof, unit="m"):
    """e.g. 'From 3.73m to 7.58m' or 'From 4.17m to infinity'"""
    near = format_distance(dof.near_limit_m, unit, digits=2)
    if math.isinf(dof.far_limit_m):
        return f"From {near} to infinity"
    return f"From {near} to {format_distance(dof.far_limit_m, unit, digits=2)}"


def format_footprint(footprint, unit="m", digits=1):
    w, h = footprint.width_m, footprint.height_m
    if unit == "ft":
        w, h = meters_to_feet(w), meters_to_feet(h)
    return f"{w:.{digits}f} × {h:.{digits}f}{unit}"


def format_gsd(gsd_mm, with_margin=True, tolerance=0.05):
    """
    Below 10 mm/pixel report millimetres, otherwise centimetres.
    """
    if gsd_mm is None:
        return "N/A"
    margin = gsd_error_margin(gsd_mm, tolerance)
    if gsd_mm < 10:
        text = f"{gsd_mm:.2f} mm/pixel"
        if with_margin:
            text += f" (±{margin:.2f})"
        return text
    text = f"{gsd_mm / 10:.2f} cm/pixel"
    if with_margin:
        text += f" (±{margin / 10:.2f})"
    return text


def gsd_quality(gsd_mm):
    if gsd_mm is None:
        return None
    if gsd_mm < 3:
        return "high"
    if gsd_mm < 10:
        return "good"
    return "low"


def format_storage(total_mb):
    if total_mb > 1024:
        return f"{total_mb / 1024:.1f} GB"
    return f"{total_mb:.0f} MB"


def parse_distance_input(text):
    """
    Parse '5', '5m', '5 m' or '10ft'.
    Returns (value, unit) with unit None when no suffix was typed.
    """
    s = str(text).strip().lower()
    m = _METERS_RE.match(s)
    if m:
        return float(m.group(1)), "m"
    m = _FEET_RE.match(s)
    if m:
        return float(m.group(1)), "ft"
    if s.endswith("ft"):
        return float(s[:-2]), "ft"
    if s.endswith("m"):
        return float(s[:-1]), "m"
    return float(s), None


def clamp_focus_distance(value, unit="m"):
    """Clamp a typed focus distance to the supported range, returns meters."""
    max_value = MAX_FOCUS_M if unit == "m" else meters_to_feet(MAX_FOCUS_M)
    value = min(max(MIN_FOCUS_M, value), max_value)
    if unit == "ft":
        return feet_to_meters(value)
    return value
