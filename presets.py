# presets.py
"""
Save/load the current selection as a JSON preset.
"""
import json
import math
from datetime import datetime, timezone


class PresetError(ValueError):
    pass


_FLOAT_PARAMS = ("aperture", "focus_m", "surface_width_m", "surface_height_m",
                 "surface_depth_m", "horizontal_overlap", "vertical_overlap")

_POSITIVE_PARAMS = ("aperture", "focus_m", "surface_width_m", "surface_height_m")
_OVERLAP_PARAMS = ("horizontal_overlap", "vertical_overlap")


def _check_range(key, value):
    if not math.isfinite(value):
        raise PresetError(f"parameter {key!r} must be finite, got {value!r}")
    if key in _POSITIVE_PARAMS and value <= 0:
        raise PresetError(f"parameter {key!r} must be positive, got {value:g}")
    if key == "surface_depth_m" and value < 0:
        raise PresetError(f"parameter {key!r} must not be negative, got {value:g}")
    if key in _OVERLAP_PARAMS and not 0 <= value < 100:
        raise PresetError(f"parameter {key!r} must be in [0, 100), got {value:g}")


def clamp_params(params, limits):
    """
    Pull each value into its (low, high) widget range. Keys without limits
    pass through unchanged.
    """
    clamped = {}
    for key, value in params.items():
        if key in limits:
            low, high = limits[key]
            value = min(max(low, value), high)
        clamped[key] = value
    return clamped


def build_preset(name, camera_id, lens_id, params, unit="m"):
    """Preset dict ready for json.dumps. ``params`` holds the numeric inputs."""
    unknown = set(params) - set(_FLOAT_PARAMS)
    if unknown:
        raise PresetError(f"unknown preset parameters: {sorted(unknown)}")
    return {
        "name": name or f"preset_{datetime.now(timezone.utc).isoformat()}",
        "camera": camera_id,
        "lens": lens_id,
        "unit": unit,
        "params": {k: float(v) for k, v in params.items()},
    }


def preset_to_json(preset):
    return json.dumps(preset, ensure_ascii=False, indent=2)


def parse_preset(raw):
    """
    Parse preset JSON (str, bytes or a file-like object).
    Missing keys are left out of the result so callers keep their current values.
    Out-of-range numbers (non-positive sizes, overlap outside [0, 100)) raise
    PresetError.
    """
    try:
        if hasattr(raw, "read"):
            raw = raw.read()
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PresetError(f"preset is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise PresetError("preset must be a JSON object")

    preset = {}
    for key in ("name", "camera", "lens"):
        if key in data:
            preset[key] = str(data[key])

    if "unit" in data:
        if data["unit"] not in ("m", "ft"):
            raise PresetError(f"unit must be 'm' or 'ft', got {data['unit']!r}")
        preset["unit"] = data["unit"]

    params = data.get("params", {})
    if not isinstance(params, dict):
        raise PresetError("'params' must be a JSON object")
    parsed = {}
    for key in _FLOAT_PARAMS:
        if key in params:
            try:
                parsed[key] = float(params[key])
            except (TypeError, ValueError) as e:
                raise PresetError(f"parameter {key!r} is not a number: {params[key]!r}") from e
            _check_range(key, parsed[key])
    preset["params"] = parsed
    return preset
