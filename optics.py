# optics.py
"""
Thin-lens depth-of-field, field-of-view and ground-sample-distance formulas.

All distances returned by this module are in meters unless the name says
otherwise (``*_mm``). Focal length, sensor size and circle of confusion are
always passed in millimetres.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

# Acceptable blur circle for a full-frame (36 x 24 mm) sensor
FULL_FRAME_COC_MM = 0.03
FULL_FRAME_DIAGONAL_MM = math.sqrt(36 * 36 + 24 * 24)


class InvalidConfigurationError(ValueError):
    """Inputs are present but physically meaningless for the calculation."""


@dataclass(frozen=True)
class OpticalParameters:
    focal_length_mm: float
    aperture: float
    focus_distance_m: float
    crop_factor: float = 1.0


@dataclass(frozen=True)
class SensorGeometry:
    sensor_width_mm: float
    sensor_height_mm: float
    image_width_px: int
    image_height_px: int
    megapixels: float


@dataclass(frozen=True)
class DOFResult:
    hyperfocal_m: float
    near_limit_m: float
    far_limit_m: float
    total_dof_m: float
    focus_distance_m: float

    @property
    def far_is_infinite(self):
        return math.isinf(self.far_limit_m)


@dataclass(frozen=True)
class CoverageFootprint:
    width_m: float
    height_m: float

    @property
    def area_m2(self):
        return self.width_m * self.height_m


@dataclass(frozen=True)
class SensorCheck:
    valid: bool
    megapixel_difference: float
    density_difference_pct: float
    message: str = ""


def _usable(*values):
    """True when every value is a finite, non-zero number."""
    return not _missing(*values) and all(values)


def _missing(*values):
    """True when any value is None or not a finite number."""
    return any(v is None or not math.isfinite(v) for v in values)


def circle_of_confusion(crop_factor):
    """
    CoC (mm) = 0.03 / crop_factor
    Smaller sensors are enlarged more for viewing, so they need a smaller CoC.
    """
    if _missing(crop_factor) or crop_factor <= 0:
        raise InvalidConfigurationError(f"crop factor must be positive, got {crop_factor!r}")
    return FULL_FRAME_COC_MM / crop_factor


def crop_factor_from_sensor(sensor_width_mm, sensor_height_mm):
    """Full-frame diagonal divided by the sensor diagonal; 0 on missing input."""
    if not _usable(sensor_width_mm, sensor_height_mm):
        return 0.0
    return FULL_FRAME_DIAGONAL_MM / math.hypot(sensor_width_mm, sensor_height_mm)


def hyperfocal_distance(focal_length_mm, aperture, coc_mm):
    """
    Hyperfocal distance H (m)
    H = f^2 / (N * c) / 1000
    Returns None when an input is missing, zero focal length or not finite;
    raises on non-positive N or c.
    """
    if _missing(focal_length_mm, aperture, coc_mm) or not focal_length_mm:
        return None
    if aperture <= 0 or coc_mm <= 0:
        raise InvalidConfigurationError(
            f"aperture and circle of confusion must be positive (N={aperture}, c={coc_mm})"
        )
    return (focal_length_mm * focal_length_mm) / (aperture * coc_mm) / 1000


def near_limit(focus_distance_m, focal_length_mm, aperture, coc_mm):
    """
    Near limit of acceptable focus (m)
    D_near = s * (H - f) / (H + s - 2f), with f in meters
    """
    H = hyperfocal_distance(focal_length_mm, aperture, coc_mm)
    if H is None or not _usable(focus_distance_m):
        return None
    f = focal_length_mm / 1000
    denom = H + focus_distance_m - 2 * f
    if denom <= 0:
        raise InvalidConfigurationError(
            f"near limit undefined for focus distance {focus_distance_m} m "
            f"with {focal_length_mm} mm lens"
        )
    return focus_distance_m * (H - f) / denom


def far_limit(focus_distance_m, focal_length_mm, aperture, coc_mm):
    """
    Far limit of acceptable focus (m)
    D_far = s * (H - f) / (H - s) if s < H, otherwise infinity
    """
    H = hyperfocal_distance(focal_length_mm, aperture, coc_mm)
    if H is None or not _usable(focus_distance_m):
        return None
    if focus_distance_m >= H:
        return math.inf
    f = focal_length_mm / 1000
    return focus_distance_m * (H - f) / (H - focus_distance_m)


def total_dof(near_m, far_m):
    if near_m is None or far_m is None:
        return None
    if math.isinf(far_m):
        return math.inf
    return far_m - near_m


def compute_dof(params):
    """
    Run the full DOF chain for one set of :class:`OpticalParameters`.
    Returns None when no usable focal length is set.
    """
    focus = params.focus_distance_m
    if _missing(focus) or focus <= 0:
        raise InvalidConfigurationError(f"focus distance must be positive, got {focus!r}")
    coc = circle_of_confusion(params.crop_factor)
    H = hyperfocal_distance(params.focal_length_mm, params.aperture, coc)
    if H is None:
        logger.debug("DOF skipped, incomplete parameters %s", params)
        return None
    near = near_limit(focus, params.focal_length_mm, params.aperture, coc)
    far = far_limit(focus, params.focal_length_mm, params.aperture, coc)
    result = DOFResult(
        hyperfocal_m=H,
        near_limit_m=near,
        far_limit_m=far,
        total_dof_m=total_dof(near, far),
        focus_distance_m=focus,
    )
    logger.debug("DOF %s -> %s", params, result)
    return result


def dof_curves(focal_length_mm, aperture, coc_mm, focus_distances_m):
    """
    Near/far limits over a sweep of focus distances.
    Returns (near, far) numpy arrays; far is inf at or beyond hyperfocal.
    Points where the near limit is undefined are NaN in both arrays.
    """
    s = np.asarray(focus_distances_m, dtype=float)
    H = hyperfocal_distance(focal_length_mm, aperture, coc_mm)
    if H is None:
        return np.full_like(s, np.nan), np.full_like(s, np.nan)
    f = focal_length_mm / 1000
    denom = H + s - 2 * f
    valid = (denom > 0) & np.isfinite(s) & (s > 0)

    near = np.full_like(s, np.nan)
    near[valid] = s[valid] * (H - f) / denom[valid]
    far = np.full_like(s, np.nan)
    far[valid] = np.inf
    finite = valid & (s < H)
    far[finite] = s[finite] * (H - f) / (H - s[finite])
    return near, far


def field_of_view_degrees(focal_length_mm, sensor_width_mm):
    """
    Angle of view (deg) across the given sensor dimension
    FOV = 2 * atan(w / 2f)
    """
    if not _usable(focal_length_mm, sensor_width_mm):
        return 0.0
    return 2 * math.atan(sensor_width_mm / (2 * focal_length_mm)) * (180 / math.pi)


def ground_coverage(distance_m, focal_length_mm, sensor):
    """
    Footprint of the frame at ``distance_m`` by similar triangles.
    ``sensor`` needs ``sensor_width_mm`` and ``sensor_height_mm``.
    """
    if sensor is None or not _usable(distance_m, focal_length_mm):
        return CoverageFootprint(0.0, 0.0)
    width_mm = getattr(sensor, "sensor_width_mm", None)
    height_mm = getattr(sensor, "sensor_height_mm", None)
    if not _usable(width_mm, height_mm):
        return CoverageFootprint(0.0, 0.0)

    focal_m = focal_length_mm / 1000
    return CoverageFootprint(
        width_m=distance_m * (width_mm / 1000) / focal_m,
        height_m=distance_m * (height_mm / 1000) / focal_m,
    )


def ground_sample_distance(distance_m, focal_length_mm, sensor) -> Optional[float]:
    """
    GSD (mm/pixel) = pixel pitch * distance / focal length
    ``sensor`` needs ``sensor_width_mm`` and ``image_width_px``.
    """
    if sensor is None or not _usable(distance_m, focal_length_mm):
        return None
    width_mm = getattr(sensor, "sensor_width_mm", None)
    width_px = getattr(sensor, "image_width_px", None)
    if not _usable(width_mm, width_px):
        return None
    pixel_size_mm = width_mm / width_px
    return pixel_size_mm * (distance_m * 1000) / focal_length_mm


def gsd_error_margin(gsd_mm, tolerance=0.05):
    """Symmetric tolerance band for a GSD value (manufacturing/measurement)."""
    return gsd_mm * tolerance


def check_sensor_geometry(sensor):
    """
    Advisory consistency check of catalog data. Megapixels from the pixel
    grid must be within 1% of the stated value and pixel density must agree
    across width and height within 5%.
    """
    if not _usable(sensor.sensor_width_mm, sensor.sensor_height_mm,
                   sensor.image_width_px, sensor.image_height_px, sensor.megapixels):
        return SensorCheck(True, 0.0, 0.0)

    computed_mp = sensor.image_width_px * sensor.image_height_px / 1_000_000
    mp_diff = abs(computed_mp - sensor.megapixels)

    density_w = sensor.image_width_px / sensor.sensor_width_mm
    density_h = sensor.image_height_px / sensor.sensor_height_mm
    density_pct = abs((density_w - density_h) / density_w) * 100

    valid = mp_diff < sensor.megapixels * 0.01 and density_pct < 5
    message = "" if valid else "Pixel dimensions may not match sensor size"
    if not valid:
        logger.warning(
            "%s (megapixel diff %.3f, density diff %.2f%%)", message, mp_diff, density_pct
        )
    return SensorCheck(valid, mp_diff, density_pct, message)
