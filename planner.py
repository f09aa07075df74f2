# planner.py
"""
Photogrammetry capture planning: how many overlapping frames cover a
surface or a box-shaped subject, and roughly how much storage they need.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from display import format_storage
from optics import CoverageFootprint, InvalidConfigurationError

logger = logging.getLogger(__name__)

# f/8 - f/11 is the usual sharpness / depth-of-field compromise
CANONICAL_APERTURES = (8, 11, 16)

BOX_FACES = 6


@dataclass(frozen=True)
class CapturePlan:
    total_surface_area_m2: float
    unique_coverage: CoverageFootprint
    images_across: int
    images_down: int
    total_images: int


@dataclass(frozen=True)
class StorageProfile:
    """One row of the file-size table. Empty matchers match anything."""
    name: str
    jpeg_mb_per_mp: float
    raw_mb_per_mp: float
    brands: Tuple[str, ...] = ()
    model_contains: Optional[str] = None
    min_megapixels: Optional[float] = None

    def matches(self, brand, model, megapixels):
        if self.brands and brand not in self.brands:
            return False
        if self.model_contains and self.model_contains not in (model or ""):
            return False
        if self.min_megapixels is not None and not megapixels > self.min_megapixels:
            return False
        return True


# Typical per-megapixel file sizes. Rough figures, checked top to bottom.
STORAGE_PROFILES = (
    StorageProfile("medium format (Phase One / Hasselblad)", 0.8, 5.0,
                   brands=("Phase One", "Hasselblad")),
    StorageProfile("Fujifilm GFX", 0.8, 4.5, brands=("Fujifilm",), model_contains="GFX"),
    StorageProfile("high resolution (>45MP)", 0.7, 4.0, min_megapixels=45),
    StorageProfile("standard", 0.5, 2.5),
)


@dataclass(frozen=True)
class StorageEstimate:
    jpeg_mb: float
    raw_mb: float
    profile: str = ""

    @property
    def jpeg_display(self):
        return format_storage(self.jpeg_mb)

    @property
    def raw_display(self):
        return format_storage(self.raw_mb)


def effective_coverage(footprint, horizontal_overlap_pct, vertical_overlap_pct):
    """
    Unique ground each frame contributes once neighbours overlap it.
    Overlap of 100% or more gives zero/negative coverage; images_required
    rejects that.
    """
    return CoverageFootprint(
        width_m=footprint.width_m * (100 - horizontal_overlap_pct) / 100,
        height_m=footprint.height_m * (100 - vertical_overlap_pct) / 100,
    )


def _is_box(depth_m):
    return depth_m is not None and depth_m > 0


def total_surface_area(width_m, height_m, depth_m=0):
    """Flat surface unless depth is positive, otherwise the six faces of a box."""
    if not _is_box(depth_m):
        return width_m * height_m
    return 2 * (width_m * height_m + width_m * depth_m + height_m * depth_m)


def images_required(width_m, height_m, depth_m, coverage):
    """
    Grid of frames over width x height. A subject with depth is treated as
    a box and the same grid is shot for each of its six faces, ignoring
    overlap shared along the edges.
    """
    if coverage.width_m <= 0 or coverage.height_m <= 0:
        raise InvalidConfigurationError(
            f"unique coverage per image must be positive, got "
            f"{coverage.width_m:.3f} x {coverage.height_m:.3f} m (overlap >= 100%?)"
        )

    across = math.ceil(width_m / coverage.width_m)
    down = math.ceil(height_m / coverage.height_m)
    total = across * down
    if _is_box(depth_m):
        total *= BOX_FACES

    plan = CapturePlan(
        total_surface_area_m2=total_surface_area(width_m, height_m, depth_m),
        unique_coverage=coverage,
        images_across=across,
        images_down=down,
        total_images=total,
    )
    logger.debug("capture plan %s", plan)
    return plan


def recommended_aperture(lens_min_aperture, lens_max_aperture):
    """
    Smallest of f/8, f/11, f/16 inside [max_aperture, min_aperture]
    (max = widest, smallest f-number). Falls back to the widest aperture.
    """
    if lens_min_aperture is None or lens_max_aperture is None:
        return None
    for ap in CANONICAL_APERTURES:
        if lens_max_aperture <= ap <= lens_min_aperture:
            return ap
    return lens_max_aperture


def _storage_profile(brand, model, megapixels, profiles):
    for profile in profiles:
        if profile.matches(brand, model, megapixels):
            return profile
    return profiles[-1]


def estimated_storage(total_images, megapixels, brand=None, model=None,
                      profiles=STORAGE_PROFILES):
    """
    Total JPEG and RAW size in MB: images * megapixels * MB-per-megapixel.
    Returns None without a megapixel count.
    """
    if not megapixels:
        return None
    profile = _storage_profile(brand, model, megapixels, profiles)
    return StorageEstimate(
        jpeg_mb=total_images * megapixels * profile.jpeg_mb_per_mp,
        raw_mb=total_images * megapixels * profile.raw_mb_per_mp,
        profile=profile.name,
    )
