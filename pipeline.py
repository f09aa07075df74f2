# pipeline.py
"""
One planning pass: optics first, then capture planning on the footprint the
optics produced. Callers re-run it whenever any input changes.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from optics import (CoverageFootprint, DOFResult, OpticalParameters, SensorGeometry,
                    check_sensor_geometry, compute_dof, field_of_view_degrees,
                    ground_coverage, ground_sample_distance)
from planner import (CapturePlan, StorageEstimate, effective_coverage, estimated_storage,
                     images_required, recommended_aperture)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureRecord:
    """Camera + lens capabilities as the engine sees them."""
    focal_length_mm: float
    max_aperture: float
    min_aperture: float
    sensor_width_mm: float
    sensor_height_mm: float
    image_width_px: int
    image_height_px: int
    megapixels: float
    crop_factor: float
    brand: str = ""
    model: str = ""

    @classmethod
    def from_equipment(cls, camera, lens):
        return cls(
            focal_length_mm=lens.focal_length_mm,
            max_aperture=lens.max_aperture,
            min_aperture=lens.min_aperture,
            sensor_width_mm=camera.sensor_width_mm,
            sensor_height_mm=camera.sensor_height_mm,
            image_width_px=camera.image_width_px,
            image_height_px=camera.image_height_px,
            megapixels=camera.megapixels,
            crop_factor=camera.effective_crop_factor,
            brand=camera.brand,
            model=camera.model,
        )

    @property
    def geometry(self):
        return SensorGeometry(self.sensor_width_mm, self.sensor_height_mm,
                              self.image_width_px, self.image_height_px, self.megapixels)


@dataclass(frozen=True)
class SubjectDimensions:
    width_m: float
    height_m: float
    depth_m: float = 0.0


@dataclass(frozen=True)
class PlanningResult:
    dof: Optional[DOFResult]
    field_of_view_deg: float
    footprint: CoverageFootprint
    gsd_mm: Optional[float]
    plan: CapturePlan
    recommended_aperture: Optional[float]
    storage: Optional[StorageEstimate]
    warnings: List[str] = field(default_factory=list)


def plan_capture(record, aperture, focus_distance_m, subject,
                 horizontal_overlap_pct=60, vertical_overlap_pct=60):
    """
    Raises InvalidConfigurationError for settings that cannot be planned
    (non-positive aperture or focus distance, overlap of 100% or more).
    """
    warnings = []
    check = check_sensor_geometry(record.geometry)
    if not check.valid:
        warnings.append(check.message)

    params = OpticalParameters(
        focal_length_mm=record.focal_length_mm,
        aperture=aperture,
        focus_distance_m=focus_distance_m,
        crop_factor=record.crop_factor,
    )
    dof = compute_dof(params)
    footprint = ground_coverage(focus_distance_m, record.focal_length_mm, record)
    gsd = ground_sample_distance(focus_distance_m, record.focal_length_mm, record)

    unique = effective_coverage(footprint, horizontal_overlap_pct, vertical_overlap_pct)
    plan = images_required(subject.width_m, subject.height_m, subject.depth_m, unique)

    result = PlanningResult(
        dof=dof,
        field_of_view_deg=field_of_view_degrees(record.focal_length_mm, record.sensor_width_mm),
        footprint=footprint,
        gsd_mm=gsd,
        plan=plan,
        recommended_aperture=recommended_aperture(record.min_aperture, record.max_aperture),
        storage=estimated_storage(plan.total_images, record.megapixels, record.brand, record.model),
        warnings=warnings,
    )
    logger.info("Planned %d images for %s %s at f/%s, %.2f m",
                plan.total_images, record.brand, record.model, aperture, focus_distance_m)
    return result
