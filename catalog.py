# catalog.py
"""
Read-only equipment catalog: sensor formats, cameras, lenses and f-stops.

Load it once with :func:`load_catalog` and hand the object to whoever needs
it. Nothing in the optics/planning code reads it on its own.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from optics import SensorGeometry, crop_factor_from_sensor

logger = logging.getLogger(__name__)

# f-stops offered by the UI
APERTURES = [1.2, 1.4, 1.8, 2, 2.8, 3.5, 4, 5.6, 8, 11, 16, 22, 32]

DEFAULT_DATA = {
    "sensor_formats": [
        {"id": "full-frame", "name": "Full Frame", "width_mm": 36.0, "height_mm": 24.0, "crop_factor": 1.0},
        {"id": "aps-c", "name": "APS-C", "width_mm": 23.5, "height_mm": 15.6, "crop_factor": 1.53},
        {"id": "mft", "name": "Micro Four Thirds", "width_mm": 17.3, "height_mm": 13.0, "crop_factor": 2.0},
        {"id": "medium-44x33", "name": "Medium Format 44x33", "width_mm": 43.8, "height_mm": 32.9, "crop_factor": 0.79},
        {"id": "medium-54x40", "name": "Medium Format 54x40", "width_mm": 53.4, "height_mm": 40.0, "crop_factor": 0.64},
    ],
    "cameras": [
        {"id": "nikon-z5", "brand": "Nikon", "model": "Z5", "sensor_format": "full-frame",
         "sensor_width_mm": 35.9, "sensor_height_mm": 23.9, "image_width_px": 6016, "image_height_px": 4016,
         "megapixels": 24.3, "crop_factor": 1.0},
        {"id": "sony-a7rv", "brand": "Sony", "model": "A7R V", "sensor_format": "full-frame",
         "sensor_width_mm": 35.7, "sensor_height_mm": 23.8, "image_width_px": 9504, "image_height_px": 6336,
         "megapixels": 60.2, "crop_factor": 1.0},
        {"id": "canon-r5", "brand": "Canon", "model": "EOS R5", "sensor_format": "full-frame",
         "sensor_width_mm": 36.0, "sensor_height_mm": 24.0, "image_width_px": 8192, "image_height_px": 5464,
         "megapixels": 45.0, "crop_factor": 1.0},
        {"id": "fujifilm-xt5", "brand": "Fujifilm", "model": "X-T5", "sensor_format": "aps-c",
         "sensor_width_mm": 23.5, "sensor_height_mm": 15.6, "image_width_px": 7728, "image_height_px": 5152,
         "megapixels": 40.2, "crop_factor": 1.53},
        {"id": "panasonic-g9", "brand": "Panasonic", "model": "Lumix G9", "sensor_format": "mft",
         "sensor_width_mm": 17.3, "sensor_height_mm": 13.0, "image_width_px": 5184, "image_height_px": 3888,
         "megapixels": 20.3, "crop_factor": 2.0},
        {"id": "dji-mavic3e", "brand": "DJI", "model": "Mavic 3E", "sensor_format": "mft",
         "sensor_width_mm": 17.3, "sensor_height_mm": 13.0, "image_width_px": 5280, "image_height_px": 3956,
         "megapixels": 20.9, "crop_factor": 2.0},
        {"id": "fujifilm-gfx100ii", "brand": "Fujifilm", "model": "GFX100 II", "sensor_format": "medium-44x33",
         "sensor_width_mm": 43.8, "sensor_height_mm": 32.9, "image_width_px": 11648, "image_height_px": 8736,
         "megapixels": 102.0, "crop_factor": 0.79},
        {"id": "hasselblad-x2d", "brand": "Hasselblad", "model": "X2D 100C", "sensor_format": "medium-44x33",
         "sensor_width_mm": 43.8, "sensor_height_mm": 32.9, "image_width_px": 11656, "image_height_px": 8742,
         "megapixels": 101.9, "crop_factor": 0.79},
        {"id": "phaseone-iq4", "brand": "Phase One", "model": "IQ4 150MP", "sensor_format": "medium-54x40",
         "sensor_width_mm": 53.4, "sensor_height_mm": 40.0, "image_width_px": 14204, "image_height_px": 10652,
         "megapixels": 151.0, "crop_factor": 0.64},
    ],
    "lenses": [
        {"id": "nikkor-z-24-f1.8", "brand": "Nikon", "model": "Nikkor Z 24mm f/1.8 S",
         "focal_length_mm": 24, "max_aperture": 1.8, "min_aperture": 16},
        {"id": "nikkor-z-50-f1.8", "brand": "Nikon", "model": "Nikkor Z 50mm f/1.8 S",
         "focal_length_mm": 50, "max_aperture": 1.8, "min_aperture": 16},
        {"id": "sony-fe-35-f1.4", "brand": "Sony", "model": "FE 35mm f/1.4 GM",
         "focal_length_mm": 35, "max_aperture": 1.4, "min_aperture": 16},
        {"id": "canon-rf-50-f1.8", "brand": "Canon", "model": "RF 50mm f/1.8 STM",
         "focal_length_mm": 50, "max_aperture": 1.8, "min_aperture": 22},
        {"id": "fujifilm-xf-23-f2", "brand": "Fujifilm", "model": "XF 23mm f/2 R WR",
         "focal_length_mm": 23, "max_aperture": 2, "min_aperture": 16},
        {"id": "fujifilm-gf-63-f2.8", "brand": "Fujifilm", "model": "GF 63mm f/2.8 R WR",
         "focal_length_mm": 63, "max_aperture": 2.8, "min_aperture": 32},
        {"id": "hasselblad-xcd-55", "brand": "Hasselblad", "model": "XCD 55V",
         "focal_length_mm": 55, "max_aperture": 2.5, "min_aperture": 32},
        {"id": "schneider-80-ls", "brand": "Phase One", "model": "Schneider 80mm LS f/2.8",
         "focal_length_mm": 80, "max_aperture": 2.8, "min_aperture": 22},
        {"id": "leica-12-f1.4", "brand": "Panasonic", "model": "Leica DG Summilux 12mm f/1.4",
         "focal_length_mm": 12, "max_aperture": 1.4, "min_aperture": 16},
        {"id": "dji-mavic3e-24", "brand": "DJI", "model": "Mavic 3E 24mm (equiv.)",
         "focal_length_mm": 12.3, "max_aperture": 2.8, "min_aperture": 11},
    ],
    "apertures": APERTURES,
}


@dataclass(frozen=True)
class SensorFormat:
    id: str
    name: str
    width_mm: float
    height_mm: float
    crop_factor: float


@dataclass(frozen=True)
class CameraSpec:
    id: str
    brand: str
    model: str
    sensor_format: str
    sensor_width_mm: float
    sensor_height_mm: float
    image_width_px: int
    image_height_px: int
    megapixels: float
    crop_factor: Optional[float] = None

    @property
    def label(self):
        return f"{self.brand} {self.model}"

    @property
    def effective_crop_factor(self):
        """Catalog crop factor, or one derived from the sensor diagonal."""
        if self.crop_factor:
            return self.crop_factor
        return crop_factor_from_sensor(self.sensor_width_mm, self.sensor_height_mm)

    @property
    def geometry(self):
        return SensorGeometry(
            sensor_width_mm=self.sensor_width_mm,
            sensor_height_mm=self.sensor_height_mm,
            image_width_px=self.image_width_px,
            image_height_px=self.image_height_px,
            megapixels=self.megapixels,
        )


@dataclass(frozen=True)
class LensSpec:
    id: str
    brand: str
    model: str
    focal_length_mm: float
    max_aperture: float
    min_aperture: float

    @property
    def label(self):
        return f"{self.brand} {self.model}"


@dataclass(frozen=True)
class EquipmentCatalog:
    sensor_formats: Dict[str, SensorFormat]
    cameras: Dict[str, CameraSpec]
    lenses: Dict[str, LensSpec]
    apertures: Tuple[float, ...]

    def camera(self, camera_id):
        return self.cameras[camera_id]

    def lens(self, lens_id):
        return self.lenses[lens_id]

    def cameras_for_format(self, format_id):
        return [c for c in self.cameras.values() if c.sensor_format == format_id]

    def apertures_for_lens(self, lens):
        """f-stops the lens can actually be set to."""
        return [ap for ap in self.apertures if lens.max_aperture <= ap <= lens.min_aperture]


def catalog_from_dict(data):
    """Build a catalog from plain data (the JSON layout of DEFAULT_DATA)."""
    try:
        formats = {f["id"]: SensorFormat(**f) for f in data["sensor_formats"]}
        cameras = {c["id"]: CameraSpec(**c) for c in data["cameras"]}
        lenses = {l["id"]: LensSpec(**l) for l in data["lenses"]}
    except (KeyError, TypeError) as e:
        raise ValueError(f"malformed equipment catalog: {e}") from e

    for cam in cameras.values():
        if cam.sensor_format not in formats:
            raise ValueError(f"camera {cam.id!r} references unknown sensor format {cam.sensor_format!r}")

    apertures = tuple(sorted(float(a) for a in data.get("apertures", APERTURES)))
    return EquipmentCatalog(formats, cameras, lenses, apertures)


def load_catalog(path=None):
    """Built-in catalog, or the JSON file at ``path``."""
    if path is None:
        logger.debug("Using built-in equipment catalog")
        return catalog_from_dict(DEFAULT_DATA)

    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    catalog = catalog_from_dict(data)
    logger.info("Loaded catalog %s: %d cameras, %d lenses",
                path, len(catalog.cameras), len(catalog.lenses))
    return catalog
