import pytest

from catalog import CameraSpec, load_catalog
from optics import InvalidConfigurationError, field_of_view_degrees
from pipeline import CaptureRecord, SubjectDimensions, plan_capture


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def z5_24mm(catalog):
    return CaptureRecord.from_equipment(catalog.camera("nikon-z5"), catalog.lens("nikkor-z-24-f1.8"))


def test_record_from_equipment(z5_24mm):
    assert z5_24mm.focal_length_mm == 24
    assert z5_24mm.brand == "Nikon"
    assert z5_24mm.geometry.image_width_px == 6016


def test_record_derives_missing_crop_factor(catalog):
    camera = CameraSpec("custom", "Acme", "One", "aps-c", 18.0, 12.0, 6000, 4000, 24.0)
    record = CaptureRecord.from_equipment(camera, catalog.lens("nikkor-z-24-f1.8"))
    assert record.crop_factor == pytest.approx(2.0)


def test_plan_capture_flat_wall(z5_24mm):
    result = plan_capture(z5_24mm, 8, 2.0, SubjectDimensions(10, 10), 60, 60)

    assert result.dof.hyperfocal_m == pytest.approx(2.4)
    assert result.dof.near_limit_m < 2.0 < result.dof.far_limit_m
    assert result.field_of_view_deg == pytest.approx(field_of_view_degrees(24, 35.9))

    # 2 m * 35.9 mm / 24 mm
    assert result.footprint.width_m == pytest.approx(2 * 35.9 / 24)
    assert result.plan.unique_coverage.width_m == pytest.approx(0.4 * 2 * 35.9 / 24)
    assert result.plan.images_across == 9
    assert result.plan.images_down == 13
    assert result.plan.total_images == 117

    assert result.gsd_mm == pytest.approx(35.9 / 6016 * 2000 / 24)
    assert result.recommended_aperture == 8
    assert result.storage.jpeg_mb == pytest.approx(117 * 24.3 * 0.5)
    assert result.warnings == []


def test_plan_capture_box_subject(z5_24mm):
    flat = plan_capture(z5_24mm, 8, 2.0, SubjectDimensions(10, 10, 0))
    box = plan_capture(z5_24mm, 8, 2.0, SubjectDimensions(10, 10, 3))
    assert box.plan.total_images == flat.plan.total_images * 6


def test_plan_capture_full_overlap_is_invalid(z5_24mm):
    with pytest.raises(InvalidConfigurationError):
        plan_capture(z5_24mm, 8, 2.0, SubjectDimensions(10, 10), 100, 60)


def test_plan_capture_zero_aperture_is_invalid(z5_24mm):
    with pytest.raises(InvalidConfigurationError):
        plan_capture(z5_24mm, 0, 2.0, SubjectDimensions(10, 10))


def test_plan_capture_attaches_geometry_warning():
    record = CaptureRecord(
        focal_length_mm=50, max_aperture=1.8, min_aperture=22,
        sensor_width_mm=36, sensor_height_mm=24,
        image_width_px=6000, image_height_px=4000, megapixels=30,
        crop_factor=1.0, brand="Generic", model="Mismatch",
    )
    result = plan_capture(record, 8, 5.0, SubjectDimensions(4, 3))
    assert result.warnings == ["Pixel dimensions may not match sensor size"]
    assert result.plan.total_images > 0
