import json

import pytest

from catalog import DEFAULT_DATA, CameraSpec, catalog_from_dict, load_catalog
from optics import check_sensor_geometry


def test_default_catalog_loads():
    catalog = load_catalog()
    assert "full-frame" in catalog.sensor_formats
    assert catalog.camera("nikon-z5").label == "Nikon Z5"
    assert catalog.lens("nikkor-z-50-f1.8").focal_length_mm == 50


def test_default_cameras_pass_geometry_check():
    catalog = load_catalog()
    for camera in catalog.cameras.values():
        assert check_sensor_geometry(camera.geometry).valid, camera.id


def test_cameras_for_format():
    catalog = load_catalog()
    ids = {c.id for c in catalog.cameras_for_format("mft")}
    assert ids == {"panasonic-g9", "dji-mavic3e"}
    assert catalog.cameras_for_format("no-such-format") == []


def test_apertures_for_lens():
    catalog = load_catalog()
    lens = catalog.lens("dji-mavic3e-24")
    assert catalog.apertures_for_lens(lens) == [2.8, 3.5, 4.0, 5.6, 8.0, 11.0]


def test_unknown_ids_raise_key_error():
    catalog = load_catalog()
    with pytest.raises(KeyError):
        catalog.camera("leica-m11")


def test_load_catalog_from_json(tmp_path):
    data = {
        "sensor_formats": [DEFAULT_DATA["sensor_formats"][0]],
        "cameras": [DEFAULT_DATA["cameras"][0]],
        "lenses": [DEFAULT_DATA["lenses"][0]],
        "apertures": [16, 8, 11],
    }
    path = tmp_path / "equipment.json"
    path.write_text(json.dumps(data), encoding="utf-8")

    catalog = load_catalog(path)
    assert list(catalog.cameras) == ["nikon-z5"]
    assert catalog.apertures == (8.0, 11.0, 16.0)


def test_malformed_catalog():
    with pytest.raises(ValueError):
        catalog_from_dict({"sensor_formats": [], "cameras": [{"id": "x"}], "lenses": []})


def test_camera_with_unknown_sensor_format():
    data = dict(DEFAULT_DATA, sensor_formats=[DEFAULT_DATA["sensor_formats"][0]])
    with pytest.raises(ValueError, match="unknown sensor format"):
        catalog_from_dict(data)


@pytest.mark.parametrize("width, height, expected", [(36.0, 24.0, 1.0), (18.0, 12.0, 2.0)])
def test_crop_factor_derived_from_sensor_when_missing(width, height, expected):
    camera = CameraSpec("custom", "Acme", "One", "full-frame", width, height, 6000, 4000, 24.0)
    assert camera.crop_factor is None
    assert camera.effective_crop_factor == pytest.approx(expected)


def test_catalog_crop_factor_wins():
    camera = CameraSpec("custom", "Acme", "One", "aps-c", 36.0, 24.0, 6000, 4000, 24.0,
                        crop_factor=1.6)
    assert camera.effective_crop_factor == 1.6
