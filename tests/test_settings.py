import importlib
import logging

import pytest

import settings
from logging_config import setup_logging


@pytest.fixture
def reload_settings(monkeypatch):
    def _reload(**env):
        for key in ("DOF_LOG_LEVEL", "DOF_DISTANCE_UNIT", "DOF_DEFAULT_APERTURE",
                    "DOF_DEFAULT_FOCUS_M", "DOF_CATALOG_PATH"):
            monkeypatch.delenv(key, raising=False)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return importlib.reload(settings)
    yield _reload
    monkeypatch.undo()
    importlib.reload(settings)


def test_defaults(reload_settings):
    s = reload_settings()
    assert s.LOG_LEVEL == "INFO"
    assert s.DISTANCE_UNIT == "m"
    assert s.DEFAULT_APERTURE == 8.0
    assert s.DEFAULT_FOCUS_M == 5.0
    assert s.CATALOG_PATH is None


def test_environment_overrides(reload_settings):
    s = reload_settings(DOF_DISTANCE_UNIT="ft", DOF_DEFAULT_APERTURE="11",
                        DOF_CATALOG_PATH="/tmp/equipment.json")
    assert s.DISTANCE_UNIT == "ft"
    assert s.DEFAULT_APERTURE == 11.0
    assert s.CATALOG_PATH == "/tmp/equipment.json"


def test_invalid_values_fall_back(reload_settings):
    s = reload_settings(DOF_DISTANCE_UNIT="yards", DOF_DEFAULT_FOCUS_M="close")
    assert s.DISTANCE_UNIT == "m"
    assert s.DEFAULT_FOCUS_M == 5.0


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield root
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


def test_setup_logging_is_idempotent(root_logger):
    setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG)
    ours = [h for h in root_logger.handlers if getattr(h, "_dof_planner", False)]
    assert len(ours) == 1
    assert root_logger.level == logging.DEBUG


def test_setup_logging_to_file(root_logger, tmp_path):
    log_file = tmp_path / "planner.log"
    setup_logging(logging.INFO, str(log_file))
    logging.getLogger("optics").info("hyperfocal computed")
    for h in root_logger.handlers:
        h.flush()
    assert "optics - INFO - hyperfocal computed" in log_file.read_text(encoding="utf-8")
