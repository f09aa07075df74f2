"""
Runtime defaults, read from the environment (or a local .env file).
"""
import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r, not a number; using %s", name, raw, default)
        return default


def _env_choice(name, choices, default):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    if raw not in choices:
        logger.warning("Ignoring %s=%r, expected one of %s", name, raw, choices)
        return default
    return raw


LOG_LEVEL = _env_choice("DOF_LOG_LEVEL", ("DEBUG", "INFO", "WARNING", "ERROR"), "INFO")
LOG_FILE = os.getenv("DOF_LOG_FILE") or None

CATALOG_PATH = os.getenv("DOF_CATALOG_PATH") or None

DISTANCE_UNIT = _env_choice("DOF_DISTANCE_UNIT", ("m", "ft"), "m")
DEFAULT_APERTURE = _env_float("DOF_DEFAULT_APERTURE", 8.0)
DEFAULT_FOCUS_M = _env_float("DOF_DEFAULT_FOCUS_M", 5.0)
DEFAULT_OVERLAP_PCT = _env_float("DOF_DEFAULT_OVERLAP_PCT", 60.0)
