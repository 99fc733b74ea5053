"""
Runtime configuration loaded from environment variables.

Values can be set in the environment or in a .env file at the project root.
Every setting has a default, so nothing needs to be configured for the
library or the API to work.
"""
import logging
import math
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Mean radius of h3's authalic sphere, in meters
EARTH_RADIUS_METERS = 6371007.180918475

# Largest radius accepted by the validator (default: quarter of the circumference)
DEFAULT_MAX_RADIUS_METERS = math.pi * EARTH_RADIUS_METERS / 2


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


MAX_RADIUS_METERS = _env_float("ENCLOSURE_MAX_RADIUS_METERS", DEFAULT_MAX_RADIUS_METERS)

# ring_limit = ceil(FACTOR * radius / average_edge_length) + MARGIN
# Ring k sits roughly k * 1.5 edge lengths away, so a factor of 2 leaves room
# for cells that are shrunk by pentagon distortion.
RING_LIMIT_FACTOR = _env_float("ENCLOSURE_RING_LIMIT_FACTOR", 2.0)
RING_LIMIT_MARGIN = _env_int("ENCLOSURE_RING_LIMIT_MARGIN", 3)

# Added to the radius when testing cells so rounding only ever over-includes
INCLUSION_TOLERANCE_METERS = _env_float("ENCLOSURE_INCLUSION_TOLERANCE_METERS", 0.01)

# Threads used to test the cells of one ring (1 = serial)
WORKERS = _env_int("ENCLOSURE_WORKERS", 1)

# Wall-clock cap on a single API request's expansion (0 = no cap)
DEADLINE_SECONDS = _env_float("ENCLOSURE_DEADLINE_SECONDS", 5.0)

LOG_LEVEL = os.getenv("ENCLOSURE_LOG_LEVEL", "INFO")


def configure_logging(level: str = None) -> None:
    """
    Configure root logging for the API and scripts.

    Library code only creates module loggers; it never configures handlers.
    """
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
