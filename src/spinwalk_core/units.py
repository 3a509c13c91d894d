# --- src/spinwalk_core/units.py ---
import math
import logging

import pint

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.debug("Pint Unit Registry initialized.")


def degrees_to_radians(degrees: float) -> float:
    """Exact degree to radian conversion used for every angle read from a configuration file."""
    return degrees * math.pi / 180.0


def radians_to_degrees(radians: float) -> float:
    return radians * 180.0 / math.pi


def bytes_to_mebibytes(n_bytes: int) -> Quantity:
    """Expresses a byte count as a MiB quantity for memory reports."""
    return Quantity(n_bytes, "byte").to("MiB")


def metres_to_micrometres(length_m: float) -> float:
    return Quantity(length_m, "meter").to("micrometer").magnitude
