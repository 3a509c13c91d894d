# src/spinwalk_core/parameters/records.py
"""
Data contracts for the simulation parameter record.

The record is split in two so that derived values cannot be read before
preparation:

-   `SimulationParameters` is the raw, mutable record produced by the parser
    and updated by the field-map loader. It holds no derived state.
-   `DerivedParameters` is the frozen result of `preparer.derive()`.
-   `PreparedParameters` composes a snapshot of the raw record with its
    derived constants. It is the only type that exposes derived values and the
    only type accepted by the diagnostic reporter and the binary packer.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from ..constants import (
    DEFAULT_B0,
    DEFAULT_DT,
    DEFAULT_T1,
    DEFAULT_T2,
    DEFAULT_TR,
    MAX_DEPHASE,
    MAX_GRADIENT,
    MAX_RF,
    MAX_T12,
    MAX_TE,
)
from .exceptions import CapacityExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tissue:
    """Relaxation times (seconds) of one tissue class."""
    t1: float = DEFAULT_T1
    t2: float = DEFAULT_T2


@dataclass(frozen=True)
class RFPulse:
    """An RF event. Angles are in radians, time in seconds from the start of the TR."""
    flip_angle: float
    phase: float = 0.0
    time: float = 0.0


@dataclass(frozen=True)
class DephasingEvent:
    angle: float  # radians
    time: float   # seconds


@dataclass(frozen=True)
class GradientEvent:
    """Gradient amplitude per axis (T/m) switched on at `time` (seconds)."""
    x: float
    y: float
    z: float
    time: float


# Name of each bounded sequence and its capacity in the kernel record.
SEQUENCE_CAPACITIES = {
    "tissues": MAX_T12,
    "rf_pulses": MAX_RF,
    "echo_times": MAX_TE,
    "dephasing": MAX_DEPHASE,
    "gradients": MAX_GRADIENT,
}


def check_capacity(sequence_name: str, items, capacity: int) -> None:
    """Raises CapacityExceededError if `items` holds more than `capacity` entries."""
    if len(items) > capacity:
        raise CapacityExceededError(sequence_name, len(items), capacity)


def _default_tissues() -> List[Tissue]:
    return [Tissue()]


@dataclass
class SimulationParameters:
    """
    The raw simulation parameter record.

    Owned by exactly one logical run. Fields left untouched by the configuration
    keep the defaults below. Bounded sequences are plain lists whose length is
    their count; `check_capacities()` enforces the kernel's fixed capacities.
    """
    tr: float = DEFAULT_TR
    dt: float = DEFAULT_DT
    b0: float = DEFAULT_B0
    diffusion_const: float = 0.0
    phase_cycling: float = 0.0  # radians
    seed: int = 0
    n_spins: int = 0
    n_dummy_scan: int = 0

    debug: bool = False
    steady_state: bool = False
    cross_boundary: bool = True
    multi_tissue: bool = False
    refocusing_180: bool = False

    tissues: List[Tissue] = field(default_factory=_default_tissues)
    rf_pulses: List[RFPulse] = field(default_factory=list)
    echo_times: List[float] = field(default_factory=list)
    dephasing: List[DephasingEvent] = field(default_factory=list)
    gradients: List[GradientEvent] = field(default_factory=list)

    fieldmap_size: Tuple[int, int, int] = (0, 0, 0)
    sample_length: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    n_fieldmaps: int = 0
    n_sample_length_scales: int = 0

    @property
    def flip_angle(self) -> float:
        """Flip angle (radians) of the first RF pulse, 0 when no pulse is defined."""
        return self.rf_pulses[0].flip_angle if self.rf_pulses else 0.0

    def check_capacities(self) -> None:
        for name, capacity in SEQUENCE_CAPACITIES.items():
            check_capacity(name, getattr(self, name), capacity)

    def copy(self) -> SimulationParameters:
        """Returns an independent deep copy, safe to hand to another run."""
        return copy.deepcopy(self)

    def scaled(self, factor: float) -> SimulationParameters:
        """Returns an independent copy whose physical sample length is multiplied by `factor`."""
        scaled = self.copy()
        scaled.sample_length = tuple(length * factor for length in self.sample_length)
        return scaled


@dataclass(frozen=True)
class DerivedParameters:
    """Constants derived from a raw record. Written once by the preparer, never by configuration."""
    n_timepoints: int
    cos_fa: float
    sin_fa: float
    cos_half_fa: float
    sin_half_fa: float
    t1_decay: Tuple[float, ...]  # exp(-dt / T1) per tissue
    t2_decay: Tuple[float, ...]  # exp(-dt / T2) per tissue
    matrix_length: int
    scale2grid: Tuple[float, float, float]


@dataclass(frozen=True)
class PreparedParameters:
    """
    A raw record snapshot together with its derived constants.

    `raw` must be treated as read-only; call `unprepared()` to obtain a mutable
    copy for the next field-map load or scaling step, then prepare it again.
    """
    raw: SimulationParameters
    derived: DerivedParameters

    def unprepared(self) -> SimulationParameters:
        return self.raw.copy()
