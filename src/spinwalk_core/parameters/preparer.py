# src/spinwalk_core/parameters/preparer.py
import logging
from typing import Tuple

import numpy as np

from .exceptions import ParameterValueError
from .records import DerivedParameters, PreparedParameters, SimulationParameters

logger = logging.getLogger(__name__)


def matrix_length_of(fieldmap_size: Tuple[int, int, int]) -> int:
    """Total voxel count of a grid. Shared by the preparer and the field-map loader."""
    nx, ny, nz = (int(n) for n in fieldmap_size)
    return nx * ny * nz


def scale2grid_of(fieldmap_size, sample_length) -> Tuple[float, float, float]:
    """Voxels per metre along each axis; an axis with zero physical length maps to 0."""
    return tuple(
        (int(n) - 1) / length if length > 0 else 0.0
        for n, length in zip(fieldmap_size, sample_length)
    )


def derive(parameters: SimulationParameters) -> DerivedParameters:
    """
    Computes every derived constant from the raw fields of `parameters`.

    Pure: reads the record, never writes to it, and keeps no state between calls,
    so deriving twice from an unchanged record gives identical results.
    """
    if not parameters.dt > 0:
        raise ParameterValueError("dt", parameters.dt, "The dwell time must be strictly positive.")

    # Quotient of the kernel record's float32 fields; a TR that is not a multiple of dt is truncated.
    n_timepoints = int(np.float32(parameters.tr) / np.float32(parameters.dt))

    t1 = np.array([tissue.t1 for tissue in parameters.tissues], dtype=float)
    t2 = np.array([tissue.t2 for tissue in parameters.tissues], dtype=float)
    with np.errstate(divide="ignore"):
        # A relaxation time of 0 decays fully within one step.
        t1_decay = np.exp(-parameters.dt / t1)
        t2_decay = np.exp(-parameters.dt / t2)

    fa = parameters.flip_angle
    return DerivedParameters(
        n_timepoints=n_timepoints,
        cos_fa=float(np.cos(fa)),
        sin_fa=float(np.sin(fa)),
        cos_half_fa=float(np.cos(fa / 2.0)),
        sin_half_fa=float(np.sin(fa / 2.0)),
        t1_decay=tuple(float(v) for v in t1_decay),
        t2_decay=tuple(float(v) for v in t2_decay),
        matrix_length=matrix_length_of(parameters.fieldmap_size),
        scale2grid=scale2grid_of(parameters.fieldmap_size, parameters.sample_length),
    )


def prepare(parameters: SimulationParameters) -> PreparedParameters:
    """
    Checks the bounded sequences and composes a snapshot of `parameters` with its
    derived constants. Later changes to `parameters` do not affect the result.
    """
    parameters.check_capacities()
    derived = derive(parameters)
    logger.debug(
        "Prepared parameters: %d timepoints, %d voxels, flip angle %.6g rad.",
        derived.n_timepoints, derived.matrix_length, parameters.flip_angle,
    )
    return PreparedParameters(raw=parameters.copy(), derived=derived)
