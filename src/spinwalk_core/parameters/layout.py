# src/spinwalk_core/parameters/layout.py
"""
Fixed binary layout of the parameter record consumed by the compute kernel.

`SIMULATION_PARAMETERS_DTYPE` mirrors the kernel's C struct field for field,
with natural alignment (`align=True`). Bounded sequences occupy their full
capacity and carry an explicit count field; times are stored as integer
multiples of the dwell time.
"""
import logging
import math

import numpy as np

from ..constants import MAX_DEPHASE, MAX_GRADIENT, MAX_RF, MAX_T12, MAX_TE
from .records import PreparedParameters

logger = logging.getLogger(__name__)

SIMULATION_PARAMETERS_DTYPE = np.dtype(
    [
        ("TR", "<f4"), ("dt", "<f4"), ("B0", "<f4"),
        ("c", "<f4"), ("s", "<f4"), ("c2", "<f4"), ("s2", "<f4"),
        ("T1", "<f4", (MAX_T12,)), ("T2", "<f4", (MAX_T12,)),
        ("RF_FA", "<f4", (MAX_RF,)), ("RF_PH", "<f4", (MAX_RF,)),
        ("dephasing", "<f4", (MAX_DEPHASE,)),
        ("gradient_xyz", "<f4", (3 * MAX_GRADIENT,)),
        ("RF_ST", "<i4", (MAX_RF,)), ("TE", "<i4", (MAX_TE,)),
        ("dephasing_T", "<i4", (MAX_DEPHASE,)), ("gradient_T", "<i4", (MAX_GRADIENT,)),
        ("sample_length", "<f4", (3,)), ("scale2grid", "<f4", (3,)),
        ("diffusion_const", "<f4"), ("phase_cycling", "<f4"),
        ("n_timepoints", "<i4"), ("n_sample_length_scales", "<i4"), ("n_fieldmaps", "<i4"),
        ("n_TE", "<i4"), ("n_RF", "<i4"), ("n_dephasing", "<i4"), ("n_gradient", "<i4"),
        ("n_T12", "<i4"), ("n_dummy_scan", "<i4"),
        ("n_spins", "<u4"), ("fieldmap_size", "<u4", (3,)), ("seed", "<u4"),
        ("matrix_length", "<u8"),
        ("enDebug", "?"), ("enCrossBoundry", "?"), ("enMultiTissue", "?"),
        ("enRefocusing180", "?"), ("enSteadyStateSimulation", "?"),
    ],
    align=True,
)


def to_timesteps(time_s: float, dt: float) -> int:
    """Rounds a time in seconds to the nearest whole number of dwell times."""
    return int(math.floor(time_s / dt + 0.5))


def pack_parameters(prepared: PreparedParameters) -> np.ndarray:
    """Packs a prepared record into a 0-d array of SIMULATION_PARAMETERS_DTYPE."""
    raw, derived = prepared.raw, prepared.derived
    raw.check_capacities()
    record = np.zeros((), dtype=SIMULATION_PARAMETERS_DTYPE)

    record["TR"], record["dt"], record["B0"] = raw.tr, raw.dt, raw.b0
    record["c"], record["s"] = derived.cos_fa, derived.sin_fa
    record["c2"], record["s2"] = derived.cos_half_fa, derived.sin_half_fa

    n_t12 = len(raw.tissues)
    record["T1"][:n_t12] = [tissue.t1 for tissue in raw.tissues]
    record["T2"][:n_t12] = [tissue.t2 for tissue in raw.tissues]

    n_rf = len(raw.rf_pulses)
    record["RF_FA"][:n_rf] = [pulse.flip_angle for pulse in raw.rf_pulses]
    record["RF_PH"][:n_rf] = [pulse.phase for pulse in raw.rf_pulses]
    record["RF_ST"][:n_rf] = [to_timesteps(pulse.time, raw.dt) for pulse in raw.rf_pulses]

    n_te = len(raw.echo_times)
    record["TE"][:n_te] = [to_timesteps(te, raw.dt) for te in raw.echo_times]

    n_dephasing = len(raw.dephasing)
    record["dephasing"][:n_dephasing] = [event.angle for event in raw.dephasing]
    record["dephasing_T"][:n_dephasing] = [to_timesteps(event.time, raw.dt) for event in raw.dephasing]

    n_gradient = len(raw.gradients)
    record["gradient_xyz"][:3 * n_gradient] = [
        amplitude for event in raw.gradients for amplitude in (event.x, event.y, event.z)
    ]
    record["gradient_T"][:n_gradient] = [to_timesteps(event.time, raw.dt) for event in raw.gradients]

    record["sample_length"] = raw.sample_length
    record["scale2grid"] = derived.scale2grid
    record["diffusion_const"] = raw.diffusion_const
    record["phase_cycling"] = raw.phase_cycling

    record["n_timepoints"] = derived.n_timepoints
    record["n_sample_length_scales"] = raw.n_sample_length_scales
    record["n_fieldmaps"] = raw.n_fieldmaps
    record["n_TE"], record["n_RF"] = n_te, n_rf
    record["n_dephasing"], record["n_gradient"], record["n_T12"] = n_dephasing, n_gradient, n_t12
    record["n_dummy_scan"] = raw.n_dummy_scan

    record["n_spins"] = raw.n_spins
    record["fieldmap_size"] = raw.fieldmap_size
    record["seed"] = raw.seed & 0xFFFFFFFF
    record["matrix_length"] = derived.matrix_length

    record["enDebug"] = raw.debug
    record["enCrossBoundry"] = raw.cross_boundary
    record["enMultiTissue"] = raw.multi_tissue
    record["enRefocusing180"] = raw.refocusing_180
    record["enSteadyStateSimulation"] = raw.steady_state

    logger.debug("Packed parameter record (%d bytes).", SIMULATION_PARAMETERS_DTYPE.itemsize)
    return record
