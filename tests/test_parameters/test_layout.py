# tests/test_parameters/test_layout.py

import math

import numpy as np
import pytest

from spinwalk_core.parameters import (
    SIMULATION_PARAMETERS_DTYPE,
    DephasingEvent,
    GradientEvent,
    RFPulse,
    SimulationParameters,
    Tissue,
    pack_parameters,
    prepare,
)
from spinwalk_core.parameters.layout import to_timesteps


@pytest.fixture
def prepared():
    return prepare(SimulationParameters(
        tr=0.04,
        dt=5e-5,
        b0=9.4,
        tissues=[Tissue(2.2, 0.04), Tissue(1.5, 0.05)],
        rf_pulses=[RFPulse(math.pi / 2, 0.0, 0.0), RFPulse(math.pi, math.pi / 2, 0.01)],
        echo_times=[0.02],
        dephasing=[DephasingEvent(math.pi, 0.005)],
        gradients=[GradientEvent(0.01, 0.02, 0.03, 0.001)],
        fieldmap_size=(4, 4, 4),
        sample_length=(1e-3, 1e-3, 1e-3),
        n_spins=1000,
        seed=-1,
        cross_boundary=True,
        refocusing_180=True,
    ))


class TestBinaryLayout:
    """Tests the fixed-capacity, naturally aligned record handed to the kernel."""

    def test_layout_is_aligned(self):
        fields = SIMULATION_PARAMETERS_DTYPE.fields
        assert SIMULATION_PARAMETERS_DTYPE.isalignedstruct
        assert fields["T1"][1] == 7 * 4
        assert fields["matrix_length"][1] % 8 == 0
        assert SIMULATION_PARAMETERS_DTYPE.itemsize % 8 == 0
        assert fields["T1"][0].shape == (256,)
        assert fields["gradient_xyz"][0].shape == (3 * 256,)

    @pytest.mark.parametrize("time_s, expected", [(0.0, 0), (0.02, 400), (0.01, 200), (7.4e-5, 1), (7.6e-5, 2)])
    def test_to_timesteps(self, time_s, expected):
        assert to_timesteps(time_s, 5e-5) == expected

    def test_pack_parameters(self, prepared):
        record = pack_parameters(prepared)

        assert record.shape == ()
        assert record["TR"] == pytest.approx(0.04)
        assert record["n_timepoints"] == 800
        assert record["n_T12"] == 2
        assert list(record["T1"][:2]) == pytest.approx([2.2, 1.5])
        assert record["n_RF"] == 2
        assert list(record["RF_FA"][:2]) == pytest.approx([math.pi / 2, math.pi])
        assert list(record["RF_ST"][:2]) == [0, 200]
        assert record["n_TE"] == 1
        assert record["TE"][0] == 400
        assert record["dephasing_T"][0] == 100
        assert list(record["gradient_xyz"][:3]) == pytest.approx([0.01, 0.02, 0.03])
        assert record["gradient_T"][0] == 20
        assert list(record["fieldmap_size"]) == [4, 4, 4]
        assert record["matrix_length"] == 64
        assert record["n_spins"] == 1000
        assert record["seed"] == 0xFFFFFFFF
        assert bool(record["enCrossBoundry"]) is True
        assert bool(record["enRefocusing180"]) is True
        assert bool(record["enMultiTissue"]) is False

    def test_unused_capacity_is_zeroed(self, prepared):
        record = pack_parameters(prepared)
        assert not np.any(record["T1"][2:])
        assert not np.any(record["RF_FA"][2:])
        assert not np.any(record["TE"][1:])

    def test_record_serializes_to_fixed_size(self, prepared):
        assert len(pack_parameters(prepared).tobytes()) == SIMULATION_PARAMETERS_DTYPE.itemsize
