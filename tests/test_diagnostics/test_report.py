# tests/test_diagnostics/test_report.py

import math

import pytest
import yaml

from spinwalk_core.diagnostics import MemoryEstimate, estimate_memory, render_report
from spinwalk_core.parameters import RFPulse, SimulationParameters, prepare


@pytest.fixture
def prepared():
    return prepare(SimulationParameters(
        rf_pulses=[RFPulse(flip_angle=math.pi / 2)],
        echo_times=[0.02],
        fieldmap_size=(4, 4, 4),
        sample_length=(1e-3, 1e-3, 1e-3),
        n_spins=1000,
        n_sample_length_scales=2,
    ))


class TestMemoryEstimate:

    def test_estimate(self, prepared):
        memory = estimate_memory(prepared)

        assert memory.fieldmap_bytes == 64 * 5
        assert memory.variables_bytes == 1000 * 3 * (4 + 1) * 4
        assert memory.gpu_bytes == 320 + 60000
        assert memory.ram_bytes == 320 + 2 * 60000

    def test_quantities_are_mebibytes(self):
        memory = MemoryEstimate(fieldmap_bytes=2 ** 20, variables_bytes=2 ** 21, n_sample_length_scales=3)
        quantities = memory.as_quantities()

        assert quantities["fieldmap"].magnitude == pytest.approx(1.0)
        assert quantities["variables"].magnitude == pytest.approx(2.0)
        assert quantities["variables_all_scales"].magnitude == pytest.approx(6.0)
        assert "MiB" in memory.describe()[0]


class TestRenderReport:
    """Tests the read-only diagnostic rendering of a prepared record."""

    def test_report_does_not_modify_record(self, prepared):
        before = prepared.raw.copy()
        render_report(prepared).render()
        assert prepared.raw == before

    def test_entries_in_fixed_order(self, prepared):
        labels = [entry.label for entry in render_report(prepared).entries]
        assert labels[:6] == ["TR", "dt", "B0", "T1", "T2", "TE"]
        assert labels.index("RF flip-angle") < labels.index("dephasing deg.") < labels.index("gradient (x,y,z)")
        assert labels.index("sample length") < labels.index("timepoints") < labels.index("Seed")
        assert labels[-2:] == ["cos/sin FA", "cos/sin FA/2"]

    def test_decay_factors_are_reported(self, prepared):
        entries = {entry.label: entry.value for entry in render_report(prepared).entries}
        assert entries["exp(-dt/T1)"] == [pytest.approx(math.exp(-5e-5 / 2.2))]
        assert entries["exp(-dt/T2)"] == [pytest.approx(math.exp(-5e-5 / 0.04))]

    def test_rendered_text(self, prepared):
        text = str(render_report(prepared))
        lines = text.splitlines()

        assert lines[0].startswith("TR")
        assert "= 0.04 s" in lines[0]
        assert any(line.startswith("RF flip-angle") and "90 deg" in line for line in lines)
        assert any(line.startswith("fieldmap size") and "4 x 4 x 4" in line for line in lines)
        assert any(line.startswith("timepoints") and line.endswith("800") for line in lines)
        assert lines[-2].startswith("Required GPU memory")
        assert lines[-1].startswith("Required RAM")

    def test_yaml_export(self, prepared):
        data = yaml.safe_load(render_report(prepared).to_yaml())

        assert data["parameters"]["TR"] == 0.04
        assert data["parameters"]["fieldmap size"] == [4, 4, 4]
        assert data["parameters"]["RF flip-angle"] == [pytest.approx(90.0)]
        assert data["memory_bytes"]["fieldmap"] == 320
        assert data["memory_bytes"]["ram_total"] == 120320
