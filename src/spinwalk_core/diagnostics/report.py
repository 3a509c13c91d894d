# src/spinwalk_core/diagnostics/report.py
"""
Read-only rendering of a prepared parameter record for operator verification.

`render_report()` returns a `DiagnosticReport` value; whether it is printed,
logged or serialized is left to the caller.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import yaml

from ..constants import SIZEOF_BOOL, SIZEOF_FLOAT
from ..parameters.records import PreparedParameters
from ..units import Quantity, bytes_to_mebibytes, radians_to_degrees

logger = logging.getLogger(__name__)

# Three-component vectors held per spin in addition to one per echo time.
SPIN_STATE_VECTORS = 4


@dataclass(frozen=True)
class ReportEntry:
    label: str
    value: Any
    unit: str = ""


@dataclass(frozen=True)
class MemoryEstimate:
    """Estimated memory needs of one simulation, in bytes."""
    fieldmap_bytes: int
    variables_bytes: int
    n_sample_length_scales: int

    @property
    def ram_variables_bytes(self) -> int:
        return self.variables_bytes * self.n_sample_length_scales

    @property
    def gpu_bytes(self) -> int:
        return self.fieldmap_bytes + self.variables_bytes

    @property
    def ram_bytes(self) -> int:
        return self.fieldmap_bytes + self.ram_variables_bytes

    def as_quantities(self) -> Dict[str, Quantity]:
        return {
            "fieldmap": bytes_to_mebibytes(self.fieldmap_bytes),
            "variables": bytes_to_mebibytes(self.variables_bytes),
            "variables_all_scales": bytes_to_mebibytes(self.ram_variables_bytes),
        }

    def describe(self) -> List[str]:
        q = self.as_quantities()
        return [
            f"Required GPU memory ≈ {q['fieldmap']:.2f~P} + {q['variables']:.2f~P} (fieldmap + variables)",
            f"Required RAM ≈ {q['fieldmap']:.2f~P} + {q['variables_all_scales']:.2f~P} (fieldmap + variables)",
        ]


def estimate_memory(prepared: PreparedParameters) -> MemoryEstimate:
    raw = prepared.raw
    fieldmap_bytes = prepared.derived.matrix_length * (SIZEOF_FLOAT + SIZEOF_BOOL)
    variables_bytes = raw.n_spins * 3 * (SPIN_STATE_VECTORS + len(raw.echo_times)) * SIZEOF_FLOAT
    return MemoryEstimate(
        fieldmap_bytes=fieldmap_bytes,
        variables_bytes=variables_bytes,
        n_sample_length_scales=raw.n_sample_length_scales,
    )


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, tuple):
        return " x ".join(_format_value(v) for v in value)
    if isinstance(value, list):
        return " ".join(
            "(" + ", ".join(_format_value(v) for v in item) + ")" if isinstance(item, tuple) else _format_value(item)
            for item in value
        )
    return str(value)


def _plain(value: Any) -> Any:
    """Converts tuples to lists so the value can be written by yaml.safe_dump."""
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class DiagnosticReport:
    entries: Tuple[ReportEntry, ...]
    memory: MemoryEstimate

    def render(self) -> str:
        lines = []
        for entry in self.entries:
            text = _format_value(entry.value)
            if entry.unit:
                text = f"{text} {entry.unit}"
            lines.append(f"{entry.label:<20}= {text}".rstrip())
        lines.append("")
        lines.extend(self.memory.describe())
        return "\n".join(lines)

    def __str__(self):
        return self.render()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "parameters": {entry.label: _plain(entry.value) for entry in self.entries},
            "memory_bytes": {
                "fieldmap": self.memory.fieldmap_bytes,
                "variables": self.memory.variables_bytes,
                "gpu_total": self.memory.gpu_bytes,
                "ram_total": self.memory.ram_bytes,
            },
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.as_dict(), sort_keys=False, allow_unicode=True)


def render_report(prepared: PreparedParameters) -> DiagnosticReport:
    """
    Builds the diagnostic report of a prepared record, in a fixed order:
    timing, tissues, echo times, RF pulses, dephasing, gradients, grid geometry,
    run sizes, flags, decay factors, derived coefficients and finally memory estimates.
    """
    raw, derived = prepared.raw, prepared.derived
    entries = (
        ReportEntry("TR", raw.tr, "s"),
        ReportEntry("dt", raw.dt, "s"),
        ReportEntry("B0", raw.b0, "T"),
        ReportEntry("T1", [tissue.t1 for tissue in raw.tissues], "s"),
        ReportEntry("T2", [tissue.t2 for tissue in raw.tissues], "s"),
        ReportEntry("TE", list(raw.echo_times), "s"),
        ReportEntry("RF flip-angle", [radians_to_degrees(p.flip_angle) for p in raw.rf_pulses], "deg"),
        ReportEntry("RF phase", [radians_to_degrees(p.phase) for p in raw.rf_pulses], "deg"),
        ReportEntry("RF time", [p.time for p in raw.rf_pulses], "s"),
        ReportEntry("dephasing deg.", [radians_to_degrees(e.angle) for e in raw.dephasing], "deg"),
        ReportEntry("dephasing time", [e.time for e in raw.dephasing], "s"),
        ReportEntry("gradient (x,y,z)", [(g.x, g.y, g.z) for g in raw.gradients], "T/m"),
        ReportEntry("gradient time", [g.time for g in raw.gradients], "s"),
        ReportEntry("sample length", tuple(raw.sample_length), "m"),
        ReportEntry("scale2grid", tuple(derived.scale2grid)),
        ReportEntry("fieldmap size", tuple(raw.fieldmap_size)),
        ReportEntry("matrix length", derived.matrix_length),
        ReportEntry("diffusion const", raw.diffusion_const),
        ReportEntry("dummy scans", raw.n_dummy_scan),
        ReportEntry("spins", raw.n_spins),
        ReportEntry("sample scales", raw.n_sample_length_scales),
        ReportEntry("timepoints", derived.n_timepoints),
        ReportEntry("fieldmaps", raw.n_fieldmaps),
        ReportEntry("Multi-Tissues", raw.multi_tissue),
        ReportEntry("Boundary Condition", raw.cross_boundary),
        ReportEntry("Phase cycling", radians_to_degrees(raw.phase_cycling), "deg"),
        ReportEntry("Seed", raw.seed),
        ReportEntry("Steady state", raw.steady_state),
        ReportEntry("180 refocusing", raw.refocusing_180),
        ReportEntry("Debug dump", raw.debug),
        ReportEntry("exp(-dt/T1)", list(derived.t1_decay)),
        ReportEntry("exp(-dt/T2)", list(derived.t2_decay)),
        ReportEntry("cos/sin FA", (derived.cos_fa, derived.sin_fa)),
        ReportEntry("cos/sin FA/2", (derived.cos_half_fa, derived.sin_half_fa)),
    )
    return DiagnosticReport(entries=entries, memory=estimate_memory(prepared))
