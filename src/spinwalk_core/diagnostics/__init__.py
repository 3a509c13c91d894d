# src/spinwalk_core/diagnostics/__init__.py
from .report import (
    DiagnosticReport,
    MemoryEstimate,
    ReportEntry,
    estimate_memory,
    render_report,
)

__all__ = [
    "DiagnosticReport",
    "MemoryEstimate",
    "ReportEntry",
    "estimate_memory",
    "render_report",
]
