# src/spinwalk_core/runs.py
"""
Entry points that turn a configuration file into ready-to-simulate runs.

`load_configuration()` is the top-level error boundary: any diagnosable error
raised while reading the configuration is re-raised as a single
`SimulationSetupError` carrying the formatted report.

`iter_simulation_runs()` walks every (field map, sample-length scale) pair.
Each yielded run owns an independent prepared record; the field-map buffers
are shared and reloaded in place for each field map.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from .errors import DiagnosableError, SimulationSetupError, format_diagnostic_report
from .fieldmap import FieldMapBuffers, load_fieldmap
from .parameters import PreparedParameters, prepare
from .parser import ParsedConfiguration, SimulationConfigParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationRun:
    """One simulation pass: a loaded field map at one physical scale."""
    fieldmap_path: Path
    sample_length_scale: float
    parameters: PreparedParameters
    buffers: FieldMapBuffers


def _setup_error(e: Exception) -> SimulationSetupError:
    if isinstance(e, DiagnosableError):
        return SimulationSetupError(e.get_diagnostic_report())
    report = format_diagnostic_report(
        error_type=f"An Unexpected Error Occurred ({type(e).__name__})",
        details=f"Simulation setup encountered an unexpected internal error: {e}",
        suggestion="This may indicate a bug in SpinWalk Core. Please review the traceback.",
        context={}
    )
    return SimulationSetupError(report)


def load_configuration(source: Union[str, Path], **defaults) -> ParsedConfiguration:
    """
    Parses a configuration file. Keyword arguments are passed to
    `SimulationConfigParser.parse` as defaults (`files`, `parameters`,
    `sample_length_scales`).
    """
    try:
        return SimulationConfigParser().parse(source, **defaults)
    except Exception as e:
        raise _setup_error(e) from e


def iter_simulation_runs(
    config: ParsedConfiguration,
    buffers: Optional[FieldMapBuffers] = None,
) -> Iterator[SimulationRun]:
    """
    Yields one run per field map and sample-length scale, in configuration order.

    Field-map loading errors are raised as `SimulationSetupError`. A run's
    buffers are overwritten by the next field map, so consume each run before
    advancing the iterator.
    """
    buffers = buffers if buffers is not None else FieldMapBuffers()
    for fieldmap_path in config.files.fieldmaps:
        raw = config.parameters.unprepared()
        try:
            load_fieldmap(fieldmap_path, buffers, raw)
        except DiagnosableError as e:
            raise _setup_error(e) from e

        for scale in config.sample_length_scales:
            logger.info(f"Preparing run: {fieldmap_path.name} at sample length scale {scale:g}")
            yield SimulationRun(
                fieldmap_path=fieldmap_path,
                sample_length_scale=scale,
                parameters=prepare(raw.scaled(scale)),
                buffers=buffers,
            )
