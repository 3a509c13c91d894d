# src/spinwalk_core/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.debug("SpinWalk Core package initialized.")

from .units import ureg, pint, Quantity
from .parameters import (
    SimulationParameters,
    DerivedParameters,
    PreparedParameters,
    prepare,
    pack_parameters,
    CapacityExceededError,
)
from .parser import (
    SimulationConfigParser,
    FileCategory,
    FileManifest,
    ParsedConfiguration,
    ConfigNotFoundError,
    ConfigUnreadableError,
    ConfigTypeError,
    MissingInputFileError,
)
from .fieldmap import FieldMapBuffers, load_fieldmap, write_fieldmap, FileOpenError
from .diagnostics import DiagnosticReport, render_report
from .runs import SimulationRun, load_configuration, iter_simulation_runs
from .errors import SpinWalkError, SimulationSetupError, DiagnosableError

__all__ = [
    # Units
    "ureg", "pint", "Quantity",
    # Parameter record
    "SimulationParameters", "DerivedParameters", "PreparedParameters",
    "prepare", "pack_parameters",
    # Parser
    "SimulationConfigParser", "FileCategory", "FileManifest", "ParsedConfiguration",
    # Field maps
    "FieldMapBuffers", "load_fieldmap", "write_fieldmap",
    # Diagnostics
    "DiagnosticReport", "render_report",
    # Runs
    "SimulationRun", "load_configuration", "iter_simulation_runs",
    # Errors
    "SpinWalkError", "SimulationSetupError", "DiagnosableError",
    "ConfigNotFoundError", "ConfigUnreadableError", "ConfigTypeError",
    "MissingInputFileError", "CapacityExceededError", "FileOpenError",
]
