# src/spinwalk_core/parameters/__init__.py
from .exceptions import (
    ParameterError,
    CapacityExceededError,
    ParameterValueError,
)
from .records import (
    SimulationParameters,
    DerivedParameters,
    PreparedParameters,
    Tissue,
    RFPulse,
    DephasingEvent,
    GradientEvent,
)
from .preparer import derive, prepare
from .layout import SIMULATION_PARAMETERS_DTYPE, pack_parameters

__all__ = [
    # Exceptions
    "ParameterError",
    "CapacityExceededError",
    "ParameterValueError",
    # Records
    "SimulationParameters",
    "DerivedParameters",
    "PreparedParameters",
    "Tissue",
    "RFPulse",
    "DephasingEvent",
    "GradientEvent",
    # Preparation and binary layout
    "derive",
    "prepare",
    "SIMULATION_PARAMETERS_DTYPE",
    "pack_parameters",
]
