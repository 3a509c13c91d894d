# src/spinwalk_core/parameters/exceptions.py
"""
Defines the custom, diagnosable exceptions for the parameter record.

Every error here inherits from `ParameterError`, which in turn inherits from
the global `DiagnosableError`. High-level handlers (such as
`runs.load_configuration`) can therefore catch a single type and still hand
the operator a full diagnostic report.
"""
from ..errors import DiagnosableError, format_diagnostic_report


class ParameterError(DiagnosableError):
    """Concrete base class for all parameter-record errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Parameter Error",
            details=str(self),
            suggestion="Review the simulation parameters in your configuration file.",
            context={}
        )


class CapacityExceededError(ParameterError):
    """
    Raised when a bounded sequence (RF pulses, echo times, tissues, dephasing
    or gradient events) holds more entries than the kernel record can store.
    The sequence is never truncated to fit.
    """
    def __init__(self, sequence_name: str, count: int, capacity: int):
        self.sequence_name = sequence_name
        self.count = count
        self.capacity = capacity
        super().__init__(
            f"Sequence '{sequence_name}' has {count} entries, exceeding its capacity of {capacity}."
        )

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Sequence Capacity Exceeded",
            details=(
                f"The sequence '{self.sequence_name}' defines {self.count} entries, "
                f"but the simulation record can hold at most {self.capacity}."
            ),
            suggestion=f"Reduce the number of '{self.sequence_name}' entries to {self.capacity} or fewer.",
            context={'key': self.sequence_name, 'capacity': self.capacity}
        )


class ParameterValueError(ParameterError):
    """Raised when a raw value makes derivation impossible (e.g. a non-positive dwell time)."""
    def __init__(self, name: str, value, details: str):
        self.name = name
        self.value = value
        self.details = details
        super().__init__(f"Parameter '{name}' = {value!r}: {details}")

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Invalid Parameter Value",
            details=self.details,
            suggestion=f"Set '{self.name}' to a valid value in the configuration file.",
            context={'key': self.name, 'user_input': str(self.value)}
        )
