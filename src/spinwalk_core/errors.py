# src/spinwalk_core/errors.py
import logging
from typing import Any, Dict, Protocol, abstractmethod
from typing import runtime_checkable

logger = logging.getLogger(__name__)

# --- User-Facing Exception Hierarchy ---

class SpinWalkError(Exception):
    """Base class for all custom, user-facing errors in SpinWalk Core."""
    pass

class SimulationSetupError(SpinWalkError):
    """
    Raised when preparing a simulation fails for any reason, from reading the
    configuration file to loading a field map. The message is a pre-formatted,
    user-friendly diagnostic report.
    """
    pass


# --- Diagnostic Protocol & Base Exception ---

@runtime_checkable
class Diagnosable(Protocol):
    """
    A protocol for exceptions that can generate their own diagnostic report.
    Lets any caller work with a "diagnosable" object without knowing its
    concrete type.
    """
    def get_diagnostic_report(self) -> str:
        """Generates a complete, user-friendly, multi-line report string."""
        ...

class DiagnosableError(Exception, Diagnosable):
    """
    Common, concrete base class for all internal exceptions that are diagnosable.

    It inherits from `Exception`, so it can be used in `except` clauses, and
    declares `get_diagnostic_report` abstract so that every subclass has to
    say how it is reported to the operator.
    """
    @abstractmethod
    def get_diagnostic_report(self) -> str:
        """
        Abstract method to generate the diagnostic report.
        Subclasses MUST implement this.
        """
        raise NotImplementedError


# --- Stateless Formatting Utility ---

def format_diagnostic_report(
    error_type: str,
    details: str,
    suggestion: str,
    context: Dict[str, Any]
) -> str:
    """
    Formats the final multi-line report string so that every user-facing
    diagnostic has the same look.

    Args:
        error_type: The high-level category of the error (e.g., "Missing Input File").
        details: A detailed, potentially multi-line description of the problem.
        suggestion: Actionable advice for the user to resolve the issue.
        context: Contextual information (source file, configuration key, raw user input, ...).

    Returns:
        A formatted report string ready for display.
    """
    lines = [
        "\n",
        "============= SpinWalk Core: Actionable Diagnostic Report =============",
        f"Error Type:     {error_type}",
    ]
    if source_file := context.get('source_file'):
        lines.append(f"Source File:    {source_file}")
    if key := context.get('key'):
        lines.append(f"Config Key:     {key}")
    if user_input := context.get('user_input'):
        lines.append(f"User Input:     '{user_input}'")
    if capacity := context.get('capacity'):
        lines.append(f"Capacity:       {capacity}")

    lines.append("\nDetails:")
    for line in details.splitlines():
        lines.append(f"  {line}")

    if suggestion:
        lines.append("\nSuggestion:")
        for line in suggestion.splitlines():
            lines.append(f"  {line}")

    lines.append("========================================================================")
    return "\n".join(lines)
