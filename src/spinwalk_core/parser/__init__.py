# src/spinwalk_core/parser/__init__.py
from .raw_data import FileCategory, FileManifest, ParsedConfiguration
from .parser import SimulationConfigParser, collect_indexed, is_enabled
from .exceptions import (
    ConfigurationError,
    ConfigNotFoundError,
    ConfigUnreadableError,
    ConfigTypeError,
    MissingInputFileError,
)

__all__ = [
    # Data Structures
    "FileCategory",
    "FileManifest",
    "ParsedConfiguration",
    # Parser and helpers
    "SimulationConfigParser",
    "collect_indexed",
    "is_enabled",
    # Exceptions
    "ConfigurationError",
    "ConfigNotFoundError",
    "ConfigUnreadableError",
    "ConfigTypeError",
    "MissingInputFileError",
]
