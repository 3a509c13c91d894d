# src/spinwalk_core/parser/exceptions.py
"""
Defines the diagnosable exceptions for reading configuration files.

Every exception here derives from `ConfigurationError`, which hooks the whole
family into the global `DiagnosableError` hierarchy:

-   `ConfigNotFoundError` and `ConfigUnreadableError` cover file-level problems.
-   `ConfigTypeError` reports every key whose value could not be coerced to the
    type it needs.
-   `MissingInputFileError` is raised for field-map paths that do not exist.
    Missing `m0`/`xyz0` inputs are only logged by the parser and never raise.
"""
from pathlib import Path
from typing import List, Tuple

from ..errors import DiagnosableError, format_diagnostic_report


class ConfigurationError(DiagnosableError):
    """Concrete base class for all configuration-file errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Configuration Error",
            details=str(self),
            suggestion="Please check the format and content of the configuration file.",
            context={}
        )


class ConfigNotFoundError(ConfigurationError):
    """Raised when the configuration path does not point to an existing file."""
    def __init__(self, file_path: Path):
        self.file_path = file_path
        super().__init__(f"File does not exist: {file_path}")

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Configuration File Not Found",
            details=f"Configuration file not found at path: {self.file_path}",
            suggestion="Check the path passed to the parser; relative paths are resolved against the working directory.",
            context={'source_file': self.file_path}
        )


class ConfigUnreadableError(ConfigurationError):
    """Raised when the file exists but cannot be turned into a section/key mapping."""
    def __init__(self, file_path: Path, details: str):
        self.file_path = file_path
        self.details = details
        super().__init__(f"Problem reading config file '{file_path}': {details}")

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Unreadable Configuration File",
            details=self.details,
            suggestion="Ensure the file is readable UTF-8 text in INI format: '[SECTION]' headers followed by 'KEY = value' lines, with no duplicate keys.",
            context={'source_file': self.file_path}
        )


class ConfigTypeError(ConfigurationError):
    """Raised when one or more configuration values cannot be coerced to their numeric type."""
    def __init__(self, file_path: Path, errors: List[Tuple[str, str]]):
        self.file_path = file_path
        self.errors = errors
        error_lines = [f"  - {key}: {message}" for key, message in errors]
        super().__init__(
            f"Invalid value(s) in config file '{file_path}':\n" + "\n".join(error_lines)
        )

    def get_diagnostic_report(self) -> str:
        error_list_str = "\n".join(f"  - Key '{key}': {message}" for key, message in self.errors)
        details = (
            "Some values could not be converted to the type their key requires.\n"
            f"See details for {len(self.errors)} issue(s) below:\n\n{error_list_str}"
        )
        return format_diagnostic_report(
            error_type="Configuration Type Error",
            details=details,
            suggestion="Use plain decimal numbers (e.g. '0.04', '5e-5', '100') for numeric keys; integer keys such as SEED and DUMMY_SCAN take whole numbers only.",
            context={'source_file': self.file_path}
        )


class MissingInputFileError(ConfigurationError):
    """Raised when a field-map path listed in the configuration does not exist."""
    def __init__(self, file_path: Path, key: str, missing_path: Path):
        self.file_path = file_path
        self.key = key
        self.missing_path = missing_path
        super().__init__(f"File does not exist: {missing_path} (key '{key}' in '{file_path}')")

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Missing Input File",
            details=f"The file named by '{self.key}' does not exist: {self.missing_path}",
            suggestion="Fix the path in the [files] section; relative paths are resolved against the configuration file's directory.",
            context={'source_file': self.file_path, 'key': self.key, 'user_input': str(self.missing_path)}
        )
