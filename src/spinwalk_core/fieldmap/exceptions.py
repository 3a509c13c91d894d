# src/spinwalk_core/fieldmap/exceptions.py
"""
Diagnosable exceptions raised while reading binary field-map files.
"""
from pathlib import Path

from ..errors import DiagnosableError, format_diagnostic_report


class FieldMapError(DiagnosableError):
    """Concrete base class for all field-map loading errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Field-Map Error",
            details=str(self),
            suggestion="Check the field-map files listed in the [files] section.",
            context={}
        )


class FileOpenError(FieldMapError):
    """Raised when a field-map file cannot be opened for binary reading."""
    def __init__(self, file_path: Path, details: str):
        self.file_path = file_path
        self.details = details
        super().__init__(f"Error opening file '{file_path}': {details}")

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Field-Map Open Error",
            details=self.details,
            suggestion="Ensure the field-map file exists and is readable.",
            context={'source_file': self.file_path}
        )


class FieldMapFormatError(FieldMapError):
    """Raised when a field-map file is shorter than its header declares."""
    def __init__(self, file_path: Path, section: str, expected_bytes: int, read_bytes: int):
        self.file_path = file_path
        self.section = section
        self.expected_bytes = expected_bytes
        self.read_bytes = read_bytes
        super().__init__(
            f"Truncated field map '{file_path}': {section} needs {expected_bytes} bytes, got {read_bytes}."
        )

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Truncated Field-Map File",
            details=(
                f"The {self.section} section needs {self.expected_bytes} bytes "
                f"but only {self.read_bytes} could be read."
            ),
            suggestion=(
                "The file layout is: header (3 x uint32 voxel counts, 3 x float32 lengths), "
                "then voxel_count float32 field values, then voxel_count boolean mask bytes. "
                "Regenerate the file or check that it was copied completely."
            ),
            context={'source_file': self.file_path}
        )
