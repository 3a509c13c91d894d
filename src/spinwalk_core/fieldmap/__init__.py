# src/spinwalk_core/fieldmap/__init__.py
from .exceptions import FieldMapError, FileOpenError, FieldMapFormatError
from .loader import (
    FieldMapBuffers,
    FieldMapHeader,
    HEADER_DTYPE,
    load_fieldmap,
    write_fieldmap,
)

__all__ = [
    # Exceptions
    "FieldMapError",
    "FileOpenError",
    "FieldMapFormatError",
    # Binary format
    "FieldMapBuffers",
    "FieldMapHeader",
    "HEADER_DTYPE",
    "load_fieldmap",
    "write_fieldmap",
]
