# src/spinwalk_core/parser/raw_data.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Union

from ..parameters.records import PreparedParameters

# The classes in this module are the contract between SimulationConfigParser and
# its callers: which input and output files a run uses, and the fully prepared
# result of parsing one configuration file.


class FileCategory(str, Enum):
    """The file categories a configuration file can name in its [files] section."""
    FIELD_MAP = "fieldmap"
    M0 = "m0"
    XYZ0 = "xyz0"
    OUTPUT = "output"

    def __str__(self):
        return self.value


def _empty_entries() -> Dict[FileCategory, List[Path]]:
    return {category: [] for category in FileCategory}


@dataclass
class FileManifest:
    """
    Ordered file paths per category.

    A category is cleared and repopulated whenever a configuration file
    mentions it; categories that are not mentioned keep whatever the caller
    put in the manifest beforehand.
    """
    entries: Dict[FileCategory, List[Path]] = field(default_factory=_empty_entries)

    def __post_init__(self):
        given = self.entries
        self.entries = _empty_entries()
        for category, paths in given.items():
            self.set(category, paths)

    def __getitem__(self, category: Union[FileCategory, str]) -> List[Path]:
        return self.entries[FileCategory(category)]

    def set(self, category: Union[FileCategory, str], paths: Iterable[Union[str, Path]]) -> None:
        self.entries[FileCategory(category)] = [Path(p) for p in paths]

    def copy(self) -> FileManifest:
        return FileManifest({category: list(paths) for category, paths in self.entries.items()})

    @property
    def fieldmaps(self) -> List[Path]:
        return self.entries[FileCategory.FIELD_MAP]


@dataclass(frozen=True)
class ParsedConfiguration:
    """Everything a single configuration file yields, with the parameters already prepared."""
    parameters: PreparedParameters
    sample_length_scales: List[float]
    files: FileManifest
    source_path: Path
