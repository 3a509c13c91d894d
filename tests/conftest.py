# tests/conftest.py
import textwrap
from pathlib import Path

import numpy as np
import pytest

from spinwalk_core.fieldmap import write_fieldmap


@pytest.fixture
def write_config(tmp_path):
    """Returns a helper that writes an INI configuration into tmp_path and returns its path."""
    def _write(text: str, name: str = "config.ini") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(text))
        return path
    return _write


def make_pattern(voxel_count: int):
    """A deterministic field/mask pattern: field values 0, 0.5, 1.0, ...; every third voxel masked."""
    field = np.arange(voxel_count, dtype=np.float32) * 0.5
    mask = np.arange(voxel_count) % 3 == 0
    return field, mask


@pytest.fixture
def make_fieldmap(tmp_path):
    """Returns a helper that writes a synthetic field map and returns (path, field, mask)."""
    def _make(name: str = "fieldmap.dat", size=(4, 4, 4), length=(1e-3, 1e-3, 1e-3)):
        field, mask = make_pattern(int(np.prod(size)))
        path = tmp_path / name
        write_fieldmap(path, field, mask, length, fieldmap_size=size)
        return path, field, mask
    return _make
