# tests/test_fieldmap/test_loader.py

import logging

import numpy as np
import pytest

from spinwalk_core.fieldmap import (
    HEADER_DTYPE,
    FieldMapBuffers,
    FieldMapFormatError,
    FileOpenError,
    load_fieldmap,
    write_fieldmap,
)
from spinwalk_core.parameters import SimulationParameters, prepare


class TestLoadFieldmap:
    """Tests reading binary field maps into caller-owned buffers."""

    def test_header_is_24_unpadded_bytes(self):
        assert HEADER_DTYPE.itemsize == 24

    def test_default_buffers_are_empty(self):
        buffers = FieldMapBuffers()
        assert buffers.size == 0
        assert buffers.field.dtype == np.float32
        assert buffers.mask.dtype == np.bool_
        assert FieldMapBuffers().field is not buffers.field

    def test_round_trip(self, make_fieldmap):
        path, field, mask = make_fieldmap(size=(4, 4, 4), length=(1e-3, 1e-3, 1e-3))
        buffers = FieldMapBuffers()
        params = SimulationParameters()

        header = load_fieldmap(path, buffers, params)

        assert header.fieldmap_size == (4, 4, 4)
        assert header.voxel_count == 64
        assert params.fieldmap_size == (4, 4, 4)
        assert params.sample_length == (1e-3, 1e-3, 1e-3)
        np.testing.assert_array_equal(buffers.field, field)
        np.testing.assert_array_equal(buffers.mask, mask)
        assert buffers.field.dtype == np.float32
        assert buffers.mask.dtype == np.bool_
        assert prepare(params).derived.matrix_length == 64

    def test_same_size_reads_in_place(self, make_fieldmap, caplog):
        first, _, _ = make_fieldmap("first.dat")
        second, _, _ = make_fieldmap("second.dat")
        buffers = FieldMapBuffers()
        load_fieldmap(first, buffers, SimulationParameters())
        field_array, mask_array = buffers.field, buffers.mask

        caplog.clear()
        with caplog.at_level(logging.INFO):
            load_fieldmap(second, buffers, SimulationParameters())

        assert buffers.field is field_array
        assert buffers.mask is mask_array
        assert "Re-allocating" not in caplog.text

    def test_preallocated_buffers_of_matching_size_are_kept(self, make_fieldmap):
        path, field, _ = make_fieldmap(size=(2, 2, 2))
        field_array = np.zeros(8, dtype=np.float32)
        buffers = FieldMapBuffers(field=field_array, mask=np.zeros(8, dtype=bool))

        load_fieldmap(path, buffers, SimulationParameters())

        assert buffers.field is field_array
        np.testing.assert_array_equal(field_array, field)

    def test_different_size_reallocates_exactly(self, make_fieldmap, caplog):
        big, _, _ = make_fieldmap("big.dat", size=(4, 4, 4))
        small, field, mask = make_fieldmap("small.dat", size=(2, 3, 4), length=(2e-4, 3e-4, 4e-4))
        buffers = FieldMapBuffers()
        params = SimulationParameters()
        load_fieldmap(big, buffers, params)

        with caplog.at_level(logging.INFO):
            load_fieldmap(small, buffers, params)

        assert buffers.field.size == 24
        assert buffers.mask.size == 24
        assert params.fieldmap_size == (2, 3, 4)
        assert params.sample_length == (2e-4, 3e-4, 4e-4)
        np.testing.assert_array_equal(buffers.field, field)
        np.testing.assert_array_equal(buffers.mask, mask)
        assert "Re-allocating" in caplog.text
        assert "New size: 24" in caplog.text

    def test_volume_is_stored_x_fastest(self, tmp_path):
        volume = np.arange(24, dtype=np.float32).reshape(2, 3, 4)
        path = tmp_path / "volume.dat"
        write_fieldmap(path, volume, volume > 10, (1e-3, 1e-3, 1e-3))

        buffers = FieldMapBuffers()
        params = SimulationParameters()
        load_fieldmap(path, buffers, params)

        assert params.fieldmap_size == (2, 3, 4)
        assert buffers.field[1] == volume[1, 0, 0]
        assert buffers.field[2] == volume[0, 1, 0]
        assert buffers.field[6] == volume[0, 0, 1]

    def test_trailing_bytes_are_ignored_with_warning(self, make_fieldmap, caplog):
        path, field, _ = make_fieldmap()
        with path.open("ab") as f:
            f.write(b"\x00\x01")
        buffers = FieldMapBuffers()

        with caplog.at_level(logging.WARNING):
            load_fieldmap(path, buffers, SimulationParameters())

        np.testing.assert_array_equal(buffers.field, field)
        assert "trailing bytes" in caplog.text

    # === Negative Testing ===

    def test_missing_file_raises_open_error(self, tmp_path):
        with pytest.raises(FileOpenError) as excinfo:
            load_fieldmap(tmp_path / "nope.dat", FieldMapBuffers(), SimulationParameters())
        assert "Field-Map Open Error" in excinfo.value.get_diagnostic_report()

    @pytest.mark.parametrize("keep_bytes, section", [(10, "header"), (24 + 100, "field"), (24 + 256 + 10, "mask")])
    def test_truncated_file_raises_format_error(self, make_fieldmap, keep_bytes, section):
        path, _, _ = make_fieldmap()
        path.write_bytes(path.read_bytes()[:keep_bytes])

        with pytest.raises(FieldMapFormatError) as excinfo:
            load_fieldmap(path, FieldMapBuffers(), SimulationParameters())

        assert excinfo.value.section == section
        assert "Truncated Field-Map File" in excinfo.value.get_diagnostic_report()

    def test_write_rejects_mismatched_sizes(self, tmp_path):
        with pytest.raises(ValueError):
            write_fieldmap(tmp_path / "bad.dat", np.zeros(8), np.zeros(7, dtype=bool), (1.0, 1.0, 1.0), (2, 2, 2))
