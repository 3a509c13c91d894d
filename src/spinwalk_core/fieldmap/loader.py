# src/spinwalk_core/fieldmap/loader.py
import logging
from dataclasses import dataclass, field as dataclass_field
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

import numpy as np

from ..parameters.preparer import matrix_length_of
from ..parameters.records import SimulationParameters
from ..units import metres_to_micrometres
from .exceptions import FieldMapFormatError, FileOpenError

logger = logging.getLogger(__name__)

# Header: voxel counts (3 x uint32) followed by physical lengths in metres (3 x float32), unpadded.
HEADER_DTYPE = np.dtype([("fieldmap_size", "<u4", (3,)), ("sample_length", "<f4", (3,))])
FIELD_DTYPE = np.dtype("<f4")
MASK_DTYPE = np.dtype(np.bool_)


def _flat(values, dtype) -> np.ndarray:
    """Contiguous 1-D array of `dtype`; a matching array is kept as the same object."""
    arr = np.ascontiguousarray(values, dtype=dtype)
    return arr if arr.ndim == 1 else arr.reshape(-1)


@dataclass(frozen=True)
class FieldMapHeader:
    fieldmap_size: Tuple[int, int, int]
    sample_length: Tuple[float, float, float]

    @property
    def voxel_count(self) -> int:
        return matrix_length_of(self.fieldmap_size)


@dataclass
class FieldMapBuffers:
    """
    Caller-owned destination arrays for field-map data.

    The loader reads into these arrays in place and replaces them only when a
    file's voxel count differs from their current size.
    """
    field: np.ndarray = dataclass_field(default_factory=lambda: np.empty(0, dtype=FIELD_DTYPE))
    mask: np.ndarray = dataclass_field(default_factory=lambda: np.empty(0, dtype=MASK_DTYPE))

    def __post_init__(self):
        self.field = _flat(self.field, FIELD_DTYPE)
        self.mask = _flat(self.mask, MASK_DTYPE)

    @property
    def size(self) -> int:
        return self.field.size


def _read_exact(stream: BinaryIO, destination: np.ndarray, section: str, path: Path) -> None:
    expected = destination.nbytes
    read = stream.readinto(destination.view(np.uint8))
    if read != expected:
        raise FieldMapFormatError(path, section, expected, read or 0)


def _read_header(stream: BinaryIO, path: Path) -> FieldMapHeader:
    raw = np.zeros(1, dtype=HEADER_DTYPE)
    _read_exact(stream, raw, "header", path)
    return FieldMapHeader(
        fieldmap_size=tuple(int(n) for n in raw["fieldmap_size"][0]),
        # Widened through the shortest float32 repr, so 1e-3 written as float32 reads back as 1e-3.
        sample_length=tuple(float(str(length)) for length in raw["sample_length"][0]),
    )


def load_fieldmap(
    path: Union[str, Path],
    buffers: FieldMapBuffers,
    parameters: SimulationParameters,
) -> FieldMapHeader:
    """
    Reads one binary field map into `buffers` and copies its grid geometry into
    `parameters`.

    The field plane and the mask plane follow the header directly, in that
    order. `buffers` is reallocated only when its size differs from the voxel
    count declared by the header; same-shaped maps are read in place.
    """
    path = Path(path)
    logger.info(f"Loading fieldmap: {path}")
    try:
        stream = path.open("rb")
    except OSError as e:
        raise FileOpenError(path, f"Error opening file {path}: {e}") from e

    with stream:
        header = _read_header(stream, path)
        parameters.fieldmap_size = header.fieldmap_size
        parameters.sample_length = header.sample_length
        voxel_count = header.voxel_count

        if buffers.field.size != voxel_count or buffers.mask.size != voxel_count:
            length_um = " ".join(f"{metres_to_micrometres(length):g}" for length in header.sample_length)
            logger.info("Fieldmap size changed. Re-allocating memory...")
            logger.info(f"Old size: {buffers.field.size}")
            logger.info(f"New size: {voxel_count}")
            logger.info(f"New length (um): {length_um}")
            buffers.field = np.empty(voxel_count, dtype=FIELD_DTYPE)
            buffers.mask = np.empty(voxel_count, dtype=MASK_DTYPE)

        _read_exact(stream, buffers.field, "field", path)
        _read_exact(stream, buffers.mask, "mask", path)
        if stream.read(1):
            logger.warning(f"Fieldmap '{path}' has trailing bytes after the mask; they were ignored.")

    logger.debug(f"Loaded {voxel_count} voxels of size {header.fieldmap_size} from {path}")
    return header


def write_fieldmap(
    path: Union[str, Path],
    field_values,
    mask,
    sample_length: Tuple[float, float, float],
    fieldmap_size: Optional[Tuple[int, int, int]] = None,
) -> FieldMapHeader:
    """
    Writes a field map in the binary layout read by `load_fieldmap`.

    3-D arrays are flattened with x varying fastest and give the grid size
    themselves; flat arrays need an explicit `fieldmap_size`.
    """
    field_arr = np.asarray(field_values)
    mask_arr = np.asarray(mask)
    if fieldmap_size is None:
        if field_arr.ndim != 3:
            raise ValueError("fieldmap_size is required when the field is not a 3-D array.")
        fieldmap_size = field_arr.shape
    header = FieldMapHeader(
        fieldmap_size=tuple(int(n) for n in fieldmap_size),
        sample_length=tuple(float(length) for length in sample_length),
    )
    flat_field = field_arr.astype(FIELD_DTYPE).reshape(-1, order="F")
    flat_mask = mask_arr.astype(MASK_DTYPE).reshape(-1, order="F")
    if flat_field.size != header.voxel_count or flat_mask.size != header.voxel_count:
        raise ValueError(
            f"Field ({flat_field.size}) and mask ({flat_mask.size}) must both hold "
            f"{header.voxel_count} voxels for grid {header.fieldmap_size}."
        )

    raw_header = np.zeros((), dtype=HEADER_DTYPE)
    raw_header["fieldmap_size"] = header.fieldmap_size
    raw_header["sample_length"] = header.sample_length
    with Path(path).open("wb") as stream:
        stream.write(raw_header.tobytes())
        stream.write(flat_field.tobytes())
        stream.write(flat_mask.tobytes())
    return header
