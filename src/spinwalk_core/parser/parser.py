# src/spinwalk_core/parser/parser.py
import configparser
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import cerberus

from ..constants import (
    DEFAULT_SAMPLE_LENGTH_SCALES,
    DEFAULT_T1,
    DEFAULT_T2,
    MAX_DEPHASE,
    MAX_GRADIENT,
    MAX_RF,
    MAX_T12,
)
from ..parameters.preparer import prepare
from ..parameters.records import (
    DephasingEvent,
    GradientEvent,
    RFPulse,
    SimulationParameters,
    Tissue,
    check_capacity,
)
from ..units import degrees_to_radians
from .exceptions import (
    ConfigNotFoundError,
    ConfigTypeError,
    ConfigUnreadableError,
    MissingInputFileError,
)
from .raw_data import FileCategory, FileManifest, ParsedConfiguration

logger = logging.getLogger(__name__)

# Suffix under which the values of an indexed key family (KEY[0], KEY[1], ...) are
# folded into a single list before coercion.
LIST_SUFFIX = "[]"

# Never matches a real section name, so [DEFAULT] is read as an ordinary section.
_NO_DEFAULT_SECTION = "\x00no-default-section"

# Indexed key families recognised in each section.
INDEXED_KEYS = {
    "FILES": ("FIELD_MAP",),
    "SCAN_PARAMETERS": (
        "RF_FA", "RF_PH", "RF_T",
        "DEPHASING", "DEPHASING_T",
        "GRADIENT_X", "GRADIENT_Y", "GRADIENT_Z", "GRADIENT_T",
    ),
    "SIMULATION_PARAMETERS": ("SAMPLE_LENGTH_SCALES",),
    "TISSUE_PARAMETERS": ("T1", "T2"),
}


# Cerberus coercion rules for configuration values, which are always strings.
FLOAT_RULE = {"coerce": "to_float"}
INT_RULE = {"coerce": "to_int"}
COUNT_RULE = {"coerce": "to_count"}  # NUMBER_OF_SPINS accepts "1e5"
FLAG_RULE = {"coerce": "to_flag"}
FLOAT_LIST_RULE = {"type": "list", "schema": FLOAT_RULE}


def collect_indexed(section: Mapping[str, str], prefix: str) -> List[str]:
    """
    Returns the values of `prefix[0]`, `prefix[1]`, ... in index order.

    Collection stops at the first missing index: with keys at 0 and 2 but not 1
    only the value at 0 is returned, and without index 0 the result is empty.
    """
    values = []
    index = 0
    while (key := f"{prefix}[{index}]") in section:
        values.append(section[key])
        index += 1
    return values


def is_enabled(value: str) -> bool:
    """Configuration flag convention: "0" is off, any other value is on."""
    return value != "0"


class CoercingValidator(cerberus.Validator):
    """Cerberus validator with the coercers used for configuration values."""

    def _normalize_coerce_to_float(self, value):
        return float(value)

    def _normalize_coerce_to_int(self, value):
        return int(value)

    def _normalize_coerce_to_count(self, value):
        count = int(float(value))
        if count < 0:
            raise ValueError(f"a count cannot be negative: {value!r}")
        return count

    def _normalize_coerce_to_flag(self, value):
        return is_enabled(value)


def _flatten_errors(errors: Dict[Any, list], path: Tuple = ()) -> Iterator[Tuple[Tuple, str]]:
    """Walks Cerberus' nested error tree, yielding (field path, message) pairs."""
    for field_name, messages in errors.items():
        for message in messages:
            if isinstance(message, dict):
                yield from _flatten_errors(message, path + (field_name,))
            else:
                yield path + (field_name,), message


def _display_key(path: Tuple) -> str:
    """Turns ('SIMULATION_PARAMETERS', 'SAMPLE_LENGTH_SCALES[]', 1) into 'SIMULATION_PARAMETERS.SAMPLE_LENGTH_SCALES[1]'."""
    parts: List[str] = []
    for part in path:
        if isinstance(part, int) and parts and parts[-1].endswith(LIST_SUFFIX):
            parts[-1] = f"{parts[-1][:-len(LIST_SUFFIX)]}[{part}]"
        else:
            parts.append(str(part))
    return ".".join(parts)


def _zip_padded(name: str, capacity: int, columns: Sequence[list], fills: Sequence[Any]) -> List[tuple]:
    """
    Zips the columns of an indexed key group into rows. The row count is the
    length of the longest column; shorter columns are padded with their fill value.
    """
    count = max((len(column) for column in columns), default=0)
    check_capacity(name, range(count), capacity)
    return [
        tuple(column[i] if i < len(column) else fill for column, fill in zip(columns, fills))
        for i in range(count)
    ]


class SimulationConfigParser:
    """
    Reads a section/key configuration file into a prepared simulation parameter
    record, the list of sample-length scales, and the manifest of input/output files.
    """
    _schema = {
        "SCAN_PARAMETERS": {"type": "dict", "allow_unknown": True, "schema": {
            "TR": FLOAT_RULE,
            "DWELL_TIME": FLOAT_RULE,
            "DUMMY_SCAN": INT_RULE,
            "FA": FLOAT_RULE,
            "PHASE_CYCLING": FLOAT_RULE,
            **{f"{prefix}{LIST_SUFFIX}": FLOAT_LIST_RULE for prefix in INDEXED_KEYS["SCAN_PARAMETERS"]},
        }},
        "SIMULATION_PARAMETERS": {"type": "dict", "allow_unknown": True, "schema": {
            "B0": FLOAT_RULE,
            "SEED": INT_RULE,
            "NUMBER_OF_SPINS": COUNT_RULE,
            "DIFFUSION_CONSTANT": FLOAT_RULE,
            "ENABLE_180_REFOCUSING": FLAG_RULE,
            "CROSS_BOUNDARY": FLAG_RULE,
            "MULTI_TISSUE": FLAG_RULE,
            f"SAMPLE_LENGTH_SCALES{LIST_SUFFIX}": FLOAT_LIST_RULE,
        }},
        "TISSUE_PARAMETERS": {"type": "dict", "allow_unknown": True, "schema": {
            "T1": FLOAT_RULE,
            "T2": FLOAT_RULE,
            f"T1{LIST_SUFFIX}": FLOAT_LIST_RULE,
            f"T2{LIST_SUFFIX}": FLOAT_LIST_RULE,
        }},
        "DEBUG": {"type": "dict", "allow_unknown": True, "schema": {
            "DUMP_INFO": FLAG_RULE,
            "SIMULATE_STEADYSTATE": FLAG_RULE,
        }},
    }

    def __init__(self):
        self._validator = CoercingValidator(self._schema)
        self._validator.allow_unknown = True
        logger.debug("SimulationConfigParser initialized.")

    def parse(
        self,
        source: Union[str, Path],
        files: Optional[FileManifest] = None,
        parameters: Optional[SimulationParameters] = None,
        sample_length_scales: Optional[Sequence[float]] = None,
    ) -> ParsedConfiguration:
        """
        Parses `source` and returns the prepared configuration.

        `files`, `parameters` and `sample_length_scales` supply defaults for
        anything the file does not mention. They are copied, never modified.
        """
        config_path = Path(source)
        if not config_path.is_file():
            logger.error(f"File does not exist: {config_path}")
            raise ConfigNotFoundError(config_path)
        config_path = config_path.resolve()
        logger.info(f"Reading configuration file: {config_path}")

        sections = self._read_sections(config_path)
        params = parameters.copy() if parameters is not None else SimulationParameters()
        manifest = files.copy() if files is not None else FileManifest()
        scales = list(sample_length_scales if sample_length_scales is not None else DEFAULT_SAMPLE_LENGTH_SCALES)

        if "FILES" in sections:
            self._read_files(sections["FILES"], manifest, config_path)
        params.n_fieldmaps = len(manifest.fieldmaps)

        document = self._coerce(self._fold_indexed_keys(sections), config_path)
        self._apply_scan_parameters(document.get("SCAN_PARAMETERS", {}), params)
        self._apply_simulation_parameters(document.get("SIMULATION_PARAMETERS", {}), params, scales)
        self._apply_tissue_parameters(document.get("TISSUE_PARAMETERS", {}), params)
        self._apply_debug(document.get("DEBUG", {}), params)

        # The echo time is not configurable; it always sits in the middle of the TR.
        params.echo_times = [params.tr / 2.0]
        params.n_sample_length_scales = len(scales)

        prepared = prepare(params)
        logger.info(
            f"Configuration loaded: {params.n_fieldmaps} fieldmap(s), {len(scales)} sample length scale(s), "
            f"{prepared.derived.n_timepoints} timepoints."
        )
        return ParsedConfiguration(
            parameters=prepared,
            sample_length_scales=scales,
            files=manifest,
            source_path=config_path,
        )

    def _read_sections(self, config_path: Path) -> Dict[str, Dict[str, str]]:
        """
        Loads the INI file into a plain section -> key -> string mapping.

        Section and key names match case-insensitively and are upper-cased.
        No section acts as a source of defaults for the others.
        """
        reader = configparser.ConfigParser(
            interpolation=None,
            inline_comment_prefixes=("#", ";"),
            default_section=_NO_DEFAULT_SECTION,
        )
        reader.optionxform = str.upper
        try:
            with config_path.open("r", encoding="utf-8") as f:
                reader.read_file(f, source=str(config_path))
        except configparser.Error as e:
            raise ConfigUnreadableError(config_path, f"Invalid configuration syntax: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigUnreadableError(config_path, f"The file is not valid UTF-8 text: {e}") from e
        except OSError as e:
            raise ConfigUnreadableError(config_path, f"The file could not be read: {e}") from e
        sections: Dict[str, Dict[str, str]] = {}
        for name in reader.sections():
            sections.setdefault(name.upper(), {}).update(reader.items(name, raw=True))
        return sections

    @staticmethod
    def _resolve_path(value: str, config_path: Path) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else config_path.parent / path

    def _read_files(self, section: Mapping[str, str], manifest: FileManifest, config_path: Path) -> None:
        fieldmaps = collect_indexed(section, "FIELD_MAP")
        if fieldmaps:
            paths = [self._resolve_path(value, config_path) for value in fieldmaps]
            for index, path in enumerate(paths):
                if not path.exists():
                    logger.error(f"File does not exist: {path}")
                    raise MissingInputFileError(config_path, f"FIELD_MAP[{index}]", path)
            manifest.set(FileCategory.FIELD_MAP, paths)

        # Missing m0/xyz0 inputs are dropped from the manifest, not fatal.
        for key, category in (("M0", FileCategory.M0), ("XYZ0", FileCategory.XYZ0)):
            if key in section:
                path = self._resolve_path(section[key], config_path)
                if path.exists():
                    manifest.set(category, [path])
                else:
                    logger.warning(f"File does not exist: {path}")
                    manifest.set(category, [])

        if "OUTPUTS" in section:
            manifest.set(FileCategory.OUTPUT, [self._resolve_path(section["OUTPUTS"], config_path)])

    @staticmethod
    def _fold_indexed_keys(sections: Dict[str, Dict[str, str]]) -> Dict[str, Dict[str, Any]]:
        """Adds a `KEY[]` list entry for every indexed key family that starts at index 0."""
        folded: Dict[str, Dict[str, Any]] = {}
        for name, section in sections.items():
            folded[name] = dict(section)
            for prefix in INDEXED_KEYS.get(name, ()):
                values = collect_indexed(section, prefix)
                if values:
                    folded[name][f"{prefix}{LIST_SUFFIX}"] = values
        return folded

    def _coerce(self, document: Dict[str, Dict[str, Any]], config_path: Path) -> Dict[str, Dict[str, Any]]:
        if not self._validator.validate(document):
            errors = [(_display_key(path), message) for path, message in _flatten_errors(self._validator.errors)]
            raise ConfigTypeError(config_path, errors)
        return self._validator.document

    def _apply_scan_parameters(self, scan: Mapping[str, Any], params: SimulationParameters) -> None:
        if "TR" in scan:
            params.tr = scan["TR"]
        if "DWELL_TIME" in scan:
            params.dt = scan["DWELL_TIME"]
        if "DUMMY_SCAN" in scan:
            params.n_dummy_scan = scan["DUMMY_SCAN"]
        if "PHASE_CYCLING" in scan:
            params.phase_cycling = degrees_to_radians(scan["PHASE_CYCLING"])

        rf_columns = [scan.get(f"{prefix}{LIST_SUFFIX}", []) for prefix in ("RF_FA", "RF_PH", "RF_T")]
        if any(rf_columns):
            if "FA" in scan:
                logger.warning("Both FA and indexed RF_* keys are set; FA is ignored.")
            params.rf_pulses = [
                RFPulse(flip_angle=degrees_to_radians(fa), phase=degrees_to_radians(ph), time=t)
                for fa, ph, t in _zip_padded("rf_pulses", MAX_RF, rf_columns, (0.0, 0.0, 0.0))
            ]
        elif "FA" in scan:
            params.rf_pulses = [RFPulse(flip_angle=degrees_to_radians(scan["FA"]))]

        dephasing_columns = [scan.get(f"{prefix}{LIST_SUFFIX}", []) for prefix in ("DEPHASING", "DEPHASING_T")]
        if any(dephasing_columns):
            params.dephasing = [
                DephasingEvent(angle=degrees_to_radians(angle), time=t)
                for angle, t in _zip_padded("dephasing", MAX_DEPHASE, dephasing_columns, (0.0, 0.0))
            ]

        gradient_columns = [
            scan.get(f"{prefix}{LIST_SUFFIX}", [])
            for prefix in ("GRADIENT_X", "GRADIENT_Y", "GRADIENT_Z", "GRADIENT_T")
        ]
        if any(gradient_columns):
            params.gradients = [
                GradientEvent(x=x, y=y, z=z, time=t)
                for x, y, z, t in _zip_padded("gradients", MAX_GRADIENT, gradient_columns, (0.0,) * 4)
            ]

    def _apply_simulation_parameters(
        self, simulation: Mapping[str, Any], params: SimulationParameters, scales: List[float]
    ) -> None:
        if "B0" in simulation:
            params.b0 = simulation["B0"]
        if "SEED" in simulation:
            params.seed = simulation["SEED"]
        if "NUMBER_OF_SPINS" in simulation:
            params.n_spins = simulation["NUMBER_OF_SPINS"]
        if "DIFFUSION_CONSTANT" in simulation:
            params.diffusion_const = simulation["DIFFUSION_CONSTANT"]
        if "ENABLE_180_REFOCUSING" in simulation:
            params.refocusing_180 = simulation["ENABLE_180_REFOCUSING"]
        if "CROSS_BOUNDARY" in simulation:
            params.cross_boundary = simulation["CROSS_BOUNDARY"]
        if "MULTI_TISSUE" in simulation:
            params.multi_tissue = simulation["MULTI_TISSUE"]
        if f"SAMPLE_LENGTH_SCALES{LIST_SUFFIX}" in simulation:
            scales[:] = simulation[f"SAMPLE_LENGTH_SCALES{LIST_SUFFIX}"]

    def _apply_tissue_parameters(self, tissue: Mapping[str, Any], params: SimulationParameters) -> None:
        columns = [tissue.get(f"T1{LIST_SUFFIX}", []), tissue.get(f"T2{LIST_SUFFIX}", [])]
        if any(columns):
            params.tissues = [
                Tissue(t1=t1, t2=t2)
                for t1, t2 in _zip_padded("tissues", MAX_T12, columns, (DEFAULT_T1, DEFAULT_T2))
            ]
            return

        if "T1" in tissue or "T2" in tissue:
            first = params.tissues[0] if params.tissues else Tissue()
            params.tissues[:1] = [Tissue(t1=tissue.get("T1", first.t1), t2=tissue.get("T2", first.t2))]

    def _apply_debug(self, debug: Mapping[str, Any], params: SimulationParameters) -> None:
        if "DUMP_INFO" in debug:
            params.debug = debug["DUMP_INFO"]
        if "SIMULATE_STEADYSTATE" in debug:
            params.steady_state = debug["SIMULATE_STEADYSTATE"]
