# --- src/spinwalk_core/constants.py ---
import logging

logger = logging.getLogger(__name__)

# --- Capacities of the kernel's fixed-size parameter arrays ---

MAX_RF: int = 256        # RF pulses
MAX_TE: int = 256        # echo times
MAX_T12: int = 256       # tissues (T1/T2 pairs)
MAX_DEPHASE: int = 256   # dephasing events
MAX_GRADIENT: int = 256  # gradient events

# --- Defaults applied to keys absent from a configuration file ---

DEFAULT_TR: float = 0.04    # s
DEFAULT_DT: float = 5e-5    # s
DEFAULT_B0: float = 9.4     # T
DEFAULT_T1: float = 2.2     # s
DEFAULT_T2: float = 0.04    # s
DEFAULT_SAMPLE_LENGTH_SCALES = (1.0,)

# Sizes of the on-disk and in-kernel element types, in bytes.
SIZEOF_FLOAT: int = 4
SIZEOF_BOOL: int = 1

logger.debug("Defined core constants: capacities %d/%d/%d/%d/%d", MAX_RF, MAX_TE, MAX_T12, MAX_DEPHASE, MAX_GRADIENT)
