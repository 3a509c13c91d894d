# --- src/spinwalk_core/log_config.py ---
import logging
import os
import sys

LOG_LEVEL_ENV_VAR = "SPINWALK_LOG_LEVEL"


def setup_logging(level=None):
    """ Configures basic logging to stdout. SPINWALK_LOG_LEVEL overrides the default level. """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper()
    log_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)-5.5s] [%(name)s] %(message)s"
    )
    root_logger = logging.getLogger()

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)
    logging.debug("Logging configured at level %s.", logging.getLevelName(root_logger.level))
