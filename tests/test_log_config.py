# tests/test_log_config.py

import logging

from spinwalk_core.log_config import LOG_LEVEL_ENV_VAR, setup_logging


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "debug")
    try:
        setup_logging()
        assert logging.getLogger().level == logging.DEBUG
    finally:
        monkeypatch.delenv(LOG_LEVEL_ENV_VAR)
        setup_logging()
    assert logging.getLogger().level == logging.INFO


def test_single_handler_after_repeated_setup():
    setup_logging()
    setup_logging()
    handlers = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
    assert len(handlers) == 1
