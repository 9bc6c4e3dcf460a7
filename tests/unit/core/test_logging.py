import logging

import structlog

from linguaflip_auth.core.logging import configure_from_settings, configure_logging
from tests.utils.config import make_settings


def _renderer():
    return structlog.get_config()["processors"][-1]


def test_json_renderer_selected():
    configure_logging("INFO", json_logs=True)
    try:
        assert isinstance(_renderer(), structlog.processors.JSONRenderer)
        assert logging.getLogger().level == logging.INFO
    finally:
        configure_logging("DEBUG", json_logs=False)


def test_console_renderer_selected():
    configure_logging("DEBUG", json_logs=False)

    assert isinstance(_renderer(), structlog.dev.ConsoleRenderer)


def test_configure_from_settings_sets_level():
    configure_from_settings(make_settings(LOG_LEVEL="warning", LOG_JSON=False))
    try:
        assert logging.getLogger().level == logging.WARNING
    finally:
        configure_logging("DEBUG", json_logs=False)


def test_unknown_level_falls_back_to_info():
    configure_logging("chatty", json_logs=False)
    try:
        assert logging.getLogger().level == logging.INFO
    finally:
        configure_logging("DEBUG", json_logs=False)
