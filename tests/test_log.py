import logging

from vtscan_agent.log import get_logger


def test_unknown_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("VTSCAN_LOG_LEVEL", "LOUD")
    logger = get_logger("vtscan_agent.tests.unknown_level")
    assert logger.level == logging.INFO


def test_blank_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("VTSCAN_LOG_LEVEL", "  ")
    logger = get_logger("vtscan_agent.tests.blank_level")
    assert logger.level == logging.INFO


def test_level_is_case_insensitive(monkeypatch):
    monkeypatch.setenv("VTSCAN_LOG_LEVEL", "debug")
    logger = get_logger("vtscan_agent.tests.debug_level")
    assert logger.level == logging.DEBUG


def test_handler_attached_once():
    first = get_logger("vtscan_agent.tests.once")
    second = get_logger("vtscan_agent.tests.once")
    assert first is second
    assert len(second.handlers) == 1
