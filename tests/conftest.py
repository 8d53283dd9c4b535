"""Shared fixtures for pcdistance tests."""

import pytest

from pcdistance.logging import DistanceLogger, LogLevel, get_logger, set_logger


@pytest.fixture(autouse=True)
def quiet_logger():
    """Give every test a fresh quiet global logger."""
    previous = get_logger()
    logger = DistanceLogger(level=LogLevel.QUIET, color=False)
    set_logger(logger)
    yield logger
    set_logger(previous)
