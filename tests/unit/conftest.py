"""Fixtures shared by all unit tests."""

import logging

import pytest

from chored.config import set_config


@pytest.fixture(autouse=True)
def reset_chored_state():
    """Drop the global config and any logging set up by the CLI."""
    yield
    set_config(None)
    logger = logging.getLogger("chored")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
