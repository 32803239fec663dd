"""Shared pytest fixtures."""

from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_linerelay_logger():
    """Undo configure_logging() so caplog sees linerelay records."""
    yield
    logger = logging.getLogger("linerelay")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
