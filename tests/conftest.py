"""Shared fixtures."""

import logging

import pytest

from brushflow.utils import logging_config


@pytest.fixture
def restore_logging():
    """Undo root-logger changes made by setup_logging()."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)
    logging_config.pop_context()
    logging.captureWarnings(False)
