"""
Unit test configuration for aerogrid.

Every unit test runs with AEROGRID_STATE_DIR and the config file pointed
at a temporary directory, so nothing touches the user's ~/.aerogrid.
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def isolated_state_dir(tmp_path, monkeypatch):
    """Isolate the state directory and config file for every test."""
    state_dir = tmp_path / "state"
    monkeypatch.setenv("AEROGRID_STATE_DIR", str(state_dir))

    import aerogrid.config
    monkeypatch.setattr(aerogrid.config, "CONFIG_PATH", tmp_path / "config.yaml")
    yield state_dir


@pytest.fixture(autouse=True)
def reset_aerogrid_logger():
    """Undo any handlers a test installed on the aerogrid logger."""
    yield
    logger = logging.getLogger("aerogrid")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
