"""
Pytest configuration for aerogrid tests

This module provides shared fixtures and configuration for all tests.
"""

import pytest

from tests.fixtures import FakeClock, FakeRunner, aerospace_runner


@pytest.fixture
def clock():
    """A hand-driven monotonic clock."""
    return FakeClock()


@pytest.fixture
def runner():
    """Runner answering aerospace with workspace A and two windows."""
    return aerospace_runner()


@pytest.fixture
def failing_runner():
    """Runner for which every aerospace command fails."""
    return FakeRunner()
