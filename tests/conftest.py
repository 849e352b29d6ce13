"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path so tests run without an install
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def no_wait():
    """wait() that never sleeps and never cancels."""
    def _wait(seconds, cancel=None):
        return False
    return _wait
